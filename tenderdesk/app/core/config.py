"""Application configuration and settings management."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Central application settings loaded from environment variables."""

    app_name: str = Field(default="TenderDesk")
    api_v1_prefix: str = Field(default="/api")
    log_level: str = Field(default="INFO")

    database_url: str = Field(
        default_factory=lambda: f"sqlite:///{Path.cwd() / 'tenderdesk.db'}"
    )
    database_echo: bool = Field(default=False)

    jwt_secret_key: str = Field(default="change-me", alias="TD_JWT_SECRET")
    jwt_algorithm: str = Field(default="HS256")
    jwt_access_token_expires_minutes: int = Field(default=60 * 12)
    password_reset_ttl_minutes: int = Field(default=15)

    cors_origins: List[str] = Field(default_factory=list)
    allow_open_registration: bool = Field(default=True)

    # File store: "local" keeps objects under storage_dir and serves them at /files,
    # "s3" talks to any S3-compatible endpoint.
    storage_backend: Literal["local", "s3"] = Field(default="local")
    storage_dir: str = Field(default_factory=lambda: str(Path.cwd() / "storage"))
    storage_bucket: str = Field(default="tender_documents")
    public_base_url: str = Field(default="http://localhost:8000")
    s3_endpoint_url: Optional[str] = Field(default=None)
    s3_region: Optional[str] = Field(default=None)
    s3_access_key_id: Optional[str] = Field(default=None)
    s3_secret_access_key: Optional[str] = Field(default=None)
    s3_url_expires_seconds: int = Field(default=3600)

    dashboard_upcoming_limit: int = Field(default=10)
    dashboard_months: int = Field(default=6)

    model_config = {
        "env_file": ".env",
        "env_prefix": "TD_",
        "case_sensitive": False,
        "extra": "ignore",
        "populate_by_name": True,
    }


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings()  # type: ignore[arg-type]


settings = get_settings()
"""Eagerly instantiated settings for modules that prefer direct import."""
