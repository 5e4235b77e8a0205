"""
File store abstraction: a local directory served by the app, or an S3 bucket.
"""

from __future__ import annotations

import logging
import re
import uuid
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Protocol
from urllib.parse import quote, unquote, urlparse

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from tenderdesk.app.common.errors import StorageError
from tenderdesk.app.core.config import settings

logger = logging.getLogger(__name__)

LOCAL_FILES_ROUTE = "/files"


class StorageClient(Protocol):
    """Defines the operations the API needs from object storage."""

    def upload(self, key: str, data: bytes, content_type: str) -> None:
        ...

    def public_url(self, key: str) -> str:
        ...

    def delete(self, key: str) -> None:
        ...


def build_object_key(file_name: str) -> str:
    """Unique object key: ``<uuid4>-<file name reduced to [A-Za-z0-9.-_]>``."""

    sanitized = re.sub(r"[^a-zA-Z0-9.-]", "_", file_name or "file")
    sanitized = re.sub(r"_{2,}", "_", sanitized)
    return f"{uuid.uuid4()}-{sanitized}"


def key_from_url(url: str) -> str:
    """Recover the object key from a stored public URL (its last path segment)."""

    path = urlparse(url or "").path
    return unquote(path.rstrip("/").split("/")[-1])


@dataclass
class LocalStorageClient:
    """Keeps objects in ``<root>/<bucket>/`` and serves them under ``/files``."""

    root: str
    bucket: str
    base_url: str

    def __post_init__(self):
        self._dir = Path(self.root) / self.bucket
        self._dir.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        path = (self._dir / key).resolve()
        if self._dir.resolve() not in path.parents:
            raise StorageError(f"Invalid object key: {key}")
        return path

    def upload(self, key: str, data: bytes, content_type: str) -> None:
        try:
            self._path(key).write_bytes(data)
        except OSError as exc:
            raise StorageError(f"Could not store {key}") from exc

    def public_url(self, key: str) -> str:
        if not self._path(key).is_file():
            raise StorageError(f"Object not found: {key}")
        return f"{self.base_url.rstrip('/')}{LOCAL_FILES_ROUTE}/{self.bucket}/{quote(key)}"

    def delete(self, key: str) -> None:
        try:
            self._path(key).unlink()
        except FileNotFoundError as exc:
            raise StorageError(f"Object not found: {key}") from exc
        except OSError as exc:
            raise StorageError(f"Could not delete {key}") from exc


@dataclass
class S3StorageClient:
    """
    S3-compatible storage client; public URLs are freshly presigned GET links.
    """

    bucket: str
    region: str | None
    endpoint: str | None
    access_key_id: str | None
    secret_access_key: str | None
    expires_in: int = 3600

    def __post_init__(self):
        self._client = boto3.client(
            "s3",
            endpoint_url=self.endpoint,
            region_name=self.region,
            aws_access_key_id=self.access_key_id,
            aws_secret_access_key=self.secret_access_key,
        )

    def upload(self, key: str, data: bytes, content_type: str) -> None:
        try:
            self._client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type or "application/octet-stream",
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Could not store {key}") from exc

    def public_url(self, key: str) -> str:
        try:
            self._client.head_object(Bucket=self.bucket, Key=key)
            return self._client.generate_presigned_url(
                ClientMethod="get_object",
                Params={"Bucket": self.bucket, "Key": key, "ResponseContentDisposition": "inline"},
                ExpiresIn=self.expires_in,
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Object not found: {key}") from exc

    def delete(self, key: str) -> None:
        try:
            self._client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Could not delete {key}") from exc


@lru_cache()
def get_storage_client() -> StorageClient:
    """Build the configured storage client once per process."""

    if settings.storage_backend == "s3":
        logger.info(f"Using S3 storage bucket {settings.storage_bucket}")
        return S3StorageClient(
            bucket=settings.storage_bucket,
            region=settings.s3_region,
            endpoint=settings.s3_endpoint_url,
            access_key_id=settings.s3_access_key_id,
            secret_access_key=settings.s3_secret_access_key,
            expires_in=settings.s3_url_expires_seconds,
        )
    return LocalStorageClient(
        root=settings.storage_dir,
        bucket=settings.storage_bucket,
        base_url=settings.public_base_url,
    )
