"""TenderDesk FastAPI application."""

from __future__ import annotations

import logging
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from tenderdesk.app.auth.router import router as auth_router
from tenderdesk.app.auth.service import (
    AuthenticationError,
    PasswordPolicyError,
    PasswordResetError,
    UserAlreadyExistsError,
)
from tenderdesk.app.common.errors import TenderDeskError
from tenderdesk.app.common.storage import LOCAL_FILES_ROUTE
from tenderdesk.app.core.config import settings
from tenderdesk.app.core.database import init_db
from tenderdesk.app.core.logging import configure_logging
from tenderdesk.app.modules.activity.router import router as activity_router
from tenderdesk.app.modules.clients.router import router as clients_router
from tenderdesk.app.modules.dashboard.router import router as dashboard_router
from tenderdesk.app.modules.documents.router import router as documents_router
from tenderdesk.app.modules.milestones.router import router as milestones_router
from tenderdesk.app.modules.templates.router import router as templates_router
from tenderdesk.app.modules.tenders.router import router as tenders_router

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    configure_logging()
    init_db()
    app = FastAPI(title=settings.app_name, version="0.1.0")

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    api_prefix = settings.api_v1_prefix.rstrip("/")
    app.include_router(auth_router, prefix=api_prefix)
    app.include_router(tenders_router, prefix=api_prefix)
    app.include_router(milestones_router, prefix=api_prefix)
    app.include_router(templates_router, prefix=api_prefix)
    app.include_router(clients_router, prefix=api_prefix)
    app.include_router(documents_router, prefix=api_prefix)
    app.include_router(dashboard_router, prefix=api_prefix)
    app.include_router(activity_router, prefix=api_prefix)

    # Exception Handlers
    @app.exception_handler(TenderDeskError)
    async def tenderdesk_exception_handler(request: Request, exc: TenderDeskError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": str(exc)},
        )

    async def auth_exception_handler(request: Request, exc: Exception):
        return JSONResponse(
            status_code=400,
            content={"detail": str(exc)},
        )

    for auth_error in (AuthenticationError, UserAlreadyExistsError, PasswordPolicyError, PasswordResetError):
        app.add_exception_handler(auth_error, auth_exception_handler)

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        return JSONResponse(
            status_code=422,
            content={"detail": str(exc)},
        )

    if settings.storage_backend == "local":
        files_dir = Path(settings.storage_dir)
        files_dir.mkdir(parents=True, exist_ok=True)
        app.mount(LOCAL_FILES_ROUTE, StaticFiles(directory=str(files_dir)), name="files")

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    logger.info(f"{settings.app_name} ready (storage={settings.storage_backend})")
    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("tenderdesk.app.main:app", host="0.0.0.0", port=8000, reload=False)
