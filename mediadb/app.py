from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.base import BaseHTTPMiddleware

from mediadb.core.config import Settings, get_settings
from mediadb.core.errors import MediaDBError, RangeNotSatisfiableError
from mediadb.core.logging import configure_logging
from mediadb.repositories.cache import TTLCache
from mediadb.repositories.collection_store import CollectionStore
from mediadb.routers import backup as backup_router
from mediadb.routers import collections as collections_router
from mediadb.routers import media as media_router
from mediadb.routers import settings as settings_router

logger = logging.getLogger("mediadb.app")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Inject baseline security headers (no sniffing, referrer policy)."""

    def __init__(self, app, *, enforce_hsts: bool) -> None:
        super().__init__(app)
        self._enforce_hsts = enforce_hsts

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer-when-downgrade")
        if self._enforce_hsts:
            response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        return response


def _error_response(status_code: int, code: str, message: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse({"error": message, "code": code}, status_code=status_code, headers=headers)


async def mediadb_error_handler(_: Request, exc: MediaDBError) -> JSONResponse:
    headers = None
    if isinstance(exc, RangeNotSatisfiableError):
        headers = {"Content-Range": f"bytes */{exc.size}"}
    if exc.status_code >= 500:
        logger.error("%s: %s", exc.code, exc.message, exc_info=exc)
        return _error_response(exc.status_code, exc.code, "Internal server error")
    return _error_response(exc.status_code, exc.code, exc.message, headers)


async def validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    return _error_response(400, "invalid_input", f"Malformed request: {exc.errors()}")


async def unexpected_error_handler(_: Request, exc: Exception) -> JSONResponse:
    logger.exception("unexpected server error", exc_info=exc)
    return _error_response(500, "internal_error", "Internal server error")


def create_app(settings: Settings | None = None, store: CollectionStore | None = None) -> FastAPI:
    """Factory compatible with uvicorn (``uvicorn mediadb.app:create_app --factory``)."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="MediaDB API")
    app.state.settings = settings
    app.state.store = store or CollectionStore(settings.data_dir, TTLCache(settings.cache_ttl_seconds))

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=sorted(settings.cors_origins),
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
            allow_headers=["*"],
            expose_headers=["Content-Range", "Content-Length", "Accept-Ranges", "Content-Disposition"],
        )
    app.add_middleware(SecurityHeadersMiddleware, enforce_hsts=settings.app_env == "prod")

    app.add_exception_handler(MediaDBError, mediadb_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)

    settings.upload_dir.mkdir(parents=True, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=settings.upload_dir), name="uploads")

    app.include_router(collections_router.router)
    app.include_router(backup_router.router)
    app.include_router(media_router.router)
    app.include_router(settings_router.router)

    @app.get("/health")
    def health() -> dict[str, Any]:
        return {"ok": True}

    logger.info("MediaDB ready (data_dir=%s, env=%s)", settings.data_dir, settings.app_env)
    return app
