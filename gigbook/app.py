"""
Gigbook API

FastAPI application wiring: settings, logging, the backend selector and the
entity routers.
"""
from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from gigbook.core.config import Settings, get_settings
from gigbook.core.log_setup import configure_logging
from gigbook.db.session import get_engine
from gigbook.repositories import BackendSelector, MemoryStore, Repository, SQLRepository
from gigbook.repositories.selector import (
    database_probe,
    is_secure_endpoint,
    warn_on_plaintext_endpoint,
    watch_engine,
)
from gigbook.routers import health as health_router
from gigbook.routers import records as records_router
from gigbook.routers import stageplots as stageplots_router

logger = logging.getLogger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Inject baseline security headers (anti clickjacking, sniffing, referrer policy)."""

    def __init__(self, app, *, enforce_hsts: bool) -> None:
        super().__init__(app)
        self._enforce_hsts = enforce_hsts

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        response.headers.setdefault("Cross-Origin-Resource-Policy", "same-origin")
        if self._enforce_hsts:
            response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        return response


class AccessLogMiddleware(BaseHTTPMiddleware):
    """One log line per request: method, path, status, elapsed milliseconds."""

    async def dispatch(self, request, call_next):
        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            elapsed = (time.perf_counter() - started) * 1000
            logger.info("%s %s %s %.1fms", request.method, request.url.path, status_code, elapsed)


def build_selector(settings: Settings) -> BackendSelector:
    """Durable store over the configured engine, volatile store as fallback."""
    if not settings.database_url:
        def _unconfigured() -> None:
            raise RuntimeError("DATABASE_URL is not configured")

        return BackendSelector(
            SQLRepository(),
            MemoryStore(),
            probe=_unconfigured,
            default_owner=settings.default_owner,
            connect_timeout=settings.db_connect_timeout,
        )
    warn_on_plaintext_endpoint(settings.database_url)
    engine = get_engine()
    selector = BackendSelector(
        SQLRepository(),
        MemoryStore(),
        probe=database_probe(engine),
        default_owner=settings.default_owner,
        secure_endpoint=is_secure_endpoint(settings.database_url),
        connect_timeout=settings.db_connect_timeout,
        on_close=engine.dispose,
    )
    watch_engine(selector, engine)
    return selector


async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse({"error": {"message": "Internal Server Error"}}, status_code=500)


def create_app(settings: Optional[Settings] = None, selector: Optional[BackendSelector] = None) -> FastAPI:
    """Factory compatible with uvicorn/gunicorn (``uvicorn gigbook.app:create_app --factory``)."""
    settings = settings or get_settings()
    configure_logging(settings)
    selector = selector or build_selector(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Starting Gigbook API (env=%s)", settings.app_env)
        selector.start()
        yield
        logger.info("Shutting down...")
        selector.close()

    app = FastAPI(title="Gigbook API", lifespan=lifespan)
    app.state.settings = settings
    app.state.owner_id = settings.default_owner
    app.state.selector = selector
    app.state.repository = Repository(selector)

    if settings.allowed_origin:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[settings.allowed_origin],
            allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            allow_headers=["*"],
        )
    app.add_middleware(SecurityHeadersMiddleware, enforce_hsts=settings.app_env == "prod")
    app.add_middleware(AccessLogMiddleware)
    app.add_exception_handler(Exception, _unhandled_error)

    app.include_router(health_router.router)
    app.include_router(records_router.songs_router)
    app.include_router(records_router.venues_router)
    app.include_router(records_router.setlists_router)
    app.include_router(records_router.shows_router)
    app.include_router(stageplots_router.router)
    return app
