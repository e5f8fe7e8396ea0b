"""
Afri Soutien API — application entry point.

This is the **only** file that assembles the app.  All business logic
lives in the `api/`, `services/`, `models/` and `core/` packages.
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from afrisoutien.api.api import api_router
from afrisoutien.core.config import settings
from afrisoutien.core.exceptions import register_exception_handlers
from afrisoutien.core.limiter import limiter
from afrisoutien.core.security import get_password_hash
from afrisoutien.crud.user import ensure_admin
from afrisoutien.db.base import Base
from afrisoutien.db.session import async_session_factory, engine

# Ensure all models are imported so metadata.create_all can see them
from afrisoutien.models import boutique, campaign, content, user  # noqa: F401
from afrisoutien.services.audit import AuditLog
from afrisoutien.services.notifications import NotificationService

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan ────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(_app: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables initialised")

    if settings.ADMIN_PASSWORD:
        async with async_session_factory() as session:
            admin = await ensure_admin(
                session,
                email=settings.ADMIN_EMAIL,
                password_hash=get_password_hash(settings.ADMIN_PASSWORD),
            )
        logger.info("Bootstrap admin ready: %s (password: <redacted>)", admin.email)
    else:
        logger.warning("ADMIN_PASSWORD not set - no bootstrap admin account")

    logger.info("%s v%s started (%s)", settings.PROJECT_NAME, settings.VERSION, settings.ENVIRONMENT)
    yield
    await engine.dispose()
    logger.info("Shutdown complete")


# ── Request logging ─────────────────────────────────────────────────
class _RequestLogMiddleware(BaseHTTPMiddleware):
    """Log method, path, client IP, response status and latency (ms).

    Only the URL and metadata are recorded, never bodies or cookies.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        client_ip = request.client.host if request.client else "unknown"
        logger.info(
            "%s %s | client=%s status=%d latency=%.1fms",
            request.method,
            request.url.path,
            client_ip,
            response.status_code,
            elapsed_ms,
        )
        return response


# ── App factory ─────────────────────────────────────────────────────
def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.PROJECT_NAME,
        description="Plateforme de solidarité pan-africaine",
        version=settings.VERSION,
        openapi_url=f"{settings.API_PREFIX}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS; credentials are required for the session cookies
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_middleware(_RequestLogMiddleware)

    application.state.limiter = limiter
    application.state.audit_log = AuditLog()
    application.state.notifier = NotificationService.from_settings()

    # Global exception handlers (prevent stack-trace leakage)
    register_exception_handlers(application)

    application.include_router(api_router, prefix=settings.API_PREFIX)
    return application


app = create_app()
