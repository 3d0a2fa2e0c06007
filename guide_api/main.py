"""
Guide API — application entry point.

Builds the FastAPI app: tables and the seeded admin on startup, login
rate limiting, CORS, the uniform error body and the ``/api/v1`` router.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from guide_api.api.v1.api import api_router
from guide_api.api.v1.endpoints.auth import limiter
from guide_api.core.config import settings
from guide_api.core.exceptions import register_exception_handlers
from guide_api.db.base import Base
from guide_api.db.session import async_session_factory, engine

# Ensure all models are imported so metadata.create_all can see them
from guide_api.models.account import Account, AccountRole  # noqa: F401
from guide_api.models.business import Business  # noqa: F401
from guide_api.services.accounts import ensure_admin

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan ────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(_app: FastAPI):
    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables initialised")

    # Seed default admin account on first run
    async with async_session_factory() as session:
        await ensure_admin(session, settings.FIRST_ADMIN_EMAIL, settings.FIRST_ADMIN_PASSWORD)

    logger.info("🚀 %s v%s started", settings.PROJECT_NAME, settings.VERSION)
    yield
    await engine.dispose()
    logger.info("Shutdown complete")


# ── App factory ─────────────────────────────────────────────────────
def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.PROJECT_NAME,
        description="Accounts, roles and business approval for the Guide mobile app",
        version=settings.VERSION,
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Rate limiting on the login endpoints
    application.state.limiter = limiter
    application.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)  # type: ignore[arg-type]

    # CORS
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Global exception handlers (prevent stack-trace leakage)
    register_exception_handlers(application)

    # Mount API v1
    application.include_router(api_router, prefix=settings.API_V1_PREFIX)

    return application


app = create_app()
