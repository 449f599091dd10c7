"""
Tableside: Application entry point.

This is the **only** file that assembles the app.  All business logic
lives in the `services/` package; `api/` is a thin HTTP layer over it.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from tableside.api.v1.api import api_router
from tableside.api.v1.endpoints.token import limiter
from tableside.core.config import settings
from tableside.core.exceptions import register_exception_handlers
from tableside.db.base import Base
from tableside.db.session import async_session_factory, engine

# Ensure all models are imported so metadata.create_all can see them
from tableside.models.menu import Item, Tag  # noqa: F401
from tableside.models.order import Order, OrderItem  # noqa: F401
from tableside.models.payment import Payment  # noqa: F401
from tableside.models.role_request import RoleRequest  # noqa: F401
from tableside.models.user import User  # noqa: F401
from tableside.services.token_cache import TokenCache
from tableside.services.users import seed_admin

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

    # Seed default admin user on first run
    async with async_session_factory() as session:
        await seed_admin(session)

    logger.info("%s v%s started", settings.PROJECT_NAME, settings.VERSION)
    yield
    _app.state.token_cache.clear()
    await engine.dispose()
    logger.info("Shutdown complete")


# ── App factory ─────────────────────────────────────────────────────
def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.PROJECT_NAME,
        description="Role-based restaurant ordering API",
        version=settings.VERSION,
        openapi_url=f"{settings.API_PREFIX}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # One verified-token cache per app instance
    application.state.token_cache = TokenCache(max_size=settings.TOKEN_CACHE_MAX_SIZE)

    # Rate limiting on the token endpoint
    application.state.limiter = limiter
    application.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

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

    application.include_router(api_router, prefix=settings.API_PREFIX)
    return application


app = create_app()
