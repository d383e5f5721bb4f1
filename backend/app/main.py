"""LuminaryLab — FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1.auth import router as auth_router
from app.api.v1.billing import router as billing_router
from app.api.v1.dashboard import router as dashboard_router
from app.api.v1.presets import admin_router as admin_presets_router
from app.api.v1.presets import router as presets_router
from app.api.v1.projects import router as projects_router
from app.api.v1.uploads import router as uploads_router
from app.api.v1.user import router as user_router
from app.api.v1.webhooks import router as webhooks_router
from app.billing.stripe_client import StripeGateway
from app.config import Settings, settings as default_settings
from app.database import build_engine, build_session_factory
from app.errors import register_error_handlers

# Configure root logger so all app.* loggers output to stderr (captured by Docker).
logging.basicConfig(
    level=default_settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup and shutdown events."""
    yield
    # Shutdown: dispose engine connections
    await app.state.engine.dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application and its process-wide collaborators.

    The database engine, session factory and Stripe gateway are created here
    and stored on ``app.state``; request dependencies read them from there.
    """
    settings = settings or default_settings

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Photo-editing SaaS backend: projects, uploads, presets and subscription billing.",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.engine = build_engine(settings.async_database_url, echo=settings.debug)
    app.state.session_factory = build_session_factory(app.state.engine)
    app.state.stripe = StripeGateway.from_settings(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    # Routers
    app.include_router(auth_router)
    app.include_router(billing_router)
    app.include_router(projects_router)
    app.include_router(dashboard_router)
    app.include_router(uploads_router)
    app.include_router(presets_router)
    app.include_router(admin_presets_router)
    app.include_router(user_router)
    app.include_router(webhooks_router)

    @app.get("/health", tags=["health"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy", "service": settings.app_name}

    @app.get("/", tags=["root"])
    async def root() -> dict[str, str]:
        """Root endpoint."""
        return {
            "service": settings.app_name,
            "version": settings.app_version,
            "docs": "/docs",
        }

    return app


app = create_app()
