"""
FastAPI application factory.

Creates and configures the FastAPI application instance.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared.config import Settings, get_settings, validate_settings
from shared.logging_config import configure_logging

from .dependencies import ServiceContainer
from .errors import register_exception_handlers
from .routes import auth, health, payments, transform, usage, users

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Runs startup and shutdown logic.
    """
    settings = app.state.container.settings
    logger.info(f"Starting {settings.app_name} on {settings.host}:{settings.port}")
    yield
    await app.state.container.aclose()
    logger.info(f"Shutting down {settings.app_name}")


def create_app(
    settings: Optional[Settings] = None,
    container: Optional[ServiceContainer] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Settings to use; loaded from the environment if omitted
        container: Prebuilt service container (tests pass one with fakes)

    Returns:
        Configured FastAPI instance
    """
    if container is not None:
        settings = container.settings
    settings = settings or get_settings()

    configure_logging(settings)
    validate_settings(settings)

    app = FastAPI(
        title=settings.app_name,
        description="Text transformation API with free-trial and subscription entitlements",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/api/docs" if settings.debug else None,
        redoc_url="/api/redoc" if settings.debug else None,
    )
    app.state.container = container or ServiceContainer(settings)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    register_exception_handlers(app)

    # Register routes
    app.include_router(health.router, prefix="/api", tags=["health"])
    app.include_router(auth.router, prefix="/api", tags=["auth"])
    app.include_router(users.router, prefix="/api/users", tags=["users"])
    app.include_router(usage.router, prefix="/api/user", tags=["usage"])
    app.include_router(transform.router, prefix="/api", tags=["transform"])
    app.include_router(payments.router, prefix="/api/payment", tags=["payments"])

    return app
