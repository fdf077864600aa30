"""FastAPI application entry point.

Wiring only: logging, lifespan, exception handlers, routers. See
livecache.core.lifespan and livecache.core.exception_handlers.

Settings are loaded inside create_app() so that tests can set env (and
clear the get_settings cache) before calling create_app().
"""

from fastapi import FastAPI

from livecache.api.health import router as health_router
from livecache.core.config import get_settings
from livecache.core.exception_handlers import register_exception_handlers
from livecache.core.lifespan import create_lifespan
from livecache.shared.telemetry.logging import setup_logging


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    settings = get_settings()
    setup_logging()
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=create_lifespan,
    )

    register_exception_handlers(app)
    app.include_router(health_router, prefix="/api/v1/health", tags=["health"])

    return app
