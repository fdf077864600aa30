"""Application lifespan: startup and shutdown.

Single place for startup/shutdown wiring. The CacheService is built here
once per process and exposed on app.state; consumers receive it through
livecache.api.dependencies, never through a module global.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from livecache.core.config import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: telemetry (if enabled), Redis cache (if enabled).
    An unreachable Redis does not fail startup; the cache stays unavailable
    until the connection monitor sees it come back.
    Shutdown order: cache disconnect, telemetry shutdown.
    """
    settings = get_settings()

    # ---- Startup ----
    if settings.telemetry_enabled:
        from livecache.shared.telemetry.telemetry import TelemetryConfig, set_telemetry

        telemetry = TelemetryConfig(settings)
        telemetry.setup_telemetry()
        set_telemetry(telemetry)
        telemetry.instrument_redis()
        logger.info("Telemetry initialized")

    if settings.redis_enabled:
        from livecache.infrastructure.cache import CacheService, build_namespaces

        cache = CacheService(settings=settings)
        await cache.connect()
        app.state.cache = cache
        app.state.cache_namespaces = build_namespaces(cache, settings.cache_namespaces)
    else:
        logger.info("Redis cache disabled by configuration")
        app.state.cache = None
        app.state.cache_namespaces = {}

    yield

    # ---- Shutdown ----
    if getattr(app.state, "cache", None) is not None:
        await app.state.cache.disconnect()
        app.state.cache = None
        logger.info("Cache disconnected")

    from livecache.shared.telemetry.telemetry import get_telemetry, set_telemetry

    telemetry_instance = get_telemetry()
    if telemetry_instance is not None:
        telemetry_instance.shutdown()
        set_telemetry(None)
