"""Centralized exception handlers for the FastAPI app.

Register with register_exception_handlers(app). Maps domain and framework
exceptions to HTTP responses.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from livecache.core.config import get_settings
from livecache.domain.exceptions import LiveCacheException

logger = logging.getLogger(__name__)

# Map domain error_code to HTTP status when applicable
_ERROR_CODE_STATUS: dict[str, int] = {
    "VALIDATION_ERROR": 400,
    "RATE_LIMIT_EXCEEDED": 429,
}


def _livecache_exception_handler(
    request: Request, exc: LiveCacheException
) -> JSONResponse:
    """Return JSON from LiveCacheException.to_dict() with appropriate status code."""
    status = _ERROR_CODE_STATUS.get(exc.error_code, 400)
    headers = None
    if status == 429 and "window_seconds" in exc.details:
        headers = {"Retry-After": str(exc.details["window_seconds"])}
    return JSONResponse(status_code=status, content=exc.to_dict(), headers=headers)


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return 500; include detail only when debug is True."""
    logger.exception("Unhandled exception: %s", exc)
    settings = get_settings()
    detail: Any = str(exc) if settings.debug else "Internal server error"
    return JSONResponse(
        status_code=500,
        content={"error": "INTERNAL_ERROR", "message": detail},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app.

    Call once after creating the app. Handlers: LiveCacheException (and
    subclasses), generic Exception.
    """
    app.add_exception_handler(LiveCacheException, _livecache_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
