"""Health check endpoint. Reports cache availability without touching Redis."""

from fastapi import APIRouter, Depends

from livecache.api.dependencies import get_cache
from livecache.infrastructure.cache import CacheService
from livecache.schemas.health import HealthResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check(cache: CacheService | None = Depends(get_cache)) -> HealthResponse:
    """Return ok for liveness; a down cache is reported, not treated as unhealthy."""
    if cache is None:
        return HealthResponse(cache="disabled")
    return HealthResponse(cache="available" if cache.is_available() else "unavailable")
