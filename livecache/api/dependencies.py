"""FastAPI dependencies exposing the process-wide cache from app.state."""

from fastapi import HTTPException, Request

from livecache.infrastructure.cache import CacheNamespace, CacheService


def get_cache(request: Request) -> CacheService | None:
    """Return the shared CacheService, or None when Redis is disabled."""
    return getattr(request.app.state, "cache", None)


def get_cache_namespace(prefix: str):
    """Dependency factory: Depends(get_cache_namespace("odds")).

    Raises 500 at request time if the namespace was not configured.
    """

    def dependency(request: Request) -> CacheNamespace | None:
        if get_cache(request) is None:
            return None
        namespaces: dict[str, CacheNamespace] = getattr(
            request.app.state, "cache_namespaces", {}
        )
        namespace = namespaces.get(prefix)
        if namespace is None:
            raise HTTPException(
                status_code=500, detail=f"Cache namespace {prefix!r} is not configured"
            )
        return namespace

    return dependency
