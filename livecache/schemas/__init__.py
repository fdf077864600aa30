"""API response schemas."""

from livecache.schemas.health import HealthResponse

__all__ = ["HealthResponse"]
