"""Domain layer: exceptions.

No dependencies on infrastructure or presentation.
"""

from livecache.domain.exceptions import (
    LiveCacheException,
    RateLimitExceededException,
    ValidationException,
)

__all__ = [
    "LiveCacheException",
    "RateLimitExceededException",
    "ValidationException",
]
