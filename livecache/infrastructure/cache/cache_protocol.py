"""Protocols for the cache layer (DIP).

KeyValueStore is what the cache needs from its client (redis.asyncio.Redis
satisfies it). CacheProtocol is what consumers depend on.
"""

from collections.abc import Awaitable, Callable
from typing import Any, Protocol, TypeVar

T = TypeVar("T")


class KeyValueStore(Protocol):
    """Minimal async store contract used by CacheService."""

    async def ping(self) -> Any: ...

    async def get(self, name: str) -> Any: ...

    async def setex(self, name: str, time: int, value: str) -> Any: ...

    async def delete(self, *names: str) -> int: ...

    async def keys(self, pattern: str) -> list[str]: ...

    async def incr(self, name: str) -> int: ...

    async def expire(self, name: str, time: int) -> Any: ...

    async def ttl(self, name: str) -> int: ...

    async def aclose(self) -> None: ...


class CacheProtocol(Protocol):
    """Protocol for cache backends. Used by namespaces, decorators and routes."""

    def is_available(self) -> bool:
        """Return True if cache is connected and usable."""
        ...

    async def get(
        self, key: str, *, model: type[T] | None = None, default: Any = None
    ) -> Any:
        """Return cached value or default."""
        ...

    async def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        """Store value with TTL in seconds."""
        ...

    async def delete(self, key: str) -> bool:
        """Remove key from cache."""
        ...

    async def delete_pattern(self, pattern: str) -> int:
        """Remove all keys matching a glob pattern."""
        ...

    async def get_or_set(
        self,
        key: str,
        ttl: int,
        compute: Callable[[], Awaitable[T]],
        *,
        model: type[T] | None = None,
    ) -> T:
        """Return cached value, or compute, store and return it."""
        ...

    async def check_limit(
        self, key: str, max_requests: int, window_seconds: int
    ) -> bool:
        """Count one request against a fixed window; True if allowed."""
        ...
