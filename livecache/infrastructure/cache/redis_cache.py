"""Redis-based cache service for high-frequency read operations.

Provides async Redis caching with TTL support, compute-on-miss, pattern
invalidation and a fixed-window rate limiter. Every operation is fail-open:
when Redis is down or a command fails, reads behave as misses, writes are
skipped and the rate limiter allows. Store faults are logged at DEBUG and
never reach the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, TypeVar

import redis.asyncio as redis

from livecache.core.config import Settings, get_settings
from livecache.core.constants import DELETE_CHUNK_SIZE
from livecache.infrastructure.cache import serialization
from livecache.infrastructure.cache.availability import (
    AvailabilityTracker,
    ConnectionMonitor,
)
from livecache.infrastructure.cache.cache_protocol import KeyValueStore
from livecache.infrastructure.cache.keys import rate_limit_key
from livecache.infrastructure.cache.single_flight import SingleFlight
from livecache.shared.telemetry.tracing import add_span_event, traced

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Errors a primitive absorbs: Redis faults plus encode/decode/validation failures.
_ABSORBED_ERRORS = (redis.RedisError, TypeError, ValueError)
# Errors that also mean the connection is gone.
_CONNECTION_ERRORS = (redis.ConnectionError, redis.TimeoutError)

_MISSING: Any = object()


class CacheService:
    """Async Redis cache service with TTL support.

    Construct once at startup (see livecache.core.lifespan), call connect()
    and share the instance. Call disconnect() at shutdown.
    """

    def __init__(
        self,
        redis_client: KeyValueStore | None = None,
        settings: Settings | None = None,
        single_flight: bool | None = None,
    ) -> None:
        """Initialize cache service.

        Args:
            redis_client: Optional client for testing or DI; built from settings on connect() if None.
            settings: Optional settings; defaults to get_settings().
            single_flight: Share in-flight get_or_set computations per key;
                defaults to settings.cache_single_flight.
        """
        self.redis = redis_client
        self.settings = settings or get_settings()
        self.availability = AvailabilityTracker(lambda: self.redis is not None)
        self.monitor = ConnectionMonitor(
            self._ping,
            self.availability,
            interval=self.settings.redis_health_check_interval,
        )
        if single_flight is None:
            single_flight = self.settings.cache_single_flight
        self._flights: SingleFlight | None = SingleFlight() if single_flight else None

    def _build_client(self) -> redis.Redis:
        password = self.settings.redis_password
        return redis.Redis(
            host=self.settings.redis_host,
            port=self.settings.redis_port,
            db=self.settings.redis_db,
            password=password.get_secret_value() if password else None,
            decode_responses=True,
            max_connections=self.settings.redis_max_connections,
            socket_connect_timeout=self.settings.redis_connect_timeout,
            socket_timeout=self.settings.redis_socket_timeout,
            socket_keepalive=True,
        )

    async def _ping(self) -> object:
        if self.redis is None:
            raise redis.ConnectionError("Redis client is closed")
        return await self.redis.ping()

    async def connect(self) -> bool:
        """Open the client, ping it and start the connection monitor. Call on app startup.

        Never raises on an unreachable store: the cache stays unavailable and
        the monitor keeps pinging until it comes back.

        Returns:
            True if the store answered the initial ping.
        """
        if self.redis is None:
            self.redis = self._build_client()
        connected = await self.monitor.check()
        if connected:
            logger.info(
                "Redis cache connected: %s:%s",
                self.settings.redis_host,
                self.settings.redis_port,
            )
        else:
            logger.warning(
                "Redis connection failed (%s:%s). Cache disabled until reconnect.",
                self.settings.redis_host,
                self.settings.redis_port,
            )
        self.monitor.start()
        return connected

    async def disconnect(self) -> None:
        """Stop the monitor and close the client. Call on app shutdown."""
        await self.monitor.stop()
        if self.redis is not None:
            try:
                await self.redis.aclose()
            except redis.RedisError as e:
                logger.debug("Error closing Redis client: %s", e)
            self.redis = None
        self.availability.on_end()

    def is_available(self) -> bool:
        """Return True if Redis is connected and usable. Never does I/O."""
        return self.availability.available()

    def _absorb(self, operation: str, target: str, exc: Exception) -> None:
        """Log a store fault at DEBUG and drop availability on connection loss."""
        if isinstance(exc, _CONNECTION_ERRORS):
            self.availability.on_error(exc)
        logger.debug("Cache %s error for %s: %s", operation, target, exc)

    async def _fetch(self, key: str, model: type[T] | None) -> T | Any:
        """Return the cached value or _MISSING."""
        if not self.is_available() or self.redis is None:
            return _MISSING
        try:
            raw = await self.redis.get(key)
            if raw is None:
                logger.debug("Cache MISS: %s", key)
                return _MISSING
            value = serialization.loads(raw, model)
        except _ABSORBED_ERRORS as e:
            self._absorb("get", key, e)
            return _MISSING
        logger.debug("Cache HIT: %s", key)
        return value

    async def get(
        self, key: str, *, model: type[T] | None = None, default: Any = None
    ) -> T | Any:
        """Return cached value (JSON-deserialized) or default if missing/unavailable.

        Args:
            key: Cache key (use livecache.infrastructure.cache.keys builders).
            model: Optional type to validate the cached payload into
                (pydantic model, dataclass, list[...], etc.).
            default: Returned when the key is not found or the store fails.

        Returns:
            Cached value or default.
        """
        value = await self._fetch(key, model)
        return default if value is _MISSING else value

    async def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        """Store value with TTL. Returns True on success.

        Args:
            key: Cache key.
            value: Value to cache (JSON-serializable; models and dataclasses allowed).
            ttl: Time-to-live in seconds (default settings.cache_default_ttl).

        Returns:
            True if stored, False otherwise.
        """
        if ttl is None:
            ttl = self.settings.cache_default_ttl
        if ttl <= 0:
            logger.debug("Cache SET skipped for %s: non-positive TTL %s", key, ttl)
            return False
        if not self.is_available() or self.redis is None:
            return False
        try:
            serialized = serialization.dumps(value)
            await self.redis.setex(key, ttl, serialized)
        except _ABSORBED_ERRORS as e:
            self._absorb("set", key, e)
            return False
        logger.debug("Cache SET: %s (TTL: %ss)", key, ttl)
        return True

    async def delete(self, key: str) -> bool:
        """Remove key from cache. Returns True if the delete was issued.

        Args:
            key: Cache key to delete.

        Returns:
            True if the command ran, False if skipped or failed.
        """
        if not self.is_available() or self.redis is None:
            return False
        try:
            await self.redis.delete(key)
        except redis.RedisError as e:
            self._absorb("delete", key, e)
            return False
        logger.debug("Cache DELETE: %s", key)
        return True

    async def delete_pattern(self, pattern: str) -> int:
        """Delete all keys matching a glob pattern.

        Enumerates with KEYS, then DELs matches in chunks of DELETE_CHUNK_SIZE.
        No DEL is sent when nothing matches.

        Args:
            pattern: Redis glob pattern (e.g. match:*).

        Returns:
            Number of keys deleted.
        """
        if not self.is_available() or self.redis is None:
            return 0
        deleted = 0
        try:
            keys = list(await self.redis.keys(pattern))
            for start in range(0, len(keys), DELETE_CHUNK_SIZE):
                chunk = keys[start : start + DELETE_CHUNK_SIZE]
                deleted += int(await self.redis.delete(*chunk) or 0)
        except redis.RedisError as e:
            self._absorb("delete_pattern", pattern, e)
            return deleted
        if deleted > 0:
            logger.info("Cache INVALIDATE: %s (%s keys)", pattern, deleted)
        return deleted

    @traced("cache.get_or_set")
    async def get_or_set(
        self,
        key: str,
        ttl: int,
        compute: Callable[[], Awaitable[T]],
        *,
        model: type[T] | None = None,
    ) -> T:
        """Cache-through: return cached value, or compute, cache and return it.

        compute is only awaited on a miss; its exceptions propagate unchanged
        and nothing is written. Without single-flight, concurrent misses for
        the same key each run compute and the last write wins.

        Args:
            key: Cache key.
            ttl: Time-to-live in seconds for the computed value.
            compute: Async zero-arg producer of the value.
            model: Optional type to validate a cached payload into.

        Returns:
            The cached or freshly computed value.
        """
        cached_value = await self._fetch(key, model)
        if cached_value is not _MISSING:
            add_span_event("cache.hit", {"key": key})
            return cached_value
        add_span_event("cache.miss", {"key": key})

        async def compute_and_store() -> T:
            result = await compute()
            await self.set(key, result, ttl)
            return result

        if self._flights is not None:
            return await self._flights.do(key, compute_and_store)
        return await compute_and_store()

    @traced("cache.check_limit")
    async def check_limit(
        self, key: str, max_requests: int, window_seconds: int
    ) -> bool:
        """Fixed-window rate limit check. Returns True if the request is allowed.

        Increments ratelimit:<key>; the first increment of a window sets its
        expiry. Rejected requests still count. Later increments check the TTL
        and re-arm it when the first EXPIRE was lost, before deciding.
        Fails open: returns True when Redis is unavailable or errors.

        Args:
            key: Identity being limited (e.g. "login:10.0.0.1").
            max_requests: Requests allowed per window.
            window_seconds: Window length in seconds.

        Returns:
            True if allowed, False if over the limit.
        """
        if not self.is_available() or self.redis is None:
            return True
        counter_key = rate_limit_key(key, self.settings.rate_limit_key_prefix)
        try:
            current = int(await self.redis.incr(counter_key))
            if current == 1:
                await self.redis.expire(counter_key, window_seconds)
            elif await self.redis.ttl(counter_key) == -1:
                logger.debug("Rate limit counter %s had no TTL; re-armed", counter_key)
                await self.redis.expire(counter_key, window_seconds)
            if current <= max_requests:
                return True
        except redis.RedisError as e:
            self._absorb("check_limit", counter_key, e)
            return True
        logger.debug("Rate limit exceeded: %s (%s/%s)", key, current, max_requests)
        return False


def _resolve_cache(args: tuple[Any, ...], kwargs: dict[str, Any]) -> tuple[CacheService | None, tuple[Any, ...], dict[str, Any]]:
    """Resolve CacheService and args/kwargs for the wrapped function.

    Resolution order: keyword "cache", then args[0] if CacheService, then args[0].cache.
    The returned args/kwargs exclude the cache and are used to build the key.
    """
    if "cache" in kwargs and isinstance(kwargs.get("cache"), CacheService):
        cache = kwargs["cache"]
        call_kwargs = {k: v for k, v in kwargs.items() if k != "cache"}
        return cache, args, call_kwargs
    if args:
        first = args[0]
        if isinstance(first, CacheService):
            return first, args[1:], kwargs
        cache_attr = getattr(first, "cache", None)
        if isinstance(cache_attr, CacheService):
            return cache_attr, args[1:], kwargs
    return None, args, kwargs


def cached(
    key_prefix: str,
    ttl: int | None = None,
    key_builder: Callable[..., str] | None = None,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Decorator to cache async function results through CacheService.get_or_set.

    The wrapped function must receive a CacheService in one of these ways:
    - keyword argument "cache" (recommended, e.g. from Depends),
    - first argument is the CacheService instance,
    - or first argument has a .cache attribute that is a CacheService.
    Without a resolvable cache the function is simply called.

    Args:
        key_prefix: Prefix for cache key (e.g. 'odds').
        ttl: Time-to-live in seconds (default settings.cache_default_ttl).
        key_builder: Optional callable(*args, **kwargs) -> key; else built from args/kwargs.

    Returns:
        Decorator that caches return value when CacheService is resolved.
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            cache, key_args, call_kwargs = _resolve_cache(args, kwargs)
            if cache is None:
                return await func(*args, **kwargs)
            if key_builder:
                cache_key = key_builder(*key_args, **call_kwargs)
            else:
                parts = [str(a) for a in key_args]
                parts.extend(f"{k}={v}" for k, v in sorted(call_kwargs.items()))
                cache_key = ":".join([key_prefix, *parts])
            return await cache.get_or_set(
                cache_key,
                ttl if ttl is not None else cache.settings.cache_default_ttl,
                lambda: func(*args, **kwargs),
            )

        return wrapper

    return decorator
