"""Domain-scoped cache helpers: a key prefix bound to a TTL.

Each namespace is a thin wrapper over CacheProtocol that fixes the key
scheme (prefix:identifier) and the TTL for one data category. Namespaces
are built at startup from (prefix, ttl) policies; see Settings.cache_namespaces.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any, TypeVar

from livecache.core.constants import CACHE_KEY_SEP
from livecache.domain.exceptions import ValidationException
from livecache.infrastructure.cache.cache_protocol import CacheProtocol
from livecache.infrastructure.cache.keys import build_key, namespace_pattern

T = TypeVar("T")


@dataclass(frozen=True)
class CacheNamespace:
    """Cache operations scoped to one key prefix with a fixed TTL."""

    cache: CacheProtocol
    prefix: str
    ttl: int

    def __post_init__(self) -> None:
        if not self.prefix or CACHE_KEY_SEP in self.prefix:
            raise ValidationException(
                f"Namespace prefix {self.prefix!r} must be non-empty and must not "
                f"contain {CACHE_KEY_SEP!r}",
                "prefix",
            )
        if self.ttl <= 0:
            raise ValidationException(
                f"TTL for namespace {self.prefix!r} must be positive, got: {self.ttl}",
                "ttl",
            )

    def key(self, *parts: object) -> str:
        return build_key(self.prefix, *parts)

    async def get(self, *parts: object, model: type[T] | None = None) -> T | Any:
        return await self.cache.get(self.key(*parts), model=model)

    async def set(self, *parts: object, value: Any, ttl: int | None = None) -> bool:
        return await self.cache.set(
            self.key(*parts), value, self.ttl if ttl is None else ttl
        )

    async def invalidate(self, *parts: object) -> bool:
        return await self.cache.delete(self.key(*parts))

    async def get_or_set(
        self,
        *parts: object,
        compute: Callable[[], Awaitable[T]],
        model: type[T] | None = None,
    ) -> T:
        return await self.cache.get_or_set(
            self.key(*parts), self.ttl, compute, model=model
        )

    async def clear(self) -> int:
        """Delete every key in this namespace."""
        return await self.cache.delete_pattern(namespace_pattern(self.prefix))


def build_namespaces(
    cache: CacheProtocol,
    policies: Mapping[str, int] | Iterable[tuple[str, int]],
) -> dict[str, CacheNamespace]:
    """Build one CacheNamespace per (prefix, ttl) policy.

    Args:
        cache: Shared cache service.
        policies: Mapping of prefix to TTL seconds, or (prefix, ttl) pairs.

    Returns:
        Namespaces keyed by prefix.

    Raises:
        ValidationException: On an invalid prefix or TTL, or a duplicate prefix.
    """
    items = policies.items() if isinstance(policies, Mapping) else policies
    namespaces: dict[str, CacheNamespace] = {}
    for prefix, ttl in items:
        if prefix in namespaces:
            raise ValidationException(
                f"Duplicate cache namespace {prefix!r}", "prefix"
            )
        namespaces[prefix] = CacheNamespace(cache=cache, prefix=prefix, ttl=ttl)
    return namespaces
