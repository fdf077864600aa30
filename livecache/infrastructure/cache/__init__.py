"""Cache: Redis service, namespaces and cache key utilities.

Used by route handlers and services to keep hot, short-lived data
(matches, odds, balances, lists) off the primary store. CacheService uses
livecache.core.config; key format is in keys.py (DRY).
"""

from livecache.infrastructure.cache.availability import (
    AvailabilityTracker,
    ConnectionMonitor,
)
from livecache.infrastructure.cache.cache_protocol import CacheProtocol, KeyValueStore
from livecache.infrastructure.cache.keys import (
    analytics_key,
    balance_key,
    build_key,
    casino_games_key,
    match_key,
    match_list_key,
    namespace_pattern,
    odds_key,
    rate_limit_key,
)
from livecache.infrastructure.cache.namespaces import CacheNamespace, build_namespaces
from livecache.infrastructure.cache.redis_cache import CacheService, cached
from livecache.infrastructure.cache.single_flight import SingleFlight

__all__ = [
    "AvailabilityTracker",
    "CacheNamespace",
    "CacheProtocol",
    "CacheService",
    "ConnectionMonitor",
    "KeyValueStore",
    "SingleFlight",
    "analytics_key",
    "balance_key",
    "build_key",
    "build_namespaces",
    "cached",
    "casino_games_key",
    "match_key",
    "match_list_key",
    "namespace_pattern",
    "odds_key",
    "rate_limit_key",
]
