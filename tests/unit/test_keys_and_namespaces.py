"""Cache key builders and domain-scoped namespaces."""

from unittest.mock import AsyncMock

import pytest

from livecache.core.constants import DEFAULT_NAMESPACE_TTLS
from livecache.domain.exceptions import ValidationException
from livecache.infrastructure.cache import (
    CacheNamespace,
    analytics_key,
    balance_key,
    build_key,
    build_namespaces,
    casino_games_key,
    match_key,
    match_list_key,
    namespace_pattern,
    odds_key,
    rate_limit_key,
)


def test_domain_key_builders() -> None:
    assert match_key("42") == "match:42"
    assert match_list_key("LIVE") == "matches:LIVE"
    assert balance_key("u1") == "balance:u1"
    assert odds_key("42") == "odds:42"
    assert casino_games_key() == "casino:games"
    assert analytics_key("daily") == "analytics:daily"


def test_build_key_joins_parts_and_stringifies() -> None:
    assert build_key("analytics", "agent", 7) == "analytics:agent:7"
    assert namespace_pattern("odds") == "odds:*"


@pytest.mark.parametrize("bad", ["a:b", ""])
def test_build_key_rejects_ambiguous_components(bad: str) -> None:
    with pytest.raises(ValidationException) as exc_info:
        build_key("match", bad)
    assert exc_info.value.error_code == "VALIDATION_ERROR"


def test_rate_limit_key_accepts_composite_identity() -> None:
    assert rate_limit_key("login:10.0.0.1") == "ratelimit:login:10.0.0.1"


async def test_namespace_get_set_use_prefix_and_ttl(cache, fake_redis) -> None:
    odds = CacheNamespace(cache=cache, prefix="odds", ttl=15)
    assert await odds.set("42", value={"back": 1.9}) is True
    assert await odds.get("42") == {"back": 1.9}
    assert await fake_redis.ttl("odds:42") == 15


async def test_namespace_set_ttl_override(cache, fake_redis) -> None:
    balance = CacheNamespace(cache=cache, prefix="balance", ttl=10)
    await balance.set("u1", value=100, ttl=3)
    assert await fake_redis.ttl("balance:u1") == 3


async def test_namespace_set_with_zero_ttl_is_skipped(cache, fake_redis) -> None:
    balance = CacheNamespace(cache=cache, prefix="balance", ttl=10)
    assert await balance.set("u1", value=100, ttl=0) is False
    assert fake_redis.calls_to("setex") == []
    assert "balance:u1" not in fake_redis.data


async def test_namespace_invalidate_and_clear(cache) -> None:
    match = CacheNamespace(cache=cache, prefix="match", ttl=30)
    for match_id in ("1", "2", "3"):
        await match.set(match_id, value={"id": match_id})
    await cache.set("odds:1", 2.0, 15)
    assert await match.invalidate("1") is True
    assert await match.get("1") is None
    assert await match.clear() == 2
    assert await cache.get("odds:1") == 2.0


async def test_namespace_get_or_set_uses_namespace_ttl(cache, fake_redis) -> None:
    casino = CacheNamespace(cache=cache, prefix="casino", ttl=300)
    compute = AsyncMock(return_value=["dice", "hilo"])
    assert await casino.get_or_set("games", compute=compute) == ["dice", "hilo"]
    assert await casino.get_or_set("games", compute=compute) == ["dice", "hilo"]
    compute.assert_awaited_once()
    assert await fake_redis.ttl("casino:games") == 300


@pytest.mark.parametrize(("prefix", "ttl"), [("", 10), ("a:b", 10), ("match", 0), ("match", -1)])
def test_namespace_rejects_invalid_policy(offline_cache, prefix: str, ttl: int) -> None:
    with pytest.raises(ValidationException):
        CacheNamespace(cache=offline_cache, prefix=prefix, ttl=ttl)


def test_build_namespaces_from_mapping(offline_cache) -> None:
    namespaces = build_namespaces(offline_cache, DEFAULT_NAMESPACE_TTLS)
    assert set(namespaces) == {"match", "matches", "balance", "odds", "casino", "analytics"}
    assert namespaces["balance"].ttl == 10
    assert namespaces["match"].key("42") == "match:42"


def test_build_namespaces_from_pairs(offline_cache) -> None:
    namespaces = build_namespaces(offline_cache, [("leaderboard", 45), ("promo", 600)])
    assert {p: n.ttl for p, n in namespaces.items()} == {"leaderboard": 45, "promo": 600}


def test_build_namespaces_rejects_duplicates(offline_cache) -> None:
    with pytest.raises(ValidationException, match="Duplicate"):
        build_namespaces(offline_cache, [("odds", 15), ("odds", 30)])


async def test_namespace_ops_are_silent_when_store_unavailable(offline_cache, fake_redis) -> None:
    odds = CacheNamespace(cache=offline_cache, prefix="odds", ttl=15)
    assert await odds.set("1", value=1) is False
    assert await odds.get("1") is None
    assert await odds.clear() == 0
    assert fake_redis.calls == []
