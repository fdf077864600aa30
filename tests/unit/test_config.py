"""Settings defaults, env overrides and validation."""

import pytest
from pydantic import ValidationError

from livecache.core.config import Settings, get_settings
from livecache.core.constants import DEFAULT_NAMESPACE_TTLS


def test_defaults_need_no_environment() -> None:
    settings = Settings(_env_file=None)
    assert settings.cache_default_ttl == 60
    assert settings.cache_namespaces == DEFAULT_NAMESPACE_TTLS
    assert settings.cache_single_flight is False
    assert settings.rate_limit_key_prefix == "ratelimit"
    assert settings.redis_socket_timeout > 0


def test_namespace_table_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CACHE_NAMESPACES", '{"match": 5, "leaderboard": 45}')
    monkeypatch.setenv("REDIS_PORT", "6380")
    settings = Settings(_env_file=None)
    assert settings.cache_namespaces == {"match": 5, "leaderboard": 45}
    assert settings.redis_port == 6380


@pytest.mark.parametrize(
    "overrides",
    [
        {"cache_default_ttl": 0},
        {"cache_namespaces": {"match": 0}},
        {"cache_namespaces": {"bad:prefix": 10}},
        {"cache_namespaces": {"": 10}},
        {"rate_limit_key_prefix": "rate:limit"},
        {"redis_socket_timeout": 0},
        {"redis_health_check_interval": -1},
    ],
)
def test_invalid_settings_are_rejected(overrides: dict) -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **overrides)


def test_get_settings_is_cached(fresh_settings) -> None:
    assert get_settings() is get_settings()
