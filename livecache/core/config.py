"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Every field has a default so the cache layer can be
constructed without any environment; values are validated at load time.
"""

from functools import lru_cache

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from livecache.core.constants import (
    CACHE_KEY_SEP,
    CACHE_PREFIX_RATE_LIMIT,
    DEFAULT_CACHE_TTL,
    DEFAULT_NAMESPACE_TTLS,
)


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    Redis connection timeouts are always set so that an unreachable store
    surfaces as an error (and the cache goes unavailable) instead of a hang.
    """

    # App
    app_name: str = "livecache"
    app_version: str = "1.0.0"
    debug: bool = False

    # Redis connection
    redis_enabled: bool = True
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: SecretStr | None = None
    redis_max_connections: int = 10
    redis_socket_timeout: float = 2.0
    redis_connect_timeout: float = 5.0
    # Seconds between availability pings from the connection monitor.
    redis_health_check_interval: float = 5.0

    # Cache behaviour
    cache_default_ttl: int = DEFAULT_CACHE_TTL
    cache_single_flight: bool = False
    # JSON object in env, e.g. CACHE_NAMESPACES='{"match": 30, "odds": 15}'
    cache_namespaces: dict[str, int] = Field(
        default_factory=lambda: dict(DEFAULT_NAMESPACE_TTLS)
    )
    rate_limit_key_prefix: str = CACHE_PREFIX_RATE_LIMIT
    # Only behind a proxy that overwrites X-Forwarded-For; clients can forge it
    rate_limit_trust_forwarded_for: bool = False

    # OpenTelemetry
    telemetry_enabled: bool = False
    telemetry_exporter: str = "console"
    telemetry_otlp_endpoint: str | None = None
    telemetry_sample_rate: float = 1.0
    telemetry_environment: str = "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_cache_policies(self) -> "Settings":
        """Validate TTLs, timeouts and namespace prefixes.

        - cache_default_ttl and every namespace TTL must be positive.
        - Namespace prefixes must be non-empty and must not contain the key separator.
        - Socket timeouts and the health check interval must be positive.
        """
        if self.cache_default_ttl <= 0:
            raise ValueError(
                f"CACHE_DEFAULT_TTL must be positive, got: {self.cache_default_ttl}"
            )
        for prefix, ttl in self.cache_namespaces.items():
            if not prefix or CACHE_KEY_SEP in prefix:
                raise ValueError(
                    f"Cache namespace {prefix!r} must be non-empty and must not "
                    f"contain separator {CACHE_KEY_SEP!r}"
                )
            if ttl <= 0:
                raise ValueError(
                    f"TTL for cache namespace {prefix!r} must be positive, got: {ttl}"
                )
        if not self.rate_limit_key_prefix or CACHE_KEY_SEP in self.rate_limit_key_prefix:
            raise ValueError(
                f"RATE_LIMIT_KEY_PREFIX must be non-empty and must not contain {CACHE_KEY_SEP!r}"
            )
        for name in (
            "redis_socket_timeout",
            "redis_connect_timeout",
            "redis_health_check_interval",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name.upper()} must be positive")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
