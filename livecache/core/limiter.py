"""Rate limit policies backed by the cache's fixed-window counter.

Single source of truth for limit values. enforce_rate_limit raises
RateLimitExceededException (mapped to 429); rate_limit(policy) wraps it as a
FastAPI dependency keyed by client IP (X-Forwarded-For only when
rate_limit_trust_forwarded_for is set). When the cache is disabled or down
every request is allowed.
"""

from dataclasses import dataclass

from fastapi import Request

from livecache.core.config import get_settings
from livecache.domain.exceptions import RateLimitExceededException
from livecache.infrastructure.cache.cache_protocol import CacheProtocol


@dataclass(frozen=True)
class RateLimitPolicy:
    """Named fixed-window limit: max_requests per window_seconds."""

    name: str
    max_requests: int
    window_seconds: int


LOGIN_LIMIT = RateLimitPolicy("login", 10, 15 * 60)  # brute force
API_LIMIT = RateLimitPolicy("api", 100, 60)
FINANCIAL_LIMIT = RateLimitPolicy("financial", 10, 60)  # deposits/withdrawals
BETTING_LIMIT = RateLimitPolicy("betting", 30, 60)
ADMIN_LIMIT = RateLimitPolicy("admin", 60, 60)
AUTH_LIMIT = RateLimitPolicy("auth", 5, 60 * 60)  # register/reset password


async def enforce_rate_limit(
    cache: CacheProtocol | None, policy: RateLimitPolicy, identity: str
) -> None:
    """Count one request for identity under policy; raise if over the limit.

    Raises:
        RateLimitExceededException: If the window's count exceeds max_requests.
    """
    if cache is None:
        return
    allowed = await cache.check_limit(
        f"{policy.name}:{identity}", policy.max_requests, policy.window_seconds
    )
    if not allowed:
        raise RateLimitExceededException(
            policy.name, policy.max_requests, policy.window_seconds
        )


def _client_identity(request: Request, trust_forwarded_for: bool = False) -> str:
    """Client IP; X-Forwarded-For is used only when the proxy is trusted."""
    if trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
    if request.client is not None:
        return request.client.host
    return "unknown"


def rate_limit(policy: RateLimitPolicy):
    """FastAPI dependency factory: Depends(rate_limit(LOGIN_LIMIT))."""

    async def dependency(request: Request) -> None:
        cache = getattr(request.app.state, "cache", None)
        trust_forwarded_for = get_settings().rate_limit_trust_forwarded_for
        await enforce_rate_limit(
            cache, policy, _client_identity(request, trust_forwarded_for)
        )

    return dependency
