"""Cache key builders. Single place for key format (DRY).

Key components (match_id, user_id, status, etc.) must not contain
CACHE_KEY_SEP to avoid ambiguous or colliding keys.
"""

from livecache.core.constants import (
    CACHE_KEY_SEP,
    CACHE_PREFIX_ANALYTICS,
    CACHE_PREFIX_BALANCE,
    CACHE_PREFIX_CASINO,
    CACHE_PREFIX_MATCH,
    CACHE_PREFIX_MATCH_LIST,
    CACHE_PREFIX_ODDS,
    CACHE_PREFIX_RATE_LIMIT,
)
from livecache.domain.exceptions import ValidationException


def _validate_key_component(value: str, name: str) -> None:
    """Raise ValidationException if value is empty or contains the separator.

    Args:
        value: String component used in a cache key.
        name: Name of the component (for error message).

    Raises:
        ValidationException: If value is empty or contains CACHE_KEY_SEP.
    """
    if not value:
        raise ValidationException(f"Cache key component {name!r} must not be empty", name)
    if CACHE_KEY_SEP in value:
        raise ValidationException(
            f"Cache key component {name!r} must not contain separator {CACHE_KEY_SEP!r}",
            name,
        )


def build_key(prefix: str, *parts: object) -> str:
    """Join prefix and parts with CACHE_KEY_SEP after validating each component.

    Non-string parts (e.g. int ids) are converted with str().
    """
    _validate_key_component(prefix, "prefix")
    components = [str(p) for p in parts]
    for i, component in enumerate(components):
        _validate_key_component(component, f"part[{i}]")
    return CACHE_KEY_SEP.join([prefix, *components])


def namespace_pattern(prefix: str) -> str:
    """Glob pattern matching every key in a namespace (e.g. match:*)."""
    _validate_key_component(prefix, "prefix")
    return f"{prefix}{CACHE_KEY_SEP}*"


def rate_limit_key(key: str, prefix: str = CACHE_PREFIX_RATE_LIMIT) -> str:
    """Counter key for a rate-limited identity.

    The identity itself may contain the separator (e.g. "login:10.0.0.1").
    """
    return f"{prefix}{CACHE_KEY_SEP}{key}"


def match_key(match_id: str) -> str:
    """Cache key for live match state."""
    return build_key(CACHE_PREFIX_MATCH, match_id)


def match_list_key(status: str) -> str:
    """Cache key for the match list filtered by status."""
    return build_key(CACHE_PREFIX_MATCH_LIST, status)


def balance_key(user_id: str) -> str:
    """Cache key for a user's balance."""
    return build_key(CACHE_PREFIX_BALANCE, user_id)


def odds_key(match_id: str) -> str:
    """Cache key for a match's odds."""
    return build_key(CACHE_PREFIX_ODDS, match_id)


def casino_games_key() -> str:
    """Cache key for the casino game list."""
    return build_key(CACHE_PREFIX_CASINO, "games")


def analytics_key(name: str) -> str:
    """Cache key for an analytics report."""
    return build_key(CACHE_PREFIX_ANALYTICS, name)
