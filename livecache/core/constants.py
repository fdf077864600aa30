"""Core constants: cache key prefixes and default namespace TTLs.

Single source of truth for cache key structure (DRY). Used by
infrastructure cache key builders and the settings defaults.
"""

# Cache key prefixes (used with :match_id, :status, :user_id etc.)
CACHE_PREFIX_MATCH = "match"
CACHE_PREFIX_MATCH_LIST = "matches"
CACHE_PREFIX_BALANCE = "balance"
CACHE_PREFIX_ODDS = "odds"
CACHE_PREFIX_CASINO = "casino"
CACHE_PREFIX_ANALYTICS = "analytics"
CACHE_PREFIX_RATE_LIMIT = "ratelimit"

# Delimiter for composite keys
CACHE_KEY_SEP = ":"

# Fallback TTL (seconds) when set() is called without one
DEFAULT_CACHE_TTL = 60

# Default per-namespace TTLs in seconds. Overridable via CACHE_NAMESPACES.
DEFAULT_NAMESPACE_TTLS: dict[str, int] = {
    CACHE_PREFIX_MATCH: 30,  # live match state, frequently updated
    CACHE_PREFIX_MATCH_LIST: 60,
    CACHE_PREFIX_BALANCE: 10,  # changes on every bet
    CACHE_PREFIX_ODDS: 15,
    CACHE_PREFIX_CASINO: 300,  # game list rarely changes
    CACHE_PREFIX_ANALYTICS: 120,
}

# Max keys per DEL round-trip in delete_pattern
DELETE_CHUNK_SIZE = 500
