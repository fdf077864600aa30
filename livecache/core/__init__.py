"""Core: config, constants, lifespan and rate limit policies.

Single place for settings and shared constants.
"""

from livecache.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
