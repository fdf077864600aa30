"""Domain exceptions for the livecache package.

Store faults never surface as exceptions (the cache layer absorbs them).
These cover caller mistakes (bad keys, bad namespace policies) and the
rate-limit rejection raised by enforce_rate_limit. The presentation layer
maps them to HTTP responses in exception handlers.
"""

from typing import Any


class LiveCacheException(Exception):
    """Base exception for all livecache errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, key).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON error responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(LiveCacheException):
    """Raised when input validation fails (e.g. key component or TTL)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class RateLimitExceededException(LiveCacheException):
    """Raised when a caller exceeds a fixed-window rate limit policy."""

    def __init__(self, policy: str, limit: int, window_seconds: int) -> None:
        """Initialize with the policy that rejected the call.

        Args:
            policy: Name of the rate limit policy (e.g. "login").
            limit: Max requests allowed per window.
            window_seconds: Window length in seconds.
        """
        super().__init__(
            f"Too many requests for {policy}; try again later",
            "RATE_LIMIT_EXCEEDED",
            {"policy": policy, "limit": limit, "window_seconds": window_seconds},
        )
