"""Shared telemetry: logging setup, OpenTelemetry config, and tracing helpers."""

from livecache.shared.telemetry.logging import setup_logging
from livecache.shared.telemetry.telemetry import (
    TelemetryConfig,
    get_telemetry,
    set_telemetry,
)
from livecache.shared.telemetry.tracing import (
    add_span_event,
    traced,
)

__all__ = [
    "setup_logging",
    "TelemetryConfig",
    "get_telemetry",
    "set_telemetry",
    "traced",
    "add_span_event",
]
