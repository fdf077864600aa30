"""OpenTelemetry tracing for the cache layer.

Built from Settings: telemetry_exporter picks the span exporter ("console"
for development, "otlp" for a collector on 4317, "none" to keep spans
in-process) and Redis commands are instrumented only when the cache is
enabled.
"""

import logging
import threading

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.redis import RedisInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SpanExporter,
)
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased

from livecache.core.config import Settings

logger = logging.getLogger(__name__)


class TelemetryConfig:
    """Tracer provider and Redis instrumentation driven by Settings."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.tracer_provider: TracerProvider | None = None
        self._redis_instrumented = False

    @property
    def enabled(self) -> bool:
        return self.settings.telemetry_enabled

    def _build_exporter(self) -> SpanExporter | None:
        """Exporter for settings.telemetry_exporter; None means no export."""
        kind = self.settings.telemetry_exporter
        endpoint = self.settings.telemetry_otlp_endpoint
        if kind == "none":
            return None
        if kind == "otlp":
            if endpoint:
                logger.info("Using OTLP span exporter: %s", endpoint)
                return OTLPSpanExporter(
                    endpoint=endpoint, insecure=endpoint.startswith("http://")
                )
            logger.warning("OTLP exporter selected without an endpoint, using console")
        elif kind != "console":
            logger.warning("Unknown exporter type '%s', using console", kind)
        return ConsoleSpanExporter()

    def setup_telemetry(self) -> TracerProvider | None:
        """Create the tracer provider and install it globally.

        Returns:
            TracerProvider, or None if telemetry is disabled or setup failed.
        """
        if not self.enabled:
            logger.info("Telemetry disabled")
            return None
        try:
            resource = Resource(
                attributes={
                    SERVICE_NAME: self.settings.app_name,
                    SERVICE_VERSION: self.settings.app_version,
                    "deployment.environment": self.settings.telemetry_environment,
                }
            )
            provider = TracerProvider(
                resource=resource,
                sampler=TraceIdRatioBased(self.settings.telemetry_sample_rate),
            )
            exporter = self._build_exporter()
            if exporter is not None:
                provider.add_span_processor(BatchSpanProcessor(exporter))
            trace.set_tracer_provider(provider)
        except Exception as e:
            logger.exception("Failed to initialize telemetry: %s", e)
            return None
        self.tracer_provider = provider
        logger.info(
            "OpenTelemetry initialized: service=%s, exporter=%s, sample_rate=%s",
            self.settings.app_name,
            self.settings.telemetry_exporter,
            self.settings.telemetry_sample_rate,
        )
        return provider

    def instrument_redis(self) -> None:
        """Trace every Redis command the cache sends (skipped when Redis is disabled)."""
        if self.tracer_provider is None or not self.settings.redis_enabled:
            return
        if self._redis_instrumented:
            return
        try:
            RedisInstrumentor().instrument(tracer_provider=self.tracer_provider)
        except Exception as e:
            logger.exception("Failed to instrument Redis: %s", e)
            return
        self._redis_instrumented = True
        logger.info("Redis instrumentation enabled")

    def shutdown(self) -> None:
        """Remove Redis instrumentation and flush remaining spans."""
        if self._redis_instrumented:
            RedisInstrumentor().uninstrument()
            self._redis_instrumented = False
        if self.tracer_provider is not None:
            try:
                self.tracer_provider.shutdown()
                logger.info("Telemetry shutdown complete")
            except Exception as e:
                logger.exception("Error during telemetry shutdown: %s", e)
            self.tracer_provider = None


_telemetry: TelemetryConfig | None = None
_telemetry_lock = threading.RLock()


def get_telemetry() -> TelemetryConfig | None:
    """Return the global telemetry instance (set at startup)."""
    with _telemetry_lock:
        return _telemetry


def set_telemetry(telemetry: TelemetryConfig | None) -> None:
    """Set (or clear, with None) the global telemetry instance."""
    global _telemetry
    with _telemetry_lock:
        _telemetry = telemetry
