"""
OpenTelemetry Tracing for dockhand

Architectural Intent:
- Exports one span per deploy or rollback run, plus an outcome counter, to an
  OTLP-compatible backend (Jaeger, Tempo, Datadog, ...)
- Completely inert unless an endpoint is configured
- The SDK is imported lazily so the CLI starts without it installed

Security:
- Endpoint defaults to empty string (must be explicitly configured)
- Clear-text http:// endpoints are rejected unless local or insecure is set
"""

from __future__ import annotations
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator, Optional
from urllib.parse import urlparse
import logging
from dockhand.domain.errors import ConfigurationError

logger = logging.getLogger(__name__)

_LOCAL_HOSTS = ("localhost", "127.0.0.1", "::1")


@dataclass
class TracingConfig:
    endpoint: str = ""
    service_name: str = "dockhand"
    environment: str = "dev"
    insecure: bool = False

    def __post_init__(self) -> None:
        if not self.endpoint or self.insecure:
            return
        parsed = urlparse(self.endpoint)
        if parsed.scheme == "http" and parsed.hostname not in _LOCAL_HOSTS:
            raise ConfigurationError(
                f"Telemetry endpoint {self.endpoint} sends traces in clear text; "
                "use https:// or set telemetry.insecure"
            )


class DeploymentTracer:
    def __init__(self, config: TracingConfig):
        self.config = config
        self._initialized = False
        self._tracer: Any = None
        self._provider: Any = None
        self._outcomes: Any = None
        self.recorded_outcomes: list[dict[str, str]] = []

    @property
    def enabled(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """Initialize the OpenTelemetry SDK and OTLP exporters."""
        if not self.config.endpoint:
            logger.debug("OTEL endpoint not configured, tracing disabled")
            return

        try:
            from opentelemetry import metrics, trace
            from opentelemetry.sdk.trace import TracerProvider
            from opentelemetry.sdk.trace.export import BatchSpanProcessor
            from opentelemetry.sdk.resources import Resource, SERVICE_NAME
            from opentelemetry.sdk.metrics import MeterProvider
            from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
            from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (
                OTLPSpanExporter,
            )
            from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import (
                OTLPMetricExporter,
            )
        except ImportError:
            logger.warning("OpenTelemetry SDK not installed, tracing disabled")
            return

        resource = Resource(
            attributes={
                SERVICE_NAME: self.config.service_name,
                "environment": self.config.environment,
            }
        )
        try:
            self._provider = TracerProvider(resource=resource)
            self._provider.add_span_processor(
                BatchSpanProcessor(
                    OTLPSpanExporter(
                        endpoint=self.config.endpoint, insecure=self.config.insecure
                    )
                )
            )
            trace.set_tracer_provider(self._provider)
            self._tracer = trace.get_tracer(__name__)

            reader = PeriodicExportingMetricReader(
                OTLPMetricExporter(
                    endpoint=self.config.endpoint, insecure=self.config.insecure
                )
            )
            metrics.set_meter_provider(
                MeterProvider(resource=resource, metric_readers=[reader])
            )
            self._outcomes = metrics.get_meter(__name__).create_counter(
                "dockhand.deployment.outcomes",
                description="Finished deploy and rollback runs by terminal state",
            )
            self._initialized = True
        except Exception as e:
            logger.error("Failed to initialize OTEL: %s", e)
            self._initialized = False

    @contextmanager
    def span(
        self, name: str, attributes: Optional[dict[str, str]] = None
    ) -> Iterator[Optional[Any]]:
        """Runs the enclosed block inside a span; yields None when disabled."""
        if not self._initialized:
            yield None
            return
        with self._tracer.start_as_current_span(
            name, attributes=attributes or {}
        ) as span:
            yield span

    def record_outcome(self, mode: str, state: str, environment: str) -> None:
        attributes = {"mode": mode, "state": state, "environment": environment}
        self.recorded_outcomes.append(attributes)
        if self._initialized and self._outcomes is not None:
            self._outcomes.add(1, attributes=attributes)

    def shutdown(self) -> None:
        """Flush pending spans; the CLI process exits right after a run."""
        if self._provider is not None:
            self._provider.shutdown()
