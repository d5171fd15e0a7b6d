"""
dockhand Telemetry Infrastructure

Architectural Intent:
- OpenTelemetry tracing of deploy and rollback runs
- Disabled unless an OTLP endpoint is configured
"""

from dockhand.infrastructure.telemetry.tracer import (
    DeploymentTracer,
    TracingConfig,
)

__all__ = [
    "DeploymentTracer",
    "TracingConfig",
]
