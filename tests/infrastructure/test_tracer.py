"""Tests for the OpenTelemetry deployment tracer."""

from unittest.mock import MagicMock

import pytest

from dockhand.domain.errors import ConfigurationError
from dockhand.infrastructure.telemetry import DeploymentTracer, TracingConfig


class TestTracingConfig:
    def test_defaults(self):
        config = TracingConfig()
        assert config.endpoint == ""
        assert config.service_name == "dockhand"

    def test_localhost_http_allowed(self):
        assert TracingConfig(endpoint="http://localhost:4317").endpoint

    def test_remote_http_rejected(self):
        with pytest.raises(ConfigurationError, match="insecure"):
            TracingConfig(endpoint="http://collector.example.com:4317")

    def test_remote_http_with_insecure(self):
        assert TracingConfig(endpoint="http://collector.example.com:4317", insecure=True)


class TestDeploymentTracer:
    @pytest.mark.asyncio
    async def test_disabled_without_endpoint(self):
        tracer = DeploymentTracer(TracingConfig())
        await tracer.initialize()
        assert not tracer.enabled

    def test_span_is_noop_when_disabled(self):
        tracer = DeploymentTracer(TracingConfig())
        with tracer.span("dockhand.deploy", {"host": "10.0.0.5"}) as span:
            assert span is None

    def test_record_outcome_when_disabled(self):
        tracer = DeploymentTracer(TracingConfig())
        tracer.record_outcome("deploy", "healthy", "prod")
        assert tracer.recorded_outcomes == [
            {"mode": "deploy", "state": "healthy", "environment": "prod"}
        ]

    def test_shutdown_without_initialize(self):
        DeploymentTracer(TracingConfig()).shutdown()

    def test_enabled_span_and_counter(self):
        tracer = DeploymentTracer(TracingConfig(endpoint="http://localhost:4317"))
        tracer._initialized = True
        tracer._tracer = MagicMock()
        tracer._outcomes = MagicMock()

        with tracer.span("dockhand.deploy", {"host": "10.0.0.5"}):
            pass
        tracer.record_outcome("deploy", "unhealthy", "prod")

        tracer._tracer.start_as_current_span.assert_called_once_with(
            "dockhand.deploy", attributes={"host": "10.0.0.5"}
        )
        tracer._outcomes.add.assert_called_once_with(
            1, attributes={"mode": "deploy", "state": "unhealthy", "environment": "prod"}
        )
