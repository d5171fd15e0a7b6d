"""
Deployment Orchestrator

Architectural Intent:
- The single entry point: run(config) selects Deploy or Rollback
- Publishes the domain events recorded during the run
- Wraps the run in a tracing span when a tracer is configured
"""

import logging
from contextlib import nullcontext
from typing import Any, Optional
from dockhand.application.dtos.deployment_dtos import DeploymentResult
from dockhand.application.use_cases.deploy_release import DeployRelease
from dockhand.application.use_cases.rollback_release import RollbackRelease
from dockhand.domain.ports.event_bus_port import EventBusPort
from dockhand.domain.value_objects.deployment_config import DeploymentConfig

logger = logging.getLogger(__name__)


class DeploymentOrchestrator:
    def __init__(
        self,
        deploy: DeployRelease,
        rollback: RollbackRelease,
        event_bus: Optional[EventBusPort] = None,
        tracer: Optional[Any] = None,
    ):
        self.deploy = deploy
        self.rollback = rollback
        self.event_bus = event_bus
        self.tracer = tracer

    async def run(self, config: DeploymentConfig) -> DeploymentResult:
        mode = "rollback" if config.rollback else "deploy"
        use_case = self.rollback if config.rollback else self.deploy
        span = (
            self.tracer.span(
                f"dockhand.{mode}",
                {
                    "environment": config.environment.value,
                    "image": str(config.image),
                    "host": config.host,
                },
            )
            if self.tracer is not None
            else nullcontext()
        )

        with span:
            result = await use_case.execute(config)

        if self.event_bus is not None:
            await self.event_bus.publish(list(result.events))
        if self.tracer is not None:
            self.tracer.record_outcome(mode, result.state.value, config.environment.value)

        logger.info("%s finished in state %s", mode.capitalize(), result.state.value)
        return result
