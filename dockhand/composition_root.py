"""
Composition Root

Architectural Intent:
- Dependency injection composition root for the dockhand application
- Single place where all adapters and use cases are wired together
- No adapter instantiation should occur outside this module

Design Decisions:
- Uses a simple dataclass container instead of a DI framework
- Node-specific adapters are bound lazily by ValidateTarget, once the
  configured host has been checked
- Channel, clock and sleep can be injected, which is how tests run the
  real use cases against a fake remote host
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional
from dockhand.application.use_cases.deploy_release import DeployRelease
from dockhand.application.use_cases.orchestrate_deployment import DeploymentOrchestrator
from dockhand.application.use_cases.rollback_release import RollbackRelease
from dockhand.application.use_cases.validate_target import TargetServices, ValidateTarget
from dockhand.domain.events.event_base import DomainEvent
from dockhand.domain.ports.remote_channel_port import RemoteChannelPort
from dockhand.domain.services.health_polling import Sleeper
from dockhand.domain.value_objects.deployment_config import DeploymentConfig
from dockhand.domain.value_objects.node import Node
from dockhand.infrastructure.adapters.compose_backend import DockerComposeBackend
from dockhand.infrastructure.adapters.fabric_channel import FabricChannel
from dockhand.infrastructure.adapters.openssh_channel import OpenSshChannel
from dockhand.infrastructure.adapters.remote_http_probe import RemoteHttpProbe
from dockhand.infrastructure.event_bus import EventBus, audit_logger
from dockhand.infrastructure.repositories.remote_backup_repository import (
    RemoteBackupRepository,
)
from dockhand.infrastructure.telemetry.tracer import DeploymentTracer, TracingConfig


@dataclass
class DockhandContainer:
    """DI container holding all wired dependencies."""

    channel: RemoteChannelPort
    event_bus: EventBus
    tracer: DeploymentTracer
    validate: ValidateTarget
    deploy: DeployRelease
    rollback: RollbackRelease
    orchestrator: DeploymentOrchestrator


def create_channel(config: DeploymentConfig) -> RemoteChannelPort:
    if config.channel == "openssh":
        return OpenSshChannel(key_filename=config.key_filename)
    return FabricChannel(key_filename=config.key_filename)


def bind_target(channel: RemoteChannelPort) -> Callable[[DeploymentConfig, Node], TargetServices]:
    def bind(config: DeploymentConfig, node: Node) -> TargetServices:
        return TargetServices(
            node=node,
            backend=DockerComposeBackend(
                channel, node, config.app_dir, config.compose_command
            ),
            backups=RemoteBackupRepository(channel, node, config.app_dir),
            probe=RemoteHttpProbe(channel, node, config.health_url),
        )

    return bind


def create_container(
    config: DeploymentConfig,
    channel: Optional[RemoteChannelPort] = None,
    tracing: Optional[TracingConfig] = None,
    clock: Callable[[], datetime] = datetime.now,
    sleep: Sleeper = asyncio.sleep,
) -> DockhandContainer:
    """Create and wire all dependencies for one run."""
    channel = channel or create_channel(config)
    event_bus = EventBus()
    event_bus.subscribe(DomainEvent, audit_logger())
    tracer = DeploymentTracer(
        tracing or TracingConfig(environment=config.environment.value)
    )

    validate = ValidateTarget(channel, bind_target(channel))
    deploy = DeployRelease(channel, validate, clock=clock, sleep=sleep)
    rollback = RollbackRelease(validate)
    orchestrator = DeploymentOrchestrator(deploy, rollback, event_bus, tracer)

    return DockhandContainer(
        channel=channel,
        event_bus=event_bus,
        tracer=tracer,
        validate=validate,
        deploy=deploy,
        rollback=rollback,
        orchestrator=orchestrator,
    )
