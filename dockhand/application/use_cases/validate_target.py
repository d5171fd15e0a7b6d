"""
Validate Target Use Case

Architectural Intent:
- Runs every precondition of a deploy or rollback before anything is changed
- Issues read-only remote commands only (echo, command -v); a failure here
  guarantees the host was not touched
- Binds the node-specific adapters once the node is known

Checks, in order:
1. a remote execution capability exists on this machine
2. a server host is configured
3. the manifest template is readable and has its placeholder (deploy only)
4. a trial command succeeds within the connect timeout
5. the container backend is installed on the host
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Tuple
from dockhand.domain.entities.manifest_template import ManifestTemplate
from dockhand.domain.errors import ConfigurationError, ManifestError, PreconditionError
from dockhand.domain.ports.backup_repository_port import BackupRepositoryPort
from dockhand.domain.ports.container_backend_port import ContainerBackendPort
from dockhand.domain.ports.health_probe_port import HealthProbePort
from dockhand.domain.ports.remote_channel_port import RemoteChannelPort
from dockhand.domain.value_objects.deployment_config import DeploymentConfig
from dockhand.domain.value_objects.node import Node
from dockhand.domain.value_objects.remote_command import RemoteCommand

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TargetServices:
    """Adapters bound to one node and application directory."""
    node: Node
    backend: ContainerBackendPort
    backups: BackupRepositoryPort
    probe: HealthProbePort


BindTarget = Callable[[DeploymentConfig, Node], TargetServices]


@dataclass(frozen=True)
class Preflight:
    ok: bool
    reason: str = ""
    target: Optional[TargetServices] = None
    template: Optional[ManifestTemplate] = None

    @classmethod
    def failed(cls, reason: str) -> "Preflight":
        logger.error("Precondition failed: %s", reason)
        return cls(ok=False, reason=reason)


class ValidateTarget:
    def __init__(self, channel: RemoteChannelPort, bind_target: BindTarget):
        self.channel = channel
        self.bind_target = bind_target

    async def execute(
        self, config: DeploymentConfig, require_template: bool = True
    ) -> Preflight:
        logger.info("Validating prerequisites...")
        try:
            target, template = await self.check(config, require_template)
        except PreconditionError as e:
            return Preflight.failed(str(e))
        logger.info("Prerequisites satisfied for %s", target.node)
        return Preflight(ok=True, target=target, template=template)

    async def check(
        self, config: DeploymentConfig, require_template: bool = True
    ) -> Tuple[TargetServices, Optional[ManifestTemplate]]:
        """Runs every check in order, raising PreconditionError on the first failure."""
        if not self.channel.is_available():
            raise PreconditionError(
                "No SSH capability available (missing ssh client or credentials)"
            )

        try:
            node = config.node()
        except ConfigurationError as e:
            raise PreconditionError(str(e)) from e

        template = None
        if require_template:
            try:
                template = ManifestTemplate.load(config.manifest_template)
            except ManifestError as e:
                raise PreconditionError(str(e)) from e

        logger.info("Testing SSH connection to %s...", node)
        trial = await self.channel.run(
            node, RemoteCommand.of("echo", "ok"), timeout=config.connect_timeout
        )
        if not trial.ok:
            raise PreconditionError(
                f"Cannot connect to server {node}. Check host, user, and port"
            )

        target = self.bind_target(config, node)
        logger.info("Checking Docker on remote server...")
        if not await target.backend.is_installed():
            raise PreconditionError(f"Docker is not installed on {node.host}")
        return target, template
