"""
Deploy Release Use Case

Architectural Intent:
- Drives the Deployment aggregate through
  INIT -> VALIDATED -> DIR_READY -> BACKED_UP -> DESCRIPTOR_DEPLOYED
  -> RUNNING -> HEALTHY | UNHEALTHY, or ABORTED from any step
- Fatal failures abort the remaining sequence; tolerated failures (backup
  copy, stopping services, verification output) only log a warning
- Nothing is retried except the bounded health poll

Design Decisions:
- The manifest is uploaded to a temporary name inside the application
  directory and moved over the current one, so compose never reads a
  half-written file
- An unhealthy release is left running; rolling back is the operator's call
- No remote locking: at most one concurrent deploy per host is an
  operator-enforced rule
"""

import asyncio
import logging
import posixpath
from datetime import datetime
from typing import Callable, Optional
from dockhand.application.dtos.deployment_dtos import DeploymentResult
from dockhand.application.use_cases.validate_target import TargetServices, ValidateTarget
from dockhand.domain.entities.backup_record import BackupRecord
from dockhand.domain.entities.deployment import (
    Deployment,
    DeploymentMode,
    DeploymentState,
)
from dockhand.domain.errors import RemoteCommandError, TransferError
from dockhand.domain.ports.remote_channel_port import RemoteChannelPort
from dockhand.domain.services.health_polling import HealthPoller, Sleeper
from dockhand.domain.value_objects.deployment_config import (
    DeploymentConfig,
    MANIFEST_FILENAME,
)
from dockhand.domain.value_objects.remote_command import RemoteCommand

logger = logging.getLogger(__name__)

LOG_TAIL_LINES = 10


def rollback_hint(config: DeploymentConfig) -> str:
    return (
        f"dockhand {config.environment.value} --host {config.host} "
        f"--user {config.user} --port {config.port} "
        f"--app-dir {config.app_dir} --rollback"
    )


class DeployRelease:
    def __init__(
        self,
        channel: RemoteChannelPort,
        validate: ValidateTarget,
        clock: Callable[[], datetime] = datetime.now,
        sleep: Sleeper = asyncio.sleep,
    ):
        self.channel = channel
        self.validate = validate
        self.clock = clock
        self._sleep = sleep

    async def execute(self, config: DeploymentConfig) -> DeploymentResult:
        deployment = Deployment.start(DeploymentMode.DEPLOY, str(config.image), config.host)
        logger.info(
            "Deploying %s to %s (deployment %s)",
            config.image, config.host or "<unset>", deployment.deployment_id,
        )

        preflight = await self.validate.execute(config, require_template=True)
        if not preflight.ok:
            return DeploymentResult.from_deployment(deployment.abort(preflight.reason))
        deployment = deployment.advance(DeploymentState.VALIDATED)
        target = preflight.target

        prepared = await self.channel.run(
            target.node, RemoteCommand.of("mkdir", "-p", config.app_dir, config.backup_dir)
        )
        if not prepared.ok:
            return self._abort(
                deployment,
                f"Failed to create application directory {config.app_dir}: "
                f"{prepared.stderr.strip()}",
            )
        deployment = deployment.advance(DeploymentState.DIR_READY)

        backup = await self._backup_current(target)
        deployment = deployment.advance(DeploymentState.BACKED_UP, backup=backup)

        rendered = preflight.template.render(config.image)
        try:
            await self._upload_manifest(target, config, rendered, deployment.deployment_id)
        except TransferError as e:
            return self._abort(deployment, str(e))
        deployment = deployment.advance(DeploymentState.DESCRIPTOR_DEPLOYED)

        pulled = await target.backend.pull()
        if not pulled.ok:
            return self._abort(
                deployment,
                f"Failed to pull image {config.image}: {pulled.stderr.strip()}",
            )

        stopped = await target.backend.down()
        if not stopped.ok:
            logger.info("No running services stopped (%s)", stopped.stderr.strip())

        started = await target.backend.up()
        if not started.ok:
            return self._abort(
                deployment, f"Failed to start containers: {started.stderr.strip()}"
            )
        deployment = deployment.advance(DeploymentState.RUNNING)
        logger.info(
            "Waiting for %s to become healthy (up to %d checks every %ds)",
            config.application_url, config.max_health_polls, config.health_interval,
        )

        poller = HealthPoller(
            target.probe, config.health_timeout, config.health_interval, self._sleep
        )
        report = await poller.wait_until_healthy()
        if not report.healthy:
            deployment = deployment.mark_unhealthy(
                f"Health check failed after {config.health_timeout} seconds"
            )
            return DeploymentResult.from_deployment(
                deployment,
                polls=report.polls,
                suggestion=rollback_hint(config),
            )

        verification = await self._verify(target)
        deployment = deployment.advance(DeploymentState.HEALTHY)
        logger.info("Deployment %s is healthy", deployment.deployment_id)
        return DeploymentResult.from_deployment(
            deployment, polls=report.polls, verification=verification
        )

    def _abort(self, deployment: Deployment, reason: str) -> DeploymentResult:
        logger.error("Deployment aborted after %s: %s", deployment.state.value, reason)
        return DeploymentResult.from_deployment(deployment.abort(reason))

    async def _backup_current(self, target: TargetServices) -> Optional[BackupRecord]:
        if not await target.backups.manifest_exists():
            logger.info("No previous deployment to backup")
            return None
        try:
            return await target.backups.create_backup(self.clock())
        except RemoteCommandError as e:
            logger.warning("Failed to backup current manifest, continuing: %s", e)
            return None

    async def _upload_manifest(
        self,
        target: TargetServices,
        config: DeploymentConfig,
        content: str,
        deployment_id: str,
    ) -> None:
        staging = posixpath.join(
            config.app_dir, f".{MANIFEST_FILENAME}.{deployment_id}.tmp"
        )
        await self.channel.put(target.node, content, staging)
        moved = await self.channel.run(
            target.node, RemoteCommand.of("mv", "-f", staging, config.manifest_path)
        )
        if not moved.ok:
            raise TransferError(
                f"Failed to replace {config.manifest_path}: {moved.stderr.strip()}"
            )
        logger.info("Compose manifest deployed to %s", config.manifest_path)

    async def _verify(self, target: TargetServices) -> str:
        sections = []
        for title, result in (
            ("Running containers", await target.backend.ps()),
            ("Recent logs", await target.backend.logs(LOG_TAIL_LINES)),
        ):
            if result.ok:
                sections.append(f"{title}:\n{result.stdout.rstrip()}")
            else:
                logger.warning("%s unavailable: %s", title, result.stderr.strip())
        return "\n\n".join(sections)
