"""
Rollback Release Use Case

Architectural Intent:
- Restores the most recent manifest backup and restarts the services
- INIT -> VALIDATED -> BACKUP_LOCATED -> RESTORED -> ROLLED_BACK, or ABORTED
- Backups are read, never removed, so a rollback can be repeated
"""

import logging
from dockhand.application.dtos.deployment_dtos import DeploymentResult
from dockhand.application.use_cases.validate_target import ValidateTarget
from dockhand.domain.entities.backup_record import most_recent
from dockhand.domain.entities.deployment import (
    Deployment,
    DeploymentMode,
    DeploymentState,
)
from dockhand.domain.errors import RemoteCommandError
from dockhand.domain.value_objects.deployment_config import DeploymentConfig

logger = logging.getLogger(__name__)


class RollbackRelease:
    def __init__(self, validate: ValidateTarget):
        self.validate = validate

    async def execute(self, config: DeploymentConfig) -> DeploymentResult:
        deployment = Deployment.start(DeploymentMode.ROLLBACK, str(config.image), config.host)
        logger.warning("Rolling back to previous deployment on %s", config.host or "<unset>")

        preflight = await self.validate.execute(config, require_template=False)
        if not preflight.ok:
            return DeploymentResult.from_deployment(deployment.abort(preflight.reason))
        deployment = deployment.advance(DeploymentState.VALIDATED)
        target = preflight.target

        record = most_recent(await target.backups.list_backups())
        if record is None:
            return self._abort(
                deployment, f"No backup found in {config.backup_dir}: nothing to roll back to"
            )
        deployment = deployment.advance(DeploymentState.BACKUP_LOCATED, backup=record)
        logger.info("Restoring from: %s", record.filename)

        try:
            await target.backups.restore(record)
        except RemoteCommandError as e:
            return self._abort(deployment, f"Failed to restore backup: {e}")
        deployment = deployment.advance(DeploymentState.RESTORED)

        stopped = await target.backend.down()
        if not stopped.ok:
            logger.info("No running services stopped (%s)", stopped.stderr.strip())

        started = await target.backend.up()
        if not started.ok:
            return self._abort(
                deployment, f"Failed to restart containers: {started.stderr.strip()}"
            )

        deployment = deployment.advance(DeploymentState.ROLLED_BACK)
        logger.info("Rollback completed successfully")
        return DeploymentResult.from_deployment(deployment)

    def _abort(self, deployment: Deployment, reason: str) -> DeploymentResult:
        logger.error("Rollback aborted after %s: %s", deployment.state.value, reason)
        return DeploymentResult.from_deployment(deployment.abort(reason))
