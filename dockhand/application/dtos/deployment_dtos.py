"""
Deployment DTOs

Architectural Intent:
- Data Transfer Objects for use case boundaries
- DeploymentResult carries the terminal state and failure reason so callers
  and tests assert on state instead of parsing output or exit codes
"""

from dataclasses import dataclass, field
from typing import Optional
from dockhand.domain.entities.backup_record import BackupRecord
from dockhand.domain.entities.deployment import Deployment, DeploymentState

EXIT_SUCCESS = 0
EXIT_FAILURE = 1


@dataclass(frozen=True)
class DeploymentResult:
    state: DeploymentState
    reason: str = ""
    deployment_id: str = ""
    last_completed: Optional[DeploymentState] = None
    backup: Optional[BackupRecord] = None
    polls: int = 0
    verification: str = ""
    suggestion: str = ""
    events: tuple = field(default=(), repr=False, compare=False)

    @property
    def success(self) -> bool:
        return self.state.is_success

    @property
    def exit_code(self) -> int:
        return EXIT_SUCCESS if self.success else EXIT_FAILURE

    @classmethod
    def from_deployment(cls, deployment: Deployment, **extra) -> "DeploymentResult":
        return cls(
            state=deployment.state,
            reason=deployment.reason or "",
            deployment_id=deployment.deployment_id,
            last_completed=deployment.last_completed,
            backup=deployment.backup,
            events=deployment.domain_events,
            **extra,
        )
