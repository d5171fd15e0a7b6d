"""
Deployment Module

Architectural Intent:
- Deployment aggregate is the consistency boundary for one deploy or rollback run
- Lifecycle is a state machine; transitions are enforced by domain methods
- All state changes produce new instances to ensure auditability
- Terminal states (ABORTED, HEALTHY, UNHEALTHY, ROLLED_BACK) replace the
  exit-on-error flow of shell scripts, so callers assert on state

Domain Events:
- DeploymentStartedEvent: recorded when the aggregate is created via start()
- DeploymentStepEvent: each non-terminal state reached
- DeploymentSucceededEvent / DeploymentRolledBackEvent: successful terminal state
- DeploymentFailedEvent: ABORTED or UNHEALTHY
"""

from __future__ import annotations
import uuid
from enum import Enum
from typing import Optional
from dockhand.domain.errors import InvalidTransition
from dockhand.domain.entities.backup_record import BackupRecord
from dockhand.domain.events.deployment_events import (
    DeploymentStartedEvent,
    DeploymentStepEvent,
    DeploymentSucceededEvent,
    DeploymentFailedEvent,
    DeploymentRolledBackEvent,
)


class DeploymentMode(Enum):
    DEPLOY = "deploy"
    ROLLBACK = "rollback"


class DeploymentState(Enum):
    INIT = "init"
    VALIDATED = "validated"
    DIR_READY = "dir_ready"
    BACKED_UP = "backed_up"
    DESCRIPTOR_DEPLOYED = "descriptor_deployed"
    RUNNING = "running"
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    BACKUP_LOCATED = "backup_located"
    RESTORED = "restored"
    ROLLED_BACK = "rolled_back"
    ABORTED = "aborted"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES

    @property
    def is_success(self) -> bool:
        return self in (DeploymentState.HEALTHY, DeploymentState.ROLLED_BACK)


TERMINAL_STATES = frozenset({
    DeploymentState.HEALTHY,
    DeploymentState.UNHEALTHY,
    DeploymentState.ROLLED_BACK,
    DeploymentState.ABORTED,
})

_S = DeploymentState

# ABORTED is reachable from every non-terminal state via abort()
TRANSITIONS: dict[DeploymentMode, dict[DeploymentState, frozenset]] = {
    DeploymentMode.DEPLOY: {
        _S.INIT: frozenset({_S.VALIDATED}),
        _S.VALIDATED: frozenset({_S.DIR_READY}),
        _S.DIR_READY: frozenset({_S.BACKED_UP}),
        _S.BACKED_UP: frozenset({_S.DESCRIPTOR_DEPLOYED}),
        _S.DESCRIPTOR_DEPLOYED: frozenset({_S.RUNNING}),
        _S.RUNNING: frozenset({_S.HEALTHY, _S.UNHEALTHY}),
    },
    DeploymentMode.ROLLBACK: {
        _S.INIT: frozenset({_S.VALIDATED}),
        _S.VALIDATED: frozenset({_S.BACKUP_LOCATED}),
        _S.BACKUP_LOCATED: frozenset({_S.RESTORED}),
        _S.RESTORED: frozenset({_S.ROLLED_BACK}),
    },
}


class Deployment:
    __slots__ = (
        "_deployment_id",
        "_mode",
        "_image",
        "_host",
        "_state",
        "_history",
        "_reason",
        "_backup",
        "_domain_events",
    )

    def __init__(
        self,
        deployment_id: str,
        mode: DeploymentMode,
        image: str,
        host: str,
        state: DeploymentState = DeploymentState.INIT,
        history: tuple = (DeploymentState.INIT,),
        reason: Optional[str] = None,
        backup: Optional[BackupRecord] = None,
        domain_events: tuple = (),
    ):
        self._deployment_id = deployment_id
        self._mode = mode
        self._image = image
        self._host = host
        self._state = state
        self._history = history
        self._reason = reason
        self._backup = backup
        self._domain_events = domain_events

    @classmethod
    def start(cls, mode: DeploymentMode, image: str, host: str) -> "Deployment":
        deployment_id = uuid.uuid4().hex[:12]
        return cls(
            deployment_id=deployment_id,
            mode=mode,
            image=image,
            host=host,
            domain_events=(
                DeploymentStartedEvent(
                    aggregate_id=deployment_id,
                    mode=mode.value,
                    image=image,
                    host=host,
                ),
            ),
        )

    @property
    def deployment_id(self) -> str:
        return self._deployment_id

    @property
    def mode(self) -> DeploymentMode:
        return self._mode

    @property
    def image(self) -> str:
        return self._image

    @property
    def host(self) -> str:
        return self._host

    @property
    def state(self) -> DeploymentState:
        return self._state

    @property
    def history(self) -> tuple:
        return self._history

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    @property
    def backup(self) -> Optional[BackupRecord]:
        return self._backup

    @property
    def domain_events(self) -> tuple:
        return self._domain_events

    @property
    def is_finished(self) -> bool:
        return self._state.is_terminal

    @property
    def last_completed(self) -> DeploymentState:
        """Last non-ABORTED state reached; where an interrupted run left the host."""
        for state in reversed(self._history):
            if state is not DeploymentState.ABORTED:
                return state
        return DeploymentState.INIT

    def _evolve(self, state: DeploymentState, event, **changes) -> "Deployment":
        return Deployment(
            deployment_id=self._deployment_id,
            mode=self._mode,
            image=self._image,
            host=self._host,
            state=state,
            history=self._history + (state,),
            reason=changes.get("reason", self._reason),
            backup=changes.get("backup", self._backup),
            domain_events=self._domain_events + (event,),
        )

    def advance(
        self, state: DeploymentState, backup: Optional[BackupRecord] = None
    ) -> "Deployment":
        allowed = TRANSITIONS[self._mode].get(self._state, frozenset())
        if state not in allowed:
            raise InvalidTransition(
                f"{self._mode.value} cannot move from {self._state.value} to {state.value}"
            )
        if state is DeploymentState.UNHEALTHY:
            raise InvalidTransition("Use mark_unhealthy() to record a failed health check")

        changes = {"backup": backup} if backup is not None else {}
        if state is DeploymentState.ROLLED_BACK:
            event = DeploymentRolledBackEvent(
                aggregate_id=self._deployment_id,
                backup=self._backup.filename if self._backup else "",
            )
        elif state.is_terminal:
            event = DeploymentSucceededEvent(
                aggregate_id=self._deployment_id, state=state.value
            )
        else:
            event = DeploymentStepEvent(
                aggregate_id=self._deployment_id, state=state.value
            )
        return self._evolve(state, event, **changes)

    def mark_unhealthy(self, reason: str) -> "Deployment":
        if self._state is not DeploymentState.RUNNING:
            raise InvalidTransition("Deployment must be RUNNING to fail its health check")
        return self._fail(DeploymentState.UNHEALTHY, reason)

    def abort(self, reason: str) -> "Deployment":
        if self._state.is_terminal:
            raise InvalidTransition(
                f"Deployment already finished in state {self._state.value}"
            )
        return self._fail(DeploymentState.ABORTED, reason)

    def _fail(self, state: DeploymentState, reason: str) -> "Deployment":
        return self._evolve(
            state,
            DeploymentFailedEvent(
                aggregate_id=self._deployment_id,
                state=state.value,
                last_completed=self._state.value,
                reason=reason,
            ),
            reason=reason,
        )

    def __repr__(self) -> str:
        return (
            f"Deployment(id={self._deployment_id}, mode={self._mode.value}, "
            f"image={self._image}, host={self._host}, state={self._state.value}, "
            f"reason={self._reason})"
        )
