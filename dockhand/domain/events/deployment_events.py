from dataclasses import dataclass
from dockhand.domain.events.event_base import DomainEvent


@dataclass(frozen=True)
class DeploymentStartedEvent(DomainEvent):
    mode: str = ""
    image: str = ""
    host: str = ""


@dataclass(frozen=True)
class DeploymentStepEvent(DomainEvent):
    """A non-terminal state was reached."""
    state: str = ""


@dataclass(frozen=True)
class DeploymentSucceededEvent(DomainEvent):
    state: str = ""


@dataclass(frozen=True)
class DeploymentFailedEvent(DomainEvent):
    state: str = ""
    last_completed: str = ""
    reason: str = ""


@dataclass(frozen=True)
class DeploymentRolledBackEvent(DomainEvent):
    backup: str = ""
