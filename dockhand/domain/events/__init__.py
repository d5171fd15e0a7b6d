"""
Domain Events Package

Architectural Intent:
- Immutable records of deployment progress
- Recorded on the Deployment aggregate, published through the event bus
"""

from dockhand.domain.events.event_base import DomainEvent
from dockhand.domain.events.deployment_events import (
    DeploymentStartedEvent,
    DeploymentStepEvent,
    DeploymentSucceededEvent,
    DeploymentFailedEvent,
    DeploymentRolledBackEvent,
)

__all__ = [
    "DomainEvent",
    "DeploymentStartedEvent",
    "DeploymentStepEvent",
    "DeploymentSucceededEvent",
    "DeploymentFailedEvent",
    "DeploymentRolledBackEvent",
]
