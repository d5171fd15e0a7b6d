"""
Event Bus Port

Architectural Intent:
- Where a finished run hands over the events its Deployment recorded
- The orchestrator only publishes; subscribers are wired by the composition root
"""

from typing import Awaitable, Callable, Iterable, Protocol, runtime_checkable
from dockhand.domain.events.event_base import DomainEvent

EventHandler = Callable[[DomainEvent], Awaitable[None]]


@runtime_checkable
class EventBusPort(Protocol):
    async def publish(self, events: Iterable[DomainEvent]) -> None:
        """Deliver events in the order they were recorded."""
        ...
