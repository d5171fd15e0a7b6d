"""
Event Bus Infrastructure

Architectural Intent:
- In-memory EventBusPort; handlers run in subscription order, one event at a time
- Handlers are matched along the event's class hierarchy, so a DomainEvent
  subscriber sees every deployment event
"""

import logging
from collections import defaultdict
from typing import Iterable
from dockhand.domain.events.event_base import DomainEvent
from dockhand.domain.ports.event_bus_port import EventHandler

logger = logging.getLogger(__name__)


class EventBus:
    def __init__(self) -> None:
        self._handlers: defaultdict[type, list[EventHandler]] = defaultdict(list)

    def subscribe(self, event_type: type, handler: EventHandler) -> None:
        self._handlers[event_type].append(handler)

    def handlers_for(self, event: DomainEvent) -> list[EventHandler]:
        return [
            handler
            for cls in type(event).__mro__
            for handler in self._handlers.get(cls, ())
        ]

    async def publish(self, events: Iterable[DomainEvent]) -> None:
        for event in events:
            for handler in self.handlers_for(event):
                await handler(event)


def audit_logger(name: str = "dockhand.audit") -> EventHandler:
    """Handler writing one line per deployment event to the audit log."""
    audit = logging.getLogger(name)

    async def handle(event: DomainEvent) -> None:
        payload = event.to_dict()
        event_type = payload.pop("event_type")
        payload.pop("aggregate_id")
        fields = " ".join(f"{k}={v}" for k, v in sorted(payload.items()) if v != "")
        audit.info(
            "%s %s", event_type, fields, extra={"deployment_id": event.aggregate_id}
        )

    return handle
