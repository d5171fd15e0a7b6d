"""Base class for the events a Deployment records while it runs."""

from dataclasses import asdict, dataclass, field
from datetime import datetime, UTC
from typing import Any


def _utc_now() -> str:
    return datetime.now(UTC).isoformat(timespec="seconds")


@dataclass(frozen=True)
class DomainEvent:
    occurred_at: str = field(default_factory=_utc_now, init=False, repr=False)
    aggregate_id: str = ""

    @property
    def event_type(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict[str, Any]:
        """Flat payload: the event type followed by every field."""
        return {"event_type": self.event_type, **asdict(self)}
