from typing import Protocol, runtime_checkable


@runtime_checkable
class HealthProbePort(Protocol):
    """Single health probe of the deployed application."""

    async def check(self) -> bool: ...
