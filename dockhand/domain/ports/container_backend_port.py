"""
Container Backend Port

Architectural Intent:
- Abstract interface for the remote Container Orchestration Backend
- Operates on the compose manifest in the application directory
- Reachable only through the remote channel; adapters never run locally

Design Decisions:
- Uses Protocol for structural typing (no inheritance needed)
- Lifecycle methods return CommandResult so callers decide between fatal
  and tolerated failures
"""

from typing import Protocol, runtime_checkable
from dockhand.domain.value_objects.remote_command import CommandResult


@runtime_checkable
class ContainerBackendPort(Protocol):
    async def is_installed(self) -> bool: ...

    async def pull(self) -> CommandResult: ...

    async def down(self) -> CommandResult: ...

    async def up(self) -> CommandResult: ...

    async def ps(self) -> CommandResult: ...

    async def logs(self, tail: int = 10) -> CommandResult: ...
