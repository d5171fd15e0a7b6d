"""
Remote Command Value Object

Architectural Intent:
- Typed request sent over the remote execution channel
- Every argument is quoted with shlex.quote() when rendered, so hosts,
  directories and tags never reach the remote shell unescaped
- Commands compare by value, which keeps channel fakes simple in tests
"""

import shlex
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RemoteCommand:
    argv: tuple[str, ...]
    cwd: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.argv:
            raise ValueError("RemoteCommand needs at least a program name")
        if any(not isinstance(arg, str) for arg in self.argv):
            raise TypeError("RemoteCommand arguments must be strings")

    @classmethod
    def of(cls, *argv: str, cwd: Optional[str] = None) -> "RemoteCommand":
        return cls(argv=tuple(argv), cwd=cwd)

    @property
    def program(self) -> str:
        return self.argv[0]

    def render(self) -> str:
        """Shell-safe string for the remote login shell."""
        line = " ".join(shlex.quote(arg) for arg in self.argv)
        if self.cwd:
            return f"cd {shlex.quote(self.cwd)} && {line}"
        return line

    def __str__(self) -> str:
        return self.render()


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one remote command."""
    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0
