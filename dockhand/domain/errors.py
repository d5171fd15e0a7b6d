"""
Domain Errors

Architectural Intent:
- Single exception hierarchy for every failure dockhand can report
- Use cases translate fatal errors into terminal deployment states
- Only the CLI maps errors to process exit codes
"""


class DockhandError(Exception):
    """Base class for all dockhand errors."""


class ConfigurationError(DockhandError):
    """Invalid or incomplete deployment configuration."""


class PreconditionError(DockhandError):
    """A pre-deployment check failed; nothing was changed on the host."""


class RemoteCommandError(DockhandError):
    """A command on the remote host exited non-zero or could not run."""

    def __init__(self, command: str, exit_code: int = -1, stderr: str = "") -> None:
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr
        detail = f": {stderr.strip()}" if stderr and stderr.strip() else ""
        super().__init__(f"Remote command failed ({exit_code}) `{command}`{detail}")


class TransferError(DockhandError):
    """Uploading a file to the remote host failed."""


class ManifestError(DockhandError):
    """The compose manifest template is missing or malformed."""


class InvalidTransition(DockhandError):
    """A deployment was asked to move to a state it cannot reach."""
