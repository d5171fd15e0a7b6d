"""
Backup Repository Port

Architectural Intent:
- Access to the current manifest and its backups on the remote filesystem
- The repository only references remote files; nothing is cached locally
"""

from datetime import datetime
from typing import Protocol, runtime_checkable
from dockhand.domain.entities.backup_record import BackupRecord


@runtime_checkable
class BackupRepositoryPort(Protocol):
    async def manifest_exists(self) -> bool: ...

    async def list_backups(self) -> list[BackupRecord]:
        """All parseable backups, oldest first."""
        ...

    async def create_backup(self, now: datetime) -> BackupRecord:
        """Copies the current manifest into a new record. Raises RemoteCommandError."""
        ...

    async def restore(self, record: BackupRecord) -> None:
        """Copies `record` over the current manifest. Raises RemoteCommandError."""
        ...
