"""
Remote Backup Repository

Architectural Intent:
- BackupRepositoryPort over the remote filesystem layout:
    {app_dir}/docker-compose.yml            current manifest
    {app_dir}/backups/<backup file name>    historical manifests
- Ordering is computed from parsed BackupRecords, never from `ls -t`

Design Decisions:
- A missing backups directory lists as empty (first deploy, or rollback on
  a host that was never deployed by dockhand)
- Backups are never deleted
"""

import logging
import posixpath
from datetime import datetime
from dockhand.domain.entities.backup_record import BackupRecord, parse_listing
from dockhand.domain.errors import RemoteCommandError
from dockhand.domain.ports.remote_channel_port import RemoteChannelPort
from dockhand.domain.value_objects.deployment_config import (
    BACKUP_DIRNAME,
    MANIFEST_FILENAME,
)
from dockhand.domain.value_objects.node import Node
from dockhand.domain.value_objects.remote_command import RemoteCommand

logger = logging.getLogger(__name__)


class RemoteBackupRepository:
    def __init__(self, channel: RemoteChannelPort, node: Node, app_dir: str):
        self.channel = channel
        self.node = node
        self.app_dir = app_dir

    @property
    def manifest_path(self) -> str:
        return posixpath.join(self.app_dir, MANIFEST_FILENAME)

    @property
    def backup_dir(self) -> str:
        return posixpath.join(self.app_dir, BACKUP_DIRNAME)

    def backup_path(self, record: BackupRecord) -> str:
        return posixpath.join(self.backup_dir, record.filename)

    async def _run_checked(self, command: RemoteCommand) -> None:
        result = await self.channel.run(self.node, command)
        if not result.ok:
            raise RemoteCommandError(str(command), result.exit_code, result.stderr)

    async def manifest_exists(self) -> bool:
        result = await self.channel.run(
            self.node, RemoteCommand.of("test", "-f", self.manifest_path)
        )
        return result.ok

    async def list_backups(self) -> list[BackupRecord]:
        result = await self.channel.run(
            self.node, RemoteCommand.of("ls", "-1", self.backup_dir)
        )
        if not result.ok:
            logger.debug("No backup listing for %s: %s", self.backup_dir, result.stderr)
            return []
        return parse_listing(result.stdout.splitlines())

    async def create_backup(self, now: datetime) -> BackupRecord:
        record = BackupRecord.next_after(await self.list_backups(), now)
        await self._run_checked(
            RemoteCommand.of("cp", self.manifest_path, self.backup_path(record))
        )
        logger.info("Backup created: %s", record.filename)
        return record

    async def restore(self, record: BackupRecord) -> None:
        await self._run_checked(
            RemoteCommand.of("cp", self.backup_path(record), self.manifest_path)
        )
        logger.info("Restored %s from %s", self.manifest_path, record.filename)
