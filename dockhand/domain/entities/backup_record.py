"""
Backup Record

Architectural Intent:
- Immutable, timestamped snapshot of the compose manifest taken before it
  is overwritten
- Ordering is explicit: (created_at, sequence). The newest record is the
  rollback target, independent of how the remote host lists files

Design Decisions:
- Timestamps have second granularity, as in the historical file names
  (docker-compose-backup-YYYYmmdd_HHMMSS.yml)
- Two backups in the same second get a numeric suffix (-1, -2, ...);
  a name without a suffix has sequence 0
- Records are never pruned
"""

from __future__ import annotations
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional

BACKUP_PREFIX = "docker-compose-backup-"
BACKUP_SUFFIX = ".yml"
TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"

_BACKUP_NAME_RE = re.compile(
    r"^docker-compose-backup-(?P<stamp>\d{8}_\d{6})(?:-(?P<seq>\d+))?\.yml$"
)


@dataclass(frozen=True, order=True)
class BackupRecord:
    created_at: datetime
    sequence: int = 0
    filename: str = field(default="", compare=False)

    def __post_init__(self) -> None:
        if self.sequence < 0:
            raise ValueError("Backup sequence cannot be negative")
        if self.created_at.microsecond:
            object.__setattr__(
                self, "created_at", self.created_at.replace(microsecond=0)
            )
        if not self.filename:
            object.__setattr__(self, "filename", self._format_name())

    def _format_name(self) -> str:
        stamp = self.created_at.strftime(TIMESTAMP_FORMAT)
        suffix = f"-{self.sequence}" if self.sequence else ""
        return f"{BACKUP_PREFIX}{stamp}{suffix}{BACKUP_SUFFIX}"

    @classmethod
    def parse(cls, filename: str) -> Optional["BackupRecord"]:
        """Builds a record from a file name; None if it is not a backup."""
        name = filename.strip().rsplit("/", 1)[-1]
        m = _BACKUP_NAME_RE.match(name)
        if not m:
            return None
        try:
            created_at = datetime.strptime(m.group("stamp"), TIMESTAMP_FORMAT)
        except ValueError:
            return None
        return cls(created_at=created_at, sequence=int(m.group("seq") or 0), filename=name)

    @classmethod
    def next_after(
        cls, existing: Iterable["BackupRecord"], now: datetime
    ) -> "BackupRecord":
        """A new record for `now` that sorts after every existing record
        sharing the same second."""
        stamp = now.replace(microsecond=0)
        taken = [r.sequence for r in existing if r.created_at == stamp]
        sequence = max(taken) + 1 if taken else 0
        return cls(created_at=stamp, sequence=sequence)

    def __str__(self) -> str:
        return self.filename


def most_recent(records: Iterable[BackupRecord]) -> Optional[BackupRecord]:
    """The rollback target, or None when there are no backups."""
    return max(records, default=None)


def parse_listing(names: Iterable[str]) -> list[BackupRecord]:
    """Parses a directory listing, skipping unrelated files, oldest first."""
    records = (BackupRecord.parse(n) for n in names if n.strip())
    return sorted(r for r in records if r is not None)
