"""
Backup manager — timestamped copies taken before destructive writes.

A backup of ``PATH`` lives next to it as ``PATH.bak.YYYYmmddHHMMSS``
(files and directories alike). Backups are never pruned; uninstall
restores the newest one and leaves it in place.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from cybex.adapters.shell.filesystem import LocalFilesystem
from cybex.core.models.backup import BackupRecord

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"
_SUFFIX = ".bak."
_STAMP_RE = re.compile(r"^\d{14}$")


def backup_path_for(path: Path, when: datetime) -> Path:
    """Where a backup of ``path`` taken at ``when`` goes."""
    return path.with_name(f"{path.name}{_SUFFIX}{when.strftime(TIMESTAMP_FORMAT)}")


class BackupManager:
    """Create, find and restore backups through a filesystem adapter.

    Args:
        fs: Filesystem used for copies (pass the privileged one for
            system paths).
        clock: Returns the current time; injectable for tests.
    """

    def __init__(self, fs: LocalFilesystem, clock: Callable[[], datetime] | None = None):
        self._fs = fs
        self._clock = clock or datetime.now

    def backup(self, path: Path) -> BackupRecord | None:
        """Copy ``path`` aside. Returns None when there is nothing to back up."""
        if not self._fs.exists(path):
            return None

        now = self._clock()
        dest = backup_path_for(path, now)
        if self._fs.exists(dest):
            # second resolution: a second backup in the same second wins
            logger.warning("Backup %s already exists, replacing it", dest)

        self._fs.duplicate(path, dest)
        logger.info("Backed up %s → %s", path, dest)
        return BackupRecord(original_path=path, backup_path=dest, created_at=now)

    def list_backups(self, path: Path) -> list[BackupRecord]:
        """All well-formed backups of ``path``, oldest first."""
        prefix = f"{path.name}{_SUFFIX}"
        records = []
        for candidate in self._fs.siblings(path, prefix):
            stamp = candidate.name[len(prefix):]
            if not _STAMP_RE.match(stamp):
                logger.debug("Ignoring malformed backup name: %s", candidate.name)
                continue
            try:
                created = datetime.strptime(stamp, TIMESTAMP_FORMAT)
            except ValueError:
                logger.debug("Ignoring backup with invalid date: %s", candidate.name)
                continue
            records.append(BackupRecord(original_path=path, backup_path=candidate, created_at=created))
        return sorted(records, key=lambda r: r.stamp)

    def find_latest_backup(self, path: Path) -> BackupRecord | None:
        """The backup with the greatest timestamp suffix, if any."""
        records = self.list_backups(path)
        return records[-1] if records else None

    def restore(self, record: BackupRecord) -> None:
        """Copy a backup over its original. The backup itself is kept.

        Raises:
            FileNotFoundError: If the backup has disappeared.
        """
        if not self._fs.exists(record.backup_path):
            raise FileNotFoundError(f"Backup not found: {record.backup_path}")
        self._fs.duplicate(record.backup_path, record.original_path)
        logger.info("Restored %s from %s", record.original_path, record.backup_path)
