"""
BackupRecord — a timestamped copy of a path taken before an overwrite.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from pydantic import BaseModel


class BackupRecord(BaseModel):
    """One backup of ``original_path`` living at ``backup_path``.

    ``backup_path`` is always ``<original_path>.bak.<YYYYmmddHHMMSS>``.
    Records are created on every destructive overwrite and never
    deleted automatically.
    """

    original_path: Path
    backup_path: Path
    created_at: datetime

    @property
    def stamp(self) -> str:
        """The timestamp suffix, used for ordering."""
        return self.backup_path.name.rsplit(".", 1)[-1]
