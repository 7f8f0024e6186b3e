"""
InstallTarget — a (source, destination) pair owned by a component.

The comparison rule is uniform across every file-based component:
a destination is "current" iff it exists and its content hash matches
the source. Directory sources compare file by file (see probe.py).
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, model_validator


class TargetState(str, Enum):
    """Observed state of an install target's destination."""

    ABSENT = "absent"
    CURRENT = "current"
    STALE = "stale"


class InstallTarget(BaseModel):
    """A file or directory the installer keeps in sync with its source.

    Exactly one of ``source`` (a file or directory on disk) or
    ``content`` (literal bytes) must be given.
    """

    destination: Path
    source: Path | None = None
    content: bytes | None = None

    label: str = ""
    mode: int | None = None            # chmod applied to installed files
    privileged: bool = False           # write through sudo
    exclude_hidden: bool = True        # skip dot-files in directory sources
    preserve_managed_blocks: bool = False

    @model_validator(mode="after")
    def _one_source(self) -> InstallTarget:
        if (self.source is None) == (self.content is None):
            raise ValueError("InstallTarget needs exactly one of 'source' or 'content'")
        return self

    @property
    def name(self) -> str:
        """Human-readable label for status lines."""
        return self.label or self.destination.name

    @property
    def is_directory(self) -> bool:
        return self.source is not None and self.source.is_dir()

    def source_available(self) -> bool:
        """Whether the source asset can be read."""
        if self.content is not None:
            return True
        assert self.source is not None
        return self.source.exists()

    def source_bytes(self) -> bytes:
        """Content of a file target's source."""
        if self.content is not None:
            return self.content
        assert self.source is not None
        return self.source.read_bytes()
