"""
State prober — is a target absent, current, or stale?

Pure reads. Absence is an answer, never an exception.

Comparison is by SHA-256 of the content. Directory sources compare file
by file: the destination is current iff every source file (hidden files
excluded when the target says so) exists there with the same digest.
Extra files at the destination don't make it stale.
"""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path

from cybex.adapters.shell.filesystem import LocalFilesystem
from cybex.core.models.target import InstallTarget, TargetState
from cybex.core.services.shell_profile import strip_managed_blocks

logger = logging.getLogger(__name__)


def file_digest(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def _comparable(data: bytes, target: InstallTarget) -> bytes:
    if not target.preserve_managed_blocks:
        return data
    return strip_managed_blocks(data.decode("utf-8", errors="replace")).encode("utf-8")


def _same_file(src: bytes, dest: Path, target: InstallTarget, fs: LocalFilesystem) -> bool:
    if not fs.exists(dest) or fs.is_dir(dest):
        return False
    try:
        current = fs.read_bytes(dest)
    except OSError as e:
        logger.debug("Cannot read %s: %s", dest, e)
        return False
    return file_digest(_comparable(src, target)) == file_digest(_comparable(current, target))


def stale_files(target: InstallTarget, fs: LocalFilesystem) -> list[Path]:
    """Source-relative paths whose destination copy is missing or different."""
    assert target.source is not None
    return [
        rel
        for rel in fs.iter_files(target.source, exclude_hidden=target.exclude_hidden)
        if not _same_file(fs.read_bytes(target.source / rel), target.destination / rel, target, fs)
    ]


def probe_target(target: InstallTarget, fs: LocalFilesystem) -> TargetState:
    """Observed state of ``target``'s destination.

    The source must be available (see ``InstallTarget.source_available``).
    """
    dest = target.destination
    if not fs.exists(dest):
        return TargetState.ABSENT

    if target.is_directory:
        if not fs.is_dir(dest):
            return TargetState.STALE
        return TargetState.STALE if stale_files(target, fs) else TargetState.CURRENT

    if _same_file(target.source_bytes(), dest, target, fs):
        return TargetState.CURRENT
    return TargetState.STALE


def target_installed(target: InstallTarget, fs: LocalFilesystem) -> bool:
    """Whether ``target`` is in place.

    Without a source to compare against, presence of the destination
    is all we can check.
    """
    if not target.source_available():
        return fs.exists(target.destination)
    return probe_target(target, fs) is TargetState.CURRENT
