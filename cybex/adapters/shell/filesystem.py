"""
Filesystem adapter — file and directory operations for install targets.

Two implementations share one interface:

    LocalFilesystem       — plain pathlib/shutil, for paths the user owns
    PrivilegedFilesystem  — writes go through ``sudo install``/``cp``/``rm``
                            for /etc, /usr and /boot

Reads always use pathlib: the system files we manage are world-readable.
Write failures raise ``OSError`` in both implementations.
"""

from __future__ import annotations

import logging
import os
import shutil
import stat
import tempfile
from collections.abc import Iterator
from pathlib import Path

from cybex.adapters.shell.command import CommandRunner

logger = logging.getLogger(__name__)


class LocalFilesystem:
    """Filesystem operations as the current user."""

    @property
    def name(self) -> str:
        return "filesystem"

    # ── Reads ────────────────────────────────────────────────────

    def exists(self, path: Path) -> bool:
        return path.exists() or path.is_symlink()

    def is_dir(self, path: Path) -> bool:
        return path.is_dir()

    def read_bytes(self, path: Path) -> bytes:
        return path.read_bytes()

    def read_text(self, path: Path) -> str:
        return path.read_text(encoding="utf-8")

    def iter_files(self, root: Path, exclude_hidden: bool = False) -> Iterator[Path]:
        """Yield file paths under ``root`` relative to it, sorted."""
        for path in sorted(root.rglob("*")):
            rel = path.relative_to(root)
            if exclude_hidden and any(part.startswith(".") for part in rel.parts):
                continue
            if path.is_file():
                yield rel

    def siblings(self, path: Path, prefix: str) -> list[Path]:
        """Entries next to ``path`` whose name starts with ``prefix``."""
        parent = path.parent
        if not parent.is_dir():
            return []
        return sorted(p for p in parent.iterdir() if p.name.startswith(prefix))

    # ── Writes ───────────────────────────────────────────────────

    def make_dir(self, path: Path, mode: int | None = None) -> None:
        path.mkdir(parents=True, exist_ok=True)
        if mode is not None:
            path.chmod(mode)

    def write_bytes(self, path: Path, data: bytes, mode: int | None = None) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        if mode is not None:
            path.chmod(mode)

    def write_text(self, path: Path, text: str, mode: int | None = None) -> None:
        self.write_bytes(path, text.encode("utf-8"), mode=mode)

    def copy_file(self, src: Path, dst: Path, mode: int | None = None) -> None:
        dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(src, dst)
        if mode is not None:
            dst.chmod(mode)

    def copy_tree(self, src: Path, dst: Path, exclude_hidden: bool = False) -> None:
        """Copy every file of ``src`` into ``dst``, merging with what is there."""
        for rel in self.iter_files(src, exclude_hidden=exclude_hidden):
            self.copy_file(src / rel, dst / rel, mode=stat.S_IMODE((src / rel).stat().st_mode))

    def duplicate(self, src: Path, dst: Path) -> None:
        """Exact copy of a file or tree, replacing ``dst``."""
        if self.exists(dst):
            self.remove(dst)
        if src.is_dir():
            shutil.copytree(src, dst, symlinks=True)
        else:
            dst.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(src, dst, follow_symlinks=False)

    def remove(self, path: Path) -> None:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        elif self.exists(path):
            path.unlink()


class PrivilegedFilesystem(LocalFilesystem):
    """Filesystem writes performed through sudo."""

    def __init__(self, runner: CommandRunner):
        self._runner = runner

    @property
    def name(self) -> str:
        return "filesystem-sudo"

    def _sudo(self, *cmd: str) -> None:
        result = self._runner.run(list(cmd), sudo=True)
        if not result.ok:
            raise OSError(f"{' '.join(cmd)}: {result.message}")

    def make_dir(self, path: Path, mode: int | None = None) -> None:
        self._sudo("install", "-d", "-m", _octal(mode if mode is not None else 0o755), str(path))

    def write_bytes(self, path: Path, data: bytes, mode: int | None = None) -> None:
        fd, tmp = tempfile.mkstemp(prefix=".cybex_", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            self._sudo("install", "-D", "-m", _octal(mode if mode is not None else 0o644), tmp, str(path))
        finally:
            Path(tmp).unlink(missing_ok=True)

    def copy_file(self, src: Path, dst: Path, mode: int | None = None) -> None:
        self._sudo("install", "-D", "-m", _octal(mode if mode is not None else 0o644), str(src), str(dst))

    def duplicate(self, src: Path, dst: Path) -> None:
        if self.exists(dst):
            self.remove(dst)
        self._sudo("cp", "-a", str(src), str(dst))

    def remove(self, path: Path) -> None:
        if self.exists(path):
            self._sudo("rm", "-rf", str(path))


def _octal(mode: int) -> str:
    return format(mode, "o")
