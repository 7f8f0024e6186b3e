"""
systemd-boot adapter — the ``default`` line of loader/loader.conf.
"""

from __future__ import annotations

import re
from pathlib import Path

from cybex.adapters.base import BootloaderConfig
from cybex.adapters.shell.filesystem import LocalFilesystem

_DEFAULT_RE = re.compile(r"^default\s+(\S+)\s*$", re.MULTILINE)


class SystemdBootConfig(BootloaderConfig):
    """Loader entries under ``<boot>/loader/entries``."""

    def __init__(self, loader_dir: Path, fs: LocalFilesystem, bootctl_available: bool = True):
        self._loader_dir = loader_dir
        self._fs = fs
        self._has_bootctl = bootctl_available

    @property
    def name(self) -> str:
        return "systemd-boot"

    @property
    def loader_conf(self) -> Path:
        return self._loader_dir / "loader.conf"

    @property
    def entries_dir(self) -> Path:
        return self._loader_dir / "entries"

    def is_available(self) -> bool:
        return self._has_bootctl and self._fs.is_dir(self.entries_dir)

    def entries(self) -> list[str]:
        if not self._fs.is_dir(self.entries_dir):
            return []
        return sorted(p.name for p in self.entries_dir.glob("*.conf"))

    def get_default_entry(self) -> str | None:
        if not self._fs.exists(self.loader_conf):
            return None
        match = _DEFAULT_RE.search(self._fs.read_text(self.loader_conf))
        return match.group(1) if match else None

    def set_default_entry(self, kernel: str) -> str | None:
        matches = [e for e in self.entries() if e.endswith(f"{kernel}.conf")]
        if not matches:
            return None
        self._write_default(matches[0])
        return matches[0]

    def reset_default_entry(self) -> str | None:
        entries = self.entries()
        if not entries:
            return None
        self._write_default(entries[0])
        return entries[0]

    def _write_default(self, entry: str) -> None:
        line = f"default {entry}"
        text = self._fs.read_text(self.loader_conf) if self._fs.exists(self.loader_conf) else ""
        if _DEFAULT_RE.search(text):
            updated = _DEFAULT_RE.sub(line, text, count=1)
        else:
            updated = f"{line}\n{text}"
        if updated != text:
            self._fs.write_text(self.loader_conf, updated)
