"""
Limine adapter — the ``default_entry`` field of limine.conf.

Top-level menu entries are lines starting with two spaces and exactly
two slashes (``  //linux``); three slashes are sub-entries. An entry's
index is the number of top-level entry lines before it.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from cybex.adapters.base import BootloaderConfig
from cybex.adapters.shell.filesystem import LocalFilesystem

logger = logging.getLogger(__name__)

_ENTRY_RE = re.compile(r"^  //[^/]")
_DEFAULT_RE = re.compile(r"^default_entry:.*$", re.MULTILINE)
_DEFAULT_VALUE_RE = re.compile(r"^default_entry:\s*(\S*)\s*$", re.MULTILINE)


def find_entry_index(text: str, kernel: str) -> int | None:
    """Index of the first entry mentioning ``//<kernel>``, or None."""
    lines = text.splitlines()
    needle = f"//{kernel}"
    for lineno, line in enumerate(lines):
        if needle in line:
            return sum(1 for prior in lines[:lineno] if _ENTRY_RE.match(prior))
    return None


def with_default_entry(text: str, index: int) -> str:
    """Return ``text`` with ``default_entry`` set to ``index``.

    The field is prepended when the file doesn't have one yet.
    """
    line = f"default_entry: {index}"
    if _DEFAULT_RE.search(text):
        return _DEFAULT_RE.sub(line, text, count=1)
    return f"{line}\n{text}"


class LimineConfig(BootloaderConfig):
    """limine.conf editor; writes through the given filesystem."""

    def __init__(self, path: Path, fs: LocalFilesystem):
        self._path = path
        self._fs = fs

    @property
    def name(self) -> str:
        return "limine"

    @property
    def path(self) -> Path:
        return self._path

    def is_available(self) -> bool:
        return self._fs.exists(self._path)

    def get_default_entry(self) -> str | None:
        if not self.is_available():
            return None
        match = _DEFAULT_VALUE_RE.search(self._fs.read_text(self._path))
        return match.group(1) if match and match.group(1) else None

    def set_default_entry(self, kernel: str) -> str | None:
        text = self._fs.read_text(self._path)
        index = find_entry_index(text, kernel)
        if index is None:
            logger.debug("No //%s entry in %s", kernel, self._path)
            return None
        self._write(text, index)
        return str(index)

    def reset_default_entry(self) -> str | None:
        self._write(self._fs.read_text(self._path), 0)
        return "0"

    def _write(self, text: str, index: int) -> None:
        updated = with_default_entry(text, index)
        if updated != text:
            self._fs.write_text(self._path, updated)
            logger.info("limine default_entry → %d", index)
