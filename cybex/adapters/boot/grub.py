"""
GRUB adapter — regenerate grub.cfg and pick the saved default entry.
"""

from __future__ import annotations

import logging
from pathlib import Path

from cybex.adapters.base import BootloaderConfig
from cybex.adapters.shell.command import CommandRunner

logger = logging.getLogger(__name__)


class GrubConfig(BootloaderConfig):
    """GRUB through grub-mkconfig / grub-set-default / grub-editenv."""

    def __init__(self, runner: CommandRunner, cfg_path: Path, entry_name: str):
        self._runner = runner
        self._cfg_path = cfg_path
        self._entry_name = entry_name

    @property
    def name(self) -> str:
        return "grub"

    def is_available(self) -> bool:
        return self._runner.which("grub-mkconfig") is not None

    def get_default_entry(self) -> str | None:
        result = self._runner.run(["grub-editenv", "list"], sudo=True)
        if not result.ok:
            return None
        for line in result.stdout.splitlines():
            key, _, value = line.partition("=")
            if key.strip() == "saved_entry":
                return value.strip() or None
        return None

    def _regenerate(self) -> bool:
        result = self._runner.run(["grub-mkconfig", "-o", str(self._cfg_path)], sudo=True)
        if not result.ok:
            logger.warning("grub-mkconfig failed: %s", result.message)
        return result.ok

    def set_default_entry(self, kernel: str) -> str | None:
        if not self._regenerate():
            return None
        if kernel not in self._entry_name:
            logger.warning("GRUB entry %r does not mention %s", self._entry_name, kernel)
            return None
        if not self._runner.run(["grub-set-default", self._entry_name], sudo=True).ok:
            return None
        return self._entry_name

    def reset_default_entry(self) -> str | None:
        if not self._regenerate():
            return None
        if not self._runner.run(["grub-set-default", "0"], sudo=True).ok:
            return None
        return "0"
