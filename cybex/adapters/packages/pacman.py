"""
pacman / yay adapters — Arch package database access.
"""

from __future__ import annotations

import logging

from cybex.adapters.base import PackageManager
from cybex.adapters.shell.command import CommandResult, CommandRunner

logger = logging.getLogger(__name__)


class PacmanAdapter(PackageManager):
    """Official repositories through pacman (mutations need sudo)."""

    def __init__(self, runner: CommandRunner):
        self._runner = runner

    @property
    def name(self) -> str:
        return "pacman"

    def is_available(self) -> bool:
        return self._runner.which("pacman") is not None

    def is_installed(self, package: str) -> bool:
        return self._runner.run(["pacman", "-Q", package]).ok

    def install(self, *packages: str) -> CommandResult:
        return self._runner.run(
            ["pacman", "-S", "--needed", "--noconfirm", *packages],
            sudo=True,
            interactive=True,
        )

    def install_files(self, *urls: str) -> CommandResult:
        """Install package archives by URL (``pacman -U``)."""
        return self._runner.run(["pacman", "-U", "--noconfirm", *urls], sudo=True, interactive=True)

    def remove(self, *packages: str) -> CommandResult:
        return self._runner.run(["pacman", "-R", "--noconfirm", *packages], sudo=True, interactive=True)

    def refresh(self) -> CommandResult:
        """Force a refresh of all package databases."""
        return self._runner.run(["pacman", "-Syy", "--noconfirm"], sudo=True, interactive=True)

    def has_key(self, key_id: str) -> bool:
        return self._runner.run(["pacman-key", "--list-keys", key_id], sudo=True).ok

    def import_key(self, key_id: str, keyserver: str) -> CommandResult:
        """Receive and locally sign a repository signing key."""
        result = self._runner.run(
            ["pacman-key", "--recv-key", key_id, "--keyserver", keyserver], sudo=True
        )
        if not result.ok:
            return result
        return self._runner.run(["pacman-key", "--lsign-key", key_id], sudo=True)


class YayAdapter(PackageManager):
    """AUR packages through yay (runs as the user; yay calls sudo itself)."""

    def __init__(self, runner: CommandRunner):
        self._runner = runner

    @property
    def name(self) -> str:
        return "yay"

    def is_available(self) -> bool:
        return self._runner.which("yay") is not None

    def is_installed(self, package: str) -> bool:
        return self._runner.run(["yay", "-Q", package]).ok

    def install(self, *packages: str) -> CommandResult:
        return self._runner.run(["yay", "-S", "--noconfirm", *packages], interactive=True)

    def remove(self, *packages: str) -> CommandResult:
        return self._runner.run(["yay", "-R", "--noconfirm", *packages], interactive=True)
