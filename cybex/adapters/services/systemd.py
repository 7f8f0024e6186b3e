"""
systemd adapter — service state through systemctl.

Queries use ``--quiet`` and only look at the exit code, so a unit that
does not exist simply reads as "not enabled" / "not active".
"""

from __future__ import annotations

from pathlib import Path

from cybex.adapters.base import ServiceManager
from cybex.adapters.shell.command import CommandResult, CommandRunner


class SystemdAdapter(ServiceManager):
    """System services managed by systemd (mutations need sudo)."""

    def __init__(self, runner: CommandRunner):
        self._runner = runner

    @property
    def name(self) -> str:
        return "systemd"

    def is_available(self) -> bool:
        return Path("/run/systemd/system").exists() and self._runner.which("systemctl") is not None

    def is_enabled(self, service: str) -> bool:
        return self._runner.run(["systemctl", "is-enabled", "--quiet", service]).ok

    def is_active(self, service: str) -> bool:
        return self._runner.run(["systemctl", "is-active", "--quiet", service]).ok

    def enable(self, service: str) -> CommandResult:
        return self._runner.run(["systemctl", "enable", service], sudo=True)

    def start(self, service: str) -> CommandResult:
        return self._runner.run(["systemctl", "start", service], sudo=True)

    def stop(self, service: str) -> CommandResult:
        return self._runner.run(["systemctl", "stop", service], sudo=True)

    def disable(self, service: str) -> CommandResult:
        return self._runner.run(["systemctl", "disable", service], sudo=True)
