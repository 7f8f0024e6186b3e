"""
Preflight — run-wide requirement checks before any side effect.

The driver aggregates the requirements of every selected component and
calls ``PreflightChecker.check`` exactly once. The first unmet
requirement raises PreflightError; nothing has been touched yet.

    not root    always (unless allow_root)
    sudo        sudo on PATH and ``sudo -v`` succeeds
    internet    one of the connectivity hosts answers a ping
    disk_space  free space on / (and on /boot when it is a mountpoint)
"""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Callable
from pathlib import Path

from cybex.adapters.shell.command import CommandRunner
from cybex.core.engine.reporter import NullReporter, Reporter
from cybex.core.errors import PreflightError
from cybex.core.models.requirements import Requirements
from cybex.core.models.settings import PreflightSettings

logger = logging.getLogger(__name__)

_MB = 1024 * 1024


class PreflightChecker:
    """Checks host requirements; every probe is injectable for tests.

    Args:
        settings: Thresholds and hosts.
        runner: Used for ``sudo -v`` and ``ping``.
        euid: Returns the effective user id.
        disk_usage: ``shutil.disk_usage``-compatible callable.
        ismount: ``os.path.ismount``-compatible callable.
    """

    def __init__(
        self,
        settings: PreflightSettings,
        runner: CommandRunner,
        *,
        euid: Callable[[], int] = os.geteuid,
        disk_usage: Callable[[Path], object] = shutil.disk_usage,
        ismount: Callable[[Path], bool] = os.path.ismount,
        root: Path = Path("/"),
    ):
        self._settings = settings
        self._runner = runner
        self._euid = euid
        self._disk_usage = disk_usage
        self._ismount = ismount
        self._root = root

    def check(self, requirements: Requirements, reporter: Reporter | None = None) -> None:
        """Verify ``requirements``.

        Raises:
            PreflightError: On the first unmet requirement.
        """
        reporter = reporter or NullReporter()
        self.check_not_root()

        if requirements.any:
            reporter.header("System validation checks")
        if requirements.sudo:
            reporter.step("Checking sudo availability")
            self.check_sudo()
            reporter.success("sudo is available and configured")
        if requirements.internet:
            reporter.step("Checking internet connectivity")
            host = self.check_internet()
            reporter.success(f"Internet connection verified ({host})")
        if requirements.disk_space:
            reporter.step("Checking available disk space")
            free = self.check_disk_space()
            reporter.success(f"Sufficient disk space available ({free}MB on /)")

    def check_not_root(self) -> None:
        if self._euid() == 0 and not self._settings.allow_root:
            raise PreflightError(
                "Do not run cybex as root or with sudo; it asks for sudo when needed"
            )

    def check_sudo(self) -> None:
        if self._runner.which("sudo") is None:
            raise PreflightError("sudo is not installed (pacman -S sudo)")
        result = self._runner.run(["sudo", "-v"], interactive=True)
        if not result.ok:
            raise PreflightError("You don't have sudo privileges; check the sudoers configuration")

    def check_internet(self) -> str:
        """Returns the host that answered."""
        timeout = str(self._settings.ping_timeout)
        for host in self._settings.connectivity_hosts:
            if self._runner.run(["ping", "-c", "1", "-W", timeout, host]).ok:
                return host
            logger.debug("No ping reply from %s", host)
        raise PreflightError("No internet connection detected; check your network and retry")

    def _free_mb(self, path: Path) -> int:
        try:
            usage = self._disk_usage(path)
        except OSError as e:
            raise PreflightError(f"Cannot check disk space at {path}: {e}") from e
        return int(usage.free) // _MB  # type: ignore[attr-defined]

    def check_disk_space(self) -> int:
        """Returns free MB on the root filesystem."""
        root_free = self._free_mb(self._root)
        if root_free < self._settings.min_root_free_mb:
            raise PreflightError(
                f"Insufficient disk space: {self._settings.min_root_free_mb}MB required, "
                f"{root_free}MB available"
            )

        boot = self._root / "boot"
        if self._ismount(boot):
            boot_free = self._free_mb(boot)
            if boot_free < self._settings.min_boot_free_mb:
                raise PreflightError(
                    f"Insufficient disk space in /boot: {self._settings.min_boot_free_mb}MB "
                    f"required, {boot_free}MB available"
                )
        return root_free
