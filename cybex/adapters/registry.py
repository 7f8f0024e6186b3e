"""
Adapter registry — the set of tool bindings a run works with.

Components never construct adapters; they ask the registry. A real run
builds it with ``AdapterRegistry.from_settings``; tests build it from
the fakes in mock.py.
"""

from __future__ import annotations

import logging
from typing import Any

from cybex.adapters.base import Adapter, BootloaderConfig, PackageManager, ServiceManager
from cybex.adapters.boot import detect_bootloader
from cybex.adapters.packages.npm import NpmGlobalAdapter
from cybex.adapters.packages.pacman import PacmanAdapter, YayAdapter
from cybex.adapters.services.systemd import SystemdAdapter
from cybex.adapters.shell.command import CommandRunner
from cybex.adapters.shell.filesystem import LocalFilesystem, PrivilegedFilesystem
from cybex.core.models.settings import Settings

logger = logging.getLogger(__name__)

_UNSET: Any = object()


class AdapterRegistry:
    """Central holder for every adapter a component may use.

    The bootloader is detected lazily on first access, since only the
    kernel component needs it and detection probes /boot.
    """

    def __init__(
        self,
        *,
        runner: CommandRunner,
        fs: LocalFilesystem,
        system_fs: LocalFilesystem,
        pacman: PackageManager,
        aur: PackageManager,
        npm: NpmGlobalAdapter,
        services: ServiceManager,
        bootloader: BootloaderConfig | None = _UNSET,
        settings: Settings | None = None,
    ):
        self.runner = runner
        self.fs = fs
        self.system_fs = system_fs
        self.pacman = pacman
        self.aur = aur
        self.npm = npm
        self.services = services
        self._bootloader = bootloader
        self._settings = settings

    @classmethod
    def from_settings(cls, settings: Settings) -> AdapterRegistry:
        """Registry bound to the real system tools."""
        runner = CommandRunner()
        return cls(
            runner=runner,
            fs=LocalFilesystem(),
            system_fs=PrivilegedFilesystem(runner),
            pacman=PacmanAdapter(runner),
            aur=YayAdapter(runner),
            npm=NpmGlobalAdapter(runner, settings.local_prefix),
            services=SystemdAdapter(runner),
            settings=settings,
        )

    @property
    def bootloader(self) -> BootloaderConfig | None:
        if self._bootloader is _UNSET:
            if self._settings is None:
                self._bootloader = None
            else:
                self._bootloader = detect_bootloader(self._settings, self.runner, self.system_fs)
            logger.debug("Detected bootloader: %s", self._bootloader)
        return self._bootloader

    def adapters(self) -> list[Adapter]:
        """Every registered adapter (bootloader only if detected)."""
        found: list[Adapter] = [self.pacman, self.aur, self.npm, self.services]
        if self.bootloader is not None:
            found.append(self.bootloader)
        return found

    def adapter_status(self) -> dict[str, dict[str, Any]]:
        """Availability of each adapter's underlying tool."""
        status = {}
        for adapter in self.adapters():
            try:
                available = adapter.is_available()
            except Exception:
                available = False
            status[adapter.name] = {
                "name": adapter.name,
                "available": available,
                "type": adapter.__class__.__name__,
            }
        return status
