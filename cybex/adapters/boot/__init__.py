"""Bootloader adapters and detection."""

from __future__ import annotations

from cybex.adapters.base import BootloaderConfig
from cybex.adapters.boot.grub import GrubConfig
from cybex.adapters.boot.limine import LimineConfig
from cybex.adapters.boot.systemd_boot import SystemdBootConfig
from cybex.adapters.shell.command import CommandRunner
from cybex.adapters.shell.filesystem import LocalFilesystem
from cybex.core.models.settings import Settings


def detect_bootloader(
    settings: Settings,
    runner: CommandRunner,
    fs: LocalFilesystem,
) -> BootloaderConfig | None:
    """Pick the bootloader in use: Limine, then GRUB, then systemd-boot."""
    limine = LimineConfig(settings.system_path("/boot/limine.conf"), fs)
    if limine.is_available():
        return limine

    grub = GrubConfig(runner, settings.system_path("/boot/grub/grub.cfg"), settings.kernel.grub_entry)
    if grub.is_available():
        return grub

    sdboot = SystemdBootConfig(
        settings.system_path("/boot/loader"),
        fs,
        bootctl_available=runner.which("bootctl") is not None,
    )
    if sdboot.is_available():
        return sdboot

    return None


__all__ = [
    "GrubConfig",
    "LimineConfig",
    "SystemdBootConfig",
    "detect_bootloader",
]
