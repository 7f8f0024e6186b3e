"""
Mainline kernel — linux-mainline from the Chaotic-AUR repository.

Steps, each skipped when already done:

    1. signing key        pacman-key --recv-key / --lsign-key
    2. mirrorlist+keyring pacman -U <url>
    3. repository         [chaotic-aur] block appended to pacman.conf
    4. refresh            pacman -Syy (after adding the repo, or while the kernel is missing)
    5. kernel             pacman -S linux-mainline
    6. bootloader         default entry → linux-mainline
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from cybex.core.components.base import Component
from cybex.core.context import InstallContext
from cybex.core.models.requirements import Requirements
from cybex.core.services.installer import ensure_packages, remove_packages

logger = logging.getLogger(__name__)

MIRRORLIST_PACKAGE = "chaotic-mirrorlist"
KEYRING_PACKAGE = "chaotic-keyring"


class MainlineKernel(Component):
    name = "mainline"
    title = "Installing Mainline Kernel"
    description = "linux-mainline kernel from Chaotic-AUR, set as boot default"
    requires = Requirements(sudo=True, internet=True, disk_space=True)
    in_all = False
    uninstall_warning = "This will remove the mainline kernel and reset the bootloader default."

    def _pacman_conf(self, ctx: InstallContext) -> Path:
        return ctx.settings.system_path("/etc/pacman.conf")

    def repository_state(self, ctx: InstallContext) -> tuple[bool, bool]:
        """Whether pacman.conf has the repo header and its Include line."""
        kernel = ctx.settings.kernel
        fs = ctx.adapters.system_fs
        conf = self._pacman_conf(ctx)
        text = fs.read_text(conf) if fs.exists(conf) else ""
        has_header = re.search(rf"^\[{re.escape(kernel.repo)}\]\s*$", text, re.MULTILINE) is not None
        has_include = re.search(
            rf"^Include\s*=\s*{re.escape(kernel.mirrorlist)}\s*$", text, re.MULTILINE
        ) is not None
        return has_header, has_include

    # ── Install ────────────────────────────────────────────────

    def install(self, ctx: InstallContext) -> None:
        kernel = ctx.settings.kernel
        pacman = ctx.adapters.pacman

        configured = self._configure_repository(ctx)

        if configured or not pacman.is_installed(kernel.package):
            ctx.step("Updating package database")
            ctx.check(pacman.refresh(), "refresh package database")
            ctx.ok("refresh package database")
        else:
            ctx.skip("refresh package database", f"{kernel.package} already installed")

        ensure_packages(pacman, [kernel.package], ctx)
        self._set_boot_default(ctx)

    def _configure_repository(self, ctx: InstallContext) -> bool:
        """Add the repository to pacman.conf. Returns True if it was added."""
        kernel = ctx.settings.kernel
        pacman = ctx.adapters.pacman

        has_header, has_include = self.repository_state(ctx)
        if has_header and has_include:
            ctx.skip(f"configure {kernel.repo}", "repository already configured")
            return False
        if has_header:
            ctx.fail(
                f"configure {kernel.repo}",
                f"[{kernel.repo}] found in pacman.conf without its Include line; fix it manually",
            )

        if pacman.has_key(kernel.key_id):
            ctx.skip("import signing key", "already imported")
        else:
            ctx.step(f"Importing {kernel.repo} signing key")
            ctx.check(pacman.import_key(kernel.key_id, kernel.keyserver), "import signing key")
            ctx.ok("import signing key", kernel.key_id)

        for package, url in ((MIRRORLIST_PACKAGE, kernel.mirrorlist_url), (KEYRING_PACKAGE, kernel.keyring_url)):
            if pacman.is_installed(package):
                ctx.skip(f"install {package}", "already installed")
                continue
            ctx.step(f"Installing {package}")
            ctx.check(pacman.install_files(url), f"install {package}")
            ctx.ok(f"install {package}", url)

        conf = self._pacman_conf(ctx)
        fs = ctx.adapters.system_fs
        text = fs.read_text(conf) if fs.exists(conf) else ""
        if text and not text.endswith("\n"):
            text += "\n"
        text += f"\n[{kernel.repo}]\nInclude = {kernel.mirrorlist}\n"

        ctx.step(f"Adding {kernel.repo} to pacman.conf")
        try:
            record = ctx.backups(privileged=True).backup(conf)
            fs.write_text(conf, text)
        except OSError as e:
            ctx.fail(f"configure {kernel.repo}", str(e))
        ctx.ok(f"configure {kernel.repo}", str(record.backup_path) if record else "")
        return True

    def _set_boot_default(self, ctx: InstallContext) -> None:
        package = ctx.settings.kernel.package
        bootloader = ctx.adapters.bootloader
        if bootloader is None:
            ctx.reporter.error("Unknown bootloader; set the default entry manually")
            ctx.skip("set boot default", "no supported bootloader found")
            return

        ctx.step(f"Setting {package} as default for {bootloader.name}")
        previous = bootloader.get_default_entry()
        try:
            entry = bootloader.set_default_entry(package)
        except OSError as e:
            ctx.fail("set boot default", str(e))
        if entry is None:
            ctx.reporter.error(f"Could not find a {package} entry in {bootloader.name}; set it manually")
            ctx.skip("set boot default", "no boot entry found")
        elif entry == previous:
            ctx.skip("set boot default", f"already entry {entry}")
        else:
            ctx.ok("set boot default", entry, bootloader=bootloader.name)

    # ── Uninstall ──────────────────────────────────────────────

    def uninstall(self, ctx: InstallContext) -> None:
        package = ctx.settings.kernel.package
        if not remove_packages(ctx.adapters.pacman, [package], ctx):
            return

        bootloader = ctx.adapters.bootloader
        if bootloader is None:
            ctx.skip("reset boot default", "no supported bootloader found")
            return
        ctx.step(f"Resetting {bootloader.name} to the default kernel")
        try:
            entry = bootloader.reset_default_entry()
        except OSError as e:
            ctx.fail("reset boot default", str(e))
        if entry is None:
            ctx.warn(f"Could not reset the {bootloader.name} default; check it manually")
        else:
            ctx.ok("reset boot default", entry, bootloader=bootloader.name)

    def is_installed(self, ctx: InstallContext) -> bool:
        return ctx.adapters.pacman.is_installed(ctx.settings.kernel.package)

    def next_steps(self) -> list[str]:
        return ["Reboot to use the mainline kernel"]
