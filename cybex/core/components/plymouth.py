"""
Plymouth — the Cybex boot splash theme.

Theme files go to /usr/share/plymouth/themes/<theme>. Plymouth themes
are baked into the initramfs, so it is rebuilt whenever the default
theme changes or the files of the active theme changed.
"""

from __future__ import annotations

import logging

from cybex.core.components.base import Component
from cybex.core.context import InstallContext
from cybex.core.models.requirements import Requirements
from cybex.core.models.target import InstallTarget, TargetState
from cybex.core.services.installer import install_target, uninstall_target
from cybex.core.services.probe import target_installed

logger = logging.getLogger(__name__)

SET_THEME = "plymouth-set-default-theme"


class Plymouth(Component):
    name = "plymouth"
    title = "Installing Plymouth Theme"
    description = "Cybex Plymouth boot theme (rebuilds the initramfs)"
    requires = Requirements(sudo=True, disk_space=True)

    def targets(self, ctx: InstallContext) -> list[InstallTarget]:
        theme = ctx.settings.plymouth.theme
        return [
            InstallTarget(
                source=ctx.settings.asset("plymouth", "themes", theme),
                destination=ctx.settings.system_path(f"/usr/share/plymouth/themes/{theme}"),
                label=f"plymouth theme {theme}",
                privileged=True,
                exclude_hidden=True,
            )
        ]

    def _current_theme(self, ctx: InstallContext) -> str | None:
        result = ctx.adapters.runner.run([SET_THEME])
        return result.stdout.strip() if result.ok else None

    def _rebuild_initramfs(self, ctx: InstallContext) -> None:
        ctx.step("Rebuilding initramfs (this may take a moment)")
        result = ctx.adapters.runner.run(["mkinitcpio", "-P"], sudo=True, interactive=True)
        if not result.ok:
            ctx.fail(
                "rebuild initramfs",
                f"{result.message}; the system may not boot with the new theme, "
                "run 'sudo mkinitcpio -P' and check /boot space and hooks",
            )
        ctx.ok("rebuild initramfs")

    def install(self, ctx: InstallContext) -> None:
        theme = ctx.settings.plymouth.theme
        state = install_target(self.targets(ctx)[0], ctx)
        if state is None:
            return

        if ctx.adapters.runner.which(SET_THEME) is None:
            ctx.reporter.error(f"{SET_THEME} not found; install Plymouth first (sudo pacman -S plymouth)")
            ctx.skip(f"set theme {theme}", "plymouth not installed")
            return

        if self._current_theme(ctx) == theme:
            ctx.skip(f"set theme {theme}", "already active")
            if state is TargetState.STALE:
                self._rebuild_initramfs(ctx)
            return

        ctx.step(f"Setting Plymouth theme to '{theme}'")
        ctx.run([SET_THEME, theme], f"set theme {theme}", sudo=True)
        ctx.ok(f"set theme {theme}")
        self._rebuild_initramfs(ctx)

    def uninstall(self, ctx: InstallContext) -> None:
        theme = ctx.settings.plymouth.theme
        fallback = ctx.settings.plymouth.fallback_theme

        if ctx.adapters.runner.which(SET_THEME) is None:
            ctx.skip(f"reset theme to {fallback}", "plymouth not installed")
        elif self._current_theme(ctx) == theme:
            ctx.step(f"Resetting Plymouth theme to '{fallback}'")
            ctx.run([SET_THEME, fallback], f"reset theme to {fallback}", sudo=True)
            ctx.ok(f"reset theme to {fallback}")
            self._rebuild_initramfs(ctx)
        else:
            ctx.skip(f"reset theme to {fallback}", f"theme is not set to {theme}")

        uninstall_target(self.targets(ctx)[0], ctx)

    def is_installed(self, ctx: InstallContext) -> bool:
        target = self.targets(ctx)[0]
        if not target_installed(target, ctx.fs_for(target)):
            return False
        if ctx.adapters.runner.which(SET_THEME) is None:
            return True
        return self._current_theme(ctx) == ctx.settings.plymouth.theme

    def next_steps(self) -> list[str]:
        return ["Reboot to see the new Plymouth boot splash"]
