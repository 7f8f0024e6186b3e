"""
macOS-style shortcuts — keyd remapping plus matching Kitty bindings.
"""

from __future__ import annotations

import logging

from cybex.core.components.base import Component
from cybex.core.context import InstallContext
from cybex.core.models.requirements import Requirements
from cybex.core.models.target import InstallTarget, TargetState
from cybex.core.services.installer import (
    ensure_packages,
    ensure_service,
    install_target,
    stop_and_disable,
    uninstall_target,
)

logger = logging.getLogger(__name__)

KEYD = "keyd"


class MacosKeys(Component):
    name = "macos-keys"
    title = "Configuring macOS-style Shortcuts"
    description = "macOS-style shortcuts (keyd + Kitty)"
    requires = Requirements(sudo=True, internet=True)
    # Omarchy ships this behaviour by default now
    in_all = False

    def keyd_target(self, ctx: InstallContext) -> InstallTarget:
        return InstallTarget(
            source=ctx.settings.asset("keyd", "macos_shortcuts.conf"),
            destination=ctx.settings.system_path("/etc/keyd/default.conf"),
            label="keyd configuration",
            mode=0o644,
            privileged=True,
        )

    def kitty_target(self, ctx: InstallContext) -> InstallTarget:
        return InstallTarget(
            source=ctx.settings.asset("kitty", "kitty.conf"),
            destination=ctx.settings.home_path(".config", "kitty", "kitty.conf"),
            label="kitty configuration",
        )

    def targets(self, ctx: InstallContext) -> list[InstallTarget]:
        return [self.keyd_target(ctx), self.kitty_target(ctx)]

    def install(self, ctx: InstallContext) -> None:
        adapters = ctx.adapters
        ensure_packages(adapters.pacman, [KEYD], ctx)

        state = install_target(self.keyd_target(ctx), ctx)
        changed_service = ensure_service(adapters.services, KEYD, ctx)

        config_changed = state in (TargetState.ABSENT, TargetState.STALE)
        if config_changed and not changed_service and adapters.services.is_active(KEYD):
            ctx.step("Reloading keyd to apply configuration")
            result = adapters.runner.run([KEYD, "reload"], sudo=True)
            if result.ok:
                ctx.ok("reload keyd")
            else:
                ctx.warn(f"Failed to reload keyd ({result.message}); run 'sudo keyd reload'")

        install_target(self.kitty_target(ctx), ctx)

    def uninstall(self, ctx: InstallContext) -> None:
        stop_and_disable(ctx.adapters.services, KEYD, ctx)
        uninstall_target(self.keyd_target(ctx), ctx)
        uninstall_target(self.kitty_target(ctx), ctx)

    def is_installed(self, ctx: InstallContext) -> bool:
        return ctx.adapters.pacman.is_installed(KEYD) and super().is_installed(ctx)

    def next_steps(self) -> list[str]:
        return ["Reload Hyprland (hyprctl reload) and restart your terminal to pick up the new shortcuts"]
