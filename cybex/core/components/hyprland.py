"""
Hyprland — custom config directory and the Cybex launcher scripts.

~/.config/hypr/custom is merged from the bundled config (extra user
files stay). Managed blocks other components wrote into those files
(auto-tile's exec line) survive an overwrite.
"""

from __future__ import annotations

import logging

from cybex.core.components.base import Component
from cybex.core.context import InstallContext
from cybex.core.models.requirements import Requirements
from cybex.core.models.target import InstallTarget
from cybex.core.services.installer import install_target, uninstall_target
from cybex.core.services.probe import target_installed

logger = logging.getLogger(__name__)


class Hyprland(Component):
    name = "hyprland"
    aliases = ("hyprland-bindings",)
    title = "Configuring Hyprland Custom Settings"
    description = "Hyprland custom configs + Cybex launchers in /usr/local/bin"
    requires = Requirements(sudo=True)

    def config_target(self, ctx: InstallContext) -> InstallTarget:
        return InstallTarget(
            source=ctx.settings.asset("hyprland"),
            destination=ctx.settings.home_path(".config", "hypr", "custom"),
            label="hyprland custom configs",
            exclude_hidden=True,
            preserve_managed_blocks=True,
        )

    def app_names(self, ctx: InstallContext) -> list[str]:
        """Configured launcher names plus any extra script bundled."""
        names = list(ctx.settings.hyprland_apps)
        apps_dir = ctx.settings.asset("apps")
        if apps_dir.is_dir():
            for path in sorted(apps_dir.iterdir()):
                if path.is_file() and not path.name.startswith(".") and path.name not in names:
                    names.append(path.name)
        return names

    def app_targets(self, ctx: InstallContext) -> list[InstallTarget]:
        apps_dir = ctx.settings.asset("apps")
        return [
            InstallTarget(
                source=apps_dir / name,
                destination=ctx.settings.system_path(f"/usr/local/bin/{name}"),
                mode=0o755,
                privileged=True,
            )
            for name in self.app_names(ctx)
        ]

    def targets(self, ctx: InstallContext) -> list[InstallTarget]:
        return [self.config_target(ctx), *self.app_targets(ctx)]

    def install(self, ctx: InstallContext) -> None:
        install_target(self.config_target(ctx), ctx)

        apps_dir = ctx.settings.asset("apps")
        if not apps_dir.is_dir():
            ctx.missing("install launcher scripts", apps_dir)
            return
        for target in self.app_targets(ctx):
            install_target(target, ctx)

    def uninstall(self, ctx: InstallContext) -> None:
        uninstall_target(self.config_target(ctx), ctx)
        for target in self.app_targets(ctx):
            uninstall_target(target, ctx)

    def is_installed(self, ctx: InstallContext) -> bool:
        config = self.config_target(ctx)
        if not target_installed(config, ctx.fs_for(config)):
            return False
        return all(
            target_installed(t, ctx.fs_for(t)) for t in self.app_targets(ctx) if t.source_available()
        )
