"""
Auto-tile — a Hyprland helper that tiles the first window per workspace.

The script lives in ~/.local/bin; Hyprland starts it through a managed
``exec-once`` block in ~/.config/hypr/custom/execs.conf. For the
current session the helper is spawned detached (or restarted when the
script was updated).
"""

from __future__ import annotations

import logging
from pathlib import Path

from cybex.core.components.base import Component
from cybex.core.context import InstallContext
from cybex.core.models.requirements import Requirements
from cybex.core.models.settings import Settings
from cybex.core.models.target import InstallTarget, TargetState
from cybex.core.services.installer import ensure_packages, install_target, uninstall_target
from cybex.core.services.probe import target_installed
from cybex.core.services.shell_profile import add_block, has_block, remove_block, strip_managed_blocks

logger = logging.getLogger(__name__)

BLOCK_KEY = "auto-tile"


def _shown(settings: Settings, path: Path) -> str:
    try:
        return f"~/{path.relative_to(settings.home)}"
    except ValueError:
        return str(path)


class AutoTile(Component):
    name = "auto-tile"
    title = "Installing Hyprland Auto-Tile Helper"
    description = "Hyprland auto-tiling helper (needs jq, socat)"
    requires = Requirements(sudo=True, internet=True)

    def script_target(self, ctx: InstallContext) -> InstallTarget:
        return InstallTarget(
            source=ctx.settings.asset("scripts", "auto-tile"),
            destination=ctx.settings.local_bin / "auto-tile",
            label="auto-tile script",
            mode=0o755,
        )

    def execs_path(self, ctx: InstallContext) -> Path:
        return ctx.settings.home_path(".config", "hypr", "custom", "execs.conf")

    def exec_line(self, ctx: InstallContext) -> str:
        return f"exec-once = {_shown(ctx.settings, self.script_target(ctx).destination)}"

    def targets(self, ctx: InstallContext) -> list[InstallTarget]:
        return [self.script_target(ctx)]

    # ── Install ────────────────────────────────────────────────

    def install(self, ctx: InstallContext) -> None:
        if not self._ensure_dependencies(ctx):
            return

        target = self.script_target(ctx)
        state = install_target(target, ctx)
        if state is None:
            return

        self._add_exec(ctx)
        self._start_helper(ctx, target.destination, updated=state is not TargetState.CURRENT)

    def _ensure_dependencies(self, ctx: InstallContext) -> bool:
        runner = ctx.adapters.runner
        deps = ctx.settings.packages.auto_tile_deps
        missing = [dep for dep in deps if runner.which(dep) is None]
        if missing:
            ensure_packages(ctx.adapters.pacman, missing, ctx)

        still_missing = [dep for dep in missing if runner.which(dep) is None]
        if still_missing:
            ctx.reporter.error(f"auto-tile requires {', '.join(still_missing)}, which are still missing")
            ctx.skip("install auto-tile", "dependencies unresolved")
            return False
        return True

    def _add_exec(self, ctx: InstallContext) -> None:
        fs = ctx.adapters.fs
        execs = self.execs_path(ctx)
        line = self.exec_line(ctx)
        if not fs.exists(execs):
            ctx.reporter.error(f"Hyprland execs.conf not found at {execs}; add '{line}' manually")
            ctx.skip("add auto-tile to Hyprland execs", "execs.conf not found")
            return

        text = fs.read_text(execs)
        if line in strip_managed_blocks(text):
            ctx.skip("add auto-tile to Hyprland execs", "configured outside cybex")
            return
        updated = add_block(text, BLOCK_KEY, ["# Auto-tile first window per workspace", line])
        if updated == text:
            ctx.skip("add auto-tile to Hyprland execs", "already present")
            return
        try:
            fs.write_text(execs, updated)
        except OSError as e:
            ctx.fail("add auto-tile to Hyprland execs", str(e))
        ctx.ok("add auto-tile to Hyprland execs", str(execs))

    def _is_running(self, ctx: InstallContext, script: Path) -> bool:
        return ctx.adapters.runner.run(["pgrep", "-f", str(script)]).ok

    def _start_helper(self, ctx: InstallContext, script: Path, updated: bool) -> None:
        runner = ctx.adapters.runner
        if self._is_running(ctx, script):
            if not updated:
                ctx.skip("start auto-tile helper", "already running")
                return
            ctx.step("Restarting auto-tile helper with the updated script")
            runner.run(["pkill", "-f", str(script)])
            step = "restart auto-tile helper"
        else:
            ctx.step("Starting auto-tile helper for the current session")
            step = "start auto-tile helper"

        if runner.spawn([str(script)]):
            ctx.ok(step)
        else:
            ctx.warn(f"Could not start {script}; it will start with the next Hyprland session")

    # ── Uninstall ──────────────────────────────────────────────

    def uninstall(self, ctx: InstallContext) -> None:
        target = self.script_target(ctx)
        if self._is_running(ctx, target.destination):
            ctx.step("Stopping auto-tile helper")
            ctx.run(["pkill", "-f", str(target.destination)], "stop auto-tile helper")
            ctx.ok("stop auto-tile helper")

        uninstall_target(target, ctx)

        fs = ctx.adapters.fs
        execs = self.execs_path(ctx)
        text = fs.read_text(execs) if fs.exists(execs) else ""
        if has_block(text, BLOCK_KEY):
            try:
                fs.write_text(execs, remove_block(text, BLOCK_KEY))
            except OSError as e:
                ctx.fail("remove auto-tile from Hyprland execs", str(e))
            ctx.ok("remove auto-tile from Hyprland execs")
        else:
            ctx.skip("remove auto-tile from Hyprland execs", "not present")

    def is_installed(self, ctx: InstallContext) -> bool:
        target = self.script_target(ctx)
        if not target_installed(target, ctx.fs_for(target)):
            return False
        execs = self.execs_path(ctx)
        fs = ctx.adapters.fs
        return fs.exists(execs) and self.exec_line(ctx) in fs.read_text(execs)

    def next_steps(self) -> list[str]:
        return ["Reload Hyprland (hyprctl reload) if the auto-tile helper does not engage immediately"]
