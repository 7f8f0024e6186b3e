"""
npm CLIs — AI coding assistants installed under ~/.local.

Both CLIs share one PATH block in the shell profiles; it is only
removed when the last of them is uninstalled.
"""

from __future__ import annotations

import logging
import re
from typing import ClassVar

from cybex.core.components.base import Component
from cybex.core.context import InstallContext
from cybex.core.models.environment import ProfileBlock
from cybex.core.models.requirements import Requirements
from cybex.core.models.settings import Settings

logger = logging.getLogger(__name__)

PATH_BLOCK_KEY = "local-bin"


def local_bin_block(settings: Settings) -> ProfileBlock:
    """Profile lines putting the npm prefix's bin directory on PATH."""
    local_bin = settings.local_bin
    try:
        relative = str(local_bin.relative_to(settings.home))
        bash_dir, fish_dir = f"$HOME/{relative}", f"~/{relative}"
    except ValueError:
        relative = bash_dir = fish_dir = str(local_bin)
    return ProfileBlock(
        key=PATH_BLOCK_KEY,
        bash=[f'export PATH="{bash_dir}:$PATH"'],
        fish=[f"fish_add_path {fish_dir}"],
        present_pattern=r"(?m)^[^#\n]*(PATH|fish_add_path)[^\n]*" + re.escape(relative),
    )


class NpmCli(Component):
    """A global npm package that provides a command-line tool."""

    package: ClassVar[str]
    command: ClassVar[str]
    requires = Requirements(internet=True)

    def install(self, ctx: InstallContext) -> None:
        npm = ctx.adapters.npm
        self._check_node(ctx)

        try:
            ctx.adapters.fs.make_dir(ctx.settings.local_bin)
        except OSError as e:
            ctx.fail(f"create {ctx.settings.local_bin}", str(e))

        if npm.is_installed(self.package):
            ctx.skip(f"install {self.package}", "already installed")
        else:
            ctx.step(f"Installing {self.package} globally")
            ctx.check(npm.install(self.package), f"install {self.package}")
            ctx.ok(f"install {self.package}", str(ctx.settings.local_prefix))

        ctx.env_patch.add_block(local_bin_block(ctx.settings))
        ctx.env_patch.prepend_path(str(ctx.settings.local_bin))

    def _check_node(self, ctx: InstallContext) -> None:
        ctx.step("Checking Node.js version")
        version = ctx.adapters.npm.node_version()
        minimum = ctx.settings.min_node_major
        if version is None:
            ctx.fail("check Node.js", "Node.js is not installed (run: cybex packages)")
        shown = ".".join(str(part) for part in version)
        if version[0] < minimum:
            ctx.fail("check Node.js", f"Node.js {shown} is too old, minimum is v{minimum}.0.0")
        ctx.reporter.success(f"Node.js {shown} detected")

    def uninstall(self, ctx: InstallContext) -> None:
        npm = ctx.adapters.npm
        if npm.is_installed(self.package):
            ctx.step(f"Removing {self.package}")
            ctx.check(npm.remove(self.package), f"remove {self.package}")
            ctx.ok(f"remove {self.package}")
        else:
            ctx.skip(f"remove {self.package}", "not installed")

        still_installed = [
            cli.package for cli in NPM_CLIS if cli is not type(self) and npm.is_installed(cli.package)
        ]
        if still_installed:
            ctx.skip("remove PATH entry", f"{', '.join(still_installed)} still installed")
        else:
            ctx.env_patch.remove_block(PATH_BLOCK_KEY)

    def is_installed(self, ctx: InstallContext) -> bool:
        return ctx.adapters.npm.is_installed(self.package)

    def next_steps(self) -> list[str]:
        return ["Run 'source ~/.bashrc' or restart your shell to update PATH"]


class ClaudeCode(NpmCli):
    name = "claude"
    title = "Installing Claude Code"
    description = "Claude Code CLI (npm, ~/.local)"
    package = "@anthropic-ai/claude-code"
    command = "claude"


class Codex(NpmCli):
    name = "codex"
    title = "Installing Codex CLI"
    description = "OpenAI Codex CLI (npm, ~/.local)"
    package = "@openai/codex"
    command = "codex"


NPM_CLIS: tuple[type[NpmCli], ...] = (ClaudeCode, Codex)
