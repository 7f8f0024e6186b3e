"""
npm adapter — global CLI packages installed under a user prefix.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from cybex.adapters.base import PackageManager
from cybex.adapters.shell.command import CommandResult, CommandRunner

logger = logging.getLogger(__name__)

_NODE_VERSION_RE = re.compile(r"v?(\d+)\.(\d+)\.(\d+)")


class NpmGlobalAdapter(PackageManager):
    """``npm install -g --prefix <prefix>`` — no sudo needed."""

    def __init__(self, runner: CommandRunner, prefix: Path):
        self._runner = runner
        self._prefix = prefix

    @property
    def name(self) -> str:
        return "npm"

    @property
    def prefix(self) -> Path:
        return self._prefix

    def is_available(self) -> bool:
        return self._runner.which("npm") is not None

    def is_installed(self, package: str) -> bool:
        result = self._runner.run(
            ["npm", "ls", "-g", "--prefix", str(self._prefix), "--depth=0", package]
        )
        return result.ok and package in result.stdout

    def install(self, *packages: str) -> CommandResult:
        return self._runner.run(
            ["npm", "install", "-g", *packages, "--prefix", str(self._prefix)],
            interactive=True,
        )

    def remove(self, *packages: str) -> CommandResult:
        return self._runner.run(
            ["npm", "uninstall", "-g", *packages, "--prefix", str(self._prefix)],
            interactive=True,
        )

    def node_version(self) -> tuple[int, int, int] | None:
        """Installed Node.js version, or None when node is missing."""
        if self._runner.which("node") is None:
            return None
        result = self._runner.run(["node", "--version"])
        if not result.ok:
            return None
        match = _NODE_VERSION_RE.search(result.stdout)
        if not match:
            logger.debug("Unparseable node version: %r", result.stdout)
            return None
        return int(match.group(1)), int(match.group(2)), int(match.group(3))
