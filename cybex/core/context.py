"""
Install context — everything a component may touch during a run.

One context is shared by every component of a run. It carries the
settings, the adapter registry, the reporter and the environment patch
being accumulated, and it turns step outcomes into receipts:

    ctx.ok(step)            → success receipt + ✓ line
    ctx.skip(step, reason)  → skip receipt + ⊙ line
    ctx.fail(step, detail)  → failed receipt + ✗ line, raises StepFailure
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, NoReturn

from cybex.adapters.registry import AdapterRegistry
from cybex.adapters.shell.command import CommandResult
from cybex.adapters.shell.filesystem import LocalFilesystem
from cybex.core.engine.reporter import NullReporter, Reporter
from cybex.core.errors import StepFailure
from cybex.core.models.environment import EnvironmentPatch
from cybex.core.models.receipt import Receipt
from cybex.core.models.settings import Settings
from cybex.core.models.target import InstallTarget
from cybex.core.services.backup import BackupManager

logger = logging.getLogger(__name__)


def _refuse(message: str) -> bool:
    return False


@dataclass
class InstallContext:
    """Shared state of one setup run."""

    settings: Settings
    adapters: AdapterRegistry
    reporter: Reporter = field(default_factory=NullReporter)
    env_patch: EnvironmentPatch = field(default_factory=EnvironmentPatch)
    confirm: Callable[[str], bool] = _refuse
    clock: Callable[[], datetime] | None = None

    receipts: list[Receipt] = field(default_factory=list)
    component: str = ""
    facts: dict[str, Any] = field(default_factory=dict)

    # ── Adapters ───────────────────────────────────────────────

    def fs_for(self, target: InstallTarget) -> LocalFilesystem:
        """Filesystem able to write ``target``'s destination."""
        return self.adapters.system_fs if target.privileged else self.adapters.fs

    def backups(self, privileged: bool = False) -> BackupManager:
        fs = self.adapters.system_fs if privileged else self.adapters.fs
        return BackupManager(fs, clock=self.clock)

    # ── Step outcomes ──────────────────────────────────────────

    def record(self, receipt: Receipt) -> Receipt:
        self.receipts.append(receipt)
        return receipt

    def step(self, message: str) -> None:
        self.reporter.step(message)

    def ok(self, step: str, output: str = "", **metadata: Any) -> Receipt:
        self.reporter.success(step)
        return self.record(Receipt.success(self.component, step, output, metadata=metadata))

    def skip(self, step: str, reason: str = "") -> Receipt:
        self.reporter.skip(f"{step}: {reason}" if reason else step)
        return self.record(Receipt.skip(self.component, step, reason))

    def warn(self, message: str) -> None:
        logger.info("%s: %s", self.component, message)
        self.reporter.warn(message)

    def missing(self, step: str, path: Path) -> Receipt:
        """A source asset is missing: report it and skip the step."""
        self.reporter.error(f"{step}: source not found at {path}")
        return self.record(Receipt.skip(self.component, step, f"source not found: {path}"))

    def fail(self, step: str, detail: str = "") -> NoReturn:
        """Record a failed step and end the run."""
        self.reporter.error(f"{step} failed" + (f": {detail}" if detail else ""))
        self.record(Receipt.failure(self.component, step, detail or "failed"))
        raise StepFailure(self.component, step, detail)

    def check(self, result: CommandResult, step: str) -> CommandResult:
        """Fail the run if a mutating command failed."""
        if not result.ok:
            self.fail(step, result.message)
        return result

    def run(
        self,
        cmd: Sequence[str],
        step: str,
        *,
        sudo: bool = False,
        interactive: bool = False,
    ) -> CommandResult:
        """Run a mutating command; a failure ends the run."""
        return self.check(self.adapters.runner.run(cmd, sudo=sudo, interactive=interactive), step)
