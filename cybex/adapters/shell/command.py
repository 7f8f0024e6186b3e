"""
Shell command adapter — the single place where subprocesses are started.

Every external tool (pacman, systemctl, npm, ssh-keygen, ...) is run
through ``CommandRunner``. Like every adapter, it never raises for a
failing command: failures come back as a ``CommandResult`` with
``ok=False`` and the caller decides whether that is fatal.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import time
from collections.abc import Sequence
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Outcome of one command."""

    command: list[str]
    returncode: int = 0
    stdout: str = ""
    stderr: str = ""
    elapsed_ms: int = 0
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.error

    @property
    def message(self) -> str:
        """Best available failure description."""
        if self.error:
            return self.error
        return self.stderr.strip() or f"exited with code {self.returncode}"


@dataclass
class CommandRunner:
    """Run commands, optionally through sudo.

    Args:
        default_timeout: Seconds before a captured command is killed.
        env_overrides: Extra environment for every command.
    """

    default_timeout: int = 600
    env_overrides: dict[str, str] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return "shell"

    def is_root(self) -> bool:
        return os.geteuid() == 0

    def which(self, program: str) -> str | None:
        """Locate a program on PATH."""
        return shutil.which(program)

    def _prepare(self, cmd: Sequence[str], sudo: bool) -> list[str]:
        argv = list(cmd)
        if sudo and not self.is_root():
            argv = ["sudo", *argv]
        return argv

    def _env(self) -> dict[str, str] | None:
        if not self.env_overrides:
            return None
        env = os.environ.copy()
        env.update(self.env_overrides)
        return env

    def run(
        self,
        cmd: Sequence[str],
        *,
        sudo: bool = False,
        interactive: bool = False,
        input: str | None = None,
        timeout: int | None = None,
        cwd: str | None = None,
    ) -> CommandResult:
        """Run a command and wait for it.

        Args:
            cmd: Argument vector.
            sudo: Prefix with ``sudo`` unless already root.
            interactive: Inherit the terminal instead of capturing output
                (package downloads, password prompts).
            input: Text fed to stdin (captured mode only).
            timeout: Seconds; None uses the runner default. Interactive
                commands never time out.
            cwd: Working directory.
        """
        argv = self._prepare(cmd, sudo)
        logger.debug("Executing: %s", " ".join(argv))
        start = time.monotonic()

        try:
            if interactive:
                proc = subprocess.run(argv, cwd=cwd, env=self._env())
                stdout, stderr = "", ""
            else:
                proc = subprocess.run(
                    argv,
                    cwd=cwd,
                    env=self._env(),
                    input=input,
                    capture_output=True,
                    text=True,
                    timeout=timeout or self.default_timeout,
                )
                stdout, stderr = proc.stdout, proc.stderr
        except subprocess.TimeoutExpired:
            return CommandResult(
                command=argv,
                returncode=-1,
                error=f"timed out after {timeout or self.default_timeout}s",
                elapsed_ms=int((time.monotonic() - start) * 1000),
            )
        except OSError as e:
            return CommandResult(command=argv, returncode=-1, error=f"cannot execute: {e}")

        result = CommandResult(
            command=argv,
            returncode=proc.returncode,
            stdout=stdout,
            stderr=stderr,
            elapsed_ms=int((time.monotonic() - start) * 1000),
        )
        if not result.ok:
            logger.debug("Command failed (%d): %s", proc.returncode, " ".join(argv))
        return result

    def spawn(self, cmd: Sequence[str]) -> bool:
        """Start a long-running helper detached from this process."""
        argv = list(cmd)
        logger.debug("Spawning: %s", " ".join(argv))
        try:
            subprocess.Popen(
                argv,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
                env=self._env(),
            )
        except OSError as e:
            logger.warning("Cannot spawn %s: %s", argv[0], e)
            return False
        return True
