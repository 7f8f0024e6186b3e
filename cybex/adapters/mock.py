"""
Mock adapters — in-memory test doubles for every system tool.

Each fake keeps a call log so tests can assert not only on end state
but on which mutating commands were (or weren't) issued.

    registry = fake_registry(settings, pacman=FakePackageManager(installed={"docker"}))
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from cybex.adapters.base import BootloaderConfig, PackageManager, ServiceManager
from cybex.adapters.registry import AdapterRegistry
from cybex.adapters.shell.command import CommandResult, CommandRunner
from cybex.adapters.shell.filesystem import LocalFilesystem
from cybex.core.models.settings import Settings


@dataclass
class FakeCall:
    argv: list[str]
    sudo: bool = False
    interactive: bool = False


class FakeRunner(CommandRunner):
    """Command runner that records commands instead of running them.

    Every command succeeds with empty output unless a response was
    registered for a prefix of its argument vector. The most recently
    registered matching prefix wins.
    """

    def __init__(self, programs: Iterable[str] = (), root: bool = False):
        super().__init__()
        self.programs = set(programs)
        self.root = root
        self.calls: list[FakeCall] = []
        self.spawned: list[list[str]] = []
        self._responses: list[tuple[tuple[str, ...], CommandResult]] = []

    def respond(
        self,
        prefix: Sequence[str],
        *,
        returncode: int = 0,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        """Register the result for commands starting with ``prefix``."""
        self._responses.append(
            (tuple(prefix), CommandResult(list(prefix), returncode, stdout, stderr))
        )

    def fail(self, prefix: Sequence[str], stderr: str = "mock failure") -> None:
        self.respond(prefix, returncode=1, stderr=stderr)

    def is_root(self) -> bool:
        return self.root

    def which(self, program: str) -> str | None:
        return f"/usr/bin/{program}" if program in self.programs else None

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
        argv = list(cmd)
        self.calls.append(FakeCall(argv=argv, sudo=sudo, interactive=interactive))
        for prefix, result in reversed(self._responses):
            if tuple(argv[: len(prefix)]) == prefix:
                return CommandResult(argv, result.returncode, result.stdout, result.stderr)
        return CommandResult(argv)

    def spawn(self, cmd: Sequence[str]) -> bool:
        self.spawned.append(list(cmd))
        return True

    @property
    def commands(self) -> list[str]:
        """Every command line run so far."""
        return [" ".join(call.argv) for call in self.calls]

    def ran(self, *prefix: str) -> bool:
        """Whether any command started with ``prefix``."""
        return any(tuple(call.argv[: len(prefix)]) == prefix for call in self.calls)


class FakePackageManager(PackageManager):
    """Package database backed by a set."""

    def __init__(
        self,
        adapter_name: str = "fake-pkg",
        installed: Iterable[str] = (),
        available: bool = True,
        failing: Iterable[str] = (),
        url_packages: dict[str, str] | None = None,
    ):
        self._name = adapter_name
        self.installed = set(installed)
        self._available = available
        self.failing = set(failing)
        self.url_packages = dict(url_packages or {})
        self.keys: set[str] = set()
        self.call_log: list[tuple[str, tuple[str, ...]]] = []

    @property
    def name(self) -> str:
        return self._name

    def is_available(self) -> bool:
        return self._available

    def is_installed(self, package: str) -> bool:
        return package in self.installed

    def _result(self, op: str, packages: tuple[str, ...]) -> CommandResult:
        bad = [p for p in packages if p in self.failing]
        if bad:
            return CommandResult([op, *packages], 1, stderr=f"cannot {op} {' '.join(bad)}")
        return CommandResult([op, *packages])

    def install(self, *packages: str) -> CommandResult:
        self.call_log.append(("install", packages))
        result = self._result("install", packages)
        if result.ok:
            self.installed.update(packages)
        return result

    def remove(self, *packages: str) -> CommandResult:
        self.call_log.append(("remove", packages))
        result = self._result("remove", packages)
        if result.ok:
            self.installed.difference_update(packages)
        return result

    # pacman extras used by the kernel component

    def install_files(self, *urls: str) -> CommandResult:
        self.call_log.append(("install_files", urls))
        self.installed.update(self.url_packages.get(u, u) for u in urls)
        return CommandResult(["install_files", *urls])

    def refresh(self) -> CommandResult:
        self.call_log.append(("refresh", ()))
        return CommandResult(["refresh"])

    def has_key(self, key_id: str) -> bool:
        return key_id in self.keys

    def import_key(self, key_id: str, keyserver: str) -> CommandResult:
        self.call_log.append(("import_key", (key_id,)))
        self.keys.add(key_id)
        return CommandResult(["import_key", key_id])

    def operations(self, op: str) -> list[tuple[str, ...]]:
        """Argument tuples of every call to ``op``."""
        return [args for name, args in self.call_log if name == op]


class FakeNpm(FakePackageManager):
    """npm adapter double with a configurable Node.js version."""

    def __init__(
        self,
        prefix: Path,
        node: tuple[int, int, int] | None = (20, 11, 0),
        **kwargs: Any,
    ):
        super().__init__(adapter_name="npm", **kwargs)
        self.prefix = prefix
        self.node = node

    def node_version(self) -> tuple[int, int, int] | None:
        return self.node


class FakeServiceManager(ServiceManager):
    """Service registry backed by two sets."""

    def __init__(
        self,
        enabled: Iterable[str] = (),
        active: Iterable[str] = (),
        failing: Iterable[str] = (),
    ):
        self.enabled = set(enabled)
        self.active = set(active)
        self.failing = set(failing)
        self.call_log: list[tuple[str, str]] = []

    @property
    def name(self) -> str:
        return "fake-services"

    def is_available(self) -> bool:
        return True

    def is_enabled(self, service: str) -> bool:
        return service in self.enabled

    def is_active(self, service: str) -> bool:
        return service in self.active

    def _change(self, op: str, service: str, target: set[str], add: bool) -> CommandResult:
        self.call_log.append((op, service))
        if service in self.failing:
            return CommandResult([op, service], 1, stderr=f"{op} {service} failed")
        if add:
            target.add(service)
        else:
            target.discard(service)
        return CommandResult([op, service])

    def enable(self, service: str) -> CommandResult:
        return self._change("enable", service, self.enabled, True)

    def start(self, service: str) -> CommandResult:
        return self._change("start", service, self.active, True)

    def stop(self, service: str) -> CommandResult:
        return self._change("stop", service, self.active, False)

    def disable(self, service: str) -> CommandResult:
        return self._change("disable", service, self.enabled, False)

    @property
    def operations(self) -> list[str]:
        return [op for op, _ in self.call_log]


class FakeBootloader(BootloaderConfig):
    """Bootloader with an ordered entry list and an index default."""

    def __init__(self, entries: Iterable[str] = ("linux",), default: str | None = "0"):
        self.entries = list(entries)
        self.default = default

    @property
    def name(self) -> str:
        return "fake-boot"

    def is_available(self) -> bool:
        return True

    def get_default_entry(self) -> str | None:
        return self.default

    def set_default_entry(self, kernel: str) -> str | None:
        for index, entry in enumerate(self.entries):
            if entry == kernel:
                self.default = str(index)
                return self.default
        return None

    def reset_default_entry(self) -> str | None:
        self.default = "0"
        return self.default


def fake_registry(settings: Settings, **overrides: Any) -> AdapterRegistry:
    """A registry made of fakes; keyword arguments replace single adapters."""
    parts: dict[str, Any] = {
        "runner": FakeRunner(),
        "fs": LocalFilesystem(),
        "system_fs": LocalFilesystem(),
        "pacman": FakePackageManager("pacman"),
        "aur": FakePackageManager("yay"),
        "npm": FakeNpm(settings.local_prefix),
        "services": FakeServiceManager(),
        "bootloader": FakeBootloader(),
    }
    parts.update(overrides)
    return AdapterRegistry(settings=settings, **parts)
