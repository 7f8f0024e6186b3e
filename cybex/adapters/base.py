"""
Adapter base — the contracts between components and system tools.

Components only talk to package managers, service managers and
bootloaders through these interfaces, never to the tools directly.
That keeps every component testable against the fakes in mock.py.

Query methods never raise: absence is an answer, not an error.
Mutating methods return ``CommandResult``; the component decides
whether a failure is fatal.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from cybex.adapters.shell.command import CommandResult


class Adapter(ABC):
    """Abstract base class for all adapters."""

    @property
    @abstractmethod
    def name(self) -> str:
        """The adapter identifier (e.g., 'pacman', 'systemd', 'limine')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the underlying tool exists on this host.

        Should be fast and never raise.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


class PackageManager(Adapter):
    """Query, install and remove packages."""

    @abstractmethod
    def is_installed(self, package: str) -> bool:
        """Whether ``package`` is present in the package database."""

    @abstractmethod
    def install(self, *packages: str) -> CommandResult:
        """Install one or more packages."""

    @abstractmethod
    def remove(self, *packages: str) -> CommandResult:
        """Remove one or more packages."""


class ServiceManager(Adapter):
    """Query and change the state of system services."""

    @abstractmethod
    def is_enabled(self, service: str) -> bool: ...

    @abstractmethod
    def is_active(self, service: str) -> bool: ...

    @abstractmethod
    def enable(self, service: str) -> CommandResult: ...

    @abstractmethod
    def start(self, service: str) -> CommandResult: ...

    @abstractmethod
    def stop(self, service: str) -> CommandResult: ...

    @abstractmethod
    def disable(self, service: str) -> CommandResult: ...


class BootloaderConfig(Adapter):
    """Read and change which boot entry is the default."""

    @abstractmethod
    def get_default_entry(self) -> str | None:
        """The current default entry, or None if unset/unreadable."""

    @abstractmethod
    def set_default_entry(self, kernel: str) -> str | None:
        """Make the entry booting ``kernel`` the default.

        Returns:
            The entry that is now default, or None if no entry for
            ``kernel`` exists.
        """

    @abstractmethod
    def reset_default_entry(self) -> str | None:
        """Point the default back at the first entry."""
