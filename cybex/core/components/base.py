"""
Component base — one installable unit of the desktop setup.

A component declares what it needs from the host (``requires``), which
files it owns (``targets``) and how to install, uninstall and probe
itself. Components are stateless singletons; everything they touch goes
through the InstallContext.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar

from cybex.core.context import InstallContext
from cybex.core.errors import IrreversibleOperationError
from cybex.core.models.requirements import Requirements
from cybex.core.models.target import InstallTarget
from cybex.core.services.installer import install_target, uninstall_target
from cybex.core.services.probe import target_installed


class Component(ABC):
    """Abstract base class for every component."""

    name: ClassVar[str]
    title: ClassVar[str]
    description: ClassVar[str]
    aliases: ClassVar[tuple[str, ...]] = ()
    requires: ClassVar[Requirements] = Requirements()

    in_all: ClassVar[bool] = True          # selected by ``all``
    reversible: ClassVar[bool] = True
    irreversible_reason: ClassVar[str] = ""
    uninstall_warning: ClassVar[str] = ""  # non-empty → ask before uninstalling

    def uninstall_prompt(self, ctx: InstallContext) -> str:
        """Warning shown before uninstalling; empty means no confirmation."""
        return self.uninstall_warning

    @property
    def uninstall_requires(self) -> Requirements:
        """Uninstall never downloads; it only needs sudo if install did."""
        return Requirements(sudo=self.requires.sudo)

    def targets(self, ctx: InstallContext) -> list[InstallTarget]:
        """Files and directories this component owns."""
        return []

    def install(self, ctx: InstallContext) -> None:
        for target in self.targets(ctx):
            install_target(target, ctx)

    def uninstall(self, ctx: InstallContext) -> None:
        if not self.reversible:
            raise IrreversibleOperationError(self.name, self.irreversible_reason)
        for target in reversed(self.targets(ctx)):
            uninstall_target(target, ctx)

    def is_installed(self, ctx: InstallContext) -> bool:
        targets = self.targets(ctx)
        return bool(targets) and all(
            target_installed(t, ctx.fs_for(t)) for t in targets
        )

    def next_steps(self) -> list[str]:
        """Reminders printed after a successful install."""
        return []

    def matches(self, name: str) -> bool:
        return name == self.name or name in self.aliases

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


class SimpleComponent(Component):
    """A component that is nothing but its targets."""

    @abstractmethod
    def targets(self, ctx: InstallContext) -> list[InstallTarget]: ...
