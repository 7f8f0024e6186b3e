"""
Component registry — the fixed, ordered set of components.

Order matters: it is the execution order of every run, whatever order
the names were given on the command line.
"""

from __future__ import annotations

from collections.abc import Iterator

from cybex.core.components.autotile import AutoTile
from cybex.core.components.base import Component
from cybex.core.components.files import Screensaver, StarshipPrompt
from cybex.core.components.hyprland import Hyprland
from cybex.core.components.kernel import MainlineKernel
from cybex.core.components.keyboard import MacosKeys
from cybex.core.components.npm_cli import ClaudeCode, Codex
from cybex.core.components.packages import Packages
from cybex.core.components.plymouth import Plymouth
from cybex.core.components.sshkey import SshKey


def default_components() -> list[Component]:
    return [
        MainlineKernel(),
        Packages(),
        ClaudeCode(),
        Codex(),
        Screensaver(),
        Plymouth(),
        StarshipPrompt(),
        MacosKeys(),
        SshKey(),
        Hyprland(),
        AutoTile(),
    ]


class ComponentRegistry:
    """Ordered lookup of components by name or alias."""

    def __init__(self, components: list[Component] | None = None):
        self._components = list(components) if components is not None else default_components()
        self._by_name: dict[str, Component] = {}
        for component in self._components:
            for key in (component.name, *component.aliases):
                if key in self._by_name:
                    raise ValueError(f"Duplicate component name or alias: {key}")
                self._by_name[key] = component

    def get(self, name: str) -> Component | None:
        """Component for a name or alias, or None."""
        return self._by_name.get(name)

    def names(self) -> list[str]:
        return [c.name for c in self._components]

    def in_all(self) -> list[Component]:
        """The components ``all`` selects."""
        return [c for c in self._components if c.in_all]

    def ordered(self, selected: set[str]) -> list[Component]:
        """The components named in ``selected`` in registry order."""
        return [c for c in self._components if c.name in selected]

    def __iter__(self) -> Iterator[Component]:
        return iter(self._components)

    def __len__(self) -> int:
        return len(self._components)
