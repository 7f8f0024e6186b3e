"""
Requirements — what a component needs from the host before it may run.
"""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel


class Requirements(BaseModel):
    """Preflight flags. The union across a run gates it atomically."""

    sudo: bool = False
    internet: bool = False
    disk_space: bool = False

    @property
    def any(self) -> bool:
        return self.sudo or self.internet or self.disk_space

    def union(self, other: Requirements) -> Requirements:
        return Requirements(
            sudo=self.sudo or other.sudo,
            internet=self.internet or other.internet,
            disk_space=self.disk_space or other.disk_space,
        )

    @classmethod
    def aggregate(cls, items: Iterable[Requirements]) -> Requirements:
        """Union of all given requirements."""
        total = cls()
        for item in items:
            total = total.union(item)
        return total

    def names(self) -> list[str]:
        return [name for name in ("sudo", "internet", "disk_space") if getattr(self, name)]
