"""
EnvironmentPatch — shell environment changes collected during a run.

Components never edit ~/.bashrc or the process environment directly.
They describe what they need here; the driver applies the whole patch
once, after every selected component has run.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class ProfileBlock(BaseModel):
    """A named block of lines for the user's shell profiles."""

    key: str
    bash: list[str] = Field(default_factory=list)
    fish: list[str] = Field(default_factory=list)
    # regex: a match outside our blocks means the user configured it by hand
    present_pattern: str = ""


class EnvironmentPatch(BaseModel):
    """Profile blocks to add or remove plus PATH entries for this process."""

    add: list[ProfileBlock] = Field(default_factory=list)
    remove: list[str] = Field(default_factory=list)
    path_prepend: list[str] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.add or self.remove or self.path_prepend)

    def add_block(self, block: ProfileBlock) -> None:
        """Queue a block; a later add of the same key replaces the earlier one."""
        self.add = [b for b in self.add if b.key != block.key]
        self.add.append(block)
        if block.key in self.remove:
            self.remove.remove(block.key)

    def remove_block(self, key: str) -> None:
        """Queue removal of a block by key."""
        self.add = [b for b in self.add if b.key != key]
        if key not in self.remove:
            self.remove.append(key)

    def prepend_path(self, entry: str) -> None:
        if entry not in self.path_prepend:
            self.path_prepend.append(entry)
