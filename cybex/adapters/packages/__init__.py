"""Package manager adapters: pacman, yay, npm."""

from cybex.adapters.packages.npm import NpmGlobalAdapter
from cybex.adapters.packages.pacman import PacmanAdapter, YayAdapter

__all__ = ["NpmGlobalAdapter", "PacmanAdapter", "YayAdapter"]
