"""
Components — the installable units of a cybex run.

    base.py        Component contract
    registry.py    fixed execution order, name/alias lookup
    <one module per component family>
"""

from cybex.core.components.base import Component
from cybex.core.components.registry import ComponentRegistry, default_components

__all__ = ["Component", "ComponentRegistry", "default_components"]
