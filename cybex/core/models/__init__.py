"""
Domain models — Pydantic types for setup runs.

All models are re-exported here for convenient access:

    from cybex.core.models import InstallTarget, BackupRecord, Receipt, Settings
"""

from cybex.core.models.backup import BackupRecord
from cybex.core.models.environment import EnvironmentPatch, ProfileBlock
from cybex.core.models.receipt import Receipt
from cybex.core.models.requirements import Requirements
from cybex.core.models.settings import (
    KernelSettings,
    PackageSettings,
    PlymouthSettings,
    PreflightSettings,
    Settings,
)
from cybex.core.models.target import InstallTarget, TargetState

__all__ = [
    # backup.py
    "BackupRecord",
    # environment.py
    "EnvironmentPatch",
    "InstallTarget",
    "KernelSettings",
    "PackageSettings",
    "PlymouthSettings",
    "PreflightSettings",
    "ProfileBlock",
    # receipt.py
    "Receipt",
    "Requirements",
    # settings.py
    "Settings",
    # target.py
    "TargetState",
]
