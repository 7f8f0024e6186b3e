"""
Error taxonomy for setup runs.

Every failure that ends a run is one of these. The CLI maps all of them
to exit code 1; anything else is a bug and propagates with a traceback.

    PreflightError              — sudo/network/disk unmet, nothing touched yet
    ValidationError             — malformed CLI input, nothing touched yet
    StepFailure                 — an install/uninstall step failed mid-run
    IrreversibleOperationError  — uninstall refused to protect user data
"""

from __future__ import annotations


class CybexError(Exception):
    """Base class for all expected setup failures."""


class PreflightError(CybexError):
    """A run requirement (privilege, connectivity, disk space) is unmet."""


class ValidationError(CybexError):
    """The requested component selection is malformed."""


class IrreversibleOperationError(CybexError):
    """Uninstall was requested for a component that would destroy user data."""

    def __init__(self, component: str, reason: str = ""):
        self.component = component
        self.reason = reason or "removal could destroy unrecoverable user data"
        super().__init__(f"{component} cannot be uninstalled: {self.reason}")


class StepFailure(CybexError):
    """A single install/uninstall step failed. Fatal for the run, never retried."""

    def __init__(self, component: str, step: str, detail: str = ""):
        self.component = component
        self.step = step
        self.detail = detail
        message = f"{component}: {step} failed"
        if detail:
            message = f"{message} — {detail}"
        super().__init__(message)
