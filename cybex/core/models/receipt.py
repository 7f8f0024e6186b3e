"""
Receipt model — the outcome of one install/uninstall step.

Components don't return values from their steps; they hand a Receipt
to the run context, which collects them into the RunReport. A failed
receipt is always followed by a StepFailure that ends the run.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class Receipt(BaseModel):
    """Result of a single step performed by a component."""

    component: str
    step: str
    status: Literal["ok", "skipped", "failed"] = "ok"

    at: str = Field(default_factory=_now_iso)

    output: str = ""
    error: str | None = None

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Whether the step changed something successfully."""
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        """Whether the step failed."""
        return self.status == "failed"

    @property
    def skipped(self) -> bool:
        """Whether the step was already in its desired state."""
        return self.status == "skipped"

    @classmethod
    def success(
        cls,
        component: str,
        step: str,
        output: str = "",
        **kwargs: Any,
    ) -> Receipt:
        """Create a success receipt."""
        return cls(component=component, step=step, status="ok", output=output, **kwargs)

    @classmethod
    def failure(
        cls,
        component: str,
        step: str,
        error: str,
        **kwargs: Any,
    ) -> Receipt:
        """Create a failure receipt."""
        return cls(component=component, step=step, status="failed", error=error, **kwargs)

    @classmethod
    def skip(
        cls,
        component: str,
        step: str,
        reason: str = "",
        **kwargs: Any,
    ) -> Receipt:
        """Create a skip receipt."""
        return cls(component=component, step=step, status="skipped", output=reason, **kwargs)
