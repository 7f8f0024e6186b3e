"""
Engine executor — the run driver.

Flow:
    arguments → resolve components → validate → aggregate requirements
              → preflight (once) → components in registry order
              → environment patch → report → audit entry

Validation and preflight raise before anything is touched. A component
failure (StepFailure) stops the run; components after it never start,
but the environment patch of those that completed is still applied.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from cybex.core.components.base import Component
from cybex.core.components.registry import ComponentRegistry
from cybex.core.context import InstallContext
from cybex.core.errors import IrreversibleOperationError, StepFailure, ValidationError
from cybex.core.models.receipt import Receipt
from cybex.core.models.requirements import Requirements
from cybex.core.persistence.audit import AuditEntry, AuditWriter
from cybex.core.services.preflight import PreflightChecker
from cybex.core.services.shell_profile import apply_patch

logger = logging.getLogger(__name__)

INSTALL = "install"
UNINSTALL = "uninstall"
ALL = "all"


@dataclass
class ExecutionPlan:
    """The components a run will execute, in order."""

    operation_id: str = ""
    mode: str = INSTALL
    requested: list[str] = field(default_factory=list)
    components: list[Component] = field(default_factory=list)

    @property
    def names(self) -> list[str]:
        return [c.name for c in self.components]

    @property
    def requirements(self) -> Requirements:
        if self.mode == UNINSTALL:
            return Requirements.aggregate(c.uninstall_requires for c in self.components)
        return Requirements.aggregate(c.requires for c in self.components)


@dataclass
class RunReport:
    """Result of executing a plan."""

    operation_id: str = ""
    mode: str = INSTALL
    components: list[str] = field(default_factory=list)
    receipts: list[Receipt] = field(default_factory=list)
    completed: list[str] = field(default_factory=list)
    declined: list[str] = field(default_factory=list)
    failed_component: str | None = None
    error: str | None = None
    duration_ms: int = 0

    @property
    def total(self) -> int:
        return len(self.receipts)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.receipts if r.ok)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.receipts if r.failed)

    @property
    def skipped(self) -> int:
        return sum(1 for r in self.receipts if r.skipped)

    @property
    def all_ok(self) -> bool:
        return self.error is None

    @property
    def status(self) -> str:
        if self.error is None:
            return "ok"
        if self.completed:
            return "partial"
        return "failed"

    def to_dict(self) -> dict[str, Any]:
        return {
            "operation_id": self.operation_id,
            "mode": self.mode,
            "status": self.status,
            "components": self.components,
            "completed": self.completed,
            "declined": self.declined,
            "failed_component": self.failed_component,
            "error": self.error,
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "skipped": self.skipped,
            "duration_ms": self.duration_ms,
            "receipts": [r.model_dump(mode="json") for r in self.receipts],
        }


def parse_arguments(args: Sequence[str]) -> tuple[str, list[str]]:
    """Split ``[uninstall] name...`` into mode and names.

    Raises:
        ValidationError: ``uninstall`` without anything to uninstall.
    """
    names = list(args)
    if names and names[0] == UNINSTALL:
        if len(names) == 1:
            raise ValidationError(
                "Please specify what to uninstall (e.g. 'uninstall all' or 'uninstall auto-tile')"
            )
        return UNINSTALL, names[1:]
    return INSTALL, names


def resolve_components(
    names: Sequence[str],
    registry: ComponentRegistry,
    mode: str = INSTALL,
) -> list[Component]:
    """Turn names and aliases into components in registry order.

    ``all`` selects every component marked ``in_all`` (only reversible
    ones when uninstalling). Duplicates collapse.

    Raises:
        ValidationError: An unknown name.
        IrreversibleOperationError: Uninstall of an irreversible component
            was requested by name.
    """
    selected: set[str] = set()
    for name in names:
        if name == ALL:
            for component in registry.in_all():
                if mode == UNINSTALL and not component.reversible:
                    continue
                selected.add(component.name)
            continue

        component = registry.get(name)
        if component is None:
            raise ValidationError(f"Unknown component: {name}")
        if mode == UNINSTALL and not component.reversible:
            raise IrreversibleOperationError(component.name, component.irreversible_reason)
        selected.add(component.name)

    return registry.ordered(selected)


def build_plan(
    args: Sequence[str],
    registry: ComponentRegistry,
    operation_id: str | None = None,
) -> ExecutionPlan:
    """Validate CLI arguments into an execution plan (no side effects)."""
    mode, names = parse_arguments(args)
    return ExecutionPlan(
        operation_id=operation_id or generate_operation_id(),
        mode=mode,
        requested=names,
        components=resolve_components(names, registry, mode),
    )


def execute_plan(
    plan: ExecutionPlan,
    ctx: InstallContext,
    preflight: PreflightChecker | None = None,
) -> RunReport:
    """Run every component of ``plan``.

    Raises:
        PreflightError: Before any component runs, if requirements are unmet.
    """
    started = time.monotonic()
    report = RunReport(operation_id=plan.operation_id, mode=plan.mode, components=plan.names)

    if preflight is not None:
        preflight.check(plan.requirements, ctx.reporter)

    for component in plan.components:
        ctx.component = component.name
        ctx.reporter.header(component.title if plan.mode == INSTALL else f"Uninstalling {component.name}")

        warning = component.uninstall_prompt(ctx) if plan.mode == UNINSTALL else ""
        if warning:
            ctx.warn(warning)
            if not ctx.confirm("Are you sure you want to continue?"):
                ctx.skip("uninstall", "declined")
                report.declined.append(component.name)
                continue

        try:
            if plan.mode == UNINSTALL:
                component.uninstall(ctx)
            else:
                component.install(ctx)
        except StepFailure as e:
            logger.info("%s failed: %s", component.name, e)
            report.failed_component = component.name
            report.error = str(e)
            break

        report.completed.append(component.name)
        logger.info("✓ %s:%s", component.name, plan.mode)

    _apply_environment(ctx, report)

    report.receipts = list(ctx.receipts)
    report.duration_ms = int((time.monotonic() - started) * 1000)
    return report


def _apply_environment(ctx: InstallContext, report: RunReport) -> None:
    if ctx.env_patch.is_empty:
        return
    ctx.component = "environment"
    ctx.reporter.header("Updating shell environment")
    try:
        receipts = apply_patch(
            ctx.env_patch,
            ctx.settings,
            ctx.adapters.fs,
            fish_available=ctx.adapters.runner.which("fish") is not None,
        )
    except OSError as e:
        ctx.reporter.error(f"Could not update shell profiles: {e}")
        ctx.record(Receipt.failure("environment", "update shell profiles", str(e)))
        if report.error is None:
            report.failed_component = "environment"
            report.error = f"environment: update shell profiles failed — {e}"
        return

    for receipt in receipts:
        ctx.record(receipt)
        if receipt.ok:
            ctx.reporter.success(receipt.step)
        else:
            ctx.reporter.skip(f"{receipt.step}: {receipt.output}")


def component_status(registry: ComponentRegistry, ctx: InstallContext) -> list[dict[str, Any]]:
    """Probe every component. Read-only."""
    rows = []
    for component in registry:
        rows.append({
            "name": component.name,
            "aliases": list(component.aliases),
            "description": component.description,
            "in_all": component.in_all,
            "reversible": component.reversible,
            "requires": component.requires.names(),
            "installed": component.is_installed(ctx),
        })
    return rows


def write_audit_entries(
    report: RunReport,
    audit_writer: AuditWriter,
    requested: Sequence[str] = (),
) -> None:
    """Append the run to the audit ledger."""
    entry = AuditEntry(
        operation_id=report.operation_id,
        mode=report.mode,
        requested=list(requested),
        components=report.components,
        completed=report.completed,
        failed_component=report.failed_component,
        status=report.status,
        steps_total=report.total,
        steps_succeeded=report.succeeded,
        steps_failed=report.failed,
        steps_skipped=report.skipped,
        duration_ms=report.duration_ms,
        errors=[report.error] if report.error else [],
    )
    audit_writer.write(entry)


def generate_operation_id() -> str:
    """Generate a unique operation ID."""
    now = datetime.now(UTC).strftime("%Y%m%d-%H%M%S")
    short = uuid.uuid4().hex[:6]
    return f"op-{now}-{short}"
