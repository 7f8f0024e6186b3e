"""
Cybex — CLI entrypoint.

Usage:
    cybex --help
    cybex all
    cybex claude codex ssh
    cybex uninstall auto-tile
    cybex --status
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click

from cybex import __version__
from cybex.adapters.registry import AdapterRegistry
from cybex.core.components.registry import ComponentRegistry
from cybex.core.config.loader import ConfigError, load_settings
from cybex.core.context import InstallContext
from cybex.core.engine.executor import (
    RunReport,
    build_plan,
    component_status,
    execute_plan,
    write_audit_entries,
)
from cybex.core.engine.reporter import NullReporter
from cybex.core.errors import IrreversibleOperationError, PreflightError, ValidationError
from cybex.core.models.settings import Settings
from cybex.core.observability.logging_config import resolve_level, setup_from_environment
from cybex.core.persistence.audit import AuditWriter
from cybex.core.services.preflight import PreflightChecker
from cybex.ui.cli.console import (
    ConsoleReporter,
    render_list,
    render_status,
    render_summary,
    usage_text,
)

logger = logging.getLogger(__name__)


def _always(message: str) -> bool:
    return True


def _ask(message: str) -> bool:
    return click.confirm(message, default=False)


class CybexCommand(click.Command):
    """Reports bad arguments with the component usage text and exit code 1."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        try:
            return super().parse_args(ctx, args)
        except click.NoSuchOption as e:
            message = f"Unknown parameter: {e.option_name}"
        except click.UsageError as e:
            message = e.format_message()
        components = (ctx.obj or {}).get("components")
        if components is None:
            components = ComponentRegistry()
        click.secho(f"✗ {message}", fg="red", err=True)
        click.echo(usage_text(components), err=True)
        ctx.exit(1)


@click.command(cls=CybexCommand, context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="cybex")
@click.argument("args", nargs=-1)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Only show warnings and errors.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to cybex.yml (default: auto-detect).",
)
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Answer yes to uninstall confirmations.")
@click.option("--list", "list_components", is_flag=True, help="List components and exit.")
@click.option("--status", "show_status", is_flag=True, help="Show which components are installed.")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def cli(
    ctx: click.Context,
    args: tuple[str, ...],
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
    assume_yes: bool,
    list_components: bool,
    show_status: bool,
    as_json: bool,
) -> None:
    """Cybex — post-installation setup for Illogical Impulse.

    \b
    Install:    cybex [all | <component>...]
    Uninstall:  cybex uninstall [all | <component>...]
    """
    ctx.ensure_object(dict)

    # ── Logging setup (once, at process start) ──────────────────
    setup_from_environment(resolve_level(verbose=verbose, quiet=quiet, debug=debug))

    settings: Settings | None = ctx.obj.get("settings")
    if settings is None:
        try:
            settings = load_settings(Path(config_path) if config_path else None)
        except ConfigError as e:
            click.secho(f"❌ {e}", fg="red", err=True)
            sys.exit(1)

    components: ComponentRegistry | None = ctx.obj.get("components")
    if components is None:
        components = ComponentRegistry()

    if list_components:
        if as_json:
            click.echo(json.dumps([
                {
                    "name": c.name,
                    "aliases": list(c.aliases),
                    "description": c.description,
                    "in_all": c.in_all,
                    "reversible": c.reversible,
                    "requires": c.requires.names(),
                }
                for c in components
            ], indent=2))
        else:
            render_list(components)
        return

    adapters: AdapterRegistry | None = ctx.obj.get("registry")
    if adapters is None:
        adapters = AdapterRegistry.from_settings(settings)

    if show_status:
        probe_ctx = InstallContext(settings=settings, adapters=adapters)
        rows = component_status(components, probe_ctx)
        if as_json:
            click.echo(json.dumps(rows, indent=2))
        else:
            render_status(rows)
        return

    if not args:
        click.echo(usage_text(components))
        return

    # ── Validate (nothing touched yet) ──────────────────────────
    try:
        plan = build_plan(args, components)
    except ValidationError as e:
        click.secho(f"✗ {e}", fg="red", err=True)
        click.echo(usage_text(components), err=True)
        sys.exit(1)
    except IrreversibleOperationError as e:
        click.secho(f"✗ {e}", fg="red", err=True)
        sys.exit(1)

    reporter = NullReporter() if as_json else ConsoleReporter(quiet=quiet)
    run_ctx = InstallContext(
        settings=settings,
        adapters=adapters,
        reporter=reporter,
        confirm=_always if assume_yes else _ask,
        clock=ctx.obj.get("clock"),
    )
    if "preflight" in ctx.obj:
        preflight = ctx.obj["preflight"]
    else:
        preflight = PreflightChecker(settings.preflight, adapters.runner)

    audit = AuditWriter.in_state_dir(settings.state_dir)

    # ── Execute ─────────────────────────────────────────────────
    try:
        report = execute_plan(plan, run_ctx, preflight)
    except PreflightError as e:
        report = RunReport(
            operation_id=plan.operation_id,
            mode=plan.mode,
            components=plan.names,
            failed_component="preflight",
            error=str(e),
        )
        write_audit_entries(report, audit, plan.requested)
        if as_json:
            click.echo(json.dumps(report.to_dict(), indent=2))
        else:
            click.secho(f"✗ {e}", fg="red", err=True)
        sys.exit(1)

    write_audit_entries(report, audit, plan.requested)
    logger.info("%s %s: %s", plan.operation_id, plan.mode, report.status)

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
    else:
        render_summary(report, plan, run_ctx)

    if report.error:
        sys.exit(1)


if __name__ == "__main__":
    cli()
