"""
Console output — click rendering of status lines, tables and summaries.

Everything user-facing on the terminal is produced here; the core
only talks to the Reporter interface.
"""

from __future__ import annotations

from typing import Any

import click

from cybex.core.components.registry import ComponentRegistry
from cybex.core.context import InstallContext
from cybex.core.engine.executor import UNINSTALL, ExecutionPlan, RunReport
from cybex.core.engine.reporter import Reporter

_RULE = "━" * 66


class ConsoleReporter(Reporter):
    """Colored status lines on stdout. ``quiet`` keeps only warnings and errors."""

    def __init__(self, quiet: bool = False):
        self.quiet = quiet

    def header(self, title: str) -> None:
        if self.quiet:
            return
        click.secho(f"\n{_RULE}", fg="cyan", bold=True)
        click.secho(f"  {title}", fg="magenta", bold=True)
        click.secho(f"{_RULE}\n", fg="cyan", bold=True)

    def step(self, message: str) -> None:
        if not self.quiet:
            click.echo(click.style("▶ ", fg="blue") + message)

    def success(self, message: str) -> None:
        if not self.quiet:
            click.echo(click.style("✓ ", fg="green") + message)

    def skip(self, message: str) -> None:
        if not self.quiet:
            click.echo(click.style("⊙ ", fg="yellow") + message)

    def warn(self, message: str) -> None:
        click.echo(click.style("⚠ ", fg="yellow") + message)

    def error(self, message: str) -> None:
        click.echo(click.style("✗ ", fg="red") + message)

    def detail(self, message: str) -> None:
        if not self.quiet:
            click.echo(f"  • {message}")


# ── Usage / list / status ─────────────────────────────────────


def usage_text(registry: ComponentRegistry) -> str:
    lines = [
        "Cybex post-installation setup for Illogical Impulse",
        "",
        "USAGE:",
        "  cybex [OPTIONS] <component>...",
        "  cybex [OPTIONS] uninstall <component>...",
        "",
        "COMPONENTS:",
        f"  {'all':<18} every component marked * below",
    ]
    for component in registry:
        marker = "*" if component.in_all else " "
        aliases = f" (alias: {', '.join(component.aliases)})" if component.aliases else ""
        lines.append(f"  {component.name:<16}{marker}  {component.description}{aliases}")
    lines += [
        "",
        "EXAMPLES:",
        "  cybex all                  install everything except the mainline kernel",
        "  cybex claude ssh           install Claude Code and generate an SSH key",
        "  cybex uninstall auto-tile  remove the auto-tile helper",
        "  cybex uninstall all        remove every reversible component",
        "",
        "NOTES:",
        "  • Runs are idempotent: components already in place are skipped",
        "  • sudo is requested when needed; do not run cybex as root",
        "  • Overwritten files are backed up as <file>.bak.<timestamp>",
        "  • SSH keys cannot be uninstalled",
        "",
        "Run 'cybex --help' for options.",
    ]
    return "\n".join(lines)


def render_list(registry: ComponentRegistry) -> None:
    click.secho("\n📦 Components (execution order)\n", fg="cyan", bold=True)
    for component in registry:
        flags = []
        if component.in_all:
            flags.append("all")
        if not component.reversible:
            flags.append("irreversible")
        needs = component.requires.names()
        if needs:
            flags.append("needs " + "+".join(needs))
        click.echo(f"   {component.name:<14} {component.description}")
        if flags or component.aliases:
            extra = [f"alias {a}" for a in component.aliases] + flags
            click.secho(f"   {'':<14} [{', '.join(extra)}]", fg="bright_black")
    click.echo()


def render_status(rows: list[dict[str, Any]]) -> None:
    click.secho("\n🔍 Component status\n", fg="cyan", bold=True)
    for row in rows:
        if row["installed"]:
            click.secho(f"   ✓ {row['name']:<14}", fg="green", nl=False)
            click.echo(" installed")
        else:
            click.secho(f"   ✗ {row['name']:<14}", fg="red", nl=False)
            click.echo(" not installed")
    click.echo()


# ── Summary ────────────────────────────────────────────────────


def render_summary(report: RunReport, plan: ExecutionPlan, ctx: InstallContext) -> None:
    reporter = ConsoleReporter()
    uninstall = plan.mode == UNINSTALL

    if report.error:
        click.echo()
        click.secho(f"✗ {report.error}", fg="red", bold=True)
        click.secho(
            "Some changes may have been made. Review them and restore from the "
            "<file>.bak.<timestamp> backups if needed.",
            fg="yellow",
        )
        return

    reporter.header("Uninstall Complete!" if uninstall else "Installation Complete!")
    click.secho(
        f"{report.succeeded} changed, {report.skipped} already in place "
        f"({report.operation_id})\n",
        fg="green",
    )

    if report.declined:
        click.secho(f"Skipped on request: {', '.join(report.declined)}\n", fg="yellow")

    if uninstall or not report.completed:
        return

    click.secho("Installed/configured components:", bold=True)
    by_name = {c.name: c for c in plan.components}
    for name in report.completed:
        click.echo(f"  • {by_name[name].description}")
    click.echo()

    public_key = ctx.facts.get("ssh_public_key")
    if "ssh" in report.completed:
        reporter.header("GitHub SSH Setup")
        if public_key:
            click.secho("Your SSH public key:\n", bold=True)
            click.echo(f"{public_key}\n")
        else:
            click.secho("SSH public key not found!\n", fg="red")

    steps: list[str] = []
    for name in report.completed:
        for step in by_name[name].next_steps():
            if step not in steps:
                steps.append(step)
    if steps:
        click.secho("Next steps:", bold=True)
        for step in steps:
            click.echo(f"  • {step}")
        click.echo()
