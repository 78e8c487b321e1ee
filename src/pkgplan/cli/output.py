"""Rich output formatting helpers for the pkgplan CLI.

Severity Color Mapping:
    BLOCKING = bold red, BREAKING = red, WARNING = yellow, ADVISORY = cyan
"""

from __future__ import annotations

from typing import Any, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from pkgplan.core.conflicts.models import ConflictReport, Severity
from pkgplan.core.resolution.result import ResolutionResult

_SEVERITY_STYLES: dict[Severity, str] = {
    Severity.BLOCKING: "bold red",
    Severity.BREAKING: "red",
    Severity.WARNING: "yellow",
    Severity.ADVISORY: "cyan",
}

console = Console()


def severity_style(severity: Severity) -> str:
    """Return the Rich style string for a given severity level."""
    return _SEVERITY_STYLES.get(severity, "white")


def print_conflicts(conflicts: Sequence[ConflictReport], title: str = "Conflicts") -> None:
    """Print a table of conflict reports, highest priority first."""
    if not conflicts:
        console.print("[green]No conflicts detected.[/green]")
        return

    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Severity", justify="center")
    table.add_column("Conflict", style="bold")
    table.add_column("Message")
    table.add_column("Recommended", style="dim")
    for report in sorted(conflicts, key=lambda c: c.sort_key):
        table.add_row(
            Text(report.severity.name, style=severity_style(report.severity)),
            report.id,
            report.message,
            str(report.recommended) if report.recommended else "caller choice",
        )
    console.print(table)


def print_resolution(result: ResolutionResult) -> None:
    """Print a resolution result: verdict, packages, steps, problems."""
    if result.is_resolved:
        console.print(
            Panel("[bold green]Resolution successful[/bold green]",
                  title="Dependency Resolution")
        )
        if result.final_package_list:
            table = Table(title="Install Order", show_header=True)
            table.add_column("#", justify="right", style="dim")
            table.add_column("Package", style="bold")
            table.add_column("Version")
            for index, (name, version) in enumerate(result.versions.items(), 1):
                table.add_row(str(index), name, version)
            console.print(table)
        else:
            console.print("[dim]No packages to install.[/dim]")
    else:
        console.print(
            Panel("[bold red]Resolution failed[/bold red]",
                  title="Dependency Resolution")
        )
        for error in result.errors:
            console.print(f"  [red]- {error}[/red]")

    if result.plan is not None and result.plan.steps:
        steps = Table(title="Resolution Steps", show_header=True)
        steps.add_column("#", justify="right", style="dim")
        steps.add_column("Conflict", style="bold")
        steps.add_column("Strategy")
        for step in result.plan.steps:
            steps.add_row(str(step.index), step.conflict_id, str(step.strategy))
        console.print(steps)

    for warning in result.warnings:
        console.print(f"  [yellow]! {warning}[/yellow]")

    stats = result.statistics
    console.print(
        f"[bold]{stats.packages}[/bold] packages | {stats.edges} edges | "
        f"{stats.conflicts} conflicts | {stats.iterations} steps | "
        f"{stats.provider_calls} lookups ({stats.cache_hits} cached)"
    )


def print_validation(path: str, errors: Sequence[str]) -> None:
    """Print lock record validation findings."""
    if not errors:
        console.print(f"[green]{path} is valid.[/green]")
        return
    console.print(Panel(f"[bold red]{path} is invalid[/bold red]", title="Lock Record"))
    for error in errors:
        console.print(f"  [red]- {error}[/red]")


def print_lock_diff(diff: dict[str, Any]) -> None:
    """Print the output of ``Lockfile.diff``."""
    if not (diff["added"] or diff["removed"] or diff["changed"]):
        console.print("[dim]Lock records are identical.[/dim]")
        return

    table = Table(title="Lock Record Changes", show_header=True)
    table.add_column("Change", justify="center")
    table.add_column("Package", style="bold")
    table.add_column("Old", style="dim")
    table.add_column("New")
    for name in diff["added"]:
        table.add_row(Text("added", style="green"), name, "", "")
    for name in diff["removed"]:
        table.add_row(Text("removed", style="red"), name, "", "")
    for change in diff["changed"]:
        table.add_row(
            Text(change["field"], style="yellow"),
            change["name"],
            _render(change["old"]),
            _render(change["new"]),
        )
    console.print(table)


def _render(value: Any) -> str:
    if isinstance(value, dict):
        return ", ".join(f"{k}@{v}" for k, v in sorted(value.items())) or "-"
    return str(value)
