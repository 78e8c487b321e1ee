"""``pkgplan check [SPECS...]``: detect conflicts without resolving them.

Exit Codes:
    0 - No BLOCKING or BREAKING conflicts.
    1 - At least one BLOCKING or BREAKING conflict, or a missing package.
    2 - Bad input.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from pkgplan.cli.common import (
    EXIT_BAD_INPUT,
    EXIT_FAILED,
    EXIT_OK,
    handle_errors,
    load_config,
    make_provider,
    provider_options,
)
from pkgplan.cli.output import console, print_conflicts
from pkgplan.core.resolution.resolver import PackageResolver
from pkgplan.exceptions import PackageNotFoundError


@click.command("check")
@click.argument("specs", nargs=-1)
@provider_options
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format: text (default) or json.",
)
@handle_errors
def check_command(
    specs: tuple[str, ...],
    registry_path: str | None,
    registry_url: str | None,
    config_path: str | None,
    target_platforms: tuple[str, ...],
    lockfile: str | None,
    fresh: bool,
    timeout: float | None,
    output_format: str,
) -> None:
    """Build the dependency graph for SPECS and report its conflicts."""
    config = load_config(
        config_path,
        registry=Path(registry_path) if registry_path else None,
        target_platforms=tuple(target_platforms) or None,
        lockfile=Path(lockfile) if lockfile else None,
        fresh=True if fresh else None,
        timeout=timeout,
    )
    requested = list(specs) or list(config.packages)
    if not requested:
        click.echo("Error: no packages to check.", err=True)
        sys.exit(EXIT_BAD_INPUT)

    provider = make_provider(config, registry_url)
    try:
        graph, conflicts = PackageResolver(provider, config).check(requested)
    except PackageNotFoundError as exc:
        if output_format == "json":
            click.echo(json.dumps({"errors": [exc.to_dict()]}, indent=2))
        else:
            click.echo(f"Error: {exc}", err=True)
        sys.exit(EXIT_FAILED)

    gating = [c for c in conflicts if c.severity.gating]
    if output_format == "json":
        click.echo(json.dumps({
            "packages": graph.names,
            "conflicts": [c.to_dict() for c in conflicts],
        }, indent=2, default=str))
    else:
        console.print(f"[bold]{graph.node_count}[/bold] packages, {graph.edge_count} edges")
        print_conflicts(conflicts)
    sys.exit(EXIT_FAILED if gating else EXIT_OK)
