"""``pkgplan resolve [SPECS...]``: resolve packages into an install plan.

Builds the dependency graph, detects and resolves conflicts, validates the
result for cycles, and writes the lock record on success.

Exit Codes:
    0 - Resolved.
    1 - Resolution failed (unresolvable conflicts, cycles, missing packages).
    2 - Bad input (no packages, invalid config, registry or lock record).
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
    parse_choices,
    provider_options,
)
from pkgplan.cli.output import print_resolution
from pkgplan.core.resolution.resolver import PackageResolver


@click.command("resolve")
@click.argument("specs", nargs=-1)
@provider_options
@click.option(
    "--no-write-lock",
    is_flag=True,
    default=False,
    help="Do not write the lock record after a successful run.",
)
@click.option(
    "--max-iterations",
    type=click.IntRange(min=0),
    default=None,
    help="Ceiling on applied resolution steps (default: 10).",
)
@click.option(
    "--choose",
    multiple=True,
    metavar="ID=KIND:TARGET[:VALUE]",
    help="Resolve a conflict explicitly, e.g. direct:X+Y=drop:Y. Repeatable.",
)
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format: text (default) or json.",
)
@handle_errors
def resolve_command(
    specs: tuple[str, ...],
    registry_path: str | None,
    registry_url: str | None,
    config_path: str | None,
    target_platforms: tuple[str, ...],
    lockfile: str | None,
    fresh: bool,
    timeout: float | None,
    no_write_lock: bool,
    max_iterations: int | None,
    choose: tuple[str, ...],
    output_format: str,
) -> None:
    """Resolve SPECS (e.g. "App" "Lib>=1.0") into a conflict-free plan.

    Packages may also come from the config file's ``packages`` list.
    """
    config = load_config(
        config_path,
        registry=Path(registry_path) if registry_path else None,
        target_platforms=tuple(target_platforms) or None,
        lockfile=Path(lockfile) if lockfile else None,
        fresh=True if fresh else None,
        write_lock=False if no_write_lock else None,
        max_iterations=max_iterations,
        timeout=timeout,
    )
    requested = list(specs) or list(config.packages)
    if not requested:
        click.echo("Error: no packages to resolve.", err=True)
        sys.exit(EXIT_BAD_INPUT)

    provider = make_provider(config, registry_url)
    choices = parse_choices(choose)
    result = PackageResolver(provider, config).resolve(requested, choices=choices)

    if output_format == "json":
        click.echo(json.dumps(result.to_dict(), indent=2, default=str))
    else:
        print_resolution(result)
        if result.is_resolved and config.lockfile is not None and config.write_lock:
            click.echo(f"\nLock record written to: {config.lockfile}")

    sys.exit(EXIT_OK if result.is_resolved else EXIT_FAILED)
