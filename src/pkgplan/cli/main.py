"""pkgplan CLI: dependency resolution and conflict planning.

Entry point for the ``pkgplan`` command-line tool. Registers all
subcommands under a single Click group.

Commands:
    resolve      Resolve packages into a conflict-free install plan.
    check        Detect conflicts without resolving them.
    lock-verify  Validate a lock record.
    lock-diff    Compare two lock records.

Usage::

    pkgplan resolve App Tool --registry registry.yaml
    pkgplan resolve App --registry registry.yaml --target-platform linux
    pkgplan resolve X Y --registry registry.yaml --choose "direct:X+Y=drop:Y"
    pkgplan check App --registry-url https://packages.example.com/meta
    pkgplan lock-verify pkgplan-lock.json
    pkgplan lock-diff old-lock.json pkgplan-lock.json
"""

from __future__ import annotations

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from pkgplan import __version__
from pkgplan.cli.check_cmd import check_command
from pkgplan.cli.lock_cmd import lock_diff_command, lock_verify_command
from pkgplan.cli.resolve_cmd import resolve_command


def _configure_logging() -> None:
    handler = RichHandler(console=Console(stderr=True), show_path=False)
    root = logging.getLogger("pkgplan")
    root.setLevel(logging.DEBUG)
    root.handlers = [handler]


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log progress to stderr.")
def cli(verbose: bool) -> None:
    """pkgplan: Dependency resolution and conflict planning for package sets.

    Discover transitive dependencies, classify version, direct, license
    and platform conflicts, and produce a validated install order.
    """
    if verbose:
        _configure_logging()


# Register all subcommands
cli.add_command(resolve_command)
cli.add_command(check_command)
cli.add_command(lock_verify_command)
cli.add_command(lock_diff_command)
