"""``pkgplan lock-verify`` and ``pkgplan lock-diff``: lock record tooling.

Exit Codes:
    0 - Valid record (lock-verify) or diff printed (lock-diff).
    1 - Validation or integrity errors found.
    2 - Record missing or unreadable.
"""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path

import click

from pkgplan.cli.common import (
    EXIT_FAILED,
    EXIT_OK,
    handle_errors,
    load_config,
    make_provider,
)
from pkgplan.cli.output import print_lock_diff, print_validation
from pkgplan.core.dependency.models import PackageNode
from pkgplan.core.lockfile import Lockfile, canonical_metadata
from pkgplan.provider.base import MetadataProvider


async def _integrity_errors(lock: Lockfile, provider: MetadataProvider) -> list[str]:
    """Compare locked integrity markers with the provider's metadata.

    Only packages the provider still reports at the locked version are
    compared.
    """
    errors: list[str] = []
    for name in lock.package_names:
        locked = lock.get_package(name)
        info = await provider.get_package_info(name)
        if locked is None or info is None or info.version != locked.version:
            continue
        if not lock.verify_integrity(name, canonical_metadata(PackageNode.from_info(info))):
            errors.append(f"Package {name!r} {locked.version} integrity mismatch")
    return errors


@click.command("lock-verify")
@click.argument("path", type=click.Path(dir_okay=False))
@click.option(
    "--registry", "registry_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Also verify integrity markers against this registry file.",
)
@click.option(
    "--registry-url",
    default=None,
    help="Also verify integrity markers against this HTTP index.",
)
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format: text (default) or json.",
)
@handle_errors
def lock_verify_command(
    path: str,
    registry_path: str | None,
    registry_url: str | None,
    output_format: str,
) -> None:
    """Validate the lock record at PATH for internal consistency."""
    lock = Lockfile.read(Path(path))
    errors = lock.validate()
    if registry_path or registry_url:
        config = load_config(None, registry=Path(registry_path) if registry_path else None)
        provider = make_provider(config, registry_url)
        errors.extend(asyncio.run(_integrity_errors(lock, provider)))

    if output_format == "json":
        click.echo(json.dumps({"path": path, "valid": not errors, "errors": errors}, indent=2))
    else:
        print_validation(path, errors)
    sys.exit(EXIT_FAILED if errors else EXIT_OK)


@click.command("lock-diff")
@click.argument("old", type=click.Path(dir_okay=False))
@click.argument("new", type=click.Path(dir_okay=False))
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format: text (default) or json.",
)
@handle_errors
def lock_diff_command(old: str, new: str, output_format: str) -> None:
    """Show the differences between lock records OLD and NEW."""
    diff = Lockfile.read(Path(old)).diff(Lockfile.read(Path(new)))
    if output_format == "json":
        click.echo(json.dumps(diff, indent=2, sort_keys=True))
    else:
        print_lock_diff(diff)
    sys.exit(EXIT_OK)
