"""Shared CLI plumbing: provider/config options and error translation.

Exit Codes:
    0 - Resolved (or the lock record is valid).
    1 - Resolution failed (conflicts, cycles, missing packages).
    2 - Bad input (no packages, missing files, invalid config or lock).
"""

from __future__ import annotations

import sys
from functools import wraps
from pathlib import Path
from typing import Any, Callable

import click

from pkgplan.config import DEFAULT_CONFIG_FILENAME, ResolverConfig
from pkgplan.core.conflicts.models import ResolutionStrategy
from pkgplan.exceptions import ConfigError, LockfileError, PkgPlanError
from pkgplan.provider.base import MetadataProvider
from pkgplan.provider.static import StaticMetadataProvider

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_BAD_INPUT = 2


def provider_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the options every resolving command shares."""
    options = [
        click.option(
            "--registry", "registry_path",
            type=click.Path(dir_okay=False),
            default=None,
            help="YAML or JSON registry file to read package metadata from.",
        ),
        click.option(
            "--registry-url",
            default=None,
            help="Base URL of an HTTP metadata index (<url>/<name>.json).",
        ),
        click.option(
            "--config", "config_path",
            type=click.Path(dir_okay=False),
            default=None,
            help=f"Configuration file (default: ./{DEFAULT_CONFIG_FILENAME} if present).",
        ),
        click.option(
            "--target-platform", "target_platforms",
            multiple=True,
            help="Platform the result must support. Repeatable.",
        ),
        click.option(
            "--lockfile",
            type=click.Path(dir_okay=False),
            default=None,
            help="Lock record to honour and update.",
        ),
        click.option(
            "--fresh",
            is_flag=True,
            default=False,
            help="Ignore versions pinned by the lock record.",
        ),
        click.option(
            "--timeout",
            type=click.FloatRange(min=0, min_open=True),
            default=None,
            help="Deadline for the whole run, in seconds.",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def load_config(config_path: str | None, **overrides: Any) -> ResolverConfig:
    """Load the config file (explicit or ./pkgplan.yaml) and apply overrides.

    Raises:
        ConfigError: If the file is missing or invalid.
    """
    if config_path is not None:
        path = Path(config_path)
        if not path.is_file():
            raise ConfigError(f"Config file not found: {path}")
        config = ResolverConfig.from_file(path)
    elif Path(DEFAULT_CONFIG_FILENAME).is_file():
        config = ResolverConfig.from_file(Path(DEFAULT_CONFIG_FILENAME))
    else:
        config = ResolverConfig()
    return config.with_overrides(**overrides)


def make_provider(config: ResolverConfig, registry_url: str | None) -> MetadataProvider:
    """Create the metadata provider selected by the options or config.

    Raises:
        ConfigError: If no metadata source is configured.
    """
    if registry_url:
        from pkgplan.provider.http import HttpMetadataProvider

        return HttpMetadataProvider(registry_url)
    if config.registry is None:
        raise ConfigError("No metadata source: pass --registry or --registry-url")
    return StaticMetadataProvider.from_file(config.registry)


def parse_choices(values: tuple[str, ...]) -> dict[str, ResolutionStrategy]:
    """Parse ``ID=KIND:TARGET[:VALUE]`` caller decisions.

    Raises:
        ConfigError: On malformed values or unknown strategy kinds.
    """
    choices: dict[str, ResolutionStrategy] = {}
    for value in values:
        conflict, sep, strategy = value.partition("=")
        if not sep or not conflict.strip() or not strategy.strip():
            raise ConfigError(f"Invalid --choose value {value!r}; expected ID=KIND:TARGET")
        try:
            choices[conflict.strip()] = ResolutionStrategy.parse(strategy)
        except ValueError as exc:
            raise ConfigError(f"Invalid strategy in {value!r}: {exc}") from exc
    return choices


def handle_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """Translate pkgplan exceptions into messages and exit codes."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except (ConfigError, LockfileError) as exc:
            click.echo(f"Error: {exc}", err=True)
            sys.exit(EXIT_BAD_INPUT)
        except ValueError as exc:
            click.echo(f"Error: {exc}", err=True)
            sys.exit(EXIT_BAD_INPUT)
        except PkgPlanError as exc:
            click.echo(f"Error: {exc}", err=True)
            sys.exit(EXIT_FAILED)

    return wrapper
