"""Resolver configuration.

Settings come from a ``pkgplan.yaml`` file (optional) and are overridden by
CLI options. Example::

    packages: ["App", "Tool>=1.0"]
    registry: registry.yaml
    target_platforms: [linux, windows]
    max_iterations: 10
    allow_incompatible_pins: true
    allow_platform_narrowing: false
    alternatives:
      Lib: [LibNext]
    lockfile: pkgplan-lock.json
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

import yaml

from pkgplan.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME: str = "pkgplan.yaml"


@dataclass(frozen=True)
class ResolverConfig:
    """Settings for one resolution run.

    Attributes:
        max_iterations: Ceiling on strategies applied to gating conflicts.
        max_concurrency: Maximum metadata lookups in flight at once.
        target_platforms: Platforms the result must support. Empty skips
            the platform check.
        timeout: Deadline in seconds for the whole run, or None.
        allow_incompatible_pins: Let the planner pin the highest version
            when no version satisfies every consumer.
        allow_platform_narrowing: Let the planner drop target platforms
            when no substitute package exists.
        alternatives: Package name -> substitute names, in preference order.
        lockfile: Lock record to read and write, or None.
        fresh: Ignore the lock record's pins.
        write_lock: Write the lock record after a successful run.
        packages: Package specifiers to resolve when none are given.
        registry: Registry file for the static provider, or None.
    """

    max_iterations: int = 10
    max_concurrency: int = 8
    target_platforms: tuple[str, ...] = ()
    timeout: float | None = None
    allow_incompatible_pins: bool = True
    allow_platform_narrowing: bool = False
    alternatives: dict[str, list[str]] = field(default_factory=dict)
    lockfile: Path | None = None
    fresh: bool = False
    write_lock: bool = True
    packages: tuple[str, ...] = ()
    registry: Path | None = None

    def __post_init__(self) -> None:
        if not _is_int(self.max_iterations) or self.max_iterations < 0:
            raise ConfigError(
                f"max_iterations must be a non-negative integer, got {self.max_iterations!r}"
            )
        if not _is_int(self.max_concurrency) or self.max_concurrency < 1:
            raise ConfigError(
                f"max_concurrency must be a positive integer, got {self.max_concurrency!r}"
            )
        if self.timeout is not None and (
            isinstance(self.timeout, bool)
            or not isinstance(self.timeout, (int, float))
            or self.timeout <= 0
        ):
            raise ConfigError(f"timeout must be a positive number, got {self.timeout!r}")

    def with_overrides(self, **overrides: Any) -> ResolverConfig:
        """Return a copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    @classmethod
    def from_dict(cls, data: dict[str, Any], *, base_dir: Path | None = None) -> ResolverConfig:
        """Build a config from a parsed mapping.

        Relative ``lockfile`` and ``registry`` paths are resolved against
        *base_dir* when given.

        Raises:
            ConfigError: On unknown keys or invalid values.
        """
        if not isinstance(data, dict):
            raise ConfigError("Configuration must be a mapping")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration key(s): {', '.join(unknown)}")

        kwargs: dict[str, Any] = dict(data)
        for key in ("target_platforms", "packages"):
            if key in kwargs:
                kwargs[key] = tuple(str(v) for v in _as_list(kwargs[key], key))
        for key in ("allow_incompatible_pins", "allow_platform_narrowing", "fresh", "write_lock"):
            if key in kwargs and not isinstance(kwargs[key], bool):
                raise ConfigError(f"{key} must be true or false")
        if "alternatives" in kwargs:
            kwargs["alternatives"] = _parse_alternatives(kwargs["alternatives"])
        for key in ("lockfile", "registry"):
            if kwargs.get(key) is not None:
                path = Path(str(kwargs[key]))
                if base_dir is not None and not path.is_absolute():
                    path = base_dir / path
                kwargs[key] = path
        return cls(**kwargs)

    @classmethod
    def from_file(cls, path: Path) -> ResolverConfig:
        """Load configuration from a YAML file.

        Raises:
            ConfigError: If the file cannot be read or is invalid.
        """
        try:
            raw = path.read_text(encoding="utf-8")
            data = yaml.safe_load(raw)
        except OSError as exc:
            raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
        except yaml.YAMLError as exc:
            raise ConfigError(f"Cannot parse config file {path}: {exc}") from exc
        if data is None:
            data = {}
        logger.debug("Loaded configuration from %s", path)
        return cls.from_dict(data, base_dir=path.parent)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _as_list(value: Any, key: str) -> list[Any]:
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list):
        raise ConfigError(f"{key} must be a list")
    return value


def _parse_alternatives(value: Any) -> dict[str, list[str]]:
    if not isinstance(value, dict):
        raise ConfigError("alternatives must map package names to lists of names")
    return {
        str(name): [str(alt) for alt in _as_list(alts, f"alternatives.{name}")]
        for name, alts in value.items()
    }
