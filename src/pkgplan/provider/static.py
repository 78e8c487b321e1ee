"""In-memory metadata provider, optionally loaded from a registry file.

Registry files are YAML or JSON documents of the form::

    packages:
      App:
        version: 1.0.0
        dependencies: ["Lib>=1.0"]
        license: MIT
        platforms: [linux, windows]
      Lib:
        version: 2.0.0
        available_versions: [1.0.0, 1.5.0]
        conflicts: [OldLib]
    alternatives:
      Lib: [LibNext]

Usage::

    provider = StaticMetadataProvider.from_file(Path("registry.yaml"))
    info = await provider.get_package_info("App")
"""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Iterable, Mapping

import yaml

from pkgplan.core.dependency.models import PackageInfo
from pkgplan.exceptions import ConfigError
from pkgplan.provider.base import MetadataProvider

logger = logging.getLogger(__name__)


def load_registry(path: Path) -> dict[str, Any]:
    """Read a YAML or JSON registry document from disk.

    Raises:
        ConfigError: If the file cannot be read or parsed, or its top
            level is not a mapping.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read registry file {path}: {exc}") from exc

    try:
        if path.suffix.lower() == ".json":
            data = json.loads(raw)
        else:
            data = yaml.safe_load(raw)
    except (ValueError, yaml.YAMLError) as exc:
        raise ConfigError(f"Cannot parse registry file {path}: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Registry file {path} must contain a mapping")
    return data


class StaticMetadataProvider(MetadataProvider):
    """Serve package metadata from an in-memory mapping.

    Attributes:
        lookups: Every name queried, in call order. Useful to check that
            the graph builder memoizes lookups.
    """

    def __init__(self, packages: Iterable[PackageInfo] = ()) -> None:
        self._packages: dict[str, PackageInfo] = {}
        self.lookups: list[str] = []
        for info in packages:
            self.add(info)

    def add(self, info: PackageInfo) -> None:
        """Register (or replace) a package."""
        self._packages[info.name] = info

    async def get_package_info(self, name: str) -> PackageInfo | None:
        self.lookups.append(name)
        return self._packages.get(name)

    def known_packages(self) -> list[str]:
        return sorted(self._packages)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> StaticMetadataProvider:
        """Build from a parsed registry document.

        Registry-level ``alternatives`` are merged into each package's own
        ``alternatives`` list.

        Raises:
            ConfigError: If any package entry is malformed.
        """
        packages_data = data.get("packages") or {}
        alternatives = data.get("alternatives") or {}
        if not isinstance(packages_data, dict) or not isinstance(alternatives, dict):
            raise ConfigError("'packages' and 'alternatives' must be mappings")

        provider = cls()
        for name, entry in packages_data.items():
            try:
                info = PackageInfo.from_dict(str(name), entry)
            except ValueError as exc:
                raise ConfigError(f"Invalid registry entry {name!r}: {exc}") from exc
            extra = [str(a) for a in alternatives.get(name) or []]
            if extra:
                merged = tuple(dict.fromkeys([*info.alternatives, *extra]))
                info = replace(info, alternatives=merged)
            provider.add(info)

        logger.debug("Loaded %d package(s) into static registry", len(provider._packages))
        return provider

    @classmethod
    def from_file(cls, path: Path) -> StaticMetadataProvider:
        """Load a registry file (YAML, or JSON by ``.json`` suffix)."""
        return cls.from_dict(load_registry(path))
