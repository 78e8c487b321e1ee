"""Dependency graph data models: package metadata, nodes, and edges.

``PackageInfo`` is what a metadata provider returns for one package name.
``PackageNode`` is the graph vertex built from it, and ``DependencyEdge`` is
the immutable "requires" relationship between two nodes. These are pure data
holders, safe to import from any layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pkgplan.core.dependency.constraints import (
    PackageSpecifier,
    VersionConstraint,
    is_valid_version,
)


class SecurityStatus(str, Enum):
    """Security posture reported by the metadata source."""

    SAFE = "safe"
    WARNING = "warning"
    VULNERABLE = "vulnerable"
    UNKNOWN = "unknown"


class EdgeKind(str, Enum):
    """Kind of dependency relationship."""

    REQUIRED = "required"
    OPTIONAL = "optional"


@dataclass(frozen=True)
class LicenseInfo:
    """License descriptor for a package.

    Attributes:
        type: SPDX-like identifier (e.g., "MIT", "GPL-3.0", "Proprietary").
        distribution_allowed: False when the package may not be
            redistributed as part of a larger product.
    """

    type: str = "UNKNOWN"
    distribution_allowed: bool = True

    @classmethod
    def from_value(cls, value: Any) -> LicenseInfo:
        """Build from a string identifier or a mapping with ``type`` and
        ``distribution_allowed`` keys."""
        if value is None:
            return cls()
        if isinstance(value, LicenseInfo):
            return value
        if isinstance(value, str):
            return cls(type=value)
        if isinstance(value, dict):
            return cls(
                type=str(value.get("type", "UNKNOWN")),
                distribution_allowed=bool(value.get("distribution_allowed", True)),
            )
        raise ValueError(f"Invalid license descriptor: {value!r}")


@dataclass(frozen=True)
class PackageInfo:
    """Metadata for a single package as returned by a metadata provider.

    Attributes:
        name: Canonical package name.
        version: The version the provider resolves this name to.
        dependencies: Declared direct dependencies.
        conflicts: Names of packages this one cannot coexist with.
        license: License descriptor.
        platforms: Supported platforms. Empty means every platform.
        available_versions: Other versions known to exist. Used when
            looking for a version that satisfies every consumer.
        alternatives: Packages registered as drop-in substitutes.
        source: Origin tag (e.g., "registry", "git", "local").
        security: Reported security status.
    """

    name: str
    version: str
    dependencies: tuple[PackageSpecifier, ...] = ()
    conflicts: frozenset[str] = frozenset()
    license: LicenseInfo = LicenseInfo()
    platforms: frozenset[str] = frozenset()
    available_versions: tuple[str, ...] = ()
    alternatives: tuple[str, ...] = ()
    source: str = "registry"
    security: SecurityStatus = SecurityStatus.UNKNOWN

    def __post_init__(self) -> None:
        for version in (self.version, *self.available_versions):
            if not is_valid_version(version):
                raise ValueError(f"Invalid version for {self.name!r}: {version!r}")

    @classmethod
    def from_dict(cls, name: str, data: dict[str, Any]) -> PackageInfo:
        """Build from a registry mapping entry.

        Dependencies may be specifier strings (``"Lib>=1.0"``) or mappings
        with ``name``, ``constraint`` and ``optional`` keys.

        Raises:
            ValueError: If any field is malformed.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Package entry for {name!r} must be a mapping")
        if "version" not in data:
            raise ValueError(f"Package {name!r} has no version")

        deps: list[PackageSpecifier] = []
        for raw in data.get("dependencies") or []:
            if isinstance(raw, str):
                deps.append(PackageSpecifier.parse(raw))
            elif isinstance(raw, dict) and "name" in raw:
                deps.append(
                    PackageSpecifier(
                        name=str(raw["name"]),
                        constraint=VersionConstraint(str(raw.get("constraint", "*"))),
                        optional=bool(raw.get("optional", False)),
                    )
                )
            else:
                raise ValueError(f"Invalid dependency for {name!r}: {raw!r}")

        return cls(
            name=name,
            version=str(data["version"]),
            dependencies=tuple(deps),
            conflicts=frozenset(str(c) for c in data.get("conflicts") or []),
            license=LicenseInfo.from_value(data.get("license")),
            platforms=frozenset(str(p) for p in data.get("platforms") or []),
            available_versions=tuple(str(v) for v in data.get("available_versions") or []),
            alternatives=tuple(str(a) for a in data.get("alternatives") or []),
            source=str(data.get("source", "registry")),
            security=SecurityStatus(str(data.get("security", "unknown")).lower()),
        )


@dataclass(frozen=True)
class DependencyEdge:
    """A directed "requires" edge between two packages.

    Attributes:
        source: Name of the consuming package.
        target: Name of the required package.
        kind: Required or optional.
        constraint: The consumer's version requirement on ``target``.
    """

    source: str
    target: str
    kind: EdgeKind = EdgeKind.REQUIRED
    constraint: VersionConstraint = VersionConstraint("*")


@dataclass
class PackageNode:
    """A vertex in the dependency graph, one per canonical package name.

    Created by the graph builder; mutated only by the resolution planner
    (``version``, ``pinned``, ``waived``). Detectors treat it as read-only.
    """

    name: str
    version: str
    dependencies: list[str] = field(default_factory=list)
    conflicts: set[str] = field(default_factory=set)
    source: str = "registry"
    security: SecurityStatus = SecurityStatus.UNKNOWN
    license: LicenseInfo = field(default_factory=LicenseInfo)
    platforms: frozenset[str] = frozenset()
    available_versions: tuple[str, ...] = ()
    alternatives: tuple[str, ...] = ()
    pinned: bool = False
    waived: set[str] = field(default_factory=set)

    @classmethod
    def from_info(cls, info: PackageInfo) -> PackageNode:
        """Create a node from provider metadata."""
        deps: list[str] = []
        for spec in info.dependencies:
            if spec.name not in deps:
                deps.append(spec.name)
        return cls(
            name=info.name,
            version=info.version,
            dependencies=deps,
            conflicts=set(info.conflicts),
            source=info.source,
            security=info.security,
            license=info.license,
            platforms=info.platforms,
            available_versions=info.available_versions,
            alternatives=info.alternatives,
        )
