"""Dependency graph model and breadth-first graph construction.

All public names are re-exported here so that callers can write
``from pkgplan.core.dependency import DependencyGraph`` without knowing the
submodule layout.

Formal Definition
-----------------
A dependency graph is a tuple G = (N, E, R, P) where:

- **N** = package nodes, at most one per canonical package name
- **E** = directed "requires" edges, each carrying the consumer's
  version constraint
- **R** = root requests (name -> constraint) supplied by the caller
- **P** = lock pins (name -> version) carried over from a lock record
"""

from pkgplan.core.dependency.builder import (
    BuilderStats,
    CancellationToken,
    GraphBuilder,
)
from pkgplan.core.dependency.constraints import (
    PackageSpecifier,
    VersionConstraint,
    is_valid_version,
    parse_version,
    sort_versions,
    versions_equal,
)
from pkgplan.core.dependency.graph import DependencyGraph
from pkgplan.core.dependency.models import (
    DependencyEdge,
    EdgeKind,
    LicenseInfo,
    PackageInfo,
    PackageNode,
    SecurityStatus,
)

__all__ = [
    "BuilderStats",
    "CancellationToken",
    "DependencyEdge",
    "DependencyGraph",
    "EdgeKind",
    "GraphBuilder",
    "LicenseInfo",
    "PackageInfo",
    "PackageNode",
    "PackageSpecifier",
    "SecurityStatus",
    "VersionConstraint",
    "is_valid_version",
    "parse_version",
    "sort_versions",
    "versions_equal",
]
