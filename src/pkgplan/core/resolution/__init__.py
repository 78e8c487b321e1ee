"""Conflict resolution, cycle validation and result assembly.

Public API::

    from pkgplan.core.resolution import PackageResolver
    result = PackageResolver(provider).resolve(["App", "Tool"])
"""

from pkgplan.core.resolution.cycles import CircularDependencyValidator
from pkgplan.core.resolution.planner import (
    ResolutionPlan,
    ResolutionPlanner,
    ResolutionStep,
)
from pkgplan.core.resolution.resolver import PackageResolver
from pkgplan.core.resolution.result import (
    ResolutionResult,
    ResolutionStatistics,
    assemble_result,
    collect_statistics,
)

__all__ = [
    "CircularDependencyValidator",
    "PackageResolver",
    "ResolutionPlan",
    "ResolutionPlanner",
    "ResolutionResult",
    "ResolutionStatistics",
    "ResolutionStep",
    "assemble_result",
    "collect_statistics",
]
