"""Resolution result and its assembly.

``ResolutionResult`` is the terminal artifact of a run. Expected failures
(missing packages, unresolvable conflicts, cycles) are carried in
``errors`` with ``is_resolved = False`` rather than raised.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import asdict, dataclass, field
from typing import Any, Sequence

from pkgplan.core.conflicts.models import ConflictReport
from pkgplan.core.dependency.builder import BuilderStats
from pkgplan.core.dependency.constraints import PackageSpecifier
from pkgplan.core.dependency.graph import DependencyGraph
from pkgplan.core.resolution.planner import ResolutionPlan
from pkgplan.exceptions import PkgPlanError


@dataclass
class ResolutionStatistics:
    """Counters describing one run."""

    packages: int = 0
    edges: int = 0
    conflicts: int = 0
    conflicts_by_type: dict[str, int] = field(default_factory=dict)
    conflicts_by_severity: dict[str, int] = field(default_factory=dict)
    provider_calls: int = 0
    cache_hits: int = 0
    iterations: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ResolutionResult:
    """Outcome of a resolution run.

    Attributes:
        requested_packages: The caller's input, as parsed specifiers.
        graph: The final graph, or None when the build failed.
        conflicts: Every conflict seen, including the resolved ones.
        plan: The resolution plan, or None when planning failed.
        final_package_list: Install order (dependencies first). Empty
            unless ``is_resolved``.
        is_resolved: True when no fatal error occurred.
        errors: Structured errors explaining a failed run.
        warnings: Non-fatal findings (waived constraints, advisory
            conflicts, integrity mismatches).
        statistics: Run counters.
    """

    requested_packages: list[PackageSpecifier]
    graph: DependencyGraph | None
    conflicts: list[ConflictReport]
    plan: ResolutionPlan | None
    final_package_list: list[str]
    is_resolved: bool
    errors: list[PkgPlanError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    statistics: ResolutionStatistics = field(default_factory=ResolutionStatistics)

    @property
    def versions(self) -> dict[str, str]:
        """Final package name -> resolved version, in install order."""
        if self.graph is None:
            return {}
        versions: dict[str, str] = {}
        for name in self.final_package_list:
            node = self.graph.get_node(name)
            if node is not None:
                versions[name] = node.version
        return versions

    def to_dict(self) -> dict[str, Any]:
        return {
            "requested": [str(s) for s in self.requested_packages],
            "is_resolved": self.is_resolved,
            "packages": [
                {"name": name, "version": version}
                for name, version in self.versions.items()
            ],
            "conflicts": [c.to_dict() for c in self.conflicts],
            "plan": self.plan.to_dict() if self.plan else None,
            "substitutions": dict(self.graph.substitutions) if self.graph else {},
            "target_platforms": sorted(self.graph.target_platforms) if self.graph else [],
            "errors": [e.to_dict() for e in self.errors],
            "warnings": list(self.warnings),
            "statistics": self.statistics.to_dict(),
        }


def collect_statistics(
    graph: DependencyGraph | None,
    conflicts: Sequence[ConflictReport],
    builder_stats: BuilderStats | None = None,
    iterations: int = 0,
) -> ResolutionStatistics:
    """Summarize a run's graph, conflicts and lookups."""
    by_type = Counter(c.type.value for c in conflicts)
    by_severity = Counter(c.severity.name for c in conflicts)
    return ResolutionStatistics(
        packages=graph.node_count if graph else 0,
        edges=graph.edge_count if graph else 0,
        conflicts=len(conflicts),
        conflicts_by_type=dict(sorted(by_type.items())),
        conflicts_by_severity=dict(sorted(by_severity.items())),
        provider_calls=builder_stats.provider_calls if builder_stats else 0,
        cache_hits=builder_stats.cache_hits if builder_stats else 0,
        iterations=iterations,
    )


def merge_conflicts(*groups: Sequence[ConflictReport]) -> list[ConflictReport]:
    """Concatenate conflict lists, keeping the first report per id."""
    merged: dict[str, ConflictReport] = {}
    for group in groups:
        for report in group:
            merged.setdefault(report.id, report)
    return list(merged.values())


def assemble_result(
    requested: Sequence[PackageSpecifier],
    *,
    graph: DependencyGraph | None,
    conflicts: Sequence[ConflictReport] = (),
    plan: ResolutionPlan | None = None,
    errors: Sequence[PkgPlanError] = (),
    warnings: Sequence[str] = (),
    builder_stats: BuilderStats | None = None,
    iterations: int = 0,
) -> ResolutionResult:
    """Package the final state of a run.

    The run succeeded when there is a graph, a plan, and no errors. Only
    then is the install order computed; otherwise the final list is empty.
    """
    is_resolved = graph is not None and plan is not None and not errors
    final = graph.install_order() if is_resolved else []
    return ResolutionResult(
        requested_packages=list(requested),
        graph=graph,
        conflicts=list(conflicts),
        plan=plan,
        final_package_list=final,
        is_resolved=is_resolved,
        errors=list(errors),
        warnings=list(warnings),
        statistics=collect_statistics(graph, conflicts, builder_stats, iterations),
    )
