"""Platform conflict policy.

The platforms an installation supports are the intersection of every
package's declared platform set (a package declaring none supports all).
When that intersection does not cover the caller's target platforms, each
package missing a target platform gets a BREAKING report. A registered
alternative that covers every target is recommended as a substitute;
narrowing the target set is offered as well, and recommended only when the
caller allows it.
"""

from __future__ import annotations

from pkgplan.core.conflicts.base import ConflictPolicy, DetectionContext
from pkgplan.core.conflicts.models import (
    ConflictReport,
    ConflictType,
    ResolutionStrategy,
    Severity,
    StrategyKind,
    conflict_id,
)
from pkgplan.core.dependency.graph import DependencyGraph
from pkgplan.core.dependency.models import PackageNode


def supported_platforms(graph: DependencyGraph) -> frozenset[str] | None:
    """Return the intersection of declared platform sets.

    Returns:
        The common platforms, or None if no package restricts platforms.
    """
    common: frozenset[str] | None = None
    for node in graph.nodes():
        if not node.platforms:
            continue
        common = node.platforms if common is None else common & node.platforms
    return common


class PlatformConflictPolicy(ConflictPolicy):
    """Detects packages that cannot run on every target platform."""

    conflict_type = ConflictType.PLATFORM

    def detect(
        self, graph: DependencyGraph, context: DetectionContext
    ) -> list[ConflictReport]:
        targets = graph.target_platforms
        if not targets:
            return []
        common = supported_platforms(graph)
        if common is None or targets <= common:
            return []

        reports: list[ConflictReport] = []
        for node in graph.nodes():
            if not node.platforms or targets <= node.platforms:
                continue
            reports.append(self._report(node, targets, context))
        return sorted(reports, key=lambda r: r.id)

    def _substitute(
        self, node: PackageNode, targets: frozenset[str], context: DetectionContext
    ) -> str | None:
        names = [*node.alternatives, *context.alternatives.get(node.name, [])]
        for alt in dict.fromkeys(names):
            info = context.alternative_info.get(alt)
            if alt == node.name or info is None:
                continue
            if not info.platforms or targets <= info.platforms:
                return alt
        return None

    def _report(
        self, node: PackageNode, targets: frozenset[str], context: DetectionContext
    ) -> ConflictReport:
        missing = sorted(targets - node.platforms)
        strategies: list[ResolutionStrategy] = []
        recommended: ResolutionStrategy | None = None

        alt = self._substitute(node, targets, context)
        if alt is not None:
            recommended = ResolutionStrategy(
                StrategyKind.SUBSTITUTE_PACKAGE, node.name, alt,
                f"substitute {alt} for {node.name} (supports every target platform)",
            )
            strategies.append(recommended)

        keep = sorted(targets & node.platforms)
        if keep:
            narrow = ResolutionStrategy(
                StrategyKind.NARROW_PLATFORMS, "", ",".join(keep),
                f"narrow target platforms to {', '.join(keep)}",
            )
            strategies.append(narrow)
            if recommended is None and context.allow_platform_narrowing:
                recommended = narrow

        return ConflictReport(
            id=conflict_id(self.conflict_type, [node.name]),
            type=self.conflict_type,
            severity=Severity.BREAKING,
            packages=(node.name,),
            strategies=tuple(strategies),
            recommended=recommended,
            message=(
                f"{node.name} does not support target platform(s) "
                f"{', '.join(missing)}"
            ),
            details={
                "missing": missing,
                "supported": sorted(node.platforms),
                "targets": sorted(targets),
            },
        )
