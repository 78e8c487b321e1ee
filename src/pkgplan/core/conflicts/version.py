"""Version conflict policy.

For each package, gathers every consumer constraint (requesting packages,
the caller's root request, and the lock pin) and the versions in play. A
conflict exists when the node's current version violates a consumer. If
some known version satisfies every consumer the conflict is ADVISORY and the
recommendation is to pin it (a lock-pinned version is preferred, then the
highest). Otherwise it is BLOCKING and the recommendation is to pin the
highest version, accepting downgrade warnings for the incompatible
consumers, or to defer to the caller.
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
from pkgplan.core.dependency.constraints import (
    VersionConstraint,
    sort_versions,
    versions_equal,
)
from pkgplan.core.dependency.graph import DependencyGraph
from pkgplan.core.dependency.models import PackageNode

# Pseudo-consumers for constraints that do not come from a package.
REQUESTED = "<requested>"
LOCKFILE = "<lockfile>"


def consumer_constraints(
    graph: DependencyGraph, node: PackageNode
) -> list[tuple[str, VersionConstraint]]:
    """Return (consumer, constraint) pairs on *node*, minus waived consumers."""
    consumers: list[tuple[str, VersionConstraint]] = []
    if node.name in graph.roots:
        consumers.append((REQUESTED, graph.roots[node.name]))
    if node.name in graph.lock_pins:
        consumers.append((LOCKFILE, VersionConstraint.exact(graph.lock_pins[node.name])))
    for edge in graph.edges_to(node.name):
        if graph.has_node(edge.source):
            consumers.append((edge.source, edge.constraint))
    return [(c, con) for c, con in consumers if c not in node.waived]


class VersionConflictPolicy(ConflictPolicy):
    """Detects packages requested at mutually incompatible versions."""

    conflict_type = ConflictType.VERSION

    def detect(
        self, graph: DependencyGraph, context: DetectionContext
    ) -> list[ConflictReport]:
        reports: list[ConflictReport] = []
        for node in graph.nodes():
            report = self._check(graph, node, context)
            if report is not None:
                reports.append(report)
        return sorted(reports, key=lambda r: r.id)

    def _check(
        self, graph: DependencyGraph, node: PackageNode, context: DetectionContext
    ) -> ConflictReport | None:
        consumers = consumer_constraints(graph, node)
        violated = [c for c, con in consumers if not con.satisfies(node.version)]
        if not violated:
            return None

        in_play = {node.version}
        for _, con in consumers:
            in_play.update(con.pinned_versions())
        in_play_sorted = sort_versions(in_play)
        candidates = sort_versions(in_play | set(node.available_versions))
        satisfying = [
            v for v in candidates
            if all(con.satisfies(v) for _, con in consumers)
        ]

        cid = conflict_id(self.conflict_type, [node.name])
        details = {
            "versions": in_play_sorted,
            "current": node.version,
            "consumers": {c: str(con) for c, con in consumers},
            "violated": violated,
        }

        if satisfying:
            locked = graph.lock_pins.get(node.name)
            chosen = satisfying[0]
            if locked is not None:
                chosen = next(
                    (v for v in satisfying if versions_equal(v, locked)), chosen
                )
            pin = ResolutionStrategy(
                StrategyKind.PIN_VERSION, node.name, chosen,
                f"pin {node.name} to {chosen}, which satisfies every consumer",
            )
            return ConflictReport(
                id=cid,
                type=self.conflict_type,
                severity=Severity.ADVISORY,
                packages=(node.name,),
                strategies=(pin,),
                recommended=pin,
                message=(
                    f"{node.name} is requested at {len(in_play_sorted)} "
                    f"version(s) ({', '.join(in_play_sorted)}); "
                    f"{chosen} satisfies every consumer"
                ),
                details=details,
            )

        highest = candidates[0]
        pin_highest = ResolutionStrategy(
            StrategyKind.PIN_HIGHEST, node.name, highest,
            f"pin {node.name} to {highest} and accept downgrade warnings "
            f"for incompatible consumers",
        )
        defer = ResolutionStrategy(
            StrategyKind.DEFER_TO_CALLER, node.name, "",
            f"let the caller choose a version of {node.name}",
        )
        return ConflictReport(
            id=cid,
            type=self.conflict_type,
            severity=Severity.BLOCKING,
            packages=(node.name,),
            strategies=(pin_highest, defer),
            recommended=pin_highest if context.allow_incompatible_pins else defer,
            message=(
                f"No version of {node.name} satisfies every consumer "
                f"(requested: {', '.join(f'{c} {con}' for c, con in consumers)})"
            ),
            details=details,
        )
