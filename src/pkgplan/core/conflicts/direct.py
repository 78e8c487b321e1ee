"""Direct conflict policy.

Two packages conflict directly when either lists the other in its explicit
conflict set. The report is BLOCKING when either party is required (a root,
or reachable from a root through required edges) and BREAKING when both
are optional. An explicit declaration overrides automated reasoning, so no
strategy is recommended: the caller must choose which package to drop.
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


class DirectConflictPolicy(ConflictPolicy):
    """Detects pairs of packages that declare each other incompatible."""

    conflict_type = ConflictType.DIRECT

    def detect(
        self, graph: DependencyGraph, context: DetectionContext
    ) -> list[ConflictReport]:
        declared: dict[tuple[str, str], set[str]] = {}
        for node in graph.nodes():
            for other in sorted(node.conflicts):
                if other == node.name or not graph.has_node(other):
                    continue
                pair = (min(node.name, other), max(node.name, other))
                declared.setdefault(pair, set()).add(node.name)

        required = graph.required_names()
        reports: list[ConflictReport] = []
        for (a, b), declared_by in sorted(declared.items()):
            blocking = a in required or b in required
            reports.append(ConflictReport(
                id=conflict_id(self.conflict_type, [a, b]),
                type=self.conflict_type,
                severity=Severity.BLOCKING if blocking else Severity.BREAKING,
                packages=(a, b),
                strategies=tuple(
                    ResolutionStrategy(
                        StrategyKind.DROP_PACKAGE, name, "",
                        f"drop {name} from the installation",
                    )
                    for name in (a, b)
                ),
                recommended=None,
                message=(
                    f"{a} and {b} are declared incompatible "
                    f"(declared by {', '.join(sorted(declared_by))})"
                ),
                details={
                    "declared_by": sorted(declared_by),
                    "required": sorted(n for n in (a, b) if n in required),
                },
            ))
        return sorted(reports, key=lambda r: r.id)
