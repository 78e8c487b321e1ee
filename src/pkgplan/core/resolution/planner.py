"""Iterative, priority-ordered conflict resolution.

The planner applies one resolution strategy at a time and re-runs the full
conflict detector after every step, because resolving one conflict can
introduce another (pinning a version may newly violate a different
consumer). It stops at a fixed point (no applicable automatic strategy is
left) or once the iteration ceiling on BLOCKING and BREAKING fixes is
reached. Automatic strategies for non-gating conflicts do not count
against the ceiling and are applied up to the fixed point.

Only BLOCKING and BREAKING conflicts gate success. ADVISORY and WARNING
conflicts are resolved when an automatic strategy exists and otherwise
carried into the plan for the caller to see.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Mapping

from pkgplan.core.conflicts.detector import ConflictDetector
from pkgplan.core.conflicts.models import (
    ConflictReport,
    ConflictType,
    ResolutionStrategy,
    Severity,
    StrategyKind,
)
from pkgplan.core.conflicts.version import consumer_constraints
from pkgplan.core.dependency.constraints import VersionConstraint
from pkgplan.core.dependency.graph import DependencyGraph
from pkgplan.core.dependency.models import PackageNode
from pkgplan.exceptions import GraphInvariantError, UnresolvableConflictError

if TYPE_CHECKING:
    from pkgplan.core.dependency.builder import GraphBuilder

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS: int = 10


@dataclass(frozen=True)
class ResolutionStep:
    """One applied resolution: which conflict, how, and with what caveats."""

    index: int
    conflict_id: str
    conflict_type: ConflictType
    severity: Severity
    strategy: ResolutionStrategy
    warnings: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "conflict_id": self.conflict_id,
            "conflict_type": self.conflict_type.value,
            "severity": self.severity.name,
            "strategy": self.strategy.to_dict(),
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class ResolutionPlan:
    """The validated outcome of conflict planning.

    Attributes:
        steps: Applied resolutions, in order.
        final_packages: Package names left in the graph, sorted.
        conflicts_seen: Every distinct conflict reported during planning,
            in first-seen order, including the ones later resolved.
        outstanding: Non-gating conflicts still present at the end.
        iterations: Number of strategies applied, of any severity.
    """

    steps: tuple[ResolutionStep, ...]
    final_packages: tuple[str, ...]
    conflicts_seen: tuple[ConflictReport, ...]
    outstanding: tuple[ConflictReport, ...]
    iterations: int

    @property
    def warnings(self) -> list[str]:
        return [w for step in self.steps for w in step.warnings]

    def to_dict(self) -> dict[str, Any]:
        return {
            "steps": [s.to_dict() for s in self.steps],
            "final_packages": list(self.final_packages),
            "outstanding": [c.id for c in self.outstanding],
            "iterations": self.iterations,
        }


class ResolutionPlanner:
    """Resolves conflicts by mutating the graph one strategy at a time.

    Args:
        detector: Detector re-run after every applied step.
        builder: Graph builder holding prefetched metadata; required for
            package substitution.
        max_iterations: Ceiling on strategies applied to BLOCKING and
            BREAKING conflicts.
        choices: Caller decisions, conflict id -> strategy. A choice
            overrides the conflict's recommended strategy, which is how
            conflicts without a recommendation (e.g. direct conflicts) are
            resolved.
    """

    def __init__(
        self,
        detector: ConflictDetector,
        builder: GraphBuilder | None = None,
        *,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        choices: Mapping[str, ResolutionStrategy] | None = None,
    ) -> None:
        if max_iterations < 0:
            raise ValueError("max_iterations must not be negative")
        self._detector = detector
        self._builder = builder
        self._max_iterations = max_iterations
        self._choices = dict(choices or {})

    def plan(
        self,
        graph: DependencyGraph,
        conflicts: list[ConflictReport] | None = None,
    ) -> ResolutionPlan:
        """Resolve conflicts on *graph* in place.

        Args:
            graph: The graph to mutate.
            conflicts: Conflicts already detected on *graph*; detected here
                when omitted.

        Returns:
            The resolution plan.

        Raises:
            UnresolvableConflictError: If BLOCKING or BREAKING conflicts
                remain once no further automatic strategy applies or the
                iteration ceiling is reached.
        """
        current = list(conflicts) if conflicts is not None else self._detector.detect(graph)
        seen: dict[str, ConflictReport] = {}
        applied: set[tuple[str, str]] = set()
        steps: list[ResolutionStep] = []
        gating_steps = 0

        while True:
            for report in current:
                seen.setdefault(report.id, report)
            exhausted = gating_steps >= self._max_iterations
            candidate = self._next(graph, current, applied, non_gating_only=exhausted)
            if candidate is None:
                if exhausted and any(c.severity.gating for c in current):
                    logger.info("Iteration ceiling (%d) reached", self._max_iterations)
                break
            report, strategy = candidate
            applied.add((report.id, str(strategy)))
            if report.severity.gating:
                gating_steps += 1
            warnings = self._apply(graph, strategy)
            steps.append(ResolutionStep(
                index=len(steps) + 1,
                conflict_id=report.id,
                conflict_type=report.type,
                severity=report.severity,
                strategy=strategy,
                warnings=tuple(warnings),
            ))
            logger.debug("Step %d: %s -> %s", len(steps), report.id, strategy)
            current = self._detector.detect(graph)

        ordered = sorted(current, key=lambda c: c.sort_key)
        gating = [c for c in ordered if c.severity.gating]
        if gating:
            logger.warning(
                "%d conflict(s) left unresolved: %s",
                len(gating), ", ".join(c.id for c in gating),
            )
            raise UnresolvableConflictError(
                gating, steps, len(steps), seen=list(seen.values()),
            )

        return ResolutionPlan(
            steps=tuple(steps),
            final_packages=tuple(graph.names),
            conflicts_seen=tuple(seen.values()),
            outstanding=tuple(ordered),
            iterations=len(steps),
        )

    # -- Strategy selection -------------------------------------------------

    def _next(
        self,
        graph: DependencyGraph,
        conflicts: list[ConflictReport],
        applied: set[tuple[str, str]],
        *,
        non_gating_only: bool = False,
    ) -> tuple[ConflictReport, ResolutionStrategy] | None:
        """Pick the highest-priority conflict with an applicable strategy."""
        for report in sorted(conflicts, key=lambda c: c.sort_key):
            if non_gating_only and report.severity.gating:
                continue
            strategy = self._choices.get(report.id, report.recommended)
            if strategy is None or not strategy.automatic:
                continue
            if (report.id, str(strategy)) in applied:
                continue
            if not self._applicable(graph, strategy):
                logger.debug("Skipping inapplicable strategy %s for %s", strategy, report.id)
                continue
            return report, strategy
        return None

    def _applicable(self, graph: DependencyGraph, strategy: ResolutionStrategy) -> bool:
        kind = strategy.kind
        if kind == StrategyKind.NARROW_PLATFORMS:
            return bool(strategy.value)
        if not graph.has_node(strategy.target):
            return False
        if kind in (StrategyKind.PIN_VERSION, StrategyKind.PIN_HIGHEST):
            return bool(strategy.value)
        if kind == StrategyKind.SUBSTITUTE_PACKAGE:
            return self._builder is not None and bool(strategy.value)
        return kind == StrategyKind.DROP_PACKAGE

    # -- Graph mutations ----------------------------------------------------

    def _apply(self, graph: DependencyGraph, strategy: ResolutionStrategy) -> list[str]:
        """Apply *strategy* to *graph*; return warnings for the caller."""
        kind = strategy.kind
        if kind in (StrategyKind.PIN_VERSION, StrategyKind.PIN_HIGHEST):
            return self._pin(graph, strategy.target, strategy.value)
        if kind == StrategyKind.DROP_PACKAGE:
            return self._drop(graph, strategy.target)
        if kind == StrategyKind.SUBSTITUTE_PACKAGE:
            return self._substitute(graph, strategy.target, strategy.value)
        if kind == StrategyKind.NARROW_PLATFORMS:
            platforms = frozenset(p.strip() for p in strategy.value.split(",") if p.strip())
            graph.target_platforms = platforms
            return [f"target platforms narrowed to {', '.join(sorted(platforms))}"]
        raise GraphInvariantError(f"Strategy {kind.value!r} cannot be applied automatically")

    def _pin(self, graph: DependencyGraph, name: str, version: str) -> list[str]:
        node = graph.get_node(name)
        assert node is not None
        node.version = version
        node.pinned = True
        warnings: list[str] = []
        for consumer, constraint in consumer_constraints(graph, node):
            if not constraint.satisfies(version):
                node.waived.add(consumer)
                warnings.append(
                    f"{consumer} requires {name} {constraint} "
                    f"but {name} is pinned to {version}"
                )
        return warnings

    def _drop(self, graph: DependencyGraph, name: str) -> list[str]:
        consumers = [e.source for e in graph.edges_to(name)]
        for consumer in consumers:
            node = graph.get_node(consumer)
            if node is not None:
                node.dependencies = [d for d in node.dependencies if d != name]
        graph.remove_node(name)
        warnings = [f"dropped {name}"]
        warnings.extend(f"{c} loses its dependency on {name}" for c in consumers)
        warnings.extend(f"dropped {n} (no longer required)" for n in graph.prune_unreachable())
        return warnings

    def _substitute(self, graph: DependencyGraph, name: str, substitute: str) -> list[str]:
        assert self._builder is not None
        added = []
        if not graph.has_node(substitute):
            added = self._builder.graft(graph, substitute)
        if name in graph.roots:
            graph.roots.setdefault(substitute, VersionConstraint.any())
        graph.redirect_edges(name, substitute)
        graph.remove_node(name)
        graph.substitutions[name] = substitute
        removed = graph.prune_unreachable()
        warnings = [f"{name} replaced by {substitute}"]
        warnings.extend(f"added {n}" for n in added if n != substitute)
        warnings.extend(f"dropped {n} (no longer required)" for n in removed)
        return warnings


def pinned_nodes(graph: DependencyGraph) -> list[PackageNode]:
    """Return the nodes whose version was pinned by the planner."""
    return [n for n in graph.nodes() if n.pinned]
