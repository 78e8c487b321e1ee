"""Tests for the iterative ResolutionPlanner.

Each test builds a graph from a small registry, runs the planner in place,
and checks the applied steps and the mutated graph.
"""

from __future__ import annotations

import asyncio

import pytest

from pkgplan.core.conflicts import (
    ConflictDetector,
    DetectionContext,
    ResolutionStrategy,
    StrategyKind,
)
from pkgplan.core.dependency import GraphBuilder
from pkgplan.core.resolution import ResolutionPlanner
from pkgplan.core.resolution.planner import pinned_nodes
from pkgplan.exceptions import UnresolvableConflictError
from tests.helpers import (
    SCENARIO_A,
    SCENARIO_B,
    SCENARIO_D,
    build_graph,
    make_info,
    make_provider,
)

INCOMPATIBLE = {
    "App": {"version": "1.0.0", "dependencies": ["Lib=2.0"]},
    "Tool": {"version": "1.0.0", "dependencies": ["Lib=1.0"]},
    "Lib": {"version": "1.0.0", "available_versions": ["1.0.0", "2.0.0"]},
}


def _planner(**kwargs) -> ResolutionPlanner:
    return ResolutionPlanner(ConflictDetector(), **kwargs)


class TestPinning:
    """Tests for version pinning strategies."""

    def test_compatible_pin(self) -> None:
        graph = build_graph(make_provider(SCENARIO_A), ["App", "Tool"])
        plan = _planner().plan(graph)
        assert plan.iterations == 1
        step = plan.steps[0]
        assert step.index == 1
        assert step.conflict_id == "version:Lib"
        assert step.strategy.kind == StrategyKind.PIN_VERSION
        assert step.warnings == ()
        assert graph.get_node("Lib").version == "2.0"
        assert plan.final_packages == ("App", "Lib", "Tool")
        assert plan.outstanding == ()
        assert [n.name for n in pinned_nodes(graph)] == ["Lib"]

    def test_incompatible_pin_waives_consumer(self) -> None:
        graph = build_graph(make_provider(INCOMPATIBLE), ["App", "Tool"])
        plan = _planner().plan(graph)
        step = plan.steps[0]
        assert step.strategy.kind == StrategyKind.PIN_HIGHEST
        assert step.warnings == ("Tool requires Lib =1.0 but Lib is pinned to 2.0",)
        assert plan.warnings == list(step.warnings)
        assert graph.get_node("Lib").waived == {"Tool"}

    def test_incompatible_pin_disallowed(self) -> None:
        graph = build_graph(make_provider(INCOMPATIBLE), ["App", "Tool"])
        detector = ConflictDetector(DetectionContext(allow_incompatible_pins=False))
        with pytest.raises(UnresolvableConflictError) as excinfo:
            ResolutionPlanner(detector).plan(graph)
        assert [c.id for c in excinfo.value.remaining] == ["version:Lib"]
        assert excinfo.value.iterations == 0


class TestDirectConflicts:
    """Direct conflicts are only resolved by a caller choice."""

    def test_unresolvable_without_choice(self) -> None:
        graph = build_graph(make_provider(SCENARIO_B), ["X", "Y"])
        with pytest.raises(UnresolvableConflictError) as excinfo:
            _planner().plan(graph)
        assert [c.id for c in excinfo.value.remaining] == ["direct:X+Y"]
        assert excinfo.value.steps == []

    def test_caller_choice_drops_package(self) -> None:
        graph = build_graph(make_provider(SCENARIO_B), ["X", "Y"])
        choices = {"direct:X+Y": ResolutionStrategy.parse("drop:Y")}
        plan = _planner(choices=choices).plan(graph)
        assert plan.final_packages == ("X",)
        assert "Y" not in graph.roots
        assert plan.steps[0].warnings[0] == "dropped Y"

    def test_drop_prunes_orphans(self) -> None:
        graph = build_graph(make_provider({
            "X": {"version": "1.0.0", "conflicts": ["Y"]},
            "Y": {"version": "1.0.0", "dependencies": ["YCore"]},
            "YCore": {"version": "1.0.0"},
        }), ["X", "Y"])
        choices = {"direct:X+Y": ResolutionStrategy.parse("drop:Y")}
        plan = _planner(choices=choices).plan(graph)
        assert plan.final_packages == ("X",)
        assert "dropped YCore (no longer required)" in plan.warnings


class TestSubstitution:
    """Tests for platform-driven package substitution."""

    def test_substitute_grafts_closure(self) -> None:
        provider = make_provider(SCENARIO_D)
        builder = GraphBuilder(provider)

        async def _prepare():
            graph = await builder.build(["App"], target_platforms=("p1", "p2"))
            await builder.prefetch(["Q"])
            return graph

        graph = asyncio.run(_prepare())
        context = DetectionContext(alternative_info={"Q": builder.cached("Q")})
        plan = ResolutionPlanner(ConflictDetector(context), builder).plan(graph)

        assert plan.steps[0].strategy.kind == StrategyKind.SUBSTITUTE_PACKAGE
        assert plan.final_packages == ("App", "Q", "QCore")
        assert graph.substitutions == {"P": "Q"}
        assert [e.target for e in graph.edges_from("App")] == ["Q"]
        assert "added QCore" in plan.steps[0].warnings

    def test_substitute_needs_builder(self) -> None:
        graph = build_graph(make_provider(SCENARIO_D), ["App"], target_platforms=("p1", "p2"))
        context = DetectionContext(alternative_info={
            "Q": make_info("Q", platforms=["p1", "p2"]),
        })
        with pytest.raises(UnresolvableConflictError):
            ResolutionPlanner(ConflictDetector(context)).plan(graph)

    def test_narrow_platforms(self) -> None:
        graph = build_graph(make_provider(SCENARIO_D), ["App"], target_platforms=("p1", "p2"))
        detector = ConflictDetector(DetectionContext(allow_platform_narrowing=True))
        plan = ResolutionPlanner(detector).plan(graph)
        assert graph.target_platforms == frozenset({"p1"})
        assert plan.warnings == ["target platforms narrowed to p1"]


class TestTermination:
    """Tests for the iteration ceiling and non-gating leftovers."""

    def test_ceiling_stops_gating_fixes(self) -> None:
        graph = build_graph(make_provider(INCOMPATIBLE), ["App", "Tool"])
        with pytest.raises(UnresolvableConflictError) as excinfo:
            _planner(max_iterations=0).plan(graph)
        assert [c.id for c in excinfo.value.remaining] == ["version:Lib"]
        assert excinfo.value.steps == []

    def test_advisory_pins_not_bounded_by_ceiling(self) -> None:
        graph = build_graph(make_provider(SCENARIO_A), ["App", "Tool"])
        plan = _planner(max_iterations=0).plan(graph)
        assert plan.iterations == 1
        assert graph.get_node("Lib").version == "2.0"
        assert plan.outstanding == ()

    def test_more_advisory_conflicts_than_ceiling(self) -> None:
        libs = [f"L{i}" for i in range(12)]
        registry = {
            "App": {"version": "1.0.0", "dependencies": [f"{lib}=2.0" for lib in libs]},
            **{
                lib: {"version": "1.0.0", "available_versions": ["1.0.0", "2.0.0"]}
                for lib in libs
            },
        }
        graph = build_graph(make_provider(registry), ["App"])
        plan = _planner().plan(graph)
        assert plan.iterations == 12
        assert {graph.get_node(lib).version for lib in libs} == {"2.0"}
        assert plan.outstanding == ()

    def test_unresolvable_carries_conflicts_seen(self) -> None:
        graph = build_graph(make_provider({
            **SCENARIO_A,
            **SCENARIO_B,
        }), ["App", "Tool", "X", "Y"])
        with pytest.raises(UnresolvableConflictError) as excinfo:
            _planner().plan(graph)
        assert [c.id for c in excinfo.value.remaining] == ["direct:X+Y"]
        assert {c.id for c in excinfo.value.seen} == {"direct:X+Y", "version:Lib"}

    def test_manual_review_never_applied(self) -> None:
        graph = build_graph(make_provider({
            "Engine": {"version": "1.0.0", "license": "GPL-3.0"},
            "Closed": {"version": "1.0.0", "license": "Proprietary"},
        }), ["Closed", "Engine"])
        plan = _planner().plan(graph)
        assert plan.steps == ()
        assert [c.id for c in plan.outstanding] == ["license:Closed+Engine"]

    def test_conflicts_seen_includes_resolved(self) -> None:
        graph = build_graph(make_provider(SCENARIO_A), ["App", "Tool"])
        plan = _planner().plan(graph)
        assert [c.id for c in plan.conflicts_seen] == ["version:Lib"]

    def test_negative_ceiling_rejected(self) -> None:
        with pytest.raises(ValueError):
            _planner(max_iterations=-1)

    def test_plan_to_dict(self) -> None:
        graph = build_graph(make_provider(SCENARIO_A), ["App", "Tool"])
        data = _planner().plan(graph).to_dict()
        assert data["iterations"] == 1
        assert data["steps"][0]["strategy"]["kind"] == "pin"
        assert data["final_packages"] == ["App", "Lib", "Tool"]
