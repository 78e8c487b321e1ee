"""Tests for CircularDependencyValidator."""

from __future__ import annotations

from pkgplan.core.dependency import DependencyEdge, DependencyGraph, PackageNode
from pkgplan.core.resolution import CircularDependencyValidator
from tests.helpers import SCENARIO_C, build_graph, make_provider


def _graph(edges: list[tuple[str, str]]) -> DependencyGraph:
    graph = DependencyGraph()
    for name in sorted({n for pair in edges for n in pair}):
        graph.add_node(PackageNode(name=name, version="1.0.0"))
    for source, target in edges:
        graph.add_edge(DependencyEdge(source, target))
    return graph


class TestCircularDependencyValidator:
    """Tests for cycle detection."""

    def test_two_cycle(self) -> None:
        graph = build_graph(make_provider(SCENARIO_C), ["A"])
        assert CircularDependencyValidator().validate(graph) == [["A", "B", "A"]]

    def test_acyclic_diamond(self) -> None:
        graph = _graph([("A", "B"), ("A", "C"), ("B", "D"), ("C", "D")])
        assert CircularDependencyValidator().validate(graph) == []

    def test_self_loop(self) -> None:
        assert CircularDependencyValidator().validate(_graph([("A", "A")])) == [["A", "A"]]

    def test_longer_cycle_starts_at_reentry(self) -> None:
        graph = _graph([("A", "B"), ("B", "C"), ("C", "B")])
        assert CircularDependencyValidator().validate(graph) == [["B", "C", "B"]]

    def test_independent_cycles(self) -> None:
        graph = _graph([("A", "B"), ("B", "A"), ("X", "Y"), ("Y", "X")])
        assert CircularDependencyValidator().validate(graph) == [
            ["A", "B", "A"],
            ["X", "Y", "X"],
        ]

    def test_deep_acyclic_chain(self) -> None:
        names = [f"p{i:05d}" for i in range(1501)]
        graph = _graph(list(zip(names, names[1:])))
        assert CircularDependencyValidator().validate(graph) == []

    def test_deep_chain_closing_cycle(self) -> None:
        names = [f"p{i:05d}" for i in range(1501)]
        graph = _graph(list(zip(names, names[1:])) + [(names[-1], names[0])])
        assert CircularDependencyValidator().validate(graph) == [names + [names[0]]]

    def test_cycle_reached_after_finished_branch(self) -> None:
        graph = _graph([("A", "B"), ("A", "C"), ("C", "D"), ("D", "C")])
        assert CircularDependencyValidator().validate(graph) == [["C", "D", "C"]]
