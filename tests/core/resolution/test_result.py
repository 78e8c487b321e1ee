"""Tests for result assembly and statistics."""

from __future__ import annotations

from pkgplan.core.conflicts import ConflictDetector, ConflictReport, ConflictType, Severity
from pkgplan.core.dependency import PackageSpecifier
from pkgplan.core.resolution import ResolutionPlanner, assemble_result, collect_statistics
from pkgplan.core.resolution.result import merge_conflicts
from pkgplan.exceptions import PackageNotFoundError
from tests.helpers import SCENARIO_A, build_graph, make_provider


def _report(cid: str, message: str = "") -> ConflictReport:
    return ConflictReport(
        id=cid,
        type=ConflictType.VERSION,
        severity=Severity.ADVISORY,
        packages=(cid.split(":")[1],),
        message=message,
    )


class TestMergeConflicts:
    def test_first_report_wins(self) -> None:
        merged = merge_conflicts(
            [_report("version:A", "first")],
            [_report("version:A", "second"), _report("version:B")],
        )
        assert [(c.id, c.message) for c in merged] == [
            ("version:A", "first"),
            ("version:B", ""),
        ]


class TestAssembleResult:
    """Tests for the success rule and final package list."""

    def test_resolved(self) -> None:
        graph = build_graph(make_provider(SCENARIO_A), ["App", "Tool"])
        conflicts = ConflictDetector().detect(graph)
        plan = ResolutionPlanner(ConflictDetector()).plan(graph, conflicts)
        specs = [PackageSpecifier.parse("App"), PackageSpecifier.parse("Tool")]
        result = assemble_result(
            specs, graph=graph, conflicts=conflicts, plan=plan, iterations=plan.iterations,
        )
        assert result.is_resolved
        assert result.final_package_list == ["Lib", "App", "Tool"]
        data = result.to_dict()
        assert data["requested"] == ["App", "Tool"]
        assert data["packages"][0] == {"name": "Lib", "version": "2.0"}
        assert data["statistics"]["conflicts_by_type"] == {"version": 1}

    def test_errors_fail_the_run(self) -> None:
        graph = build_graph(make_provider(SCENARIO_A), ["App"])
        plan = ResolutionPlanner(ConflictDetector()).plan(graph)
        result = assemble_result(
            [PackageSpecifier.parse("App")],
            graph=graph,
            plan=plan,
            errors=[PackageNotFoundError("Ghost")],
        )
        assert not result.is_resolved
        assert result.final_package_list == []
        assert result.to_dict()["errors"][0]["code"] == "package_not_found"

    def test_no_graph(self) -> None:
        result = assemble_result([], graph=None, errors=[PackageNotFoundError("Ghost")])
        assert result.versions == {}
        assert result.statistics.packages == 0
        assert result.to_dict()["substitutions"] == {}


class TestStatistics:
    def test_counts(self) -> None:
        graph = build_graph(make_provider(SCENARIO_A), ["App", "Tool"])
        conflicts = ConflictDetector().detect(graph)
        stats = collect_statistics(graph, conflicts, iterations=3)
        assert stats.packages == 3
        assert stats.edges == 2
        assert stats.conflicts == 1
        assert stats.conflicts_by_severity == {"ADVISORY": 1}
        assert stats.iterations == 3
