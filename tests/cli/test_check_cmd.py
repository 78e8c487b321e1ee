"""Tests for ``pkgplan check``."""

from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

from pkgplan.cli.main import cli


class TestCheck:
    """Exit codes and output of conflict detection."""

    def test_advisory_only_exit_zero(self, runner: CliRunner, registry_file: Path) -> None:
        """Advisory version conflicts do not gate."""
        result = runner.invoke(cli, ["check", "App", "Tool", "--registry", str(registry_file)])
        assert result.exit_code == 0, result.output

    def test_json_lists_conflicts(self, runner: CliRunner, registry_file: Path) -> None:
        result = runner.invoke(cli, [
            "check", "App", "Tool", "--registry", str(registry_file), "--format", "json",
        ])
        data = json.loads(result.output)
        assert data["packages"] == ["App", "Lib", "Tool"]
        assert [c["id"] for c in data["conflicts"]] == ["version:Lib"]
        assert data["conflicts"][0]["severity"] == "ADVISORY"

    def test_blocking_exit_one(self, runner: CliRunner, registry_file: Path) -> None:
        result = runner.invoke(cli, ["check", "X", "Y", "--registry", str(registry_file)])
        assert result.exit_code == 1

    def test_missing_package_exit_one(self, runner: CliRunner, registry_file: Path) -> None:
        result = runner.invoke(cli, [
            "check", "Ghost", "--registry", str(registry_file), "--format", "json",
        ])
        assert result.exit_code == 1
        assert json.loads(result.output)["errors"][0]["code"] == "package_not_found"

    def test_clean_graph(self, runner: CliRunner, registry_file: Path) -> None:
        result = runner.invoke(cli, ["check", "Lib", "--registry", str(registry_file)])
        assert result.exit_code == 0
        assert "No conflicts detected" in result.output
