"""Tests for ResolverConfig loading and validation."""

from __future__ import annotations

from pathlib import Path

import pytest

from pkgplan.config import ResolverConfig
from pkgplan.exceptions import ConfigError


class TestDefaults:
    def test_defaults(self) -> None:
        config = ResolverConfig()
        assert config.max_iterations == 10
        assert config.target_platforms == ()
        assert config.allow_incompatible_pins is True
        assert config.allow_platform_narrowing is False
        assert config.write_lock is True

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_iterations": -1},
            {"max_iterations": True},
            {"max_concurrency": 0},
            {"timeout": 0},
            {"timeout": "soon"},
        ],
    )
    def test_invalid_values(self, kwargs: dict) -> None:
        with pytest.raises(ConfigError):
            ResolverConfig(**kwargs)


class TestOverrides:
    def test_none_values_skipped(self) -> None:
        config = ResolverConfig(max_iterations=4).with_overrides(
            max_iterations=None, fresh=True,
        )
        assert config.max_iterations == 4
        assert config.fresh is True


class TestFromFile:
    """Tests for YAML configuration files."""

    def test_full_file(self, tmp_path: Path) -> None:
        path = tmp_path / "pkgplan.yaml"
        path.write_text(
            "packages: [App, 'Tool>=1.0']\n"
            "registry: registry.yaml\n"
            "target_platforms: [linux, windows]\n"
            "max_iterations: 5\n"
            "allow_platform_narrowing: true\n"
            "alternatives:\n"
            "  Lib: [LibNext]\n"
            "lockfile: locks/pkgplan-lock.json\n",
            encoding="utf-8",
        )
        config = ResolverConfig.from_file(path)
        assert config.packages == ("App", "Tool>=1.0")
        assert config.registry == tmp_path / "registry.yaml"
        assert config.lockfile == tmp_path / "locks" / "pkgplan-lock.json"
        assert config.target_platforms == ("linux", "windows")
        assert config.max_iterations == 5
        assert config.allow_platform_narrowing is True
        assert config.alternatives == {"Lib": ["LibNext"]}

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "pkgplan.yaml"
        path.write_text("", encoding="utf-8")
        assert ResolverConfig.from_file(path) == ResolverConfig()

    def test_unknown_key(self, tmp_path: Path) -> None:
        path = tmp_path / "pkgplan.yaml"
        path.write_text("max_iteration: 3\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="max_iteration"):
            ResolverConfig.from_file(path)

    def test_bad_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "pkgplan.yaml"
        path.write_text("packages: [App\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="Cannot parse"):
            ResolverConfig.from_file(path)

    def test_non_boolean_flag(self, tmp_path: Path) -> None:
        path = tmp_path / "pkgplan.yaml"
        path.write_text("fresh: 'yes please'\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="fresh"):
            ResolverConfig.from_file(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Cannot read"):
            ResolverConfig.from_file(tmp_path / "absent.yaml")
