"""Tests for StaticMetadataProvider and registry file loading."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import pytest

from pkgplan.core.dependency import LicenseInfo, SecurityStatus
from pkgplan.exceptions import ConfigError
from pkgplan.provider import StaticMetadataProvider, load_registry


class TestFromDict:
    """Tests for building a provider from a registry mapping."""

    def test_fields(self) -> None:
        provider = StaticMetadataProvider.from_dict({"packages": {
            "Lib": {
                "version": "2.0.0",
                "dependencies": ["Core>=1.0", {"name": "Extra", "optional": True}],
                "conflicts": ["OldLib"],
                "license": {"type": "Custom", "distribution_allowed": False},
                "platforms": ["linux"],
                "available_versions": ["1.0.0"],
                "security": "SAFE",
            },
        }})
        info = asyncio.run(provider.get_package_info("Lib"))
        assert info.version == "2.0.0"
        assert [str(d) for d in info.dependencies] == ["Core>=1.0", "Extra"]
        assert info.dependencies[1].optional
        assert info.conflicts == frozenset({"OldLib"})
        assert info.license == LicenseInfo("Custom", False)
        assert info.platforms == frozenset({"linux"})
        assert info.security == SecurityStatus.SAFE

    def test_registry_alternatives_merged(self) -> None:
        provider = StaticMetadataProvider.from_dict({
            "packages": {"Lib": {"version": "1.0.0", "alternatives": ["A"]}},
            "alternatives": {"Lib": ["B", "A"]},
        })
        info = asyncio.run(provider.get_package_info("Lib"))
        assert info.alternatives == ("A", "B")

    def test_unknown_package(self) -> None:
        provider = StaticMetadataProvider.from_dict({"packages": {}})
        assert asyncio.run(provider.get_package_info("Ghost")) is None
        assert provider.lookups == ["Ghost"]

    def test_known_packages_sorted(self) -> None:
        provider = StaticMetadataProvider.from_dict({"packages": {
            "b": {"version": "1.0.0"}, "a": {"version": "1.0.0"},
        }})
        assert provider.known_packages() == ["a", "b"]

    @pytest.mark.parametrize(
        "entry",
        [
            {"dependencies": []},
            {"version": "not.a.version"},
            {"version": "1.0.0", "dependencies": [42]},
            "1.0.0",
        ],
    )
    def test_malformed_entry(self, entry) -> None:
        with pytest.raises(ConfigError, match="Lib"):
            StaticMetadataProvider.from_dict({"packages": {"Lib": entry}})


class TestFromFile:
    """Tests for YAML and JSON registry files."""

    def test_yaml(self, registry_file: Path) -> None:
        provider = StaticMetadataProvider.from_file(registry_file)
        assert provider.known_packages() == ["App", "Lib", "Tool", "X", "Y"]

    def test_json(self, tmp_path: Path) -> None:
        path = tmp_path / "registry.json"
        path.write_text(json.dumps({"packages": {"A": {"version": "1.0.0"}}}), encoding="utf-8")
        assert StaticMetadataProvider.from_file(path).known_packages() == ["A"]

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "registry.yaml"
        path.write_text("- A\n- B\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="mapping"):
            load_registry(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Cannot read"):
            load_registry(tmp_path / "absent.yaml")
