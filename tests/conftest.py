"""Shared fixtures for pkgplan tests."""

from __future__ import annotations

import pathlib

import pytest

from pkgplan.provider import StaticMetadataProvider
from tests.helpers import (
    SCENARIO_A,
    SCENARIO_B,
    SCENARIO_C,
    SCENARIO_D,
    make_provider,
)


@pytest.fixture
def scenario_a() -> StaticMetadataProvider:
    return make_provider(SCENARIO_A)


@pytest.fixture
def scenario_b() -> StaticMetadataProvider:
    return make_provider(SCENARIO_B)


@pytest.fixture
def scenario_c() -> StaticMetadataProvider:
    return make_provider(SCENARIO_C)


@pytest.fixture
def scenario_d() -> StaticMetadataProvider:
    return make_provider(SCENARIO_D)


@pytest.fixture
def registry_file(tmp_path: pathlib.Path) -> pathlib.Path:
    """Write a registry with Scenario A and B packages as YAML."""
    path = tmp_path / "registry.yaml"
    path.write_text(
        "packages:\n"
        "  App:\n"
        "    version: '1.0.0'\n"
        "    dependencies: ['Lib>=1.0']\n"
        "  Tool:\n"
        "    version: '1.0.0'\n"
        "    dependencies: ['Lib=2.0']\n"
        "  Lib:\n"
        "    version: '1.0.0'\n"
        "    available_versions: ['1.0.0', '2.0.0']\n"
        "    license: MIT\n"
        "  X:\n"
        "    version: '1.0.0'\n"
        "    conflicts: [Y]\n"
        "  Y:\n"
        "    version: '1.0.0'\n"
        "    conflicts: [X]\n",
        encoding="utf-8",
    )
    return path
