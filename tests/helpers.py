"""Registry builders shared across pkgplan tests."""

from __future__ import annotations

import asyncio
from typing import Any

from pkgplan.core.dependency import DependencyGraph, GraphBuilder, PackageInfo
from pkgplan.provider import StaticMetadataProvider


def make_info(name: str, version: str = "1.0.0", **fields: Any) -> PackageInfo:
    """Build a PackageInfo from registry-style keyword fields."""
    return PackageInfo.from_dict(name, {"version": version, **fields})


def make_provider(packages: dict[str, dict[str, Any]], **extra: Any) -> StaticMetadataProvider:
    """Build a static provider from a ``packages`` mapping."""
    return StaticMetadataProvider.from_dict({"packages": packages, **extra})


def build_graph(
    provider: StaticMetadataProvider,
    requested: list[str],
    target_platforms: tuple[str, ...] = (),
) -> DependencyGraph:
    """Run the graph builder synchronously."""
    return asyncio.run(
        GraphBuilder(provider).build(requested, target_platforms=target_platforms)
    )


# Scenario A: App and Tool need compatible versions of Lib.
SCENARIO_A: dict[str, dict[str, Any]] = {
    "App": {"version": "1.0.0", "dependencies": ["Lib>=1.0"]},
    "Tool": {"version": "1.0.0", "dependencies": ["Lib=2.0"]},
    "Lib": {"version": "1.0.0", "available_versions": ["1.0.0", "2.0.0"]},
}

# Scenario B: X and Y declare each other incompatible.
SCENARIO_B: dict[str, dict[str, Any]] = {
    "X": {"version": "1.0.0", "conflicts": ["Y"]},
    "Y": {"version": "1.0.0", "conflicts": ["X"]},
}

# Scenario C: A and B depend on each other.
SCENARIO_C: dict[str, dict[str, Any]] = {
    "A": {"version": "1.0.0", "dependencies": ["B"]},
    "B": {"version": "1.0.0", "dependencies": ["A"]},
}

# Scenario D: P only supports p1; Q is a drop-in that supports both.
SCENARIO_D: dict[str, dict[str, Any]] = {
    "App": {"version": "1.0.0", "dependencies": ["P"]},
    "P": {"version": "1.0.0", "platforms": ["p1"], "alternatives": ["Q"]},
    "Q": {"version": "1.0.0", "platforms": ["p1", "p2"], "dependencies": ["QCore"]},
    "QCore": {"version": "1.0.0"},
}
