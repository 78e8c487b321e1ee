"""Conflict policy interface and the shared detection context."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from pkgplan.core.conflicts.models import ConflictReport, ConflictType
from pkgplan.core.dependency.graph import DependencyGraph
from pkgplan.core.dependency.models import PackageInfo


@dataclass
class DetectionContext:
    """Caller policy and side information available to every detector.

    Attributes:
        allow_incompatible_pins: Recommend pinning the highest version when
            no single version satisfies every consumer. When False, such
            conflicts are deferred to the caller.
        allow_platform_narrowing: Recommend narrowing the target platform
            set when no substitute package exists.
        alternatives: Extra substitutes registered by configuration,
            package name -> candidate names in preference order.
        alternative_info: Prefetched metadata for substitutes whose whole
            dependency closure is available.
    """

    allow_incompatible_pins: bool = True
    allow_platform_narrowing: bool = False
    alternatives: dict[str, list[str]] = field(default_factory=dict)
    alternative_info: dict[str, PackageInfo] = field(default_factory=dict)


class ConflictPolicy(ABC):
    """A single conflict detection policy.

    Policies read the graph and never mutate it. Each returns its reports
    sorted by conflict id.
    """

    conflict_type: ConflictType

    @abstractmethod
    def detect(
        self, graph: DependencyGraph, context: DetectionContext
    ) -> list[ConflictReport]:
        """Scan *graph* and return this policy's conflict reports."""
