"""Conflict detector: runs every conflict policy in a fixed order.

Policies are registered in a static table keyed by conflict type. The
order (version, direct, license, platform) is part of the contract: report
lists are the concatenation of each policy's id-sorted reports, so two runs
over the same graph always produce identical lists.
"""

from __future__ import annotations

import logging
from typing import Mapping

from pkgplan.core.conflicts.base import ConflictPolicy, DetectionContext
from pkgplan.core.conflicts.direct import DirectConflictPolicy
from pkgplan.core.conflicts.license import LicenseConflictPolicy
from pkgplan.core.conflicts.models import ConflictReport, ConflictType
from pkgplan.core.conflicts.platform import PlatformConflictPolicy
from pkgplan.core.conflicts.version import VersionConflictPolicy
from pkgplan.core.dependency.graph import DependencyGraph

logger = logging.getLogger(__name__)

POLICIES: Mapping[ConflictType, type[ConflictPolicy]] = {
    ConflictType.VERSION: VersionConflictPolicy,
    ConflictType.DIRECT: DirectConflictPolicy,
    ConflictType.LICENSE: LicenseConflictPolicy,
    ConflictType.PLATFORM: PlatformConflictPolicy,
}


class ConflictDetector:
    """Runs the registered conflict policies over a dependency graph.

    Args:
        context: Caller policy and side information shared by policies.
        enabled: Conflict types to check. Defaults to all of them; the
            order of the registration table is kept regardless.
    """

    def __init__(
        self,
        context: DetectionContext | None = None,
        enabled: set[ConflictType] | None = None,
    ) -> None:
        self.context = context or DetectionContext()
        self._policies = [
            policy_cls()
            for conflict_type, policy_cls in POLICIES.items()
            if enabled is None or conflict_type in enabled
        ]

    def detect(self, graph: DependencyGraph) -> list[ConflictReport]:
        """Return all conflict reports for *graph* in deterministic order.

        Also stores the reports on ``graph.conflicts``.
        """
        reports: list[ConflictReport] = []
        for policy in self._policies:
            found = policy.detect(graph, self.context)
            if found:
                logger.debug(
                    "%s policy reported %d conflict(s)",
                    policy.conflict_type.value, len(found),
                )
            reports.extend(found)
        graph.conflicts = list(reports)
        return reports
