"""Conflict detection: typed reports produced by four independent policies.

Public API::

    from pkgplan.core.conflicts import ConflictDetector, DetectionContext
    reports = ConflictDetector(DetectionContext()).detect(graph)
"""

from pkgplan.core.conflicts.base import ConflictPolicy, DetectionContext
from pkgplan.core.conflicts.detector import POLICIES, ConflictDetector
from pkgplan.core.conflicts.license import LicenseCategory, categorize
from pkgplan.core.conflicts.models import (
    ConflictReport,
    ConflictType,
    ResolutionStrategy,
    Severity,
    StrategyKind,
    conflict_id,
)

__all__ = [
    "POLICIES",
    "ConflictDetector",
    "ConflictPolicy",
    "ConflictReport",
    "ConflictType",
    "DetectionContext",
    "LicenseCategory",
    "ResolutionStrategy",
    "Severity",
    "StrategyKind",
    "categorize",
    "conflict_id",
]
