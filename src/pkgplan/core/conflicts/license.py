"""License conflict policy.

Licenses are mapped onto coarse categories, and a static compatibility
matrix lists the category pairs that cannot ship together. Conflicts are
WARNING severity with a recommendation of manual legal review: this policy
never resolves anything on its own.
"""

from __future__ import annotations

from enum import Enum

from pkgplan.core.conflicts.base import ConflictPolicy, DetectionContext
from pkgplan.core.conflicts.models import (
    ConflictReport,
    ConflictType,
    ResolutionStrategy,
    Severity,
    StrategyKind,
    conflict_id,
)
from pkgplan.core.dependency.graph import DependencyGraph
from pkgplan.core.dependency.models import PackageNode


class LicenseCategory(str, Enum):
    """Coarse license families relevant to combination."""

    PERMISSIVE = "permissive"
    WEAK_COPYLEFT = "weak-copyleft"
    STRONG_COPYLEFT = "strong-copyleft"
    NETWORK_COPYLEFT = "network-copyleft"
    PROPRIETARY = "proprietary"
    UNKNOWN = "unknown"


# Ordered prefix table; the first matching prefix wins, so LGPL/AGPL
# must be listed before GPL.
_PREFIXES: tuple[tuple[str, LicenseCategory], ...] = (
    ("AGPL", LicenseCategory.NETWORK_COPYLEFT),
    ("SSPL", LicenseCategory.NETWORK_COPYLEFT),
    ("LGPL", LicenseCategory.WEAK_COPYLEFT),
    ("MPL", LicenseCategory.WEAK_COPYLEFT),
    ("EPL", LicenseCategory.WEAK_COPYLEFT),
    ("CDDL", LicenseCategory.WEAK_COPYLEFT),
    ("GPL", LicenseCategory.STRONG_COPYLEFT),
    ("MIT", LicenseCategory.PERMISSIVE),
    ("APACHE", LicenseCategory.PERMISSIVE),
    ("BSD", LicenseCategory.PERMISSIVE),
    ("ISC", LicenseCategory.PERMISSIVE),
    ("ZLIB", LicenseCategory.PERMISSIVE),
    ("UNLICENSE", LicenseCategory.PERMISSIVE),
    ("CC0", LicenseCategory.PERMISSIVE),
    ("PSF", LicenseCategory.PERMISSIVE),
    ("PROPRIETARY", LicenseCategory.PROPRIETARY),
    ("COMMERCIAL", LicenseCategory.PROPRIETARY),
    ("EULA", LicenseCategory.PROPRIETARY),
)

# Unordered category pairs that may not be combined in one installation.
INCOMPATIBLE: frozenset[frozenset[LicenseCategory]] = frozenset({
    frozenset({LicenseCategory.STRONG_COPYLEFT, LicenseCategory.PROPRIETARY}),
    frozenset({LicenseCategory.NETWORK_COPYLEFT, LicenseCategory.PROPRIETARY}),
})

_COPYLEFT = frozenset({
    LicenseCategory.STRONG_COPYLEFT,
    LicenseCategory.NETWORK_COPYLEFT,
})


def categorize(license_type: str) -> LicenseCategory:
    """Map a license identifier (e.g. "GPL-3.0-only") to its category."""
    normalized = license_type.strip().upper()
    for prefix, category in _PREFIXES:
        if normalized.startswith(prefix):
            return category
    return LicenseCategory.UNKNOWN


def _incompatibility(a: PackageNode, b: PackageNode) -> str | None:
    """Return why two packages cannot ship together, or None."""
    cat_a, cat_b = categorize(a.license.type), categorize(b.license.type)
    if frozenset({cat_a, cat_b}) in INCOMPATIBLE:
        return (
            f"{cat_a.value} license {a.license.type} of {a.name} is incompatible "
            f"with {cat_b.value} license {b.license.type} of {b.name}"
        )
    for copyleft, restricted in ((a, b), (b, a)):
        if (
            categorize(copyleft.license.type) in _COPYLEFT
            and not restricted.license.distribution_allowed
        ):
            return (
                f"{copyleft.name} ({copyleft.license.type}) requires redistribution "
                f"but {restricted.name} may not be distributed"
            )
    return None


class LicenseConflictPolicy(ConflictPolicy):
    """Flags license combinations that need legal review."""

    conflict_type = ConflictType.LICENSE

    def detect(
        self, graph: DependencyGraph, context: DetectionContext
    ) -> list[ConflictReport]:
        nodes = graph.nodes()
        reports: list[ConflictReport] = []
        for i, a in enumerate(nodes):
            for b in nodes[i + 1:]:
                reason = _incompatibility(a, b)
                if reason is None:
                    continue
                review = ResolutionStrategy(
                    StrategyKind.MANUAL_REVIEW, "", "",
                    f"flag {a.name} and {b.name} for manual legal review",
                )
                reports.append(ConflictReport(
                    id=conflict_id(self.conflict_type, [a.name, b.name]),
                    type=self.conflict_type,
                    severity=Severity.WARNING,
                    packages=(a.name, b.name),
                    strategies=(review,),
                    recommended=review,
                    message=reason,
                    details={
                        "licenses": {a.name: a.license.type, b.name: b.license.type},
                    },
                ))
        return sorted(reports, key=lambda r: r.id)
