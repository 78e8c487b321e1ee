"""Lock record data models: LockedPackage and LockfileMetadata.

Pure data holders for the ``pkgplan-lock.json`` format, with no business
logic, so they can be imported from any layer.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

# ---------------------------------------------------------------------------
# Integrity marker format: "sha256:<64-hex-characters>"
# ---------------------------------------------------------------------------

_INTEGRITY_RE = re.compile(r"^sha256:[0-9a-f]{64}$")


# ---------------------------------------------------------------------------
# LockedPackage: A single entry in the lock record
# ---------------------------------------------------------------------------


@dataclass
class LockedPackage:
    """A single package entry in the lock record.

    Attributes:
        name: Package name (e.g., "Lib").
        version: Resolved version (e.g., "2.0.0").
        integrity: Hash of the canonical package metadata in
            "sha256:<hex>" format. Detects metadata that changed under an
            unchanged version.
        dependencies: Mapping of dependency name to resolved version.
        source: Origin tag reported by the metadata provider.
        license: License identifier.
    """

    name: str
    version: str
    integrity: str  # "sha256:<hex>"
    dependencies: dict[str, str] = field(default_factory=dict)
    source: str = "registry"
    license: str = "UNKNOWN"


# ---------------------------------------------------------------------------
# LockfileMetadata: Top-level metadata section
# ---------------------------------------------------------------------------


@dataclass
class LockfileMetadata:
    """Metadata section of the lock record.

    Attributes:
        total_packages: Expected number of package entries. Used during
            validation to detect incomplete writes.
        resolution_strategy: The algorithm that produced the record
            ("iterative" for the conflict planner, "manual" for
            hand-authored records).
        target_platforms: Platforms the locked set was resolved for.
    """

    total_packages: int = 0
    resolution_strategy: str = "iterative"
    target_platforms: list[str] = field(default_factory=list)
