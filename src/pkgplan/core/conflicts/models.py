"""Conflict data models: ConflictType, Severity, ResolutionStrategy, ConflictReport.

These are the values exchanged between the conflict detectors and the
resolution planner. They are decoupled from both so that CLI formatters and
result serialization can import them without pulling in detection logic.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any

from pkgplan.exceptions import (
    ConflictError,
    DirectConflictError,
    LicenseConflictError,
    PlatformConflictError,
    VersionConflictError,
)


class ConflictType(str, Enum):
    """The policy that produced a conflict report."""

    VERSION = "version"
    DIRECT = "direct"
    LICENSE = "license"
    PLATFORM = "platform"


class Severity(IntEnum):
    """Four-level conflict severity.

    The integer encoding enables direct comparison:
    ADVISORY < WARNING < BREAKING < BLOCKING. Only BREAKING and BLOCKING
    conflicts gate a successful resolution.
    """

    ADVISORY = 1
    WARNING = 2
    BREAKING = 3
    BLOCKING = 4

    @property
    def gating(self) -> bool:
        """True if an unresolved conflict of this severity fails the run."""
        return self >= Severity.BREAKING


class StrategyKind(str, Enum):
    """How a conflict may be resolved."""

    PIN_VERSION = "pin"
    PIN_HIGHEST = "pin-highest"
    DROP_PACKAGE = "drop"
    SUBSTITUTE_PACKAGE = "substitute"
    NARROW_PLATFORMS = "narrow-platforms"
    MANUAL_REVIEW = "manual-review"
    DEFER_TO_CALLER = "defer"


_MANUAL_KINDS = frozenset({StrategyKind.MANUAL_REVIEW, StrategyKind.DEFER_TO_CALLER})


@dataclass(frozen=True)
class ResolutionStrategy:
    """One candidate way of resolving a conflict.

    Attributes:
        kind: The mutation to apply.
        target: The package the mutation applies to ("" for graph-wide
            strategies such as narrowing the target platforms).
        value: Kind-specific argument: the version to pin, the substitute
            package name, or the comma-separated platforms to keep.
        description: Human-readable summary.
    """

    kind: StrategyKind
    target: str = ""
    value: str = ""
    description: str = ""

    @property
    def automatic(self) -> bool:
        """True if the planner may apply this strategy without the caller."""
        return self.kind not in _MANUAL_KINDS

    @classmethod
    def parse(cls, text: str) -> ResolutionStrategy:
        """Parse ``KIND[:TARGET[:VALUE]]``, e.g. ``drop:Y`` or ``pin:Lib:2.0``.

        Raises:
            ValueError: If the kind is unknown.
        """
        parts = text.strip().split(":", 2)
        kind = StrategyKind(parts[0].strip())
        target = parts[1].strip() if len(parts) > 1 else ""
        value = parts[2].strip() if len(parts) > 2 else ""
        return cls(kind, target, value, f"caller choice: {text.strip()}")

    def __str__(self) -> str:
        parts = [self.kind.value]
        if self.target or self.value:
            parts.append(self.target)
        if self.value:
            parts.append(self.value)
        return ":".join(parts)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "target": self.target,
            "value": self.value,
            "description": self.description,
        }


_ERROR_TYPES: dict[ConflictType, type[ConflictError]] = {
    ConflictType.VERSION: VersionConflictError,
    ConflictType.DIRECT: DirectConflictError,
    ConflictType.LICENSE: LicenseConflictError,
    ConflictType.PLATFORM: PlatformConflictError,
}


def conflict_id(conflict_type: ConflictType, packages: tuple[str, ...] | list[str]) -> str:
    """Return the deterministic id for a conflict among *packages*."""
    return f"{conflict_type.value}:{'+'.join(sorted(packages))}"


@dataclass(frozen=True)
class ConflictReport:
    """A single detected conflict.

    Created by a detector; consumed and retired by the resolution planner.

    Attributes:
        id: Deterministic identifier, ``<type>:<pkg>[+<pkg>...]``.
        type: The detecting policy.
        severity: How strongly the conflict gates resolution.
        packages: Involved package names, sorted.
        strategies: Candidate resolution strategies.
        recommended: The strategy the planner applies by default, or None
            when only the caller can decide.
        message: Human-readable description.
        details: Policy-specific structured data.
    """

    id: str
    type: ConflictType
    severity: Severity
    packages: tuple[str, ...]
    strategies: tuple[ResolutionStrategy, ...] = ()
    recommended: ResolutionStrategy | None = None
    message: str = ""
    details: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def sort_key(self) -> tuple[int, str]:
        """Priority order: severity descending, then id."""
        return (-int(self.severity), self.id)

    def to_error(self) -> ConflictError:
        """Return the typed error matching this report's conflict type."""
        return _ERROR_TYPES[self.type](self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "severity": self.severity.name,
            "packages": list(self.packages),
            "strategies": [s.to_dict() for s in self.strategies],
            "recommended": self.recommended.to_dict() if self.recommended else None,
            "message": self.message,
            "details": self.details,
        }
