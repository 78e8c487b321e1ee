"""pkgplan exception hierarchy.

All public exceptions inherit from PkgPlanError, giving callers a single
base class to catch when they want to handle any pkgplan-specific failure
without swallowing unrelated errors.

Conflict and resolution errors double as structured values: a failed
``ResolutionResult`` carries instances of them in ``errors`` rather than
raising them. Each exposes ``code`` and ``to_dict()`` for serialization.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Sequence

if TYPE_CHECKING:
    from pkgplan.core.conflicts.models import ConflictReport
    from pkgplan.core.resolution.planner import ResolutionStep


class PkgPlanError(Exception):
    """Base exception for all pkgplan errors."""

    code: str = "error"

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready description of the error."""
        return {"code": self.code, "message": str(self)}


class ConfigError(PkgPlanError):
    """Raised when resolver configuration is missing or malformed."""

    code = "config"


class LockfileError(PkgPlanError):
    """Raised for lock record parsing or validation failures.

    Covers corrupted lock files, invalid integrity markers, and lock
    records that fail the consistency checks in ``Lockfile.validate``.
    """

    code = "lockfile"


class MetadataProviderError(PkgPlanError):
    """Raised when a metadata provider cannot answer a lookup.

    Distinct from a not-found answer: this covers transport failures,
    malformed payloads, and server errors. It always propagates.
    """

    code = "provider"


class GraphInvariantError(PkgPlanError):
    """Raised when an operation would break a dependency graph invariant."""

    code = "graph_invariant"


class ResolutionCancelledError(PkgPlanError):
    """Raised when a resolution run is cancelled or exceeds its deadline."""

    code = "cancelled"


class PackageNotFoundError(PkgPlanError):
    """A requested or transitive package has no metadata.

    Fatal for the run: no meaningful resolution is possible without the
    package's metadata.

    Attributes:
        name: The package that could not be found.
        required_by: The package that declared the dependency, or None
            when the missing package was requested directly.
        suggestions: Similar known package names, best match first.
    """

    code = "package_not_found"

    def __init__(
        self,
        name: str,
        required_by: str | None = None,
        suggestions: Sequence[str] = (),
    ) -> None:
        self.name = name
        self.required_by = required_by
        self.suggestions = list(suggestions)
        msg = f"Package {name!r} not found"
        if required_by:
            msg += f" (required by {required_by!r})"
        if self.suggestions:
            msg += f"; did you mean: {', '.join(self.suggestions)}?"
        super().__init__(msg)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update(
            name=self.name,
            required_by=self.required_by,
            suggestions=list(self.suggestions),
        )
        return data


class ConflictError(PkgPlanError):
    """Base class for errors derived from a detected conflict report."""

    code = "conflict"

    def __init__(self, report: ConflictReport) -> None:
        self.report = report
        super().__init__(report.message)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["conflict"] = self.report.to_dict()
        return data


class VersionConflictError(ConflictError):
    """Several incompatible versions of one package are requested."""

    code = "version_conflict"


class DirectConflictError(ConflictError):
    """Two packages in the graph explicitly declare each other incompatible."""

    code = "direct_conflict"


class LicenseConflictError(ConflictError):
    """Package licenses cannot be combined. Always advisory."""

    code = "license_conflict"


class PlatformConflictError(ConflictError):
    """The graph does not support every target platform."""

    code = "platform_conflict"


class CircularDependencyError(PkgPlanError):
    """The resolved graph still contains dependency cycles.

    Attributes:
        cycles: Each cycle as a list of package names, starting and ending
            with the same package (e.g. ``["A", "B", "A"]``).
    """

    code = "circular_dependency"

    def __init__(self, cycles: Sequence[Sequence[str]]) -> None:
        self.cycles = [list(c) for c in cycles]
        rendered = "; ".join(" -> ".join(c) for c in self.cycles)
        super().__init__(f"Circular dependencies detected: {rendered}")

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["cycles"] = [list(c) for c in self.cycles]
        return data


class UnresolvableConflictError(PkgPlanError):
    """Blocking or breaking conflicts survived the resolution planner.

    Attributes:
        remaining: The conflicts still outstanding, highest priority first.
        steps: Resolution steps applied before the planner gave up.
        iterations: Number of planner iterations performed.
        seen: Every distinct conflict reported during planning, in
            first-seen order, including ones resolved along the way.
    """

    code = "unresolvable_conflict"

    def __init__(
        self,
        remaining: Sequence[ConflictReport],
        steps: Sequence[ResolutionStep] = (),
        iterations: int = 0,
        *,
        seen: Sequence[ConflictReport] = (),
    ) -> None:
        self.remaining = list(remaining)
        self.steps = list(steps)
        self.iterations = iterations
        self.seen = list(seen)
        ids = ", ".join(c.id for c in self.remaining)
        super().__init__(
            f"{len(self.remaining)} conflict(s) could not be resolved "
            f"after {iterations} iteration(s): {ids}"
        )

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["remaining"] = [c.to_dict() for c in self.remaining]
        data["iterations"] = self.iterations
        return data
