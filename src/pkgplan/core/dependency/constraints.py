"""Versions, version constraints, and package specifiers.

This module provides the foundational value types for declaring version
requirements between packages.

Versions are dotted numeric strings with one to three components (missing
components are treated as zero, so ``"2"`` == ``"2.0"`` == ``"2.0.0"``) and
optional SemVer-style ``-prerelease`` / ``+build`` suffixes.

Constraint semantics follow PEP 440 / SemVer conventions with support for
exact match (``==`` or a single ``=``), range (``>=``, ``<=``, ``>``, ``<``),
not-equal (``!=``), caret (``^``), tilde (``~``), wildcard (``*``), and
compound comma-separated constraints.

References
----------
.. [SemVer] Preston-Werner, T. (2013). "Semantic Versioning 2.0.0."
   https://semver.org/
"""

from __future__ import annotations

import re
from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Version comparison utilities
# ---------------------------------------------------------------------------

_VERSION_RE = re.compile(
    r"^v?(?P<major>\d+)(?:\.(?P<minor>\d+))?(?:\.(?P<patch>\d+))?"
    r"(?:-(?P<pre>[0-9A-Za-z\-.]+))?"
    r"(?:\+(?P<build>[0-9A-Za-z\-.]+))?$"
)

VersionKey = tuple[int, int, int, int, str]


def parse_version(version: str) -> VersionKey:
    """Parse a version string into a comparable key.

    Build metadata is ignored for ordering, and a pre-release sorts before
    the associated normal version (SemVer 2.0.0, section 11).

    Args:
        version: Version string (e.g., "1.2.3", "2.0", "0.1.0-alpha").

    Returns:
        A ``(major, minor, patch, is_release, prerelease)`` tuple.

    Raises:
        ValueError: If the string is not a recognised version.
    """
    m = _VERSION_RE.match(version.strip())
    if not m:
        raise ValueError(f"Invalid version: {version!r}")
    pre = m.group("pre") or ""
    return (
        int(m.group("major")),
        int(m.group("minor") or 0),
        int(m.group("patch") or 0),
        0 if pre else 1,
        pre,
    )


def is_valid_version(version: str) -> bool:
    """Return True if *version* parses as a version string."""
    return bool(_VERSION_RE.match(version.strip()))


def versions_equal(a: str, b: str) -> bool:
    """Compare two version strings for equality, ignoring padding and build."""
    return parse_version(a) == parse_version(b)


def sort_versions(versions: set[str] | list[str], *, descending: bool = True) -> list[str]:
    """Return versions ordered by precedence, deduplicated by equality.

    The first spelling seen for an equal version wins, and ties are ordered
    by the raw string so the output is deterministic.
    """
    unique: dict[VersionKey, str] = {}
    for v in sorted(versions):
        unique.setdefault(parse_version(v), v)
    keys = sorted(unique, reverse=descending)
    return [unique[k] for k in keys]


# ---------------------------------------------------------------------------
# VersionConstraint: Declarative version requirement
# ---------------------------------------------------------------------------

_CONSTRAINT_ATOM_RE = re.compile(
    r"^\s*(?P<op>==|!=|>=|<=|>|<|\^|~|=|@)?\s*"
    r"(?P<ver>v?\d+(?:\.\d+){0,2}(?:-[0-9A-Za-z\-.]+)?(?:\+[0-9A-Za-z\-.]+)?)\s*$"
)


@dataclass(frozen=True)
class VersionConstraint:
    """A version constraint specification, analogous to npm/pip syntax.

    Supports:
    - Exact match: ``==1.0.0``, ``=1.0``, ``@1.0`` or a bare ``1.0``
    - Not-equal: ``!=1.0.0``
    - Minimum / maximum: ``>=1.0``, ``>1.0``, ``<=2.0``, ``<2.0``
    - Caret / tilde: ``^1.2.0``, ``~1.2.0``
    - Wildcard (any version): ``*`` or the empty string
    - Compound (comma-separated, all must hold): ``>=1.0,<2.0``

    Attributes:
        raw: The raw constraint string as authored.
    """

    raw: str = "*"

    def __post_init__(self) -> None:
        for atom in self._atoms():
            if not _CONSTRAINT_ATOM_RE.match(atom):
                raise ValueError(f"Invalid constraint atom: {atom!r}")

    @classmethod
    def any(cls) -> VersionConstraint:
        """Return the wildcard constraint."""
        return cls("*")

    @classmethod
    def exact(cls, version: str) -> VersionConstraint:
        """Return a constraint matching exactly *version*."""
        return cls(f"=={version}")

    def _atoms(self) -> list[str]:
        stripped = self.raw.strip()
        if stripped in ("", "*"):
            return []
        return [a.strip() for a in stripped.split(",") if a.strip()]

    @property
    def is_any(self) -> bool:
        """True if the constraint accepts every version."""
        return not self._atoms()

    def pinned_versions(self) -> list[str]:
        """Return the versions named by exact-match atoms, in order."""
        pinned: list[str] = []
        for atom in self._atoms():
            m = _CONSTRAINT_ATOM_RE.match(atom)
            assert m is not None
            if m.group("op") in (None, "==", "=", "@"):
                pinned.append(m.group("ver"))
        return pinned

    def merge(self, other: VersionConstraint) -> VersionConstraint:
        """Return the conjunction of this constraint and *other*."""
        if self.is_any or self == other:
            return other
        if other.is_any:
            return self
        return VersionConstraint(f"{self},{other}")

    def satisfies(self, version: str) -> bool:
        """Check whether a version string satisfies this constraint.

        For compound constraints ALL atoms must be satisfied.

        Raises:
            ValueError: If *version* is not a valid version.
        """
        ver = parse_version(version)
        return all(self._atom_satisfies(atom, ver) for atom in self._atoms())

    @staticmethod
    def _atom_satisfies(atom: str, ver: VersionKey) -> bool:
        """Evaluate a single constraint atom against a parsed version."""
        m = _CONSTRAINT_ATOM_RE.match(atom)
        if not m:
            raise ValueError(f"Invalid constraint atom: {atom!r}")

        op = m.group("op") or "=="
        target = parse_version(m.group("ver"))

        if op in ("==", "=", "@"):
            return ver == target
        elif op == "!=":
            return ver != target
        elif op == ">=":
            return ver >= target
        elif op == "<=":
            return ver <= target
        elif op == ">":
            return ver > target
        elif op == "<":
            return ver < target
        elif op == "^":
            # Same major (same major.minor when major is 0), >= target.
            if target[0] == 0:
                return ver[:2] == target[:2] and ver >= target
            return ver[0] == target[0] and ver >= target
        elif op == "~":
            return ver[:2] == target[:2] and ver >= target
        else:  # pragma: no cover
            raise ValueError(f"Unknown operator: {op!r}")

    def __str__(self) -> str:
        return self.raw.strip() or "*"

    def __repr__(self) -> str:
        return f"VersionConstraint({self.raw!r})"


# ---------------------------------------------------------------------------
# PackageSpecifier: name plus optional constraint
# ---------------------------------------------------------------------------

_SPECIFIER_RE = re.compile(
    r"^\s*(?P<name>[A-Za-z0-9_][A-Za-z0-9_.\-/]*?)\s*"
    r"(?P<constraint>(?:==|!=|>=|<=|>|<|\^|~|=|@).*)?$"
)


@dataclass(frozen=True)
class PackageSpecifier:
    """A requested package: canonical name plus version constraint.

    Attributes:
        name: Base package name, without any version suffix.
        constraint: Version requirement; wildcard when omitted.
        optional: True for optional dependencies. Optional packages are
            still resolved but never make a direct conflict blocking.
    """

    name: str
    constraint: VersionConstraint = VersionConstraint("*")
    optional: bool = False

    @classmethod
    def parse(cls, text: str, *, optional: bool = False) -> PackageSpecifier:
        """Parse ``"Lib"``, ``"Lib>=1.0,<2"``, ``"Lib=2.0"`` or ``"Lib@2.0"``.

        Raises:
            ValueError: If the text is not a valid specifier.
        """
        m = _SPECIFIER_RE.match(text)
        if not m:
            raise ValueError(f"Invalid package specifier: {text!r}")
        raw = (m.group("constraint") or "*").strip()
        if raw.startswith("@"):
            raw = "==" + raw[1:].strip()
        return cls(m.group("name"), VersionConstraint(raw), optional)

    def __str__(self) -> str:
        if self.constraint.is_any:
            return self.name
        return f"{self.name}{self.constraint}"
