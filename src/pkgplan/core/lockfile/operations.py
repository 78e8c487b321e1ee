"""Lock record operations: deserialization, validation, and diffing.

These functions are attached to the ``Lockfile`` class at import time (in
``__init__.py``) so callers see a single unified API.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterator

from pkgplan.core.dependency.constraints import is_valid_version
from pkgplan.core.lockfile.models import (
    LockedPackage,
    LockfileMetadata,
    _INTEGRITY_RE,
)
from pkgplan.exceptions import LockfileError


def _from_dict(cls: type, data: dict[str, Any]) -> Any:
    """Deserialize a lock record from a dict (parsed JSON).

    Fields not present in the dict use default values.

    Raises:
        LockfileError: If the structure is not a lock record or an entry
            carries an invalid version.
    """
    if not isinstance(data, dict):
        raise LockfileError("Lock record must be a JSON object")
    packages = data.get("packages", {})
    if not isinstance(packages, dict):
        raise LockfileError("Lock record 'packages' must be an object")

    lf = cls()
    for name, entry in packages.items():
        if not isinstance(entry, dict):
            raise LockfileError(f"Lock entry for {name!r} must be an object")
        deps = entry.get("dependencies", {})
        if not isinstance(deps, dict):
            raise LockfileError(f"Lock entry {name!r} has malformed dependencies")
        version = str(entry.get("version", ""))
        if not is_valid_version(version):
            raise LockfileError(f"Lock entry {name!r} has invalid version {version!r}")
        lf._packages[name] = LockedPackage(
            name=name,
            version=version,
            integrity=str(entry.get("integrity", "")),
            dependencies={str(k): str(v) for k, v in deps.items()},
            source=str(entry.get("source", "registry")),
            license=str(entry.get("license", "UNKNOWN")),
        )

    meta = data.get("metadata", {})
    if not isinstance(meta, dict):
        raise LockfileError("Lock record 'metadata' must be an object")
    lf._metadata = LockfileMetadata(
        total_packages=meta.get("total_packages", len(lf._packages)),
        resolution_strategy=meta.get("resolution_strategy", "iterative"),
        target_platforms=list(meta.get("target_platforms", [])),
    )
    return lf


def _from_json(cls: type, json_str: str) -> Any:
    """Deserialize from a JSON string.

    Raises:
        LockfileError: If the string is not valid JSON or not a lock record.
    """
    try:
        data = json.loads(json_str)
    except json.JSONDecodeError as exc:
        raise LockfileError(f"Lock record is not valid JSON: {exc}") from exc
    return cls.from_dict(data)


def _read(cls: type, path: Path) -> Any:
    """Read a lock record from disk.

    Raises:
        LockfileError: If the file cannot be read or parsed.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise LockfileError(f"Cannot read lock record {path}: {exc}") from exc
    return cls.from_json(text)


def _validate(self: Any) -> list[str]:
    """Validate the lock record for internal consistency.

    Checks:

    1. **Dependency completeness:** every dependency named by a package is
       itself locked.
    2. **No circular dependencies:** the locked dependency graph is a DAG.
    3. **Integrity format:** every marker matches ``sha256:<64-hex-chars>``.
    4. **Metadata consistency:** ``total_packages`` matches the entry count.
    5. **Version non-empty:** every package has a version.

    Returns:
        Validation error messages. Empty means the record is valid.
    """
    errors: list[str] = []

    # 1. Dependency completeness
    for name, package in sorted(self._packages.items()):
        for dep_name in sorted(package.dependencies):
            if dep_name not in self._packages:
                errors.append(
                    f"Package {name!r} depends on {dep_name!r} which is "
                    f"not in the lock record"
                )

    # 2. Circular dependency detection
    WHITE, GRAY, BLACK = 0, 1, 2
    color: dict[str, int] = {name: WHITE for name in self._packages}

    def _deps(u: str) -> Iterator[str]:
        # missing dependencies are reported above
        return iter([d for d in sorted(self._packages[u].dependencies) if d in color])

    for name in sorted(self._packages):
        if color[name] != WHITE:
            continue
        color[name] = GRAY
        path = [name]
        pending = [_deps(name)]
        while pending:
            for dep_name in pending[-1]:
                if color[dep_name] == GRAY:
                    errors.append(
                        f"Circular dependency detected involving "
                        f"{path[-1]!r} and {dep_name!r}"
                    )
                elif color[dep_name] == WHITE:
                    color[dep_name] = GRAY
                    path.append(dep_name)
                    pending.append(_deps(dep_name))
                    break
            else:
                pending.pop()
                color[path.pop()] = BLACK

    # 3. Integrity format
    for name, package in sorted(self._packages.items()):
        if package.integrity and not _INTEGRITY_RE.match(package.integrity):
            errors.append(
                f"Package {name!r} has invalid integrity marker: "
                f"{package.integrity!r}"
            )

    # 4. Metadata consistency
    if self._metadata.total_packages != len(self._packages):
        errors.append(
            f"Metadata total_packages ({self._metadata.total_packages}) "
            f"does not match actual count ({len(self._packages)})"
        )

    # 5. Version non-empty
    for name, package in sorted(self._packages.items()):
        if not package.version:
            errors.append(f"Package {name!r} has empty version string")

    return errors


def _diff(self: Any, other: Any) -> dict[str, Any]:
    """Compare two lock records.

    - **added**: packages present in ``other`` but not in ``self``.
    - **removed**: packages present in ``self`` but not in ``other``.
    - **changed**: packages in both whose version, integrity or resolved
      dependencies differ.

    Args:
        other: The lock record to compare against (typically the newer one).

    Returns:
        Dict with keys 'added', 'removed', 'changed'.
    """
    self_names = set(self._packages)
    other_names = set(other._packages)

    changes: list[dict[str, Any]] = []
    for name in sorted(self_names & other_names):
        old = self._packages[name]
        new = other._packages[name]
        for field_name in ("version", "integrity", "dependencies"):
            old_value = getattr(old, field_name)
            new_value = getattr(new, field_name)
            if old_value != new_value:
                changes.append({
                    "name": name,
                    "field": field_name,
                    "old": old_value,
                    "new": new_value,
                })

    return {
        "added": sorted(other_names - self_names),
        "removed": sorted(self_names - other_names),
        "changed": changes,
    }
