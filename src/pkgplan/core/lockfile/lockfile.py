"""Lock record core class: package management, integrity, serialization.

Determinism guarantee: ``to_json()`` and ``to_dict()`` produce deterministic
output. Package entries are sorted by name and all dictionary keys are
sorted, so two lock records with the same content are byte-identical. No
timestamp is written.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

from pkgplan.core.lockfile.models import LockedPackage, LockfileMetadata


class Lockfile:
    """Resolved package set captured in ``pkgplan-lock.json``.

    Example::

        lf = Lockfile()
        lf.add_package(LockedPackage(
            name="Lib",
            version="2.0.0",
            integrity="sha256:abcd...",
        ))
        lf.write(Path("pkgplan-lock.json"))
    """

    LOCKFILE_VERSION: str = "1.0"
    INTEGRITY_ALGORITHM: str = "sha256"
    DEFAULT_FILENAME: str = "pkgplan-lock.json"

    def __init__(self) -> None:
        self._packages: dict[str, LockedPackage] = {}
        self._metadata = LockfileMetadata()

    # -- Package management -------------------------------------------------

    def add_package(self, package: LockedPackage) -> None:
        """Add a locked package, replacing any entry with the same name."""
        self._packages[package.name] = package
        self._metadata.total_packages = len(self._packages)

    def get_package(self, name: str) -> LockedPackage | None:
        return self._packages.get(name)

    @property
    def package_count(self) -> int:
        """Return the number of locked packages."""
        return len(self._packages)

    @property
    def package_names(self) -> list[str]:
        """Return sorted list of all package names in the lock record."""
        return sorted(self._packages.keys())

    def pins(self) -> dict[str, str]:
        """Return package name -> locked version, sorted by name."""
        return {name: self._packages[name].version for name in self.package_names}

    # -- Integrity ----------------------------------------------------------

    @staticmethod
    def compute_integrity(metadata: dict[str, Any]) -> str:
        """Compute the SHA-256 integrity marker for canonical metadata.

        The mapping is serialized as compact JSON with sorted keys before
        hashing, so equal metadata always yields the same marker.

        Returns:
            Integrity string in "sha256:<64-hex-chars>" format.
        """
        canonical = json.dumps(metadata, sort_keys=True, separators=(",", ":"))
        digest = hashlib.sha256(canonical.encode("utf-8")).hexdigest()
        return f"sha256:{digest}"

    def verify_integrity(self, name: str, metadata: dict[str, Any]) -> bool:
        """Return True if *metadata* hashes to the locked marker for *name*.

        False if the package is not locked or the marker differs.
        """
        package = self._packages.get(name)
        if package is None:
            return False
        return self.compute_integrity(metadata) == package.integrity

    # -- Serialization ------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Serialize the lock record to a JSON-ready dict."""
        packages: dict[str, Any] = {}
        for name in self.package_names:
            package = self._packages[name]
            packages[name] = {
                "version": package.version,
                "integrity": package.integrity,
                "dependencies": dict(sorted(package.dependencies.items())),
                "source": package.source,
                "license": package.license,
            }

        return {
            "lockfile_version": self.LOCKFILE_VERSION,
            "generated_by": "pkgplan",
            "integrity_algorithm": self.INTEGRITY_ALGORITHM,
            "packages": packages,
            "metadata": {
                "total_packages": self._metadata.total_packages,
                "resolution_strategy": self._metadata.resolution_strategy,
                "target_platforms": sorted(self._metadata.target_platforms),
            },
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, sort_keys=True) + "\n"

    def write(self, path: Path) -> None:
        """Write the lock record to disk, creating parent directories."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_json(), encoding="utf-8")

    # -- Metadata access ----------------------------------------------------

    @property
    def metadata(self) -> LockfileMetadata:
        """Return the lock record metadata."""
        return self._metadata

    @metadata.setter
    def metadata(self, value: LockfileMetadata) -> None:
        self._metadata = value
