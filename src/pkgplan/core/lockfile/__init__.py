"""Lock record for reproducible resolutions (``pkgplan-lock.json``).

The record captures every resolved package at its exact version, with an
integrity marker over its canonical metadata and its resolved dependency
versions. A later run honours the locked versions unless a fresh resolution
is requested.

The package is split into focused submodules:

- ``models``: Data classes (``LockedPackage``, ``LockfileMetadata``).
- ``lockfile``: The ``Lockfile`` class with package management, integrity
  hashing, and serialization.
- ``operations``: Deserialization (``from_dict``, ``from_json``, ``read``),
  validation, and diffing.
- ``factory``: ``from_result`` for building a record from a resolution.
"""

from pkgplan.core.lockfile.models import (
    LockedPackage,
    LockfileMetadata,
    _INTEGRITY_RE,
)
from pkgplan.core.lockfile.lockfile import Lockfile

# Attach operations to Lockfile as methods/classmethods
from pkgplan.core.lockfile import operations as _ops
from pkgplan.core.lockfile import factory as _factory
from pkgplan.core.lockfile.factory import canonical_metadata

Lockfile.from_dict = classmethod(_ops._from_dict)
Lockfile.from_json = classmethod(_ops._from_json)
Lockfile.read = classmethod(_ops._read)
Lockfile.validate = _ops._validate
Lockfile.diff = _ops._diff
Lockfile.from_result = classmethod(_factory._from_result)

__all__ = [
    "Lockfile",
    "LockedPackage",
    "LockfileMetadata",
    "_INTEGRITY_RE",
    "canonical_metadata",
]
