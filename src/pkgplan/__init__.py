"""pkgplan: Dependency resolution and conflict planning for package sets."""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"
