"""Package metadata providers consumed by the graph builder.

Public API::

    from pkgplan.provider import MetadataProvider, StaticMetadataProvider
    from pkgplan.provider.http import HttpMetadataProvider
"""

from __future__ import annotations

from pkgplan.provider.base import MetadataProvider
from pkgplan.provider.static import StaticMetadataProvider, load_registry
from pkgplan.provider.suggestions import similar_names

__all__ = [
    "MetadataProvider",
    "StaticMetadataProvider",
    "load_registry",
    "similar_names",
]
