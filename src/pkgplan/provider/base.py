"""Abstract metadata provider.

A provider answers one question: given a package name, what are its
version, dependencies, conflicts, license and supported platforms? A
not-found answer is ``None``, an expected outcome. Transport or payload
failures raise ``MetadataProviderError``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from pkgplan.core.dependency.models import PackageInfo


class MetadataProvider(ABC):
    """Abstract base class for package metadata sources.

    Subclasses must implement ``get_package_info``. Lookups are coroutines
    so that remote providers can be queried concurrently by the graph
    builder; in-memory providers simply return immediately.
    """

    @property
    def name(self) -> str:
        """Human-readable name of this provider."""
        return type(self).__name__

    @abstractmethod
    async def get_package_info(self, name: str) -> PackageInfo | None:
        """Look up metadata for a package.

        Args:
            name: Canonical package name.

        Returns:
            The package metadata, or None if the package does not exist.

        Raises:
            MetadataProviderError: If the source cannot be queried.
        """

    def known_packages(self) -> list[str]:
        """Return package names this provider can list, for suggestions.

        Providers that cannot enumerate their packages return an empty list.
        """
        return []
