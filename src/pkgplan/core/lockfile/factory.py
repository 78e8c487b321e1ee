"""Lock record factory: building a ``Lockfile`` from a resolution result.

The normal workflow::

    result = PackageResolver(provider).resolve(["App", "Tool"])
    lockfile = Lockfile.from_result(result)
    lockfile.write(Path("pkgplan-lock.json"))
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pkgplan.core.dependency.models import PackageNode
from pkgplan.core.lockfile.models import LockedPackage, LockfileMetadata

if TYPE_CHECKING:
    from pkgplan.core.resolution.result import ResolutionResult


def canonical_metadata(node: PackageNode) -> dict[str, Any]:
    """Return the metadata fields covered by a package's integrity marker."""
    return {
        "name": node.name,
        "version": node.version,
        "dependencies": sorted(node.dependencies),
        "conflicts": sorted(node.conflicts),
        "license": {
            "type": node.license.type,
            "distribution_allowed": node.license.distribution_allowed,
        },
        "platforms": sorted(node.platforms),
        "source": node.source,
    }


def _from_result(cls: type, result: ResolutionResult) -> Any:
    """Create a lock record from a successful resolution result.

    Raises:
        ValueError: If the resolution did not succeed.
    """
    if not result.is_resolved or result.graph is None:
        raise ValueError(
            "Cannot create a lock record from a failed resolution: "
            + "; ".join(str(e) for e in result.errors)
        )

    graph = result.graph
    lf = cls()
    for name in result.final_package_list:
        node = graph.get_node(name)
        assert node is not None
        dependencies: dict[str, str] = {}
        for dep in node.dependencies:
            dep_node = graph.get_node(dep)
            if dep_node is not None:
                dependencies[dep] = dep_node.version
        lf.add_package(LockedPackage(
            name=name,
            version=node.version,
            integrity=cls.compute_integrity(canonical_metadata(node)),
            dependencies=dependencies,
            source=node.source,
            license=node.license.type,
        ))

    lf.metadata = LockfileMetadata(
        total_packages=lf.package_count,
        resolution_strategy="iterative",
        target_platforms=sorted(graph.target_platforms),
    )
    return lf
