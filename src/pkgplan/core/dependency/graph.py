"""Dependency graph data structure and traversal helpers.

The graph holds exactly one ``PackageNode`` per canonical package name, the
``DependencyEdge`` list between them, the caller's root requests, lock pins,
and the running list of conflicts last reported against it.

All iteration helpers return names, nodes and edges in sorted order so that
every downstream step (version grouping, cycle detection, install ordering)
is independent of the order in which metadata arrived.
"""

from __future__ import annotations

import heapq
from collections import defaultdict, deque
from typing import TYPE_CHECKING, Iterable

from pkgplan.core.dependency.constraints import VersionConstraint
from pkgplan.core.dependency.models import DependencyEdge, EdgeKind, PackageNode
from pkgplan.exceptions import GraphInvariantError

if TYPE_CHECKING:
    from pkgplan.core.conflicts.models import ConflictReport


class DependencyGraph:
    """The dependency graph for one resolution run.

    Attributes:
        roots: Requested package name -> the caller's constraint, in
            request order.
        lock_pins: Package name -> version pinned by a lock record.
        target_platforms: Platforms the final package set must support.
            Empty means no platform requirement.
        substitutions: Replaced package name -> substitute name.
        conflicts: Conflicts reported by the most recent detection pass.

    Thread safety: This class is NOT thread-safe. The graph builder merges
    fetched metadata from a single owning coroutine.
    """

    def __init__(self, target_platforms: Iterable[str] = ()) -> None:
        self._nodes: dict[str, PackageNode] = {}
        self._edges: dict[tuple[str, str], DependencyEdge] = {}
        self.roots: dict[str, VersionConstraint] = {}
        self.lock_pins: dict[str, str] = {}
        self.target_platforms: frozenset[str] = frozenset(target_platforms)
        self.substitutions: dict[str, str] = {}
        self.conflicts: list[ConflictReport] = []

    # -- Nodes --------------------------------------------------------------

    @property
    def node_count(self) -> int:
        """Return the number of package nodes."""
        return len(self._nodes)

    @property
    def edge_count(self) -> int:
        """Return the number of dependency edges."""
        return len(self._edges)

    @property
    def names(self) -> list[str]:
        """Return all package names, sorted."""
        return sorted(self._nodes)

    def nodes(self) -> list[PackageNode]:
        """Return all nodes sorted by name."""
        return [self._nodes[n] for n in sorted(self._nodes)]

    def has_node(self, name: str) -> bool:
        return name in self._nodes

    def get_node(self, name: str) -> PackageNode | None:
        return self._nodes.get(name)

    def add_node(self, node: PackageNode) -> None:
        """Insert a node.

        Raises:
            GraphInvariantError: If a node with the same name already
                exists. Multiple versions of one package are never stored
                side by side; they surface as version conflicts instead.
        """
        if node.name in self._nodes:
            raise GraphInvariantError(
                f"Package {node.name!r} is already present in the graph"
            )
        self._nodes[node.name] = node

    def remove_node(self, name: str) -> None:
        """Remove a node together with every edge touching it."""
        self._nodes.pop(name, None)
        for key in [k for k in self._edges if name in k]:
            del self._edges[key]
        self.roots.pop(name, None)

    # -- Edges --------------------------------------------------------------

    def add_edge(self, edge: DependencyEdge) -> None:
        """Record a dependency edge.

        A second edge between the same pair keeps the first one, since a
        node's dependency list names each dependency once.
        """
        self._edges.setdefault((edge.source, edge.target), edge)

    def edges(self) -> list[DependencyEdge]:
        """Return all edges sorted by (source, target)."""
        return [self._edges[k] for k in sorted(self._edges)]

    def edges_to(self, name: str) -> list[DependencyEdge]:
        """Return edges whose target is *name*, sorted by source."""
        return [e for e in self.edges() if e.target == name]

    def edges_from(self, name: str) -> list[DependencyEdge]:
        """Return edges whose source is *name*, sorted by target."""
        return [e for e in self.edges() if e.source == name]

    def redirect_edges(self, old: str, new: str) -> None:
        """Point every edge targeting *old* at *new* instead.

        The consumer's constraint on *old* does not carry over: the
        substitute has an unrelated version line.
        """
        for edge in self.edges_to(old):
            del self._edges[(edge.source, edge.target)]
            node = self._nodes.get(edge.source)
            if edge.source == new:
                if node is not None:
                    node.dependencies = [d for d in node.dependencies if d != old]
                continue
            self.add_edge(DependencyEdge(edge.source, new, edge.kind))
            if node is not None:
                node.dependencies = list(dict.fromkeys(
                    new if d == old else d for d in node.dependencies
                ))

    def adjacency(self) -> dict[str, list[str]]:
        """Return name -> sorted dependency names, for every node."""
        adj: dict[str, list[str]] = {name: [] for name in sorted(self._nodes)}
        for source, target in sorted(self._edges):
            if source in adj and target in self._nodes:
                adj[source].append(target)
        return adj

    # -- Reachability -------------------------------------------------------

    def _reachable(self, kinds: set[EdgeKind]) -> set[str]:
        out: dict[str, list[str]] = defaultdict(list)
        for (source, target), edge in sorted(self._edges.items()):
            if edge.kind in kinds:
                out[source].append(target)
        seen: set[str] = set()
        queue: deque[str] = deque(n for n in self.roots if n in self._nodes)
        while queue:
            cur = queue.popleft()
            if cur in seen:
                continue
            seen.add(cur)
            queue.extend(t for t in out[cur] if t in self._nodes)
        return seen

    def required_names(self) -> set[str]:
        """Names reachable from a root through required edges only."""
        return self._reachable({EdgeKind.REQUIRED})

    def prune_unreachable(self) -> list[str]:
        """Drop nodes no longer reachable from any root.

        Returns:
            Sorted names of the removed nodes.
        """
        keep = self._reachable({EdgeKind.REQUIRED, EdgeKind.OPTIONAL})
        removed = sorted(set(self._nodes) - keep)
        for name in removed:
            self.remove_node(name)
        return removed

    def install_order(self) -> list[str]:
        """Return package names with dependencies before their dependents.

        Kahn's algorithm with a name-ordered heap for tie-breaking, so the
        order is fully deterministic.

        Raises:
            GraphInvariantError: If the graph contains a cycle.
        """
        adj = self.adjacency()
        pending = {name: len(deps) for name, deps in adj.items()}
        dependents: dict[str, list[str]] = defaultdict(list)
        for name, deps in adj.items():
            for dep in deps:
                dependents[dep].append(name)

        ready = [name for name, count in pending.items() if count == 0]
        heapq.heapify(ready)
        order: list[str] = []
        while ready:
            name = heapq.heappop(ready)
            order.append(name)
            for parent in dependents[name]:
                pending[parent] -= 1
                if pending[parent] == 0:
                    heapq.heappush(ready, parent)

        if len(order) != len(adj):
            raise GraphInvariantError("Cannot order a graph that contains cycles")
        return order
