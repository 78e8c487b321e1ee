"""Circular dependency validation for a resolved graph.

An installation plan must be acyclic, so any cycle left after conflict
planning fails the whole run with ``CircularDependencyError``.
"""

from __future__ import annotations

from typing import Iterator

from pkgplan.core.dependency.graph import DependencyGraph

Cycle = list[str]


class CircularDependencyValidator:
    """Detects dependency cycles with a depth-first search.

    The search keeps an explicit stack of pending dependency iterators
    instead of recursing, so chain depth is not limited by the interpreter.
    Nodes and their dependencies are visited in sorted-name order, so the
    reported cycles are deterministic.
    """

    def validate(self, graph: DependencyGraph) -> list[Cycle]:
        """Return every cycle found, each closed on its first package.

        Revisiting a package that is still on the current path yields the
        path slice from that package, plus the package again: for
        ``A -> B -> A`` the cycle is ``["A", "B", "A"]``.

        Returns:
            A list of cycles. Empty if the graph is acyclic.
        """
        adj = graph.adjacency()
        visited: set[str] = set()
        cycles: list[Cycle] = []

        for root in adj:
            if root in visited:
                continue
            visited.add(root)
            path: list[str] = [root]
            on_path: set[str] = {root}
            pending: list[Iterator[str]] = [iter(adj.get(root, []))]
            while pending:
                for v in pending[-1]:
                    if v in on_path:
                        cycles.append(path[path.index(v):] + [v])
                    elif v not in visited:
                        visited.add(v)
                        path.append(v)
                        on_path.add(v)
                        pending.append(iter(adj.get(v, [])))
                        break
                else:
                    pending.pop()
                    on_path.discard(path.pop())
        return cycles
