"""Breadth-first dependency graph construction over a metadata provider.

The builder walks requested packages and their transitive dependencies one
BFS level at a time. Every unvisited name on a level is looked up
concurrently (bounded by a semaphore), and the answers are merged into the
graph in sorted-name order by the awaiting coroutine, so the resulting
graph never depends on which lookup finished first.

Lookups are memoized for the lifetime of the builder: a package reached
through several paths (diamond dependencies) or fetched again for
substitution is served from the cache, never from the provider twice.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Iterable, Sequence

from pkgplan.core.dependency.constraints import PackageSpecifier
from pkgplan.core.dependency.graph import DependencyGraph
from pkgplan.core.dependency.models import (
    DependencyEdge,
    EdgeKind,
    PackageInfo,
    PackageNode,
)
from pkgplan.exceptions import (
    GraphInvariantError,
    PackageNotFoundError,
    ResolutionCancelledError,
)
from pkgplan.provider.suggestions import similar_names

if TYPE_CHECKING:
    from pkgplan.provider.base import MetadataProvider

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENCY: int = 8

# How often an in-flight level checks its cancellation token (seconds).
_CANCEL_POLL_INTERVAL: float = 0.02


class CancellationToken:
    """Thread-safe cancellation flag shared between a caller and a run."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        """Request cancellation of every run observing this token."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass
class BuilderStats:
    """Lookup counters for one builder.

    Attributes:
        provider_calls: Lookups forwarded to the provider.
        cache_hits: Lookups answered from the memo cache.
    """

    provider_calls: int = 0
    cache_hits: int = 0


class GraphBuilder:
    """Builds a ``DependencyGraph`` from requested package specifiers.

    Args:
        provider: The metadata source.
        max_concurrency: Maximum number of lookups in flight at once.
        cancel_token: Optional token; once cancelled, pending lookups are
            abandoned and ``ResolutionCancelledError`` is raised.
    """

    def __init__(
        self,
        provider: MetadataProvider,
        *,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        cancel_token: CancellationToken | None = None,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self._provider = provider
        self._max_concurrency = max_concurrency
        self._cancel_token = cancel_token
        self._cache: dict[str, PackageInfo | None] = {}
        self._inflight: dict[str, asyncio.Task[PackageInfo | None]] = {}
        self._semaphore: asyncio.Semaphore | None = None
        self.stats = BuilderStats()

    # -- Lookups ------------------------------------------------------------

    def cached(self, name: str) -> PackageInfo | None:
        """Return cached metadata for *name*, or None if absent/unknown."""
        return self._cache.get(name)

    def _check_cancelled(self) -> None:
        if self._cancel_token is not None and self._cancel_token.cancelled:
            raise ResolutionCancelledError("Resolution cancelled")

    async def _lookup(self, name: str) -> PackageInfo | None:
        assert self._semaphore is not None
        async with self._semaphore:
            self._check_cancelled()
            self.stats.provider_calls += 1
            logger.debug("Fetching metadata for %s", name)
            info = await self._provider.get_package_info(name)
        if info is not None and info.name != name:
            info = replace(info, name=name)
        self._cache[name] = info
        return info

    async def fetch(self, name: str) -> PackageInfo | None:
        """Return metadata for *name*, consulting the memo cache first."""
        if name in self._cache:
            self.stats.cache_hits += 1
            return self._cache[name]
        task = self._inflight.get(name)
        if task is not None:
            self.stats.cache_hits += 1
            return await task
        if self._semaphore is None:
            self._semaphore = asyncio.Semaphore(self._max_concurrency)
        task = asyncio.ensure_future(self._lookup(name))
        self._inflight[name] = task
        try:
            return await task
        finally:
            self._inflight.pop(name, None)

    async def _watch_cancel(self) -> None:
        assert self._cancel_token is not None
        while not self._cancel_token.cancelled:
            await asyncio.sleep(_CANCEL_POLL_INTERVAL)

    async def _fetch_level(self, names: Sequence[str]) -> list[PackageInfo | None]:
        """Fetch a whole BFS level concurrently, results in *names* order."""
        self._check_cancelled()
        gathered = asyncio.gather(*(self.fetch(n) for n in names))
        if self._cancel_token is None:
            return list(await gathered)

        watcher = asyncio.ensure_future(self._watch_cancel())
        try:
            done, _ = await asyncio.wait(
                {gathered, watcher}, return_when=asyncio.FIRST_COMPLETED
            )
            if gathered not in done:
                gathered.cancel()
                raise ResolutionCancelledError("Resolution cancelled")
            return list(gathered.result())
        finally:
            watcher.cancel()

    # -- Graph construction -------------------------------------------------

    async def build(
        self,
        requested: Iterable[PackageSpecifier | str],
        *,
        target_platforms: Iterable[str] = (),
    ) -> DependencyGraph:
        """Build the dependency graph for the requested packages.

        Args:
            requested: Package specifiers (or specifier strings) to resolve.
            target_platforms: Platforms the result must support.

        Returns:
            A graph containing every requested package and its transitive
            dependencies, one node per package name.

        Raises:
            PackageNotFoundError: If any package has no metadata.
            ResolutionCancelledError: If the run is cancelled.
        """
        graph = DependencyGraph(target_platforms)
        for spec in requested:
            if isinstance(spec, str):
                spec = PackageSpecifier.parse(spec)
            current = graph.roots.get(spec.name)
            graph.roots[spec.name] = (
                spec.constraint if current is None else current.merge(spec.constraint)
            )

        required_by: dict[str, str | None] = {name: None for name in graph.roots}
        level = list(graph.roots)
        while level:
            names = sorted({n for n in level if not graph.has_node(n)})
            infos = await self._fetch_level(names)
            level = []
            for name, info in zip(names, infos):
                if info is None:
                    raise self._not_found(name, required_by.get(name))
                level.extend(self._insert(graph, info, required_by))

        logger.info(
            "Built dependency graph: %d package(s), %d edge(s)",
            graph.node_count, graph.edge_count,
        )
        return graph

    def _insert(
        self,
        graph: DependencyGraph,
        info: PackageInfo,
        required_by: dict[str, str | None],
    ) -> list[str]:
        """Insert one package and its edges; return newly discovered names."""
        graph.add_node(PackageNode.from_info(info))
        discovered: list[str] = []
        for spec in info.dependencies:
            kind = EdgeKind.OPTIONAL if spec.optional else EdgeKind.REQUIRED
            graph.add_edge(DependencyEdge(info.name, spec.name, kind, spec.constraint))
            if not graph.has_node(spec.name):
                required_by.setdefault(spec.name, info.name)
                discovered.append(spec.name)
        return discovered

    def _not_found(self, name: str, required_by: str | None) -> PackageNotFoundError:
        suggestions = similar_names(name, self._provider.known_packages())
        logger.warning("Package %s not found (required by %s)", name, required_by)
        return PackageNotFoundError(name, required_by, suggestions)

    # -- Cache-only helpers used by substitution ----------------------------

    async def prefetch(self, names: Iterable[str]) -> set[str]:
        """Fetch the metadata closure of *names* into the cache.

        The graph is not touched. Missing packages are tolerated here.

        Returns:
            The subset of *names* whose whole dependency closure is known,
            i.e. the names that ``graft`` can insert.
        """
        requested = sorted(set(names))
        seen: set[str] = set()
        level = list(requested)
        while level:
            batch = sorted({n for n in level if n not in seen})
            seen.update(batch)
            infos = await self._fetch_level(batch)
            level = [
                spec.name
                for info in infos if info is not None
                for spec in info.dependencies
            ]
        return {name for name in requested if self._closure_known(name)}

    def _closure_known(self, name: str) -> bool:
        stack, seen = [name], set()
        while stack:
            cur = stack.pop()
            if cur in seen:
                continue
            seen.add(cur)
            info = self._cache.get(cur)
            if info is None:
                return False
            stack.extend(spec.name for spec in info.dependencies)
        return True

    def graft(self, graph: DependencyGraph, name: str) -> list[str]:
        """Insert a cached package and its cached closure into *graph*.

        Packages already present in the graph are linked to, not re-added.

        Returns:
            Sorted names of the packages added.

        Raises:
            GraphInvariantError: If part of the closure was never fetched.
        """
        if not self._closure_known(name):
            raise GraphInvariantError(
                f"Metadata closure for {name!r} has not been prefetched"
            )
        added: list[str] = []
        level = [name]
        required_by: dict[str, str | None] = {}
        while level:
            next_level: list[str] = []
            for cur in sorted(set(level)):
                if graph.has_node(cur):
                    continue
                info = self._cache[cur]
                assert info is not None
                next_level.extend(self._insert(graph, info, required_by))
                added.append(cur)
            level = next_level
        return sorted(added)
