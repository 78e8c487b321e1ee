"""Resolver facade: one resolution run end to end.

Wires the graph builder, conflict detector, resolution planner, cycle
validator and result assembler together for a single invocation::

    provider = StaticMetadataProvider.from_file(Path("registry.yaml"))
    result = PackageResolver(provider).resolve(["App", "Tool"])
    if result.is_resolved:
        print(result.final_package_list)

Every call owns an isolated graph and builder. The metadata provider is
injected; there is no process-wide resolver instance.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Iterable, Mapping, TypeVar

from pkgplan.config import ResolverConfig
from pkgplan.core.conflicts.base import DetectionContext
from pkgplan.core.conflicts.detector import ConflictDetector
from pkgplan.core.conflicts.models import ConflictReport, ResolutionStrategy, Severity
from pkgplan.core.dependency.builder import CancellationToken, GraphBuilder
from pkgplan.core.dependency.constraints import PackageSpecifier
from pkgplan.core.dependency.graph import DependencyGraph
from pkgplan.core.dependency.models import PackageInfo, SecurityStatus
from pkgplan.core.lockfile import Lockfile, canonical_metadata
from pkgplan.core.resolution.cycles import CircularDependencyValidator
from pkgplan.core.resolution.planner import ResolutionPlan, ResolutionPlanner
from pkgplan.core.resolution.result import (
    ResolutionResult,
    assemble_result,
    merge_conflicts,
)
from pkgplan.exceptions import (
    CircularDependencyError,
    PackageNotFoundError,
    PkgPlanError,
    ResolutionCancelledError,
    UnresolvableConflictError,
)
from pkgplan.provider.base import MetadataProvider

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PackageResolver:
    """Resolves requested packages into a conflict-free install plan.

    Args:
        provider: The metadata source.
        config: Run settings. Defaults to ``ResolverConfig()``.
        cancel_token: Optional token to abort the run from another thread.
    """

    def __init__(
        self,
        provider: MetadataProvider,
        config: ResolverConfig | None = None,
        *,
        cancel_token: CancellationToken | None = None,
    ) -> None:
        self._provider = provider
        self.config = config or ResolverConfig()
        self._cancel_token = cancel_token

    def resolve(
        self,
        requested: Iterable[PackageSpecifier | str],
        *,
        fresh: bool | None = None,
        choices: Mapping[str, ResolutionStrategy] | None = None,
    ) -> ResolutionResult:
        """Synchronous entry point; see ``resolve_async``."""
        return asyncio.run(self.resolve_async(requested, fresh=fresh, choices=choices))

    async def resolve_async(
        self,
        requested: Iterable[PackageSpecifier | str],
        *,
        fresh: bool | None = None,
        choices: Mapping[str, ResolutionStrategy] | None = None,
    ) -> ResolutionResult:
        """Resolve *requested* packages.

        Args:
            requested: Package specifiers or specifier strings.
            fresh: Ignore lock pins. Defaults to ``config.fresh``.
            choices: Caller decisions keyed by conflict id.

        Returns:
            The resolution result. Missing packages, unresolvable conflicts
            and cycles are reported in ``result.errors``.

        Raises:
            MetadataProviderError: If the provider fails.
            ResolutionCancelledError: On cancellation or deadline expiry.
            LockfileError: If the lock record is unreadable.
        """
        specs = _parse_specs(requested)
        fresh = self.config.fresh if fresh is None else fresh
        lock = None if fresh else self._read_lock()
        return await self._with_deadline(self._run(specs, lock, dict(choices or {})))

    def check(
        self,
        requested: Iterable[PackageSpecifier | str],
        *,
        fresh: bool | None = None,
    ) -> tuple[DependencyGraph, list[ConflictReport]]:
        """Synchronous entry point; see ``check_async``."""
        return asyncio.run(self.check_async(requested, fresh=fresh))

    async def check_async(
        self,
        requested: Iterable[PackageSpecifier | str],
        *,
        fresh: bool | None = None,
    ) -> tuple[DependencyGraph, list[ConflictReport]]:
        """Build the graph and detect conflicts without resolving them.

        Returns:
            The unmodified graph and its conflict reports.

        Raises:
            PackageNotFoundError: If any package has no metadata.
            MetadataProviderError: If the provider fails.
            ResolutionCancelledError: On cancellation or deadline expiry.
        """
        specs = _parse_specs(requested)
        fresh = self.config.fresh if fresh is None else fresh
        lock = None if fresh else self._read_lock()

        async def _check() -> tuple[DependencyGraph, list[ConflictReport]]:
            graph, detector, _ = await self._prepare(self._builder(), specs, lock)
            return graph, detector.detect(graph)

        return await self._with_deadline(_check())

    async def _with_deadline(self, coro: Awaitable[T]) -> T:
        timeout = self.config.timeout
        try:
            return await asyncio.wait_for(coro, timeout=timeout)
        except asyncio.TimeoutError as exc:
            logger.warning("Resolution exceeded its %.1fs deadline", timeout)
            raise ResolutionCancelledError(
                f"Resolution exceeded its {timeout}s deadline"
            ) from exc

    # -- Run ----------------------------------------------------------------

    def _builder(self) -> GraphBuilder:
        return GraphBuilder(
            self._provider,
            max_concurrency=self.config.max_concurrency,
            cancel_token=self._cancel_token,
        )

    async def _prepare(
        self,
        builder: GraphBuilder,
        specs: list[PackageSpecifier],
        lock: Lockfile | None,
    ) -> tuple[DependencyGraph, ConflictDetector, list[str]]:
        """Build the graph, apply lock pins and set up detection.

        Raises:
            PackageNotFoundError: If any package has no metadata.
        """
        config = self.config
        graph = await builder.build(specs, target_platforms=config.target_platforms)

        warnings: list[str] = []
        if lock is not None:
            warnings.extend(self._apply_lock(graph, lock))
        for node in graph.nodes():
            if node.security == SecurityStatus.VULNERABLE:
                warnings.append(f"{node.name} {node.version} is reported vulnerable")

        context = DetectionContext(
            allow_incompatible_pins=config.allow_incompatible_pins,
            allow_platform_narrowing=config.allow_platform_narrowing,
            alternatives={k: list(v) for k, v in config.alternatives.items()},
        )
        if graph.target_platforms:
            context.alternative_info = await self._prefetch_alternatives(builder, graph, context)
        return graph, ConflictDetector(context), warnings

    async def _run(
        self,
        specs: list[PackageSpecifier],
        lock: Lockfile | None,
        choices: dict[str, ResolutionStrategy],
    ) -> ResolutionResult:
        config = self.config
        builder = self._builder()
        try:
            graph, detector, warnings = await self._prepare(builder, specs, lock)
        except PackageNotFoundError as exc:
            return assemble_result(specs, graph=None, errors=[exc], builder_stats=builder.stats)

        initial = detector.detect(graph)
        planner = ResolutionPlanner(
            detector, builder, max_iterations=config.max_iterations, choices=choices,
        )

        errors: list[PkgPlanError] = []
        plan: ResolutionPlan | None = None
        try:
            plan = planner.plan(graph, initial)
            conflicts = merge_conflicts(plan.conflicts_seen)
            iterations = plan.iterations
            warnings.extend(plan.warnings)
            warnings.extend(
                f"{c.id}: {c.message}" for c in plan.outstanding
                if c.severity <= Severity.WARNING
            )
        except UnresolvableConflictError as exc:
            conflicts = merge_conflicts(initial, exc.seen, exc.remaining)
            iterations = exc.iterations
            errors.append(exc)
            errors.extend(c.to_error() for c in exc.remaining)
            warnings.extend(w for step in exc.steps for w in step.warnings)

        cycles = CircularDependencyValidator().validate(graph)
        if cycles:
            errors.append(CircularDependencyError(cycles))

        result = assemble_result(
            specs,
            graph=graph,
            conflicts=conflicts,
            plan=plan,
            errors=errors,
            warnings=warnings,
            builder_stats=builder.stats,
            iterations=iterations,
        )
        logger.info(
            "Resolution %s: %d package(s), %d conflict(s), %d step(s)",
            "succeeded" if result.is_resolved else "failed",
            len(result.final_package_list), len(conflicts), iterations,
        )
        if result.is_resolved and config.lockfile is not None and config.write_lock:
            Lockfile.from_result(result).write(config.lockfile)
            logger.info("Wrote lock record %s", config.lockfile)
        return result

    # -- Helpers ------------------------------------------------------------

    def _read_lock(self) -> Lockfile | None:
        path = self.config.lockfile
        if path is None or not path.exists():
            return None
        logger.debug("Reading lock pins from %s", path)
        return Lockfile.read(path)

    @staticmethod
    def _apply_lock(graph: DependencyGraph, lock: Lockfile) -> list[str]:
        """Copy lock pins onto *graph*; return integrity mismatch warnings."""
        warnings: list[str] = []
        for name, version in lock.pins().items():
            node = graph.get_node(name)
            if node is None:
                continue
            graph.lock_pins[name] = version
            locked = lock.get_package(name)
            if (
                locked is not None
                and locked.integrity
                and node.version == version
                and not lock.verify_integrity(name, canonical_metadata(node))
            ):
                logger.warning("Integrity mismatch for %s %s", name, version)
                warnings.append(
                    f"integrity mismatch for {name} {version}: metadata changed "
                    f"since the lock record was written"
                )
        return warnings

    @staticmethod
    async def _prefetch_alternatives(
        builder: GraphBuilder, graph: DependencyGraph, context: DetectionContext
    ) -> dict[str, PackageInfo]:
        names: set[str] = set()
        for node in graph.nodes():
            names.update(node.alternatives)
            names.update(context.alternatives.get(node.name, []))
        if not names:
            return {}
        usable = await builder.prefetch(names)
        logger.debug("Prefetched %d alternative(s)", len(usable))
        infos = {name: builder.cached(name) for name in sorted(usable)}
        return {name: info for name, info in infos.items() if info is not None}


def _parse_specs(requested: Iterable[PackageSpecifier | str]) -> list[PackageSpecifier]:
    return [PackageSpecifier.parse(s) if isinstance(s, str) else s for s in requested]
