"""
Frontier explorer - the search driver.

Fully decoupled from HTTP clients and file paths.
The resolver, graph store and snapshot sink are injected by the caller.

Coordinates the generation loop:
1. Take the current frontier (ids not resolved yet)
2. Resolve each id through the injected NeighborResolver, one at a time
3. Fold the neighbors into the graph store as directed edges
4. Persist a snapshot via the injected strategy
5. Check for a source -> target path and stop the moment one exists
6. Build the next frontier from ids discovered this generation
"""

import asyncio
from typing import Callable, Dict, List, Optional, Set

from .config import Config
from .graph import GraphShapeError, GraphStore, InMemoryGraphStore, shortest_path
from .logging_utils import (
    Color,
    colored,
    log_deterministic,
    log_error,
    log_info,
    log_network,
    log_success,
    profile,
)
from .persistence import InMemorySnapshots, SnapshotStrategy
from .resolver import NeighborResolver
from .schemas import GenerationReport, NodeOutcome, PathResult, SearchResult


# =============================
# Module-level Exceptions
# =============================

class SearchFailedError(Exception):
    """Base class for unrecoverable search failures."""


class GenerationLimitExceededError(SearchFailedError):
    """Raised when the generation cap is reached without connecting the seeds."""

    def __init__(self, *, max_generations: int, source: str, target: str) -> None:
        self.max_generations = max_generations
        self.source = source
        self.target = target
        message = (
            f"No path from {source!r} to {target!r} within {max_generations} generations.\n\n"
            "Remediation tips:\n"
            "  - Raise SIXDEGREES_MAX_GENERATIONS (or --max-generations)\n"
            "  - Enable backlinks so the target side can expand toward the source\n"
            "  - Check both titles resolve to real articles"
        )
        super().__init__(message)


class FrontierExhaustedError(SearchFailedError):
    """Raised when a generation discovers nothing new and no path exists."""

    def __init__(self, *, generation: int, source: str, target: str) -> None:
        self.generation = generation
        self.source = source
        self.target = target
        message = (
            f"Frontier exhausted at generation {generation}: nothing left to explore "
            f"and no path from {source!r} to {target!r}.\n\n"
            "Remediation tips:\n"
            "  - Check the resolver is reachable (every node may have failed)\n"
            "  - Verify the source and target identifiers are spelled exactly"
        )
        super().__init__(message)


class SearchCancelledError(SearchFailedError):
    """Raised when cancel() was requested; the search stops between nodes."""

    def __init__(self, *, generation: int, node_id: Optional[str] = None) -> None:
        self.generation = generation
        self.node_id = node_id
        where = f" before resolving {node_id!r}" if node_id is not None else ""
        super().__init__(f"Search cancelled at generation {generation}{where}")


GenerationListener = Callable[[GenerationReport], None]


class FrontierExplorer:
    """
    Generation-bounded breadth-first search over a graph revealed by a resolver.

    One explorer runs one search. It owns its graph store unless one is
    injected, and nothing is shared across searches.
    """

    def __init__(
        self,
        resolver: NeighborResolver,
        source: str,
        target: str,
        *,
        graph: Optional[GraphStore] = None,
        persistence: Optional[SnapshotStrategy] = None,
        max_generations: Optional[int] = None,
        node_delay: Optional[float] = None,
        generation_delay: Optional[float] = None,
        follow_backlinks: bool = False,
        generation_listeners: Optional[List[GenerationListener]] = None,
    ):
        """Initialize explorer with all dependencies injected.

        Args:
            resolver: NeighborResolver used to reveal each node's neighbors
            source: Seed the path starts from
            target: Seed the path must reach
            graph: Optional graph store (defaults to a fresh InMemoryGraphStore)
            persistence: Optional snapshot sink (defaults to InMemorySnapshots)
            max_generations: Safety cap on generations (defaults to Config.MAX_GENERATIONS)
            node_delay: Seconds to wait after each fold (rate limit toward the resolver)
            generation_delay: Seconds to wait between generations
            follow_backlinks: Fold backlinks as incoming edges and explore them
            generation_listeners: Optional callables invoked with each GenerationReport
        """
        self.resolver = resolver
        self.source = source
        self.target = target
        self.graph = graph if graph is not None else InMemoryGraphStore()
        self.persistence = persistence or InMemorySnapshots()
        self.max_generations = (
            max_generations if max_generations is not None else Config.MAX_GENERATIONS
        )
        self.node_delay = node_delay if node_delay is not None else Config.NODE_DELAY_SECONDS
        self.generation_delay = (
            generation_delay if generation_delay is not None else Config.GENERATION_DELAY_SECONDS
        )
        self.follow_backlinks = follow_backlinks
        self.generation_listeners = generation_listeners or []

        # Seeds form generation 0; duplicates collapse when source == target
        self.frontier: List[str] = list(dict.fromkeys([source, target]))
        self.generation = 0
        # Every id handed to the resolver, successful or not. Never re-fetched.
        self.attempted: Set[str] = set()
        self.nodes_resolved = 0
        self.nodes_failed = 0
        self._cancel_requested = asyncio.Event()

    def cancel(self) -> None:
        """Ask the search to stop before the next node is resolved."""
        self._cancel_requested.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel_requested.is_set()

    def find_path(self) -> Optional[PathResult]:
        """Return the current source -> target shortest path, or None if not connected yet."""
        try:
            return shortest_path(self.graph, self.source, self.target)
        except GraphShapeError:
            return None

    async def run(self) -> SearchResult:
        """Expand generations until source and target are connected.

        Returns:
            SearchResult with the path and search statistics

        Raises:
            GenerationLimitExceededError: Cap reached without a path
            FrontierExhaustedError: Nothing new to explore and no path
            SearchCancelledError: cancel() was called
            SnapshotPersistenceError: The snapshot sink could not be written
        """
        await self.persistence.initialize()

        try:
            log_info(f"Searching for a path from {self.source!r} to {self.target!r}")
            self.graph.add_node(self.source)
            self.graph.add_node(self.target)

            path = self.find_path()
            while path is None:
                if self.generation >= self.max_generations:
                    raise GenerationLimitExceededError(
                        max_generations=self.max_generations,
                        source=self.source,
                        target=self.target,
                    )
                if not self.frontier:
                    raise FrontierExhaustedError(
                        generation=self.generation, source=self.source, target=self.target
                    )

                print(f"=== Generation {self.generation + 1}/{self.max_generations} ===")
                report = await self.process_generation(self.frontier)
                self.generation += 1
                self.frontier = report.next_frontier
                path = report.path

                for listener in self.generation_listeners:
                    listener(report)

                if path is None and self.generation_delay > 0:
                    await asyncio.sleep(self.generation_delay)

            log_success(
                f"Connected {self.source!r} and {self.target!r} after "
                f"{self.generation} generation(s): {' -> '.join(path.path)}"
            )
            return SearchResult(
                source=self.source,
                target=self.target,
                path=path,
                generations=self.generation,
                nodes_resolved=self.nodes_resolved,
                nodes_failed=self.nodes_failed,
                graph_size=len(self.graph.nodes()),
            )

        finally:
            await self.persistence.close()

    async def process_generation(self, frontier: List[str]) -> GenerationReport:
        """Resolve and fold every frontier id in order, stopping early on a path.

        Args:
            frontier: Ids to resolve this generation

        Returns:
            GenerationReport with per-node outcomes, the path (if one appeared)
            and the next frontier: sorted ids discovered this generation that
            were never handed to the resolver
        """
        generation = self.generation
        log_info(f"starting generation {generation}; size: {len(frontier)}")

        outcomes: List[NodeOutcome] = []
        discovered: Dict[str, None] = {}
        path: Optional[PathResult] = None

        with profile("generation", number=generation):
            for node_id in frontier:
                if self.cancelled:
                    raise SearchCancelledError(generation=generation, node_id=node_id)

                self.attempted.add(node_id)
                outcome = await self._resolve(node_id)
                outcomes.append(outcome)
                if not outcome.ok:
                    continue

                outcome = self._adopt_canonical_title(outcome)
                self._fold(outcome)
                await self.persistence.save_snapshot(self.graph.serialize())
                if self.node_delay > 0:
                    await asyncio.sleep(self.node_delay)

                path = self.find_path()
                if path is not None:
                    log_deterministic(f"path closed after folding {node_id!r}; stopping early")
                    break

                for neighbor in self._neighbors_of(outcome):
                    discovered[neighbor] = None

        next_frontier = [] if path is not None else sorted(
            node for node in discovered if node not in self.attempted
        )
        report = GenerationReport(
            generation=generation,
            frontier=list(frontier),
            outcomes=outcomes,
            next_frontier=next_frontier,
            path=path,
        )
        self._print_generation_summary(report)
        return report

    async def _resolve(self, node_id: str) -> NodeOutcome:
        log_network(f"processing node {node_id}")
        try:
            resolved = await self.resolver.resolve(node_id)
        except Exception as exc:
            # One bad node contributes no edges; the generation carries on
            self.nodes_failed += 1
            log_error(f"Error while fetching {node_id}: {exc}")
            return NodeOutcome(node_id=node_id, error=str(exc) or type(exc).__name__)

        self.nodes_resolved += 1
        return NodeOutcome(
            node_id=node_id,
            links=resolved.links,
            backlinks=resolved.backlinks or [],
            title=resolved.title,
        )

    def _adopt_canonical_title(self, outcome: NodeOutcome) -> NodeOutcome:
        """Rename a seed to the canonical title its resolver reported.

        Other pages link to the canonical title, not to a redirect or a
        differently cased spelling, so a seed left under its typed name could
        never be reached. Edges already pointing at the old id are moved to
        the canonical one.
        """
        old, title = outcome.node_id, outcome.title
        if not title or title == old or old not in (self.source, self.target):
            return outcome

        log_deterministic(f"seed {old!r} resolves to {title!r}; searching with the canonical title")
        if self.source == old:
            self.source = title
        if self.target == old:
            self.target = title

        for node in self.graph.nodes():
            if old in self.graph.adjacent(node):
                self.graph.add_edge(node, title, self.graph.get_edge_weight(node, old))
        self.graph.remove_node(old)
        self.graph.add_node(title)
        self.attempted.add(title)
        return outcome.model_copy(update={"node_id": title})

    def _fold(self, outcome: NodeOutcome) -> None:
        """Merge one resolved neighbor list into the graph store."""
        node_id = outcome.node_id
        if not self.graph.has_node(node_id):
            self.graph.add_node(node_id)
        for link in outcome.links:
            self.graph.add_edge(node_id, link)
        if self.follow_backlinks:
            for backlink in outcome.backlinks:
                self.graph.add_edge(backlink, node_id)

    def _neighbors_of(self, outcome: NodeOutcome) -> List[str]:
        if self.follow_backlinks:
            return outcome.links + outcome.backlinks
        return outcome.links

    def _print_generation_summary(self, report: GenerationReport) -> None:
        failed = len(report.failures)
        processed = len(report.outcomes)
        print(
            colored(
                f"  generation {report.generation}: {processed}/{len(report.frontier)} processed, "
                f"{failed} failed, graph size {len(self.graph.nodes())}, "
                f"next frontier {len(report.next_frontier)}",
                Color.CYAN,
            )
        )


__all__ = [
    "FrontierExplorer",
    "SearchFailedError",
    "GenerationLimitExceededError",
    "FrontierExhaustedError",
    "SearchCancelledError",
]
