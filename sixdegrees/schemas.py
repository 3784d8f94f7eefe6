"""
Pydantic schemas for the sixdegrees search system.

Every record that crosses a boundary (snapshot files, resolver responses,
search reports) is defined here.

Design Philosophy:
- Nodes are plain strings; records wrap them only where a wire format needs it
- Snapshot models mirror the on-disk JSON exactly ({nodes: [{id}], links: [...]})
- Pydantic validation ensures snapshots read back from disk are well-formed
"""

from pydantic import BaseModel, Field

from typing import List, Optional


# ============================================================================
# Snapshot Schemas
# ============================================================================


class NodeRecord(BaseModel):
    """A single node in a serialized graph."""

    id: str = Field(..., description="Node identifier (exact-string identity)")


class LinkRecord(BaseModel):
    """A single directed edge in a serialized graph.

    Parallel edges are emitted as repeated records with the same endpoints.
    They share one effective weight because the store keeps a single weight
    slot per ordered pair.
    """

    source: str = Field(..., description="Edge tail")
    target: str = Field(..., description="Edge head")
    weight: float = Field(1, description="Effective weight of the (source, target) pair")


class SerializedGraph(BaseModel):
    """Snapshot of a graph store.

    Node order is first-discovery order. Links are grouped by source in node
    order, then in adjacency insertion order.
    """

    nodes: List[NodeRecord] = Field(default_factory=list, description="Nodes in discovery order")
    links: List[LinkRecord] = Field(default_factory=list, description="Directed edges")


# ============================================================================
# Resolver Schemas
# ============================================================================


class ResolvedLinks(BaseModel):
    """Neighbor lists returned by a resolver for one entity.

    ``title`` is the canonical identifier the resolver settled on (e.g. after
    following a Wikipedia redirect). The explorer folds edges under the
    identifier it asked for, except for the two seeds, which are renamed to
    their canonical title so pages linking to that title can reach them.
    """

    links: List[str] = Field(default_factory=list, description="Outgoing neighbor ids")
    backlinks: Optional[List[str]] = Field(
        None, description="Incoming neighbor ids, when the resolver was asked for them"
    )
    title: Optional[str] = Field(None, description="Canonical identifier reported by the resolver")


# ============================================================================
# Search Schemas
# ============================================================================


class PathResult(BaseModel):
    """A shortest path and its total weight.

    ``path`` runs from source to destination inclusive. ``hops`` is the number
    of edges traversed, which is what the game calls the Bacon Factor.
    """

    path: List[str] = Field(..., description="Ordered node ids from source to destination")
    weight: float = Field(0, description="Sum of edge weights along the path")

    @property
    def hops(self) -> int:
        return max(len(self.path) - 1, 0)


class NodeOutcome(BaseModel):
    """Result of resolving and folding one frontier node."""

    node_id: str
    links: List[str] = Field(default_factory=list)
    backlinks: List[str] = Field(default_factory=list)
    error: Optional[str] = Field(None, description="Resolver failure message, if any")
    title: Optional[str] = Field(None, description="Canonical id reported by the resolver")

    @property
    def ok(self) -> bool:
        return self.error is None


class GenerationReport(BaseModel):
    """Summary of one generation, handed to generation listeners."""

    generation: int
    frontier: List[str] = Field(default_factory=list, description="Ids scheduled this generation")
    outcomes: List[NodeOutcome] = Field(default_factory=list, description="Ids actually processed")
    next_frontier: List[str] = Field(default_factory=list)
    path: Optional[PathResult] = None

    @property
    def failures(self) -> List[NodeOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.ok]


class SearchResult(BaseModel):
    """Final answer of a completed search."""

    source: str
    target: str
    path: PathResult
    generations: int = Field(..., description="Generations started before the path appeared")
    nodes_resolved: int = Field(0, description="Resolver calls that succeeded")
    nodes_failed: int = Field(0, description="Resolver calls that failed")
    graph_size: int = Field(0, description="Nodes in the graph when the search finished")

    @property
    def hops(self) -> int:
        return self.path.hops
