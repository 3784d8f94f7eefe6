"""
GraphStore interface for pluggable graph backends.

This module provides the abstract GraphStore contract and the in-memory
implementation used by the frontier explorer. Algorithms and the explorer
depend only on the contract, so an externally-backed store (key-value,
database) can be swapped in without touching search code.

Data model:
- Nodes are plain strings; identity is exact string equality
- Edges live in a per-source adjacency list (parallel edges allowed)
- Weights live in a table keyed by the ordered pair (last write wins, default 1)

Usage pattern:
    graph = InMemoryGraphStore()
    graph.add_edge("Kevin Bacon", "Footloose")
    snapshot = graph.serialize()
    copy = InMemoryGraphStore(snapshot)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from sixdegrees.schemas import LinkRecord, NodeRecord, SerializedGraph

DEFAULT_EDGE_WEIGHT = 1

SnapshotLike = Union[SerializedGraph, Mapping[str, Any]]


class GraphStore(ABC):
    """Abstract base class for mutable weighted directed graphs.

    Method categories:
    1. Nodes: has_node(), add_node(), remove_node(), nodes()
    2. Edges: adjacent(), add_edge(), remove_edge()
    3. Weights: set_edge_weight(), get_edge_weight()
    4. Degrees: indegree(), outdegree()
    5. Snapshots: serialize(), deserialize() (provided, built on 1-3)

    Concrete implementations must keep the invariants the algorithms rely on:
    - Every edge endpoint has an adjacency entry (possibly empty)
    - adjacent() and nodes() order follow insertion order
    - get_edge_weight() never fails; unset pairs weigh DEFAULT_EDGE_WEIGHT
    """

    @abstractmethod
    def has_node(self, node: str) -> bool:
        """Return True if the node has an adjacency entry."""

    @abstractmethod
    def add_node(self, node: str) -> None:
        """Add a node with an empty adjacency list. No-op if already present."""

    @abstractmethod
    def remove_node(self, node: str) -> None:
        """Remove a node, its outgoing edges and every edge pointing at it.

        Sibling nodes are never removed. No-op for unknown nodes.
        """

    @abstractmethod
    def nodes(self) -> List[str]:
        """Return every node appearing as a source or target, in discovery order."""

    @abstractmethod
    def adjacent(self, node: str) -> List[str]:
        """Return a copy of the adjacency list of node, or an empty list if unknown."""

    @abstractmethod
    def add_edge(self, u: str, v: str, weight: Optional[float] = None) -> None:
        """Append v to u's adjacency list, adding both nodes if needed.

        Duplicates are kept. The weight table is only touched when weight is given.
        """

    @abstractmethod
    def remove_edge(self, u: str, v: str) -> None:
        """Remove every occurrence of v from u's adjacency list. No-op if u is unknown."""

    @abstractmethod
    def set_edge_weight(self, u: str, v: str, weight: float) -> None:
        """Record the weight for the ordered pair (u, v)."""

    @abstractmethod
    def get_edge_weight(self, u: str, v: str) -> float:
        """Return the weight of (u, v), DEFAULT_EDGE_WEIGHT if never set."""

    @abstractmethod
    def indegree(self, node: str) -> int:
        """Count occurrences of node as an edge target."""

    @abstractmethod
    def outdegree(self, node: str) -> int:
        """Length of node's adjacency list (0 for unknown nodes)."""

    def serialize(self) -> SerializedGraph:
        """Snapshot the graph as node and link records.

        One link record is emitted per adjacency entry so parallel edges
        survive a round trip.
        """
        node_ids = self.nodes()
        links: List[LinkRecord] = []
        for source in node_ids:
            for target in self.adjacent(source):
                links.append(
                    LinkRecord(
                        source=source,
                        target=target,
                        weight=self.get_edge_weight(source, target),
                    )
                )
        return SerializedGraph(nodes=[NodeRecord(id=node) for node in node_ids], links=links)

    def deserialize(self, serialized: SnapshotLike) -> None:
        """Replay a snapshot into this store (additive, not a reset).

        Nodes are inserted first to preserve discovery order, then links.
        Link endpoints missing from the node list are created by add_edge.
        """
        if not isinstance(serialized, SerializedGraph):
            serialized = SerializedGraph.model_validate(serialized)

        for record in serialized.nodes:
            self.add_node(record.id)
        for link in serialized.links:
            self.add_edge(link.source, link.target, link.weight)


class InMemoryGraphStore(GraphStore):
    """Dict-backed graph store.

    Storage structure:
    - _edges: Dict[node, List[node]] - adjacency lists, dict order = discovery order
    - _weights: Dict[(u, v), weight] - explicit weights only

    Performance characteristics:
    - add_node/add_edge/outdegree: O(1)
    - remove_edge: O(deg(u))
    - remove_node/indegree/nodes: O(V + E)
    """

    def __init__(self, serialized: Optional[SnapshotLike] = None):
        self._edges: Dict[str, List[str]] = {}
        self._weights: Dict[Tuple[str, str], float] = {}

        if serialized is not None:
            self.deserialize(serialized)

    def has_node(self, node: str) -> bool:
        return node in self._edges

    def add_node(self, node: str) -> None:
        self._edges.setdefault(node, [])

    def remove_node(self, node: str) -> None:
        # Incoming edges first, then the node's own list
        for u, targets in list(self._edges.items()):
            if node in targets:
                self._edges[u] = [v for v in targets if v != node]
        self._edges.pop(node, None)

    def nodes(self) -> List[str]:
        seen: Dict[str, None] = {}
        for u, targets in self._edges.items():
            seen[u] = None
            for v in targets:
                seen[v] = None
        return list(seen)

    def adjacent(self, node: str) -> List[str]:
        return list(self._edges.get(node, []))

    def add_edge(self, u: str, v: str, weight: Optional[float] = None) -> None:
        self.add_node(u)
        self.add_node(v)
        self._edges[u].append(v)

        if weight is not None:
            self.set_edge_weight(u, v, weight)

    def remove_edge(self, u: str, v: str) -> None:
        if u in self._edges:
            self._edges[u] = [target for target in self._edges[u] if target != v]

    def set_edge_weight(self, u: str, v: str, weight: float) -> None:
        self._weights[(u, v)] = weight

    def get_edge_weight(self, u: str, v: str) -> float:
        return self._weights.get((u, v), DEFAULT_EDGE_WEIGHT)

    def indegree(self, node: str) -> int:
        return sum(targets.count(node) for targets in self._edges.values())

    def outdegree(self, node: str) -> int:
        return len(self._edges.get(node, []))

    def __len__(self) -> int:
        return len(self.nodes())

    def __repr__(self) -> str:
        edge_count = sum(len(targets) for targets in self._edges.values())
        return f"InMemoryGraphStore(nodes={len(self)}, edges={edge_count})"
