"""Read-only algorithms over the GraphStore query surface.

Depth-first search and topological sort follow Cormen et al. "Introduction to
Algorithms" 3rd Ed. (p. 604 and p. 613), Dijkstra follows p. 658. Output order
is a deterministic function of adjacency insertion order, never of a sort.

Traversals use an explicit stack instead of recursion so that graphs grown
from Wikipedia (tens of thousands of nodes deep) do not hit the interpreter's
recursion limit. The stack frames visit neighbors in exactly the order a
recursive visitor would.
"""

from __future__ import annotations

import heapq
import math
from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple

from sixdegrees.schemas import PathResult

from .store import GraphStore


# =============================
# Module-level Exceptions
# =============================

class GraphShapeError(Exception):
    """Raised when a query cannot be answered on the graph as explored so far.

    Always recoverable: the explorer reads it as "keep expanding".
    """


class NodeNotInGraphError(GraphShapeError):
    """Raised when a shortest-path endpoint is absent from the node set."""

    role = "Node"

    def __init__(self, node: str) -> None:
        self.node = node
        super().__init__(f"{self.role} node is not in the graph: {node!r}")


class SourceNotInGraphError(NodeNotInGraphError):
    role = "Source"


class DestinationNotInGraphError(NodeNotInGraphError):
    role = "Destination"


class NoPathError(GraphShapeError):
    """Raised when the destination is not reachable from the source."""

    def __init__(self, source: str, destination: str) -> None:
        self.source = source
        self.destination = destination
        super().__init__(f"No path found from {source!r} to {destination!r}")


# =============================
# Depth-first search
# =============================

Frame = Tuple[str, Iterator[str]]


def _visit_post_order(
    graph: GraphStore, start: str, visited: Set[str], node_list: List[str]
) -> None:
    """Visit start and its descendants, appending each node after its descendants."""

    if start in visited:
        return
    visited.add(start)
    stack: List[Frame] = [(start, iter(graph.adjacent(start)))]

    while stack:
        node, neighbors = stack[-1]
        for neighbor in neighbors:
            if neighbor not in visited:
                visited.add(neighbor)
                stack.append((neighbor, iter(graph.adjacent(neighbor))))
                break
        else:
            # All descendants finished
            stack.pop()
            node_list.append(node)


def depth_first_search(
    graph: GraphStore,
    source_nodes: Optional[Iterable[str]] = None,
    include_source_nodes: bool = True,
) -> List[str]:
    """Return nodes in depth-first post-order.

    Args:
        graph: Store to traverse
        source_nodes: Nodes to start from (defaults to every node)
        include_source_nodes: When False, sources are marked visited up front
            and left out of the result, so cycles back into a source stop there.

    Returns:
        Visited nodes, each listed after all of its descendants
    """

    sources = list(source_nodes) if source_nodes is not None else graph.nodes()
    visited: Set[str] = set()
    node_list: List[str] = []

    if include_source_nodes:
        for node in sources:
            _visit_post_order(graph, node, visited, node_list)
    else:
        visited.update(sources)
        for node in sources:
            for neighbor in graph.adjacent(node):
                _visit_post_order(graph, neighbor, visited, node_list)

    return node_list


def topological_sort(
    graph: GraphStore,
    source_nodes: Optional[Iterable[str]] = None,
    include_source_nodes: bool = True,
) -> List[str]:
    """Order nodes so that for each visited edge (u, v), u comes before v.

    Only meaningful for a DAG among the included nodes. This is just the
    reversed depth-first post-order.
    """

    return list(reversed(depth_first_search(graph, source_nodes, include_source_nodes)))


# =============================
# Lowest common ancestors
# =============================

def _collect_ancestors(graph: GraphStore, node1: str, node2: str) -> Tuple[Set[str], bool]:
    """Phase 1: record everything reachable from node1.

    Returns (ancestors, shortcut). shortcut is True when node2 was reached,
    in which case the visit stops immediately.
    """

    ancestors: Set[str] = {node1}
    if node1 == node2:
        return ancestors, True

    stack: List[Frame] = [(node1, iter(graph.adjacent(node1)))]
    while stack:
        _, neighbors = stack[-1]
        for neighbor in neighbors:
            if neighbor in ancestors:
                continue
            ancestors.add(neighbor)
            if neighbor == node2:
                return ancestors, True
            stack.append((neighbor, iter(graph.adjacent(neighbor))))
            break
        else:
            stack.pop()

    return ancestors, False


def lowest_common_ancestors(graph: GraphStore, node1: str, node2: str) -> List[str]:
    """Return the shallowest nodes reachable from both node1 and node2.

    "Ancestor" means reachable through outgoing edges. Phase 1 walks from
    node1; if it meets node2, node2 is the only answer. Otherwise phase 2
    walks from node2, keeps every node in node1's reachable set without
    descending past it, and stops opening new branches once any answer
    exists. Siblings already queued on an open branch are still checked,
    which is how several answers can come back (e.g. ``["d", "e"]``).

    Returns:
        Common ancestors in discovery order; ``[node1]`` when both are equal;
        ``[]`` when nothing is reachable from both.
    """

    ancestors, shortcut = _collect_ancestors(graph, node1, node2)
    if shortcut:
        return [node2]

    lcas: List[str] = []
    visited: Set[str] = {node2}
    stack: List[Frame] = [(node2, iter(graph.adjacent(node2)))]
    while stack:
        _, neighbors = stack[-1]
        for neighbor in neighbors:
            if neighbor in visited:
                continue
            visited.add(neighbor)
            if neighbor in ancestors:
                lcas.append(neighbor)
            elif not lcas:
                stack.append((neighbor, iter(graph.adjacent(neighbor))))
                break
        else:
            stack.pop()

    return lcas


# =============================
# Dijkstra's shortest path
# =============================

def shortest_path(graph: GraphStore, source: str, destination: str) -> PathResult:
    """Compute the minimum-weight path from source to destination.

    Weights are assumed non-negative. Ties between equally distant nodes are
    broken by node discovery order, so results are deterministic.

    Raises:
        SourceNotInGraphError: source is absent from the node set
        DestinationNotInGraphError: destination is absent from the node set
        NoPathError: destination is unreachable from source
    """

    node_order = graph.nodes()
    # Upper bounds for shortest path weights from source
    d: Dict[str, float] = {node: math.inf for node in node_order}
    if source not in d:
        raise SourceNotInGraphError(source)
    if destination not in d:
        raise DestinationNotInGraphError(destination)

    index = {node: position for position, node in enumerate(node_order)}
    predecessors: Dict[str, str] = {}
    done: Set[str] = set()
    d[source] = 0
    queue: List[Tuple[float, int, str]] = [(0, index[source], source)]

    while queue:
        dist, _, u = heapq.heappop(queue)
        if u in done or dist > d[u]:
            continue
        done.add(u)
        for v in graph.adjacent(u):
            candidate = d[u] + graph.get_edge_weight(u, v)
            if d[v] > candidate:
                d[v] = candidate
                predecessors[v] = u
                heapq.heappush(queue, (candidate, index[v], v))
    # Anything left at infinity sits in a disconnected subgraph

    # Walk the predecessor subgraph back from destination
    node_list: List[str] = []
    weight: float = 0
    node = destination
    while node in predecessors:
        node_list.append(node)
        previous = predecessors[node]
        weight += graph.get_edge_weight(previous, node)
        node = previous
    if node != source:
        raise NoPathError(source, destination)
    node_list.append(node)
    node_list.reverse()

    return PathResult(path=node_list, weight=weight)


__all__ = [
    "GraphShapeError",
    "NodeNotInGraphError",
    "SourceNotInGraphError",
    "DestinationNotInGraphError",
    "NoPathError",
    "depth_first_search",
    "topological_sort",
    "lowest_common_ancestors",
    "shortest_path",
]
