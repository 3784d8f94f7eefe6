"""Graph store and read-only graph algorithms."""

from .store import DEFAULT_EDGE_WEIGHT, GraphStore, InMemoryGraphStore
from .algorithms import (
    GraphShapeError,
    NodeNotInGraphError,
    SourceNotInGraphError,
    DestinationNotInGraphError,
    NoPathError,
    depth_first_search,
    topological_sort,
    lowest_common_ancestors,
    shortest_path,
)

__all__ = [
    "DEFAULT_EDGE_WEIGHT",
    "GraphStore",
    "InMemoryGraphStore",
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
