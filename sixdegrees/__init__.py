"""
Sixdegrees - degrees of separation over incrementally discovered graphs.

Find how closely two entities are connected when the graph is only revealed
one neighbor list at a time (Six Degrees of Kevin Bacon over Wikipedia).

No file I/O required. No network client baked in.
Resolver, graph store and snapshot sink are injected by the user.
"""

__version__ = "0.1.0"

# Search driver
from .explorer import (
    FrontierExplorer,
    SearchFailedError,
    GenerationLimitExceededError,
    FrontierExhaustedError,
    SearchCancelledError,
)

# Graph store and algorithms
from .graph import (
    DEFAULT_EDGE_WEIGHT,
    GraphStore,
    InMemoryGraphStore,
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

# Core interfaces
from .resolver import (
    NeighborResolver,
    ResolutionError,
    UnknownEntityError,
    ResolverTimeoutError,
    MappingResolver,
    WikipediaResolver,
)
from .persistence import (
    SnapshotStrategy,
    InMemorySnapshots,
    JsonSnapshotFile,
    SnapshotPersistenceError,
)

# Core schemas
from .schemas import (
    NodeRecord,
    LinkRecord,
    SerializedGraph,
    ResolvedLinks,
    PathResult,
    NodeOutcome,
    GenerationReport,
    SearchResult,
)

__all__ = [
    # Search driver
    "FrontierExplorer",
    "SearchFailedError",
    "GenerationLimitExceededError",
    "FrontierExhaustedError",
    "SearchCancelledError",
    # Graph
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
    # Resolvers
    "NeighborResolver",
    "ResolutionError",
    "UnknownEntityError",
    "ResolverTimeoutError",
    "MappingResolver",
    "WikipediaResolver",
    # Persistence
    "SnapshotStrategy",
    "InMemorySnapshots",
    "JsonSnapshotFile",
    "SnapshotPersistenceError",
    # Schemas
    "NodeRecord",
    "LinkRecord",
    "SerializedGraph",
    "ResolvedLinks",
    "PathResult",
    "NodeOutcome",
    "GenerationReport",
    "SearchResult",
]
