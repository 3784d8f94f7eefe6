"""Tests for the in-memory graph store and snapshot round trips."""

from sixdegrees.graph import InMemoryGraphStore
from sixdegrees.schemas import SerializedGraph


def edge_triples(graph: InMemoryGraphStore) -> list[tuple[str, str, float]]:
    return sorted(
        (link.source, link.target, link.weight) for link in graph.serialize().links
    )


def test_add_and_remove_nodes():
    graph = InMemoryGraphStore()
    graph.add_node("a")
    graph.add_node("b")
    graph.add_node("a")  # idempotent

    assert graph.nodes() == ["a", "b"]
    assert graph.has_node("a")

    graph.remove_node("a")
    graph.remove_node("b")
    graph.remove_node("missing")  # no-op
    assert graph.nodes() == []
    assert not graph.has_node("a")


def test_add_edge_implicitly_adds_nodes():
    graph = InMemoryGraphStore()
    graph.add_edge("a", "b")

    assert graph.adjacent("a") == ["b"]
    assert graph.adjacent("b") == []
    assert graph.nodes() == ["a", "b"]
    assert graph.has_node("b")


def test_parallel_edges_are_kept_and_remove_edge_drops_all():
    graph = InMemoryGraphStore()
    graph.add_edge("a", "b")
    graph.add_edge("a", "c")
    graph.add_edge("a", "b")
    assert graph.adjacent("a") == ["b", "c", "b"]
    assert graph.outdegree("a") == 3

    graph.remove_edge("a", "b")
    assert graph.adjacent("a") == ["c"]
    # Endpoints survive edge removal
    assert set(graph.nodes()) == {"a", "b", "c"}

    graph.remove_edge("unknown", "b")  # no-op


def test_remove_node_cascades_to_incoming_edges_only():
    graph = InMemoryGraphStore()
    graph.add_edge("a", "b")
    graph.add_edge("c", "b")
    graph.add_edge("b", "d")

    graph.remove_node("b")

    assert graph.adjacent("b") == []
    assert graph.adjacent("a") == []
    assert graph.adjacent("c") == []
    assert graph.nodes() == ["a", "c", "d"]


def test_degrees():
    graph = InMemoryGraphStore()
    graph.add_edge("a", "b")
    assert graph.indegree("a") == 0
    assert graph.indegree("b") == 1
    assert graph.outdegree("a") == 1
    assert graph.outdegree("b") == 0

    graph.add_edge("c", "b")
    graph.add_edge("a", "c")
    assert graph.indegree("b") == 2
    assert graph.outdegree("a") == 2

    assert graph.indegree("z") == 0
    assert graph.outdegree("z") == 0


def test_adjacent_returns_a_copy():
    graph = InMemoryGraphStore()
    graph.add_edge("a", "b")

    neighbors = graph.adjacent("a")
    neighbors.append("ghost")

    assert graph.adjacent("a") == ["b"]
    assert not graph.has_node("ghost")
    assert graph.outdegree("a") == 1


def test_unknown_node_has_no_neighbors():
    graph = InMemoryGraphStore()
    assert graph.adjacent("a") == []
    assert graph.nodes() == []


def test_edge_weights_default_and_last_write_wins():
    graph = InMemoryGraphStore()
    graph.add_edge("a", "b")
    assert graph.get_edge_weight("a", "b") == 1
    assert graph.get_edge_weight("x", "y") == 1

    graph.add_edge("a", "c", 5)
    assert graph.get_edge_weight("a", "c") == 5

    graph.set_edge_weight("a", "b", 3)
    graph.add_edge("a", "b", 7)
    assert graph.get_edge_weight("a", "b") == 7

    # Adding without a weight leaves the existing one alone
    graph.add_edge("a", "b")
    assert graph.get_edge_weight("a", "b") == 7


def test_serialize_preserves_discovery_order():
    graph = InMemoryGraphStore()
    graph.add_edge("a", "b")
    graph.add_edge("b", "c")

    serialized = graph.serialize()

    assert [node.id for node in serialized.nodes] == ["a", "b", "c"]
    assert [(link.source, link.target) for link in serialized.links] == [("a", "b"), ("b", "c")]
    assert serialized.model_dump(mode="json") == {
        "nodes": [{"id": "a"}, {"id": "b"}, {"id": "c"}],
        "links": [
            {"source": "a", "target": "b", "weight": 1.0},
            {"source": "b", "target": "c", "weight": 1.0},
        ],
    }


def test_round_trip_keeps_parallel_edges_weights_and_isolated_nodes():
    graph = InMemoryGraphStore()
    graph.add_edge("s", "t", 10)
    graph.add_edge("s", "t", 4)
    graph.add_edge("t", "u")
    graph.add_node("lonely")

    copy = InMemoryGraphStore(graph.serialize())

    assert copy.nodes() == graph.nodes()
    assert edge_triples(copy) == edge_triples(graph)
    assert edge_triples(copy) == [("s", "t", 4), ("s", "t", 4), ("t", "u", 1)]
    assert copy.has_node("lonely")


def test_deserialize_accepts_plain_json_and_is_additive():
    graph = InMemoryGraphStore()
    graph.add_edge("x", "a")

    graph.deserialize(
        {
            "nodes": [{"id": "a"}, {"id": "b"}],
            "links": [{"source": "a", "target": "b", "weight": 2}],
        }
    )

    assert graph.nodes() == ["x", "a", "b"]
    assert graph.adjacent("x") == ["a"]
    assert graph.get_edge_weight("a", "b") == 2


def test_deserialize_creates_missing_link_endpoints():
    snapshot = SerializedGraph.model_validate(
        {"nodes": [{"id": "a"}], "links": [{"source": "a", "target": "ghost", "weight": 1}]}
    )

    graph = InMemoryGraphStore(snapshot)

    assert graph.has_node("ghost")
    assert graph.adjacent("ghost") == []
