"""Tests for snapshot persistence strategies."""

import json

import pytest

from sixdegrees.graph import InMemoryGraphStore
from sixdegrees.persistence import (
    InMemorySnapshots,
    JsonSnapshotFile,
    SnapshotPersistenceError,
)


def make_graph() -> InMemoryGraphStore:
    graph = InMemoryGraphStore()
    graph.add_edge("Kevin Bacon", "Footloose")
    graph.add_edge("Footloose", "John Lithgow", 2)
    return graph


@pytest.mark.asyncio
async def test_in_memory_snapshots_keep_history():
    persistence = InMemorySnapshots()
    await persistence.initialize()
    assert await persistence.load_snapshot() is None

    graph = make_graph()
    await persistence.save_snapshot(graph.serialize())
    graph.add_edge("John Lithgow", "Shrek")
    await persistence.save_snapshot(graph.serialize())

    assert len(persistence.history) == 2
    assert len(persistence.history[0].links) == 2
    latest = await persistence.load_snapshot()
    assert latest == graph.serialize()

    await persistence.close()
    # History survives close for post-run inspection
    assert len(persistence.history) == 2


@pytest.mark.asyncio
async def test_json_snapshot_file_round_trip(tmp_path):
    path = tmp_path / "nested" / "graph.json"
    persistence = JsonSnapshotFile(path)
    await persistence.initialize()

    graph = make_graph()
    await persistence.save_snapshot(graph.serialize())

    payload = json.loads(path.read_text("utf-8"))
    assert payload == {
        "nodes": [{"id": "Kevin Bacon"}, {"id": "Footloose"}, {"id": "John Lithgow"}],
        "links": [
            {"source": "Kevin Bacon", "target": "Footloose", "weight": 1.0},
            {"source": "Footloose", "target": "John Lithgow", "weight": 2.0},
        ],
    }
    assert not path.with_name("graph.json.tmp").exists()

    restored = InMemoryGraphStore(await persistence.load_snapshot())
    assert restored.nodes() == graph.nodes()
    assert restored.get_edge_weight("Footloose", "John Lithgow") == 2

    await persistence.close()


@pytest.mark.asyncio
async def test_json_snapshot_file_missing_returns_none(tmp_path):
    persistence = JsonSnapshotFile(tmp_path / "absent.json")
    assert await persistence.load_snapshot() is None


@pytest.mark.asyncio
async def test_json_snapshot_file_rejects_malformed_snapshot(tmp_path):
    path = tmp_path / "graph.json"
    path.write_text('{"nodes": [{"name": "no id"}]}', "utf-8")

    with pytest.raises(SnapshotPersistenceError):
        await JsonSnapshotFile(path).load_snapshot()


@pytest.mark.asyncio
async def test_json_snapshot_file_unwritable_is_a_hard_failure(tmp_path):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("", "utf-8")
    persistence = JsonSnapshotFile(blocker / "graph.json")

    with pytest.raises(SnapshotPersistenceError) as excinfo:
        await persistence.save_snapshot(make_graph().serialize())

    assert excinfo.value.path == blocker / "graph.json"
