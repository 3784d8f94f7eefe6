"""
SnapshotStrategy interface for pluggable graph snapshot sinks.

The explorer persists a serialized snapshot of its graph after every fold, so
a crash mid-generation loses at most the node in flight. Persistence is
OPTIONAL - searches can run entirely in-memory.

Two included implementations:
1. InMemorySnapshots - keeps every snapshot in a list (testing, replay)
2. JsonSnapshotFile - overwrites one JSON file ({nodes, links}) on each save

Usage pattern:
    persistence = JsonSnapshotFile("data/graph.json")
    await persistence.initialize()
    await persistence.save_snapshot(graph.serialize())
    await persistence.close()

A sink that cannot write is a hard failure: SnapshotPersistenceError escapes
the search instead of being absorbed like per-node resolver errors.
"""

import asyncio
import json
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from .schemas import SerializedGraph


class SnapshotPersistenceError(RuntimeError):
    """Raised when a snapshot cannot be written or read back."""

    def __init__(self, *, path: Optional[Path], reason: str) -> None:
        self.path = path
        self.reason = reason
        location = f" at {path}" if path is not None else ""
        super().__init__(
            f"Snapshot persistence failed{location}: {reason}\n\n"
            "Remediation tips:\n"
            "  - Check that the snapshot directory exists and is writable\n"
            "  - Point SIXDEGREES_SNAPSHOT_PATH (or --snapshot) somewhere else"
        )


class SnapshotStrategy(ABC):
    """Abstract base class for graph snapshot sinks.

    Method categories:
    1. Lifecycle: initialize(), close()
    2. Snapshots: save_snapshot(), load_snapshot()

    All methods are async so file or network backed sinks never block the
    search loop.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """
        Prepare the sink (create directories, open connections).

        Raises:
            SnapshotPersistenceError: If the sink cannot be prepared
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release any resources held by the sink."""
        pass

    @abstractmethod
    async def save_snapshot(self, graph: SerializedGraph) -> None:
        """
        Persist the latest snapshot, replacing the previous one.

        Args:
            graph: Serialized graph store

        Raises:
            SnapshotPersistenceError: If the snapshot cannot be written
        """
        pass

    @abstractmethod
    async def load_snapshot(self) -> Optional[SerializedGraph]:
        """
        Read back the latest snapshot.

        Returns:
            SerializedGraph if one was saved, None otherwise

        Raises:
            SnapshotPersistenceError: If a stored snapshot is unreadable
        """
        pass


class InMemorySnapshots(SnapshotStrategy):
    """In-memory snapshot sink.

    Unlike the file sink this keeps the whole history, which lets tests check
    that a snapshot was taken after each fold.
    """

    def __init__(self):
        self.history: List[SerializedGraph] = []

    async def initialize(self) -> None:
        pass

    async def close(self) -> None:
        # History is kept for post-run inspection
        pass

    async def save_snapshot(self, graph: SerializedGraph) -> None:
        self.history.append(graph.model_copy(deep=True))

    async def load_snapshot(self) -> Optional[SerializedGraph]:
        return self.history[-1] if self.history else None


class JsonSnapshotFile(SnapshotStrategy):
    """File-based snapshot sink writing pretty-printed JSON.

    File format:
    ```
    {
      "nodes": [{"id": "Kevin Bacon"}, ...],
      "links": [{"source": "Kevin Bacon", "target": "Footloose", "weight": 1.0}, ...]
    }
    ```

    Writes go to a sibling temp file and are moved into place with
    os.replace, so readers never see a half-written snapshot. All file I/O
    runs in a worker thread (asyncio.to_thread).
    """

    def __init__(self, path: Path | str = "data/graph.json"):
        self.path = Path(path)

    async def initialize(self) -> None:
        try:
            await asyncio.to_thread(self.path.parent.mkdir, parents=True, exist_ok=True)
        except OSError as exc:
            raise SnapshotPersistenceError(path=self.path, reason=str(exc)) from exc

    async def close(self) -> None:
        # Nothing to clean up for JSON persistence
        return None

    async def save_snapshot(self, graph: SerializedGraph) -> None:
        payload = json.dumps(graph.model_dump(mode="json"), indent=2)

        def _write() -> None:
            tmp_path = self.path.with_name(self.path.name + ".tmp")
            tmp_path.write_text(payload, "utf-8")
            os.replace(tmp_path, self.path)

        try:
            await asyncio.to_thread(_write)
        except OSError as exc:
            raise SnapshotPersistenceError(path=self.path, reason=str(exc)) from exc

    async def load_snapshot(self) -> Optional[SerializedGraph]:
        if not self.path.exists():
            return None

        try:
            raw = await asyncio.to_thread(self.path.read_text, "utf-8")
            return SerializedGraph.model_validate(json.loads(raw))
        except (OSError, json.JSONDecodeError, ValidationError) as exc:
            raise SnapshotPersistenceError(path=self.path, reason=str(exc)) from exc


__all__ = [
    "SnapshotStrategy",
    "InMemorySnapshots",
    "JsonSnapshotFile",
    "SnapshotPersistenceError",
]
