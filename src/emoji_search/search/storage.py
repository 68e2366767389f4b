"""Snapshot persistence for the document store.

The document store hands over its whole state after every insert; stores
here only need to write it somewhere and give it back at startup:

* ``JsonSnapshotStore`` - one minified JSON file, replaced atomically
  (write to ``<name>.tmp`` then rename) so a crash never leaves half a file.
* ``InMemorySnapshotStore`` - keeps the last snapshot in memory; used when
  persistence is disabled and in tests.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
import copy
import logging
from pathlib import Path
from typing import Any

import orjson

from emoji_search.errors import PersistenceError


logger = logging.getLogger(__name__)


class SnapshotStore(ABC):
    """Persistence collaborator for full index snapshots."""

    @abstractmethod
    def load_snapshot(self) -> dict[str, Any] | None:
        """Return the last saved snapshot, or None when nothing was saved yet.

        Raises:
            PersistenceError: the stored snapshot exists but cannot be read.
        """
        raise NotImplementedError

    @abstractmethod
    def save_snapshot(self, snapshot: Mapping[str, Any]) -> None:
        """Replace the stored snapshot.

        Raises:
            PersistenceError: the snapshot could not be written.
        """
        raise NotImplementedError

    def describe(self) -> str:
        return type(self).__name__


class JsonSnapshotStore(SnapshotStore):
    """Persist snapshots as a single JSON document on disk."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def describe(self) -> str:
        return str(self.path)

    def load_snapshot(self) -> dict[str, Any] | None:
        if not self.path.exists():
            logger.info("No snapshot at %s; starting with an empty index", self.path)
            return None
        try:
            data = orjson.loads(self.path.read_bytes())
        except (OSError, orjson.JSONDecodeError) as exc:
            msg = f"Failed to read snapshot {self.path}: {exc}"
            raise PersistenceError(msg) from exc
        if not isinstance(data, dict):
            msg = f"Snapshot {self.path} does not contain a JSON object"
            raise PersistenceError(msg)
        return data

    def save_snapshot(self, snapshot: Mapping[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._atomic_write_json(self.path, snapshot)
        except (OSError, TypeError) as exc:
            msg = f"Failed to write snapshot {self.path}: {exc}"
            raise PersistenceError(msg) from exc

    def _atomic_write_json(self, path: Path, payload: Mapping[str, Any]) -> None:
        tmp_path = path.with_suffix(path.suffix + ".tmp") if path.suffix else path.with_name(path.name + ".tmp")
        serialized = orjson.dumps(dict(payload))
        tmp_path.write_bytes(serialized)
        tmp_path.replace(path)


class InMemorySnapshotStore(SnapshotStore):
    """Keep the latest snapshot in process memory."""

    def __init__(self, snapshot: Mapping[str, Any] | None = None) -> None:
        self._snapshot = copy.deepcopy(dict(snapshot)) if snapshot is not None else None
        self.save_count = 0

    def load_snapshot(self) -> dict[str, Any] | None:
        return copy.deepcopy(self._snapshot)

    def save_snapshot(self, snapshot: Mapping[str, Any]) -> None:
        self._snapshot = copy.deepcopy(dict(snapshot))
        self.save_count += 1


def create_snapshot_store(path: Path | None) -> SnapshotStore:
    """Return a file-backed store for ``path``, or an in-memory one when it is None."""

    if path is None:
        logger.info("Persistence disabled; snapshots are kept in memory only")
        return InMemorySnapshotStore()
    return JsonSnapshotStore(path)
