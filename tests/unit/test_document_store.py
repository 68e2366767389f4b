"""Unit tests for the document store and its index/persistence coupling."""

from __future__ import annotations

from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
import threading
from typing import Any

import pytest

from emoji_search.domain.model import Document
from emoji_search.errors import PersistenceError, ValidationError
from emoji_search.search.storage import InMemorySnapshotStore, JsonSnapshotStore, SnapshotStore
from emoji_search.service_layer.document_store import DocumentStore
from emoji_search.service_layer.search_service import SearchService


GRINNING = "\U0001F600"
SUNGLASSES = "\U0001F60E"


class FailingSnapshotStore(SnapshotStore):
    def load_snapshot(self) -> dict[str, Any] | None:
        return None

    def save_snapshot(self, snapshot: Mapping[str, Any]) -> None:
        raise PersistenceError("disk full")


def _stored(store: DocumentStore, doc_id: str) -> Document:
    with store.reading() as documents:
        return next(document for document in documents if document.doc_id == doc_id)


def test_insert_indexes_and_persists(store, snapshot_store) -> None:
    doc_id = store.insert(GRINNING, {"tag": "happy"})

    assert doc_id == "doc-1"
    assert len(store) == 1
    assert _stored(store, doc_id).metadata == {"tag": "happy"}
    assert doc_id in store.index
    assert store.index.term_vector(doc_id) == {keyword: 1 for keyword in store.tokenizer.keywords_of(GRINNING)}
    assert snapshot_store.save_count == 1
    assert snapshot_store.load_snapshot()["documents"] == [{"id": "doc-1", "emoji": GRINNING, "meta": {"tag": "happy"}}]


def test_duplicate_sequences_get_distinct_ids(store) -> None:
    first = store.insert(GRINNING)
    second = store.insert(GRINNING)

    assert first != second
    assert len(store) == 2
    assert len(store.index) == 2


def test_default_ids_are_unique(tokenizer) -> None:
    store = DocumentStore(tokenizer)

    ids = {store.insert(GRINNING) for _ in range(5)}

    assert len(ids) == 5


@pytest.mark.parametrize(
    ("emoji_sequence", "metadata"),
    [
        ("", None),
        (None, None),
        (GRINNING, "not-an-object"),
        (GRINNING, ["geolocation"]),
        (GRINNING, {"geolocation": {"latitude": 1.0}}),
        (GRINNING, {"geolocation": {"latitude": "1", "longitude": 1.0}}),
        (GRINNING, {"geolocation": {"latitude": 1.0, "longitude": 1.0, "altitude": 3.0}}),
        (GRINNING, {"n": 2**70}),
    ],
)
def test_invalid_documents_are_rejected_before_mutation(store, snapshot_store, emoji_sequence, metadata) -> None:
    with pytest.raises(ValidationError):
        store.insert(emoji_sequence, metadata)

    assert len(store) == 0
    assert len(store.index) == 0
    assert snapshot_store.save_count == 0


def test_null_geolocation_is_accepted(store) -> None:
    doc_id = store.insert(GRINNING, {"geolocation": None})

    assert _stored(store, doc_id).geolocation is None


def test_persistence_failure_keeps_document_searchable(tokenizer, sequential_ids) -> None:
    store = DocumentStore(tokenizer, snapshot_store=FailingSnapshotStore(), id_factory=sequential_ids)

    with pytest.raises(PersistenceError) as exc_info:
        store.insert(GRINNING)

    assert exc_info.value.doc_id == "doc-1"
    assert _stored(store, "doc-1").emoji == GRINNING
    assert "doc-1" in store.index


def test_store_without_persistence(tokenizer) -> None:
    store = DocumentStore(tokenizer)

    store.insert(GRINNING)

    assert store.restore() is False
    assert len(store) == 1


def test_reading_yields_documents_in_insertion_order(store) -> None:
    store.insert(GRINNING)
    store.insert(SUNGLASSES)

    with store.reading() as documents:
        assert [document.emoji for document in documents] == [GRINNING, SUNGLASSES]


def test_restore_round_trip(store, snapshot_store, tokenizer) -> None:
    store.insert(GRINNING, {"geolocation": {"latitude": 1.0, "longitude": 2.0}})
    store.insert(GRINNING + SUNGLASSES)

    restored = DocumentStore(tokenizer, snapshot_store=snapshot_store)

    assert restored.restore() is True
    assert len(restored) == 2
    assert _stored(restored, "doc-1").geolocation.longitude == 2.0
    assert restored.index.score(["sunglasses"]) == store.index.score(["sunglasses"])
    assert restored.snapshot() == store.snapshot()


def test_restore_with_empty_store(tokenizer) -> None:
    store = DocumentStore(tokenizer, snapshot_store=InMemorySnapshotStore())

    assert store.restore() is False


def test_load_rejects_unknown_version(store) -> None:
    with pytest.raises(PersistenceError, match="version"):
        store.load({"version": 99, "documents": [], "index": {}})


def test_load_rejects_index_mismatch(store) -> None:
    snapshot = {
        "version": 1,
        "documents": [{"id": "a", "emoji": GRINNING, "meta": None}],
        "index": {"documents": {"b": {"grinning": 1}}},
    }

    with pytest.raises(PersistenceError, match="disagree"):
        store.load(snapshot)
    assert len(store) == 0


def test_load_rejects_duplicate_ids(store) -> None:
    snapshot = {
        "version": 1,
        "documents": [{"id": "a", "emoji": GRINNING}, {"id": "a", "emoji": SUNGLASSES}],
        "index": {"documents": {"a": {"grinning": 1}}},
    }

    with pytest.raises(PersistenceError, match="duplicate"):
        store.load(snapshot)


@pytest.mark.parametrize(
    "documents",
    [
        [{"emoji": GRINNING}],
        [{"id": "a", "emoji": ""}],
        ["not-a-document"],
    ],
)
def test_load_rejects_malformed_documents(store, documents) -> None:
    with pytest.raises(PersistenceError, match="malformed"):
        store.load({"version": 1, "documents": documents, "index": {"documents": {}}})


def test_unencodable_metadata_does_not_block_later_snapshots(tokenizer, sequential_ids, tmp_path) -> None:
    snapshot_store = JsonSnapshotStore(tmp_path / "emoji.json")
    store = DocumentStore(tokenizer, snapshot_store=snapshot_store, id_factory=sequential_ids)

    with pytest.raises(ValidationError):
        store.insert(GRINNING, {"n": 2**70})
    doc_id = store.insert(SUNGLASSES, {"ok": 1})

    assert len(store) == 1
    assert snapshot_store.load_snapshot()["documents"] == [{"id": doc_id, "emoji": SUNGLASSES, "meta": {"ok": 1}}]


def test_concurrent_inserts_and_searches_stay_consistent(tokenizer) -> None:
    snapshot_store = InMemorySnapshotStore()
    store = DocumentStore(tokenizer, snapshot_store=snapshot_store)
    service = SearchService(store)
    writers_done = threading.Event()

    def write() -> None:
        for _ in range(10):
            service.submit_document(GRINNING + SUNGLASSES)

    def read() -> int:
        rounds = 0
        while rounds == 0 or not writers_done.is_set():
            with store.reading() as documents:
                assert {document.doc_id for document in documents} == set(store.index)
            results = service.run_search(GRINNING + SUNGLASSES, {"limit": 1000})
            assert all(entry.measure2 == 1.0 for entry in results)
            assert len({entry.doc_id for entry in results}) == len(results)
            rounds += 1
        return rounds

    with ThreadPoolExecutor(max_workers=12) as pool:
        readers = [pool.submit(read) for _ in range(4)]
        writers = [pool.submit(write) for _ in range(8)]
        try:
            for future in writers:
                future.result(timeout=60)
        finally:
            writers_done.set()
        for future in readers:
            assert future.result(timeout=60) > 0

    assert len(store) == 80
    assert set(store.index) == {document["id"] for document in snapshot_store.load_snapshot()["documents"]}
    assert snapshot_store.save_count == 80
    assert len(service.run_search(GRINNING + SUNGLASSES, {"limit": 1000})) == 80
