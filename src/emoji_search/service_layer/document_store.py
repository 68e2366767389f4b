"""Document store - owns documents and keeps the relevance index in step.

Every document id in the store has exactly one entry in the relevance index
and vice versa. Both are mutated together under the write side of a
readers-writer lock, so a search holding the read side never observes a
half-inserted document.

Persistence runs after the in-memory commit. Inserts are serialized by a
separate lock that is also held while the snapshot is written, so snapshots
reach disk in insert order while searches only wait for the in-memory
mutation itself.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
import logging
import threading
from typing import Any
from uuid import uuid4

from emoji_search.domain.model import Document
from emoji_search.errors import PersistenceError
from emoji_search.search.emoji_tokenizer import EmojiTokenizer
from emoji_search.search.relevance_index import RelevanceIndex
from emoji_search.search.storage import SnapshotStore
from emoji_search.service_layer.locking import ReadWriteLock


logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


def _new_document_id() -> str:
    return str(uuid4())


class DocumentStore:
    """Append-only mapping of document id to emoji sequence and metadata."""

    def __init__(
        self,
        tokenizer: EmojiTokenizer,
        *,
        index: RelevanceIndex | None = None,
        snapshot_store: SnapshotStore | None = None,
        id_factory: Callable[[], str] = _new_document_id,
    ) -> None:
        self.tokenizer = tokenizer
        self.index = index if index is not None else RelevanceIndex()
        self.snapshot_store = snapshot_store
        self._id_factory = id_factory
        self._documents: dict[str, Document] = {}
        self._rw_lock = ReadWriteLock()
        self._insert_lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._documents)

    @contextmanager
    def reading(self) -> Iterator[list[Document]]:
        """Hold the read lock and yield the documents in insertion order.

        The relevance index is consistent with the yielded documents until the
        block exits.
        """
        with self._rw_lock.read():
            yield list(self._documents.values())

    def insert(self, emoji_sequence: str, metadata: Any = None) -> str:
        """Validate, index and persist a new document; return its id.

        Raises:
            ValidationError: empty sequence or malformed metadata. Nothing is
                stored.
            PersistenceError: the snapshot could not be written. The document
                is already searchable; ``exc.doc_id`` carries its id.
        """
        with self._insert_lock:
            doc_id = self._id_factory()
            document = Document.create(doc_id, emoji_sequence, metadata)
            keywords = self.tokenizer.keywords_of(document.emoji)

            with self._rw_lock.write():
                self.index.insert(doc_id, keywords)
                self._documents[doc_id] = document
                snapshot = self._snapshot_unlocked()

            logger.info("Indexed document %s (%d keywords)", doc_id, len(keywords))
            self._persist(snapshot, doc_id)
        return doc_id

    def snapshot(self) -> dict[str, Any]:
        """Return the full serializable state of documents and index."""
        with self._rw_lock.read():
            return self._snapshot_unlocked()

    def load(self, snapshot: Mapping[str, Any]) -> None:
        """Replace the in-memory state with ``snapshot``.

        Raises:
            PersistenceError: unknown version, malformed documents, or a
                document set that disagrees with the index.
        """
        version = snapshot.get("version", SNAPSHOT_VERSION)
        if version != SNAPSHOT_VERSION:
            msg = f"Unsupported snapshot version {version!r}"
            raise PersistenceError(msg)

        try:
            documents = [Document.from_dict(entry) for entry in snapshot.get("documents") or []]
            index = RelevanceIndex.from_dict(snapshot.get("index") or {})
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            msg = f"Snapshot is malformed: {exc}"
            raise PersistenceError(msg) from exc

        document_ids = {document.doc_id for document in documents}
        if len(document_ids) != len(documents):
            raise PersistenceError("Snapshot contains duplicate document ids")
        if document_ids != set(index):
            missing = len(document_ids.symmetric_difference(index))
            msg = f"Snapshot documents and relevance index disagree on {missing} id(s)"
            raise PersistenceError(msg)

        with self._rw_lock.write():
            self._documents = {document.doc_id: document for document in documents}
            self.index = index
        logger.info("Loaded %d documents from snapshot", len(documents))

    def restore(self) -> bool:
        """Load the snapshot from the configured store, if any; return True when loaded."""
        if self.snapshot_store is None:
            return False
        snapshot = self.snapshot_store.load_snapshot()
        if snapshot is None:
            return False
        self.load(snapshot)
        return True

    def _snapshot_unlocked(self) -> dict[str, Any]:
        return {
            "version": SNAPSHOT_VERSION,
            "documents": [document.to_dict() for document in self._documents.values()],
            "index": self.index.to_dict(),
        }

    def _persist(self, snapshot: dict[str, Any], doc_id: str) -> None:
        if self.snapshot_store is None:
            return
        try:
            self.snapshot_store.save_snapshot(snapshot)
        except PersistenceError as exc:
            logger.error("Document %s is indexed in memory but the snapshot was not saved: %s", doc_id, exc)
            raise PersistenceError(str(exc), doc_id=doc_id) from exc
