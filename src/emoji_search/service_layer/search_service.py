"""Search service orchestration layer.

Accepts documents into the store and runs searches against it:
scoring -> geofence -> result policy. Provides the high-level API the HTTP
app calls into, with metrics, spans and logging around every operation.
"""

from __future__ import annotations

from collections.abc import Mapping
import logging
from typing import Any

from emoji_search.config import Settings
from emoji_search.domain.search import ResultEntry, SearchOptions
from emoji_search.errors import PersistenceError
from emoji_search.observability.metrics import (
    DOCUMENTS_INSERTED,
    INDEX_DOC_COUNT,
    PERSISTENCE_FAILURES,
    SEARCH_COUNT,
    SEARCH_LATENCY,
    SEARCH_RESULTS,
    track_latency,
)
from emoji_search.observability.tracing import create_span
from emoji_search.search.emoji_tokenizer import EmojiTokenizer, is_plain_query
from emoji_search.search.geo import GeoFilter
from emoji_search.search.policy import ResultPolicy
from emoji_search.search.scoring import ScoringEngine
from emoji_search.search.storage import create_snapshot_store
from emoji_search.service_layer.document_store import DocumentStore


logger = logging.getLogger(__name__)


class SearchService:
    """High-level insert and search orchestration over one document store."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store
        INDEX_DOC_COUNT.set(len(store))

    @classmethod
    def from_settings(cls, settings: Settings) -> SearchService:
        """Build the store described by ``settings`` and restore its last snapshot.

        Raises:
            PersistenceError: the snapshot file exists but cannot be loaded.
        """
        tokenizer = EmojiTokenizer(settings.get_analyzer_name())
        snapshot_store = create_snapshot_store(settings.get_database_path())
        store = DocumentStore(tokenizer, snapshot_store=snapshot_store)
        if store.restore():
            logger.info("Restored %d documents from %s", len(store), snapshot_store.describe())
        return cls(store)

    def submit_document(self, emoji_sequence: str, metadata: Any = None) -> str:
        """Insert a document and return its id.

        Raises:
            ValidationError: the document was rejected; nothing was stored.
            PersistenceError: the document is searchable but the snapshot
                failed; ``exc.doc_id`` names it.
        """
        with create_span("document.insert") as span:
            try:
                doc_id = self.store.insert(emoji_sequence, metadata)
            except PersistenceError as exc:
                PERSISTENCE_FAILURES.inc()
                if exc.doc_id is not None:
                    DOCUMENTS_INSERTED.inc()
                    INDEX_DOC_COUNT.set(len(self.store))
                raise
            span.set_attribute("document.id", doc_id)

        DOCUMENTS_INSERTED.inc()
        INDEX_DOC_COUNT.set(len(self.store))
        return doc_id

    def run_search(
        self,
        query: str,
        options: SearchOptions | Mapping[str, Any] | None = None,
    ) -> list[ResultEntry]:
        """Rank stored documents against ``query``.

        Args:
            query: Emoji sequence, or ASCII text matched against emoji keywords
            options: Resolved options, or a raw mapping (camelCase or snake_case)

        Raises:
            ValidationError: ``options`` could not be resolved.
        """
        if not isinstance(options, SearchOptions):
            options = SearchOptions.from_mapping(options)

        kind = "text" if is_plain_query(query) else "emoji"
        SEARCH_COUNT.labels(kind=kind).inc()

        with (
            track_latency(SEARCH_LATENCY, kind=kind),
            create_span("search.run", attributes={"search.kind": kind, "search.limit": options.limit}) as span,
        ):
            with self.store.reading() as documents:
                engine = ScoringEngine(self.store.index, self.store.tokenizer)
                scored = engine.score(query, documents, options)

            geo_filter = GeoFilter(options.geofence)
            if geo_filter.active:
                scored = list(geo_filter.filter(scored, key=lambda entry: entry.document))

            ranked = ResultPolicy(options).apply(scored)
            span.set_attribute("search.results", len(ranked))

        SEARCH_RESULTS.observe(len(ranked))
        logger.debug("Search %r (%s) returned %d of %d documents", query, kind, len(ranked), len(documents))
        return [entry.to_result_entry() for entry in ranked]

    def stats(self) -> dict[str, Any]:
        """Return index statistics for the health endpoint."""
        snapshot_store = self.store.snapshot_store
        return {
            "documents": len(self.store),
            "vocabulary": len(self.store.index.vocabulary),
            "analyzer": self.store.tokenizer.analyzer_name,
            "persistence": snapshot_store.describe() if snapshot_store is not None else "disabled",
        }
