"""In-memory TF-IDF index over emoji keyword tokens.

One term-frequency vector is stored per document. Document frequencies are
maintained incrementally on insert; IDF weights are derived from them at
lookup time so every search reflects the full current document set.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Iterator, Mapping, Sequence
import logging
from typing import Any

from emoji_search.search.stats import calculate_idf, term_frequencies, tfidf


logger = logging.getLogger(__name__)


class DuplicateDocumentError(ValueError):
    """Raised when a document id is inserted twice."""


class RelevanceIndex:
    """Term-frequency vectors keyed by document id."""

    def __init__(self) -> None:
        self._vectors: dict[str, dict[str, int]] = {}
        self._doc_freq: Counter[str] = Counter()

    def __len__(self) -> int:
        return len(self._vectors)

    def __contains__(self, doc_id: object) -> bool:
        return doc_id in self._vectors

    def __iter__(self) -> Iterator[str]:
        return iter(self._vectors)

    @property
    def vocabulary(self) -> frozenset[str]:
        return frozenset(self._doc_freq)

    def term_vector(self, doc_id: str) -> Mapping[str, int]:
        return dict(self._vectors.get(doc_id, {}))

    def document_frequency(self, term: str) -> int:
        return self._doc_freq.get(term, 0)

    def insert(self, doc_id: str, keyword_tokens: Iterable[str]) -> None:
        """Record the term-frequency vector for a new document."""

        if doc_id in self._vectors:
            msg = f"Document {doc_id!r} is already indexed"
            raise DuplicateDocumentError(msg)
        vector = term_frequencies(keyword_tokens)
        self._vectors[doc_id] = vector
        self._doc_freq.update(vector.keys())

    def idf(self, term: str) -> float:
        return calculate_idf(self._doc_freq.get(term, 0), len(self._vectors))

    def score(self, query_tokens: Sequence[str]) -> dict[str, float]:
        """Return raw TF-IDF scores for every document sharing a query token.

        Each query token contributes ``tf(token, doc) * idf(token)``; repeated
        query tokens contribute once per occurrence. Documents scoring zero are
        omitted. Iteration order follows insertion order.
        """

        terms = [token for token in query_tokens if token in self._doc_freq]
        if not terms:
            return {}

        weights = {term: self.idf(term) for term in set(terms)}
        scores: dict[str, float] = {}
        for doc_id, vector in self._vectors.items():
            total = 0.0
            for term in terms:
                total += tfidf(vector.get(term, 0), weights[term])
            if total > 0:
                scores[doc_id] = total
        return scores

    def to_dict(self) -> dict[str, Any]:
        return {"documents": {doc_id: dict(vector) for doc_id, vector in self._vectors.items()}}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RelevanceIndex:
        index = cls()
        for doc_id, vector in (data.get("documents") or {}).items():
            frequencies = {str(term): int(count) for term, count in vector.items() if int(count) > 0}
            index._vectors[str(doc_id)] = frequencies
            index._doc_freq.update(frequencies.keys())
        logger.debug("Restored relevance index with %d documents", len(index))
        return index
