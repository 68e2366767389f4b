"""Relevance measures for emoji search.

Two independent measures are computed for each stored document:

* ``measure1`` - TF-IDF similarity between the query's keyword tokens and the
  document's, normalized so the values sum to 1 across matching documents.
* ``measure2`` - substring overlap between the query's canonical characters
  and the document's, in ``[0, 1]``. Only emoji queries get one.

``combine`` folds both into the single measure used for ranking.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
import logging

from emoji_search.domain.model import Document
from emoji_search.domain.search import ResultEntry, SearchOptions
from emoji_search.search.emoji_tokenizer import EmojiTokenizer, canonical_chars, is_plain_query
from emoji_search.search.relevance_index import RelevanceIndex
from emoji_search.search.stats import normalize_scores


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubsetOverlap:
    """How much of the query a single document contains."""

    measure2: float
    matches: tuple[str, ...]


@dataclass(frozen=True)
class ScoredDocument:
    """A stored document with its measures for one query."""

    document: Document
    measure1: float
    measure2: float | None
    matches: tuple[str, ...] | None
    measure: float

    @property
    def doc_id(self) -> str:
        return self.document.doc_id

    @property
    def match_count(self) -> int:
        return len(self.matches) if self.matches else 0

    def to_result_entry(self) -> ResultEntry:
        return ResultEntry(
            doc_id=self.document.doc_id,
            emoji=self.document.emoji,
            meta=self.document.metadata,
            measure1=self.measure1,
            measure2=self.measure2,
            measure=self.measure,
            matches=list(self.matches) if self.matches is not None else None,
        )


def build_subsets(canonical_query: str, *, persist_order: bool) -> list[str]:
    """Return the query subsets that are looked up in each document.

    Without ``persist_order`` every character is its own subset. With it,
    every contiguous substring (all start/length combinations) is a subset,
    ordered by ascending length.
    """

    if not persist_order:
        return list(canonical_query)
    size = len(canonical_query)
    subsets = [
        canonical_query[start : start + length] for start in range(size) for length in range(1, size - start + 1)
    ]
    # sort is stable, so equal lengths keep their start order
    subsets.sort(key=len)
    return subsets


def subset_overlap(subsets: list[str], canonical_target: str) -> SubsetOverlap:
    """Score ``canonical_target`` against precomputed query subsets.

    Each subset found as a contiguous substring adds its length. The total is
    divided by the summed length of all subsets; an empty subset list scores 0.
    """

    length_sum = sum(len(subset) for subset in subsets)
    if length_sum == 0:
        return SubsetOverlap(measure2=0.0, matches=())

    total = 0
    matches: list[str] = []
    seen: set[str] = set()
    for subset in subsets:
        if subset not in canonical_target:
            continue
        total += len(subset)
        if subset not in seen:
            seen.add(subset)
            matches.append(subset)
    return SubsetOverlap(measure2=total / length_sum, matches=tuple(matches))


class ScoringEngine:
    """Compute per-document measures for a query against the shared index."""

    def __init__(self, index: RelevanceIndex, tokenizer: EmojiTokenizer) -> None:
        self.index = index
        self.tokenizer = tokenizer

    def measure1(self, query: str) -> dict[str, float]:
        """Normalized TF-IDF similarity for every document sharing a query term."""

        terms = self.tokenizer.query_terms(query)
        if not terms:
            return {}
        return normalize_scores(self.index.score(terms))

    def measure2(self, query: str, candidates: Mapping[str, str], *, persist_order: bool) -> dict[str, SubsetOverlap]:
        """Substring overlap for each candidate (doc id -> emoji sequence).

        Plain-text queries have no character overlap and return an empty mapping.
        """

        if is_plain_query(query):
            return {}
        subsets = build_subsets(canonical_chars(query), persist_order=persist_order)
        return {
            doc_id: subset_overlap(subsets, canonical_chars(sequence)) for doc_id, sequence in candidates.items()
        }

    @staticmethod
    def combine(measure1: float, measure2: float | None, enable_fuzzy_search: bool) -> float:
        return (measure1 if enable_fuzzy_search else 0.0) + (measure2 or 0.0)

    def score(self, query: str, documents: Iterable[Document], options: SearchOptions) -> list[ScoredDocument]:
        """Return every document with its measures, in the given order.

        Documents outside the TF-IDF result carry ``measure1 = 0``. When fuzzy
        search is disabled ``measure1`` is reported as 0.
        """

        candidates = {document.doc_id: document for document in documents}
        tfidf_scores = self.measure1(query)
        overlaps = self.measure2(
            query,
            {doc_id: document.emoji for doc_id, document in candidates.items()},
            persist_order=options.persist_order,
        )

        scored: list[ScoredDocument] = []
        for doc_id, document in candidates.items():
            measure1 = tfidf_scores.get(doc_id, 0.0) if options.enable_fuzzy_search else 0.0
            overlap = overlaps.get(doc_id)
            measure2 = overlap.measure2 if overlap is not None else None
            scored.append(
                ScoredDocument(
                    document=document,
                    measure1=measure1,
                    measure2=measure2,
                    matches=overlap.matches if overlap is not None else None,
                    measure=self.combine(measure1, measure2, options.enable_fuzzy_search),
                )
            )

        logger.debug(
            "Scored %d documents (%d with TF-IDF weight, overlap=%s)",
            len(scored),
            len(tfidf_scores),
            bool(overlaps),
        )
        return scored
