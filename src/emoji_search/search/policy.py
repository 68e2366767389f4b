"""Result filtering, ordering and truncation."""

from __future__ import annotations

from collections.abc import Iterable
import logging

from emoji_search.domain.search import SearchOptions
from emoji_search.search.scoring import ScoredDocument


logger = logging.getLogger(__name__)


class ResultPolicy:
    """Apply the ranking rules of one request to scored documents.

    Rules run in a fixed order, each on the output of the previous one:

    1. drop documents whose combined measure is 0
    2. ``only_keep_perfect_match``: keep documents with ``measure2 == 1``
    3. otherwise ``truncate_small_matches``: keep the largest match lists
    4. otherwise ``truncate_small_score``: keep the highest combined measure
       (applied after rule 3 when both are enabled)
    5. stable sort by combined measure, descending
    6. truncate to ``limit``
    """

    def __init__(self, options: SearchOptions) -> None:
        self.options = options

    def apply(self, scored: Iterable[ScoredDocument]) -> list[ScoredDocument]:
        results = [entry for entry in scored if entry.measure != 0]

        if self.options.only_keep_perfect_match:
            results = [entry for entry in results if entry.measure2 == 1]
        else:
            if self.options.truncate_small_matches:
                results = self._keep_largest_match_lists(results)
            if self.options.truncate_small_score:
                results = self._keep_highest_measure(results)

        results.sort(key=lambda entry: entry.measure, reverse=True)
        if len(results) > self.options.limit:
            logger.debug("Truncating %d results to limit %d", len(results), self.options.limit)
        return results[: self.options.limit]

    @staticmethod
    def _keep_largest_match_lists(results: list[ScoredDocument]) -> list[ScoredDocument]:
        if not results:
            return results
        largest = max(entry.match_count for entry in results)
        return [entry for entry in results if entry.match_count == largest]

    @staticmethod
    def _keep_highest_measure(results: list[ScoredDocument]) -> list[ScoredDocument]:
        if not results:
            return results
        highest = max(entry.measure for entry in results)
        return [entry for entry in results if entry.measure == highest]
