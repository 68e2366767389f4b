"""Emoji tokenization for indexing and query preparation.

Two views of an emoji sequence are produced:

* keyword tokens - every emoji cluster is looked up in the CLDR table shipped
  with the ``emoji`` package and its short name plus aliases are split into
  words (``😂`` -> ``face``, ``tears``, ``joy``). These feed TF-IDF scoring.
* canonical characters - the sequence with Unicode variation selectors
  removed, so ``❤️`` and ``❤`` compare equal during substring matching.
"""

from __future__ import annotations

from functools import lru_cache
import logging

import emoji

from emoji_search.search.analyzers import Analyzer, analyze_terms, get_analyzer


logger = logging.getLogger(__name__)

ZERO_WIDTH_JOINER = "\u200d"

# VS1-VS16 plus the ideographic variation selectors VS17-VS256
_VARIATION_SELECTOR_RANGES: tuple[tuple[int, int], ...] = (
    (0xFE00, 0xFE0F),
    (0xE0100, 0xE01EF),
)


def is_variation_selector(char: str) -> bool:
    code_point = ord(char)
    return any(low <= code_point <= high for low, high in _VARIATION_SELECTOR_RANGES)


def canonical_chars(sequence: str) -> str:
    """Return ``sequence`` with every variation-selector code point removed."""

    return "".join(char for char in sequence if not is_variation_selector(char))


def is_plain_query(query: str) -> bool:
    """A query is plain text when it is pure ASCII; anything else is an emoji query."""

    return query.isascii()


class EmojiTokenizer:
    """Convert emoji sequences and queries into keyword tokens."""

    def __init__(self, analyzer_name: str = "english-nostem") -> None:
        self.analyzer_name = analyzer_name
        self._analyzer: Analyzer = get_analyzer(analyzer_name)
        # keywords depend on the analyzer, so the cache is per instance
        self._cluster_keywords = lru_cache(maxsize=4096)(self._lookup_cluster)

    def keywords_of(self, sequence: str) -> list[str]:
        """Return keyword tokens for every recognised emoji in ``sequence``.

        Emoji missing from the table are dropped; text between emoji is ignored.
        """

        keywords: list[str] = []
        for match in emoji.emoji_list(sequence):
            keywords.extend(self._cluster_keywords(match["emoji"]))
        return keywords

    def query_terms(self, query: str) -> list[str]:
        """Return the TF-IDF lookup terms for a raw query string."""

        if is_plain_query(query):
            return analyze_terms(self._analyzer, query)
        return self.keywords_of(query)

    def _lookup_cluster(self, cluster: str) -> tuple[str, ...]:
        names = _table_names(cluster)
        if not names and ZERO_WIDTH_JOINER in cluster:
            # Non-RGI ZWJ sequences fall back to their components
            names = [name for part in cluster.split(ZERO_WIDTH_JOINER) for name in _table_names(part)]
        if not names:
            logger.debug("No keywords for emoji %r", cluster)
            return ()

        seen: set[str] = set()
        words: list[str] = []
        for name in names:
            for term in analyze_terms(self._analyzer, name):
                if term in seen:
                    continue
                seen.add(term)
                words.append(term)
        return tuple(words)


def _table_names(cluster: str) -> list[str]:
    data = emoji.EMOJI_DATA.get(cluster)
    if data is None:
        data = emoji.EMOJI_DATA.get(canonical_chars(cluster))
    if data is None:
        return []
    names = [data["en"], *data.get("alias", [])]
    return [name.strip(":") for name in names if name]
