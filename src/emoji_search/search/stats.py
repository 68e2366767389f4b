"""Statistical helpers for TF-IDF style scoring.

The functions here stay independent of the index data structures so they can
be unit tested on their own.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping
import math


def term_frequencies(tokens: Iterable[str]) -> dict[str, int]:
    """Return raw term counts for a token stream."""

    return dict(Counter(token for token in tokens if token))


def calculate_idf(doc_freq: int, total_docs: int) -> float:
    """Return the inverse document frequency ``1 + ln(N / (1 + df))``.

    Strictly decreasing in ``doc_freq`` and positive for every
    ``0 <= doc_freq <= total_docs``, so a term shared by the whole corpus
    still contributes a little weight.
    """

    if total_docs <= 0:
        return 0.0
    df = max(0, min(doc_freq, total_docs))
    return 1.0 + math.log(total_docs / (1 + df))


def tfidf(tf: int, idf: float) -> float:
    if tf <= 0:
        return 0.0
    return tf * idf


def normalize_scores(raw_scores: Mapping[str, float]) -> dict[str, float]:
    """Divide every score by the sum of all scores.

    The result sums to 1 across the mapping, or is 0 everywhere when the sum
    is 0.
    """

    total = sum(raw_scores.values())
    if total <= 0:
        return {doc_id: 0.0 for doc_id in raw_scores}
    return {doc_id: score / total for doc_id, score in raw_scores.items()}
