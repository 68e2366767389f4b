"""Unit tests for TF-IDF stats helpers."""

from __future__ import annotations

import math

import pytest

from emoji_search.search.stats import calculate_idf, normalize_scores, term_frequencies, tfidf


def test_term_frequencies_counts_raw_occurrences() -> None:
    assert term_frequencies(["face", "grinning", "face", ""]) == {"face": 2, "grinning": 1}


def test_calculate_idf_formula() -> None:
    assert calculate_idf(doc_freq=1, total_docs=4) == pytest.approx(1 + math.log(2))


def test_calculate_idf_decreases_with_document_frequency() -> None:
    idf_rare = calculate_idf(doc_freq=1, total_docs=10)
    idf_common = calculate_idf(doc_freq=10, total_docs=10)

    assert idf_rare > idf_common > 0


def test_calculate_idf_of_empty_corpus_is_zero() -> None:
    assert calculate_idf(doc_freq=0, total_docs=0) == 0.0


def test_tfidf_ignores_absent_terms() -> None:
    assert tfidf(0, 2.5) == 0.0
    assert tfidf(3, 2.0) == 6.0


def test_normalize_scores_sums_to_one() -> None:
    normalized = normalize_scores({"a": 3.0, "b": 1.0})

    assert normalized == {"a": 0.75, "b": 0.25}
    assert sum(normalized.values()) == pytest.approx(1.0)


def test_normalize_scores_zero_total() -> None:
    assert normalize_scores({"a": 0.0, "b": 0.0}) == {"a": 0.0, "b": 0.0}
    assert normalize_scores({}) == {}
