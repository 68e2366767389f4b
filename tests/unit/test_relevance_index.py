"""Unit tests for the in-memory TF-IDF relevance index."""

from __future__ import annotations

import math

import pytest

from emoji_search.search.relevance_index import DuplicateDocumentError, RelevanceIndex


@pytest.fixture
def index() -> RelevanceIndex:
    index = RelevanceIndex()
    index.insert("a", ["grinning", "face"])
    index.insert("b", ["smiling", "face", "sunglasses", "face"])
    return index


def test_insert_tracks_vectors_and_document_frequencies(index: RelevanceIndex) -> None:
    assert len(index) == 2
    assert list(index) == ["a", "b"]
    assert index.term_vector("b") == {"smiling": 1, "face": 2, "sunglasses": 1}
    assert index.document_frequency("face") == 2
    assert index.document_frequency("grinning") == 1
    assert index.vocabulary == {"grinning", "face", "smiling", "sunglasses"}


def test_duplicate_document_id_is_rejected(index: RelevanceIndex) -> None:
    with pytest.raises(DuplicateDocumentError):
        index.insert("a", ["face"])

    assert index.document_frequency("face") == 2


def test_document_without_keywords_is_indexed() -> None:
    index = RelevanceIndex()
    index.insert("empty", [])

    assert "empty" in index
    assert index.term_vector("empty") == {}


def test_idf_uses_current_document_count(index: RelevanceIndex) -> None:
    assert index.idf("grinning") == pytest.approx(1.0)
    assert index.idf("face") == pytest.approx(1 + math.log(2 / 3))

    index.insert("c", ["cat"])

    assert index.idf("grinning") == pytest.approx(1 + math.log(3 / 2))


def test_score_weights_term_frequency(index: RelevanceIndex) -> None:
    scores = index.score(["face"])

    assert set(scores) == {"a", "b"}
    assert scores["b"] == pytest.approx(2 * scores["a"])


def test_score_omits_documents_without_shared_terms(index: RelevanceIndex) -> None:
    assert set(index.score(["grinning"])) == {"a"}
    assert index.score(["unicorn"]) == {}
    assert index.score([]) == {}


def test_repeated_query_tokens_count_each_time(index: RelevanceIndex) -> None:
    single = index.score(["grinning"])["a"]
    double = index.score(["grinning", "grinning"])["a"]

    assert double == pytest.approx(2 * single)


def test_dict_round_trip_preserves_scores(index: RelevanceIndex) -> None:
    restored = RelevanceIndex.from_dict(index.to_dict())

    assert list(restored) == list(index)
    assert restored.document_frequency("face") == 2
    assert restored.score(["face", "sunglasses"]) == index.score(["face", "sunglasses"])
