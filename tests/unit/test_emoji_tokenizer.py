"""Unit tests for emoji keyword extraction and canonical characters."""

from __future__ import annotations

import pytest

from emoji_search.search.emoji_tokenizer import (
    EmojiTokenizer,
    canonical_chars,
    is_plain_query,
    is_variation_selector,
)


GRINNING = "\U0001F600"
SUNGLASSES = "\U0001F60E"
TEARS_OF_JOY = "\U0001F602"
HEART = "\u2764"
VS16 = "\ufe0f"


@pytest.mark.parametrize(
    ("char", "expected"),
    [
        ("\ufe00", True),
        (VS16, True),
        ("\U000E0100", True),
        ("\U000E01EF", True),
        ("\u200d", False),
        ("a", False),
        (GRINNING, False),
    ],
)
def test_is_variation_selector(char: str, expected: bool) -> None:
    assert is_variation_selector(char) is expected


def test_canonical_chars_removes_variation_selectors() -> None:
    assert canonical_chars(HEART + VS16 + GRINNING) == HEART + GRINNING
    assert canonical_chars(HEART + VS16) == canonical_chars(HEART)


def test_canonical_chars_keeps_other_characters() -> None:
    assert canonical_chars(GRINNING + "\u200d" + SUNGLASSES) == GRINNING + "\u200d" + SUNGLASSES


def test_is_plain_query() -> None:
    assert is_plain_query("grinning face")
    assert not is_plain_query(GRINNING)
    assert not is_plain_query("happy " + GRINNING)


def test_keywords_of_uses_emoji_short_name(tokenizer: EmojiTokenizer) -> None:
    keywords = tokenizer.keywords_of(GRINNING)

    assert "grinning" in keywords
    assert "face" in keywords
    assert len(keywords) == len(set(keywords))


def test_keywords_of_drops_stopwords(tokenizer: EmojiTokenizer) -> None:
    keywords = tokenizer.keywords_of(TEARS_OF_JOY)

    assert {"face", "tears", "joy"} <= set(keywords)
    assert "of" not in keywords
    assert "with" not in keywords


def test_keywords_of_sequence_concatenates_clusters(tokenizer: EmojiTokenizer) -> None:
    combined = tokenizer.keywords_of(GRINNING + SUNGLASSES)

    assert combined == tokenizer.keywords_of(GRINNING) + tokenizer.keywords_of(SUNGLASSES)
    assert combined.count("face") == 2


def test_keywords_of_ignores_text_between_emoji(tokenizer: EmojiTokenizer) -> None:
    assert tokenizer.keywords_of("hello " + GRINNING + " world") == tokenizer.keywords_of(GRINNING)
    assert tokenizer.keywords_of("hello world") == []


def test_keywords_of_zwj_sequence_covers_components(tokenizer: EmojiTokenizer) -> None:
    keywords = tokenizer.keywords_of(GRINNING + "\u200d" + SUNGLASSES)

    assert "grinning" in keywords
    assert "sunglasses" in keywords


def test_query_terms_for_plain_text(tokenizer: EmojiTokenizer) -> None:
    assert tokenizer.query_terms("Grinning Face") == ["grinning", "face"]
    assert tokenizer.query_terms("the") == []


def test_query_terms_for_emoji_query(tokenizer: EmojiTokenizer) -> None:
    assert tokenizer.query_terms(SUNGLASSES) == tokenizer.keywords_of(SUNGLASSES)


def test_stemming_applies_to_keywords_and_queries() -> None:
    stemming = EmojiTokenizer("english")

    assert stemming.query_terms("grinning") == ["grinn"]
    assert "grinn" in stemming.keywords_of(GRINNING)


def test_unknown_analyzer_is_rejected() -> None:
    with pytest.raises(ValueError):
        EmojiTokenizer("klingon")
