"""Word analysis for emoji names and plain-text queries.

Emoji short names from the emoji table (``grinning_face``,
``face_with_tears_of_joy``) and ASCII queries pass through the same chain so
both sides of a TF-IDF lookup agree on word boundaries, casing, stopwords and
stems. A tokenizer yields ``Token`` objects; each filter maps one token
stream to another.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass, replace
import re
from typing import Protocol


@dataclass
class Token:
    """A word with its position in the analyzed text."""

    text: str
    position: int
    start_char: int
    end_char: int

    def copy_with(self, **updates: object) -> Token:
        return replace(self, **updates)  # type: ignore[arg-type]


class Analyzer(Protocol):
    def __call__(self, text: str) -> list[Token]:  # pragma: no cover - interface definition
        ...


class Tokenizer(Protocol):
    def __call__(self, text: str) -> Iterator[Token]:  # pragma: no cover - interface definition
        ...


class TokenFilter(Protocol):
    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:  # pragma: no cover - interface definition
        ...


# letters and digits; underscores separate words; keeps inner apostrophes (o'clock)
WORD_PATTERN = r"[^\W_]+(?:'[^\W_]+)?"


class RegexTokenizer:
    """Split text into word tokens with character offsets."""

    def __init__(self, pattern: str = WORD_PATTERN) -> None:
        self.pattern = re.compile(pattern)

    def __call__(self, text: str) -> Iterator[Token]:
        for position, match in enumerate(self.pattern.finditer(text)):
            yield Token(match.group(0), position, match.start(), match.end())


class LowercaseFilter:
    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            lowered = token.text.lower()
            yield token if lowered == token.text else token.copy_with(text=lowered)


# Function words that appear in many emoji names and carry no meaning on their own
DEFAULT_STOPWORDS = frozenset("a an and are as at be but by for in into is it of on or the to with".split())


class StopFilter:
    """Drop stopwords (case-insensitive)."""

    def __init__(self, stopwords: Iterable[str] | None = None) -> None:
        self.stopwords = frozenset(word.lower() for word in (DEFAULT_STOPWORDS if stopwords is None else stopwords))

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        return (token for token in tokens if token.text.lower() not in self.stopwords)


STEM_SUFFIXES: tuple[str, ...] = ("ingly", "edly", "ing", "ed", "ly", "s")


class SuffixStemFilter:
    """Light English stemmer: strip one inflection suffix, then a trailing ``e``.

    ``smile``, ``smiled`` and ``smiling`` all reduce to ``smil``. A stem never
    drops below ``min_stem`` characters.
    """

    def __init__(self, suffixes: Sequence[str] = STEM_SUFFIXES, *, min_stem: int = 3) -> None:
        self.suffixes = tuple(suffixes)
        self.min_stem = min_stem

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            yield token.copy_with(text=self.stem(token.text))

    def stem(self, word: str) -> str:
        suffix = next((s for s in self.suffixes if word.endswith(s) and len(word) - len(s) >= self.min_stem), "")
        if suffix:
            word = word[: -len(suffix)]
        if word.endswith("e") and len(word) > self.min_stem:
            word = word[:-1]
        return word


class AnalyzerPipeline:
    """Tokenizer followed by filters; positions are renumbered after filtering."""

    def __init__(self, tokenizer: Tokenizer, filters: Sequence[TokenFilter] = ()) -> None:
        self.tokenizer = tokenizer
        self.filters = tuple(filters)

    def __call__(self, text: str) -> list[Token]:
        stream: Iterable[Token] = self.tokenizer(text)
        for token_filter in self.filters:
            stream = token_filter(stream)
        return [token.copy_with(position=position) for position, token in enumerate(stream)]


class StandardAnalyzer(AnalyzerPipeline):
    """Lowercase, drop stopwords, optionally stem."""

    def __init__(self, *, stopwords: Iterable[str] | None = None, apply_stemming: bool = False) -> None:
        filters: list[TokenFilter] = [LowercaseFilter(), StopFilter(stopwords)]
        if apply_stemming:
            filters.append(SuffixStemFilter())
        super().__init__(RegexTokenizer(), filters)


ANALYZERS: dict[str, Callable[[], Analyzer]] = {
    "default": StandardAnalyzer,
    "english": lambda: StandardAnalyzer(apply_stemming=True),
    "english-nostem": StandardAnalyzer,
}


def get_analyzer(name: str | None) -> Analyzer:
    """Build the analyzer registered under ``name`` (``None`` means ``default``).

    Raises:
        ValueError: no analyzer has that name.
    """
    key = "default" if name is None else name.lower()
    try:
        factory = ANALYZERS[key]
    except KeyError:
        msg = f"Unknown analyzer {name!r}; choose one of {sorted(ANALYZERS)}"
        raise ValueError(msg) from None
    return factory()


def analyze_terms(analyzer: Analyzer, text: str) -> list[str]:
    """Return the non-empty token texts produced by ``analyzer``."""
    return [token.text for token in analyzer(text) if token.text]
