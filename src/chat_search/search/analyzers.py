"""Analyzer utilities for the chat search stack.

Text is turned into index terms by a composable tokenizer/filter pipeline,
the same shape Whoosh uses, kept small enough for chat-sized documents.
``tokenize`` is the single entry point the index, vectorizer and query engine
share, so documents and queries are always normalized identically.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
import re
from typing import Protocol


MIN_TERM_LENGTH = 3


@dataclass
class Token:
    """Represents a token emitted by analyzers."""

    text: str


class Tokenizer(Protocol):
    """Protocol implemented by tokenizers."""

    def __call__(self, text: str) -> Iterator[Token]:  # pragma: no cover - interface definition
        ...


class TokenFilter(Protocol):
    """Protocol implemented by token filters."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:  # pragma: no cover - interface definition
        ...


class RegexTokenizer:
    """Regex-based tokenizer that yields runs of ASCII word characters.

    Every other character, accented letters included, acts as a separator, so
    punctuation never ends up inside a term ("bug!" and "bug" index
    identically) and "café" yields "caf".
    """

    def __init__(self, pattern: str = r"\w+", flags: int = re.ASCII) -> None:
        self.pattern = re.compile(pattern, flags)

    def __call__(self, text: str) -> Iterator[Token]:
        for match in self.pattern.finditer(text):
            yield Token(text=match.group(0))


class MinLengthFilter:
    """Drops tokens shorter than ``min_length`` characters."""

    def __init__(self, min_length: int = MIN_TERM_LENGTH) -> None:
        self.min_length = min_length

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            if len(token.text) >= self.min_length:
                yield token


STOP_WORDS = frozenset(
    {
        "the",
        "and",
        "or",
        "but",
        "in",
        "on",
        "at",
        "to",
        "for",
        "of",
        "with",
        "by",
        "a",
        "an",
        "is",
        "are",
        "was",
        "were",
        "be",
        "been",
        "being",
        "have",
        "has",
        "had",
        "do",
        "does",
        "did",
        "will",
        "would",
        "could",
        "should",
        "may",
        "might",
        "must",
        "this",
        "that",
        "these",
        "those",
        "i",
        "you",
        "he",
        "she",
        "it",
        "we",
        "they",
        "me",
        "him",
        "her",
        "us",
        "them",
        "my",
        "your",
        "his",
        "its",
        "our",
        "their",
    }
)


class StopFilter:
    """Removes stopwords from the stream."""

    def __init__(self, stopwords: Iterable[str] = STOP_WORDS) -> None:
        self.stopwords = frozenset(word.lower() for word in stopwords)

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            if token.text not in self.stopwords:
                yield token


_NUMERIC = re.compile(r"\d+")


class NumericFilter:
    """Removes tokens made only of digits."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            if not _NUMERIC.fullmatch(token.text):
                yield token


class AnalyzerPipeline:
    """Composable analyzer pipeline (tokenizer + filters)."""

    def __init__(self, tokenizer: Tokenizer, filters: Sequence[TokenFilter] | None = None) -> None:
        self.tokenizer = tokenizer
        self.filters = list(filters or [])

    def __call__(self, text: str) -> list[Token]:
        stream: Iterable[Token] = self.tokenizer(text)
        for token_filter in self.filters:
            stream = token_filter(stream)
        return list(stream)


class ChatAnalyzer:
    """Analyzer for chat messages: lowercased word runs, length, stopword and digit filters.

    The filter chain and the stopword list are fixed. Changing either silently
    changes ranked output for an already persisted index.
    """

    def __init__(self) -> None:
        filters: list[TokenFilter] = [
            MinLengthFilter(MIN_TERM_LENGTH),
            StopFilter(STOP_WORDS),
            NumericFilter(),
        ]
        self.pipeline = AnalyzerPipeline(RegexTokenizer(), filters)

    def __call__(self, text: str) -> list[Token]:
        if not text:
            return []
        return self.pipeline(text.lower())


_DEFAULT_ANALYZER = ChatAnalyzer()


def tokenize(text: str) -> list[str]:
    """Return the index terms of ``text`` in order, duplicates included."""

    return [token.text for token in _DEFAULT_ANALYZER(text)]
