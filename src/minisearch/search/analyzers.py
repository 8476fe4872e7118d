"""Tokenizer and term counter for the search stack.

Text is lower-cased as a whole and then split into maximal runs of Unicode
word characters (letters, digits, underscore). The same analysis runs at
index time and at query time so terms always line up.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
import re


_WORD_PATTERN = r"\w+"


@dataclass
class Token:
    """Represents a token emitted by the tokenizer."""

    text: str
    position: int
    start_char: int
    end_char: int


class RegexTokenizer:
    """Regex-based tokenizer that yields word tokens."""

    def __init__(self, pattern: str = _WORD_PATTERN, flags: int = re.UNICODE) -> None:
        self.pattern = re.compile(pattern, flags)

    def __call__(self, text: str) -> Iterator[Token]:
        position = 0
        for match in self.pattern.finditer(text):
            # Patterns such as r"\b\w*\b" match the empty string between boundaries
            if match.end() == match.start():
                continue
            yield Token(
                text=match.group(0),
                position=position,
                start_char=match.start(),
                end_char=match.end(),
            )
            position += 1


class WordAnalyzer:
    """Lower-case the input, then tokenize it into words."""

    def __init__(self, tokenizer: RegexTokenizer | None = None) -> None:
        self.tokenizer = tokenizer or RegexTokenizer()

    def __call__(self, text: str) -> list[Token]:
        if not text:
            return []
        return list(self.tokenizer(text.lower()))


_DEFAULT_ANALYZER = WordAnalyzer()


def tokenize(text: str) -> list[str]:
    """Return the normalized word tokens of ``text`` in input order."""

    return [token.text for token in _DEFAULT_ANALYZER(text)]


def count_terms(tokens: Iterable[str]) -> Counter[str]:
    """Return occurrence counts for each distinct token."""

    return Counter(tokens)
