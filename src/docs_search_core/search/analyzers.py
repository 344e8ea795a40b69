"""Text normalization for indexing and querying.

A tokenizer cuts text into tokens that remember where they came from in
the original string; filters then rewrite token text. One shared pipeline
runs over documents and queries, so casing and accents are handled
identically on both sides.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass, replace
import re
import unicodedata
from typing import Any


@dataclass(frozen=True, slots=True)
class Token:
    """A normalized token.

    ``position`` is the token's index within its field; ``start_char`` and
    ``end_char`` delimit the source text it was produced from.
    """

    text: str
    position: int
    start_char: int
    end_char: int

    def copy_with(self, **updates: Any) -> Token:
        return replace(self, **updates)


Tokenizer = Callable[[str], Iterable[Token]]
TokenFilter = Callable[[Iterable[Token]], Iterable[Token]]


# Combining diacritical mark blocks; kept inside tokens so decomposed input is not split.
_COMBINING_MARKS = "\u0300-\u036f\u1ab0-\u1aff\u1dc0-\u1dff\u20d0-\u20ff\ufe20-\ufe2f"
_WORD_PATTERN = re.compile(rf"(?:[^\W_]|[{_COMBINING_MARKS}])+")


class AlphanumericTokenizer:
    """Split on every non-alphanumeric character (underscores included)."""

    def __call__(self, text: str) -> Iterator[Token]:
        for position, match in enumerate(_WORD_PATTERN.finditer(text)):
            yield Token(match.group(), position, match.start(), match.end())


class CaseFoldFilter:
    """Case-fold token text (``ß`` becomes ``ss``)."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            folded = token.text.casefold()
            yield token if folded == token.text else token.copy_with(text=folded)


class AccentFoldFilter:
    """Strip diacritics down to base letters; tokens left empty are dropped."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            folded = fold_accents(token.text)
            if folded == token.text:
                yield token
            elif folded:
                yield token.copy_with(text=folded)


def fold_accents(text: str) -> str:
    if text.isascii():
        return text
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch) and ch.isalnum())


class AnalyzerPipeline:
    """A tokenizer followed by token filters.

    Positions are renumbered after filtering so they stay contiguous when a
    filter drops tokens.
    """

    def __init__(self, tokenizer: Tokenizer, filters: Sequence[TokenFilter] = ()) -> None:
        self.tokenizer = tokenizer
        self.filters = tuple(filters)

    def __call__(self, text: str) -> list[Token]:
        stream = self.tokenizer(text)
        for token_filter in self.filters:
            stream = token_filter(stream)
        return [
            token if token.position == position else token.copy_with(position=position)
            for position, token in enumerate(stream)
        ]


class StandardAnalyzer(AnalyzerPipeline):
    """Alphanumeric split, case folding, accent folding. No stopwords, no stemming."""

    def __init__(self) -> None:
        super().__init__(AlphanumericTokenizer(), (CaseFoldFilter(), AccentFoldFilter()))

    def __call__(self, text: str) -> list[Token]:
        return super().__call__(text) if text else []


_DEFAULT_ANALYZER = StandardAnalyzer()


def normalize(text: str) -> list[Token]:
    """Return the canonical token sequence for ``text``.

    Each token keeps ``start_char`` (its offset in the original string)
    and ``end_char`` so matches can be highlighted later. Empty input
    yields an empty list.
    """

    return _DEFAULT_ANALYZER(text)
