"""Search data models: postings and restartable views over them."""

from __future__ import annotations

from array import array
from bisect import bisect_left
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from typing import Any, overload

from docs_search_core.domain.model import DocumentField


@dataclass(frozen=True, slots=True)
class Posting:
    """Occurrences of one token in one field of one document.

    Frequency is derived from len(positions); positions are token offsets
    within the field, in increasing order.
    """

    document_id: int
    field: DocumentField
    positions: array

    @property
    def frequency(self) -> int:
        return len(self.positions)

    def to_dict(self) -> dict[str, Any]:
        return {"d": self.document_id, "f": self.field.value, "p": list(self.positions)}


class PostingList(Sequence[Posting]):
    """Finite, restartable sequence of postings ordered by document id.

    Iterating twice yields the same postings; ``cursor()`` hands out an
    independent forward cursor so callers can stop early without
    materializing anything.
    """

    __slots__ = ("_doc_ids", "_postings")

    def __init__(self, postings: Iterable[Posting]) -> None:
        self._postings: tuple[Posting, ...] = tuple(postings)
        self._doc_ids = array("q", (posting.document_id for posting in self._postings))

    @overload
    def __getitem__(self, index: int) -> Posting: ...

    @overload
    def __getitem__(self, index: slice) -> Sequence[Posting]: ...

    def __getitem__(self, index):
        return self._postings[index]

    def __len__(self) -> int:
        return len(self._postings)

    def __iter__(self) -> Iterator[Posting]:
        return iter(self._postings)

    def __repr__(self) -> str:
        return f"PostingList({len(self._postings)} postings)"

    @property
    def document_frequency(self) -> int:
        """Number of distinct documents referenced by the list."""

        return len(set(self._doc_ids))

    def cursor(self) -> PostingsCursor:
        return PostingsCursor(self)

    def for_document(self, document_id: int) -> tuple[Posting, ...]:
        """All postings (one per field) for ``document_id``."""

        start = bisect_left(self._doc_ids, document_id)
        end = start
        while end < len(self._doc_ids) and self._doc_ids[end] == document_id:
            end += 1
        return self._postings[start:end]

    def _seek(self, document_id: int, lo: int) -> int:
        return bisect_left(self._doc_ids, document_id, lo)


class PostingsCursor:
    """Forward cursor over a ``PostingList``.

    State is just the index of the next posting, so creating a cursor is
    free and cursors never interfere with each other.
    """

    __slots__ = ("_index", "_postings")

    def __init__(self, postings: PostingList) -> None:
        self._postings = postings
        self._index = 0

    @property
    def exhausted(self) -> bool:
        return self._index >= len(self._postings)

    def peek(self) -> Posting | None:
        if self.exhausted:
            return None
        return self._postings[self._index]

    def next(self) -> Posting | None:
        posting = self.peek()
        if posting is not None:
            self._index += 1
        return posting

    def advance(self, min_document_id: int) -> Posting | None:
        """Skip to the first posting whose document id is >= ``min_document_id``."""

        self._index = self._postings._seek(min_document_id, self._index)
        return self.peek()

    def __iter__(self) -> Iterator[Posting]:
        while (posting := self.next()) is not None:
            yield posting
