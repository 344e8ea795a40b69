"""Error taxonomy for ingestion, indexing and querying."""

from __future__ import annotations


class SearchEngineError(Exception):
    """Base class for errors raised by the search core."""


class MalformedRecordError(SearchEngineError, ValueError):
    """Raised when an input record cannot become a document.

    ``position`` is the zero-based index of the record in the ingested
    sequence and ``field`` names the missing or invalid field.
    """

    def __init__(self, position: int, field: str, reason: str) -> None:
        self.position = position
        self.field = field
        self.reason = reason
        super().__init__(f"Record {position}: field '{field}' {reason}")


class InvalidArgumentError(SearchEngineError, ValueError):
    """Raised when a caller passes an out-of-range argument (negative limit or window)."""


class IndexNotReadyError(SearchEngineError, RuntimeError):
    """Raised when a search is attempted before any index snapshot was published."""


class CorpusFormatError(SearchEngineError, ValueError):
    """Raised when a serialized document collection cannot be parsed."""
