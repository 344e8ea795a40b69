"""Domain layer: value objects and the error taxonomy."""

from docs_search_core.domain.errors import (
    CorpusFormatError,
    IndexNotReadyError,
    InvalidArgumentError,
    MalformedRecordError,
    SearchEngineError,
)
from docs_search_core.domain.model import Category, Document, DocumentField, QueryResult


__all__ = [
    "Category",
    "CorpusFormatError",
    "Document",
    "DocumentField",
    "IndexNotReadyError",
    "InvalidArgumentError",
    "MalformedRecordError",
    "QueryResult",
    "SearchEngineError",
]
