"""Full-text search over Documenter-style documentation corpora."""

from docs_search_core.config import ScoringConfig, Settings, SnippetConfig, get_settings
from docs_search_core.domain import (
    Category,
    CorpusFormatError,
    Document,
    DocumentField,
    IndexNotReadyError,
    InvalidArgumentError,
    MalformedRecordError,
    QueryResult,
    SearchEngineError,
)
from docs_search_core.search import (
    DocumentStore,
    Index,
    IndexBuilder,
    IndexRegistry,
    QueryEngine,
    build_index,
    highlight,
    highlight_document,
    ingest,
    load_records,
    normalize,
    parse_search_index,
    search,
)
from docs_search_core.service_layer import SearchHit, SearchService


__version__ = "0.1.0"

__all__ = [
    "Category",
    "CorpusFormatError",
    "Document",
    "DocumentField",
    "DocumentStore",
    "Index",
    "IndexBuilder",
    "IndexNotReadyError",
    "IndexRegistry",
    "InvalidArgumentError",
    "MalformedRecordError",
    "QueryEngine",
    "QueryResult",
    "ScoringConfig",
    "SearchEngineError",
    "SearchHit",
    "SearchService",
    "Settings",
    "SnippetConfig",
    "__version__",
    "build_index",
    "get_settings",
    "highlight",
    "highlight_document",
    "ingest",
    "load_records",
    "normalize",
    "parse_search_index",
    "search",
]
