"""Search core: normalization, storage, indexing, ranking and highlighting."""

from docs_search_core.search.analyzers import Token, normalize
from docs_search_core.search.document_store import DocumentStore, ingest
from docs_search_core.search.indexer import Index, IndexBuilder, build_index
from docs_search_core.search.loaders import load_records, parse_search_index
from docs_search_core.search.query_engine import QueryEngine, search
from docs_search_core.search.schema import Schema, TextField, create_default_schema
from docs_search_core.search.snapshot import IndexRegistry
from docs_search_core.search.snippet import highlight, highlight_document


__all__ = [
    "DocumentStore",
    "Index",
    "IndexBuilder",
    "IndexRegistry",
    "QueryEngine",
    "Schema",
    "TextField",
    "Token",
    "build_index",
    "create_default_schema",
    "highlight",
    "highlight_document",
    "ingest",
    "load_records",
    "normalize",
    "parse_search_index",
    "search",
]
