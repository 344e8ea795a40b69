"""Service layer: orchestration of ingestion, indexing, search and highlighting."""

from docs_search_core.service_layer.search_service import SearchHit, SearchService


__all__ = ["SearchHit", "SearchService"]
