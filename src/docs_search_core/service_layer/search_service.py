"""Search service orchestration layer.

Ties together ingestion, index publication, ranking and snippet
highlighting for one corpus, and wraps each step with tracing, metrics
and logging. Queries run against whichever snapshot is current when they
start; rebuilds never block them.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from docs_search_core.config import Settings, get_settings
from docs_search_core.domain.model import Document, QueryResult
from docs_search_core.observability.context import bind_corpus
from docs_search_core.observability.metrics import (
    INDEX_BUILD_LATENCY,
    INDEX_DOC_COUNT,
    REJECTED_RECORDS,
    SEARCH_LATENCY,
    track_latency,
)
from docs_search_core.observability.tracing import create_span
from docs_search_core.search.document_store import ingest
from docs_search_core.search.indexer import Index, IndexBuilder
from docs_search_core.search.loaders import load_records
from docs_search_core.search.query_engine import QueryEngine
from docs_search_core.search.schema import create_default_schema
from docs_search_core.search.snapshot import IndexRegistry
from docs_search_core.search.snippet import highlight


if TYPE_CHECKING:
    from collections.abc import Iterable


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchHit:
    """One ranked result together with its document and snippet."""

    document: Document
    result: QueryResult
    snippet: str

    @property
    def score(self) -> float:
        return self.result.score

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.document.id,
            "location": self.document.location,
            "page": self.document.page,
            "title": self.document.title,
            "category": self.document.category.value,
            "score": round(self.result.score, 6),
            "matched_fields": sorted(field.value for field in self.result.matched_fields),
            "snippet": self.snippet,
        }


class SearchService:
    """High-level search API for a single documentation corpus."""

    def __init__(self, settings: Settings | None = None, registry: IndexRegistry | None = None) -> None:
        self.settings = settings or get_settings()
        self.corpus = self.settings.corpus_name
        self.engine = QueryEngine(self.settings.scoring)
        self.registry = registry or IndexRegistry(IndexBuilder(create_default_schema(self.settings.scoring)))

    @property
    def index(self) -> Index | None:
        return self.registry.current()

    def load_records(self, records: Iterable[Any], *, strict: bool | None = None) -> Index:
        """Ingest ``records``, build an index and publish it.

        Raises:
            MalformedRecordError: In strict mode, for the first unusable record;
                the previously published index stays current.
        """

        strict = self.settings.strict_ingest if strict is None else strict
        with (
            bind_corpus(self.corpus),
            create_span("index.build", attributes={"corpus": self.corpus, "strict": strict}) as span,
            track_latency(INDEX_BUILD_LATENCY, corpus=self.corpus),
        ):
            store = ingest(records, strict=strict)
            if store.rejected:
                REJECTED_RECORDS.labels(corpus=self.corpus).inc(len(store.rejected))
            index = self.registry.rebuild(store)
            span.set_attribute("documents", index.document_count)
            span.set_attribute("rejected", len(store.rejected))

        INDEX_DOC_COUNT.labels(corpus=self.corpus).set(index.document_count)
        logger.info(
            "Corpus %s ready: %d documents (%d rejected)",
            self.corpus,
            index.document_count,
            len(store.rejected),
        )
        return index

    def load_path(self, path: str | Path, *, strict: bool | None = None) -> Index:
        """Load a ``search_index.js``/JSON corpus file and publish its index."""

        return self.load_records(load_records(path), strict=strict)

    def search(self, query: str, limit: int | None = None, *, window_size: int | None = None) -> list[SearchHit]:
        """Rank the current snapshot for ``query`` and attach highlighted snippets.

        Raises:
            IndexNotReadyError: Nothing has been loaded yet.
            InvalidArgumentError: ``limit`` or ``window_size`` is invalid.
        """

        limit = self.settings.default_limit if limit is None else limit
        window_size = self.settings.snippet.window_size if window_size is None else window_size

        with (
            bind_corpus(self.corpus),
            create_span("search.query", attributes={"corpus": self.corpus, "limit": limit}) as span,
            track_latency(SEARCH_LATENCY, corpus=self.corpus),
            self.registry.snapshot() as index,
        ):
            results = self.engine.search(index, index.store, query, limit)
            hits = [
                SearchHit(
                    document=index.store.get(result.document_id),
                    result=result,
                    snippet=highlight(index.store, result, window_size, config=self.settings.snippet),
                )
                for result in results
            ]
            span.set_attribute("results", len(hits))

        logger.debug("Search %r on %s returned %d hits", query, self.corpus, len(hits))
        return hits

    async def search_async(
        self,
        query: str,
        limit: int | None = None,
        *,
        window_size: int | None = None,
    ) -> list[SearchHit]:
        """Run ``search`` in a worker thread so event loops stay responsive."""

        return await asyncio.to_thread(self.search, query, limit, window_size=window_size)

    def highlight(self, result: QueryResult, window_size: int | None = None) -> str:
        """Highlight ``result`` against the current snapshot's documents."""

        window_size = self.settings.snippet.window_size if window_size is None else window_size
        with self.registry.snapshot() as index:
            return highlight(index.store, result, window_size, config=self.settings.snippet)
