"""Publication of index snapshots for concurrent readers.

Queries never lock: they read the current ``Index`` reference once and use
that snapshot until they are done. Publishing swaps the reference under a
lock, so a reader always sees either the previous or the new snapshot and
never a partially built one. Old snapshots stay alive for as long as a
reader holds them.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
import logging
import threading
from typing import Any

from docs_search_core.domain.errors import IndexNotReadyError
from docs_search_core.search.document_store import DocumentStore, ingest
from docs_search_core.search.indexer import Index, IndexBuilder


logger = logging.getLogger(__name__)


class IndexRegistry:
    """Holds the "current index" pointer for one corpus."""

    def __init__(self, builder: IndexBuilder | None = None, initial: Index | None = None) -> None:
        self._builder = builder or IndexBuilder()
        self._current: Index | None = initial
        self._generation = 1 if initial is not None else 0
        self._publish_lock = threading.Lock()

    @property
    def generation(self) -> int:
        """Number of snapshots published so far."""

        return self._generation

    def current(self) -> Index | None:
        return self._current

    def require(self) -> Index:
        index = self._current
        if index is None:
            raise IndexNotReadyError("No index snapshot has been published yet")
        return index

    @contextmanager
    def snapshot(self) -> Iterator[Index]:
        """Pin the current snapshot for the duration of the block."""

        yield self.require()

    def publish(self, index: Index) -> Index | None:
        """Atomically make ``index`` current and return the previous snapshot."""

        with self._publish_lock:
            previous = self._current
            self._current = index
            self._generation += 1
            generation = self._generation
        logger.info(
            "Published index generation %d (%d documents, fingerprint %s)",
            generation,
            index.document_count,
            index.fingerprint[:12],
        )
        return previous

    def rebuild(self, records: DocumentStore | Iterable[Mapping[str, Any]], *, strict: bool = False) -> Index:
        """Build a new snapshot and publish it.

        Building happens outside the lock; on failure the previous snapshot
        stays current and the error propagates.
        """

        store = records if isinstance(records, DocumentStore) else ingest(records, strict=strict)
        index = self._builder.build(store)
        self.publish(index)
        return index
