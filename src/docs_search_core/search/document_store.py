"""Validated, id-addressed storage for one corpus version.

Records arrive as an ordered sequence of mappings from the documentation
generator. Ingestion validates each record, assigns dense integer ids in
input order and freezes the result; a ``DocumentStore`` never changes after
``ingest`` returns.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
import logging
from types import MappingProxyType
from typing import Any

from pydantic import ValidationError

from docs_search_core.domain.errors import MalformedRecordError
from docs_search_core.domain.model import Document


logger = logging.getLogger(__name__)


class DocumentStore:
    """Immutable, ordered collection of documents keyed by id."""

    def __init__(
        self,
        documents: Sequence[Document],
        *,
        rejected: Sequence[MalformedRecordError] = (),
    ) -> None:
        self._documents: tuple[Document, ...] = tuple(documents)
        for expected_id, document in enumerate(self._documents):
            if document.id != expected_id:
                msg = f"Document ids must be dense and ordered; got {document.id} at slot {expected_id}"
                raise ValueError(msg)
        self.rejected: tuple[MalformedRecordError, ...] = tuple(rejected)

        by_location: dict[str, list[int]] = {}
        for document in self._documents:
            by_location.setdefault(document.location, []).append(document.id)
        self._by_location = MappingProxyType({loc: tuple(ids) for loc, ids in by_location.items()})

    def __len__(self) -> int:
        return len(self._documents)

    def __iter__(self) -> Iterator[Document]:
        return iter(self._documents)

    def __contains__(self, document_id: object) -> bool:
        return isinstance(document_id, int) and 0 <= document_id < len(self._documents)

    def __repr__(self) -> str:
        return f"DocumentStore({len(self._documents)} documents, {len(self.rejected)} rejected)"

    def get(self, document_id: int) -> Document:
        if document_id not in self:
            raise KeyError(f"Unknown document id: {document_id!r}")
        return self._documents[document_id]

    def all(self) -> tuple[Document, ...]:
        """All documents in insertion order."""

        return self._documents

    def by_location(self, location: str) -> tuple[Document, ...]:
        """Documents sharing ``location`` (generators may emit several per anchor)."""

        return tuple(self._documents[doc_id] for doc_id in self._by_location.get(location, ()))

    def pages(self) -> dict[str, tuple[Document, ...]]:
        """Group documents by page name, pages in first-seen order."""

        grouped: dict[str, list[Document]] = {}
        for document in self._documents:
            grouped.setdefault(document.page, []).append(document)
        return {page: tuple(documents) for page, documents in grouped.items()}


def ingest(records: Iterable[Any], *, strict: bool = False) -> DocumentStore:
    """Validate ``records`` and return a new ``DocumentStore``.

    Args:
        records: Ordered records (mappings with location/page/title/text/category).
        strict: Raise on the first malformed record instead of skipping it.

    Raises:
        MalformedRecordError: In strict mode, for the first unusable record.
    """

    documents: list[Document] = []
    rejected: list[MalformedRecordError] = []

    for position, record in enumerate(records):
        try:
            document = _validate_record(position, record, next_id=len(documents))
        except MalformedRecordError as exc:
            if strict:
                raise
            logger.warning("Skipping malformed record: %s", exc)
            rejected.append(exc)
            continue
        documents.append(document)

    if rejected:
        logger.info("Ingested %d documents, rejected %d records", len(documents), len(rejected))
    else:
        logger.debug("Ingested %d documents", len(documents))
    return DocumentStore(documents, rejected=rejected)


def _validate_record(position: int, record: Any, *, next_id: int) -> Document:
    if not isinstance(record, Mapping):
        raise MalformedRecordError(position, "<record>", f"must be a mapping, got {type(record).__name__}")

    payload = {str(key): value for key, value in record.items() if key != "id"}
    payload["id"] = next_id
    try:
        return Document.model_validate(payload)
    except ValidationError as exc:
        field, reason = _describe_validation_error(exc)
        raise MalformedRecordError(position, field, reason) from exc


def _describe_validation_error(exc: ValidationError) -> tuple[str, str]:
    first = exc.errors()[0]
    location = first.get("loc") or ()
    # The only model-level rule is the page/title requirement.
    field = ".".join(str(part) for part in location) or Document.HEADING_FIELD
    if first.get("type") == "missing":
        return field, "is missing"
    message = str(first.get("msg", "is invalid"))
    return field, message.removeprefix("Value error, ")
