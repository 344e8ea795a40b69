"""Index building for a documentation corpus.

``IndexBuilder`` makes a single pass over a ``DocumentStore``, analyzing the
title, page and text of every document independently and recording one
posting per (token, document, field). The resulting ``Index`` is a frozen
snapshot: rebuilding produces a new value and never touches the old one, so
readers holding a snapshot can keep querying it while a newer one builds.
"""

from __future__ import annotations

from array import array
from bisect import bisect_left
from collections import defaultdict
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
import hashlib
import logging
from types import MappingProxyType
from typing import Any

import orjson

from docs_search_core.domain.model import Document, DocumentField
from docs_search_core.search.analyzers import normalize
from docs_search_core.search.document_store import DocumentStore, ingest
from docs_search_core.search.models import Posting, PostingList
from docs_search_core.search.schema import Schema, create_default_schema
from docs_search_core.search.stats import FieldLengthStats, compute_field_length_stats


logger = logging.getLogger(__name__)

_INDEX_FORMAT_VERSION = "v1-field-postings"


@dataclass(frozen=True, eq=False)
class Index:
    """Immutable inverted index over one corpus version."""

    schema: Schema
    store: DocumentStore
    postings: Mapping[str, PostingList]
    vocabulary: tuple[str, ...]
    field_lengths: Mapping[DocumentField, Mapping[int, int]]
    field_stats: Mapping[DocumentField, FieldLengthStats]
    fingerprint: str

    @property
    def document_count(self) -> int:
        return len(self.store)

    def __contains__(self, token: object) -> bool:
        return token in self.postings

    def get_postings(self, token: str) -> PostingList:
        """Postings for ``token``; an empty list when the token is not indexed."""

        return self.postings.get(token, _EMPTY_POSTINGS)

    def field_length(self, field: DocumentField, document_id: int) -> int:
        return self.field_lengths.get(field, {}).get(document_id, 0)

    def average_length(self, field: DocumentField) -> float:
        stats = self.field_stats.get(field)
        return stats.average_length if stats is not None else 0.0

    def expand(self, term: str, *, min_prefix_length: int = 1) -> Iterator[tuple[str, bool]]:
        """Yield ``(token, is_exact)`` for every indexed token matching ``term``.

        The exact token comes first (when indexed), followed by every longer
        token starting with ``term`` in lexicographic order. Each call returns
        a fresh generator, so the expansion can be restarted at will.
        """

        if not term:
            return
        start = bisect_left(self.vocabulary, term)
        if start < len(self.vocabulary) and self.vocabulary[start] == term:
            yield term, True
            start += 1
        if len(term) < min_prefix_length:
            return
        for idx in range(start, len(self.vocabulary)):
            candidate = self.vocabulary[idx]
            if not candidate.startswith(term):
                break
            yield candidate, False

    def prefix_terms(self, prefix: str, limit: int | None = None) -> list[str]:
        """Indexed tokens starting with ``prefix`` (exact token included)."""

        terms: list[str] = []
        for token, _is_exact in self.expand(prefix):
            if limit is not None and len(terms) >= limit:
                break
            terms.append(token)
        return terms


_EMPTY_POSTINGS = PostingList(())


class IndexBuilder:
    """Builds ``Index`` snapshots from document stores."""

    def __init__(self, schema: Schema | None = None) -> None:
        self.schema = schema or create_default_schema()

    def build(self, store: DocumentStore) -> Index:
        # token -> doc id -> field -> positions; doc ids arrive in increasing order
        raw: defaultdict[str, dict[int, dict[DocumentField, list[int]]]] = defaultdict(dict)
        field_lengths: dict[DocumentField, dict[int, int]] = {f.field: {} for f in self.schema}
        fingerprinter = _CorpusFingerprintBuilder(self.schema)

        for document in store:
            fingerprinter.add_document(document)
            for text_field in self.schema:
                tokens = normalize(document.field_value(text_field.field))
                field_lengths[text_field.field][document.id] = len(tokens)
                for token in tokens:
                    per_doc = raw[token.text].setdefault(document.id, {})
                    per_doc.setdefault(text_field.field, []).append(token.position)

        postings: dict[str, PostingList] = {}
        for token, doc_map in raw.items():
            postings[token] = PostingList(
                Posting(document_id=doc_id, field=text_field.field, positions=array("I", positions))
                for doc_id, per_field in doc_map.items()
                for text_field in self.schema
                if (positions := per_field.get(text_field.field))
            )

        frozen_lengths = MappingProxyType(
            {field_name: MappingProxyType(lengths) for field_name, lengths in field_lengths.items()}
        )
        index = Index(
            schema=self.schema,
            store=store,
            postings=MappingProxyType(postings),
            vocabulary=tuple(sorted(postings)),
            field_lengths=frozen_lengths,
            field_stats=MappingProxyType(compute_field_length_stats(frozen_lengths)),
            fingerprint=fingerprinter.digest(),
        )
        logger.info(
            "Built index: %d documents, %d tokens, fingerprint %s",
            index.document_count,
            len(index.vocabulary),
            index.fingerprint[:12],
        )
        return index


def build_index(
    records: DocumentStore | Iterable[Mapping[str, Any]],
    *,
    strict: bool = False,
    schema: Schema | None = None,
) -> Index:
    """Ingest ``records`` (unless already a store) and build an index over them."""

    store = records if isinstance(records, DocumentStore) else ingest(records, strict=strict)
    return IndexBuilder(schema).build(store)


class _CorpusFingerprintBuilder:
    """Deterministically hash indexed documents + schema so identical corpora match."""

    def __init__(self, schema: Schema) -> None:
        serialized_schema = orjson.dumps(schema.to_dict(), option=orjson.OPT_SORT_KEYS)
        self._root = hashlib.sha256()
        self._root.update(hashlib.sha256(_INDEX_FORMAT_VERSION.encode("utf-8")).digest())
        self._root.update(hashlib.sha256(serialized_schema).digest())

    def add_document(self, document: Document) -> None:
        serialized = orjson.dumps(
            document.model_dump(),
            option=orjson.OPT_SORT_KEYS | orjson.OPT_NON_STR_KEYS,
            default=str,
        )
        self._root.update(hashlib.sha256(serialized).digest())

    def digest(self) -> str:
        return self._root.hexdigest()
