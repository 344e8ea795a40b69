"""Loaders for serialized documentation corpora.

Documenter.jl ships its corpus as ``search_index.js``::

    var documenterSearchIndex = {"docs":
    [{"location": "api/#API", "page": "API reference", "title": "API", "text": "", "category": "section"}, ...]
    }

``parse_search_index`` accepts that JavaScript form as well as plain JSON
(either the ``{"docs": [...]}`` object or a bare list of records).
"""

from __future__ import annotations

from collections.abc import Mapping
import logging
from pathlib import Path
import re
from typing import Any

import orjson

from docs_search_core.domain.errors import CorpusFormatError


logger = logging.getLogger(__name__)

_JS_ASSIGNMENT = re.compile(r"^\s*(?:var|let|const)\s+[A-Za-z_$][\w$]*\s*=\s*")
_DOCS_KEY = "docs"


def parse_search_index(payload: str | bytes) -> list[Any]:
    """Return the ordered record list contained in ``payload``.

    Raises:
        CorpusFormatError: The payload is not valid JSON/JS or holds no record list.
    """

    text = payload.decode("utf-8") if isinstance(payload, bytes) else payload
    body = _JS_ASSIGNMENT.sub("", text, count=1).strip().rstrip(";").strip()
    if not body:
        raise CorpusFormatError("Search index payload is empty")

    try:
        data = orjson.loads(body)
    except orjson.JSONDecodeError as exc:
        raise CorpusFormatError(f"Search index payload is not valid JSON: {exc}") from exc

    if isinstance(data, Mapping):
        if _DOCS_KEY not in data:
            raise CorpusFormatError(f"Search index object has no '{_DOCS_KEY}' key")
        data = data[_DOCS_KEY]
    if not isinstance(data, list):
        raise CorpusFormatError(f"Expected a list of records, got {type(data).__name__}")
    return data


def load_records(path: str | Path) -> list[Any]:
    """Read and parse a corpus file (``search_index.js`` or JSON)."""

    corpus_path = Path(path)
    records = parse_search_index(corpus_path.read_bytes())
    logger.info("Loaded %d records from %s", len(records), corpus_path)
    return records
