"""Snippet extraction with highlighted matches.

A snippet is a bounded window of a document's text centered on the first
matched text token. Every matched token inside the window is wrapped with
the configured markers (``[[term]]`` by default); markers do not count
toward the window size.
"""

from __future__ import annotations

from collections.abc import Sequence
import logging
import re

from docs_search_core.config import SnippetConfig
from docs_search_core.domain.errors import InvalidArgumentError
from docs_search_core.domain.model import Document, DocumentField, QueryResult
from docs_search_core.search.analyzers import normalize
from docs_search_core.search.document_store import DocumentStore


logger = logging.getLogger(__name__)

# Word boundary pattern used to avoid starting a snippet mid-word
WORD_BOUNDARY_PATTERN = re.compile(r"\s+")

_DEFAULT_CONFIG = SnippetConfig()


def matched_spans(text: str, positions: Sequence[int]) -> list[tuple[int, int]]:
    """Map token positions of ``text`` back to ``(start_char, end_char)`` spans.

    Positions that do not exist in ``text`` are ignored.
    """

    if not text or not positions:
        return []
    tokens = normalize(text)
    spans = {
        (tokens[position].start_char, tokens[position].end_char)
        for position in positions
        if 0 <= position < len(tokens)
    }
    return sorted(spans)


def find_window(text: str, span: tuple[int, int], window_size: int) -> tuple[int, int]:
    """Return ``(start, end)`` of a window of at most ``window_size`` chars around ``span``.

    The window is centered on the span, shifted to stay inside the text and
    moved forward to a word boundary when it would start mid-word.
    """

    match_start, match_end = span
    match_length = match_end - match_start
    if match_length >= window_size:
        return match_start, match_start + window_size

    lead = (window_size - match_length) // 2
    start = max(0, match_start - lead)
    end = min(len(text), start + window_size)
    start = max(0, end - window_size)

    if 0 < start < match_start and not text[start - 1].isspace():
        boundary = WORD_BOUNDARY_PATTERN.search(text, start, match_start)
        if boundary:
            start = boundary.end()
    return start, end


def mark_spans(
    text: str,
    start: int,
    end: int,
    spans: Sequence[tuple[int, int]],
    *,
    open_marker: str,
    close_marker: str,
) -> str:
    """Return ``text[start:end]`` with every span (clipped to the window) wrapped in markers."""

    pieces: list[str] = []
    cursor = start
    for span_start, span_end in spans:
        clipped_start = max(span_start, start)
        clipped_end = min(span_end, end)
        if clipped_start >= clipped_end or clipped_start < cursor:
            continue
        pieces.append(text[cursor:clipped_start])
        pieces.append(f"{open_marker}{text[clipped_start:clipped_end]}{close_marker}")
        cursor = clipped_end
    pieces.append(text[cursor:end])
    return "".join(pieces)


def highlight_document(
    document: Document,
    result: QueryResult,
    window_size: int,
    *,
    config: SnippetConfig | None = None,
) -> str:
    """Build the highlighted snippet for ``document``.

    Falls back to the start of the text when the result has no text-field
    match (for example a title-only hit). Empty text yields ``""``.

    Raises:
        InvalidArgumentError: ``window_size`` is negative or not an integer.
    """

    _validate_window(window_size)
    config = config or _DEFAULT_CONFIG
    text = document.text
    if not text or window_size == 0:
        return ""

    spans = matched_spans(text, result.positions_for(DocumentField.TEXT))
    if not spans:
        return text[:window_size]

    start, end = find_window(text, spans[0], window_size)
    return mark_spans(
        text,
        start,
        end,
        spans,
        open_marker=config.open_marker,
        close_marker=config.close_marker,
    )


def highlight(
    store: DocumentStore,
    result: QueryResult,
    window_size: int,
    *,
    config: SnippetConfig | None = None,
) -> str:
    """Look up the result's document in ``store`` and highlight it.

    Unknown document ids yield an empty snippet.
    """

    _validate_window(window_size)
    try:
        document = store.get(result.document_id)
    except KeyError:
        logger.debug("No document %s in store; returning empty snippet", result.document_id)
        return ""
    return highlight_document(document, result, window_size, config=config)


def _validate_window(window_size: object) -> None:
    if isinstance(window_size, bool) or not isinstance(window_size, int):
        msg = f"window_size must be an integer, got {type(window_size).__name__}"
        raise InvalidArgumentError(msg)
    if window_size < 0:
        msg = f"window_size must be >= 0, got {window_size}"
        raise InvalidArgumentError(msg)
