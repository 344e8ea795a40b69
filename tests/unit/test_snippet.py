"""Unit tests for snippet highlighting."""

import pytest

from docs_search_core.config import SnippetConfig
from docs_search_core.domain.errors import InvalidArgumentError
from docs_search_core.domain.model import Document, DocumentField, QueryResult
from docs_search_core.search.document_store import ingest
from docs_search_core.search.indexer import build_index
from docs_search_core.search.query_engine import search
from docs_search_core.search.snippet import (
    find_window,
    highlight,
    highlight_document,
    mark_spans,
    matched_spans,
)


def _first(records, query):
    index = build_index(records)
    return index.store, search(index, index.store, query, 10)[0]


@pytest.mark.unit
class TestHighlight:
    def test_marks_matched_text_token(self, scenario_records):
        store, result = _first(scenario_records, "implicit")

        assert highlight(store, result, 160) == "detect [[implicit]] imports"

    def test_marks_every_match_in_window(self):
        store, result = _first(
            [{"location": "x", "title": "T", "text": "imports and more Imports"}],
            "imports",
        )

        assert highlight(store, result, 160) == "[[imports]] and more [[Imports]]"

    def test_prefix_match_highlights_whole_token(self, scenario_records):
        store, result = _first(scenario_records, "impl")

        assert highlight(store, result, 160) == "detect [[implicit]] imports"

    def test_title_only_match_falls_back_to_text_start(self, scenario_records):
        store = ingest(scenario_records)
        result = QueryResult(
            document_id=1,
            score=1.0,
            matched_fields=frozenset({DocumentField.TITLE}),
            positions={DocumentField.TITLE: (0,)},
        )

        assert highlight(store, result, 10) == "returns a "

    def test_window_zero_is_empty(self, scenario_records):
        store, result = _first(scenario_records, "implicit")

        assert highlight(store, result, 0) == ""

    @pytest.mark.parametrize("window_size", [-1, "10", 1.5])
    def test_invalid_window_raises(self, scenario_records, window_size):
        store, result = _first(scenario_records, "implicit")

        with pytest.raises(InvalidArgumentError):
            highlight(store, result, window_size)

    def test_unknown_document_gives_empty_snippet(self, scenario_records):
        store = ingest(scenario_records)

        assert highlight(store, QueryResult(document_id=99, score=1.0), 50) == ""

    def test_empty_text_gives_empty_snippet(self):
        store, result = _first([{"location": "x", "title": "Broadcasting"}], "broadcasting")

        assert highlight(store, result, 50) == ""

    def test_custom_markers(self, scenario_records):
        store, result = _first(scenario_records, "implicit")
        config = SnippetConfig(open_marker="<b>", close_marker="</b>")

        assert highlight(store, result, 160, config=config) == "detect <b>implicit</b> imports"

    def test_window_centered_on_first_match(self):
        text = "alpha " * 50 + "needle " + "omega " * 50
        store, result = _first([{"location": "x", "title": "T", "text": text}], "needle")

        snippet = highlight(store, result, 40)

        assert "[[needle]]" in snippet
        plain = snippet.replace("[[", "").replace("]]", "")
        assert len(plain) <= 40
        start = text.index(plain)
        assert text[start - 1] == " "
        assert plain.startswith("alpha")

    def test_window_near_end_of_text(self):
        text = "lorem ipsum dolor sit amet consectetur target"
        store, result = _first([{"location": "x", "title": "T", "text": text}], "target")

        snippet = highlight(store, result, 20)

        assert snippet.endswith("[[target]]")
        assert len(snippet.replace("[[", "").replace("]]", "")) <= 20

    def test_match_longer_than_window_is_cut(self):
        store, result = _first(
            [{"location": "x", "title": "T", "text": "supercalifragilistic word"}],
            "supercalifragilistic",
        )

        assert highlight(store, result, 5) == "[[super]]"

    def test_highlight_document_with_stale_positions(self):
        document = Document(id=0, location="x", title="T", text="short text")
        result = QueryResult(document_id=0, score=1.0, positions={DocumentField.TEXT: (7, 8)})

        assert highlight_document(document, result, 5) == "short"


@pytest.mark.unit
class TestSnippetHelpers:
    def test_matched_spans_ignores_out_of_range_positions(self):
        assert matched_spans("detect implicit imports", (1, 9, -1)) == [(7, 15)]
        assert matched_spans("", (0,)) == []

    def test_find_window_clamps_to_text(self):
        assert find_window("abc def", (0, 3), 100) == (0, 7)

    def test_find_window_snaps_to_word_boundary(self):
        text = "aaaa bbbb cccc dddd"

        start, end = find_window(text, (10, 14), 8)

        assert text[start:end] == "cccc d"

    def test_mark_spans_clips_to_window(self):
        text = "one two three"

        assert mark_spans(text, 4, 10, [(0, 3), (4, 7), (8, 13)], open_marker="<", close_marker=">") == "<two> <th>"
