"""Unit tests for logging, tracing and metrics helpers."""

import io
import logging
import sys

import orjson
from prometheus_client import REGISTRY, CollectorRegistry, Counter
import pytest

from docs_search_core.domain.model import DocumentField
from docs_search_core.observability.context import bind_corpus, get_trace_context, set_trace_context
from docs_search_core.observability.logging import JsonFormatter, configure_logging
from docs_search_core.observability.metrics import (
    INDEX_DOC_COUNT,
    SEARCH_LATENCY,
    MetricBridge,
    get_metrics,
    track_latency,
)
from docs_search_core.observability.tracing import create_span


def _record(message: str = "hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord("docs_search_core.search.indexer", logging.INFO, __file__, 1, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.mark.unit
class TestJsonFormatter:
    def test_core_fields(self):
        entry = orjson.loads(JsonFormatter().format(_record("built index")))

        assert entry["message"] == "built index"
        assert entry["level"] == "INFO"
        assert entry["logger"] == "docs_search_core.search.indexer"
        assert len(entry["trace_id"]) == 32
        assert len(entry["span_id"]) == 16
        assert "corpus" not in entry

    def test_extra_fields(self):
        fields = frozenset({DocumentField.TITLE, DocumentField.TEXT})

        entry = orjson.loads(JsonFormatter().format(_record(documents=3, fields=fields, query="q" * 900)))

        assert entry["documents"] == 3
        assert entry["fields"] == ["text", "title"]
        assert len(entry["query"]) == JsonFormatter.MAX_FIELD_LEN + 3

    def test_corpus_from_trace_context(self):
        set_trace_context("a" * 32, "b" * 16, corpus="julia-docs")

        entry = orjson.loads(JsonFormatter().format(_record()))

        assert entry["corpus"] == "julia-docs"
        assert entry["trace_id"] == "a" * 32

    def test_bind_corpus_is_scoped(self):
        with bind_corpus("scoped-docs"):
            inside = orjson.loads(JsonFormatter().format(_record()))
        outside = orjson.loads(JsonFormatter().format(_record()))

        assert inside["corpus"] == "scoped-docs"
        assert "corpus" not in outside

    def test_long_messages_truncated(self):
        entry = orjson.loads(JsonFormatter().format(_record("x" * 5000)))

        assert len(entry["message"]) == JsonFormatter.MAX_MESSAGE_LEN + 3

    def test_exception_rendered(self):
        try:
            raise ValueError("bad record")
        except ValueError:
            record = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed", None, None)
            record.exc_info = sys.exc_info()

        entry = orjson.loads(JsonFormatter().format(record))

        assert "ValueError: bad record" in entry["exception"]


@pytest.mark.unit
class TestConfigureLogging:
    def test_installs_single_json_handler(self):
        configure_logging("debug", json_output=True, logger_levels={"noisy": "error"})

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JsonFormatter)
        assert logging.getLogger("noisy").level == logging.ERROR

    def test_unknown_level_falls_back_to_info(self):
        configure_logging("chatty", json_output=False)

        assert logging.getLogger().level == logging.INFO

    def test_writes_to_given_stream(self):
        stream = io.StringIO()
        configure_logging("info", json_output=True, stream=stream)

        logging.getLogger("docs_search_core.test").info("indexed %d documents", 4)

        assert orjson.loads(stream.getvalue().splitlines()[-1])["message"] == "indexed 4 documents"


@pytest.mark.unit
class TestTracing:
    def test_span_ids_flow_into_log_context(self):
        set_trace_context("0" * 32, "0" * 16, corpus="docs")

        with create_span("search.query", attributes={"limit": 5}) as span:
            ctx = get_trace_context()
            span_context = span.get_span_context()

        assert ctx["trace_id"] == format(span_context.trace_id, "032x")
        assert ctx["span_id"] == format(span_context.span_id, "016x")
        assert ctx["corpus"] == "docs"

    def test_exceptions_propagate(self):
        with pytest.raises(RuntimeError, match="boom"), create_span("index.build"):
            raise RuntimeError("boom")


@pytest.mark.unit
class TestMetrics:
    def test_track_latency_observes_once(self):
        labels = {"corpus": "observability-tests"}
        before = REGISTRY.get_sample_value("docs_search_query_seconds_count", labels) or 0.0

        with track_latency(SEARCH_LATENCY, **labels):
            pass

        assert REGISTRY.get_sample_value("docs_search_query_seconds_count", labels) == before + 1

    def test_track_latency_observes_failures(self):
        labels = {"corpus": "observability-failures"}
        before = REGISTRY.get_sample_value("docs_search_query_seconds_count", labels) or 0.0

        with pytest.raises(KeyError), track_latency(SEARCH_LATENCY, **labels):
            raise KeyError("missing")

        assert REGISTRY.get_sample_value("docs_search_query_seconds_count", labels) == before + 1

    def test_gauge_tracks_latest_value(self):
        INDEX_DOC_COUNT.labels(corpus="gauge-tests").set(10)
        INDEX_DOC_COUNT.labels(corpus="gauge-tests").set(4)

        assert REGISTRY.get_sample_value("docs_search_index_documents", {"corpus": "gauge-tests"}) == 4

    def test_unknown_metric_kind(self):
        counter = Counter("scratch_total", "scratch", ["corpus"], registry=CollectorRegistry())

        with pytest.raises(ValueError, match="Unknown metric kind"):
            MetricBridge(counter, name="scratch", description="scratch", kind="summary")

    def test_exposition_lists_search_metrics(self):
        assert b"docs_search_query_seconds" in get_metrics()
