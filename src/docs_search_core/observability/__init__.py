"""Logging, tracing and metrics shared by the search core."""

from docs_search_core.observability.context import bind_corpus, get_trace_context, set_trace_context
from docs_search_core.observability.logging import JsonFormatter, configure_logging
from docs_search_core.observability.metrics import (
    INDEX_BUILD_LATENCY,
    INDEX_DOC_COUNT,
    REJECTED_RECORDS,
    SEARCH_LATENCY,
    MetricBridge,
    get_metrics,
    init_metrics,
    track_latency,
)
from docs_search_core.observability.tracing import create_span, get_tracer, init_tracing


__all__ = [
    "INDEX_BUILD_LATENCY",
    "INDEX_DOC_COUNT",
    "REJECTED_RECORDS",
    "SEARCH_LATENCY",
    "JsonFormatter",
    "MetricBridge",
    "bind_corpus",
    "configure_logging",
    "create_span",
    "get_metrics",
    "get_trace_context",
    "get_tracer",
    "init_metrics",
    "init_tracing",
    "set_trace_context",
    "track_latency",
]
