"""OpenTelemetry spans around index builds and queries."""

from __future__ import annotations

from contextlib import contextmanager
import logging
from typing import TYPE_CHECKING, Any

from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import SpanProcessor, TracerProvider
from opentelemetry.trace import SpanKind, Status, StatusCode

from docs_search_core.observability.context import update_trace_context


if TYPE_CHECKING:
    from collections.abc import Generator, Sequence

    from opentelemetry.trace import Span, Tracer

logger = logging.getLogger(__name__)

_provider: TracerProvider | None = None


def init_tracing(
    service_name: str = "docs-search-core",
    resource_attributes: dict[str, str] | None = None,
    span_processors: Sequence[SpanProcessor] = (),
) -> TracerProvider:
    """Create the tracer provider used by ``create_span``.

    The provider is not installed as the global one, so an embedding
    application keeps its own OpenTelemetry setup. Spans are only exported
    through the ``span_processors`` passed here.
    """
    global _provider
    provider = TracerProvider(resource=Resource.create({"service.name": service_name, **(resource_attributes or {})}))
    for processor in span_processors:
        provider.add_span_processor(processor)
    _provider = provider
    logger.debug("Tracing initialized for %s with %d span processors", service_name, len(span_processors))
    return provider


def get_tracer() -> Tracer:
    provider = _provider or init_tracing()
    return provider.get_tracer("docs_search_core")


@contextmanager
def create_span(
    name: str,
    kind: SpanKind = SpanKind.INTERNAL,
    attributes: dict[str, Any] | None = None,
) -> Generator[Span, None, None]:
    """Run the block inside a span whose ids are copied into the log context.

    Exceptions mark the span as failed and propagate unchanged.
    """
    with get_tracer().start_as_current_span(
        name,
        kind=kind,
        attributes=attributes,
        record_exception=False,
        set_status_on_exception=False,
    ) as span:
        span_context = span.get_span_context()
        update_trace_context(format(span_context.trace_id, "032x"), format(span_context.span_id, "016x"))
        try:
            yield span
        except Exception as exc:
            span.record_exception(exc)
            span.set_status(Status(StatusCode.ERROR, str(exc)))
            raise
