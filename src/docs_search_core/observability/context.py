"""Per-task log correlation state.

A ``ContextVar`` holds the ids of the active span plus the corpus being
served, so log lines emitted from worker threads and asyncio tasks carry
the same identifiers as the span around them.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
import secrets


trace_context: ContextVar[dict | None] = ContextVar("docs_search_trace_context", default=None)


def get_trace_context() -> dict:
    """Return the active context, starting a fresh trace when there is none."""
    ctx = trace_context.get()
    if not ctx or not ctx.get("trace_id"):
        ctx = {**(ctx or {}), "trace_id": secrets.token_hex(16), "span_id": secrets.token_hex(8)}
        trace_context.set(ctx)
    return ctx


def set_trace_context(trace_id: str, span_id: str, **extra: object) -> None:
    trace_context.set({"trace_id": trace_id, "span_id": span_id, **extra})


def update_trace_context(trace_id: str, span_id: str) -> None:
    """Switch to new span ids, keeping everything else (such as ``corpus``)."""
    trace_context.set({**(trace_context.get() or {}), "trace_id": trace_id, "span_id": span_id})


@contextmanager
def bind_corpus(corpus: str) -> Iterator[None]:
    """Tag log records emitted inside the block with ``corpus``."""
    token = trace_context.set({**(trace_context.get() or {}), "corpus": corpus})
    try:
        yield
    finally:
        trace_context.reset(token)
