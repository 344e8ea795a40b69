"""Structured logging for the search core.

Records are rendered as one JSON object per line with orjson. Ids from the
active trace context are attached, so the log lines of one index build or
query can be joined with its span, and ``corpus`` tells apart services
running side by side in one process.
"""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from pathlib import Path
import sys
from typing import IO, Any

import orjson

from docs_search_core.observability.context import get_trace_context


_RESERVED_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}
_PLAIN_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class JsonFormatter(logging.Formatter):
    """Render log records as compact JSON lines."""

    MAX_MESSAGE_LEN = 2000
    MAX_FIELD_LEN = 500

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": _clip(record.getMessage(), self.MAX_MESSAGE_LEN),
        }
        entry.update(_correlation_fields())
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        # Values passed through ``extra=``
        for key, value in vars(record).items():
            if key in _RESERVED_ATTRS or key.startswith("_"):
                continue
            entry[key] = _clip(value, self.MAX_FIELD_LEN) if isinstance(value, str) else value

        return orjson.dumps(entry, default=_json_default, option=orjson.OPT_NON_STR_KEYS).decode("utf-8")


def _correlation_fields() -> dict[str, str]:
    ctx = get_trace_context()
    fields = {"trace_id": ctx.get("trace_id", ""), "span_id": ctx.get("span_id", "")}
    if corpus := ctx.get("corpus"):
        fields["corpus"] = corpus
    return fields


def _clip(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


def _json_default(value: Any) -> Any:
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8", errors="replace")
    return repr(value)


def _resolve_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(
    level: str | int = "INFO",
    json_output: bool = True,
    *,
    logger_levels: dict[str, str] | None = None,
    stream: IO[str] | None = None,
) -> None:
    """Route all records through a single handler on ``stream`` (stderr by default).

    Args:
        level: Root level name (``debug``, ``INFO``...) or number; unknown names mean INFO
        json_output: Emit JSON lines instead of plain text
        logger_levels: Per-logger level overrides (logger name -> level)
        stream: Destination; stdout stays free for command output
    """
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(JsonFormatter() if json_output else logging.Formatter(_PLAIN_FORMAT))

    root = logging.getLogger()
    for existing in root.handlers[:]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(_resolve_level(level))

    for logger_name, logger_level in (logger_levels or {}).items():
        logging.getLogger(logger_name).setLevel(_resolve_level(logger_level))
