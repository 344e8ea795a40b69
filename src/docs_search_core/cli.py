#!/usr/bin/env python3
"""Query a Documenter-style search corpus from the command line.

Example::

    docs-search build/search_index.js "explicit imports" --limit 5
"""

# ruff: noqa: T201  # CLI prints results

from __future__ import annotations

import argparse
from collections.abc import Sequence
from pathlib import Path
import sys

import orjson

from docs_search_core.config import get_settings
from docs_search_core.domain.errors import SearchEngineError
from docs_search_core.observability.logging import configure_logging
from docs_search_core.service_layer.search_service import SearchHit, SearchService


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__ or "Search a documentation corpus")
    parser.add_argument(
        "corpus",
        type=Path,
        help="Path to search_index.js or a JSON list of records",
    )
    parser.add_argument("query", help="Free-text query")
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Maximum number of results (default: DOCS_SEARCH_DEFAULT_LIMIT or 20)",
    )
    parser.add_argument(
        "--window",
        type=int,
        default=None,
        help="Snippet window size in characters (default: 160)",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail on the first malformed record instead of skipping it",
    )
    parser.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Print results as JSON lines",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (default: DOCS_SEARCH_LOG_LEVEL or info)",
    )
    return parser


def _format_hit(rank: int, hit: SearchHit) -> str:
    header = f"{rank:>3}. {hit.document.title or hit.document.page}  [{hit.document.category.value}]"
    lines = [header, f"     {hit.document.location}  (score {hit.score:.4f})"]
    if hit.snippet:
        lines.append(f"     {hit.snippet}")
    return "\n".join(lines)


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_argument_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    if args.strict:
        settings = settings.model_copy(update={"strict_ingest": True})
    configure_logging(args.log_level or settings.log_level, json_output=settings.json_logs)

    service = SearchService(settings)
    try:
        index = service.load_path(args.corpus)
        hits = service.search(args.query, args.limit, window_size=args.window)
    except OSError as exc:
        print(f"Error: cannot read {args.corpus}: {exc}", file=sys.stderr)
        return 1
    except SearchEngineError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.json_output:
        for hit in hits:
            print(orjson.dumps(hit.to_dict()).decode("utf-8"))
        return 0

    if not hits:
        print(f"No results for {args.query!r} in {index.document_count} documents.")
        return 0
    for rank, hit in enumerate(hits, start=1):
        print(_format_hit(rank, hit))
    return 0


if __name__ == "__main__":
    sys.exit(main())
