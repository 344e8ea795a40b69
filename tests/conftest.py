"""Shared test fixtures and configuration."""

import logging
import os

import pytest

from docs_search_core.observability.context import trace_context


SCENARIO_RECORDS = [
    {
        "location": "a#1",
        "page": "Guide",
        "title": "Explicit Imports",
        "text": "detect implicit imports",
        "category": "section",
    },
    {
        "location": "b#1",
        "page": "API",
        "title": "explicit_imports",
        "text": "returns a collection of pairs",
        "category": "function",
    },
]

# Shaped like a Documenter.jl search_index.js payload: one page record, sections with
# empty bodies, docstrings keyed by qualified name, and a repeated anchor.
DOCUMENTER_RECORDS = [
    {
        "location": "index.html",
        "page": "Home",
        "title": "Home",
        "text": "A package for checking how modules import names.",
        "category": "page",
    },
    {
        "location": "index.html#Getting-started",
        "page": "Home",
        "title": "Getting started",
        "text": "",
        "category": "section",
    },
    {
        "location": "api.html#ExplicitImports.check_no_implicit_imports",
        "page": "API",
        "title": "ExplicitImports.check_no_implicit_imports",
        "text": "check_no_implicit_imports(mod) Checks that a module does not rely on implicit imports.",
        "category": "function",
    },
    {
        "location": "api.html#ExplicitImports.ImplicitImportsException",
        "page": "API",
        "title": "ExplicitImports.ImplicitImportsException",
        "text": "Exception thrown when a module relies on implicit imports.",
        "category": "type",
    },
    {
        "location": "api.html#ExplicitImports.ImplicitImportsException",
        "page": "API",
        "title": "ExplicitImports.ImplicitImportsException",
        "text": "Second docstring attached to the same binding.",
        "category": "type",
    },
    {
        "location": "internals.html#Broadcasting",
        "page": "Internals",
        "title": "Broadcasting",
        "text": "",
        "category": "section",
    },
    {
        "location": "internals.html#Dispatch",
        "page": "Internals",
        "title": "Dispatch",
        "text": "Broadcasting over collections goes through dispatch, and broadcasting is lazy.",
        "category": "section",
    },
    {
        "location": "faq.html#Mapping-names",
        "page": "FAQ",
        "title": "Mapping names",
        "text": "Use a map to collect the names each module needs.",
        "category": "section",
    },
]


@pytest.fixture
def scenario_records():
    """Two-record corpus: a section heading and a qualified-name docstring."""

    return [dict(record) for record in SCENARIO_RECORDS]


@pytest.fixture
def documenter_records():
    """Small corpus resembling a real Documenter.jl build."""

    return [dict(record) for record in DOCUMENTER_RECORDS]


@pytest.fixture(autouse=True)
def isolated_settings_env(monkeypatch, tmp_path):
    """Keep DOCS_SEARCH_* variables and stray .env files out of every test."""

    for key in list(os.environ):
        if key.upper().startswith("DOCS_SEARCH_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo handler changes made by configure_logging()."""

    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture(autouse=True)
def reset_trace_context():
    trace_context.set(None)
    yield
    trace_context.set(None)
