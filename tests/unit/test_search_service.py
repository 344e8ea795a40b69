"""Unit tests for the search service layer."""

from prometheus_client import REGISTRY
import pytest

from docs_search_core.config import Settings, SnippetConfig
from docs_search_core.domain.errors import IndexNotReadyError, InvalidArgumentError, MalformedRecordError
from docs_search_core.search.snapshot import IndexRegistry
from docs_search_core.service_layer.search_service import SearchHit, SearchService


def _sample(name: str, corpus: str) -> float:
    return REGISTRY.get_sample_value(name, {"corpus": corpus}) or 0.0


@pytest.fixture
def service(scenario_records) -> SearchService:
    svc = SearchService(Settings(corpus_name="service-tests"))
    svc.load_records(scenario_records)
    return svc


@pytest.mark.unit
class TestSearchService:
    def test_search_returns_hits_with_snippets(self, service):
        hits = service.search("implicit")

        assert len(hits) == 1
        hit = hits[0]
        assert isinstance(hit, SearchHit)
        assert hit.document.location == "a#1"
        assert hit.snippet == "detect [[implicit]] imports"
        assert hit.score == hit.result.score

    def test_hit_to_dict(self, service):
        payload = service.search("explicit")[1].to_dict()

        assert payload["id"] == 1
        assert payload["location"] == "b#1"
        assert payload["category"] == "function"
        assert payload["matched_fields"] == ["title"]
        assert payload["snippet"] == "returns a collection of pairs"

    def test_search_before_load_raises(self):
        svc = SearchService(Settings())

        assert svc.index is None
        with pytest.raises(IndexNotReadyError):
            svc.search("anything")

    def test_default_limit_from_settings(self, scenario_records):
        svc = SearchService(Settings(default_limit=1))
        svc.load_records(scenario_records)

        assert len(svc.search("explicit")) == 1
        assert len(svc.search("explicit", 5)) == 2

    def test_invalid_arguments_propagate(self, service):
        with pytest.raises(InvalidArgumentError):
            service.search("explicit", -1)
        with pytest.raises(InvalidArgumentError):
            service.search("explicit", window_size=-5)

    def test_snippet_settings_apply(self, scenario_records):
        svc = SearchService(Settings(snippet=SnippetConfig(window_size=8, open_marker="*", close_marker="*")))
        svc.load_records(scenario_records)

        assert svc.search("implicit")[0].snippet == "*implicit*"

    def test_strict_setting_keeps_previous_index(self, scenario_records):
        svc = SearchService(Settings(strict_ingest=True))
        original = svc.load_records(scenario_records)

        with pytest.raises(MalformedRecordError):
            svc.load_records([{"text": "orphan"}])

        assert svc.index is original

    def test_explicit_strict_overrides_settings(self, scenario_records):
        svc = SearchService(Settings(strict_ingest=True))

        index = svc.load_records([*scenario_records, {"text": "orphan"}], strict=False)

        assert index.document_count == 2

    def test_load_path(self, tmp_path, scenario_records):
        corpus = tmp_path / "records.json"
        corpus.write_text(
            '[{"location": "x#1", "page": "Guide", "title": "Loaded from disk", "text": "hello"}]',
            encoding="utf-8",
        )
        svc = SearchService(Settings())

        svc.load_path(corpus)

        assert svc.search("disk")[0].document.title == "Loaded from disk"

    def test_highlight_uses_current_snapshot(self, service):
        result = service.search("imports")[0].result

        assert service.highlight(result) == "detect implicit [[imports]]"
        assert service.highlight(result, 0) == ""

    def test_shared_registry(self, scenario_records):
        registry = IndexRegistry()
        writer = SearchService(Settings(), registry=registry)
        reader = SearchService(Settings(), registry=registry)

        writer.load_records(scenario_records)

        assert [hit.document.id for hit in reader.search("explicit")] == [0, 1]

    @pytest.mark.asyncio
    async def test_search_async(self, service):
        hits = await service.search_async("explicit", 1)

        assert [hit.document.id for hit in hits] == [0]


@pytest.mark.unit
class TestServiceMetrics:
    def test_rejected_records_and_document_gauge(self, scenario_records):
        corpus = "metrics-tests"
        before = _sample("docs_search_rejected_records_total", corpus)
        svc = SearchService(Settings(corpus_name=corpus))

        svc.load_records([*scenario_records, {"text": "orphan"}, "junk"])

        assert _sample("docs_search_rejected_records_total", corpus) == before + 2
        assert _sample("docs_search_index_documents", corpus) == 2

    def test_latencies_are_recorded(self, scenario_records):
        corpus = "latency-tests"
        builds_before = _sample("docs_search_index_build_seconds_count", corpus)
        queries_before = _sample("docs_search_query_seconds_count", corpus)
        svc = SearchService(Settings(corpus_name=corpus))

        svc.load_records(scenario_records)
        svc.search("explicit")
        svc.search("zzz")

        assert _sample("docs_search_index_build_seconds_count", corpus) == builds_before + 1
        assert _sample("docs_search_query_seconds_count", corpus) == queries_before + 2
