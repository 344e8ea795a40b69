"""Index and query metrics.

Every metric is a Prometheus collector (scraped through ``get_metrics``)
mirrored into an OpenTelemetry instrument, so the same numbers reach an
OTel pipeline when the embedding application configures one with
``init_metrics``. All metrics carry a ``corpus`` label.
"""

from __future__ import annotations

from contextlib import contextmanager
import time
from typing import TYPE_CHECKING, Any

from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.resources import Resource
from prometheus_client import Counter, Gauge, Histogram, generate_latest


if TYPE_CHECKING:
    from collections.abc import Generator, Sequence

    from opentelemetry.metrics import Meter
    from opentelemetry.sdk.metrics.export import MetricReader


_INSTRUMENT_FACTORIES = {
    "counter": "create_counter",
    "histogram": "create_histogram",
    "gauge": "create_up_down_counter",
}

_meter: Meter | None = None
_BRIDGES: list[MetricBridge] = []


def init_metrics(
    service_name: str = "docs-search-core",
    metric_readers: Sequence[MetricReader] = (),
) -> MeterProvider:
    """Point every bridge at a new meter provider with ``metric_readers`` attached."""
    global _meter
    provider = MeterProvider(
        resource=Resource.create({"service.name": service_name}),
        metric_readers=list(metric_readers),
    )
    _meter = provider.get_meter("docs_search_core")
    for bridge in _BRIDGES:
        bridge.reset_instrument()
    return provider


def _current_meter() -> Meter:
    if _meter is None:
        init_metrics()
    return _meter


class MetricBridge:
    """Feeds one Prometheus metric and its OpenTelemetry twin.

    ``kind`` is ``counter``, ``histogram`` or ``gauge``. OpenTelemetry has no
    synchronous gauge here, so gauges are mirrored as up-down counters fed
    with the change since the last value set for the same labels.
    """

    def __init__(self, prom_metric: Counter | Histogram | Gauge, *, name: str, description: str, kind: str) -> None:
        if kind not in _INSTRUMENT_FACTORIES:
            raise ValueError(f"Unknown metric kind: {kind}")
        self.name = name
        self.description = description
        self.kind = kind
        self._prom_metric = prom_metric
        self._instrument: Any = None
        self._gauge_levels: dict[tuple[tuple[str, str], ...], float] = {}
        _BRIDGES.append(self)

    def labels(self, **labels: str) -> BoundMetric:
        return BoundMetric(self, labels)

    def reset_instrument(self) -> None:
        self._instrument = None
        self._gauge_levels.clear()

    @property
    def instrument(self) -> Any:
        if self._instrument is None:
            factory = getattr(_current_meter(), _INSTRUMENT_FACTORIES[self.kind])
            self._instrument = factory(self.name, description=self.description)
        return self._instrument

    def record(self, labels: dict[str, str], value: float) -> None:
        """Apply ``value`` as an increment, an observation or a new level depending on ``kind``."""
        child = self._prom_metric.labels(**labels)
        if self.kind == "counter":
            child.inc(value)
            self.instrument.add(value, labels)
        elif self.kind == "histogram":
            child.observe(value)
            self.instrument.record(value, labels)
        else:
            child.set(value)
            key = tuple(sorted(labels.items()))
            delta = value - self._gauge_levels.get(key, 0.0)
            self._gauge_levels[key] = value
            if delta:
                self.instrument.add(delta, labels)


class BoundMetric:
    """A ``MetricBridge`` with its label values filled in."""

    __slots__ = ("_bridge", "_labels")

    def __init__(self, bridge: MetricBridge, labels: dict[str, str]) -> None:
        self._bridge = bridge
        self._labels = labels

    def inc(self, amount: float = 1.0) -> None:
        self._bridge.record(self._labels, amount)

    def observe(self, value: float) -> None:
        self._bridge.record(self._labels, value)

    def set(self, value: float) -> None:
        self._bridge.record(self._labels, value)


def _bridged(kind: str, name: str, description: str, **options: Any) -> MetricBridge:
    prom_type = {"counter": Counter, "histogram": Histogram, "gauge": Gauge}[kind]
    prom_metric = prom_type(name, description, ["corpus"], **options)
    return MetricBridge(prom_metric, name=name, description=description, kind=kind)


INDEX_BUILD_LATENCY = _bridged(
    "histogram",
    "docs_search_index_build_seconds",
    "Time spent validating and indexing a corpus",
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)
SEARCH_LATENCY = _bridged(
    "histogram",
    "docs_search_query_seconds",
    "Time spent ranking and highlighting one query",
    buckets=(0.0005, 0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25),
)
REJECTED_RECORDS = _bridged(
    "counter",
    "docs_search_rejected_records_total",
    "Malformed records skipped during ingestion",
)
INDEX_DOC_COUNT = _bridged(
    "gauge",
    "docs_search_index_documents",
    "Documents in the currently published index",
)


@contextmanager
def track_latency(metric: MetricBridge, **labels: str) -> Generator[None, None, None]:
    """Observe the wall time of the block on ``metric``, also when it raises."""
    started = time.perf_counter()
    try:
        yield
    finally:
        metric.labels(**labels).observe(time.perf_counter() - started)


def get_metrics() -> bytes:
    """Prometheus text exposition of the default registry."""
    return generate_latest()
