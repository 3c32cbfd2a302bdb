"""Prometheus metrics registry for the exporter.

The registry owns its own ``CollectorRegistry`` instead of using the global
``prometheus_client.REGISTRY``, so every app (and every test) works against
an explicitly constructed set of instruments:

    registry = MetricsRegistry()
    registry.register_counter("my_events_total", "Number of events")
    registry.increment_counter("my_events_total")
    text = registry.generate_text()

Instrument values are lock-protected by prometheus_client, so increments and
sets may come from any thread. The name table is guarded by the registry's
own lock.
"""

import logging
import threading
from collections.abc import Iterable, Mapping, Sequence

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    disable_created_metrics,
    generate_latest,
)
from prometheus_client.metrics_core import Metric

from registry_exporter.exceptions import DuplicateMetricError

logger = logging.getLogger(__name__)

# Expose only the registered families; no per-counter _created gauges
disable_created_metrics()

COUNTER = "counter"
GAUGE = "gauge"


class MetricsRegistry:
    """Named counters and gauges backed by a private CollectorRegistry."""

    def __init__(self) -> None:
        self._registry = CollectorRegistry(auto_describe=True)
        self._instruments: dict[str, Counter | Gauge] = {}
        self._kinds: dict[str, str] = {}
        self._lock = threading.Lock()

    def register_counter(
        self, name: str, documentation: str, labelnames: Sequence[str] = ()
    ) -> Counter:
        """Declare a counter.

        Args:
            name: Counter name, with or without the ``_total`` suffix. The
                exposed sample is always named ``<base>_total``.
            documentation: HELP text.
            labelnames: Label keys the counter is partitioned by.

        Raises:
            DuplicateMetricError: If the name is already registered.
        """
        with self._lock:
            self._check_unique(name)
            try:
                counter = Counter(
                    name, documentation, labelnames, registry=self._registry
                )
            except ValueError as e:
                raise DuplicateMetricError(name) from e
            self._instruments[name] = counter
            self._kinds[name] = COUNTER

        logger.debug("Registered counter", extra={"metric": name})
        return counter

    def register_gauge(
        self, name: str, documentation: str, labelnames: Sequence[str] = ()
    ) -> Gauge:
        """Declare a gauge.

        Raises:
            DuplicateMetricError: If the name is already registered.
        """
        with self._lock:
            self._check_unique(name)
            try:
                gauge = Gauge(name, documentation, labelnames, registry=self._registry)
            except ValueError as e:
                raise DuplicateMetricError(name) from e
            self._instruments[name] = gauge
            self._kinds[name] = GAUGE

        logger.debug("Registered gauge", extra={"metric": name})
        return gauge

    def increment_counter(
        self, name: str, labels: Mapping[str, str] | None = None
    ) -> None:
        """Increment the named counter by 1.

        An unknown name is a programming error and raises ``KeyError``.
        """
        counter = self._instrument(name, COUNTER)
        self._child(counter, labels).inc()

    def set_gauge(
        self, name: str, labels: Mapping[str, str] | None, value: float
    ) -> None:
        """Set the gauge sample identified by name and labels to value."""
        gauge = self._instrument(name, GAUGE)
        self._child(gauge, labels).set(value)

    def get_sample_value(
        self, name: str, labels: Mapping[str, str] | None = None
    ) -> float | None:
        """Return the current value of one sample, or None if it does not exist."""
        sample_name = self.sample_name(name)
        return self._registry.get_sample_value(sample_name, dict(labels or {}))

    def sample_name(self, name: str) -> str:
        """Map a registered name to the name its samples are exposed under."""
        if self._kinds.get(name) == COUNTER and not name.endswith("_total"):
            return f"{name}_total"
        return name

    def families(self, names: Iterable[str] | None = None) -> list[Metric]:
        """Snapshot the registered metric families.

        Args:
            names: Optional sample names to restrict the result to. Unknown
                names are ignored.
        """
        return list(self._source(names).collect())

    def generate_text(self, names: Iterable[str] | None = None) -> str:
        """Render the registered families in the Prometheus text format."""
        return generate_latest(self._source(names)).decode("utf-8")  # type: ignore[arg-type]

    def _source(self, names: Iterable[str] | None) -> CollectorRegistry:
        if names is None:
            return self._registry
        return self._registry.restricted_registry(list(names))  # type: ignore[return-value]

    def _check_unique(self, name: str) -> None:
        if name in self._instruments:
            raise DuplicateMetricError(name)

    def _instrument(self, name: str, kind: str) -> Counter | Gauge:
        instrument = self._instruments[name]
        if self._kinds[name] != kind:
            raise TypeError(f"Metric {name} is a {self._kinds[name]}, not a {kind}")
        return instrument

    @staticmethod
    def _child(
        instrument: Counter | Gauge, labels: Mapping[str, str] | None
    ) -> Counter | Gauge:
        if labels:
            return instrument.labels(**labels)
        return instrument
