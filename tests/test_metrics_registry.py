"""Tests for the metrics registry."""

import threading

import pytest

from registry_exporter.exceptions import DuplicateMetricError
from registry_exporter.services.metrics_registry import MetricsRegistry
from tests.testing_utils import find_samples


class TestRegistration:
    """Instrument declaration."""

    def test_duplicate_counter_rejected(self, registry: MetricsRegistry) -> None:
        registry.register_counter("jobs_total", "Jobs")

        with pytest.raises(DuplicateMetricError) as exc_info:
            registry.register_counter("jobs_total", "Jobs again")

        assert exc_info.value.name == "jobs_total"

    def test_duplicate_across_kinds_rejected(self, registry: MetricsRegistry) -> None:
        registry.register_gauge("temperature", "Temperature")

        with pytest.raises(DuplicateMetricError):
            registry.register_counter("temperature", "Temperature counter")

    def test_colliding_sample_names_rejected(self, registry: MetricsRegistry) -> None:
        """A counter named without _total still owns the _total sample name."""
        registry.register_counter("requests", "Requests")

        with pytest.raises(DuplicateMetricError):
            registry.register_gauge("requests_total", "Clashes with the counter sample")

    def test_registries_are_independent(self) -> None:
        first = MetricsRegistry()
        second = MetricsRegistry()

        first.register_counter("events_total", "Events")
        second.register_counter("events_total", "Events")
        first.increment_counter("events_total")

        assert first.get_sample_value("events_total") == 1
        assert second.get_sample_value("events_total") == 0


class TestCounters:
    """IncrementCounter semantics."""

    def test_increment_accumulates(self, registry: MetricsRegistry) -> None:
        registry.register_counter("jobs_total", "Jobs")

        assert registry.get_sample_value("jobs_total") == 0
        for _ in range(3):
            registry.increment_counter("jobs_total")

        assert registry.get_sample_value("jobs_total") == 3

    def test_counter_registered_without_suffix(self, registry: MetricsRegistry) -> None:
        registry.register_counter("jobs", "Jobs")
        registry.increment_counter("jobs")

        assert registry.sample_name("jobs") == "jobs_total"
        assert registry.get_sample_value("jobs") == 1
        assert "jobs_total 1.0" in registry.generate_text()

    def test_labeled_counter(self, registry: MetricsRegistry) -> None:
        registry.register_counter("requests_total", "Requests", ["code"])
        registry.increment_counter("requests_total", {"code": "200"})
        registry.increment_counter("requests_total", {"code": "200"})
        registry.increment_counter("requests_total", {"code": "500"})

        assert registry.get_sample_value("requests_total", {"code": "200"}) == 2
        assert registry.get_sample_value("requests_total", {"code": "500"}) == 1

    def test_unknown_counter_is_a_programming_error(
        self, registry: MetricsRegistry
    ) -> None:
        with pytest.raises(KeyError):
            registry.increment_counter("never_registered_total")

    def test_increment_gauge_rejected(self, registry: MetricsRegistry) -> None:
        registry.register_gauge("temperature", "Temperature")

        with pytest.raises(TypeError):
            registry.increment_counter("temperature")

    def test_concurrent_increments_are_not_lost(
        self, registry: MetricsRegistry
    ) -> None:
        registry.register_counter("hits_total", "Hits")
        workers = 8
        per_worker = 2000
        barrier = threading.Barrier(workers)

        def work() -> None:
            barrier.wait()
            for _ in range(per_worker):
                registry.increment_counter("hits_total")

        threads = [threading.Thread(target=work) for _ in range(workers)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert registry.get_sample_value("hits_total") == workers * per_worker


class TestGauges:
    """SetGauge semantics."""

    def test_set_overwrites(self, registry: MetricsRegistry) -> None:
        registry.register_gauge("queue_depth", "Queue depth")

        registry.set_gauge("queue_depth", None, 7)
        registry.set_gauge("queue_depth", None, 3)

        assert registry.get_sample_value("queue_depth") == 3

    def test_gauge_may_decrease_below_zero(self, registry: MetricsRegistry) -> None:
        registry.register_gauge("offset", "Offset")

        registry.set_gauge("offset", None, -2.5)

        assert registry.get_sample_value("offset") == -2.5

    def test_labeled_gauge_samples_are_separate(
        self, registry: MetricsRegistry
    ) -> None:
        registry.register_gauge("component_state", "Component state", ["component"])

        registry.set_gauge("component_state", {"component": "pruner"}, 2)
        registry.set_gauge("component_state", {"component": "registry"}, 1)

        text = registry.generate_text()
        assert 'component_state{component="pruner"} 2.0' in text
        assert 'component_state{component="registry"} 1.0' in text

    def test_unknown_sample_value_is_none(self, registry: MetricsRegistry) -> None:
        registry.register_gauge("component_state", "Component state", ["component"])

        assert registry.get_sample_value("component_state", {"component": "x"}) is None
        assert registry.get_sample_value("missing") is None


class TestExposition:
    """Text rendering and family snapshots."""

    def test_help_and_type_lines(self, registry: MetricsRegistry) -> None:
        registry.register_counter("jobs_total", "Jobs processed")
        registry.register_gauge("temperature", "Current temperature")

        text = registry.generate_text()

        assert "# HELP jobs_total Jobs processed" in text
        assert "# TYPE jobs_total counter" in text
        assert "# HELP temperature Current temperature" in text
        assert "# TYPE temperature gauge" in text
        assert "\ntemperature 0.0\n" in text

    def test_restricted_output(self, registry: MetricsRegistry) -> None:
        registry.register_counter("jobs_total", "Jobs processed")
        registry.register_gauge("temperature", "Current temperature")

        text = registry.generate_text(["temperature"])

        assert find_samples(text, "temperature")
        assert not find_samples(text, "jobs_total")

    def test_unknown_name_yields_no_family(self, registry: MetricsRegistry) -> None:
        registry.register_gauge("temperature", "Current temperature")

        assert registry.families(["does_not_exist"]) == []
        assert registry.generate_text(["does_not_exist"]) == ""

    def test_families_snapshot(self, registry: MetricsRegistry) -> None:
        registry.register_counter("jobs_total", "Jobs processed")
        registry.register_gauge("temperature", "Current temperature")

        families = {family.name: family.type for family in registry.families()}

        assert families == {"jobs": "counter", "temperature": "gauge"}
