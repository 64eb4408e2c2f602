"""Tests for the metric registry"""
import threading

import pytest

from metrics_bridge.errors import DuplicateMetricError, MetricKindMismatchError
from metrics_bridge.metrics.models import Counter, Gauge, MetricKind
from metrics_bridge.metrics.registry import Registry


class TestRegistry:
    """Test registry get-or-register and iteration"""

    def setup_method(self):
        self.registry = Registry()

    def test_get_or_register_returns_same_instance(self):
        first = self.registry.get_or_register_counter("requests")
        second = self.registry.get_or_register_counter("requests")

        assert first is second
        assert len(self.registry) == 1
        assert "requests" in self.registry

    def test_get_or_register_each_kind(self):
        self.registry.get_or_register_counter("c")
        self.registry.get_or_register_gauge("g")
        self.registry.get_or_register_gauge_float64("f")
        self.registry.get_or_register_timer("t")
        self.registry.get_or_register_histogram("h")

        kinds = [metric.kind for _, metric in self.registry.each()]
        assert kinds == [
            MetricKind.COUNTER,
            MetricKind.GAUGE,
            MetricKind.GAUGE_FLOAT64,
            MetricKind.TIMER,
            MetricKind.HISTOGRAM,
        ]

    def test_kind_mismatch(self):
        self.registry.get_or_register_gauge("latency")

        with pytest.raises(MetricKindMismatchError) as exc_info:
            self.registry.get_or_register_timer("latency")

        assert exc_info.value.expected is MetricKind.TIMER
        assert exc_info.value.actual is MetricKind.GAUGE

    def test_register_duplicate(self):
        self.registry.register("g", Gauge())

        with pytest.raises(DuplicateMetricError):
            self.registry.register("g", Counter())

    def test_each_preserves_registration_order(self):
        for name in ("b", "a", "c"):
            self.registry.get_or_register_counter(name)

        assert [name for name, _ in self.registry.each()] == ["b", "a", "c"]
        assert self.registry.names() == ["b", "a", "c"]

    def test_each_is_point_in_time(self):
        self.registry.get_or_register_counter("a")
        items = self.registry.each()
        self.registry.get_or_register_counter("b")

        assert len(items) == 1

    def test_get_and_unregister(self):
        counter = self.registry.get_or_register_counter("c")

        assert self.registry.get("c") is counter
        assert self.registry.unregister("c") is True
        assert self.registry.get("c") is None
        assert self.registry.unregister("c") is False

    def test_concurrent_get_or_register(self):
        def worker():
            for _ in range(1000):
                self.registry.get_or_register_counter("hits").inc()

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(self.registry) == 1
        assert self.registry.get("hits").count() == 8000
