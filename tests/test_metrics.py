"""
Tests for gitmirror.observability.metrics.
"""

from gitmirror.observability.metrics import Counter, Gauge, MetricsRegistry


class TestCounter:

    def test_increment(self):
        counter = Counter("test_counter")

        counter.inc()
        counter.inc()
        counter.inc(5)

        assert counter.get() == 7

    def test_increment_with_labels(self):
        counter = Counter("test_counter")

        counter.inc(1, labels={"job": "a"})
        counter.inc(2, labels={"job": "b"})
        counter.inc(1, labels={"job": "a"})

        assert counter.get(labels={"job": "a"}) == 2
        assert counter.get(labels={"job": "b"}) == 2

    def test_labels_with_separators(self):
        counter = Counter("test_counter")
        counter.inc(labels={"job": "a,b=c"})

        points = counter.export()
        assert points[0].labels == {"job": "a,b=c"}


class TestGauge:

    def test_set(self):
        gauge = Gauge("test_gauge")
        gauge.set(1, labels={"job": "a"})
        gauge.set(0, labels={"job": "a"})

        assert gauge.get(labels={"job": "a"}) == 0


class TestMetricsRegistry:

    def test_common_metrics_registered(self):
        registry = MetricsRegistry(prefix="test")
        output = registry.export_prometheus()

        assert "# TYPE test_clone_total counter" in output
        assert "# TYPE test_job_ok gauge" in output

    def test_convenience_methods(self):
        registry = MetricsRegistry(prefix="test")

        registry.increment("pull_total", labels={"job": "a"})
        registry.set_gauge("job_ok", 1, labels={"job": "a"})

        assert registry.counter("pull_total").get({"job": "a"}) == 1
        assert registry.gauge("job_ok").get({"job": "a"}) == 1

    def test_export_prometheus_labels(self):
        registry = MetricsRegistry(prefix="test")
        registry.increment("push_failures_total", labels={"job": "docs"})

        output = registry.export_prometheus()
        assert 'test_push_failures_total{job="docs"} 1.0' in output
