"""
Metrics — Per-job mirror counters with Prometheus exposition.

## Usage

    from gitmirror.observability.metrics import metrics

    metrics.increment("pull_total", labels={"job": "docs"})
    metrics.set_gauge("job_ok", 1, labels={"job": "docs"})

    output = metrics.export_prometheus()
"""

from __future__ import annotations

import time
from collections import defaultdict
from dataclasses import dataclass, field
from threading import Lock
from typing import Dict, List, Optional, Tuple


@dataclass
class MetricPoint:
    """A single metric data point."""

    name: str
    value: float
    timestamp: float
    labels: Dict[str, str] = field(default_factory=dict)


LabelsKey = Tuple[Tuple[str, str], ...]


def _labels_key(labels: Optional[Dict[str, str]]) -> LabelsKey:
    if not labels:
        return ()
    return tuple(sorted(labels.items()))


class Counter:
    """A monotonically increasing counter."""

    def __init__(self, name: str, help_text: str = ""):
        self.name = name
        self.help_text = help_text
        self._values: Dict[LabelsKey, float] = defaultdict(float)
        self._lock = Lock()

    def inc(self, value: float = 1, labels: Optional[Dict[str, str]] = None) -> None:
        key = _labels_key(labels)
        with self._lock:
            self._values[key] += value

    def get(self, labels: Optional[Dict[str, str]] = None) -> float:
        return self._values.get(_labels_key(labels), 0)

    def export(self) -> List[MetricPoint]:
        now = time.time()
        with self._lock:
            items = list(self._values.items())
        return [MetricPoint(self.name, value, now, dict(key)) for key, value in items]


class Gauge:
    """A gauge that can go up and down."""

    def __init__(self, name: str, help_text: str = ""):
        self.name = name
        self.help_text = help_text
        self._values: Dict[LabelsKey, float] = {}
        self._lock = Lock()

    def set(self, value: float, labels: Optional[Dict[str, str]] = None) -> None:
        key = _labels_key(labels)
        with self._lock:
            self._values[key] = value

    def get(self, labels: Optional[Dict[str, str]] = None) -> float:
        return self._values.get(_labels_key(labels), 0)

    def export(self) -> List[MetricPoint]:
        now = time.time()
        with self._lock:
            items = list(self._values.items())
        return [MetricPoint(self.name, value, now, dict(key)) for key, value in items]


class MetricsRegistry:
    """
    Central registry for all metrics.

    Provides a simple interface and Prometheus export.
    """

    def __init__(self, prefix: str = "gitmirror"):
        self.prefix = prefix
        self._counters: Dict[str, Counter] = {}
        self._gauges: Dict[str, Gauge] = {}
        self._lock = Lock()

        self._register_common_metrics()

    def _register_common_metrics(self) -> None:
        self.counter("clone_total", "Clone attempts")
        self.counter("clone_failures_total", "Failed clone attempts")
        self.counter("pull_total", "Pull attempts")
        self.counter("pull_failures_total", "Failed pulls")
        self.counter("push_total", "Push attempts (branches and tags)")
        self.counter("push_failures_total", "Failed pushes")
        self.counter("sync_unchanged_total", "Sync iterations with nothing to push")
        self.gauge("job_ok", "Last status of the job (1=ok, 0=failing)")
        self.gauge("job_status_timestamp_seconds", "Unix time of the last status update")

    def counter(self, name: str, help_text: str = "") -> Counter:
        """Get or create a counter."""
        full_name = f"{self.prefix}_{name}"
        with self._lock:
            if full_name not in self._counters:
                self._counters[full_name] = Counter(full_name, help_text)
            return self._counters[full_name]

    def gauge(self, name: str, help_text: str = "") -> Gauge:
        """Get or create a gauge."""
        full_name = f"{self.prefix}_{name}"
        with self._lock:
            if full_name not in self._gauges:
                self._gauges[full_name] = Gauge(full_name, help_text)
            return self._gauges[full_name]

    def increment(self, name: str, value: float = 1, labels: Optional[Dict[str, str]] = None) -> None:
        self.counter(name).inc(value, labels)

    def set_gauge(self, name: str, value: float, labels: Optional[Dict[str, str]] = None) -> None:
        self.gauge(name).set(value, labels)

    def export_prometheus(self) -> str:
        """Export metrics in Prometheus text format."""
        lines = []

        for kind, group in (("counter", self._counters), ("gauge", self._gauges)):
            for metric in list(group.values()):
                lines.append(f"# HELP {metric.name} {metric.help_text}")
                lines.append(f"# TYPE {metric.name} {kind}")
                for point in metric.export():
                    labels_str = self._format_labels(point.labels)
                    lines.append(f"{point.name}{labels_str} {point.value}")

        return "\n".join(lines) + "\n"

    def _format_labels(self, labels: Dict[str, str]) -> str:
        if not labels:
            return ""
        pairs = [f'{k}="{v}"' for k, v in sorted(labels.items())]
        return "{" + ",".join(pairs) + "}"


# Global metrics instance
metrics = MetricsRegistry()
