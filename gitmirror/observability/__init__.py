"""
Observability Module — Metrics and health checks.
"""

from .health import HealthChecker, JobHealth, SystemHealth
from .metrics import Counter, Gauge, MetricsRegistry, metrics

__all__ = [
    "metrics",
    "MetricsRegistry",
    "Counter",
    "Gauge",
    "HealthChecker",
    "JobHealth",
    "SystemHealth",
]
