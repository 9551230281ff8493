"""In-process counters and timings for one interactive session."""
from __future__ import annotations

import logging
import time
from collections import defaultdict
from collections.abc import Generator
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any

logger = logging.getLogger(__name__)


class MetricsCollector:
    """Metrics collector with in-memory storage.

    The shell dispatches one command at a time, so no locking is done here.
    """

    def __init__(self, max_samples: int = 100):
        self._counters: dict[str, float] = defaultdict(float)
        self._gauges: dict[str, float] = {}
        self._histograms: dict[str, list[float]] = defaultdict(list)
        self._max_samples = max_samples

    def increment(self, name: str, value: float = 1.0, labels: dict[str, str] | None = None) -> None:
        """Increment a counter metric."""
        self._counters[self._make_key(name, labels)] += value

    def gauge(self, name: str, value: float, labels: dict[str, str] | None = None) -> None:
        """Set a gauge metric to a specific value."""
        self._gauges[self._make_key(name, labels)] = value

    def histogram(self, name: str, value: float, labels: dict[str, str] | None = None) -> None:
        """Record a value in a histogram metric."""
        samples = self._histograms[self._make_key(name, labels)]
        samples.append(value)
        if len(samples) > self._max_samples:
            del samples[: len(samples) - self._max_samples]

    @contextmanager
    def timer(self, name: str, labels: dict[str, str] | None = None) -> Generator[None, None, None]:
        """Context manager to time an operation and record as histogram."""
        start = time.perf_counter()
        try:
            yield
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            self.histogram(f"{name}_duration_ms", elapsed_ms, labels)
            self.increment(f"{name}_count", labels=labels)

    def _make_key(self, name: str, labels: dict[str, str] | None) -> str:
        """Create a unique key from name and labels."""
        if not labels:
            return name
        label_str = ",".join(f"{k}={v}" for k, v in sorted(labels.items()))
        return f"{name}{{{label_str}}}"

    def get_counter(self, name: str, labels: dict[str, str] | None = None) -> float:
        return self._counters.get(self._make_key(name, labels), 0.0)

    def sum_counters(self, name: str) -> float:
        """Total of a counter across every label combination."""
        return sum(
            value
            for key, value in self._counters.items()
            if key == name or key.startswith(name + "{")
        )

    def get_gauge(self, name: str, labels: dict[str, str] | None = None) -> float | None:
        return self._gauges.get(self._make_key(name, labels))

    def get_histogram_stats(self, name: str, labels: dict[str, str] | None = None) -> dict[str, float]:
        """Get histogram statistics (count, min, max, avg, p50, p95)."""
        values = self._histograms.get(self._make_key(name, labels), [])
        if not values:
            return {}
        sorted_values = sorted(values)
        count = len(sorted_values)
        return {
            "count": count,
            "min": sorted_values[0],
            "max": sorted_values[-1],
            "avg": sum(sorted_values) / count,
            "p50": sorted_values[int(count * 0.5)],
            "p95": sorted_values[int(count * 0.95)] if count > 1 else sorted_values[-1],
        }

    def get_all_metrics(self) -> dict[str, Any]:
        return {
            "counters": dict(self._counters),
            "gauges": dict(self._gauges),
            "histograms": {key: len(values) for key, values in self._histograms.items()},
            "collected_at": datetime.now(timezone.utc).isoformat(),
        }

    def reset(self) -> None:
        """Reset all metrics (useful for testing)."""
        self._counters.clear()
        self._gauges.clear()
        self._histograms.clear()


# Global metrics instance
metrics = MetricsCollector()


def record_command(command: str, duration_ms: float, success: bool = True) -> None:
    """Record one dispatched command."""
    labels = {"command": command, "success": str(success).lower()}
    metrics.histogram("command_duration_ms", duration_ms, labels)
    metrics.increment("commands_total", labels=labels)


def record_error(component: str, error_type: str) -> None:
    """Record an error metric."""
    metrics.increment("errors_total", labels={"component": component, "type": error_type})
