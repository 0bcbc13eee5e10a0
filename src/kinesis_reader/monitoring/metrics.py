"""Metrics collection for shard readers.

Readers record fetch latency, page sizes, lag behind the shard tip, and
iterator refreshes into a MetricsCollector. Nothing here exports metrics;
callers read them back with ``get_metrics`` or ``summary``.
"""

from collections import deque
from dataclasses import dataclass
from time import perf_counter, time
from typing import Any


@dataclass
class MetricRecord:
    """A single metric measurement.

    Attributes:
        name: Name of the metric.
        value: Measured value.
        timestamp: Wall-clock time when the metric was recorded.
        component: Component that generated the metric, ``"<stream>/<shard>"``
            for shard readers.
        metadata: Optional additional metadata about the metric.
    """

    name: str
    value: float
    timestamp: float
    component: str
    metadata: dict[str, Any] | None = None


class MetricsCollector:
    """Collects metrics recorded by one or more readers.

    A collector is not thread-safe; give each reader thread its own.

    Attributes:
        enabled: Whether metrics collection is enabled.
        max_records: Number of most recent records kept for ``get_metrics``.
            None keeps everything. ``summary`` always covers every record.
    """

    def __init__(self, enabled: bool = True, max_records: int | None = None):
        if max_records is not None and max_records < 1:
            raise ValueError(f"max_records must be positive, got {max_records}")
        self.enabled = enabled
        self.max_records = max_records
        self._metrics: deque[MetricRecord] = deque(maxlen=max_records)
        self._summary: dict[str, dict[str, float]] = {}
        self._start_times: dict[tuple[str, str], float] = {}

    def start_timer(self, name: str, component: str = "reader"):
        """Start timing an operation.

        Args:
            name: Name of the timer.
            component: Component being timed.
        """
        if not self.enabled:
            return
        self._start_times[(name, component)] = perf_counter()

    def stop_timer(
        self, name: str, component: str = "reader", metadata: dict[str, Any] | None = None
    ):
        """Stop timing and record the elapsed seconds as ``<name>_time``.

        Stopping a timer that was never started is a no-op.
        """
        if not self.enabled:
            return

        key = (name, component)
        if key not in self._start_times:
            return

        elapsed = perf_counter() - self._start_times.pop(key)
        self.record_metric(f"{name}_time", elapsed, component, metadata)

    def record_metric(
        self,
        name: str,
        value: float,
        component: str = "reader",
        metadata: dict[str, Any] | None = None,
    ):
        """Record a metric value.

        Args:
            name: Name of the metric.
            value: Value to record.
            component: Component generating the metric.
            metadata: Optional additional metadata about the metric.
        """
        if not self.enabled:
            return

        self._metrics.append(
            MetricRecord(
                name=name,
                value=value,
                timestamp=time(),
                component=component,
                metadata=metadata or {},
            )
        )

        entry = self._summary.setdefault(
            f"{component}.{name}", {"count": 0, "total": 0.0, "last": 0.0}
        )
        entry["count"] += 1
        entry["total"] += value
        entry["last"] = value

    def get_metrics(self, name: str | None = None) -> list[MetricRecord]:
        """Get collected metrics, optionally only those called ``name``."""
        if name is None:
            return list(self._metrics)
        return [metric for metric in self._metrics if metric.name == name]

    def summary(self) -> dict[str, dict[str, float]]:
        """Summarize metrics per ``<component>.<name>``.

        Totals are kept as metrics arrive, so records dropped by
        ``max_records`` are still counted.

        Returns:
            Mapping to ``count``, ``total`` and ``last`` of the recorded values.
        """
        return {key: dict(entry) for key, entry in self._summary.items()}

    def clear(self):
        """Clear all metrics and timers."""
        self._metrics.clear()
        self._summary = {}
        self._start_times = {}
