"""Metrics collection for backup runs."""

import threading
import time
import logging
from typing import Dict, Any, Optional
from collections import defaultdict


class MetricsCollector:
    """
    Collects timings and byte counters for backup runs.
    Implements IMetricsCollector protocol.

    Counters are updated from the compression and upload threads, so every
    mutation happens under a lock.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._start_time = time.monotonic()
        self._timers: Dict[str, float] = {}
        self._metrics: Dict[str, list] = defaultdict(list)
        self._counters: Dict[str, int] = defaultdict(int)

    def start_timer(self, name: str) -> None:
        """Start a named timer."""
        with self._lock:
            self._timers[name] = time.monotonic()

    def stop_timer(self, name: str) -> float:
        """
        Stop a named timer and return elapsed time.

        Args:
            name: Timer name

        Returns:
            Elapsed time in seconds

        Raises:
            KeyError: If timer was not started
        """
        with self._lock:
            if name not in self._timers:
                raise KeyError(f"Timer '{name}' was not started")
            elapsed = time.monotonic() - self._timers.pop(name)
            self._metrics[f"{name}_duration"].append(elapsed)
        return elapsed

    def record_metric(self, name: str, value: Any) -> None:
        """Record a metric value."""
        with self._lock:
            self._metrics[name].append(value)

    def increment_counter(self, name: str, amount: int = 1) -> None:
        """Increment a counter."""
        with self._lock:
            self._counters[name] += amount

    def get_counter(self, name: str) -> int:
        """Get counter value."""
        with self._lock:
            return self._counters.get(name, 0)

    def get_metric(self, name: str) -> list:
        """Get all values for a metric."""
        with self._lock:
            return list(self._metrics.get(name, []))

    def get_summary(self) -> Dict[str, Any]:
        """
        Get summary of all metrics.

        Returns:
            Dictionary with counters and per-metric count/sum/min/max
        """
        with self._lock:
            summary = {
                "total_elapsed": time.monotonic() - self._start_time,
                "counters": dict(self._counters),
                "metrics": {}
            }
            for name, values in self._metrics.items():
                if not values:
                    continue
                summary["metrics"][name] = {
                    "count": len(values),
                    "sum": sum(values),
                    "min": min(values),
                    "max": max(values),
                }
        return summary

    def log_summary(self, logger: Optional[logging.Logger] = None) -> None:
        """Log a one-line summary of counters and durations."""
        logger = logger or logging.getLogger(__name__)
        summary = self.get_summary()
        parts = [f"{name}={value}" for name, value in summary["counters"].items()]
        parts += [
            f"{name}={data['sum']:.2f}s"
            for name, data in summary["metrics"].items()
            if name.endswith("_duration")
        ]
        logger.info(f"Backup metrics: {', '.join(parts) or 'none'}")
