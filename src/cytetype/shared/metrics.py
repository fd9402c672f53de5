"""Metrics collection for job polling."""

import time
import threading
from typing import Dict, Any
from collections import defaultdict


class MetricsCollector:
    """
    Collects counters and timers for polling runs.
    Implements IMetricsCollector protocol.

    One collector may be shared by concurrent runs; updates are locked.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._start_time = time.time()
        self._timers: Dict[str, float] = {}
        self._durations: Dict[str, float] = {}
        self._counters: Dict[str, int] = defaultdict(int)

    def start_timer(self, name: str) -> None:
        """Start a named timer."""
        with self._lock:
            self._timers[name] = time.time()

    def stop_timer(self, name: str) -> float:
        """
        Stop a named timer and return elapsed time.

        Raises:
            KeyError: If timer was not started
        """
        with self._lock:
            if name not in self._timers:
                raise KeyError(f"Timer '{name}' was not started")
            elapsed = time.time() - self._timers.pop(name)
        self.record_duration(name, elapsed)
        return elapsed

    def record_duration(self, name: str, seconds: float) -> None:
        """Store a duration measured by the caller as ``<name>_duration``."""
        with self._lock:
            self._durations[f"{name}_duration"] = seconds

    def increment_counter(self, name: str, amount: int = 1) -> None:
        """Increment a counter."""
        with self._lock:
            self._counters[name] += amount

    def get_counter(self, name: str) -> int:
        """Get counter value."""
        return self._counters.get(name, 0)

    def get_summary(self) -> Dict[str, Any]:
        """Get counters and finished timer durations."""
        with self._lock:
            return {
                "total_elapsed": time.time() - self._start_time,
                "counters": dict(self._counters),
                "durations": dict(self._durations),
            }

    def reset(self) -> None:
        """Reset all metrics and timers."""
        with self._lock:
            self._start_time = time.time()
            self._timers.clear()
            self._durations.clear()
            self._counters.clear()
