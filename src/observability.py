"""Observability: in-process counters and latency samples for the oracle pipeline.

Counters track decisions and stream outcomes (``decision_is_follow_up``,
``streams_completed``, ``background_failures``); timers track how long the
slow stages take (``interpretation``, ``time_to_first_section``).
"""

import time
from contextlib import contextmanager
from typing import Any

import structlog

logger = structlog.get_logger().bind(source="observability")


class Metrics:
    """Simple dict-based metrics collector for counters and timers."""

    def __init__(self):
        self._counters: dict[str, int] = {}
        self._timers: dict[str, list[float]] = {}

    def counter(self, name: str, value: int = 1):
        """Increment a counter by the given value."""
        self._counters[name] = self._counters.get(name, 0) + value

    def get(self, name: str) -> int:
        return self._counters.get(name, 0)

    def observe(self, name: str, seconds: float):
        """Record one latency sample."""
        self._timers.setdefault(name, []).append(seconds)

    @contextmanager
    def timer(self, name: str):
        """Context manager to time an operation and store duration."""
        start = time.monotonic()
        try:
            yield
        finally:
            self.observe(name, time.monotonic() - start)

    def summary(self) -> dict[str, Any]:
        """Counters plus count/avg/max per timer."""
        timer_summary = {}
        for name, durations in self._timers.items():
            timer_summary[name] = {
                "count": len(durations),
                "avg": round(sum(durations) / len(durations), 4),
                "max": round(max(durations), 4),
            }

        return {
            "counters": dict(self._counters),
            "timers": timer_summary,
        }

    def reset(self):
        """Clear all metrics."""
        self._counters.clear()
        self._timers.clear()


# Module-level singleton
metrics = Metrics()


def log_run_summary():
    """Log the current metrics summary via structlog."""
    logger.info("metrics.summary", **metrics.summary())
