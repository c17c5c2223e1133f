"""
Default Metrics implementations.
"""

from __future__ import annotations

import logging
from collections import Counter

from .protocol import Metric

logger = logging.getLogger(__name__)


class InMemoryMetrics:
    """
    Counts metrics in process memory.

    Usage:
        metrics = InMemoryMetrics()
        metrics.inc("OpenApiFdw", Metric.ROWS_IN, 10)
        metrics.get(Metric.ROWS_IN)  # 10
    """

    def __init__(self) -> None:
        self._counts: Counter[tuple[str, Metric]] = Counter()

    def inc(self, fdw_name: str, metric: Metric, value: int) -> None:
        self._counts[(fdw_name, metric)] += value

    def get(self, metric: Metric, fdw_name: str | None = None) -> int:
        """Total for a metric, optionally restricted to one FDW name."""
        return sum(
            count
            for (name, m), count in self._counts.items()
            if m is metric and (fdw_name is None or name == fdw_name)
        )

    def snapshot(self) -> dict[str, int]:
        totals: Counter[str] = Counter()
        for (_, metric), count in self._counts.items():
            totals[metric.value] += count
        return dict(totals)


class NullMetrics:
    """Discards all metrics."""

    def inc(self, fdw_name: str, metric: Metric, value: int) -> None:
        return None
