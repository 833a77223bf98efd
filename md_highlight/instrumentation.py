"""Timing of highlight passes."""

from __future__ import annotations

import logging

from .constants import DEFAULT_PERFORMANCE_BUDGET_LINES, DEFAULT_PERFORMANCE_BUDGET_MS
from .models import PerformanceStats

logger = logging.getLogger(__name__)


class PerformanceMonitor:
    """Record pass durations and warn about passes over budget.

    The monitor only observes: it never raises and never changes the outcome
    of a pass.

    Args:
        budget_ms: Target duration for documents up to `budget_lines` lines.
        budget_lines: Document length covered by `budget_ms`; longer
            documents get a proportionally larger budget.
        log_every_pass: Log the duration of every pass at INFO level.
    """

    def __init__(
        self,
        budget_ms: float = DEFAULT_PERFORMANCE_BUDGET_MS,
        budget_lines: int = DEFAULT_PERFORMANCE_BUDGET_LINES,
        log_every_pass: bool = False,
    ):
        self.budget_ms = budget_ms
        self.budget_lines = budget_lines
        self.log_every_pass = log_every_pass
        self.reset()

    def reset(self) -> None:
        self.last_duration = 0.0
        self.total_duration = 0.0
        self.count = 0
        self.cache_hits = 0
        self.over_budget = 0

    def budget_for(self, line_count: int) -> float:
        """Return the allowed duration in milliseconds for a document size."""
        if line_count <= self.budget_lines:
            return self.budget_ms
        return self.budget_ms * line_count / self.budget_lines

    def record(self, duration_ms: float, line_count: int, cached: bool = False) -> bool:
        """Record one pass.

        Args:
            duration_ms: Wall-clock duration of the pass.
            line_count: Number of lines in the highlighted document.
            cached: Whether the pass was served from the cache.

        Returns:
            bool: True when the pass stayed within budget.

        Examples:
            monitor.record(12.5, line_count=300)  # True
        """
        self.last_duration = duration_ms
        self.total_duration += duration_ms
        self.count += 1
        if cached:
            self.cache_hits += 1

        if self.log_every_pass:
            logger.info(
                "Highlighted %d lines in %.2fms (%s)",
                line_count,
                duration_ms,
                "cached" if cached else "rendered",
            )

        budget = self.budget_for(line_count)
        if duration_ms > budget:
            self.over_budget += 1
            logger.warning(
                "Slow highlighting: %.2fms for %d lines (target: <%.0fms)",
                duration_ms,
                line_count,
                budget,
            )
            return False
        return True

    def stats(self, cache_size: int, max_cache_size: int) -> PerformanceStats:
        average = self.total_duration / self.count if self.count else 0.0
        return PerformanceStats(
            last_highlight_time=self.last_duration,
            total_highlights=self.count,
            average_time=average,
            cache_size=cache_size,
            max_cache_size=max_cache_size,
            cache_hits=self.cache_hits,
        )
