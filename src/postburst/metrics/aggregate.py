"""Thread-safe run statistics shared by all dispatcher workers."""

from __future__ import annotations

import threading
from collections import defaultdict
from typing import TYPE_CHECKING

from postburst.metrics.histogram import LatencyHistogram
from postburst.metrics.models import Summary

if TYPE_CHECKING:
    from collections.abc import Callable

    from postburst.metrics.models import RequestOutcome, WorkItem


class Aggregate:
    """Success/failure counters and duration totals for one run.

    Every worker merges its outcomes here. A single ``threading.Lock``
    makes each merge atomic with respect to every other merge, so counts
    and the duration total are exact whatever the interleaving. Outcomes
    are folded in and dropped, never stored.

    Invariants (under the lock):
        ``success_count + failure_count == processed``
        ``total_duration == sum of merged durations``
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._success_count = 0
        self._failure_count = 0
        self._total_duration = 0.0
        self._histogram = LatencyHistogram()
        self._status_counts: dict[int, int] = defaultdict(int)
        self._errors_by_type: dict[str, int] = defaultdict(int)

    @property
    def processed(self) -> int:
        """Return the number of outcomes merged so far."""
        with self._lock:
            return self._success_count + self._failure_count

    def merge(
        self,
        item: WorkItem,
        outcome: RequestOutcome,
        report: Callable[[WorkItem, RequestOutcome], None] | None = None,
    ) -> None:
        """Fold one outcome into the totals.

        Args:
            item: The work item the outcome belongs to.
            outcome: Result of the request.
            report: Optional callback run while the lock is still held, so
                per-request output lines never interleave.
        """
        with self._lock:
            if outcome.error is None:
                self._success_count += 1
            else:
                self._failure_count += 1
                self._errors_by_type[outcome.error.kind] += 1
            if outcome.status_code is not None:
                self._status_counts[outcome.status_code] += 1
            self._total_duration += outcome.duration
            self._histogram.record(outcome.duration)
            if report is not None:
                report(item, outcome)

    def summarize(self, times: int, threads: int, wall_time: float = 0.0) -> Summary:
        """Return an immutable ``Summary`` of everything merged so far."""
        with self._lock:
            hist = self._histogram
            return Summary(
                times=times,
                threads=threads,
                success_count=self._success_count,
                failure_count=self._failure_count,
                total_duration=self._total_duration,
                wall_time=wall_time,
                latency_min=hist.min(),
                latency_p50=hist.percentile(50.0),
                latency_p95=hist.percentile(95.0),
                latency_p99=hist.percentile(99.0),
                latency_max=hist.max(),
                status_counts=dict(sorted(self._status_counts.items())),
                errors_by_type=dict(sorted(self._errors_by_type.items())),
            )
