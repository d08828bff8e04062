"""HDR histogram of request durations.

Wraps ``hdrh.histogram.HdrHistogram`` so callers work in seconds while the
histogram stores integer microseconds. Durations are recorded once and
never kept individually.
"""

from __future__ import annotations

from hdrh.histogram import HdrHistogram  # type: ignore[import-untyped]

# Range: 1 microsecond to 1 hour (in microseconds)
_LOWEST_TRACKABLE_US = 1
_HIGHEST_TRACKABLE_US = 3_600_000_000
_SIGNIFICANT_DIGITS = 3

_US_PER_SECOND = 1_000_000


class LatencyHistogram:
    """Request-duration histogram with percentile queries in seconds.

    Values outside the trackable range are clamped on the way in. Empty
    histograms report 0.0 for every statistic.

    Not thread-safe; ``Aggregate`` guards it with its own lock.
    """

    def __init__(
        self,
        lowest_us: int = _LOWEST_TRACKABLE_US,
        highest_us: int = _HIGHEST_TRACKABLE_US,
        significant_digits: int = _SIGNIFICANT_DIGITS,
    ) -> None:
        self.lowest_us = lowest_us
        self.highest_us = highest_us
        self._histogram: HdrHistogram = HdrHistogram(  # type: ignore[no-any-unimported]
            lowest_us, highest_us, significant_digits
        )

    def __len__(self) -> int:
        return int(self._histogram.total_count)

    def record(self, seconds: float) -> None:
        """Record one duration given in seconds."""
        value_us = int(seconds * _US_PER_SECOND)
        value_us = max(self.lowest_us, min(value_us, self.highest_us))
        self._histogram.record_value(value_us)

    def percentile(self, percentile: float) -> float:
        """Return the duration in seconds at *percentile* (0.0 to 100.0)."""
        if not len(self):
            return 0.0
        return self._histogram.get_value_at_percentile(percentile) / _US_PER_SECOND

    def min(self) -> float:
        """Return the smallest recorded duration in seconds."""
        if not len(self):
            return 0.0
        return self._histogram.get_min_value() / _US_PER_SECOND

    def max(self) -> float:
        """Return the largest recorded duration in seconds."""
        if not len(self):
            return 0.0
        return self._histogram.get_max_value() / _US_PER_SECOND
