"""Per-request and per-run result dataclasses for postburst."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from postburst._internal.errors import RequestError

__all__ = [
    "RequestOutcome",
    "Summary",
    "WorkItem",
]


@dataclass(frozen=True, order=True)
class WorkItem:
    """One planned request.

    Attributes:
        index: 1-based sequence number, used only in display.
    """

    index: int


@dataclass(frozen=True)
class RequestOutcome:
    """Result of one POST, produced once per work item.

    Attributes:
        status_code: HTTP status, or None if no response arrived.
        body: Response body text ("" on failure before the read).
        duration: Seconds from just before serialization to just after
            the body was read (or the failure was detected).
        error: The failure, or None for a complete request/response cycle.
            4xx and 5xx responses are not failures.
    """

    status_code: int | None
    body: str
    duration: float
    error: RequestError | None = None

    @property
    def ok(self) -> bool:
        """Return True if the request completed without a transport error."""
        return self.error is None


@dataclass(frozen=True)
class Summary:
    """Final aggregate statistics for a dispatch run.

    All durations are in seconds.

    Attributes:
        times: Requests planned (and processed).
        threads: Worker pool size.
        success_count: Requests that got a full response.
        failure_count: Requests that failed to encode, connect or read.
        total_duration: Sum of every request's duration.
        wall_time: Elapsed time of the whole dispatch.
        latency_min: Fastest request.
        latency_p50: Median request duration.
        latency_p95: 95th percentile request duration.
        latency_p99: 99th percentile request duration.
        latency_max: Slowest request.
        status_counts: Number of responses per HTTP status code.
        errors_by_type: Number of failures per error kind.
    """

    times: int
    threads: int
    success_count: int
    failure_count: int
    total_duration: float
    wall_time: float = 0.0
    latency_min: float = 0.0
    latency_p50: float = 0.0
    latency_p95: float = 0.0
    latency_p99: float = 0.0
    latency_max: float = 0.0
    status_counts: dict[int, int] = field(default_factory=dict)
    errors_by_type: dict[str, int] = field(default_factory=dict)

    @property
    def average_duration(self) -> float:
        """Mean request duration, or 0.0 when no requests were planned."""
        if self.times <= 0:
            return 0.0
        return self.total_duration / self.times

    @property
    def requests_per_second(self) -> float:
        """Throughput over the wall time, or 0.0 if nothing was measured."""
        if self.wall_time <= 0:
            return 0.0
        return self.times / self.wall_time
