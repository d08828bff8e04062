"""Plain-text rendering of per-request lines and the run summary."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from postburst.metrics.models import RequestOutcome, Summary, WorkItem

RULE = "=" * 50


def format_duration(seconds: float) -> str:
    """Render *seconds* with a unit that keeps the number readable.

    Example::

        >>> format_duration(0.0123)
        '12.300ms'
    """
    if seconds < 0.001:
        return f"{seconds * 1_000_000:.0f}µs"
    if seconds < 1.0:
        return f"{seconds * 1000:.3f}ms"
    return f"{seconds:.3f}s"


def format_outcome(item: WorkItem, times: int, outcome: RequestOutcome) -> str:
    """Render the lines printed for one finished request."""
    prefix = f"[Request {item.index}/{times}]"
    if outcome.error is not None:
        lines = [f"{prefix} Error: {outcome.error.kind}: {outcome.error}"]
        if outcome.status_code is not None:
            lines.append(f"Status: {outcome.status_code}")
    else:
        lines = [
            f"{prefix} Status: {outcome.status_code}",
            f"Response Body: {outcome.body}",
        ]
    lines.append(f"Duration: {format_duration(outcome.duration)}")
    return "\n".join(lines)


def format_summary(summary: Summary) -> str:
    """Render the final summary block.

    Average duration is shown as ``n/a`` when no requests were planned.
    Latency, status and error breakdowns are only shown when there is
    something to show.

    Args:
        summary: Final run statistics.

    Returns:
        Multi-line text, without a trailing newline.
    """
    average = format_duration(summary.average_duration) if summary.times > 0 else "n/a"
    lines = [
        RULE,
        "Summary:",
        f"   Total Requests: {summary.times}",
        f"   Concurrent Threads: {summary.threads}",
        f"   Successful: {summary.success_count}",
        f"   Failed: {summary.failure_count}",
        f"   Total Duration: {format_duration(summary.total_duration)}",
        f"   Average Duration: {average}",
        f"   Wall Time: {format_duration(summary.wall_time)}",
        f"   Requests/sec: {summary.requests_per_second:.1f}",
    ]

    if summary.times > 0:
        lines.append(
            "   Latency: "
            f"min={format_duration(summary.latency_min)} "
            f"p50={format_duration(summary.latency_p50)} "
            f"p95={format_duration(summary.latency_p95)} "
            f"p99={format_duration(summary.latency_p99)} "
            f"max={format_duration(summary.latency_max)}"
        )

    if summary.status_counts:
        lines.append("   Status Codes:")
        lines.extend(f"      {code}: {count}" for code, count in summary.status_counts.items())

    if summary.errors_by_type:
        lines.append("   Errors:")
        lines.extend(f"      {kind}: {count}" for kind, count in summary.errors_by_type.items())

    return "\n".join(lines)
