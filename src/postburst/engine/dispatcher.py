"""Bounded worker-thread pool that drains a queue of planned requests.

The ``Dispatcher`` enqueues one ``WorkItem`` per planned request, starts a
fixed number of worker threads and joins them. Each worker runs a private
asyncio event loop (uvloop when installed) holding its own
``RequestExecutor``, claims items with ``queue.Queue.get_nowait`` until the
queue is empty, and merges every outcome into a shared, lock-guarded
``Aggregate``.
"""

from __future__ import annotations

import asyncio
import queue
import sys
import threading
import time
from typing import TYPE_CHECKING

from postburst._internal.errors import ConfigError, DispatchError
from postburst._internal.logging import get_logger
from postburst.client.executor import RequestExecutor
from postburst.metrics.aggregate import Aggregate
from postburst.metrics.models import WorkItem

if TYPE_CHECKING:
    from collections.abc import Callable

    from postburst._internal.config import ClientConfig
    from postburst._internal.types import JSONValue
    from postburst.metrics.models import RequestOutcome, Summary

    OutcomeCallback = Callable[[WorkItem, int, RequestOutcome], None]

logger = get_logger("engine.dispatcher")


def _event_loop_factory() -> Callable[[], asyncio.AbstractEventLoop] | None:
    """Return uvloop's loop constructor if available, else None.

    None makes ``asyncio.Runner`` use the default event loop. Windows and
    environments without uvloop fall back silently.
    """
    if sys.platform == "win32":
        return None

    try:
        import uvloop
    except ImportError:
        logger.debug("uvloop not available, using default asyncio event loop")
        return None

    return uvloop.new_event_loop


class Dispatcher:
    """Runs ``times`` requests across ``threads`` worker threads.

    Args:
        config: Client configuration, shared read-only by every worker.
        producer: Zero-argument callable returning the payload for one
            request. Called from worker threads concurrently.
        on_outcome: Optional ``(item, times, outcome)`` callback invoked
            once per request while the aggregate lock is held.

    Example::

        dispatcher = Dispatcher(ClientConfig(url=url), ConstantPayload({"a": 1}))
        summary = dispatcher.run(times=100, threads=8)
        assert summary.success_count + summary.failure_count == 100
    """

    MAX_RECOMMENDED_THREADS = 100

    def __init__(
        self,
        config: ClientConfig,
        producer: Callable[[], JSONValue],
        *,
        on_outcome: OutcomeCallback | None = None,
    ) -> None:
        self.config = config
        self._producer = producer
        self._on_outcome = on_outcome

    @staticmethod
    def validate(times: int, threads: int) -> None:
        """Check run parameters.

        Raises:
            ConfigError: If ``threads < 1`` or ``times < 0``.
        """
        if threads < 1:
            msg = f"threads must be at least 1, got: {threads}"
            raise ConfigError(msg)
        if times < 0:
            msg = f"times must be >= 0, got: {times}"
            raise ConfigError(msg)

    def run(self, times: int, threads: int) -> Summary:
        """Dispatch every request and block until all are processed.

        Args:
            times: Number of requests to send. 0 sends nothing.
            threads: Worker pool size.

        Returns:
            The final ``Summary``.

        Raises:
            ConfigError: If ``threads < 1`` or ``times < 0``. Raised before
                any request is sent.
            DispatchError: If a worker died and left requests unprocessed.
        """
        self.validate(times, threads)
        if threads > self.MAX_RECOMMENDED_THREADS:
            logger.warning(
                "Using more than %d threads may cause performance issues (threads=%d)",
                self.MAX_RECOMMENDED_THREADS,
                threads,
            )

        work: queue.Queue[WorkItem] = queue.Queue()
        for index in range(1, times + 1):
            work.put_nowait(WorkItem(index))

        aggregate = Aggregate()
        report = self._make_reporter(times)
        loop_factory = _event_loop_factory()

        logger.info(
            "Dispatching %d requests to %s with %d workers",
            times,
            self.config.url,
            threads,
        )

        start = time.monotonic()
        workers = [
            threading.Thread(
                target=self._run_worker,
                args=(worker_id, work, aggregate, report, loop_factory),
                name=f"postburst-worker-{worker_id}",
            )
            for worker_id in range(threads)
        ]
        for worker in workers:
            worker.start()
        for worker in workers:
            worker.join()
        wall_time = time.monotonic() - start

        processed = aggregate.processed
        if processed != times:
            msg = f"only {processed} of {times} requests were processed"
            raise DispatchError(msg)

        summary = aggregate.summarize(times, threads, wall_time)
        logger.info(
            "Dispatch complete: requests=%d, success=%d, failed=%d, wall_time=%.3fs",
            times,
            summary.success_count,
            summary.failure_count,
            wall_time,
        )
        return summary

    def _make_reporter(self, times: int) -> Callable[[WorkItem, RequestOutcome], None]:
        on_outcome = self._on_outcome

        def _report(item: WorkItem, outcome: RequestOutcome) -> None:
            logger.debug(
                "Request %d/%d: status=%s error=%s duration=%.6fs",
                item.index,
                times,
                outcome.status_code,
                outcome.error.kind if outcome.error is not None else None,
                outcome.duration,
            )
            if on_outcome is not None:
                on_outcome(item, times, outcome)

        return _report

    def _run_worker(
        self,
        worker_id: int,
        work: queue.Queue[WorkItem],
        aggregate: Aggregate,
        report: Callable[[WorkItem, RequestOutcome], None],
        loop_factory: Callable[[], asyncio.AbstractEventLoop] | None,
    ) -> None:
        """Thread target: run the worker loop on a private event loop."""
        try:
            with asyncio.Runner(loop_factory=loop_factory) as runner:
                handled = runner.run(self._worker_loop(work, aggregate, report))
        except Exception:
            logger.exception("Worker %d: failed", worker_id)
            return
        logger.debug("Worker %d: done after %d requests", worker_id, handled)

    async def _worker_loop(
        self,
        work: queue.Queue[WorkItem],
        aggregate: Aggregate,
        report: Callable[[WorkItem, RequestOutcome], None],
    ) -> int:
        """Claim and process items until the queue is empty.

        Returns:
            Number of items this worker processed.
        """
        handled = 0
        async with RequestExecutor(self.config) as executor:
            while True:
                try:
                    item = work.get_nowait()
                except queue.Empty:
                    break

                payload = self._producer()
                outcome = await executor.execute(payload)
                aggregate.merge(item, outcome, report)
                handled += 1
        return handled
