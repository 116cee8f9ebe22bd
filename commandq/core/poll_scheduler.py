"""Recurring tick that resolves outstanding commands by polling."""

import asyncio
import logging
from collections.abc import Callable

from commandq.core.request_queue import AsyncRequestQueue
from commandq.core.sinks import CommandResult
from commandq.ports.metrics import DispatchDto, MetricsPort
from commandq.ports.request import RequestRecord
from commandq.ports.settings import (
    DEFAULT_POLL_INTERVAL_MS,
    DEFAULT_START_DELAY_MS,
    DEFAULT_TIMEOUT_MS,
)

__all__ = ["PollScheduler"]

logger = logging.getLogger(__name__)


class PollScheduler:
    """Polls every queued record once per tick.

    Each tick handles exactly the records queued when it starts:
    - ready with HTTP 200: release the transport, hand the body to the sink;
    - older than the timeout: release the transport, report failure;
    - otherwise: back to the tail for the next tick.

    Resolved records with repeat set are issued again. The next tick is
    armed only once the current one returns, so ticks never overlap.
    """

    def __init__(
        self,
        queue: AsyncRequestQueue,
        *,
        timeout_ms: float = DEFAULT_TIMEOUT_MS,
        poll_interval_ms: float = DEFAULT_POLL_INTERVAL_MS,
        start_delay_ms: float = DEFAULT_START_DELAY_MS,
        metrics: MetricsPort | None = None,
    ) -> None:
        """Initialize the scheduler.

        Args:
            queue: Queue to drain.
            timeout_ms: Age after which an unresolved record fails.
            poll_interval_ms: Delay between the end of a tick and the next.
            start_delay_ms: Delay before the first tick.
            metrics: Optional collector updated on every dispatch.
        """
        self.queue = queue
        self.timeout_ms = timeout_ms
        self.poll_interval_ms = poll_interval_ms
        self.start_delay_ms = start_delay_ms
        self.metrics = metrics

    def tick(self) -> int:
        """Run one tick.

        Returns:
            Number of records taken from the queue.
        """
        this_tick = self.queue.handoff()
        now_ms = self.queue.now_ms()
        for record in this_tick:
            if record is None:
                continue
            try:
                self._poll(record, now_ms)
            except Exception as e:  # noqa: BLE001
                logger.error(f"Polling {record.url} failed, dropping it: {e}", exc_info=True)
                self._discard(record)
        return len(this_tick)

    async def run(self, stop_fn: Callable[[], bool]) -> None:
        """Tick until stop_fn() returns True.

        On exit every outstanding transport is released; those records
        are dropped without dispatch.

        Args:
            stop_fn: Callable that returns True when the loop should exit.
        """
        await asyncio.sleep(self.start_delay_ms / 1_000.0)
        while not stop_fn():
            self.tick()
            await asyncio.sleep(self.poll_interval_ms / 1_000.0)

        dropped = await self.queue.drain()
        if dropped:
            logger.info(f"Dropped {dropped} outstanding command(s) on shutdown")

    def _poll(self, record: RequestRecord, now_ms: float) -> None:
        elapsed_ms = record.elapsed_ms(now_ms)
        transport = record.transport

        if transport is not None and transport.ready() and transport.succeeded():
            body = transport.response_body()
            self._resolve(record, CommandResult(ok=True, body=body), elapsed_ms)
            return

        if elapsed_ms > self.timeout_ms:
            logger.warning(f"Command to {record.url} timed out after {elapsed_ms:.0f} ms")
            self._resolve(record, CommandResult(ok=False), elapsed_ms)
            return

        self.queue.push(record)

    def _resolve(self, record: RequestRecord, result: CommandResult, elapsed_ms: float) -> None:
        record.release()

        try:
            record.sink.notify(result)
        except Exception as e:  # noqa: BLE001
            logger.error(f"Sink for {record.url} raised: {e}", exc_info=True)

        if self.metrics:
            try:
                self.metrics.update(
                    DispatchDto(url=record.url, elapsed_ms=elapsed_ms, timed_out=not result.ok)
                )
                logger.debug(f"Dispatch metrics: {self.metrics}")
            except Exception as e:  # noqa: BLE001
                logger.error(f"Metrics update for {record.url} failed: {e}", exc_info=True)

        if record.repeat:
            self.queue.reissue(record)

    def _discard(self, record: RequestRecord) -> None:
        try:
            record.release()
        except Exception as e:  # noqa: BLE001
            logger.error(f"Releasing {record.url} failed: {e}")
