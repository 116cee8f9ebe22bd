"""Queue of outstanding device commands."""

from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from collections.abc import Callable

from commandq.core.sinks import Handler, Sink, make_sink
from commandq.ports.render import NullRenderTarget, RenderTargetPort
from commandq.ports.request import RequestRecord
from commandq.ports.transport import (
    TransportOpenerPort,
    TransportPort,
    UnavailableTransport,
)

__all__ = ["AsyncRequestQueue", "get_now_ms"]

logger = logging.getLogger(__name__)


def get_now_ms() -> float:
    """Get current monotonic time in milliseconds."""
    return time.monotonic() * 1_000.0


class AsyncRequestQueue:
    """Ordered collection of records waiting for the poll scheduler.

    Records are appended on issuance and handed off to the scheduler one
    tick at a time. Anything appended while a tick is running (re-enqueued
    records, repeats, commands issued by handlers) lands in a fresh tail
    that the running tick never sees.

    Not thread-safe; use from a single event loop.
    """

    def __init__(
        self,
        opener: TransportOpenerPort,
        *,
        render: RenderTargetPort | None = None,
        clock: Callable[[], float] = get_now_ms,
    ) -> None:
        """Initialize an empty queue.

        Args:
            opener: Starts the POST behind every new record.
            render: Render target for named-target sinks. Without one,
                writes are dropped and alerts only reach the log.
            clock: Monotonic milliseconds source.
        """
        self._opener = opener
        self._render = render if render is not None else NullRenderTarget()
        self._clock = clock
        self._records: deque[RequestRecord | None] = deque()

    def __len__(self) -> int:
        return len(self._records)

    @property
    def records(self) -> tuple[RequestRecord | None, ...]:
        """Queued records, head first."""
        return tuple(self._records)

    def now_ms(self) -> float:
        """Current time on the queue's clock."""
        return self._clock()

    def issue(
        self,
        url: str,
        sink: Sink | Handler | str | None = None,
        repeat: bool = False,
        payload: str | None = None,
    ) -> None:
        """Start a command and track it until it resolves.

        The send starts immediately and is never awaited. A send that
        cannot even be started is not reported here: its record simply
        times out.

        Args:
            url: Destination, opaque to the queue.
            sink: Handler function, render target identifier, sink or None.
            repeat: Re-issue the command each time it resolves.
            payload: Command body, opaque to the queue.
        """
        self._append(make_sink(sink, self._render), url, repeat, payload)

    def reissue(self, record: RequestRecord) -> None:
        """Issue a fresh copy of a resolved record, without payload."""
        self._append(record.sink, record.url, record.repeat, None)

    def handoff(self) -> deque[RequestRecord | None]:
        """Take every queued record for one tick, leaving an empty tail."""
        this_tick, self._records = self._records, deque()
        return this_tick

    def push(self, record: RequestRecord) -> None:
        """Put an unresolved record back at the tail."""
        self._records.append(record)

    async def drain(self) -> int:
        """Release every queued transport without dispatching.

        Waits until every aborted exchange has stopped, so the sessions
        behind them can be closed afterwards.

        Returns:
            Number of records dropped.
        """
        records = self.handoff()
        await asyncio.gather(
            *(record.aclose() for record in records if record is not None),
            return_exceptions=True,
        )
        return len(records)

    def _append(self, sink: Sink, url: str, repeat: bool, payload: str | None) -> None:
        record = RequestRecord(
            url=url,
            sink=sink,
            repeat=repeat,
            transport=self._open(url, payload),
            created_at_ms=self._clock(),
        )
        self._records.append(record)

    def _open(self, url: str, payload: str | None) -> TransportPort:
        try:
            return self._opener.open(url, payload)
        except Exception as e:  # noqa: BLE001
            logger.debug(f"Could not start send to {url}: {e}")
            return UnavailableTransport()
