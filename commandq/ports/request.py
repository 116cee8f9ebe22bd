"""Request record definition (DTO)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from commandq.ports.transport import TransportPort

if TYPE_CHECKING:
    from commandq.core.sinks import Sink

__all__ = ["RequestRecord"]


@dataclass(eq=False)
class RequestRecord:
    """One outstanding command tracked by the request queue.

    The payload is not kept: it is consumed when the transport is opened.

    Attributes:
        url: Destination, opaque to the core.
        sink: Completion target notified when the record resolves.
        repeat: Re-issue the same command after resolution.
        transport: Owned transport handle; None once released.
        created_at_ms: Monotonic milliseconds at issuance.
    """

    url: str
    sink: Sink
    repeat: bool
    transport: TransportPort | None
    created_at_ms: float

    def elapsed_ms(self, now_ms: float) -> float:
        """Milliseconds since issuance."""
        return now_ms - self.created_at_ms

    def release(self) -> None:
        """Abort and drop the transport. Safe to call more than once."""
        transport, self.transport = self.transport, None
        if transport is not None:
            transport.abort()

    async def aclose(self) -> None:
        """Release the transport and wait until its exchange has stopped."""
        transport, self.transport = self.transport, None
        if transport is not None:
            await transport.aclose()
