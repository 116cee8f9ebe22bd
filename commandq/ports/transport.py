"""Transport port definition (interfaces)."""

from __future__ import annotations

from typing import Protocol

__all__ = ["TransportPort", "TransportOpenerPort", "UnavailableTransport"]


class TransportPort(Protocol):
    """Handle over one asynchronous POST that is observed by polling.

    Completion is never pushed to the caller: the scheduler asks the
    handle for its state on every tick.
    """

    def ready(self) -> bool:
        """Return True once the exchange has finished (in any way)."""
        ...

    def succeeded(self) -> bool:
        """Return True if the exchange finished with HTTP 200."""
        ...

    def response_body(self) -> str | None:
        """Return the raw response text, or None if there is none."""
        ...

    def abort(self) -> None:
        """Stop the exchange if still running and drop its resources."""
        ...

    async def aclose(self) -> None:
        """Abort, then wait until the exchange has finished unwinding."""
        ...


class TransportOpenerPort(Protocol):
    """Something that can start a POST and hand back its transport."""

    def open(self, url: str, payload: str | None = None) -> TransportPort:
        """Start sending payload to url and return the handle.

        Args:
            url: Destination, opaque to the core.
            payload: Command body, opaque to the core.

        Returns:
            Transport handle (possibly one that never becomes ready).
        """
        ...


class UnavailableTransport:
    """Null transport: never ready, so its record resolves by timeout."""

    def ready(self) -> bool:
        return False

    def succeeded(self) -> bool:
        return False

    def response_body(self) -> str | None:
        return None

    def abort(self) -> None:
        pass

    async def aclose(self) -> None:
        pass
