"""Transport capability selection."""

import logging
from collections.abc import Sequence
from typing import Protocol
from urllib.parse import urljoin

import aiohttp
import httpx

from commandq.adapters.driven.http.transport import AiohttpTransport, HttpxTransport
from commandq.ports.transport import TransportOpenerPort, TransportPort, UnavailableTransport

__all__ = [
    "AiohttpMechanism",
    "HttpxMechanism",
    "TransportMechanism",
    "TransportSelector",
]

logger = logging.getLogger(__name__)


class TransportMechanism(Protocol):
    """One way of sending a POST, possibly unusable right now."""

    name: str

    def available(self) -> bool: ...

    def open(self, url: str, payload: str | None) -> TransportPort: ...


class AiohttpMechanism:
    """Native transport: a live aiohttp session."""

    name = "aiohttp"

    def __init__(self, session: aiohttp.ClientSession | None) -> None:
        self.session = session

    def available(self) -> bool:
        return self.session is not None and not self.session.closed

    def open(self, url: str, payload: str | None) -> TransportPort:
        return AiohttpTransport(self.session, url, payload)


class HttpxMechanism:
    """Legacy fallback transport: a live httpx client."""

    name = "httpx"

    def __init__(self, client: httpx.AsyncClient | None) -> None:
        self.client = client

    def available(self) -> bool:
        return self.client is not None and not self.client.is_closed

    def open(self, url: str, payload: str | None) -> TransportPort:
        return HttpxTransport(self.client, url, payload)


class TransportSelector(TransportOpenerPort):
    """Opens each POST on the first available mechanism.

    When none is usable the record gets an UnavailableTransport and
    fails through the timeout path like any other lost command.
    """

    def __init__(self, mechanisms: Sequence[TransportMechanism], base_url: str | None = None) -> None:
        """Initialize selector.

        Args:
            mechanisms: Candidates in preference order.
            base_url: Base that relative command URLs are joined to.
        """
        self.mechanisms = list(mechanisms)
        self.base_url = base_url

    def resolve(self, url: str) -> str:
        """Join url to the base URL, if any."""
        return urljoin(self.base_url, url) if self.base_url else url

    def open(self, url: str, payload: str | None = None) -> TransportPort:
        target = self.resolve(url)
        for mechanism in self.mechanisms:
            if mechanism.available():
                return mechanism.open(target, payload)

        logger.debug(f"No transport available for {target}")
        return UnavailableTransport()
