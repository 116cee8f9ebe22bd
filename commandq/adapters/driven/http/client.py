"""HTTP client adapter owning the device sessions."""

import logging
from collections.abc import Sequence
from types import TracebackType

import aiohttp
import httpx
from aiohttp import ClientTimeout

from commandq.adapters.driven.http.retry import retry
from commandq.adapters.driven.http.selector import (
    AiohttpMechanism,
    HttpxMechanism,
    TransportMechanism,
    TransportSelector,
)

__all__ = ["HttpClient"]

logger = logging.getLogger(__name__)

# Configurable retry settings
PROBE_RETRIES = 5
PROBE_TIMEOUT = 10


class HttpClient:
    """Owns the aiohttp session and the httpx fallback client.

    Features:
    - Context manager for proper resource cleanup.
    - Transport selector over both sessions, in configurable order.
    - Health check/probe with retry on transient errors.
    """

    def __init__(self, timeout_sec: float | None = None) -> None:
        """Initialize HTTP client.

        Args:
            timeout_sec: Upper bound for one exchange; None for no limit.
        """
        self.timeout_sec = timeout_sec
        self.session: aiohttp.ClientSession | None = None
        self.legacy: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "HttpClient":
        """Enter async context manager (start sessions).

        Returns:
            Self for use in async with statement.
        """
        self.session = aiohttp.ClientSession(timeout=ClientTimeout(total=self.timeout_sec))
        self.legacy = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout_sec))
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Exit async context manager (close sessions).

        Args:
            exc_type: Exception type if raised in context.
            exc: Exception instance if raised in context.
            tb: Traceback if raised in context.
        """
        if self.session:
            await self.session.close()
        if self.legacy:
            await self.legacy.aclose()

    def selector(
        self,
        base_url: str | None = None,
        order: Sequence[str] = ("aiohttp", "httpx"),
    ) -> TransportSelector:
        """Build a transport selector over this client's sessions.

        Args:
            base_url: Base that relative command URLs are joined to.
            order: Mechanism names in preference order.

        Returns:
            Selector usable as the queue's opener.

        Raises:
            ValueError: If order names an unknown mechanism.
        """
        known: dict[str, TransportMechanism] = {
            "aiohttp": AiohttpMechanism(self.session),
            "httpx": HttpxMechanism(self.legacy),
        }
        try:
            mechanisms = [known[name] for name in order]
        except KeyError as e:
            raise ValueError(f"Unknown transport: {e.args[0]}") from e
        return TransportSelector(mechanisms, base_url=base_url)

    @retry(times=PROBE_RETRIES)
    async def _probe_once(self, url: str, timeout: int = PROBE_TIMEOUT) -> int:
        """Single HTTP GET request for health check (with retry).

        Uses the aiohttp session when open, the httpx client otherwise.

        Args:
            url: URL to probe.
            timeout: Timeout in seconds.

        Returns:
            HTTP status code.

        Raises:
            RuntimeError: If no session is initialized.
            aiohttp/httpx exceptions: Network/timeout errors (retried by decorator).
        """
        if self.session is not None and not self.session.closed:
            async with self.session.get(
                url, timeout=ClientTimeout(timeout), allow_redirects=True
            ) as resp:
                return resp.status
        if self.legacy is not None and not self.legacy.is_closed:
            resp = await self.legacy.get(url, timeout=timeout, follow_redirects=True)
            return resp.status_code
        raise RuntimeError("Session not initialized; use 'async with' context manager")

    async def probe(self, url: str, timeout: int = PROBE_TIMEOUT) -> bool:
        """Check if HTTP endpoint is reachable.

        Attempts up to PROBE_RETRIES times with exponential backoff.

        Args:
            url: URL to probe.
            timeout: Timeout in seconds.

        Returns:
            True if reachable (200 <= status < 300), False otherwise.
        """
        logger.info(f"Probing endpoint {url}...")
        try:
            status = await self._probe_once(url, timeout)
            logger.info(f"Probe for {url} returned status {status}")
            return 200 <= status < 300
        except Exception as e:
            logger.warning(f"Probe failed for {url}: {e}")
            return False
