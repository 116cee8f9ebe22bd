"""Polled POST transports over aiohttp and httpx."""

import asyncio
import logging
from abc import ABC, abstractmethod

import aiohttp
import httpx

from commandq.ports.transport import TransportPort

__all__ = ["AiohttpTransport", "HttpxTransport", "HTTP_OK"]

logger = logging.getLogger(__name__)

HTTP_OK = 200


class _TaskTransport(TransportPort, ABC):
    """Runs one POST as a background task and exposes its state.

    The task never raises: send errors are logged and leave the transport
    ready but unsuccessful.
    """

    def __init__(self, url: str, payload: str | None) -> None:
        self.url = url
        self.status: int | None = None
        self._text: str | None = None
        loop = asyncio.get_running_loop()
        self._task: asyncio.Task[None] = loop.create_task(self._run(payload))

    @abstractmethod
    async def _exchange(self, payload: str | None) -> tuple[int, str]:
        """Send the POST and return its status code and body."""

    async def _run(self, payload: str | None) -> None:
        try:
            self.status, self._text = await self._exchange(payload)
        except Exception as e:  # noqa: BLE001
            logger.debug(f"POST {self.url} failed: {e}")

    def ready(self) -> bool:
        return self._task.done()

    def succeeded(self) -> bool:
        return self._task.done() and self.status == HTTP_OK

    def response_body(self) -> str | None:
        return self._text

    def abort(self) -> None:
        if not self._task.done():
            self._task.cancel()

    async def aclose(self) -> None:
        self.abort()
        await asyncio.gather(self._task, return_exceptions=True)


class AiohttpTransport(_TaskTransport):
    """POST through a shared aiohttp session."""

    def __init__(self, session: aiohttp.ClientSession, url: str, payload: str | None) -> None:
        self._session = session
        super().__init__(url, payload)

    async def _exchange(self, payload: str | None) -> tuple[int, str]:
        async with self._session.post(self.url, data=payload) as resp:
            return resp.status, await resp.text()


class HttpxTransport(_TaskTransport):
    """POST through a shared httpx client."""

    def __init__(self, client: httpx.AsyncClient, url: str, payload: str | None) -> None:
        self._client = client
        super().__init__(url, payload)

    async def _exchange(self, payload: str | None) -> tuple[int, str]:
        resp = await self._client.post(self.url, content=payload)
        return resp.status_code, resp.text
