"""Render target that logs what a UI would display."""

import logging

from commandq.ports.render import RenderTargetPort

__all__ = ["LogRenderTarget"]

logger = logging.getLogger(__name__)


class LogRenderTarget(RenderTargetPort):
    """Keeps the latest content of every named target and logs changes."""

    def __init__(self) -> None:
        self.contents: dict[str, str] = {}
        self.alerts: list[str] = []

    def write(self, identifier: str, text: str) -> None:
        self.contents[identifier] = text
        logger.info(f"[{identifier}] {text}")

    def alert(self, message: str) -> None:
        self.alerts.append(message)
        logger.warning(message.replace("\n", " "))
