"""Render target port definition (interface)."""

import logging
from typing import Protocol

__all__ = ["RenderTargetPort", "NullRenderTarget"]

logger = logging.getLogger(__name__)


class RenderTargetPort(Protocol):
    """User-facing surface that named-target sinks report to."""

    def write(self, identifier: str, text: str) -> None:
        """Replace the content of the target called identifier."""
        ...

    def alert(self, message: str) -> None:
        """Show a user-visible failure message."""
        ...


class NullRenderTarget:
    """Render target with no surface: writes are dropped, alerts are logged."""

    def write(self, identifier: str, text: str) -> None:
        pass

    def alert(self, message: str) -> None:
        logger.warning(message.replace("\n", " "))
