"""Completion sinks notified when a request record resolves."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol
from xml.etree.ElementTree import Element

from commandq.core.extract import parse_document
from commandq.ports.render import RenderTargetPort

__all__ = [
    "CommandResult",
    "FunctionSink",
    "Handler",
    "NamedTargetSink",
    "Sink",
    "make_sink",
    "DEFAULT_ALERT_MESSAGE",
]

DEFAULT_ALERT_MESSAGE = "Command failed.\nConnection to device was lost."

Handler = Callable[[Element | None], object]


@dataclass(slots=True, frozen=True)
class CommandResult:
    """Outcome of one resolved record.

    Attributes:
        ok: True if the transport finished with HTTP 200.
        body: Raw response text; None on failure.
    """

    ok: bool
    body: str | None = None


class Sink(Protocol):
    """Completion target of a record."""

    def notify(self, result: CommandResult, /) -> None:
        """Deliver the outcome of a resolved record."""
        ...


@dataclass(slots=True, frozen=True)
class FunctionSink:
    """Calls a handler with the parsed document, or None on failure."""

    handler: Handler

    def notify(self, result: CommandResult) -> None:
        self.handler(parse_document(result.body) if result.ok else None)


@dataclass(slots=True, frozen=True)
class NamedTargetSink:
    """Writes the raw response into a named render target.

    On failure no write happens; the render target raises an alert instead.
    An identifier of None makes a fire-and-forget command: success is
    ignored, failure still alerts.
    """

    identifier: str | None
    render: RenderTargetPort
    alert_message: str = DEFAULT_ALERT_MESSAGE

    def notify(self, result: CommandResult) -> None:
        if not result.ok:
            self.render.alert(self.alert_message)
            return
        if self.identifier is not None:
            self.render.write(self.identifier, result.body or "")


def make_sink(
    target: Sink | Handler | str | None,
    render: RenderTargetPort,
) -> Sink:
    """Build a sink from what a caller passed to issue().

    Args:
        target: A sink, a handler function, a target identifier or None.
        render: Render target used by named-target sinks.

    Returns:
        The sink to store on the record.

    Raises:
        TypeError: If target is none of the accepted kinds.
    """
    if target is None or isinstance(target, str):
        return NamedTargetSink(identifier=target, render=render)
    if hasattr(target, "notify"):
        return target
    if callable(target):
        return FunctionSink(handler=target)
    raise TypeError(f"Unsupported sink: {target!r}")
