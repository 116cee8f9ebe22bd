"""Metrics port definition (interface and DTO)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

__all__ = ["DispatchDto", "MetricsPort"]


@dataclass(slots=True, frozen=True)
class DispatchDto:
    """Immutable snapshot of a single resolved record.

    Attributes:
        url: Destination of the command.
        elapsed_ms: Milliseconds between issuance and dispatch.
        timed_out: True if resolved by the timeout branch.
    """

    url: str
    elapsed_ms: float
    timed_out: bool = False


class MetricsPort(Protocol):
    """Interface for recording dispatch metrics.

    Implementations must be non-blocking: update() runs inside a tick.
    """

    def update(self, dispatch: DispatchDto, /) -> None:
        """Record a resolved record.

        Args:
            dispatch: The dispatch to record.
        """
        ...

    def __str__(self) -> str:
        """Return concise textual summary for humans.

        Returns:
            Formatted metrics string.
        """
        ...
