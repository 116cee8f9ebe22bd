"""In-memory sliding-window metrics for resolved commands."""

from __future__ import annotations

import statistics
from collections import deque
from dataclasses import dataclass

from commandq.ports.metrics import DispatchDto, MetricsPort

__all__ = ["Metrics"]


@dataclass(slots=True, frozen=True)
class _Sample:
    """Internal record for one dispatch."""

    elapsed_ms: float
    timed_out: bool


class Metrics(MetricsPort):
    """Lock-free dispatch metrics for async context.

    Tracks:
    - Average latency from issuance to dispatch.
    - Timeout rate.
    - Total dispatches seen.

    Not thread-safe; create one instance per event loop.
    """

    def __init__(self, *, window_size: int = 100) -> None:
        """Initialize metrics collector.

        Args:
            window_size: Number of recent dispatches to keep for statistics.
        """
        self._window: deque[_Sample] = deque(maxlen=window_size)
        self._total_seen: int = 0

    def update(self, dispatch: DispatchDto) -> None:
        """Record a resolved command.

        Args:
            dispatch: Dispatch with timing and outcome.
        """
        self._window.append(_Sample(elapsed_ms=dispatch.elapsed_ms, timed_out=dispatch.timed_out))
        self._total_seen += 1

    def __str__(self) -> str:
        """Return human-readable one-line summary for logging.

        Returns:
            Formatted metrics string.
        """
        if not self._window:
            return "Metrics: waiting for data …"

        n_window = len(self._window)
        timeouts = sum(1 for s in self._window if s.timed_out)
        timeout_pct = (timeouts / n_window) * 100
        answered = [s.elapsed_ms for s in self._window if not s.timed_out]
        latency = f"{statistics.fmean(answered):7.1f} ms" if answered else "    n/a"

        return (
            f"latency={latency} | "
            f"timeouts={timeout_pct:5.1f}% | "
            f"win={n_window}/{self._window.maxlen} | "
            f"total={self._total_seen}"
        )
