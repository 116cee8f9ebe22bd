"""Signal handling for graceful shutdown."""

import asyncio
import logging
import signal
from collections.abc import Callable

__all__ = ["make_stop_on_sigterm"]

logger = logging.getLogger(__name__)


def make_stop_on_sigterm() -> Callable[[], bool]:
    """Create SIGTERM/SIGINT-based stop flag for the poll scheduler.

    Registers a handler that sets an asyncio.Event, returning an
    is_set-style callable the scheduler checks before every tick.
    Outstanding commands are released once it returns True.

    Returns:
        Callable that returns True when a termination signal was received.
    """
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()

    def handle_signal() -> None:
        """Set the stop event on SIGTERM/SIGINT."""
        logger.info("Termination signal received, stopping the command queue...")
        stop.set()

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, handle_signal)

    return stop.is_set
