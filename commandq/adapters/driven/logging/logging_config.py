"""Console logging setup for the command queue."""

import logging

__all__ = ["configure_logs"]

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d - %(message)s"
DATE_FORMAT = "%d/%m/%y %H:%M:%S"


def configure_logs(app_level: int = logging.DEBUG) -> None:
    """Configure console logging.

    Sets up:
    - Root logger at INFO level with a stream handler, unless one is
      already installed.
    - Transport loggers (aiohttp, httpx, httpcore) and asyncio at WARNING.
    - Application loggers (commandq) at app_level.

    Args:
        app_level: Level for the commandq loggers.
    """
    root = logging.getLogger()
    root.setLevel(logging.INFO)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        root.addHandler(handler)

    # Suppress verbose transport loggers
    for name in ("aiohttp", "httpx", "httpcore", "asyncio"):
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger("commandq").setLevel(app_level)
