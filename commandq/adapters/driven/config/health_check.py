"""Container healthcheck: the command queue could start with this configuration."""

import logging

from commandq.adapters.driven.config.settings import Settings, load_settings
from commandq.adapters.driven.logging.logging_config import configure_logs

__all__ = ["main", "check_timing", "describe"]

logger = logging.getLogger(__name__)


def check_timing(settings: Settings) -> None:
    """Reject timings under which no command could ever succeed.

    A record is first polled one interval after issuance, so a timeout
    not longer than the poll interval fails every command on sight.

    Raises:
        ValueError: If TIMEOUT_MS does not exceed POLL_INTERVAL_MS.
    """
    if settings.timeout_ms <= settings.poll_interval_ms:
        raise ValueError(
            f"TIMEOUT_MS ({settings.timeout_ms}) must exceed "
            f"POLL_INTERVAL_MS ({settings.poll_interval_ms})"
        )


def describe(settings: Settings) -> str:
    """One-line summary of what the queue would run."""
    repeating = sum(1 for command in settings.commands if command.repeat)
    return (
        f"{len(settings.commands)} startup command(s), {repeating} repeating, "
        f"device {settings.device_base_url}, transports {','.join(settings.transports)}"
    )


def main() -> int:
    """Run health check for container orchestration.

    Validates:
    - Required environment variables are set.
    - Command file exists and every command is well formed.
    - Timeout and poll interval leave room for a response.

    Returns:
        0 if healthy, 1 if unhealthy.
    """
    configure_logs()

    try:
        settings = load_settings()
        check_timing(settings)
    except Exception as exc:
        logger.error(f"Command queue healthcheck FAILED: {exc}")
        return 1

    logger.info(f"Command queue healthcheck OK: {describe(settings)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
