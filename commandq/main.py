"""Application entrypoint."""

import asyncio
import logging
from collections.abc import Iterable
from xml.etree.ElementTree import Element

from commandq.adapters.driven.config.settings import load_settings
from commandq.adapters.driven.http.client import HttpClient
from commandq.adapters.driven.logging.logging_config import configure_logs
from commandq.adapters.driven.metrics.dispatch_metrics import Metrics
from commandq.adapters.driven.render.log_target import LogRenderTarget
from commandq.adapters.driving.signals import make_stop_on_sigterm
from commandq.core.extract import extract_field
from commandq.core.poll_scheduler import PollScheduler
from commandq.core.request_queue import AsyncRequestQueue
from commandq.core.sinks import Handler
from commandq.ports.settings import CommandPort, SettingsPort

__all__ = ["main"]

logger = logging.getLogger(__name__)


async def main() -> None:
    """Start the command queue service.

    Startup sequence:
    1. Configure logging.
    2. Load and validate configuration.
    3. Optionally probe the device.
    4. Issue startup commands and run the poll scheduler.
    5. Release outstanding commands on SIGTERM.
    """
    configure_logs()
    logger.info("Starting command queue service...")

    try:
        config = load_settings()
    except (RuntimeError, ValueError) as exc:
        logger.error(
            "Configuration error: %s\n"
            "Hint: check DEVICE_BASE_URL, COMMAND_FILE_PATH, TIMEOUT_MS, "
            "POLL_INTERVAL_MS, TRANSPORTS and that the command file exists and is valid JSON.",
            exc,
        )
        return

    # Wrap config into port so core depends on interface (hexagonal)
    settings_port = SettingsPort(
        device_base_url=config.device_base_url,
        commands=[CommandPort(**command.model_dump()) for command in config.commands],
        timeout_ms=config.timeout_ms,
        poll_interval_ms=config.poll_interval_ms,
        start_delay_ms=config.start_delay_ms,
        transports=tuple(config.transports),
        http_health_check_endpoint=config.http_health_endpoint,
    )

    http_client = HttpClient(timeout_sec=settings_port.timeout_ms / 1_000)

    async with http_client as http:
        if not await optional_endpoint_health_check(settings_port, http):
            return

        queue = AsyncRequestQueue(
            http.selector(settings_port.device_base_url, settings_port.transports),
            render=LogRenderTarget(),
        )
        scheduler = PollScheduler(
            queue,
            timeout_ms=settings_port.timeout_ms,
            poll_interval_ms=settings_port.poll_interval_ms,
            start_delay_ms=settings_port.start_delay_ms,
            metrics=Metrics(),
        )
        issue_startup_commands(queue, settings_port.commands)

        try:
            await scheduler.run(stop_fn=make_stop_on_sigterm())
        except Exception as e:
            logger.error(f"Unhandled exception in poll scheduler: {e}", exc_info=True)

        logger.info("Command queue stopped.")


def make_field_logger(url: str, field: str) -> Handler:
    """Build a handler that logs one field of every response from url."""

    def handler(document: Element | None) -> None:
        if document is None:
            logger.warning(f"{url}: no response")
            return
        logger.info(f"{url}: {field}={extract_field(document, field)}")

    return handler


def issue_startup_commands(queue: AsyncRequestQueue, commands: Iterable[CommandPort]) -> None:
    """Issue every configured command.

    A command with a target reports to that render target, one with a
    field logs the field's value, any other is fire-and-forget.

    Args:
        queue: Queue to issue into.
        commands: Startup commands.
    """
    for command in commands:
        sink: str | Handler | None = command.target
        if command.field is not None:
            sink = make_field_logger(command.url, command.field)
        queue.issue(command.url, sink, repeat=command.repeat, payload=command.payload)
        logger.debug(f"Issued {command.url} (repeat={command.repeat})")


async def optional_endpoint_health_check(settings_port: SettingsPort, http: HttpClient) -> bool:
    """Perform optional health check before issuing commands.

    Only runs if HEALTH_CHECK_ENDPOINT is configured.

    Args:
        settings_port: Runtime settings.
        http: HTTP client for probing.

    Returns:
        True if healthy or check disabled, False if check failed.
    """
    if settings_port.http_health_check_endpoint:
        logger.info(f"Performing health check on {settings_port.http_health_check_endpoint}...")
        if not await http.probe(url=settings_port.http_health_check_endpoint):
            logger.error(
                f"Health check failed for {settings_port.http_health_check_endpoint}, "
                "aborting startup"
            )
            return False

        logger.info("Health check passed, starting command queue...")
    return True


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user (Ctrl+C).")
