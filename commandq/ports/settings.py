"""Settings port definition (DTO)."""

from dataclasses import dataclass, field

__all__ = [
    "CommandPort",
    "SettingsPort",
    "DEFAULT_TIMEOUT_MS",
    "DEFAULT_POLL_INTERVAL_MS",
    "DEFAULT_START_DELAY_MS",
]

DEFAULT_TIMEOUT_MS = 30_000
DEFAULT_POLL_INTERVAL_MS = 10
DEFAULT_START_DELAY_MS = 500


@dataclass
class CommandPort:
    """A command to issue when the service starts.

    Attributes:
        url: Destination (relative to the device base URL or absolute).
        payload: Optional command body.
        repeat: Re-issue after every resolution.
        target: Named render target that receives the raw response.
        field: Response field whose value is logged on completion.
    """

    url: str
    payload: str | None = None
    repeat: bool = False
    target: str | None = None
    field: str | None = None


@dataclass
class SettingsPort:
    """Runtime settings for the core scheduler.

    Decouples core from concrete configuration sources.

    Attributes:
        device_base_url: Base URL of the controller.
        commands: Commands issued at startup.
        timeout_ms: Milliseconds after which a record is failed.
        poll_interval_ms: Milliseconds between ticks.
        start_delay_ms: Milliseconds before the first tick.
        transports: Transport names in preference order.
        http_health_check_endpoint: Optional URL to probe before starting.
    """

    device_base_url: str
    commands: list[CommandPort] = field(default_factory=list)
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS
    start_delay_ms: int = DEFAULT_START_DELAY_MS
    transports: tuple[str, ...] = ("aiohttp", "httpx")
    http_health_check_endpoint: str | None = None
