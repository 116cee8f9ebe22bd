"""Configuration loading from environment variables and files."""

import json
import logging
import os

from dotenv import load_dotenv
from pydantic import (
    BaseModel,
    Field,
    HttpUrl,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)

from commandq.ports.settings import (
    DEFAULT_POLL_INTERVAL_MS,
    DEFAULT_START_DELAY_MS,
    DEFAULT_TIMEOUT_MS,
)

__all__ = ["CommandSpec", "Settings", "load_settings", "KNOWN_TRANSPORTS"]

load_dotenv()

logger = logging.getLogger(__name__)
_http_url_adapter = TypeAdapter(HttpUrl)

KNOWN_TRANSPORTS = ("aiohttp", "httpx")


def _validate_http_url(v: str, what: str) -> str:
    try:
        url = _http_url_adapter.validate_python(v)
        if url.scheme != "http":
            raise ValueError("Only http:// endpoints allowed")
    except Exception as e:
        raise ValueError(f"Invalid {what}: {e}") from e
    return v


class CommandSpec(BaseModel):
    """One startup command from the command file.

    Attributes:
        url: Destination, relative to the device base URL or absolute.
        payload: Optional command body.
        repeat: Re-issue the command after every resolution.
        target: Named render target receiving the raw response.
        field: Response field whose value gets logged.
    """

    url: str = Field(..., min_length=1)
    payload: str | None = None
    repeat: bool = False
    target: str | None = None
    field: str | None = None

    @model_validator(mode="after")
    def check_single_sink(self) -> "CommandSpec":
        """Reject commands naming both a target and a field."""
        if self.target is not None and self.field is not None:
            raise ValueError(f"Command {self.url!r} sets both 'target' and 'field'")
        return self


class Settings(BaseModel):
    """Runtime configuration for the command queue service.

    Attributes:
        device_base_url: Base URL of the controller.
        command_file_path: Path to JSON file with startup commands.
        timeout_ms: Milliseconds before an unresolved command fails.
        poll_interval_ms: Milliseconds between scheduler ticks.
        start_delay_ms: Milliseconds before the first tick.
        transports: Transport names in preference order.
        http_health_endpoint: Optional endpoint to probe before starting.
        commands: Startup commands (loaded from file).
    """

    device_base_url: str = Field(..., description="Base URL of the controller.")
    command_file_path: str = Field(..., description="Path to JSON file with startup commands.")
    timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, gt=0)
    poll_interval_ms: int = Field(default=DEFAULT_POLL_INTERVAL_MS, gt=0)
    start_delay_ms: int = Field(default=DEFAULT_START_DELAY_MS, ge=0)
    transports: list[str] = Field(default_factory=lambda: list(KNOWN_TRANSPORTS), min_length=1)
    http_health_endpoint: str | None = Field(
        default=None,
        description=(
            "Optional HTTP endpoint to probe for health. "
            "If not set, no health check is performed."
        ),
    )
    commands: list[CommandSpec] = Field(
        default_factory=list,
        description="Startup commands (populated from file).",
    )

    @field_validator("device_base_url")
    @classmethod
    def validate_device_base_url(cls, v: str) -> str:
        """Validate that the base URL is a valid http URL.

        Raises:
            ValueError: If URL is invalid or not http.
        """
        return _validate_http_url(v, "device base URL")

    @field_validator("http_health_endpoint")
    @classmethod
    def validate_http_health_endpoint(cls, v: str | None) -> str | None:
        """Validate that health endpoint (if provided) is a valid http URL.

        Raises:
            ValueError: If URL is invalid or not http.
        """
        if v is None:
            return v
        return _validate_http_url(v, "health endpoint")

    @field_validator("transports")
    @classmethod
    def validate_transports(cls, v: list[str]) -> list[str]:
        """Validate transport names.

        Raises:
            ValueError: If a name is unknown or repeated.
        """
        unknown = [name for name in v if name not in KNOWN_TRANSPORTS]
        if unknown:
            raise ValueError(f"Unknown transport(s): {', '.join(unknown)}")
        if len(set(v)) != len(v):
            raise ValueError("Transports must not repeat")
        return v

    def load_commands(self) -> None:
        """Load and validate startup commands from JSON file.

        Raises:
            ValueError: If file not found, invalid JSON, or wrong format.
        """
        try:
            with open(self.command_file_path) as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise ValueError(f"Command file not found: {self.command_file_path}") from e
        except json.JSONDecodeError as e:
            raise ValueError(f"Command file contains invalid JSON: {self.command_file_path}") from e

        if not isinstance(data, list):
            raise ValueError("Command file must be a JSON array")
        if not all(isinstance(x, dict) for x in data):
            raise ValueError("Each command must be a JSON object")

        try:
            self.commands = [CommandSpec.model_validate(x) for x in data]
        except ValidationError as e:
            raise ValueError(f"Invalid command in {self.command_file_path}: {e}") from e
        logger.debug(f"Loaded {len(self.commands)} commands from {self.command_file_path}")


def _positive_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
        if value <= 0:
            raise ValueError("Must be positive")
    except ValueError as e:
        raise RuntimeError(f"{name} must be a positive integer (got: {raw})") from e
    return value


def load_settings() -> Settings:
    """Load and validate settings from environment and files.

    Required environment variables:
    - DEVICE_BASE_URL: http:// base URL of the controller.
    - COMMAND_FILE_PATH: Path to JSON file with startup commands.

    Optional:
    - TIMEOUT_MS: Positive integer, default 30000.
    - POLL_INTERVAL_MS: Positive integer, default 10.
    - START_DELAY_MS: Positive integer, default 500.
    - TRANSPORTS: Comma-separated preference order, default "aiohttp,httpx".
    - HEALTH_CHECK_ENDPOINT: URL to probe before starting.

    Returns:
        Validated Settings object.

    Raises:
        RuntimeError: If required env vars missing or invalid.
        ValueError: If configuration is invalid.
    """
    try:
        base_url = os.environ["DEVICE_BASE_URL"]
        command_path = os.environ["COMMAND_FILE_PATH"]
    except KeyError as e:
        raise RuntimeError(f"Missing required environment variable: {e.args[0]}") from e

    transports_raw = os.getenv("TRANSPORTS", ",".join(KNOWN_TRANSPORTS))

    settings = Settings(
        device_base_url=base_url,
        command_file_path=command_path,
        timeout_ms=_positive_int_env("TIMEOUT_MS", DEFAULT_TIMEOUT_MS),
        poll_interval_ms=_positive_int_env("POLL_INTERVAL_MS", DEFAULT_POLL_INTERVAL_MS),
        start_delay_ms=_positive_int_env("START_DELAY_MS", DEFAULT_START_DELAY_MS),
        transports=[name.strip() for name in transports_raw.split(",") if name.strip()],
        http_health_endpoint=os.getenv("HEALTH_CHECK_ENDPOINT"),
    )

    settings.load_commands()

    logger.info(
        f"Command queue configured: device={settings.device_base_url}, "
        f"timeout={settings.timeout_ms}ms, interval={settings.poll_interval_ms}ms, "
        f"transports={','.join(settings.transports)}, "
        f"commands={len(settings.commands)}, "
        f"health_check={settings.http_health_endpoint or '<disabled>'}"
    )

    return settings
