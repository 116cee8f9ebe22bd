"""Tests for configuration loading and validation."""

import json
import tempfile
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest

from commandq.adapters.driven.config.settings import CommandSpec, Settings, load_settings

__all__ = []

Command = dict[str, Any]


def write_json(data: Any) -> str:
    """Write data to a temporary JSON file and return its path."""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False) as f:
        json.dump(data, f)
        return f.name


@pytest.fixture
def temp_command_file() -> Iterator[tuple[str, list[Command]]]:
    """Create temporary JSON command file for testing.

    Yields:
        Tuple of (filepath, commands).
    """
    commands = [
        {"url": "statusD.xml", "repeat": True, "field": "CDS"},
        {"url": "rstatus.xml", "target": "RT"},
        {"url": "0?1101=I=0", "payload": "0?1101=I=0"},
    ]
    filepath = write_json(commands)
    yield filepath, commands
    Path(filepath).unlink()


def make_settings(command_file_path: str, **overrides: Any) -> Settings:
    """Create Settings with valid defaults."""
    values: dict[str, Any] = {
        "device_base_url": "http://192.168.1.20/",
        "command_file_path": command_file_path,
    }
    values.update(overrides)
    return Settings(**values)


def test_settings_loads_commands_from_file(temp_command_file) -> None:
    """Settings should load commands from JSON file."""
    filepath, _ = temp_command_file

    settings = make_settings(filepath)
    settings.load_commands()

    assert settings.commands == [
        CommandSpec(url="statusD.xml", repeat=True, field="CDS"),
        CommandSpec(url="rstatus.xml", target="RT"),
        CommandSpec(url="0?1101=I=0", payload="0?1101=I=0"),
    ]


def test_settings_defaults() -> None:
    """Settings should default to the reference timing constants."""
    settings = make_settings("/unused.json")

    assert settings.timeout_ms == 30_000
    assert settings.poll_interval_ms == 10
    assert settings.start_delay_ms == 500
    assert settings.transports == ["aiohttp", "httpx"]
    assert settings.http_health_endpoint is None


def test_settings_rejects_missing_command_file() -> None:
    """Settings should reject non-existent command file."""
    settings = make_settings("/nonexistent/file.json")

    with pytest.raises(ValueError, match="not found"):
        settings.load_commands()


def test_settings_rejects_invalid_json_file() -> None:
    """Settings should reject invalid JSON in command file."""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False) as f:
        f.write("{ invalid json }")
        filepath = f.name

    try:
        with pytest.raises(ValueError, match="invalid JSON"):
            make_settings(filepath).load_commands()
    finally:
        Path(filepath).unlink()


@pytest.mark.parametrize(
    ("data", "message"),
    [
        ({"url": "statusD.xml"}, "must be a JSON array"),
        (["statusD.xml"], "must be a JSON object"),
        ([{"repeat": True}], "Invalid command"),
        ([{"url": "statusD.xml", "target": "RT", "field": "CDS"}], "both 'target' and 'field'"),
    ],
)
def test_settings_rejects_malformed_commands(data: Any, message: str) -> None:
    """Settings should reject command files with the wrong shape."""
    filepath = write_json(data)

    try:
        with pytest.raises(ValueError, match=message):
            make_settings(filepath).load_commands()
    finally:
        Path(filepath).unlink()


def test_settings_accepts_empty_command_file() -> None:
    """An empty command list is valid."""
    filepath = write_json([])

    try:
        settings = make_settings(filepath)
        settings.load_commands()
    finally:
        Path(filepath).unlink()

    assert settings.commands == []


@pytest.mark.parametrize("url", ["not a url", "ftp://192.168.1.20/", "https://192.168.1.20/"])
def test_settings_rejects_invalid_base_url(url: str) -> None:
    """Only http:// base URLs are accepted."""
    with pytest.raises(ValueError, match="Invalid device base URL"):
        make_settings("/unused.json", device_base_url=url)


@pytest.mark.parametrize("transports", [["xhr"], ["aiohttp", "aiohttp"], []])
def test_settings_rejects_invalid_transports(transports: list[str]) -> None:
    """Transport lists must be non-empty, known and unique."""
    with pytest.raises(ValueError):
        make_settings("/unused.json", transports=transports)


def test_settings_load_settings_success(monkeypatch, temp_command_file) -> None:
    """load_settings should create Settings when the environment is valid."""
    filepath, commands = temp_command_file
    monkeypatch.setenv("DEVICE_BASE_URL", "http://192.168.1.20/")
    monkeypatch.setenv("COMMAND_FILE_PATH", filepath)
    monkeypatch.setenv("TIMEOUT_MS", "5000")
    monkeypatch.setenv("TRANSPORTS", "httpx, aiohttp")
    monkeypatch.delenv("HEALTH_CHECK_ENDPOINT", raising=False)

    settings = load_settings()

    assert isinstance(settings, Settings)
    assert settings.timeout_ms == 5000
    assert settings.transports == ["httpx", "aiohttp"]
    assert len(settings.commands) == len(commands)


def test_settings_load_settings_missing_env(monkeypatch) -> None:
    """load_settings should name the missing variable."""
    monkeypatch.delenv("DEVICE_BASE_URL", raising=False)
    monkeypatch.setenv("COMMAND_FILE_PATH", "/unused.json")

    with pytest.raises(RuntimeError, match="DEVICE_BASE_URL"):
        load_settings()


@pytest.mark.parametrize("name", ["TIMEOUT_MS", "POLL_INTERVAL_MS", "START_DELAY_MS"])
def test_settings_load_settings_rejects_bad_integers(monkeypatch, temp_command_file, name) -> None:
    """Timing variables must be positive integers."""
    filepath, _ = temp_command_file
    monkeypatch.setenv("DEVICE_BASE_URL", "http://192.168.1.20/")
    monkeypatch.setenv("COMMAND_FILE_PATH", filepath)
    monkeypatch.setenv(name, "-5")

    with pytest.raises(RuntimeError, match=f"{name} must be a positive integer"):
        load_settings()
