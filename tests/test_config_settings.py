"""Regression tests for settings validation and logging configuration."""

from __future__ import annotations

import json

import pytest
import structlog

from titanwatch.config import SettingsLoadError, WatchSettings, config_configure_logging, config_load_settings


def test_config_settings_defaults_match_historical_wait_budgets(monkeypatch: pytest.MonkeyPatch) -> None:
    """Default budgets keep the one-second, sixty-attempt boot waits.

    Args:
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        None: Assertions validate defaults.

    Raises:
        AssertionError: Raised when a default drifts.
    """

    monkeypatch.delenv("TITAN_BASE_URL", raising=False)
    settings = WatchSettings(_env_file=None)

    assert settings.titan_base_url == "http://localhost:5001"
    assert settings.service_wait_delay_seconds == 1.0
    assert settings.service_wait_max_attempts == 60
    assert settings.endpoint_wait_max_attempts == 60
    assert settings.resource_wait_max_attempts is None
    assert settings.operation_poll_delay_seconds == 0.5
    assert settings.operation_poll_max_attempts is None


def test_config_settings_reads_environment_and_normalizes(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TITAN_BASE_URL", "  http://titan.internal:5001  ")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("LOG_FORMAT", "JSON")
    monkeypatch.setenv("OPERATION_POLL_MAX_ATTEMPTS", "120")

    settings = WatchSettings(_env_file=None)

    assert settings.titan_base_url == "http://titan.internal:5001"
    assert settings.log_level == "DEBUG"
    assert settings.log_format == "json"
    assert settings.operation_poll_max_attempts == 120


def test_config_load_settings_wraps_validation_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    """Wrap invalid configuration into the startup error type.

    Args:
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        None: Assertions validate error wrapping.

    Raises:
        AssertionError: Raised when validation errors escape unwrapped.
    """

    monkeypatch.setenv("TITAN_CONTEXT", "bare-metal")

    with pytest.raises(SettingsLoadError, match="titan_context"):
        config_load_settings()


def test_config_settings_rejects_zero_attempt_budget() -> None:
    with pytest.raises(ValueError):
        WatchSettings(service_wait_max_attempts=0, _env_file=None)


def test_config_configure_logging_filters_below_level(capsys: pytest.CaptureFixture[str]) -> None:
    """Drop debug events at INFO level and render the rest to stdout.

    Args:
        capsys: Pytest output capture fixture.

    Returns:
        None: Assertions validate level filtering.

    Raises:
        AssertionError: Raised when filtering is not applied.
    """

    config_configure_logging(WatchSettings(log_level="INFO", log_format="console", _env_file=None))
    try:
        logger = structlog.get_logger("titanwatch.test")
        logger.debug("hidden_event")
        logger.info("shown_event", label="server")
    finally:
        structlog.reset_defaults()

    output = capsys.readouterr().out
    assert "shown_event" in output
    assert "hidden_event" not in output


def test_config_configure_logging_renders_json(capsys: pytest.CaptureFixture[str]) -> None:
    config_configure_logging(WatchSettings(log_level="DEBUG", log_format="json", _env_file=None))
    try:
        structlog.get_logger("titanwatch.test").debug("wait_attempt_not_ready", attempt=2)
    finally:
        structlog.reset_defaults()

    record = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert record["event"] == "wait_attempt_not_ready"
    assert record["attempt"] == 2
    assert record["level"] == "debug"
