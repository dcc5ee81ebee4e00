"""Credential redaction and the JSON console formatter."""

from __future__ import annotations

import json
import logging

from weather_aggregator.log_setup import JsonConsoleFormatter, setup_logger
from weather_aggregator.redaction import REDACTED, sanitize_for_logging, sanitize_text


def test_query_string_key_is_redacted_without_eating_other_params() -> None:
    text = "GET https://api.openweathermap.org/data/2.5/weather?q=Paris&appid=abc123&units=metric"

    sanitized = sanitize_text(text)

    assert "abc123" not in sanitized
    assert f"appid={REDACTED}" in sanitized
    assert "units=metric" in sanitized


def test_bearer_and_plain_text_secrets_are_redacted() -> None:
    sanitized = sanitize_text("Authorization: Bearer eyJhbGciOi.payload and api_key: xyz789")

    assert "eyJhbGciOi" not in sanitized
    assert "xyz789" not in sanitized


def test_nested_structures_redact_sensitive_keys() -> None:
    payload = {
        "appid": "abc123",
        "params": [{"token": "t0k3n", "lat": 1.5}],
        "note": "password=hunter2",
    }

    sanitized = sanitize_for_logging(payload)

    assert sanitized["appid"] == REDACTED
    assert sanitized["params"][0]["token"] == REDACTED
    assert sanitized["params"][0]["lat"] == 1.5
    assert "hunter2" not in sanitized["note"]


def test_json_formatter_sanitizes_message() -> None:
    record = logging.LogRecord(
        name="weather_aggregator",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="request failed for %s",
        args=("https://example.com/?appid=abc123",),
        exc_info=None,
    )

    event = json.loads(JsonConsoleFormatter().format(record))

    assert event["level"] == "WARNING"
    assert event["logger"] == "weather_aggregator"
    assert "abc123" not in event["message"]


def test_setup_logger_is_idempotent() -> None:
    first = setup_logger("weather_aggregator.test_idempotent")
    second = setup_logger("weather_aggregator.test_idempotent")

    assert first is second
    assert len(second.handlers) == 1
    assert second.propagate is False


def test_json_formatter_emits_context_fields() -> None:
    record = logging.LogRecord(
        name="weather_aggregator",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="OpenWeatherMap failed, trying Open-Meteo fallback",
        args=(),
        exc_info=None,
    )
    record.operation = "current"
    record.provider = "openweathermap"

    event = json.loads(JsonConsoleFormatter().format(record))

    assert event["operation"] == "current"
    assert event["provider"] == "openweathermap"
    assert "feed" not in event
    assert "ts" in event


def test_setup_logger_accepts_level_names() -> None:
    logger = setup_logger("weather_aggregator.test_levels", level="debug")
    assert logger.level == logging.DEBUG

    setup_logger("weather_aggregator.test_levels", level="WARNING")
    assert logger.level == logging.WARNING
    assert len(logger.handlers) == 1
