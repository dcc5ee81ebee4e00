"""Settings loading, validation and API-key gating."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from weather_aggregator.config import Settings, is_usable_api_key, load_settings
from weather_aggregator.exceptions import ConfigError

_ENV_VARS = (
    "OPENWEATHER_API_KEY",
    "WEATHER_DEFAULT_LAT",
    "WEATHER_DEFAULT_LON",
    "WEATHER_TIMEOUT_SECONDS",
    "NEWS_MAX_ITEMS",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: Any, tmp_path: Path) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


def test_defaults_without_env() -> None:
    settings = load_settings()

    assert settings.app_env == "dev"
    assert settings.log_level == "INFO"
    assert settings.openweather_api_key is None
    assert not settings.has_openweather_key
    assert settings.weather_timeout_seconds == 15.0
    assert settings.geolocation_maximum_age_seconds == 300.0
    assert settings.news_max_items == 96
    assert settings.news_proxy_url == "https://api.allorigins.win/get"


def test_env_file_is_read(tmp_path: Path) -> None:
    (tmp_path / ".env").write_text(
        "OPENWEATHER_API_KEY=abc123\nNEWS_MAX_ITEMS=12\n", encoding="utf-8"
    )

    settings = load_settings()

    assert settings.has_openweather_key
    assert settings.news_max_items == 12


def test_empty_key_is_treated_as_unset(monkeypatch: Any) -> None:
    monkeypatch.setenv("OPENWEATHER_API_KEY", "   ")
    assert load_settings().openweather_api_key is None


@pytest.mark.parametrize(
    ("value", "usable"),
    [
        (None, False),
        ("", False),
        ("your_api_key_here", False),
        ("YOUR_OPENWEATHERMAP_API_KEY", False),
        ("put-Your-key-here", False),
        ("3f9a0c1d2e", True),
    ],
)
def test_is_usable_api_key(value: str | None, usable: bool) -> None:
    assert is_usable_api_key(value) is usable


def test_invalid_values_raise_config_error(monkeypatch: Any) -> None:
    monkeypatch.setenv("WEATHER_TIMEOUT_SECONDS", "0")
    with pytest.raises(ConfigError, match="WEATHER_TIMEOUT_SECONDS must be > 0"):
        load_settings()


def test_default_coordinates_must_be_paired(monkeypatch: Any) -> None:
    monkeypatch.setenv("WEATHER_DEFAULT_LAT", "40.0")
    with pytest.raises(ConfigError, match="must be set together"):
        load_settings()

    monkeypatch.setenv("WEATHER_DEFAULT_LON", "190")
    with pytest.raises(ConfigError, match="WEATHER_DEFAULT_LON must be between"):
        load_settings()


def test_safe_summary_and_repr_hide_the_key() -> None:
    settings = Settings(_env_file=None, openweather_api_key="super-secret-key")

    summary = settings.safe_summary()

    assert summary["openweather_key_configured"] is True
    assert "super-secret-key" not in str(summary)
    assert "super-secret-key" not in repr(settings)


def test_log_level_is_normalized(monkeypatch: Any) -> None:
    monkeypatch.setenv("LOG_LEVEL", " warning ")
    assert load_settings().log_level == "WARNING"

    monkeypatch.setenv("LOG_LEVEL", "verbose")
    with pytest.raises(ConfigError, match="Invalid configuration"):
        load_settings()
