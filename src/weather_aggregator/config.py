"""Typed settings loader for the weather aggregator."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigError

# Values shipped in sample .env files that mean "no key configured".
_PLACEHOLDER_KEYS = frozenset({"your_api_key_here", "YOUR_OPENWEATHERMAP_API_KEY"})


class Settings(BaseSettings):
    """Application settings loaded from environment variables and `.env`."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    app_env: Literal["dev", "staging", "prod"] = Field(default="dev", alias="APP_ENV")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", alias="LOG_LEVEL"
    )

    openweather_api_key: str | None = Field(
        default=None, alias="OPENWEATHER_API_KEY", repr=False
    )
    openweather_base_url: str = Field(
        default="https://api.openweathermap.org/data/2.5",
        alias="OPENWEATHER_BASE_URL",
    )
    open_meteo_forecast_url: str = Field(
        default="https://api.open-meteo.com/v1/forecast",
        alias="OPEN_METEO_FORECAST_URL",
    )
    open_meteo_geocode_url: str = Field(
        default="https://geocoding-api.open-meteo.com/v1/search",
        alias="OPEN_METEO_GEOCODE_URL",
    )
    open_meteo_reverse_url: str = Field(
        default="https://geocoding-api.open-meteo.com/v1/reverse",
        alias="OPEN_METEO_REVERSE_URL",
    )
    open_meteo_archive_url: str = Field(
        default="https://archive-api.open-meteo.com/v1/era5",
        alias="OPEN_METEO_ARCHIVE_URL",
    )
    ip_geolocation_url: str = Field(
        default="https://ipapi.co/json/",
        alias="IP_GEOLOCATION_URL",
    )
    weather_timeout_seconds: float = Field(default=15.0, alias="WEATHER_TIMEOUT_SECONDS")
    weather_default_lat: float | None = Field(default=None, alias="WEATHER_DEFAULT_LAT")
    weather_default_lon: float | None = Field(default=None, alias="WEATHER_DEFAULT_LON")

    geolocation_timeout_seconds: float = Field(
        default=15.0, alias="GEOLOCATION_TIMEOUT_SECONDS"
    )
    geolocation_maximum_age_seconds: float = Field(
        default=300.0, alias="GEOLOCATION_MAXIMUM_AGE_SECONDS"
    )

    news_proxy_url: str = Field(
        default="https://api.allorigins.win/get",
        alias="NEWS_PROXY_URL",
    )
    news_timeout_seconds: float = Field(default=15.0, alias="NEWS_TIMEOUT_SECONDS")
    news_max_items: int = Field(default=96, alias="NEWS_MAX_ITEMS")

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper() or "INFO"
        return value

    @field_validator(
        "openweather_api_key",
        "weather_default_lat",
        "weather_default_lon",
        mode="before",
    )
    @classmethod
    def empty_string_to_none(cls, value: Any) -> Any:
        """Treat empty env-string values as unset."""
        if isinstance(value, str) and value.strip() == "":
            return None
        return value

    @model_validator(mode="after")
    def validate_ranges(self) -> Settings:
        """Validate timeouts, caps and optional default coordinates."""
        if self.weather_timeout_seconds <= 0:
            raise ValueError("WEATHER_TIMEOUT_SECONDS must be > 0.")
        if self.geolocation_timeout_seconds <= 0:
            raise ValueError("GEOLOCATION_TIMEOUT_SECONDS must be > 0.")
        if self.geolocation_maximum_age_seconds < 0:
            raise ValueError("GEOLOCATION_MAXIMUM_AGE_SECONDS must be >= 0.")
        if self.news_timeout_seconds <= 0:
            raise ValueError("NEWS_TIMEOUT_SECONDS must be > 0.")
        if self.news_max_items <= 0:
            raise ValueError("NEWS_MAX_ITEMS must be > 0.")

        has_default_lat = self.weather_default_lat is not None
        has_default_lon = self.weather_default_lon is not None
        if has_default_lat != has_default_lon:
            raise ValueError("WEATHER_DEFAULT_LAT and WEATHER_DEFAULT_LON must be set together.")
        if has_default_lat and not (-90 <= self.weather_default_lat <= 90):
            raise ValueError("WEATHER_DEFAULT_LAT must be between -90 and 90.")
        if has_default_lon and not (-180 <= self.weather_default_lon <= 180):
            raise ValueError("WEATHER_DEFAULT_LON must be between -180 and 180.")
        return self

    @property
    def has_openweather_key(self) -> bool:
        """True when a usable OpenWeatherMap key is configured."""
        return is_usable_api_key(self.openweather_api_key)

    def safe_summary(self) -> dict[str, Any]:
        """Return config summary safe for logging (no credentials)."""
        return {
            "app_env": self.app_env,
            "log_level": self.log_level,
            "openweather_key_configured": self.has_openweather_key,
            "openweather_base_url": self.openweather_base_url,
            "open_meteo_forecast_url": self.open_meteo_forecast_url,
            "weather_timeout_seconds": self.weather_timeout_seconds,
            "geolocation_timeout_seconds": self.geolocation_timeout_seconds,
            "news_proxy_url": self.news_proxy_url,
            "news_max_items": self.news_max_items,
        }


def is_usable_api_key(value: str | None) -> bool:
    """Return False for absent, blank or placeholder API keys."""
    if value is None:
        return False
    candidate = value.strip()
    if not candidate or candidate in _PLACEHOLDER_KEYS:
        return False
    return "your" not in candidate.lower()


def load_settings() -> Settings:
    """Load and validate settings, raising ConfigError on failure."""
    try:
        return Settings()
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Failed reading environment/.env: {exc}") from exc
