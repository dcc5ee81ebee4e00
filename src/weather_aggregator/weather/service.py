"""Weather facade: ordered provider fallback with unified results and errors."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import httpx

from ..config import Settings
from ..exceptions import WeatherProviderError, WeatherServiceUnavailableError
from ..redaction import sanitize_text
from .base import Operation, WeatherProvider, validate_coordinates
from .models import (
    DailyForecast,
    GeocodedPlace,
    HistoricalSeries,
    HourlyForecast,
    PlaceName,
    WeatherSnapshot,
)
from .openmeteo import OpenMeteoProvider
from .openweather import OpenWeatherMapProvider

T = TypeVar("T")

_OPERATION_LABELS: dict[str, str] = {
    "current": "Weather services",
    "hourly": "Hourly forecast",
    "daily": "7-day forecast",
    "historical": "Historical data",
}


class WeatherService:
    """Tries each configured provider in order and returns the first success.

    The primary provider is only part of the chain when the settings carry a
    usable OpenWeatherMap key; otherwise every call goes straight to Open-Meteo.
    When all attempted providers fail, a single
    :class:`WeatherServiceUnavailableError` carries every provider's message.
    """

    def __init__(
        self,
        settings: Settings,
        logger: logging.Logger,
        *,
        primary: WeatherProvider | None = None,
        fallback: OpenMeteoProvider | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings
        self.logger = logger
        self.fallback = fallback or OpenMeteoProvider(settings, logger, client)
        self.primary: WeatherProvider | None = None
        if settings.has_openweather_key:
            self.primary = primary or OpenWeatherMapProvider(settings, logger, client)
        else:
            logger.warning("OpenWeatherMap API key missing, using Open-Meteo fallback")
        self.providers: list[WeatherProvider] = [
            provider for provider in (self.primary, self.fallback) if provider is not None
        ]

    async def __aenter__(self) -> WeatherService:
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        for provider in self.providers:
            await provider.aclose()

    async def current_by_coords(self, lat: float, lon: float) -> WeatherSnapshot:
        validate_coordinates(lat, lon)
        return await self._first_success("current", lambda p: p.current_by_coords(lat, lon))

    async def current_by_city(self, city: str) -> WeatherSnapshot:
        name = city.strip()
        if not name:
            raise WeatherProviderError("City name must not be empty.")
        return await self._first_success("current", lambda p: p.current_by_city(name))

    async def hourly_forecast(self, lat: float, lon: float) -> HourlyForecast:
        validate_coordinates(lat, lon)
        return await self._first_success("hourly", lambda p: p.hourly_forecast(lat, lon))

    async def seven_day_forecast(self, lat: float, lon: float) -> DailyForecast:
        validate_coordinates(lat, lon)
        return await self._first_success("daily", lambda p: p.daily_forecast(lat, lon))

    async def historical_year(self, lat: float, lon: float) -> HistoricalSeries:
        validate_coordinates(lat, lon)
        return await self._first_success("historical", lambda p: p.historical_year(lat, lon))

    async def geocode(self, city: str) -> GeocodedPlace:
        return await self.fallback.geocode(city.strip())

    async def place_name(self, lat: float, lon: float) -> PlaceName:
        return await self.fallback.reverse_geocode(lat, lon)

    async def _first_success(
        self,
        operation: Operation,
        call: Callable[[WeatherProvider], Awaitable[T]],
    ) -> T:
        label = _OPERATION_LABELS[operation]
        candidates = [provider for provider in self.providers if provider.supports(operation)]
        failures: list[tuple[str, str]] = []

        for index, provider in enumerate(candidates):
            try:
                result = await call(provider)
            except Exception as exc:
                message = sanitize_text(str(exc)) or type(exc).__name__
                failures.append((provider.display_name, message))
                if index + 1 < len(candidates):
                    self.logger.warning(
                        "%s failed for %s, trying %s fallback: %s",
                        provider.display_name,
                        label.lower(),
                        candidates[index + 1].display_name,
                        message,
                        extra={"operation": operation, "provider": provider.name},
                    )
                continue
            if failures:
                self.logger.info("%s served by %s fallback", label, provider.display_name)
            return result

        self.logger.error(
            "All weather providers failed for %s: %s",
            label.lower(),
            failures,
            extra={"operation": operation},
        )
        raise WeatherServiceUnavailableError(label, failures)
