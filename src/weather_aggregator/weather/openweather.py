"""OpenWeatherMap (primary provider) adapter."""

from __future__ import annotations

import logging
from datetime import UTC, date, datetime, timedelta, timezone
from typing import Any

import httpx

from ..config import Settings
from ..exceptions import WeatherProviderError
from .base import (
    WeatherProvider,
    as_number,
    format_date_label,
    format_time_label,
    round_half_up,
    validate_coordinates,
)
from .models import DailyForecast, DailyPoint, HourlyForecast, HourlyPoint, WeatherSnapshot

SOURCE = "openweathermap"
HOURLY_LIMIT = 8
DAILY_LIMIT = 7


class OpenWeatherMapProvider(WeatherProvider):
    """Fetches current conditions and 3-hour-step forecasts from OpenWeatherMap."""

    name = SOURCE
    display_name = "OpenWeatherMap"
    supported_operations = frozenset({"current", "hourly", "daily"})

    def __init__(
        self,
        settings: Settings,
        logger: logging.Logger,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(settings, logger, client)
        self._base_url = settings.openweather_base_url.rstrip("/")

    def _params(self, **query: Any) -> dict[str, Any]:
        if not self.settings.has_openweather_key:
            raise WeatherProviderError(
                "OpenWeatherMap API key is missing or a placeholder.", provider=self.name
            )
        return {**query, "units": "metric", "appid": self.settings.openweather_api_key}

    async def current_by_coords(self, lat: float, lon: float) -> WeatherSnapshot:
        validate_coordinates(lat, lon)
        payload = await self._request_json(
            f"{self._base_url}/weather", self._params(lat=lat, lon=lon), "current weather"
        )
        return normalize_current(payload, captured_at=datetime.now(UTC))

    async def current_by_city(self, city: str) -> WeatherSnapshot:
        payload = await self._request_json(
            f"{self._base_url}/weather", self._params(q=city), "current weather"
        )
        return normalize_current(payload, captured_at=datetime.now(UTC))

    async def hourly_forecast(self, lat: float, lon: float) -> HourlyForecast:
        payload = await self._forecast(lat, lon)
        return HourlyForecast(source=self.name, points=normalize_hourly(payload, now=self._now()))

    async def daily_forecast(self, lat: float, lon: float) -> DailyForecast:
        payload = await self._forecast(lat, lon)
        return DailyForecast(source=self.name, days=summarize_daily(payload))

    async def _forecast(self, lat: float, lon: float) -> dict[str, Any]:
        validate_coordinates(lat, lon)
        return await self._request_json(
            f"{self._base_url}/forecast", self._params(lat=lat, lon=lon), "forecast"
        )


def normalize_current(payload: dict[str, Any], *, captured_at: datetime) -> WeatherSnapshot:
    """Map a ``/weather`` body onto the unified snapshot."""
    main = payload.get("main")
    if not isinstance(main, dict):
        raise WeatherProviderError(
            "OpenWeatherMap current weather payload missing 'main' object.", provider=SOURCE
        )
    condition = _first_condition(payload, context="current weather")
    temperature = as_number(main.get("temp"))
    if temperature is None:
        raise WeatherProviderError(
            "OpenWeatherMap current weather payload missing 'main.temp'.", provider=SOURCE
        )
    feels_like = as_number(main.get("feels_like"))
    wind = _wind(payload)
    sys_block = payload.get("sys") if isinstance(payload.get("sys"), dict) else {}
    visibility = as_number(payload.get("visibility"))
    name = payload.get("name")

    return WeatherSnapshot(
        temperature=round_half_up(temperature),
        feels_like=round_half_up(feels_like if feels_like is not None else temperature),
        humidity=as_number(main.get("humidity")) or 0,
        pressure=as_number(main.get("pressure")) or 0,
        description=condition["description"],
        icon=condition["icon"],
        location=name if isinstance(name, str) and name else "Current Location",
        country=str(sys_block.get("country") or ""),
        wind_speed=as_number(wind.get("speed")) or 0,
        visibility=round_half_up(visibility / 1000) if visibility else 0,
        timestamp=captured_at,
        source=SOURCE,
    )


def normalize_hourly(payload: dict[str, Any], *, now: datetime) -> list[HourlyPoint]:
    """Take the first eight 3-hour samples as the next-hours strip."""
    tz = _city_timezone(payload)
    local_now = now.astimezone(tz)
    points: list[HourlyPoint] = []
    for sample in _forecast_samples(payload)[:HOURLY_LIMIT]:
        moment = _sample_time(sample, tz)
        main = sample["main"]
        wind = _wind(sample)
        clouds = sample.get("clouds") if isinstance(sample.get("clouds"), dict) else {}
        condition = _first_condition(sample, context="forecast sample")
        gust = as_number(wind.get("gust"))
        visibility = as_number(sample.get("visibility"))
        points.append(
            HourlyPoint(
                time=moment,
                time_label=format_time_label(moment),
                timestamp=int(moment.timestamp() * 1000),
                is_now=moment.hour == local_now.hour,
                temperature=round_half_up(main["temp"]),
                description=condition["description"],
                icon=condition["icon"],
                humidity=as_number(main.get("humidity")) or 0,
                wind_speed=as_number(wind.get("speed")) or 0,
                wind_gust=round_half_up(gust) if gust is not None else None,
                wind_direction=as_number(wind.get("deg")),
                pressure=as_number(main.get("pressure")) or 0,
                visibility=round_half_up(visibility / 1000) if visibility else 0,
                cloud_cover=as_number(clouds.get("all")),
            )
        )
    return points


def summarize_daily(payload: dict[str, Any]) -> list[DailyPoint]:
    """Group 3-hour samples by local calendar date and reduce each day.

    High/low are the extremes, description and icon come from the sample at
    ``floor(n / 2)`` and humidity, wind and pressure are arithmetic means.
    """
    tz = _city_timezone(payload)
    grouped: dict[date, list[dict[str, Any]]] = {}
    for sample in _forecast_samples(payload):
        grouped.setdefault(_sample_time(sample, tz).date(), []).append(sample)

    days: list[DailyPoint] = []
    for day, samples in list(grouped.items())[:DAILY_LIMIT]:
        temps = [float(sample["main"]["temp"]) for sample in samples]
        middle = samples[len(samples) // 2]
        condition = _first_condition(middle, context="forecast sample")
        humidity = [as_number(s["main"].get("humidity")) or 0 for s in samples]
        wind = [as_number(_wind(s).get("speed")) or 0 for s in samples]
        pressure = [as_number(s["main"].get("pressure")) or 0 for s in samples]
        days.append(
            DailyPoint(
                date=day,
                day=day.strftime("%A"),
                date_label=format_date_label(day),
                high=round_half_up(max(temps)),
                low=round_half_up(min(temps)),
                description=condition["description"],
                icon=condition["icon"],
                humidity=round_half_up(sum(humidity) / len(humidity)),
                wind_speed=round_half_up(sum(wind) / len(wind)),
                pressure=round_half_up(sum(pressure) / len(pressure)),
            )
        )
    return days


def _forecast_samples(payload: dict[str, Any]) -> list[dict[str, Any]]:
    samples = payload.get("list")
    if not isinstance(samples, list):
        raise WeatherProviderError(
            "OpenWeatherMap forecast payload missing 'list' array.", provider=SOURCE
        )
    valid = [
        sample
        for sample in samples
        if isinstance(sample, dict)
        and isinstance(sample.get("main"), dict)
        and as_number(sample["main"].get("temp")) is not None
        and as_number(sample.get("dt")) is not None
    ]
    if samples and not valid:
        raise WeatherProviderError(
            "OpenWeatherMap forecast samples were present but not parseable.", provider=SOURCE
        )
    return valid


def _first_condition(block: dict[str, Any], *, context: str) -> dict[str, str]:
    conditions = block.get("weather")
    if not isinstance(conditions, list) or not conditions or not isinstance(conditions[0], dict):
        raise WeatherProviderError(
            f"OpenWeatherMap {context} payload missing 'weather' conditions.", provider=SOURCE
        )
    first = conditions[0]
    return {
        "description": str(first.get("description") or ""),
        "icon": str(first.get("icon") or ""),
    }


def _wind(sample: dict[str, Any]) -> dict[str, Any]:
    wind = sample.get("wind")
    return wind if isinstance(wind, dict) else {}


def _city_timezone(payload: dict[str, Any]) -> timezone:
    city = payload.get("city")
    offset = as_number(city.get("timezone")) if isinstance(city, dict) else None
    return timezone(timedelta(seconds=int(offset or 0)))


def _sample_time(sample: dict[str, Any], tz: timezone) -> datetime:
    return datetime.fromtimestamp(sample["dt"], tz=tz)
