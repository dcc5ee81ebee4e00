"""Open-Meteo (fallback provider) adapter: forecast, geocoding and ERA5 archive."""

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
    round_one_decimal,
    validate_coordinates,
)
from .codes import map_weather_code
from .models import (
    DailyForecast,
    DailyPoint,
    GeocodedPlace,
    HistoricalDay,
    HistoricalSeries,
    HourlyForecast,
    HourlyPoint,
    PlaceName,
    WeatherSnapshot,
)

SOURCE = "open-meteo"
HOURLY_LIMIT = 8
DAILY_LIMIT = 7

CURRENT_FIELDS = (
    "temperature_2m,relative_humidity_2m,apparent_temperature,weather_code,"
    "wind_speed_10m,visibility,pressure_msl"
)
HOURLY_FIELDS = (
    "temperature_2m,relative_humidity_2m,weather_code,wind_speed_10m,pressure_msl,"
    "visibility,cloud_cover,dew_point_2m,uv_index,wind_gusts_10m,wind_direction_10m"
)
DAILY_FIELDS = (
    "weathercode,temperature_2m_max,temperature_2m_min,precipitation_sum,"
    "windspeed_10m_max,winddirection_10m_dominant"
)
ARCHIVE_FIELDS = "temperature_2m_max,temperature_2m_min,precipitation_sum,windspeed_10m_max"


class OpenMeteoProvider(WeatherProvider):
    """Key-less provider used when OpenWeatherMap is unavailable or unconfigured."""

    name = SOURCE
    display_name = "Open-Meteo"
    supported_operations = frozenset({"current", "hourly", "daily", "historical"})

    def __init__(
        self,
        settings: Settings,
        logger: logging.Logger,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(settings, logger, client)
        self._forecast_url = settings.open_meteo_forecast_url
        self._geocode_url = settings.open_meteo_geocode_url
        self._reverse_url = settings.open_meteo_reverse_url
        self._archive_url = settings.open_meteo_archive_url

    async def geocode(self, city: str) -> GeocodedPlace:
        """Resolve a place name to coordinates using the first geocoding match."""
        payload = await self._request_json(
            self._geocode_url, {"name": city, "count": 1}, "location lookup"
        )
        results = payload.get("results")
        place = results[0] if isinstance(results, list) and results else None
        if not isinstance(place, dict):
            raise WeatherProviderError("city not found", provider=self.name)
        latitude = as_number(place.get("latitude"))
        longitude = as_number(place.get("longitude"))
        if latitude is None or longitude is None:
            raise WeatherProviderError("city not found", provider=self.name)
        return GeocodedPlace(
            latitude=latitude,
            longitude=longitude,
            name=str(place.get("name") or city),
            country=str(place.get("country_code") or "").upper(),
        )

    async def reverse_geocode(self, lat: float, lon: float) -> PlaceName:
        """Best-effort coordinate to place-name lookup; never raises."""
        try:
            payload = await self._request_json(
                self._reverse_url,
                {"latitude": lat, "longitude": lon, "count": 1},
                "reverse geocoding",
            )
        except WeatherProviderError as exc:
            self.logger.warning("Reverse geocoding failed: %s", exc)
            return coordinate_place_name(lat, lon)

        results = payload.get("results")
        result = results[0] if isinstance(results, list) and results else None
        if not isinstance(result, dict) or not result.get("name"):
            return coordinate_place_name(lat, lon)
        country_code = result.get("country_code")
        return PlaceName(
            city=str(result["name"]),
            country=str(country_code).upper() if country_code else str(result.get("country") or ""),
            state=str(result.get("admin1") or ""),
        )

    async def current_by_coords(self, lat: float, lon: float) -> WeatherSnapshot:
        validate_coordinates(lat, lon)
        payload = await self._current(lat, lon)
        place = await self.reverse_geocode(lat, lon)
        return normalize_current(
            payload, location=place.city, country=place.country, captured_at=datetime.now(UTC)
        )

    async def current_by_city(self, city: str) -> WeatherSnapshot:
        place = await self.geocode(city)
        payload = await self._current(place.latitude, place.longitude)
        return normalize_current(
            payload, location=place.name, country=place.country, captured_at=datetime.now(UTC)
        )

    async def hourly_forecast(self, lat: float, lon: float) -> HourlyForecast:
        validate_coordinates(lat, lon)
        payload = await self._request_json(
            self._forecast_url,
            {
                "latitude": lat,
                "longitude": lon,
                "hourly": HOURLY_FIELDS,
                "timezone": "auto",
                "wind_speed_unit": "kmh",
                "forecast_days": 1,
            },
            "hourly forecast",
        )
        return HourlyForecast(source=self.name, points=normalize_hourly(payload, now=self._now()))

    async def daily_forecast(self, lat: float, lon: float) -> DailyForecast:
        validate_coordinates(lat, lon)
        payload = await self._request_json(
            self._forecast_url,
            {
                "latitude": lat,
                "longitude": lon,
                "daily": DAILY_FIELDS,
                "timezone": "auto",
                "wind_speed_unit": "kmh",
                "forecast_days": DAILY_LIMIT,
            },
            "7-day forecast",
        )
        return DailyForecast(source=self.name, days=normalize_daily(payload))

    async def historical_year(self, lat: float, lon: float) -> HistoricalSeries:
        """Daily observations for the trailing twelve months."""
        validate_coordinates(lat, lon)
        start, end = trailing_year_window(datetime.now(UTC).date())
        payload = await self._request_json(
            self._archive_url,
            {
                "latitude": lat,
                "longitude": lon,
                "start_date": start.isoformat(),
                "end_date": end.isoformat(),
                "daily": ARCHIVE_FIELDS,
                "timezone": "auto",
                "wind_speed_unit": "kmh",
            },
            "historical archive",
        )
        return HistoricalSeries(source=self.name, days=normalize_historical(payload))

    async def _current(self, lat: float, lon: float) -> dict[str, Any]:
        return await self._request_json(
            self._forecast_url,
            {
                "latitude": lat,
                "longitude": lon,
                "current": CURRENT_FIELDS,
                "timezone": "auto",
                "wind_speed_unit": "ms",
            },
            "weather fetch",
        )


def coordinate_place_name(lat: float, lon: float) -> PlaceName:
    return PlaceName(city=f"Location ({lat:.2f}, {lon:.2f})")


def trailing_year_window(today: date) -> tuple[date, date]:
    try:
        start = today.replace(year=today.year - 1)
    except ValueError:
        # Feb 29 has no counterpart in the previous year.
        start = today.replace(year=today.year - 1, day=28)
    return start, today


def normalize_current(
    payload: dict[str, Any], *, location: str, country: str, captured_at: datetime
) -> WeatherSnapshot:
    """Map a forecast ``current`` block onto the unified snapshot."""
    current = payload.get("current")
    if not isinstance(current, dict):
        raise WeatherProviderError("No current weather data", provider=SOURCE)
    condition = map_weather_code(current.get("weather_code"))
    visibility = as_number(current.get("visibility"))
    return WeatherSnapshot(
        temperature=round_half_up(as_number(current.get("temperature_2m")) or 0),
        feels_like=round_half_up(as_number(current.get("apparent_temperature")) or 0),
        humidity=as_number(current.get("relative_humidity_2m")) or 0,
        pressure=round_half_up(as_number(current.get("pressure_msl")) or 0),
        description=condition.description,
        icon=condition.icon,
        location=location,
        country=country,
        wind_speed=as_number(current.get("wind_speed_10m")) or 0,
        visibility=round_half_up(visibility / 1000) if visibility is not None else 0,
        timestamp=captured_at,
        source=SOURCE,
    )


def normalize_hourly(payload: dict[str, Any], *, now: datetime) -> list[HourlyPoint]:
    hourly = payload.get("hourly")
    if not isinstance(hourly, dict) or not isinstance(hourly.get("time"), list):
        raise WeatherProviderError("No hourly forecast data from Open-Meteo", provider=SOURCE)
    tz = _payload_timezone(payload)
    local_now = now.astimezone(tz)

    points: list[HourlyPoint] = []
    for index, raw_time in enumerate(hourly["time"][:HOURLY_LIMIT]):
        moment = _parse_local_time(raw_time, tz)
        condition = map_weather_code(_at(hourly, "weather_code", index))
        visibility = _at(hourly, "visibility", index)
        points.append(
            HourlyPoint(
                time=moment,
                time_label=format_time_label(moment),
                timestamp=int(moment.timestamp() * 1000),
                is_now=moment.hour == local_now.hour,
                temperature=round_half_up(_at(hourly, "temperature_2m", index) or 0),
                description=condition.description,
                icon=condition.icon,
                humidity=_at(hourly, "relative_humidity_2m", index) or 0,
                wind_speed=round_half_up(_at(hourly, "wind_speed_10m", index) or 0),
                wind_gust=_rounded_or_none(_at(hourly, "wind_gusts_10m", index)),
                wind_direction=_rounded_or_none(_at(hourly, "wind_direction_10m", index)),
                pressure=round_half_up(_at(hourly, "pressure_msl", index) or 0),
                visibility=round_half_up(visibility / 1000) if visibility else 0,
                cloud_cover=_rounded_or_none(_at(hourly, "cloud_cover", index)),
                dew_point=_rounded_or_none(_at(hourly, "dew_point_2m", index)),
                uv_index=_rounded_or_none(_at(hourly, "uv_index", index)),
            )
        )
    return points


def normalize_daily(payload: dict[str, Any]) -> list[DailyPoint]:
    daily = payload.get("daily")
    if not isinstance(daily, dict) or not isinstance(daily.get("time"), list):
        raise WeatherProviderError("No daily forecast data from Open-Meteo", provider=SOURCE)
    code_key = "weathercode" if "weathercode" in daily else "weather_code"

    days: list[DailyPoint] = []
    for index, raw_day in enumerate(daily["time"][:DAILY_LIMIT]):
        day = _parse_date(raw_day)
        condition = map_weather_code(_at(daily, code_key, index))
        days.append(
            DailyPoint(
                date=day,
                day=day.strftime("%A"),
                date_label=format_date_label(day),
                high=round_half_up(_at(daily, "temperature_2m_max", index) or 0),
                low=round_half_up(_at(daily, "temperature_2m_min", index) or 0),
                description=condition.description,
                icon=condition.icon,
                # Humidity and pressure are not part of the daily block.
                humidity=0,
                wind_speed=round_half_up(_at(daily, "windspeed_10m_max", index) or 0),
                pressure=0,
            )
        )
    return days


def normalize_historical(payload: dict[str, Any]) -> list[HistoricalDay]:
    daily = payload.get("daily")
    if not isinstance(daily, dict) or not isinstance(daily.get("time"), list):
        raise WeatherProviderError("No historical daily data", provider=SOURCE)
    return [
        HistoricalDay(
            date=_parse_date(raw_day),
            temp_max=round_half_up(_at(daily, "temperature_2m_max", index) or 0),
            temp_min=round_half_up(_at(daily, "temperature_2m_min", index) or 0),
            precipitation=round_one_decimal(_at(daily, "precipitation_sum", index) or 0),
            wind_max=round_half_up(_at(daily, "windspeed_10m_max", index) or 0),
        )
        for index, raw_day in enumerate(daily["time"])
    ]


def _at(block: dict[str, Any], key: str, index: int) -> float | None:
    series = block.get(key)
    if not isinstance(series, list) or index >= len(series):
        return None
    return as_number(series[index])


def _rounded_or_none(value: float | None) -> int | None:
    return round_half_up(value) if value is not None else None


def _payload_timezone(payload: dict[str, Any]) -> timezone:
    offset = as_number(payload.get("utc_offset_seconds"))
    return timezone(timedelta(seconds=int(offset or 0)))


def _parse_local_time(value: Any, tz: timezone) -> datetime:
    try:
        parsed = datetime.fromisoformat(str(value))
    except ValueError as exc:
        raise WeatherProviderError(
            f"Open-Meteo returned invalid time value {value!r}.", provider=SOURCE
        ) from exc
    return parsed.replace(tzinfo=tz) if parsed.tzinfo is None else parsed.astimezone(tz)


def _parse_date(value: Any) -> date:
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError as exc:
        raise WeatherProviderError(
            f"Open-Meteo returned invalid date value {value!r}.", provider=SOURCE
        ) from exc
