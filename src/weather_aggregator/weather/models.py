"""Typed models for the unified weather schema."""

from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class WeatherSnapshot(_Frozen):
    """Current conditions, identical field set for every provider."""

    temperature: int
    feels_like: int
    humidity: float = 0
    pressure: float = 0
    description: str
    icon: str
    location: str
    country: str = ""
    wind_speed: float = 0
    visibility: int = 0
    timestamp: dt.datetime
    source: str


class HourlyPoint(_Frozen):
    """One forecast sample in the next-hours strip."""

    time: dt.datetime
    time_label: str
    timestamp: int
    is_now: bool = False
    temperature: int
    description: str
    icon: str
    humidity: float = 0
    wind_speed: float = 0
    wind_gust: int | None = None
    wind_direction: float | None = None
    pressure: float = 0
    visibility: int = 0
    cloud_cover: float | None = None
    dew_point: int | None = None
    uv_index: int | None = None


class DailyPoint(_Frozen):
    """One day of the multi-day forecast."""

    date: dt.date
    day: str
    date_label: str
    high: int
    low: int
    description: str
    icon: str
    humidity: int = 0
    wind_speed: int = 0
    pressure: int = 0


class HistoricalDay(_Frozen):
    """Observed daily aggregates from the reanalysis archive."""

    date: dt.date
    temp_max: int = 0
    temp_min: int = 0
    precipitation: float = 0
    wind_max: int = 0


class HourlyForecast(_Frozen):
    source: str
    points: list[HourlyPoint] = Field(default_factory=list)


class DailyForecast(_Frozen):
    source: str
    days: list[DailyPoint] = Field(default_factory=list)


class HistoricalSeries(_Frozen):
    source: str
    days: list[HistoricalDay] = Field(default_factory=list)


class GeocodedPlace(_Frozen):
    """Forward geocoding result for a free-text place name."""

    latitude: float
    longitude: float
    name: str
    country: str = ""


class PlaceName(_Frozen):
    """Reverse geocoding result; city may be synthesized from coordinates."""

    city: str
    country: str = ""
    state: str = ""
