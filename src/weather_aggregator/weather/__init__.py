"""Weather providers and the fallback facade."""

from .base import WeatherProvider
from .codes import icon_url, map_weather_code
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
from .openmeteo import OpenMeteoProvider
from .openweather import OpenWeatherMapProvider
from .service import WeatherService

__all__ = [
    "DailyForecast",
    "DailyPoint",
    "GeocodedPlace",
    "HistoricalDay",
    "HistoricalSeries",
    "HourlyForecast",
    "HourlyPoint",
    "OpenMeteoProvider",
    "OpenWeatherMapProvider",
    "PlaceName",
    "WeatherProvider",
    "WeatherService",
    "WeatherSnapshot",
    "icon_url",
    "map_weather_code",
]
