"""WMO weather-code vocabulary shared by the Open-Meteo adapter."""

from __future__ import annotations

from typing import NamedTuple


class Condition(NamedTuple):
    description: str
    icon: str


# Icons are the closest OpenWeatherMap icon codes so both providers render alike.
_CODE_TABLE: tuple[tuple[frozenset[int], Condition], ...] = (
    (frozenset({0}), Condition("clear sky", "01d")),
    (frozenset({1}), Condition("mainly clear", "02d")),
    (frozenset({2}), Condition("partly cloudy", "03d")),
    (frozenset({3}), Condition("overcast clouds", "04d")),
    (frozenset({45, 48}), Condition("fog", "50d")),
    (frozenset({51, 53, 55}), Condition("drizzle", "09d")),
    (frozenset({56, 57}), Condition("freezing drizzle", "13d")),
    (frozenset({61, 63, 65}), Condition("rain", "10d")),
    (frozenset({66, 67}), Condition("freezing rain", "13d")),
    (frozenset({71, 73, 75, 77}), Condition("snow", "13d")),
    (frozenset({80, 81, 82}), Condition("rain showers", "09d")),
    (frozenset({85, 86}), Condition("snow showers", "13d")),
    (frozenset({95}), Condition("thunderstorm", "11d")),
    (frozenset({96, 99}), Condition("thunderstorm with hail", "11d")),
)

UNKNOWN_CONDITION = Condition("unknown", "03d")

WEATHER_CODES: dict[int, Condition] = {
    code: condition for codes, condition in _CODE_TABLE for code in codes
}


def map_weather_code(code: object) -> Condition:
    """Map an Open-Meteo weather code (int, float or numeric string) to a condition."""
    try:
        numeric = float(code)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return UNKNOWN_CONDITION
    if not numeric.is_integer():
        return UNKNOWN_CONDITION
    return WEATHER_CODES.get(int(numeric), UNKNOWN_CONDITION)


def icon_url(icon: str) -> str:
    """Return the OpenWeatherMap image URL for an icon code."""
    return f"https://openweathermap.org/img/wn/{icon}@2x.png"
