"""OpenWeatherMap adapter: normalization, daily reduction and HTTP error mapping."""

from __future__ import annotations

import logging
from datetime import UTC, date, datetime
from typing import Any

import httpx
import pytest
from pydantic import ValidationError

from weather_aggregator.config import Settings
from weather_aggregator.exceptions import WeatherProviderError
from weather_aggregator.weather.models import WeatherSnapshot
from weather_aggregator.weather.openweather import (
    OpenWeatherMapProvider,
    normalize_current,
    normalize_hourly,
    summarize_daily,
)

# 2024-06-01T00:00:00Z, a Saturday.
JUNE_1_UTC = 1717200000
THREE_HOURS = 3 * 3600


def _settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {"openweather_api_key": "test-key-123"}
    values.update(overrides)
    return Settings(_env_file=None, **values)


def _provider(handler: Any = None, **overrides: Any) -> OpenWeatherMapProvider:
    client = None
    if handler is not None:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return OpenWeatherMapProvider(
        settings=_settings(**overrides),
        logger=logging.getLogger("test.openweather"),
        client=client,
    )


def _sample(
    offset_steps: int,
    temp: float,
    *,
    description: str = "clear sky",
    icon: str = "01d",
    humidity: float = 60,
    wind: float = 3,
    pressure: float = 1010,
    base: int = JUNE_1_UTC,
    **extra: Any,
) -> dict[str, Any]:
    sample: dict[str, Any] = {
        "dt": base + offset_steps * THREE_HOURS,
        "main": {"temp": temp, "humidity": humidity, "pressure": pressure},
        "weather": [{"description": description, "icon": icon}],
        "wind": {"speed": wind},
    }
    sample.update(extra)
    return sample


def test_current_payload_maps_every_field() -> None:
    payload = {
        "name": "London",
        "sys": {"country": "GB"},
        "main": {"temp": 14.5, "feels_like": 13.2, "humidity": 72, "pressure": 1012},
        "weather": [{"description": "light rain", "icon": "10d"}],
        "wind": {"speed": 4.6},
        "visibility": 9500,
    }
    captured = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)

    snapshot = normalize_current(payload, captured_at=captured)

    assert snapshot.temperature == 15
    assert snapshot.feels_like == 13
    assert snapshot.humidity == 72
    assert snapshot.pressure == 1012
    assert snapshot.description == "light rain"
    assert snapshot.icon == "10d"
    assert snapshot.location == "London"
    assert snapshot.country == "GB"
    assert snapshot.wind_speed == 4.6
    assert snapshot.visibility == 10
    assert snapshot.timestamp == captured
    assert snapshot.source == "openweathermap"


def test_current_payload_missing_optional_fields_defaults_to_zero() -> None:
    payload = {
        "main": {"temp": -2.5},
        "weather": [{"description": "snow", "icon": "13n"}],
    }
    snapshot = normalize_current(payload, captured_at=datetime.now(UTC))

    assert set(snapshot.model_dump()) == set(WeatherSnapshot.model_fields)
    assert snapshot.temperature == -2
    assert snapshot.feels_like == -2
    assert snapshot.humidity == 0
    assert snapshot.pressure == 0
    assert snapshot.wind_speed == 0
    assert snapshot.visibility == 0
    assert snapshot.location == "Current Location"
    assert snapshot.country == ""


def test_current_payload_without_main_raises() -> None:
    with pytest.raises(WeatherProviderError, match="missing 'main' object"):
        normalize_current({"weather": []}, captured_at=datetime.now(UTC))


def test_snapshot_is_immutable() -> None:
    snapshot = normalize_current(
        {"main": {"temp": 20}, "weather": [{"description": "clear sky", "icon": "01d"}]},
        captured_at=datetime.now(UTC),
    )
    with pytest.raises(ValidationError):
        snapshot.temperature = 30  # type: ignore[misc]


def test_daily_summary_reduces_one_calendar_day() -> None:
    temps = [10, 12, 15, 14, 13, 11, 9, 8]
    samples = [
        _sample(index, temp, description=f"desc-{index}", icon=f"icon-{index}", wind=index + 1)
        for index, temp in enumerate(temps)
    ]
    days = summarize_daily({"list": samples, "city": {"timezone": 0}})

    assert len(days) == 1
    day = days[0]
    assert day.date == date(2024, 6, 1)
    assert day.day == "Saturday"
    assert day.date_label == "Jun 1"
    assert day.high == 15
    assert day.low == 8
    assert day.description == "desc-4"
    assert day.icon == "icon-4"
    assert day.humidity == 60
    # mean of 1..8 is 4.5, rounded half up
    assert day.wind_speed == 5
    assert day.pressure == 1010


def test_daily_summary_groups_by_city_local_date_and_caps_at_seven_days() -> None:
    samples = [_sample(step, 20) for step in range(0, 8 * 9)]
    days = summarize_daily({"list": samples, "city": {"timezone": 0}})
    assert len(days) == 7
    assert [d.date for d in days] == sorted(d.date for d in days)

    # 20:00Z is 01:30 the next day at UTC+05:30.
    late_sample = _sample(0, 25, base=JUNE_1_UTC + 20 * 3600)
    days = summarize_daily({"list": [late_sample], "city": {"timezone": 19800}})
    assert days[0].date == date(2024, 6, 2)


def test_daily_summary_with_even_split_uses_floor_middle() -> None:
    samples = [
        _sample(0, 10, description="first"),
        _sample(1, 11, description="second"),
        _sample(2, 12, description="third"),
    ]
    days = summarize_daily({"list": samples, "city": {"timezone": 0}})
    assert days[0].description == "second"


def test_hourly_takes_first_eight_samples_and_marks_current_hour() -> None:
    samples = [
        _sample(step, 18.4, wind=2.5, visibility=10000, clouds={"all": 40})
        for step in range(10)
    ]
    samples[0]["wind"]["gust"] = 7.5
    samples[0]["wind"]["deg"] = 220
    now = datetime(2024, 6, 1, 3, 30, tzinfo=UTC)

    points = normalize_hourly({"list": samples, "city": {"timezone": 0}}, now=now)

    assert len(points) == 8
    assert points[0].time_label == "12:00 AM"
    assert points[5].time_label == "3:00 PM"
    assert [p.is_now for p in points[:3]] == [False, True, False]
    assert points[0].temperature == 18
    assert points[0].wind_gust == 8
    assert points[0].wind_direction == 220
    assert points[1].wind_gust is None
    assert points[0].visibility == 10
    assert points[0].cloud_cover == 40
    assert points[0].dew_point is None
    assert points[0].uv_index is None
    assert points[0].timestamp == JUNE_1_UTC * 1000


def test_forecast_without_list_raises() -> None:
    with pytest.raises(WeatherProviderError, match="missing 'list' array"):
        summarize_daily({"city": {}})


@pytest.mark.asyncio
async def test_request_sends_metric_units_and_key() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "name": "Paris",
                "sys": {"country": "FR"},
                "main": {"temp": 21.2, "feels_like": 21.0, "humidity": 40, "pressure": 1018},
                "weather": [{"description": "few clouds", "icon": "02d"}],
            },
        )

    provider = _provider(handler)
    snapshot = await provider.current_by_city("Paris")

    assert snapshot.location == "Paris"
    assert seen[0].url.path == "/data/2.5/weather"
    params = seen[0].url.params
    assert params["q"] == "Paris"
    assert params["units"] == "metric"
    assert params["appid"] == "test-key-123"


@pytest.mark.asyncio
async def test_http_error_message_includes_api_message_but_not_key() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"cod": "404", "message": "city not found"})

    provider = _provider(handler)
    with pytest.raises(WeatherProviderError, match="status 404: city not found") as excinfo:
        await provider.current_by_city("Atlantis")

    assert excinfo.value.status_code == 404
    assert "test-key-123" not in str(excinfo.value)


@pytest.mark.asyncio
async def test_transport_error_is_wrapped() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    provider = _provider(handler)
    with pytest.raises(WeatherProviderError, match="request failed"):
        await provider.current_by_coords(51.5, -0.12)


@pytest.mark.asyncio
async def test_placeholder_key_is_rejected_before_any_request() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={})

    provider = _provider(handler, openweather_api_key="your_api_key_here")
    with pytest.raises(WeatherProviderError, match="missing or a placeholder"):
        await provider.hourly_forecast(51.5, -0.12)
    assert calls == []


def test_historical_is_not_supported() -> None:
    provider = _provider()
    assert not provider.supports("historical")
    assert provider.supports("daily")


@pytest.mark.parametrize("temp", [float("inf"), float("-inf"), float("nan")])
def test_non_finite_temperature_is_treated_as_missing(temp: float) -> None:
    payload = {"main": {"temp": temp}, "weather": [{"description": "clear sky", "icon": "01d"}]}
    with pytest.raises(WeatherProviderError, match="missing 'main.temp'"):
        normalize_current(payload, captured_at=datetime.now(UTC))
