"""Provider-agnostic weather interface and shared normalization helpers."""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Any, Literal

import httpx

from ..config import Settings
from ..exceptions import WeatherProviderError
from ..redaction import sanitize_text
from .models import DailyForecast, HistoricalSeries, HourlyForecast, WeatherSnapshot

Operation = Literal["current", "hourly", "daily", "historical"]


class WeatherProvider(ABC):
    """Base contract for one upstream weather source.

    Subclasses own a single ``httpx.AsyncClient`` unless one is injected, in
    which case the caller keeps ownership and ``aclose`` leaves it open.
    """

    name: str = "unknown"
    display_name: str = "Unknown"
    supported_operations: frozenset[str] = frozenset({"current", "hourly", "daily"})

    def __init__(
        self,
        settings: Settings,
        logger: logging.Logger,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings
        self.logger = logger
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=settings.weather_timeout_seconds)

    async def __aenter__(self) -> WeatherProvider:
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def supports(self, operation: Operation) -> bool:
        return operation in self.supported_operations

    @abstractmethod
    async def current_by_coords(self, lat: float, lon: float) -> WeatherSnapshot:
        """Fetch current conditions for a coordinate pair."""

    @abstractmethod
    async def current_by_city(self, city: str) -> WeatherSnapshot:
        """Fetch current conditions for a free-text place name."""

    @abstractmethod
    async def hourly_forecast(self, lat: float, lon: float) -> HourlyForecast:
        """Fetch the next-hours forecast strip."""

    @abstractmethod
    async def daily_forecast(self, lat: float, lon: float) -> DailyForecast:
        """Fetch the multi-day forecast."""

    async def historical_year(self, lat: float, lon: float) -> HistoricalSeries:
        raise WeatherProviderError(
            f"{self.display_name} does not provide historical data.", provider=self.name
        )

    def _now(self) -> datetime:
        return datetime.now().astimezone()

    async def _request_json(
        self, url: str, params: dict[str, Any], context: str
    ) -> dict[str, Any]:
        try:
            response = await self._client.get(url, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise WeatherProviderError(
                self._describe_status(context, exc.response),
                provider=self.name,
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise WeatherProviderError(
                f"{self.display_name} {context} request failed: "
                f"{sanitize_text(str(exc)) or type(exc).__name__}",
                provider=self.name,
            ) from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise WeatherProviderError(
                f"{self.display_name} {context} returned non-JSON response.",
                provider=self.name,
            ) from exc

        if not isinstance(payload, dict):
            raise WeatherProviderError(
                f"{self.display_name} {context} returned unexpected payload type "
                f"{type(payload).__name__}.",
                provider=self.name,
            )
        return payload

    def _describe_status(self, context: str, response: httpx.Response) -> str:
        message = f"{self.display_name} {context} failed with status {response.status_code}"
        detail = _error_detail(response)
        return f"{message}: {detail}" if detail else message


def _error_detail(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        text = response.text.strip()
        return sanitize_text(text[:200]) if text else None
    if isinstance(body, dict):
        for key in ("message", "reason", "error"):
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return sanitize_text(value.strip())
    return sanitize_text(str(body)[:200])


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward positive infinity."""
    return math.floor(value + 0.5)


def round_one_decimal(value: float) -> float:
    return math.floor(value * 10 + 0.5) / 10


def as_number(value: Any) -> float | None:
    """Return ``value`` as a float when it is a finite real number, else None."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return float(value)


def validate_coordinates(lat: float, lon: float) -> None:
    if not (-90 <= lat <= 90):
        raise WeatherProviderError(f"Invalid latitude {lat}; expected between -90 and 90.")
    if not (-180 <= lon <= 180):
        raise WeatherProviderError(f"Invalid longitude {lon}; expected between -180 and 180.")


def format_time_label(moment: datetime) -> str:
    """Format as a 12-hour clock label such as ``3:00 PM``."""
    hour = moment.hour % 12 or 12
    suffix = "AM" if moment.hour < 12 else "PM"
    return f"{hour}:{moment.minute:02d} {suffix}"


def format_date_label(day: date) -> str:
    """Format as a short month/day label such as ``Jun 1``."""
    return f"{day.strftime('%b')} {day.day}"
