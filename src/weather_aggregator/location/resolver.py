"""Location resolution: device geolocation first, IP geolocation second."""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Any

import httpx

from ..config import Settings
from ..exceptions import GeolocationError, LocationError, WeatherProviderError
from ..redaction import sanitize_text
from ..weather.models import PlaceName
from ..weather.openmeteo import OpenMeteoProvider, coordinate_place_name
from .models import IP_ACCURACY_METERS, ResolvedLocation
from .sources import FixedGeolocation, GeolocationSource, PermissionState, UnsupportedGeolocation

_DEFAULT_SUGGESTION = "Please try searching for a city instead."

# code -> (message, suggestion) shown to the user.
_DEVICE_FAILURES: dict[int, tuple[str, str]] = {
    GeolocationError.PERMISSION_DENIED: (
        "Location access denied. Please enable location access in your settings and try again.",
        "Allow location access for this application, or search for a city instead.",
    ),
    GeolocationError.POSITION_UNAVAILABLE: (
        "Location information is unavailable. This might be due to network issues "
        "or GPS being disabled.",
        "Please check your internet connection and GPS settings, or search for a city instead.",
    ),
    GeolocationError.TIMEOUT: (
        "Location request timed out. Please try again or search for a city instead.",
        "Make sure you have a good internet connection and try again.",
    ),
    GeolocationError.UNSUPPORTED: (
        "Geolocation is not supported on this device. Please try searching for a city instead.",
        _DEFAULT_SUGGESTION,
    ),
}


def default_source(settings: Settings) -> GeolocationSource:
    """Pick the geolocation source implied by configuration."""
    if settings.weather_default_lat is not None and settings.weather_default_lon is not None:
        return FixedGeolocation(settings.weather_default_lat, settings.weather_default_lon)
    return UnsupportedGeolocation()


class LocationResolver:
    """Linear device -> IP fallback without retries."""

    def __init__(
        self,
        settings: Settings,
        logger: logging.Logger,
        *,
        source: GeolocationSource | None = None,
        client: httpx.AsyncClient | None = None,
        reverse_geocoder: OpenMeteoProvider | None = None,
    ) -> None:
        self.settings = settings
        self.logger = logger
        self.source = source or default_source(settings)
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=settings.weather_timeout_seconds)
        self._reverse_geocoder = reverse_geocoder or OpenMeteoProvider(
            settings, logger, self._client
        )

    async def __aenter__(self) -> LocationResolver:
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def locate(self) -> ResolvedLocation:
        """Return the device location, or the IP location if the device fails."""
        try:
            return await self.device_location()
        except LocationError as device_error:
            self.logger.warning(
                "Device geolocation failed, trying IP fallback: %s", device_error
            )
            try:
                return await self.ip_location()
            except LocationError as ip_error:
                self.logger.error("IP geolocation also failed: %s", ip_error)
                raise LocationError(
                    f"Location detection failed. {device_error} "
                    "Also, IP-based location detection is unavailable.",
                    suggestion="Please search for a city instead or check your internet connection.",
                    code=device_error.code,
                    original_error=device_error,
                ) from ip_error

    async def device_location(self) -> ResolvedLocation:
        timeout = self.settings.geolocation_timeout_seconds
        try:
            position = await asyncio.wait_for(
                self.source.current_position(
                    timeout=timeout,
                    maximum_age=self.settings.geolocation_maximum_age_seconds,
                    high_accuracy=True,
                ),
                timeout=timeout,
            )
        except TimeoutError as exc:
            raise self._device_error(GeolocationError.TIMEOUT, exc) from exc
        except GeolocationError as exc:
            raise self._device_error(exc.code, exc) from exc
        except Exception as exc:
            self.logger.warning("Geolocation source raised %s: %s", type(exc).__name__, exc)
            raise self._device_error(None, exc) from exc

        return ResolvedLocation(
            latitude=position.latitude,
            longitude=position.longitude,
            accuracy=position.accuracy,
            method="browser",
        )

    async def ip_location(self) -> ResolvedLocation:
        try:
            response = await self._client.get(self.settings.ip_geolocation_url)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as exc:
            raise LocationError(
                "IP geolocation failed: IP geolocation service unavailable",
                suggestion=_DEFAULT_SUGGESTION,
                original_error=exc,
            ) from exc
        except ValueError as exc:
            raise LocationError(
                "IP geolocation failed: invalid response body",
                suggestion=_DEFAULT_SUGGESTION,
                original_error=exc,
            ) from exc

        latitude = data.get("latitude") if isinstance(data, dict) else None
        longitude = data.get("longitude") if isinstance(data, dict) else None
        if not _is_coordinate(latitude) or not _is_coordinate(longitude):
            raise LocationError(
                "IP geolocation failed: Invalid location data received",
                suggestion=_DEFAULT_SUGGESTION,
            )
        return ResolvedLocation(
            latitude=float(latitude),
            longitude=float(longitude),
            accuracy=IP_ACCURACY_METERS,
            method="ip",
            city=_optional_text(data.get("city")),
            country=_optional_text(data.get("country_name")),
        )

    async def place_name(self, lat: float, lon: float) -> PlaceName:
        """Reverse-geocode, synthesizing a name from the coordinates on failure."""
        try:
            return await self._reverse_geocoder.reverse_geocode(lat, lon)
        except (WeatherProviderError, httpx.HTTPError) as exc:
            self.logger.warning("Reverse geocoding failed: %s", sanitize_text(str(exc)))
            return coordinate_place_name(lat, lon)

    async def check_permission(self) -> PermissionState:
        try:
            return await self.source.permission_state()
        except GeolocationError as exc:
            self.logger.warning("Could not check geolocation permission: %s", exc)
            return "unknown"

    def _device_error(self, code: int | None, cause: Exception) -> LocationError:
        message, suggestion = _DEVICE_FAILURES.get(
            code,
            (
                "Unable to retrieve your location. Please try searching for a city instead.",
                "Check your internet connection and try again.",
            ),
        )
        return LocationError(message, suggestion=suggestion, code=code, original_error=cause)


def _is_coordinate(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _optional_text(value: Any) -> str | None:
    return str(value) if value is not None else None
