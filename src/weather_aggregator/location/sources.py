"""Device geolocation sources."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import UTC, datetime
from typing import Literal

from ..exceptions import GeolocationError
from .models import Position

PermissionState = Literal["granted", "denied", "prompt", "unknown"]


class GeolocationSource(ABC):
    """Platform surface that can report the device position."""

    @abstractmethod
    async def current_position(
        self,
        *,
        timeout: float,
        maximum_age: float,
        high_accuracy: bool = True,
    ) -> Position:
        """Return a position or raise :class:`GeolocationError`."""

    async def permission_state(self) -> PermissionState:
        return "unknown"


class UnsupportedGeolocation(GeolocationSource):
    """Used when the host has no geolocation capability."""

    async def current_position(
        self,
        *,
        timeout: float,
        maximum_age: float,
        high_accuracy: bool = True,
    ) -> Position:
        raise GeolocationError(
            "Geolocation is not supported on this host.", code=GeolocationError.UNSUPPORTED
        )


class FixedGeolocation(GeolocationSource):
    """Reports a configured coordinate pair, e.g. WEATHER_DEFAULT_LAT/LON."""

    def __init__(self, latitude: float, longitude: float, accuracy: float | None = None) -> None:
        self.latitude = latitude
        self.longitude = longitude
        self.accuracy = accuracy

    async def current_position(
        self,
        *,
        timeout: float,
        maximum_age: float,
        high_accuracy: bool = True,
    ) -> Position:
        return Position(
            latitude=self.latitude,
            longitude=self.longitude,
            accuracy=self.accuracy,
            captured_at=datetime.now(UTC),
        )

    async def permission_state(self) -> PermissionState:
        return "granted"
