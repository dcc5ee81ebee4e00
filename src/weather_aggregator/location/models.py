"""Typed models for resolved device/IP locations."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict

# Accuracy reported for IP-based lookups, in metres.
IP_ACCURACY_METERS = 10_000.0


class Position(BaseModel):
    """Raw fix produced by a geolocation source."""

    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float
    accuracy: float | None = None
    captured_at: datetime | None = None


class ResolvedLocation(BaseModel):
    """Coordinates plus how they were obtained."""

    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float
    accuracy: float | None = None
    method: Literal["browser", "ip"]
    city: str | None = None
    country: str | None = None
