"""Device and IP based location resolution."""

from .models import IP_ACCURACY_METERS, Position, ResolvedLocation
from .resolver import LocationResolver, default_source
from .sources import FixedGeolocation, GeolocationSource, UnsupportedGeolocation

__all__ = [
    "FixedGeolocation",
    "GeolocationSource",
    "IP_ACCURACY_METERS",
    "LocationResolver",
    "Position",
    "ResolvedLocation",
    "UnsupportedGeolocation",
    "default_source",
]
