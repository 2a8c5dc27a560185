"""Coordinate validation and great-circle distance."""

from __future__ import annotations

import math
from dataclasses import dataclass

EARTH_RADIUS_KM: float = 6371.0


@dataclass(frozen=True)
class Coordinate:
    latitude: float | None
    longitude: float | None

    @property
    def is_valid(self) -> bool:
        return is_valid_coordinates(self.latitude, self.longitude)


def is_valid_coordinates(lat: float | None, lng: float | None) -> bool:
    """Return whether both values are present and within WGS84 ranges; NaN is invalid."""
    if lat is None or lng is None:
        return False
    return -90 <= lat <= 90 and -180 <= lng <= 180


def distance_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Haversine distance between two points in kilometers, rounded to 0.1 km.

    NaN inputs propagate as NaN; callers check ``is_valid_coordinates`` first.
    """
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return round(EARTH_RADIUS_KM * c, 1)
