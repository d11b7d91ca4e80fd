"""Office geofence check based on great-circle distance."""

from __future__ import annotations

import math
from dataclasses import dataclass

from ..core.constants import EARTH_RADIUS_METERS


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class GeofenceResult:
    distance: float
    radius: float
    within_radius: bool


def haversine_distance_meters(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate distance (in meters) between two GPS coordinates."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)

    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    # rounding can push a just outside [0, 1] near antipodal points
    a = min(1.0, max(0.0, a))
    c =2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_METERS * c


class GeoFenceValidator:
    """Decides whether a coordinate lies inside the configured office radius.

    The reference point and radius are fixed at construction; callers are
    expected to have validated presence/type of the submitted coordinate.
    """

    def __init__(self, office: GeoPoint, radius_meters: float):
        self._office = office
        self._radius = float(radius_meters)

    @property
    def office(self) -> GeoPoint:
        return self._office

    @property
    def radius(self) -> float:
        return self._radius

    def check(self, latitude: float, longitude: float) -> GeofenceResult:
        distance = haversine_distance_meters(latitude, longitude, self._office.latitude, self._office.longitude)
        return GeofenceResult(distance=distance, radius=self._radius, within_radius=distance <= self._radius)
