"""
core/geo.py

Great-circle distance helpers used by proximity matching.
Points follow GeoJSON order (longitude, latitude); (0, 0) is the "never set" sentinel.
"""

import math
from typing import NamedTuple

EARTH_RADIUS_KM = 6371.0


class GeoPoint(NamedTuple):
    longitude: float
    latitude: float

    @property
    def is_unset(self) -> bool:
        return self.longitude == 0 and self.latitude == 0


UNSET_POINT = GeoPoint(0.0, 0.0)


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Haversine distance in kilometers on a sphere of radius EARTH_RADIUS_KM."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def distance_km(origin: GeoPoint, target: GeoPoint) -> float:
    return haversine_km(origin.latitude, origin.longitude, target.latitude, target.longitude)


def within_radius(origin: GeoPoint, candidate: GeoPoint, radius_km: float) -> bool:
    """
    True when candidate lies within radius_km of origin.

    A pair where either point is unset always matches, so records that never
    received a location are not hidden from listings.
    """
    if origin.is_unset or candidate.is_unset:
        return True
    return distance_km(origin, candidate) <= radius_km
