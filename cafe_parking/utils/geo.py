from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from math import radians, cos, sin, asin, sqrt

from cafe_parking.models.schemas import Coordinate

EARTH_RADIUS_M = 6371000.0


def haversine_distance(origin: Coordinate, target: Coordinate) -> float:
    """Great-circle distance between two coordinates in meters."""
    lat1, lng1, lat2, lng2 = map(
        radians,
        [origin.latitude, origin.longitude, target.latitude, target.longitude],
    )

    dlat = lat2 - lat1
    dlng = lng2 - lng1
    a = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlng / 2) ** 2
    c = 2 * asin(min(1.0, sqrt(a)))
    return c * EARTH_RADIUS_M


def format_distance(meters: float) -> str:
    """
    Human-readable distance: "0m" for non-positive input, whole meters below
    1 km, otherwise kilometers to one decimal rounded half-up ("1.3km" for 1250).
    """
    if meters <= 0:
        return "0m"
    if meters < 1000:
        return f"{int(meters)}m"
    km = (Decimal(str(meters)) / Decimal(1000)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return f"{km}km"


def is_within_radius(distance: float, radius: float) -> bool:
    return distance <= radius
