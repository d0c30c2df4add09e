from __future__ import annotations

from typing import List, Optional

from cafe_parking.models.schemas import Cafe, Coordinate, ParkingType, SearchFilter, SortOption
from cafe_parking.utils.geo import haversine_distance
from cafe_parking.utils.parking import ParkingTags, parking_types_for

# Sort key used for cafés without a price level
UNKNOWN_PRICE_LEVEL = 4


def _passes_parking(cafe: Cafe, accepted: set, parking_tags: Optional[ParkingTags]) -> bool:
    # An empty or complete accepted set places no constraint
    if not accepted or accepted >= set(ParkingType):
        return True
    offered = parking_types_for(cafe.types, parking_tags)
    if not offered:
        return True
    return bool(offered & accepted)


def passes_filter(cafe: Cafe, search_filter: SearchFilter, parking_tags: Optional[ParkingTags] = None) -> bool:
    """
    Decide whether one café survives the user's filter.

    Fields the café doesn't report pass, except that a café without a
    location is always dropped and open_now requires explicit opening hours.
    """
    if cafe.location is None:
        return False

    if search_filter.min_rating is not None and cafe.rating is not None:
        if cafe.rating < search_filter.min_rating:
            return False

    if search_filter.max_price_level is not None and cafe.price_level is not None:
        if cafe.price_level > search_filter.max_price_level:
            return False

    if search_filter.open_now:
        if cafe.opening_hours is None or cafe.opening_hours.open_now is not True:
            return False

    return _passes_parking(cafe, set(search_filter.parking_types), parking_tags)


def apply_filter(
    cafes: List[Cafe],
    search_filter: SearchFilter,
    parking_tags: Optional[ParkingTags] = None,
) -> List[Cafe]:
    return [c for c in cafes if passes_filter(c, search_filter, parking_tags)]


def sort_cafes(cafes: List[Cafe], sort_by: SortOption, origin: Optional[Coordinate] = None) -> List[Cafe]:
    """Stable sort; equal keys keep their input order."""
    if sort_by is SortOption.DISTANCE:
        if origin is None:
            return list(cafes)
        return sorted(
            cafes,
            key=lambda c: haversine_distance(origin, c.location) if c.location else float("inf"),
        )

    if sort_by is SortOption.RATING:
        return sorted(cafes, key=lambda c: -(c.rating or 0.0))

    # Unlabeled prices rank as the top level and still land after real 4s
    return sorted(
        cafes,
        key=lambda c: (
            c.price_level if c.price_level is not None else UNKNOWN_PRICE_LEVEL,
            c.price_level is None,
        ),
    )


def filter_and_sort(
    cafes: List[Cafe],
    search_filter: SearchFilter,
    origin: Optional[Coordinate] = None,
    parking_tags: Optional[ParkingTags] = None,
) -> List[Cafe]:
    return sort_cafes(apply_filter(cafes, search_filter, parking_tags), search_filter.sort_by, origin)
