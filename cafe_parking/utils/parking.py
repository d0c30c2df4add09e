from __future__ import annotations

import json
import os
from typing import Dict, FrozenSet, Iterable, List, Optional, Set

from pydantic import BaseModel

from cafe_parking.models.schemas import ParkingType


class ParkingPack(BaseModel):
    type: ParkingType
    label: str
    tags: List[str] = []


# __file__ -> cafe_parking/utils/parking.py
DEFAULT_PARKING_PATH = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "data", "parking_types.json"
)

ParkingTags = Dict[ParkingType, FrozenSet[str]]


def pack_tags(packs: Iterable[ParkingPack]) -> ParkingTags:
    tags: Dict[ParkingType, Set[str]] = {}
    for pack in packs:
        tags.setdefault(pack.type, set()).update(t.lower() for t in pack.tags)
    return {k: frozenset(v) for k, v in tags.items()}


def load_parking_packs(path: Optional[str] = None) -> List[ParkingPack]:
    """
    Loads parking packs from cafe_parking/data/parking_types.json by default.
    """
    if path is None:
        path = DEFAULT_PARKING_PATH

    if not os.path.exists(path):
        raise FileNotFoundError(f"Parking type data file not found at {path}")

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    return [ParkingPack(**item) for item in data]


def load_parking_tags(path: Optional[str] = None) -> ParkingTags:
    return pack_tags(load_parking_packs(path))


DEFAULT_PARKING_TAGS: ParkingTags = load_parking_tags()


def parking_types_for(tags: Iterable[str], parking_tags: Optional[ParkingTags] = None) -> Set[ParkingType]:
    """Parking types whose tag tokens appear among a place's tags."""
    catalogue = parking_tags if parking_tags is not None else DEFAULT_PARKING_TAGS
    present = {t.lower() for t in tags}
    return {ptype for ptype, tokens in catalogue.items() if tokens & present}
