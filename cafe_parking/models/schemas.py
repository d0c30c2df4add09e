from __future__ import annotations

from enum import Enum
from typing import List, Optional, Set, Dict, Any

from pydantic import BaseModel, Field, field_validator


# Upper bound of the Places nearby-search radius, in meters
MAX_SEARCH_RADIUS = 50000


class ParkingType(str, Enum):
    FREE = "free"
    PAID = "paid"
    STREET = "street"
    GARAGE = "garage"


class SortOption(str, Enum):
    DISTANCE = "distance"
    RATING = "rating"
    PRICE = "price"


class Coordinate(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)

    def as_param(self) -> str:
        return f"{self.latitude},{self.longitude}"


class Photo(BaseModel):
    photo_reference: str
    height: int
    width: int


class OpeningHours(BaseModel):
    open_now: Optional[bool] = None
    weekday_text: List[str] = Field(default_factory=list)


class Cafe(BaseModel):
    id: str
    place_id: str
    name: str
    address: str = ""
    rating: Optional[float] = Field(default=None, ge=0.0, le=5.0)
    user_ratings_total: Optional[int] = None
    price_level: Optional[int] = Field(default=None, ge=0, le=4)
    phone_number: Optional[str] = None
    location: Optional[Coordinate] = None
    types: List[str] = Field(default_factory=list)
    opening_hours: Optional[OpeningHours] = None
    photos: Optional[List[Photo]] = None
    website: Optional[str] = None
    is_favorite: bool = False


class SearchFilter(BaseModel):
    radius: int = Field(default=1000, gt=0, le=MAX_SEARCH_RADIUS, description="Search radius in meters")
    min_rating: Optional[float] = Field(default=None, ge=0.0, le=5.0)
    max_price_level: Optional[int] = Field(default=None, ge=0, le=4)
    open_now: bool = False
    parking_types: Set[ParkingType] = Field(default_factory=lambda: set(ParkingType))
    sort_by: SortOption = SortOption.DISTANCE

    @field_validator("parking_types", mode="before")
    @classmethod
    def default_when_missing(cls, v):
        # Accept null from clients as "no preference"
        if v is None:
            return set(ParkingType)
        return v


# Google Places (legacy web service) wire shapes


class LatLng(BaseModel):
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)


class Geometry(BaseModel):
    location: Optional[LatLng] = None


class RawPlace(BaseModel):
    place_id: str
    name: str
    vicinity: Optional[str] = None
    formatted_address: Optional[str] = None
    formatted_phone_number: Optional[str] = None
    website: Optional[str] = None
    rating: Optional[float] = Field(default=None, ge=0.0, le=5.0)
    user_ratings_total: Optional[int] = None
    price_level: Optional[int] = Field(default=None, ge=0, le=4)
    geometry: Optional[Geometry] = None
    types: List[str] = Field(default_factory=list)
    photos: Optional[List[Photo]] = None
    opening_hours: Optional[OpeningHours] = None


class NearbySearchResponse(BaseModel):
    status: str
    results: List[RawPlace] = Field(default_factory=list)
    error_message: Optional[str] = None


class PlaceDetailsResponse(BaseModel):
    status: str
    result: Optional[RawPlace] = None
    error_message: Optional[str] = None


# HTTP API shapes


class CafeSearchRequest(BaseModel):
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)
    filter: SearchFilter = Field(default_factory=SearchFilter)


class CafeResult(BaseModel):
    cafe: Cafe
    distance_m: Optional[float] = None
    distance_text: Optional[str] = None
    rating_text: str = ""
    rating_stars: str = ""
    price_text: str = ""
    price_description: str = ""
    phone_text: str = ""
    opening_hours_text: str = ""
    directions_url: Optional[str] = None
    share_text: str = ""


class CafeSearchResponse(BaseModel):
    results: List[CafeResult]
    total_count: int
    search_info: Dict[str, Any]
