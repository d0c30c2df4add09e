from __future__ import annotations

import logging
from typing import List, Optional, Dict, Any

import httpx
from pydantic import ValidationError

from cafe_parking.core.errors import CafeSearchError, ErrorKind, places_status_error
from cafe_parking.models.schemas import (
    Cafe,
    Coordinate,
    NearbySearchResponse,
    PlaceDetailsResponse,
    RawPlace,
    SearchFilter,
)

PLACES_BASE = "https://maps.googleapis.com/maps/api/place"
DEFAULT_LANGUAGE = "ja"
DEFAULT_KEYWORD = "cafe parking"
PLACE_TYPE = "cafe"
DETAILS_FIELDS = ",".join(
    [
        "place_id",
        "name",
        "formatted_address",
        "vicinity",
        "rating",
        "user_ratings_total",
        "price_level",
        "types",
        "geometry",
        "photos",
        "opening_hours",
        "website",
        "formatted_phone_number",
    ]
)

logger = logging.getLogger(__name__)


def _map_place_to_cafe(place: RawPlace) -> Cafe:
    loc = place.geometry.location if place.geometry else None
    return Cafe(
        id=place.place_id,
        place_id=place.place_id,
        name=place.name,
        address=place.formatted_address or place.vicinity or "",
        rating=place.rating,
        user_ratings_total=place.user_ratings_total,
        price_level=place.price_level,
        phone_number=place.formatted_phone_number,
        location=Coordinate(latitude=loc.lat, longitude=loc.lng) if loc else None,
        types=place.types,
        opening_hours=place.opening_hours,
        photos=place.photos,
        website=place.website,
        is_favorite=False,
    )


class PlacesClient:
    """Google Places web service client: one nearby search or details lookup per call."""

    def __init__(
        self,
        api_key: str,
        base_url: str = PLACES_BASE,
        language: str = DEFAULT_LANGUAGE,
        keyword: Optional[str] = DEFAULT_KEYWORD,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = (api_key or "").strip()
        self.base_url = base_url.rstrip("/")
        self.language = language
        self.keyword = keyword
        self._client = httpx.AsyncClient(transport=transport)

    async def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        if not self.api_key:
            raise CafeSearchError(ErrorKind.PLACES_INVALID_API_KEY)

        request_params = dict(params)
        request_params["key"] = self.api_key
        url = f"{self.base_url}/{path}"
        try:
            resp = await self._client.get(url, params=request_params)
            resp.raise_for_status()
        except httpx.HTTPStatusError as err:
            logger.warning("Places HTTP error %s for %s", err.response.status_code, path)
            raise CafeSearchError(
                ErrorKind.PLACES_NETWORK_ERROR,
                f"Places API HTTP error {err.response.status_code}",
                cause=err,
                details={"status_code": err.response.status_code},
            ) from err
        except httpx.HTTPError as err:
            logger.warning("Places request to %s failed: %s", path, err)
            raise CafeSearchError(ErrorKind.PLACES_NETWORK_ERROR, cause=err) from err

        try:
            payload = resp.json()
        except ValueError as err:
            raise CafeSearchError(
                ErrorKind.PLACES_INVALID_RESPONSE,
                "Places API returned invalid JSON",
            ) from err

        if not isinstance(payload, dict):
            raise CafeSearchError(
                ErrorKind.PLACES_INVALID_RESPONSE,
                "Places API response shape is invalid",
            )
        return payload

    def build_nearby_params(self, location: Coordinate, radius: int, search_filter: Optional[SearchFilter] = None) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "location": location.as_param(),
            "radius": radius,
            "type": PLACE_TYPE,
            "language": self.language,
        }
        if self.keyword:
            params["keyword"] = self.keyword
        if search_filter is not None and search_filter.open_now:
            params["opennow"] = "true"
        return params

    async def search_nearby(
        self,
        location: Coordinate,
        radius: int,
        search_filter: Optional[SearchFilter] = None,
    ) -> List[Cafe]:
        params = self.build_nearby_params(location, radius, search_filter)
        data = await self._get("nearbysearch/json", params)

        try:
            response = NearbySearchResponse.model_validate(data)
        except ValidationError as err:
            raise CafeSearchError(
                ErrorKind.PLACES_INVALID_RESPONSE,
                "Places nearby search response failed validation",
                details={"errors": err.error_count()},
            ) from err

        status_value = response.status.upper()
        if status_value == "ZERO_RESULTS":
            return []
        if status_value != "OK":
            raise places_status_error(response.status, response.error_message)

        cafes = [_map_place_to_cafe(p) for p in response.results]
        logger.debug(
            "PlacesClient.search_nearby: location=%s radius=%d got %d results",
            params["location"],
            radius,
            len(cafes),
        )
        return cafes

    async def get_place_details(self, place_id: str) -> Cafe:
        """
        Fetch the richer record for one place: formatted address, phone and website
        on top of the nearby-search fields.
        """
        normalized = (place_id or "").strip()
        if not normalized:
            raise CafeSearchError(
                ErrorKind.PLACES_INVALID_RESPONSE,
                "place_id is required",
                details={"field": "place_id"},
            )

        params = {
            "place_id": normalized,
            "fields": DETAILS_FIELDS,
            "language": self.language,
        }
        data = await self._get("details/json", params)

        try:
            response = PlaceDetailsResponse.model_validate(data)
        except ValidationError as err:
            raise CafeSearchError(
                ErrorKind.PLACES_INVALID_RESPONSE,
                "Places details response failed validation",
                details={"errors": err.error_count()},
            ) from err

        if response.status.upper() != "OK":
            raise places_status_error(response.status, response.error_message)
        if response.result is None:
            raise CafeSearchError(
                ErrorKind.PLACES_INVALID_RESPONSE,
                "Places details response missing result payload",
            )
        return _map_place_to_cafe(response.result)

    async def aclose(self) -> None:
        await self._client.aclose()
