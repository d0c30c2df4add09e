from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Optional, Protocol

from cafe_parking.core.errors import CafeSearchError, ErrorKind, location_unavailable
from cafe_parking.models.schemas import Cafe, Coordinate, SearchFilter
from cafe_parking.services.location import LocationProvider, LocationUpdate
from cafe_parking.utils.filters import filter_and_sort
from cafe_parking.utils.geo import format_distance, haversine_distance
from cafe_parking.utils.parking import ParkingTags

logger = logging.getLogger(__name__)

DISTANCE_UNKNOWN = "Distance unknown"


class SearchState(str, Enum):
    IDLE = "idle"
    SEARCHING = "searching"
    SUCCESS = "success"
    FAILED = "failed"


class EventKind(str, Enum):
    RESULTS = "results"
    LOADING = "loading"
    ERROR = "error"
    STATE = "state"


@dataclass(frozen=True)
class SearchEvent:
    kind: EventKind
    value: Any


SearchCallback = Callable[[SearchEvent], None]


class PlacesSource(Protocol):
    async def search_nearby(
        self,
        location: Coordinate,
        radius: int,
        search_filter: Optional[SearchFilter] = None,
    ) -> List[Cafe]:
        ...

    async def get_place_details(self, place_id: str) -> Cafe:
        ...


class CafeSearchPipeline:
    """
    Drives one café search screen: location in, ranked cafés out.

    State moves idle -> searching -> success | failed. Consumers follow it
    through ``subscribe`` instead of polling attributes.

    Every search takes a new generation number and only the newest one may
    touch state, so a slow response to an older search is dropped. A failed
    search keeps the last good ``cafes`` and reports the failure through
    ``error``; the failing call itself returns an empty list.
    """

    def __init__(
        self,
        location_provider: LocationProvider,
        places_client: PlacesSource,
        search_filter: Optional[SearchFilter] = None,
        parking_tags: Optional[ParkingTags] = None,
    ) -> None:
        self.location_provider = location_provider
        self.places_client = places_client
        self.search_filter = search_filter or SearchFilter()
        self.parking_tags = parking_tags

        self.cafes: List[Cafe] = []
        self.selected_cafe: Optional[Cafe] = None
        self.error: Optional[CafeSearchError] = None
        self.state = SearchState.IDLE

        self._generation = 0
        self._subscribers: List[SearchCallback] = []
        self._unsubscribe_location = location_provider.subscribe(self._on_location_update)

    @property
    def current_location(self) -> Optional[Coordinate]:
        return self.location_provider.current_location

    @property
    def is_loading(self) -> bool:
        return self.state is SearchState.SEARCHING

    def subscribe(self, callback: SearchCallback) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def close(self) -> None:
        self._unsubscribe_location()
        self._subscribers.clear()

    def _emit(self, kind: EventKind, value: Any) -> None:
        event = SearchEvent(kind=kind, value=value)
        for callback in list(self._subscribers):
            callback(event)

    def _set_state(self, state: SearchState) -> None:
        self.state = state
        self._emit(EventKind.STATE, state)

    def _set_error(self, error: Optional[CafeSearchError]) -> None:
        self.error = error
        self._emit(EventKind.ERROR, error)

    def _fail(self, error: CafeSearchError, was_loading: bool = True) -> None:
        logger.warning("Cafe search failed: %s (%s)", error.kind.value, error.message)
        self._set_error(error)
        self._set_state(SearchState.FAILED)
        if was_loading:
            self._emit(EventKind.LOADING, False)

    def _on_location_update(self, update: LocationUpdate) -> None:
        if update.error is not None:
            self._set_error(update.error)
        elif update.location is not None:
            logger.debug("Location update %s", update.location.as_param())

    def request_location_permission(self) -> None:
        try:
            self.location_provider.request_permission()
        except CafeSearchError as err:
            # Providers publish permission errors before raising them
            if self.error is not err:
                self._set_error(err)

    async def search_cafes(self) -> List[Cafe]:
        location = self.current_location
        if location is None:
            self._generation += 1
            self._fail(location_unavailable(), was_loading=False)
            return []
        return await self._search(location)

    async def search_cafes_at(self, location: Coordinate) -> List[Cafe]:
        return await self._search(location)

    async def _search(self, location: Coordinate) -> List[Cafe]:
        self._generation += 1
        generation = self._generation
        search_filter = self.search_filter

        if self.error is not None:
            self._set_error(None)
        self._set_state(SearchState.SEARCHING)
        self._emit(EventKind.LOADING, True)
        logger.info(
            "Searching cafes near %s radius=%dm sort=%s (generation %d)",
            location.as_param(),
            search_filter.radius,
            search_filter.sort_by.value,
            generation,
        )

        try:
            candidates = await self.places_client.search_nearby(location, search_filter.radius, search_filter)
        except CafeSearchError as err:
            if generation != self._generation:
                logger.debug("Ignoring failure of superseded search %d: %s", generation, err.kind.value)
                return []
            self._fail(err)
            return []
        except Exception as err:
            if generation != self._generation:
                logger.debug("Ignoring failure of superseded search %d: %r", generation, err)
                return []
            logger.exception("Unexpected error from places client")
            self._fail(
                CafeSearchError(
                    ErrorKind.PLACES_NETWORK_ERROR,
                    f"Places search failed: {err}",
                    cause=err,
                )
            )
            return []

        results = filter_and_sort(candidates, search_filter, self.current_location, self.parking_tags)
        if generation != self._generation:
            logger.debug(
                "Dropping results of superseded search %d (latest is %d)",
                generation,
                self._generation,
            )
            return results

        self.cafes = results
        logger.info("Search %d kept %d of %d cafes", generation, len(results), len(candidates))
        self._set_state(SearchState.SUCCESS)
        self._emit(EventKind.LOADING, False)
        self._emit(EventKind.RESULTS, list(results))
        return results

    async def update_filter(self, search_filter: SearchFilter) -> List[Cafe]:
        """Replace the filter; re-search only when there are results on screen."""
        self.search_filter = search_filter
        if self.cafes:
            return await self.search_cafes()
        return []

    def select_cafe(self, cafe: Optional[Cafe]) -> None:
        self.selected_cafe = cafe

    async def get_cafe_details(self, cafe: Cafe) -> Cafe:
        details = await self.places_client.get_place_details(cafe.place_id)
        details = details.model_copy(update={"id": cafe.id, "is_favorite": cafe.is_favorite})
        if details.location is None:
            details = details.model_copy(update={"location": cafe.location})

        self.cafes = [details if c.id == cafe.id else c for c in self.cafes]
        if self.selected_cafe is not None and self.selected_cafe.id == cafe.id:
            self.selected_cafe = details
        return details

    def distance_to(self, cafe: Cafe) -> Optional[float]:
        origin = self.current_location
        if origin is None or cafe.location is None:
            return None
        return haversine_distance(origin, cafe.location)

    def formatted_distance_to(self, cafe: Cafe) -> str:
        distance = self.distance_to(cafe)
        if distance is None:
            return DISTANCE_UNKNOWN
        return format_distance(distance)
