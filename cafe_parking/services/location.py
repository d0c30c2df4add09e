from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Protocol

from cafe_parking.core.errors import CafeSearchError, ErrorKind
from cafe_parking.models.schemas import Coordinate

logger = logging.getLogger(__name__)


class AuthorizationStatus(str, Enum):
    NOT_DETERMINED = "not_determined"
    AUTHORIZED = "authorized"
    DENIED = "denied"
    RESTRICTED = "restricted"


@dataclass(frozen=True)
class LocationUpdate:
    location: Optional[Coordinate] = None
    error: Optional[CafeSearchError] = None


LocationCallback = Callable[[LocationUpdate], None]


class LocationProvider(Protocol):
    current_location: Optional[Coordinate]
    authorization_status: AuthorizationStatus

    def request_permission(self) -> None:
        ...

    async def get_current_location(self) -> Coordinate:
        ...

    def subscribe(self, callback: LocationCallback) -> Callable[[], None]:
        ...

    def start_updates(self) -> None:
        ...

    def stop_updates(self) -> None:
        ...


class StaticLocationProvider:
    """
    In-memory location source.

    Used by the HTTP layer (the request carries the coordinate) and by tests,
    which drive permission changes and location pushes by hand.
    """

    def __init__(
        self,
        location: Optional[Coordinate] = None,
        authorization_status: AuthorizationStatus = AuthorizationStatus.AUTHORIZED,
    ) -> None:
        self.current_location = location
        self.authorization_status = authorization_status
        self.updating = False
        self._subscribers: List[LocationCallback] = []

    def _publish(self, update: LocationUpdate) -> None:
        for callback in list(self._subscribers):
            callback(update)

    def _permission_error(self) -> Optional[CafeSearchError]:
        if self.authorization_status is AuthorizationStatus.DENIED:
            return CafeSearchError(ErrorKind.LOCATION_PERMISSION_DENIED)
        if self.authorization_status is AuthorizationStatus.RESTRICTED:
            return CafeSearchError(ErrorKind.LOCATION_PERMISSION_RESTRICTED)
        return None

    def subscribe(self, callback: LocationCallback) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def request_permission(self) -> None:
        # No user prompt here: an undetermined status is granted immediately
        if self.authorization_status is AuthorizationStatus.NOT_DETERMINED:
            self.authorization_status = AuthorizationStatus.AUTHORIZED
        self.start_updates()

    def start_updates(self) -> None:
        error = self._permission_error()
        if error is not None:
            logger.warning("Location updates refused: %s", error.kind.value)
            self._publish(LocationUpdate(error=error))
            raise error
        if self.authorization_status is not AuthorizationStatus.AUTHORIZED:
            return
        self.updating = True
        if self.current_location is not None:
            self._publish(LocationUpdate(location=self.current_location))

    def stop_updates(self) -> None:
        self.updating = False

    def set_location(self, location: Optional[Coordinate]) -> None:
        self.current_location = location
        if location is not None and self.updating:
            self._publish(LocationUpdate(location=location))

    def fail(self, error: CafeSearchError) -> None:
        self._publish(LocationUpdate(error=error))

    async def get_current_location(self) -> Coordinate:
        error = self._permission_error()
        if error is not None:
            raise error
        if self.current_location is None:
            raise CafeSearchError(ErrorKind.LOCATION_UNAVAILABLE)
        return self.current_location
