from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from fastapi import HTTPException, status


class ErrorKind(str, Enum):
    LOCATION_UNAVAILABLE = "LOCATION_UNAVAILABLE"
    LOCATION_PERMISSION_DENIED = "LOCATION_PERMISSION_DENIED"
    LOCATION_PERMISSION_RESTRICTED = "LOCATION_PERMISSION_RESTRICTED"
    PLACES_INVALID_API_KEY = "PLACES_INVALID_API_KEY"
    PLACES_NETWORK_ERROR = "PLACES_NETWORK_ERROR"
    PLACES_INVALID_RESPONSE = "PLACES_INVALID_RESPONSE"
    PLACES_QUOTA_EXCEEDED = "PLACES_QUOTA_EXCEEDED"
    PLACES_REQUEST_DENIED = "PLACES_REQUEST_DENIED"


DEFAULT_MESSAGES = {
    ErrorKind.LOCATION_UNAVAILABLE: "Current location is unavailable",
    ErrorKind.LOCATION_PERMISSION_DENIED: "Location permission was denied",
    ErrorKind.LOCATION_PERMISSION_RESTRICTED: "Location access is restricted",
    ErrorKind.PLACES_INVALID_API_KEY: "Google Places API key not configured",
    ErrorKind.PLACES_NETWORK_ERROR: "Places request failed",
    ErrorKind.PLACES_INVALID_RESPONSE: "Places API returned an invalid response",
    ErrorKind.PLACES_QUOTA_EXCEEDED: "Places API quota exceeded",
    ErrorKind.PLACES_REQUEST_DENIED: "Places API denied the request",
}

HTTP_STATUS_BY_KIND = {
    ErrorKind.LOCATION_UNAVAILABLE: status.HTTP_400_BAD_REQUEST,
    ErrorKind.LOCATION_PERMISSION_DENIED: status.HTTP_400_BAD_REQUEST,
    ErrorKind.LOCATION_PERMISSION_RESTRICTED: status.HTTP_400_BAD_REQUEST,
    ErrorKind.PLACES_INVALID_API_KEY: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.PLACES_NETWORK_ERROR: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.PLACES_INVALID_RESPONSE: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.PLACES_QUOTA_EXCEEDED: status.HTTP_429_TOO_MANY_REQUESTS,
    ErrorKind.PLACES_REQUEST_DENIED: status.HTTP_502_BAD_GATEWAY,
}


class CafeSearchError(Exception):
    """Every failure the search pipeline can report, tagged by ``kind``.

    ``cause`` keeps the wrapped exception for network errors so callers can
    inspect it without unpacking ``__cause__``.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: Optional[str] = None,
        *,
        cause: Optional[BaseException] = None,
        details: Any | None = None,
    ) -> None:
        self.kind = kind
        self.message = message or DEFAULT_MESSAGES[kind]
        self.cause = cause
        self.details = details
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"CafeSearchError({self.kind.value}, {self.message!r})"

    def to_dict(self) -> dict[str, Any]:
        detail: dict[str, Any] = {
            "code": self.kind.value,
            "message": self.message,
            "details": self.details,
        }
        if self.cause is not None:
            detail["cause"] = str(self.cause)
        return detail


def location_unavailable() -> CafeSearchError:
    return CafeSearchError(ErrorKind.LOCATION_UNAVAILABLE)


def places_status_error(status_value: str, error_message: str | None = None) -> CafeSearchError:
    """Map a non-OK Places ``status`` field to its error kind."""
    normalized = (status_value or "").upper()
    details: dict[str, Any] = {"providerStatus": normalized}
    if error_message:
        details["providerMessage"] = error_message

    if normalized == "OVER_QUERY_LIMIT":
        return CafeSearchError(ErrorKind.PLACES_QUOTA_EXCEEDED, details=details)
    if normalized == "REQUEST_DENIED":
        return CafeSearchError(ErrorKind.PLACES_REQUEST_DENIED, details=details)
    return CafeSearchError(
        ErrorKind.PLACES_INVALID_RESPONSE,
        f"Places API returned status {normalized or '<empty>'}",
        details=details,
    )


def to_http_exception(error: CafeSearchError) -> HTTPException:
    return HTTPException(
        status_code=HTTP_STATUS_BY_KIND[error.kind],
        detail=error.to_dict(),
    )
