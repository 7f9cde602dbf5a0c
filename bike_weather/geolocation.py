# ABOUTME: One-shot position capability and the mapping of geolocation failures to messages.
# ABOUTME: The browser reports coordinates or a W3C error code with the submitted form.

from collections.abc import Mapping
from typing import Literal, Protocol

from bike_weather.errors import GeolocationError
from bike_weather.models import Coordinates

UNKNOWN = 0
PERMISSION_DENIED = 1
POSITION_UNAVAILABLE = 2
TIMEOUT = 3
UNSUPPORTED = -1

Purpose = Literal["weather", "trails"]

_MESSAGES = {
    PERMISSION_DENIED: "Location access was denied. Please enable it in your browser settings.",
    POSITION_UNAVAILABLE: "Your location is currently unavailable. Please try again or search by name.",
    TIMEOUT: "Timed out while trying to get your location. Please try again.",
    UNSUPPORTED: "Geolocation is not supported by your browser. Please use the search bar instead.",
    UNKNOWN: "An unknown error occurred while trying to get your location.",
}

_TRAIL_MESSAGES = {
    PERMISSION_DENIED: (
        "Location access was denied. Please enable it in your browser settings to search for trails near you."
    ),
    UNSUPPORTED: "Geolocation is not supported by your browser.",
    UNKNOWN: "Could not get your location. Please allow location access.",
}


class PositionResolver(Protocol):
    async def current_position(self) -> Coordinates: ...


def describe_geolocation_error(code: int, purpose: Purpose = "weather") -> str:
    """Human-readable message for a geolocation error code."""
    if purpose == "trails" and code in _TRAIL_MESSAGES:
        return _TRAIL_MESSAGES[code]
    return _MESSAGES.get(code, _MESSAGES[UNKNOWN])


class SubmittedPosition:
    """Position the browser resolved before submitting a form.

    Exactly one of a coordinate pair or an error code is expected; anything else
    resolves to an unknown-error failure.
    """

    def __init__(self, lat: float | None = None, lon: float | None = None, error_code: int | None = None):
        self.lat = lat
        self.lon = lon
        self.error_code = error_code

    @classmethod
    def from_form(cls, form: Mapping[str, str]) -> "SubmittedPosition":
        raw_error = (form.get("geo_error") or "").strip()
        if raw_error:
            if raw_error == "unsupported":
                return cls(error_code=UNSUPPORTED)
            try:
                return cls(error_code=int(raw_error))
            except ValueError:
                return cls(error_code=UNKNOWN)
        try:
            return cls(lat=float(form["lat"]), lon=float(form["lon"]))
        except (KeyError, TypeError, ValueError):
            return cls(error_code=UNKNOWN)

    async def current_position(self) -> Coordinates:
        if self.error_code is not None or self.lat is None or self.lon is None:
            code = UNKNOWN if self.error_code is None else self.error_code
            raise GeolocationError(code, describe_geolocation_error(code))
        return Coordinates(lat=self.lat, lon=self.lon)
