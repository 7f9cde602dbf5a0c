# ABOUTME: UI state machines for the weather and trail flows plus the per-user session.
# ABOUTME: Each request carries a token so a slower, older response never overwrites a newer one.

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, replace
from typing import Generic, Literal, TypeVar

from bike_weather.errors import (
    ForecastError,
    GeolocationError,
    InvalidImageError,
    TrailSearchError,
)
from bike_weather.geolocation import UNSUPPORTED, PositionResolver, describe_geolocation_error
from bike_weather.images import ImageFile, read_as_data_uri
from bike_weather.models import BikeTrail, Coordinates, ForecastInput, LocationQuery, WeatherData
from bike_weather.preferences import PreferenceStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

ForecastFetcher = Callable[[ForecastInput], Awaitable[WeatherData]]
TrailFetcher = Callable[[str, Coordinates | None], Awaitable[list[BikeTrail]]]

CURRENT_LOCATION_QUERY = "your current location"
NEAR_ME_PHRASES = ("near me", "current location")

EMPTY_WEATHER_QUERY = "Please enter a location to search."
EMPTY_TRAIL_QUERY = "Please enter a location."
SAVED_LOCATION_CLEARED = 'Could not find weather for your saved location "{location}". It has been cleared.'
UNKNOWN_WEATHER_ERROR = "An unknown error occurred."
UNKNOWN_TRAIL_ERROR = "An unknown error occurred finding trails."


@dataclass(frozen=True)
class FlowState(Generic[T]):
    """Loading/error/result triple of one flow, plus the query the results belong to."""

    loading: bool = False
    error: str | None = None
    result: T | None = None
    query: str | None = None


@dataclass(frozen=True)
class PendingForecast:
    token: int
    forecast_input: ForecastInput | None = None
    position: PositionResolver | None = None
    save_as: str | None = None
    replayed: str | None = None


@dataclass(frozen=True)
class PendingTrails:
    token: int
    location: str
    position: PositionResolver | None = None
    near_me: bool = False


def wants_current_position(location: str) -> bool:
    lowered = location.lower()
    return any(phrase in lowered for phrase in NEAR_ME_PHRASES)


class WeatherFlow:
    """Forecast search by name, by current position, or by replaying the saved location.

    ``begin_*`` methods update state synchronously and return a pending request
    (``None`` when the input is rejected); ``resolve`` performs the call.
    """

    def __init__(self, fetch_forecast: ForecastFetcher, preferences: PreferenceStore):
        self.fetch_forecast = fetch_forecast
        self.preferences = preferences
        self.state: FlowState[WeatherData] = FlowState()
        self._token = 0

    def begin_search(self, text: str) -> PendingForecast | None:
        if not text.strip():
            self.state = replace(self.state, error=EMPTY_WEATHER_QUERY)
            return None
        return self._begin(text, forecast_input=LocationQuery(location=text), save_as=text)

    def begin_locate(self, position: PositionResolver) -> PendingForecast:
        return self._begin(CURRENT_LOCATION_QUERY, position=position)

    def should_replay(self) -> bool:
        state = self.state
        if state.loading or state.result is not None or state.error is not None:
            return False
        return bool(self.preferences.saved_location)

    def begin_replay(self) -> PendingForecast | None:
        saved = self.preferences.saved_location
        if not saved:
            return None
        return self._begin(saved, forecast_input=LocationQuery(location=saved), save_as=saved, replayed=saved)

    async def resolve(self, pending: PendingForecast) -> None:
        try:
            forecast_input = pending.forecast_input
            if forecast_input is None:
                forecast_input = await pending.position.current_position()
            data = await self.fetch_forecast(forecast_input)
        except GeolocationError as e:
            self._fail(pending, describe_geolocation_error(e.code))
        except ForecastError as e:
            self._fail(pending, e.message)
        except Exception:
            logger.exception("Unexpected failure while fetching the forecast")
            self._fail(pending, UNKNOWN_WEATHER_ERROR)
        else:
            if not self._is_latest(pending):
                logger.info("Discarding stale forecast (request %d, latest %d)", pending.token, self._token)
                return
            self.preferences.save_location(pending.save_as or f"{data.location.city}, {data.location.country}")
            self.state = replace(self.state, loading=False, result=data)

    def dismiss_error(self) -> None:
        self.state = replace(self.state, error=None)

    def clear_saved_location(self) -> None:
        self.preferences.clear_location()
        self._token += 1
        self.state = FlowState()

    def _begin(self, query: str, **request) -> PendingForecast:
        self._token += 1
        self.state = FlowState(loading=True, query=query)
        return PendingForecast(token=self._token, **request)

    def _is_latest(self, pending: PendingForecast) -> bool:
        return pending.token == self._token

    def _fail(self, pending: PendingForecast, message: str) -> None:
        if not self._is_latest(pending):
            logger.info("Discarding stale forecast error (request %d): %s", pending.token, message)
            return
        if pending.replayed is not None:
            self.preferences.clear_location()
            message = SAVED_LOCATION_CLEARED.format(location=pending.replayed)
        self.state = replace(self.state, loading=False, error=message)


class TrailFlow:
    """Trail search by name, or near the user when the query asks for it."""

    def __init__(self, fetch_trails: TrailFetcher):
        self.fetch_trails = fetch_trails
        self.state: FlowState[list[BikeTrail]] = FlowState()
        self._token = 0

    def begin_search(self, location: str, position: PositionResolver | None = None) -> PendingTrails | None:
        if not location.strip():
            self.state = replace(self.state, error=EMPTY_TRAIL_QUERY)
            return None
        self._token += 1
        self.state = FlowState(loading=True, query=location)
        return PendingTrails(
            token=self._token,
            location=location,
            position=position,
            near_me=wants_current_position(location),
        )

    async def resolve(self, pending: PendingTrails) -> None:
        try:
            coords = None
            if pending.near_me:
                if pending.position is None:
                    raise GeolocationError(UNSUPPORTED)
                coords = await pending.position.current_position()
            trails = await self.fetch_trails(pending.location, coords)
        except GeolocationError as e:
            self._fail(pending, describe_geolocation_error(e.code, "trails"))
        except TrailSearchError as e:
            self._fail(pending, e.message)
        except Exception:
            logger.exception("Unexpected failure while searching for trails")
            self._fail(pending, UNKNOWN_TRAIL_ERROR)
        else:
            if pending.token != self._token:
                logger.info("Discarding stale trail results (request %d, latest %d)", pending.token, self._token)
                return
            self.state = replace(self.state, loading=False, result=trails)

    def dismiss_error(self) -> None:
        self.state = replace(self.state, error=None)

    def reset(self) -> None:
        self._token += 1
        self.state = FlowState()

    def _fail(self, pending: PendingTrails, message: str) -> None:
        if pending.token != self._token:
            return
        self.state = replace(self.state, loading=False, error=message)


View = Literal["weather", "trails"]


class AppSession:
    """Everything the single local user sees: both flows, the active view and preferences."""

    def __init__(self, fetch_forecast: ForecastFetcher, fetch_trails: TrailFetcher, preferences: PreferenceStore):
        self.preferences = preferences
        self.weather = WeatherFlow(fetch_forecast, preferences)
        self.trails = TrailFlow(fetch_trails)
        self.view: View = "weather"
        self.trail_input = ""
        self.notice: str | None = None

    def show_trails(self) -> None:
        self.view = "trails"
        if self.preferences.saved_location and not self.trail_input:
            self.trail_input = self.preferences.saved_location

    def show_weather(self) -> None:
        self.view = "weather"
        self.trail_input = ""
        self.trails.reset()

    def search_trails(self, location: str, position: PositionResolver | None = None) -> PendingTrails | None:
        self.trail_input = location
        return self.trails.begin_search(location, position)

    async def change_background(self, upload: ImageFile) -> None:
        try:
            data_uri = await read_as_data_uri(upload)
        except InvalidImageError as e:
            self.notice = e.message
            return
        self.notice = self.preferences.apply_background(data_uri)

    def reset_background(self) -> None:
        self.preferences.reset_background()
        self.notice = None

    def dismiss_notice(self) -> None:
        self.notice = None
