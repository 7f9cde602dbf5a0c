# ABOUTME: Pydantic BaseModels for forecast requests, AI forecast payloads and bike trails.
# ABOUTME: Field aliases follow the camelCase names the generative service emits.

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

CARDINAL_DIRECTIONS = (
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
)


class _Payload(BaseModel):
    """Immutable value object read from and dumped to camelCase JSON."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class Coordinates(_Payload):
    """A point in decimal degrees."""

    lat: float
    lon: float


class LocationQuery(_Payload):
    """Free-text location as typed by the user."""

    location: str


ForecastInput = Coordinates | LocationQuery


class Location(_Payload):
    city: str
    country: str


class HourlyData(_Payload):
    """One daytime hour of the forecast."""

    time: str
    wind_speed: float
    wind_direction: str
    uv_index: int
    rain_probability: float
    temperature: float


class DailyForecast(_Payload):
    """One day of hourly samples with a cyclist advisory."""

    date: str
    bike_advisory: str
    hourly_data: list[HourlyData] = []


class WeatherData(_Payload):
    """Parsed forecast for a resolved city."""

    location: Location
    daily_forecasts: list[DailyForecast] = []


class BikeTrail(_Payload):
    name: str
    description: str
    maps_uri: str | None = None


class MapLink(_Payload):
    """A maps reference taken from grounding metadata."""

    uri: str
    title: str
