# ABOUTME: Service layer for Gemini calls and response parsing.
# ABOUTME: Handles the schema-constrained forecast request and the maps-grounded trail search.

import logging
import re
from datetime import date

import httpx
from google import genai
from google.genai import errors, types
from pydantic import TypeAdapter, ValidationError

from bike_weather.config import Settings
from bike_weather.errors import (
    ConfigurationError,
    EmptyForecastError,
    EmptyTrailResponseError,
    ForecastFetchError,
    ForecastParseError,
    NoTrailsFoundError,
    TrailFetchError,
    TrailParseError,
)
from bike_weather.models import CARDINAL_DIRECTIONS, BikeTrail, Coordinates, ForecastInput, MapLink, WeatherData
from bike_weather.prompts import build_forecast_prompt, build_trail_prompt

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"

_HOUR_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "time": types.Schema(type=types.Type.STRING, description="Time in HH:00 format (24-hour)."),
        "windSpeed": types.Schema(type=types.Type.NUMBER, description="Wind speed in miles per hour."),
        "windDirection": types.Schema(
            type=types.Type.STRING,
            enum=list(CARDINAL_DIRECTIONS),
            description="Wind direction as a cardinal direction (e.g. N, NE, S, SW).",
        ),
        "uvIndex": types.Schema(type=types.Type.INTEGER, description="UV index, integer from 0 to 11+."),
        "rainProbability": types.Schema(
            type=types.Type.NUMBER, description="Probability of rain as a percentage from 0 to 100."
        ),
        "temperature": types.Schema(type=types.Type.NUMBER, description="Temperature in Fahrenheit."),
    },
    required=["time", "windSpeed", "windDirection", "uvIndex", "rainProbability", "temperature"],
)

_DAY_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "date": types.Schema(type=types.Type.STRING, description="Date in YYYY-MM-DD format."),
        "bikeAdvisory": types.Schema(
            type=types.Type.STRING,
            description=(
                "A brief, friendly advisory for cyclists based on the day's weather, e.g. "
                "'Perfect day for a ride!' or 'High winds expected, be cautious.'"
            ),
        ),
        "hourlyData": types.Schema(type=types.Type.ARRAY, items=_HOUR_SCHEMA),
    },
    required=["date", "hourlyData", "bikeAdvisory"],
)

FORECAST_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "location": types.Schema(
            type=types.Type.OBJECT,
            properties={
                "city": types.Schema(type=types.Type.STRING),
                "country": types.Schema(type=types.Type.STRING),
            },
            required=["city", "country"],
        ),
        "dailyForecasts": types.Schema(type=types.Type.ARRAY, items=_DAY_SCHEMA),
    },
    required=["location", "dailyForecasts"],
)

# Greedy: spans from the first '[' to the last ']' of the reply.
_JSON_ARRAY = re.compile(r"\[.*\]", re.DOTALL)

_TRAILS = TypeAdapter(list[BikeTrail])


def create_client(settings: Settings) -> genai.Client:
    """Create the Gemini client, failing early when no API key is configured."""
    if not settings.api_key:
        raise ConfigurationError()
    return genai.Client(api_key=settings.api_key)


async def fetch_weather_forecast(
    client: genai.Client,
    forecast_input: ForecastInput,
    *,
    model: str = DEFAULT_MODEL,
    today: date | None = None,
) -> WeatherData:
    """Fetch a 5-day biking forecast constrained to FORECAST_SCHEMA."""
    prompt = build_forecast_prompt(forecast_input, today or date.today())
    try:
        response = await client.aio.models.generate_content(
            model=model,
            contents=prompt,
            config=types.GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=FORECAST_SCHEMA,
            ),
        )
    except (errors.APIError, httpx.HTTPError) as e:
        logger.exception("Forecast request failed for %r", forecast_input)
        raise ForecastFetchError() from e
    except Exception as e:
        logger.exception("Unexpected forecast failure for %r", forecast_input)
        raise ForecastFetchError() from e

    text = (response.text or "").strip()
    if not text:
        logger.warning("Empty forecast response for %r", forecast_input)
        raise EmptyForecastError()
    return parse_weather_data(text)


def parse_weather_data(text: str) -> WeatherData:
    """Parse schema-conformant forecast JSON text into WeatherData."""
    try:
        return WeatherData.model_validate_json(text)
    except ValidationError as e:
        logger.warning("Could not parse forecast payload: %s", e)
        raise ForecastParseError() from e


async def fetch_bike_trails(
    client: genai.Client,
    location: str,
    user_coords: Coordinates | None = None,
    *,
    model: str = DEFAULT_MODEL,
) -> list[BikeTrail]:
    """Search for bike trails near a location, attaching map links from grounding metadata.

    When ``user_coords`` is given the maps tool is biased towards that point.
    """
    tool_config = None
    if user_coords is not None:
        tool_config = types.ToolConfig(
            retrieval_config=types.RetrievalConfig(
                lat_lng=types.LatLng(latitude=user_coords.lat, longitude=user_coords.lon),
            )
        )
    try:
        response = await client.aio.models.generate_content(
            model=model,
            contents=build_trail_prompt(location),
            config=types.GenerateContentConfig(
                tools=[types.Tool(google_maps=types.GoogleMaps())],
                tool_config=tool_config,
            ),
        )
    except (errors.APIError, httpx.HTTPError) as e:
        logger.exception("Trail search failed for %r", location)
        raise TrailFetchError() from e
    except Exception as e:
        logger.exception("Unexpected trail search failure for %r", location)
        raise TrailFetchError() from e

    text = (response.text or "").strip()
    if not text:
        raise EmptyTrailResponseError()

    trails = parse_trails(text)
    if not trails:
        raise NoTrailsFoundError()
    return attach_map_links(trails, extract_map_links(response))


def extract_json_array(text: str) -> str:
    """Return the first JSON array literal in free text, prose around it ignored."""
    match = _JSON_ARRAY.search(text)
    if match is None:
        raise TrailParseError()
    return match.group(0)


def parse_trails(text: str) -> list[BikeTrail]:
    """Parse the trail objects out of an unstructured model reply."""
    try:
        return _TRAILS.validate_json(extract_json_array(text))
    except ValidationError as e:
        logger.warning("Could not parse trail payload: %s", e)
        raise TrailParseError() from e


def extract_map_links(response: types.GenerateContentResponse) -> list[MapLink]:
    """Collect usable maps references from the first candidate's grounding metadata."""
    if not response.candidates:
        return []
    metadata = response.candidates[0].grounding_metadata
    if metadata is None or not metadata.grounding_chunks:
        return []
    return [
        MapLink(uri=chunk.maps.uri, title=chunk.maps.title)
        for chunk in metadata.grounding_chunks
        if chunk.maps is not None and chunk.maps.uri and chunk.maps.title
    ]


def attach_map_links(trails: list[BikeTrail], links: list[MapLink]) -> list[BikeTrail]:
    """Give each trail the uri of the first link whose title and name contain one another."""
    result = []
    for trail in trails:
        name = trail.name.lower()
        match = next(
            (link for link in links if link.title.lower() in name or name in link.title.lower()),
            None,
        )
        result.append(trail.model_copy(update={"maps_uri": match.uri if match else None}))
    return result
