# ABOUTME: Builds the natural-language instructions sent to the generative service.
# ABOUTME: Covers the coordinate/location forecast prompt and the trail discovery prompt.

from datetime import date

from bike_weather.models import Coordinates, ForecastInput

FORECAST_DAYS = 5
FIRST_HOUR = "07:00"
LAST_HOUR = "19:00"

_FORECAST_INSTRUCTIONS = (
    f"For each of the next {FORECAST_DAYS} days, provide an hourly forecast for daytime hours only, "
    f"specifically from {FIRST_HOUR} to {LAST_HOUR} inclusive.\n"
    "The data for each hour should include:\n"
    "1. Wind speed in miles per hour.\n"
    "2. Wind direction as a cardinal direction (e.g. N, NE, S, SW).\n"
    "3. UV index as an integer.\n"
    "4. Precipitation probability as a percentage.\n"
    "5. Temperature in Fahrenheit.\n"
    "Also provide a 'bikeAdvisory' for each day: a brief, friendly summary for cyclists based on the "
    "overall conditions (e.g. \"Great day for a ride, winds will be low.\", \"Morning ride is best to "
    "avoid afternoon rain.\", or \"High winds and rain likely, consider indoor training.\").\n"
    "Return the city and country name for the location."
)


def build_forecast_prompt(forecast_input: ForecastInput, today: date) -> str:
    """Build the forecast instruction for either a coordinate pair or a location string."""
    if isinstance(forecast_input, Coordinates):
        subject = f"the latitude {forecast_input.lat} and longitude {forecast_input.lon}"
    else:
        subject = f'the location "{forecast_input.location}"'
    return (
        f"Based on {subject}, provide a {FORECAST_DAYS}-day weather forecast suitable for biking, "
        f"starting from today which is {today.isoformat()}.\n\n{_FORECAST_INSTRUCTIONS}"
    )


def build_trail_prompt(location: str) -> str:
    """Build the trail discovery instruction for a location."""
    return (
        f'Find popular bike trails near "{location}". For each trail, provide a name and a brief, '
        "one-sentence description highlighting what it's known for (e.g. scenic views, difficulty, "
        "family-friendly). Return the result as a valid JSON array of objects, where each object has "
        'a "name" and a "description" key.'
    )
