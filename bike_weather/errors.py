# ABOUTME: Exception hierarchy for forecast, trail, geolocation, storage and upload failures.
# ABOUTME: Every exception carries the user-facing message shown inline in the UI.


class BikeWeatherError(Exception):
    """Base class; ``message`` is safe to show to the user."""

    default_message = "An unknown error occurred."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ConfigurationError(BikeWeatherError):
    default_message = "GEMINI_API_KEY environment variable not set."


class ForecastError(BikeWeatherError):
    default_message = "Failed to fetch forecast. Please check the location and try again."


class EmptyForecastError(ForecastError):
    default_message = "The model returned an empty response. The location may not be valid."


class ForecastParseError(ForecastError):
    default_message = "Failed to parse weather data. The location might not be recognized."


class ForecastFetchError(ForecastError):
    pass


class TrailSearchError(BikeWeatherError):
    default_message = "Failed to fetch bike trails. Please check the location and try again."


class EmptyTrailResponseError(TrailSearchError):
    default_message = "The model returned an empty response. Could not find trails for this location."


class TrailParseError(TrailSearchError):
    default_message = "Failed to parse trail data from the model's response."


class NoTrailsFoundError(TrailSearchError):
    default_message = "No bike trails found for the specified location."


class TrailFetchError(TrailSearchError):
    pass


class GeolocationError(BikeWeatherError):
    """A failed one-shot position lookup, classified by W3C error code.

    ``code`` is one of the constants in ``bike_weather.geolocation``.
    """

    def __init__(self, code: int, message: str | None = None):
        self.code = code
        super().__init__(message)


class StorageError(BikeWeatherError):
    """A preference could not be written; the session value still applies."""

    default_message = "Could not write to storage."


class StorageQuotaExceededError(StorageError):
    default_message = "Storage capacity exceeded."


class StorageWriteError(StorageError):
    default_message = "Could not write preferences to disk."


class InvalidImageError(BikeWeatherError):
    default_message = "Please select a valid image file."
