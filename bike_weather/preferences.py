# ABOUTME: Saved location and custom background image persisted across sessions.
# ABOUTME: Storage write failures degrade to session-only values with a warning.

import logging

from bike_weather.errors import StorageError
from bike_weather.storage import KeyValueStore

logger = logging.getLogger(__name__)

LOCATION_KEY = "jens-bike-weather-location"
BACKGROUND_KEY = "userBackgroundImage"

BACKGROUND_NOT_SAVED_WARNING = (
    "Your image is too large to be saved for next time, but it will be used for this session."
)


class PreferenceStore:
    """Session view of the two persisted preferences.

    Values are read from the store once, at construction. Afterwards the session
    values are authoritative and every change is written through to the store.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store
        self.saved_location: str | None = store.get(LOCATION_KEY)
        self.background_image: str | None = store.get(BACKGROUND_KEY)

    def save_location(self, location: str) -> None:
        self.saved_location = location
        try:
            self.store.set(LOCATION_KEY, location)
        except StorageError as e:
            logger.warning("Saved location kept for this session only: %s", e.message)

    def clear_location(self) -> None:
        self.saved_location = None
        try:
            self.store.remove(LOCATION_KEY)
        except StorageError as e:
            logger.warning("Saved location cleared for this session only: %s", e.message)

    def apply_background(self, data_uri: str) -> str | None:
        """Use an image as the background, returning a warning if it could not be persisted."""
        self.background_image = data_uri
        try:
            self.store.set(BACKGROUND_KEY, data_uri)
        except StorageError:
            logger.exception("Could not save background image to storage")
            return BACKGROUND_NOT_SAVED_WARNING
        return None

    def reset_background(self) -> None:
        self.background_image = None
        try:
            self.store.remove(BACKGROUND_KEY)
        except StorageError as e:
            logger.warning("Background reset for this session only: %s", e.message)
