# ABOUTME: Runtime settings read from the environment (and a local .env file).
# ABOUTME: Holds the Gemini key and model, preference store location and server options.

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel

DEFAULT_STORAGE_CAPACITY = 5_000_000


class Settings(BaseModel):
    """Application settings; build with ``Settings.from_env()``."""

    api_key: str = ""
    model: str = "gemini-2.5-flash"
    store_path: Path = Path("bike_weather_prefs.json")
    storage_capacity: int = DEFAULT_STORAGE_CAPACITY
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8000

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        defaults = cls()
        return cls(
            api_key=os.environ.get("GEMINI_API_KEY", ""),
            model=os.environ.get("BIKE_WEATHER_MODEL", defaults.model),
            store_path=os.environ.get("BIKE_WEATHER_STORE", defaults.store_path),
            storage_capacity=os.environ.get("BIKE_WEATHER_STORAGE_CAPACITY", defaults.storage_capacity),
            log_level=os.environ.get("BIKE_WEATHER_LOG_LEVEL", defaults.log_level),
            host=os.environ.get("BIKE_WEATHER_HOST", defaults.host),
            port=os.environ.get("BIKE_WEATHER_PORT", defaults.port),
        )
