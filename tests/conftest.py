# ABOUTME: Shared test fixtures for the bike weather test suite.
# ABOUTME: Provides Gemini response builders, a mock genai client and sample forecast payloads.

from unittest.mock import AsyncMock, MagicMock

import pytest
from google.genai import types

from bike_weather.storage import JsonFileStore


@pytest.fixture(autouse=True)
def _no_real_gemini(monkeypatch):
    """Prevent accidental Gemini calls during testing."""
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)


def build_response(text: str | None, maps: list[tuple[str, str]] | None = None) -> types.GenerateContentResponse:
    """Build a GenerateContentResponse with one candidate and optional maps grounding chunks."""
    parts = [] if text is None else [types.Part(text=text)]
    metadata = None
    if maps is not None:
        metadata = types.GroundingMetadata(
            grounding_chunks=[types.GroundingChunk(maps=types.GroundingChunkMaps(uri=u, title=t)) for u, t in maps]
        )
    return types.GenerateContentResponse(
        candidates=[
            types.Candidate(
                content=types.Content(role="model", parts=parts),
                grounding_metadata=metadata,
            )
        ]
    )


def mock_client(*outcomes) -> MagicMock:
    """Mock genai.Client whose aio.models.generate_content yields the given responses or raises exceptions."""
    client = MagicMock()
    client.aio.models.generate_content = AsyncMock(side_effect=list(outcomes))
    return client


class FullDiskStore(JsonFileStore):
    """JsonFileStore whose every write fails as if the disk were full."""

    def _persist(self) -> None:
        raise OSError(28, "No space left on device")


def hourly(hour: int, **overrides) -> dict:
    sample = {
        "time": f"{hour:02d}:00",
        "windSpeed": 8.5,
        "windDirection": "NW",
        "uvIndex": 4,
        "rainProbability": 10,
        "temperature": 64.0,
    }
    sample.update(overrides)
    return sample


@pytest.fixture
def forecast_payload() -> dict:
    """Schema-conformant forecast: 5 days of 07:00-19:00 hourly samples."""
    return {
        "location": {"city": "Copenhagen", "country": "Denmark"},
        "dailyForecasts": [
            {
                "date": f"2025-06-{day:02d}",
                "bikeAdvisory": "Great day for a ride, winds will be low.",
                "hourlyData": [hourly(h) for h in range(7, 20)],
            }
            for day in range(2, 7)
        ],
    }
