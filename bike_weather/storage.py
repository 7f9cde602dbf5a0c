# ABOUTME: Key-value storage capability standing in for browser local storage.
# ABOUTME: Provides an in-memory store and a capacity-limited JSON file store.

import json
import logging
from pathlib import Path
from typing import Protocol

from bike_weather.config import DEFAULT_STORAGE_CAPACITY
from bike_weather.errors import StorageQuotaExceededError, StorageWriteError

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStore:
    """Dict-backed store. ``capacity`` counts characters of keys plus values."""

    def __init__(self, capacity: int | None = None, initial: dict[str, str] | None = None):
        self.capacity = capacity
        self._items: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._items.get(key)

    def set(self, key: str, value: str) -> None:
        candidate = {**self._items, key: value}
        if self.capacity is not None and _size(candidate) > self.capacity:
            raise StorageQuotaExceededError(f"Writing {key!r} would exceed {self.capacity} characters.")
        self._commit(candidate)

    def remove(self, key: str) -> None:
        if key in self._items:
            self._commit({k: v for k, v in self._items.items() if k != key})

    def _commit(self, items: dict[str, str]) -> None:
        previous = self._items
        self._items = items
        try:
            self._persist()
        except OSError as e:
            self._items = previous
            raise StorageWriteError(f"Could not persist preferences: {e}") from e

    def _persist(self) -> None:
        pass


class JsonFileStore(MemoryStore):
    """Store persisted as a single JSON object on disk.

    A missing or unreadable file starts the store empty.
    """

    def __init__(self, path: Path, capacity: int | None = DEFAULT_STORAGE_CAPACITY):
        self.path = Path(path)
        super().__init__(capacity=capacity, initial=self._load())

    def _load(self) -> dict[str, str]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, json.JSONDecodeError):
            logger.warning("Ignoring unreadable preference file %s", self.path)
            return {}
        if not isinstance(data, dict):
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _persist(self) -> None:
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(self._items), encoding="utf-8")
        tmp.replace(self.path)


def _size(items: dict[str, str]) -> int:
    return sum(len(k) + len(v) for k, v in items.items())
