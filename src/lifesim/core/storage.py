"""Key-value store adapters holding the three JSON collections."""

from __future__ import annotations

import copy
import json
import logging
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class StoreError(Exception):
    pass


class Collection(str, Enum):
    goals = "goals"
    tasks = "tasks"
    sessions = "sessions"

    @property
    def filename(self) -> str:
        return f"{self.value}.json"


class KeyValueStore(ABC):
    """Persists JSON-serializable arrays under named collections."""

    @abstractmethod
    def get(self, collection: Collection) -> list[dict[str, Any]]:
        """Return the stored records, or an empty list if nothing is stored."""

    @abstractmethod
    def set(self, collection: Collection, records: list[dict[str, Any]]) -> bool:
        """Replace the whole collection. Returns False if the write failed."""


class MemoryKeyValueStore(KeyValueStore):
    """In-process store; records are deep-copied in both directions."""

    def __init__(self) -> None:
        self._data: dict[Collection, list[dict[str, Any]]] = {}

    def get(self, collection: Collection) -> list[dict[str, Any]]:
        return copy.deepcopy(self._data.get(collection, []))

    def set(self, collection: Collection, records: list[dict[str, Any]]) -> bool:
        self._data[collection] = copy.deepcopy(records)
        return True


class FileKeyValueStore(KeyValueStore):
    """One JSON file per collection inside a data directory.

    Each ``set`` rewrites the full file. A read followed by a write is not
    atomic: two writers working on the same collection race and the later
    write wins.
    """

    def __init__(self, data_dir: Path) -> None:
        self.data_dir = data_dir

    def _path(self, collection: Collection) -> Path:
        return self.data_dir / collection.filename

    def get(self, collection: Collection) -> list[dict[str, Any]]:
        path = self._path(collection)
        if not path.is_file():
            return []
        try:
            data = json.loads(path.read_text())
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Error reading collection %r from %s: %s", collection.value, path, e)
            return []
        if not isinstance(data, list):
            logger.warning("Collection %r in %s is not a JSON array", collection.value, path)
            return []
        return data

    def set(self, collection: Collection, records: list[dict[str, Any]]) -> bool:
        path = self._path(collection)
        try:
            path.write_text(json.dumps(records, indent=2) + "\n")
        except OSError as e:
            logger.warning("Error writing collection %r to %s: %s", collection.value, path, e)
            return False
        return True
