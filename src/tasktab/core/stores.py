"""Key-value stores backing state persistence.

A store is an opaque async get/set capability over JSON-serializable
values. ``JsonFileStore`` keeps all keys of one store in a single JSON
object on disk; ``MemoryStore`` lives only as long as the process.
"""

from __future__ import annotations

import asyncio
import copy
import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from .exceptions import PersistenceFailure, StoreUnavailable

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Async key-value store."""

    name: str = "store"

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Return the value stored under key, or None when absent.

        Raises:
            PersistenceFailure: If the store cannot be read
        """

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Store value under key.

        Raises:
            PersistenceFailure: If the store cannot be written
        """


class MemoryStore(KeyValueStore):
    """In-process store, used as the last fallback."""

    def __init__(self, name: str = "memory"):
        self.name = name
        self._data: dict[str, Any] = {}

    async def get(self, key: str) -> Any | None:
        value = self._data.get(key)
        return copy.deepcopy(value)

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)


class JsonFileStore(KeyValueStore):
    """Store all keys in one JSON file, written atomically."""

    def __init__(self, path: Path, name: str | None = None):
        """Initialize file store.

        Args:
            path: JSON file holding the store's keys
            name: Label used in log messages (defaults to the file stem)
        """
        self.path = path
        self.name = name or path.stem

    def _read_all(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except OSError as err:
            raise StoreUnavailable(f"Cannot read {self.path}: {err}") from err
        except json.JSONDecodeError as err:
            raise PersistenceFailure(f"Corrupted store file {self.path}: {err}") from err
        if not isinstance(data, dict):
            raise PersistenceFailure(f"Store file {self.path} does not hold an object")
        return data

    def _write_all(self, data: dict[str, Any]) -> None:
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as err:
            raise StoreUnavailable(f"Cannot write {self.path}: {err}") from err
        except (TypeError, ValueError) as err:
            raise PersistenceFailure(f"Value is not JSON-serializable: {err}") from err

    def _set_sync(self, key: str, value: Any) -> None:
        try:
            data = self._read_all()
        except PersistenceFailure as err:
            # Rewriting replaces a corrupted file.
            logger.warning(f"Overwriting unreadable store {self.name}: {err}")
            data = {}
        data[key] = value
        self._write_all(data)

    async def get(self, key: str) -> Any | None:
        data = await asyncio.to_thread(self._read_all)
        return data.get(key)

    async def set(self, key: str, value: Any) -> None:
        await asyncio.to_thread(self._set_sync, key, value)
