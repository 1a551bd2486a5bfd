"""Key-value storage - persistence adapter for saved configuration."""

import copy
import json
from datetime import datetime
from typing import Any, Protocol

from loguru import logger

from app.repositories.base import BaseRepository


class StorageAdapter(Protocol):
    """Get/set-by-key persistence used by the column, filter and favorites stores."""

    async def get(self, key: str) -> Any | None: ...

    async def set(self, key: str, value: Any) -> None: ...


class StorageRepository(BaseRepository):
    """DuckDB-backed key-value storage with JSON values."""

    def _get(self, key: str) -> Any | None:
        row = self.fetchone("SELECT value FROM kv_store WHERE key = ?", [key])
        if row:
            logger.debug("Storage hit: {}", key)
            return json.loads(row[0])
        return None

    def _set(self, key: str, value: Any) -> None:
        self._check_writable()
        self.execute(
            """
            INSERT OR REPLACE INTO kv_store (key, value, updated_at)
            VALUES (?, ?, ?)
            """,
            [key, json.dumps(value), datetime.now()],
        )
        logger.debug("Storage saved: {}", key)

    def _delete(self, key: str) -> None:
        self._check_writable()
        self.execute("DELETE FROM kv_store WHERE key = ?", [key])

    async def get(self, key: str) -> Any | None:
        """Load a stored value, None if missing."""
        return await self._run(self._get, key)

    async def set(self, key: str, value: Any) -> None:
        """Store a JSON-serialisable value under a key."""
        await self._run(self._set, key, value)

    async def delete(self, key: str) -> None:
        """Remove a key."""
        await self._run(self._delete, key)


class MemoryStorage:
    """In-process storage with the same contract, values are copied on the way in and out."""

    def __init__(self, initial: dict[str, Any] | None = None):
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    async def get(self, key: str) -> Any | None:
        value = self._data.get(key)
        return copy.deepcopy(value) if value is not None else None

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)
