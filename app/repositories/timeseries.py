"""Timeseries repository - durable tier of the timeseries cache."""

import json

from loguru import logger

from app.models import CacheEntry, SeriesPoint, cache_key
from app.repositories.base import BaseRepository

LAST_CLEANUP_KEY = "lastCleanup"


class TimeseriesRepository(BaseRepository):
    """Persists fetched series so they survive restarts within their TTL."""

    def _save(self, record_id: int, interval: str, entry: CacheEntry) -> None:
        self._check_writable()
        data = [p.to_json() for p in entry.data]
        self.execute(
            """
            INSERT OR REPLACE INTO timeseries_cache
                (key, record_id, timestep, data, fetched_at, expires_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            [cache_key(record_id, interval), record_id, interval, json.dumps(data), entry.fetched_at, entry.expires_at],
        )
        logger.debug("Timeseries saved: {}:{} ({} points)", record_id, interval, len(data))

    def _load(self, record_id: int, interval: str) -> CacheEntry | None:
        row = self.fetchone(
            "SELECT data, fetched_at, expires_at FROM timeseries_cache WHERE key = ?",
            [cache_key(record_id, interval)],
        )
        if not row:
            return None
        points = [SeriesPoint.model_validate(p) for p in json.loads(row[0])]
        return CacheEntry(data=points, fetched_at=row[1], expires_at=row[2])

    def _cleanup(self, now: float) -> int:
        self._check_writable()
        row = self.fetchone("SELECT COUNT(*) FROM timeseries_cache WHERE expires_at < ?", [now])
        self.execute("DELETE FROM timeseries_cache WHERE expires_at < ?", [now])
        return row[0]

    def _clear_all(self) -> None:
        self._check_writable()
        self.execute("DELETE FROM timeseries_cache")
        logger.info("Durable timeseries cache cleared")

    def _get_last_cleanup(self) -> float | None:
        row = self.fetchone("SELECT value FROM cache_metadata WHERE key = ?", [LAST_CLEANUP_KEY])
        return row[0] if row else None

    def _set_last_cleanup(self, timestamp: float) -> None:
        self._check_writable()
        self.execute(
            "INSERT OR REPLACE INTO cache_metadata (key, value) VALUES (?, ?)",
            [LAST_CLEANUP_KEY, timestamp],
        )

    async def save(self, record_id: int, interval: str, entry: CacheEntry) -> None:
        """Store (overwrite) the entry for a key."""
        await self._run(self._save, record_id, interval, entry)

    async def load(self, record_id: int, interval: str) -> CacheEntry | None:
        """Load the stored entry for a key, expired or not."""
        return await self._run(self._load, record_id, interval)

    async def cleanup(self, now: float) -> int:
        """Delete entries expired before ``now``; returns how many were removed."""
        return await self._run(self._cleanup, now)

    async def clear_all(self) -> None:
        await self._run(self._clear_all)

    async def get_last_cleanup(self) -> float | None:
        return await self._run(self._get_last_cleanup)

    async def set_last_cleanup(self, timestamp: float) -> None:
        await self._run(self._set_last_cleanup, timestamp)
