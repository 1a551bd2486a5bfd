"""Timeseries models - series points, cache entries and durable tables."""

import asyncio
from dataclasses import dataclass, field

from pydantic import Field

from app.models.common import BaseSchema


class SeriesPoint(BaseSchema):
    """One aggregated bucket of a price history."""

    timestamp: int | None = None
    avg_high_price: float | None = Field(alias="avgHighPrice", default=None)
    avg_low_price: float | None = Field(alias="avgLowPrice", default=None)
    high_price_volume: int = Field(alias="highPriceVolume", default=0)
    low_price_volume: int = Field(alias="lowPriceVolume", default=0)


@dataclass
class CacheEntry:
    """A fetched series and its freshness window (epoch seconds)."""

    data: list[SeriesPoint]
    fetched_at: float
    expires_at: float

    def is_fresh(self, now: float) -> bool:
        return now < self.expires_at


@dataclass
class PendingRequest:
    """A caller waiting for a key that is not cached yet."""

    record_id: int
    interval: str
    priority: int
    future: asyncio.Future = field(repr=False)


def cache_key(record_id: int, interval: str) -> str:
    return f"{record_id}:{interval}"


TIMESERIES_DDL = """
CREATE TABLE IF NOT EXISTS timeseries_cache (
    key VARCHAR PRIMARY KEY,
    record_id INTEGER NOT NULL,
    timestep VARCHAR NOT NULL,
    data JSON NOT NULL,
    fetched_at DOUBLE NOT NULL,
    expires_at DOUBLE NOT NULL
)
"""

CACHE_METADATA_DDL = """
CREATE TABLE IF NOT EXISTS cache_metadata (
    key VARCHAR PRIMARY KEY,
    value DOUBLE NOT NULL
)
"""
