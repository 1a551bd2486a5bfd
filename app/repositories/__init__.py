"""Repositories package - data access layer for our database."""

from app.repositories.base import BaseRepository
from app.repositories.db import (
    close_db,
    get_db,
    init_tables,
    reconnect_db,
)
from app.repositories.storage import MemoryStorage, StorageAdapter, StorageRepository
from app.repositories.timeseries import TimeseriesRepository

__all__ = [
    # DB
    "get_db",
    "close_db",
    "reconnect_db",
    "init_tables",
    # Base
    "BaseRepository",
    # Storage
    "StorageAdapter",
    "StorageRepository",
    "MemoryStorage",
    # Timeseries
    "TimeseriesRepository",
]
