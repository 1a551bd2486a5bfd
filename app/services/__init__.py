"""Services package - service class exports."""

from app.services.columns import ColumnStore
from app.services.favorites import FavoritesStore
from app.services.filters import FilterStore
from app.services.records import MappingService, RecordService
from app.services.timeseries import EventBus, TimeseriesCache

__all__ = [
    "ColumnStore",
    "FavoritesStore",
    "FilterStore",
    "MappingService",
    "RecordService",
    "EventBus",
    "TimeseriesCache",
]
