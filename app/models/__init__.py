"""Models package - DDL, schemas and entities."""

from app.models.columns import Column, ColumnFormat, ValueType
from app.models.common import KV_DDL, BaseEntity, BaseSchema
from app.models.filters import (
    OPERATORS,
    FieldType,
    Filter,
    FilterExpression,
    FilterField,
    FilterResult,
    Logic,
    ParsedFilter,
    SimpleCondition,
    SimpleFilterConfig,
)
from app.models.records import Record
from app.models.timeseries import (
    CACHE_METADATA_DDL,
    TIMESERIES_DDL,
    CacheEntry,
    PendingRequest,
    SeriesPoint,
    cache_key,
)

ALL_DDL = [
    KV_DDL,
    TIMESERIES_DDL,
    CACHE_METADATA_DDL,
]

__all__ = [
    # Common
    "BaseEntity",
    "BaseSchema",
    "KV_DDL",
    # Records
    "Record",
    # Columns
    "Column",
    "ColumnFormat",
    "ValueType",
    # Filters
    "Filter",
    "FilterExpression",
    "FilterResult",
    "FieldType",
    "Logic",
    "OPERATORS",
    "FilterField",
    "SimpleCondition",
    "SimpleFilterConfig",
    "ParsedFilter",
    # Timeseries
    "SeriesPoint",
    "CacheEntry",
    "PendingRequest",
    "cache_key",
    "TIMESERIES_DDL",
    "CACHE_METADATA_DDL",
    # All DDL
    "ALL_DDL",
]
