"""Records - upstream maps joined into per-item records."""

from app.services.records.builder import build_records
from app.services.records.mappings import MappingService, MappingState
from app.services.records.service import RecordService

__all__ = [
    "build_records",
    "MappingService",
    "MappingState",
    "RecordService",
]
