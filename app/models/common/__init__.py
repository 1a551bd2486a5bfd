"""Common models - base classes and shared tables."""

from app.models.common.base import BaseEntity, BaseSchema
from app.models.common.storage import KV_DDL

__all__ = [
    "BaseEntity",
    "BaseSchema",
    "KV_DDL",
]
