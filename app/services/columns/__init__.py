"""Columns - formula engine, presets and saved definitions."""

from app.services.columns.engine import (
    PLACEHOLDER,
    ColumnResolver,
    evaluate_column,
    evaluate_row,
    format_column_value,
    validate_column_expression,
)
from app.services.columns.presets import PRESET_COLUMNS
from app.services.columns.storage import ColumnStore

__all__ = [
    "PLACEHOLDER",
    "ColumnResolver",
    "evaluate_column",
    "evaluate_row",
    "format_column_value",
    "validate_column_expression",
    "PRESET_COLUMNS",
    "ColumnStore",
]
