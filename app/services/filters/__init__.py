"""Filters - rule engine, presets, saved filters and the simple builder."""

from app.services.filters.engine import (
    RecordLookup,
    apply_filters,
    evaluate_filter,
    evaluate_filters,
    resolve_highlight,
    validate_filter_expression,
)
from app.services.filters.presets import PRESET_FILTERS
from app.services.filters.storage import FilterStore, uses_column
from app.services.filters.translator import (
    FILTER_FIELDS,
    generate_filter_name,
    parse_advanced_filter,
    parse_filter_value,
    simple_filter_to_saved,
    translate_condition,
    translate_simple_filter,
    validate_condition,
)

__all__ = [
    # Engine
    "RecordLookup",
    "apply_filters",
    "evaluate_filter",
    "evaluate_filters",
    "resolve_highlight",
    "validate_filter_expression",
    # Saved filters
    "PRESET_FILTERS",
    "FilterStore",
    "uses_column",
    # Simple builder
    "FILTER_FIELDS",
    "generate_filter_name",
    "parse_advanced_filter",
    "parse_filter_value",
    "simple_filter_to_saved",
    "translate_condition",
    "translate_simple_filter",
    "validate_condition",
]
