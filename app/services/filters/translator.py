"""Simple filter builder - ``field operator value`` rows to and from expression code.

Percentage fields compare against column values already expressed in percent,
so ``ROI % >= 5`` becomes ``columns.roi >= 5`` with no scaling either way.
"""

import re
import time
from typing import Any

from app.models import (
    OPERATORS,
    FieldType,
    Filter,
    FilterExpression,
    FilterField,
    Logic,
    ParsedFilter,
    SimpleCondition,
    SimpleFilterConfig,
)

FILTER_FIELDS: list[FilterField] = [
    # Price
    FilterField("low", "Buy Price", "Price", FieldType.CURRENCY, False, "Current instant buy price"),
    FilterField("high", "Sell Price", "Price", FieldType.CURRENCY, False, "Current instant sell price"),
    FilterField("avg5m", "5m Average", "Price", FieldType.CURRENCY, False, "5-minute average price"),
    FilterField("avg1h", "1h Average", "Price", FieldType.CURRENCY, False, "1-hour average price"),
    FilterField("avg24h", "24h Average", "Price", FieldType.CURRENCY, False, "24-hour average price"),
    # Profit
    FilterField("roi", "ROI %", "Profit", FieldType.PERCENTAGE, True, "Return on investment percentage"),
    FilterField("profit", "Margin", "Profit", FieldType.CURRENCY, True, "Profit per item after tax"),
    FilterField("potentialProfit", "Potential Profit", "Profit", FieldType.CURRENCY, True, "Max profit per 4 hours"),
    FilterField("marginVolume", "Margin * Volume", "Profit", FieldType.CURRENCY, True, "Potential daily profit"),
    # Volume
    FilterField("volume", "Daily Volume", "Volume", FieldType.NUMBER, False, "Total 24h trading volume"),
    FilterField("total5mVol", "5m Volume", "Volume", FieldType.NUMBER, True, "5-minute trading volume"),
    FilterField("total1hVol", "1h Volume", "Volume", FieldType.NUMBER, True, "1-hour trading volume"),
    # Core
    FilterField("members", "Members Only", "Core", FieldType.BOOLEAN, False, "Whether item is members-only"),
    FilterField("limit", "Buy Limit", "Core", FieldType.NUMBER, False, "GE buy limit per 4 hours"),
    FilterField("favorite", "Favorited", "Core", FieldType.BOOLEAN, False, "Whether item is favorited"),
    # Alchemy
    FilterField("alchValue", "High Alch Value", "Alchemy", FieldType.CURRENCY, True, "High alchemy gold value"),
    FilterField("alchMargin", "Alch Margin", "Alchemy", FieldType.CURRENCY, True, "Profit from high alching"),
]

_FIELDS_BY_ID = {f.id: f for f in FILTER_FIELDS}
_NUMERIC = {FieldType.NUMBER, FieldType.CURRENCY, FieldType.PERCENTAGE}
_SUFFIXES = {"k": 1_000, "m": 1_000_000, "b": 1_000_000_000}

_COMPARISON_RE = re.compile(r"^(columns|record|item)\.(\w+)\s*(>=|<=|==|!=|>|<)\s*(.+)$")
_BOOLEAN_RE = re.compile(r"^(!|not\s+)?\s*(columns|record|item)\.(\w+)$")


def get_field(field_id: str) -> FilterField | None:
    return _FIELDS_BY_ID.get(field_id)


def _number_text(value: float) -> str:
    value = float(value)
    return str(int(value)) if value.is_integer() else repr(value)


def _quote(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def parse_filter_value(text: str, value_type: FieldType | str) -> bool | float | str | None:
    """Parse user input for a field type; None when it cannot be read.

    Numbers accept thousands separators, a ``gp`` suffix and ``k``/``m``/``b``
    multipliers. Percentages accept a trailing ``%`` and stay in percent.
    """
    trimmed = text.strip()
    value_type = FieldType(value_type)

    if value_type == FieldType.BOOLEAN:
        lower = trimmed.lower()
        if lower in ("true", "yes", "1"):
            return True
        if lower in ("false", "no", "0"):
            return False
        return None

    if value_type == FieldType.STRING:
        return trimmed

    cleaned = re.sub(r"[,\s]", "", trimmed).lower()
    if value_type == FieldType.PERCENTAGE:
        cleaned = cleaned.rstrip("%")
    else:
        cleaned = re.sub(r"gp$", "", cleaned)

    multiplier = 1
    if cleaned[-1:] in _SUFFIXES and value_type != FieldType.PERCENTAGE:
        multiplier = _SUFFIXES[cleaned[-1]]
        cleaned = cleaned[:-1]
    try:
        return float(cleaned) * multiplier
    except ValueError:
        return None


def translate_condition(condition: SimpleCondition) -> str:
    """Expression code for one condition. Unknown fields raise ValueError."""
    field = get_field(condition.field)
    if field is None:
        raise ValueError(f"Unknown field: {condition.field}")

    ref = f"{'columns' if field.is_column else 'record'}.{field.id}"

    if condition.value_type == FieldType.BOOLEAN and condition.operator in ("==", "!="):
        positive = bool(condition.value) == (condition.operator == "==")
        return ref if positive else f"not {ref}"

    if condition.value_type == FieldType.STRING:
        return f"{ref} {condition.operator} {_quote(str(condition.value))}"

    if isinstance(condition.value, bool):
        return f"{ref} {condition.operator} {'true' if condition.value else 'false'}"

    return f"{ref} {condition.operator} {_number_text(condition.value)}"


def translate_simple_filter(conditions: list[SimpleCondition], logic: Logic | str = Logic.AND) -> FilterExpression:
    if not conditions:
        raise ValueError("At least one condition is required")
    joiner = " and " if Logic(logic) == Logic.AND else " or "
    return FilterExpression(code=joiner.join(translate_condition(c) for c in conditions))


def validate_condition(condition: SimpleCondition) -> str | None:
    """Error message for an incomplete condition, None when it is valid."""
    if not condition.field:
        return "Field is required"
    field = get_field(condition.field)
    if field is None:
        return f"Unknown field: {condition.field}"
    if not condition.operator:
        return "Operator is required"
    if condition.operator not in OPERATORS:
        return f"Unknown operator: {condition.operator}"
    if condition.value is None or condition.value == "":
        return "Value is required"
    if field.value_type == FieldType.BOOLEAN and not isinstance(condition.value, bool):
        return "Value must be true or false"
    if field.value_type in _NUMERIC and (
        isinstance(condition.value, bool) or not isinstance(condition.value, (int, float))
    ):
        return "Value must be a number"
    return None


def _display_value(condition: SimpleCondition) -> str:
    value = condition.value
    if condition.value_type == FieldType.BOOLEAN:
        return "true" if value else "false"
    if condition.value_type == FieldType.PERCENTAGE:
        return f"{float(value):.0f}%"
    if condition.value_type == FieldType.CURRENCY:
        num = float(value)
        if num >= 1_000_000:
            return f"{num / 1_000_000:.1f}m"
        if num >= 1_000:
            return f"{num / 1_000:.0f}k"
        return _number_text(num)
    if isinstance(value, float):
        return _number_text(value)
    return str(value)


def generate_filter_name(conditions: list[SimpleCondition], logic: Logic | str = Logic.AND) -> str:
    """Readable name such as ``ROI % >= 5% AND Margin > 1k``."""
    if not conditions:
        return "Unnamed Filter"

    parts = []
    for cond in conditions:
        field = get_field(cond.field)
        if field is None:
            continue
        parts.append(f"{field.name} {cond.operator} {_display_value(cond)}")

    if not parts:
        return "Custom Filter"
    return f" {Logic(logic).value} ".join(parts)


def simple_filter_to_saved(config: SimpleFilterConfig, filter_id: str | None = None) -> Filter:
    """Saved filter from a builder config; the single expression holds every condition."""
    expression = translate_simple_filter(config.conditions, config.logic)
    return Filter(
        id=filter_id or f"filter_{int(time.time() * 1000)}",
        name=config.name or generate_filter_name(config.conditions, config.logic),
        expressions=[expression],
        enabled=True,
        category=config.category or "Custom",
        description=config.description
        or f"{config.logic.value} filter with {len(config.conditions)} condition(s)",
        independent=False,
    )


def _parse_value(raw: str, field: FilterField) -> Any:
    raw = raw.strip()
    if field.value_type == FieldType.STRING:
        if raw[:1] in ("'", '"') and raw[-1:] == raw[:1]:
            return raw[1:-1]
        return raw
    if field.value_type == FieldType.BOOLEAN:
        return raw == "true"
    return float(raw)


def parse_advanced_filter(code: str) -> ParsedFilter | None:
    """Best-effort read of simple ``and``/``or`` code back into conditions.

    Parts that are not a plain comparison against a known field are counted in
    ``failed_count``. Returns None for blank code.
    """
    if not code or not code.strip():
        return None

    logic, parts = Logic.AND, [code]
    if " or " in code:
        logic, parts = Logic.OR, code.split(" or ")
    elif " and " in code:
        parts = code.split(" and ")

    conditions: list[SimpleCondition] = []
    failed = 0
    for part in parts:
        clean = part.strip()
        if clean.startswith("(") and clean.endswith(")"):
            clean = clean[1:-1].strip()

        match = _COMPARISON_RE.match(clean)
        if match:
            _, field_id, operator, raw = match.groups()
            field = get_field(field_id)
            if field is None:
                failed += 1
                continue
            try:
                value = _parse_value(raw, field)
            except ValueError:
                failed += 1
                continue
            conditions.append(
                SimpleCondition(field=field_id, operator=operator, value=value, value_type=field.value_type)
            )
            continue

        match = _BOOLEAN_RE.match(clean)
        if match:
            negated, _, field_id = match.groups()
            field = get_field(field_id)
            if field is None or field.value_type != FieldType.BOOLEAN:
                failed += 1
                continue
            conditions.append(
                SimpleCondition(field=field_id, operator="==", value=not negated, value_type=FieldType.BOOLEAN)
            )
            continue

        failed += 1

    return ParsedFilter(conditions=conditions, logic=logic, failed_count=failed)
