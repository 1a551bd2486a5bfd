"""Column definitions - user and preset derived metrics."""

from enum import StrEnum

from pydantic import Field

from app.models.common import BaseSchema


class ValueType(StrEnum):
    """Type of value a column produces."""

    NUMBER = "number"
    STRING = "string"
    BOOLEAN = "boolean"


class ColumnFormat(StrEnum):
    """Display format for numeric columns."""

    CURRENCY = "currency"
    PERCENTAGE = "percentage"
    DECIMAL = "decimal"
    RELATIVE_TIME = "relativeTime"


class Column(BaseSchema):
    """A named formula evaluated per record."""

    id: str
    name: str
    expression: str
    value_type: ValueType = Field(alias="valueType", default=ValueType.NUMBER)
    format: ColumnFormat | None = None
    enabled: bool = True
    is_preset: bool = Field(alias="isPreset", default=False)
    group: str = "Custom"
    description: str = ""
