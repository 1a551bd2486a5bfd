"""Filter definitions and evaluation results."""

from dataclasses import dataclass
from enum import StrEnum

from pydantic import Field

from app.models.common import BaseEntity, BaseSchema
from app.models.records import Record


class FilterExpression(BaseSchema):
    """One boolean rule inside a filter."""

    code: str
    action: str | None = None
    highlight_target: str | None = Field(alias="highlightTarget", default=None)


class Filter(BaseSchema):
    """A named set of expressions that include, exclude or tag records."""

    id: str
    name: str
    expressions: list[FilterExpression] = []
    enabled: bool = True
    independent: bool = False
    is_preset: bool = Field(alias="isPreset", default=False)
    category: str = "Custom"
    description: str = ""


@dataclass
class FilterResult(BaseEntity):
    """Outcome of a filter pass for one record."""

    match: bool
    action: str | None = None
    highlight: Record | None = None
    filter_id: str | None = None


class FieldType(StrEnum):
    """Value type of a simple-builder field."""

    NUMBER = "number"
    PERCENTAGE = "percentage"
    CURRENCY = "currency"
    BOOLEAN = "boolean"
    STRING = "string"


class Logic(StrEnum):
    AND = "AND"
    OR = "OR"


OPERATORS = (">=", "<=", "==", "!=", ">", "<")


@dataclass
class FilterField(BaseEntity):
    """A field the simple builder can compare against."""

    id: str
    name: str
    group: str
    value_type: FieldType
    is_column: bool
    description: str = ""


class SimpleCondition(BaseSchema):
    """``field operator value`` as entered in the simple builder."""

    field: str
    operator: str
    value: bool | float | str | None = None
    value_type: FieldType = Field(alias="valueType", default=FieldType.NUMBER)


class SimpleFilterConfig(BaseSchema):
    name: str = ""
    category: str = ""
    description: str = ""
    conditions: list[SimpleCondition] = []
    logic: Logic = Logic.AND


@dataclass
class ParsedFilter(BaseEntity):
    """Advanced code read back into simple conditions."""

    conditions: list[SimpleCondition]
    logic: Logic
    failed_count: int = 0
