"""Whitelisted functions available inside expressions."""

import math
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import BaseModel

from app.errors import EvaluationError
from app.models.common import BaseSchema


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _number(value: Any, fn: str) -> float:
    if value is None:
        raise EvaluationError(f"{fn}() got null")
    if isinstance(value, bool):
        return int(value)
    if not _is_number(value):
        raise EvaluationError(f"{fn}() expects a number, got {type(value).__name__}")
    return value


def get_field(obj: Any, name: str) -> Any:
    """Read a named field from a mapping or a model; missing -> None."""
    if isinstance(obj, Mapping):
        return obj.get(name)
    if isinstance(obj, BaseSchema):
        return obj.fact(name)
    if isinstance(obj, BaseModel):
        return getattr(obj, name, None) if name in type(obj).model_fields else None
    return None


def fn_slice(arr: Any, start: Any = None, end: Any = None) -> list:
    if not isinstance(arr, list):
        return []
    start = None if start is None else int(_number(start, "slice"))
    end = None if end is None else int(_number(end, "slice"))
    return arr[start:end]


def fn_sum(arr: Any) -> float:
    """Sum of numeric elements; anything else counts as zero."""
    if not isinstance(arr, list):
        return 0
    return sum(v for v in arr if _is_number(v))


def fn_avg(arr: Any) -> float | None:
    if not isinstance(arr, list):
        return None
    values = [v for v in arr if v is not None]
    if not values:
        return None
    return fn_sum(values) / len(values)


def fn_length(arr: Any) -> int:
    if isinstance(arr, (list, str)):
        return len(arr)
    return 0


def fn_field(arr: Any, name: Any) -> list:
    if not isinstance(arr, list):
        return []
    values = (get_field(item, str(name)) for item in arr)
    return [v for v in values if v is not None]


def fn_round(value: Any, digits: Any = 0) -> float:
    """Round half up, like a spreadsheet would."""
    x = _number(value, "round")
    scale = 10 ** int(_number(digits, "round"))
    result = math.floor(x * scale + 0.5) / scale
    return int(result) if scale == 1 else result


def _unary_math(name: str, fn: Callable[[float], float]) -> Callable[[Any], float]:
    def wrapper(value: Any) -> float:
        try:
            return fn(_number(value, name))
        except ValueError as e:
            raise EvaluationError(f"{name}(): {e}") from e

    wrapper.__name__ = name
    return wrapper


def _extreme(name: str, pick: Callable) -> Callable[..., float]:
    def wrapper(*args: Any) -> float:
        values = args[0] if len(args) == 1 and isinstance(args[0], list) else args
        if not values:
            raise EvaluationError(f"{name}() needs at least one value")
        return pick(_number(v, name) for v in values)

    wrapper.__name__ = name
    return wrapper


FUNCTIONS: dict[str, Callable[..., Any]] = {
    # Arrays
    "slice": fn_slice,
    "sum": fn_sum,
    "avg": fn_avg,
    "length": fn_length,
    "field": fn_field,
    # Numbers
    "round": fn_round,
    "abs": _unary_math("abs", abs),
    "floor": _unary_math("floor", math.floor),
    "ceil": _unary_math("ceil", math.ceil),
    "sqrt": _unary_math("sqrt", math.sqrt),
    "log": _unary_math("log", math.log),
    "min": _extreme("min", min),
    "max": _extreme("max", max),
}
