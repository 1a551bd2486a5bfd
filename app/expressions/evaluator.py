"""Tree-walking evaluator for compiled expressions."""

import math
import operator
from collections.abc import Callable, Mapping
from typing import Any

from app.errors import EvaluationError
from app.expressions.functions import FUNCTIONS, get_field
from app.expressions.nodes import (
    ArrayLiteral,
    Binary,
    Call,
    Conditional,
    Index,
    Literal,
    Logical,
    Member,
    Name,
    Node,
    Unary,
)


class LazyNamespace:
    """Object whose members are computed on access, e.g. ``columns.<id>``."""

    def __init__(self, resolve: Callable[[str], Any]):
        self._resolve = resolve

    def resolve(self, name: str) -> Any:
        return self._resolve(name)


def _remainder(left: Any, right: Any) -> Any:
    # Sign follows the dividend: -7 % 3 == -1
    if right == 0:
        raise ZeroDivisionError("remainder by zero")
    if isinstance(left, int) and isinstance(right, int):
        r = abs(left) % abs(right)
        return -r if left < 0 else r
    return math.fmod(left, right)


def _power(left: Any, right: Any) -> Any:
    # Computed in floats so an oversized result raises OverflowError
    result = float(left) ** float(right)
    if isinstance(left, int) and isinstance(right, int) and right >= 0:
        return int(result)
    return result


_ARITHMETIC = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": operator.truediv,
    "%": _remainder,
    "^": _power,
}

_ORDERING = {
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


def _member(target: Any, name: str) -> Any:
    if target is None:
        raise EvaluationError(f"Cannot read '{name}' of null")
    if isinstance(target, LazyNamespace):
        return target.resolve(name)
    return get_field(target, name)


def _index(target: Any, index: Any) -> Any:
    if target is None:
        raise EvaluationError("Cannot index null")
    if isinstance(target, list):
        if isinstance(index, bool) or not isinstance(index, (int, float)):
            raise EvaluationError("List index must be a number")
        if not float(index).is_integer():
            return None
        i = int(index)
        return target[i] if -len(target) <= i < len(target) else None
    if isinstance(index, str):
        return _member(target, index)
    raise EvaluationError(f"Cannot index {type(target).__name__}")


def _arithmetic(op: str, left: Any, right: Any) -> Any:
    if left is None or right is None:
        raise EvaluationError(f"Null operand for '{op}'")
    if op == "+" and isinstance(left, str) and isinstance(right, str):
        return left + right
    if isinstance(left, str) or isinstance(right, str):
        raise EvaluationError(f"Cannot apply '{op}' to text")
    try:
        result = _ARITHMETIC[op](left, right)
    except ZeroDivisionError as e:
        raise EvaluationError(f"Division by zero in '{op}'") from e
    except (TypeError, ValueError, OverflowError) as e:
        raise EvaluationError(str(e)) from e
    if isinstance(result, complex):
        raise EvaluationError(f"Complex result for '{op}'")
    return result


def _compare(op: str, left: Any, right: Any) -> bool:
    if op == "==":
        return left == right
    if op == "!=":
        return left != right
    if left is None or right is None:
        raise EvaluationError(f"Null operand for '{op}'")
    try:
        return _ORDERING[op](left, right)
    except TypeError as e:
        raise EvaluationError(str(e)) from e


def evaluate(node: Node, variables: Mapping[str, Any]) -> Any:
    """Evaluate a compiled expression against a variable mapping."""
    if isinstance(node, Literal):
        return node.value

    if isinstance(node, Name):
        if node.name not in variables:
            raise EvaluationError(f"Undefined variable '{node.name}'")
        return variables[node.name]

    if isinstance(node, Member):
        return _member(evaluate(node.target, variables), node.name)

    if isinstance(node, Index):
        return _index(evaluate(node.target, variables), evaluate(node.index, variables))

    if isinstance(node, Logical):
        left = evaluate(node.left, variables)
        if node.op == "and":
            return bool(left) and bool(evaluate(node.right, variables))
        return bool(left) or bool(evaluate(node.right, variables))

    if isinstance(node, Conditional):
        if evaluate(node.test, variables):
            return evaluate(node.then, variables)
        return evaluate(node.otherwise, variables)

    if isinstance(node, Unary):
        value = evaluate(node.operand, variables)
        if node.op == "not":
            return not value
        if value is None or isinstance(value, str):
            raise EvaluationError(f"Bad operand for unary '{node.op}'")
        return -value if node.op == "-" else +value

    if isinstance(node, Binary):
        left = evaluate(node.left, variables)
        right = evaluate(node.right, variables)
        if node.op in _ARITHMETIC:
            return _arithmetic(node.op, left, right)
        return _compare(node.op, left, right)

    if isinstance(node, Call):
        fn = variables.get(node.name) if node.name in variables else FUNCTIONS.get(node.name)
        if not callable(fn):
            raise EvaluationError(f"Unknown function '{node.name}'")
        args = [evaluate(a, variables) for a in node.args]
        try:
            return fn(*args)
        except TypeError as e:
            raise EvaluationError(f"{node.name}(): {e}") from e

    if isinstance(node, ArrayLiteral):
        return [evaluate(i, variables) for i in node.items]

    raise EvaluationError(f"Unsupported node {type(node).__name__}")
