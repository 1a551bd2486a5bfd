"""Column engine - evaluates user-defined columns against one record."""

from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

from loguru import logger

from app.expressions import (
    EvaluationContext,
    LazyNamespace,
    compile_expression,
    evaluate,
    now_seconds,
    validate_expression,
)
from app.models import Column, ColumnFormat, Record, ValueType
from settings import MAX_COLUMN_DEPTH

if TYPE_CHECKING:
    from app.services.timeseries.cache import TimeseriesCache

PLACEHOLDER = "-"


class ColumnResolver:
    """One evaluation scope for a single record.

    Column values are memoised for the lifetime of the resolver, so
    ``columns.<id>`` referenced from several formulas is computed once. Results
    touched by a depth or cycle abort are not memoised; a later shallower read
    recomputes them.
    """

    def __init__(
        self,
        record: Record,
        all_columns: Sequence[Column],
        cache: "TimeseriesCache | None" = None,
        now: int | None = None,
        record_lookup: Callable[..., Any] | None = None,
        max_depth: int = MAX_COLUMN_DEPTH,
    ):
        self.record = record
        self.cache = cache
        self.now = now if now is not None else now_seconds()
        self.record_lookup = record_lookup
        self.max_depth = max_depth
        self._columns = {c.id: c for c in all_columns}
        self._memo: dict[str, Any] = {}
        self._stack: list[str] = []
        self._aborts = 0

    def timeseries(self, record_id: Any, interval: str) -> Any:
        """Memory-tier read only; never triggers a fetch."""
        if self.cache is None:
            return None
        return self.cache.get_sync(int(record_id), interval)

    def lookup(self, column_id: str, depth: int = 0) -> Any:
        """Value of another column for the same record, None if unknown."""
        column = self._columns.get(column_id)
        if column is None:
            logger.debug("Unknown column reference: {}", column_id)
            return None
        return self.evaluate(column, depth)

    def context(self, depth: int = 0) -> EvaluationContext:
        return EvaluationContext(
            record=self.record,
            columns=LazyNamespace(lambda cid: self.lookup(cid, depth + 1)),
            now=self.now,
            timeseries=self.timeseries,
            record_lookup=self.record_lookup,
        )

    def evaluate(self, column: Column, depth: int = 0) -> Any:
        """Evaluate a column; any failure is logged and yields None."""
        if column.id in self._memo:
            return self._memo[column.id]
        if depth > self.max_depth:
            self._aborts += 1
            logger.warning("Column {} exceeds max depth {}", column.name, self.max_depth)
            return None
        if column.id in self._stack:
            self._aborts += 1
            chain = " -> ".join([*self._stack, column.id])
            logger.warning("Circular dependency detected for column {}: {}", column.name, chain)
            return None

        aborts = self._aborts
        self._stack.append(column.id)
        try:
            value = evaluate(compile_expression(column.expression), self.context(depth).variables())
        except Exception as e:
            logger.warning("Error evaluating column {} ({!r}): {}", column.name, column.expression, e)
            value = None
        finally:
            self._stack.pop()

        if self._aborts == aborts:
            self._memo[column.id] = value
        return value


def evaluate_column(
    column: Column,
    record: Record,
    all_columns: Sequence[Column] = (),
    cache: "TimeseriesCache | None" = None,
    depth: int = 0,
    now: int | None = None,
) -> Any:
    """Evaluate one column for one record. Never raises."""
    return ColumnResolver(record, all_columns, cache, now).evaluate(column, depth)


def evaluate_row(
    record: Record,
    columns: Sequence[Column],
    cache: "TimeseriesCache | None" = None,
    now: int | None = None,
) -> dict[str, Any]:
    """Values of every enabled column for a record, sharing one resolver."""
    resolver = ColumnResolver(record, columns, cache, now)
    return {c.id: resolver.evaluate(c) for c in columns if c.enabled}


def validate_column_expression(expression: str) -> bool:
    return validate_expression(expression)


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return None if value != value else value
    try:
        num = float(value)
    except (TypeError, ValueError):
        return None
    return None if num != num else num


def _grouped(num: float) -> str:
    """Thousands separators, up to three decimals."""
    if float(num).is_integer():
        return f"{int(num):,}"
    return f"{num:,.3f}".rstrip("0").rstrip(".")


def _relative_time(timestamp: float, now: int) -> str:
    diff = int(now - timestamp)
    if diff < 60:
        return f"{diff}s ago"
    if diff < 3600:
        return f"{diff // 60}m ago"
    if diff < 86400:
        return f"{diff // 3600}h ago"
    return f"{diff // 86400}d ago"


def format_column_value(value: Any, column: Column, now: int | None = None) -> str:
    """Display string for a raw column value."""
    if value is None:
        return PLACEHOLDER

    if column.value_type == ValueType.NUMBER:
        num = _as_number(value)
        if num is None:
            return PLACEHOLDER
        if column.format == ColumnFormat.PERCENTAGE:
            return f"{num:.2f}%"
        if column.format == ColumnFormat.DECIMAL:
            return f"{num:.2f}"
        if column.format == ColumnFormat.RELATIVE_TIME:
            return _relative_time(num, now if now is not None else now_seconds())
        return _grouped(num)

    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
