"""Filter engine - boolean rules over records, with cross-record lookups."""

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from loguru import logger

from app.expressions import compile_expression, evaluate, get_field, validate_expression
from app.models import Column, Filter, FilterResult, Record
from app.services.columns.engine import ColumnResolver

if TYPE_CHECKING:
    from app.services.timeseries.cache import TimeseriesCache


class RecordLookup:
    """``getRecord(idOrName, property?)`` over the full record universe."""

    def __init__(self, records: Sequence[Record]):
        self._records = records
        self._by_id: dict[int, Record] | None = None
        self._by_name: dict[str, Record] | None = None

    def _index(self) -> None:
        self._by_id, self._by_name = {}, {}
        for r in self._records:
            self._by_id.setdefault(r.id, r)
            self._by_name.setdefault(r.name, r)

    def by_id(self, record_id: Any) -> Record | None:
        if self._by_id is None:
            self._index()
        try:
            return self._by_id.get(int(record_id))
        except (TypeError, ValueError, OverflowError):
            return None

    def by_name(self, name: str) -> Record | None:
        if self._by_name is None:
            self._index()
        return self._by_name.get(name)

    def find(self, id_or_name: Any) -> Record | None:
        if isinstance(id_or_name, (int, float)) and not isinstance(id_or_name, bool):
            return self.by_id(id_or_name)
        if isinstance(id_or_name, str):
            return self.by_name(id_or_name)
        return None

    def __call__(self, id_or_name: Any, prop: str | None = None) -> Any:
        found = self.find(id_or_name)
        if found is not None and prop:
            return get_field(found, prop)
        return found


def _matches(code: str | None, variables: dict[str, Any]) -> bool:
    if not code:
        return False
    try:
        return bool(evaluate(compile_expression(code), variables))
    except Exception as e:
        logger.warning("Error evaluating filter expression {!r}: {}", code, e)
        return False


def _literal_target(target: str, lookup: RecordLookup) -> Record | None:
    name_or_id = target.strip().strip("'\"")
    try:
        return lookup.by_id(float(name_or_id))
    except ValueError:
        return lookup.by_name(name_or_id)


def resolve_highlight(target: str, variables: dict[str, Any], lookup: RecordLookup) -> Record | None:
    """Evaluate a highlight target, falling back to a literal name or id."""
    try:
        result = evaluate(compile_expression(target), variables)
    except Exception:
        return _literal_target(target, lookup)

    if isinstance(result, Record):
        return result
    if isinstance(result, str):
        return lookup.by_name(result)
    if isinstance(result, (int, float)) and not isinstance(result, bool):
        return lookup.by_id(result)
    return None


def _evaluate(
    record: Record,
    flt: Filter,
    all_columns: Sequence[Column],
    lookup: RecordLookup,
    cache: "TimeseriesCache | None",
    now: int | None,
) -> FilterResult:
    if not flt.enabled or not flt.expressions:
        return FilterResult(match=False, filter_id=flt.id)

    resolver = ColumnResolver(record, all_columns, cache, now, record_lookup=lookup)
    variables = resolver.context().variables()

    for expr in flt.expressions:
        if not _matches(expr.code, variables):
            continue
        highlight = None
        if expr.highlight_target:
            highlight = resolve_highlight(expr.highlight_target, variables, lookup)
        return FilterResult(match=True, action=expr.action, highlight=highlight, filter_id=flt.id)

    return FilterResult(match=False, filter_id=flt.id)


def evaluate_filter(
    record: Record,
    flt: Filter,
    all_columns: Sequence[Column] = (),
    all_records: Sequence[Record] = (),
    cache: "TimeseriesCache | None" = None,
    now: int | None = None,
) -> FilterResult:
    """First truthy expression wins and supplies its action and highlight."""
    return _evaluate(record, flt, all_columns, RecordLookup(all_records), cache, now)


def evaluate_filters(
    record: Record,
    filters: Sequence[Filter],
    all_columns: Sequence[Column] = (),
    all_records: Sequence[Record] = (),
    cache: "TimeseriesCache | None" = None,
    now: int | None = None,
) -> list[FilterResult]:
    """Output rows for one record.

    Regular filters are AND-combined into at most one row. Each matching
    independent filter adds its own row. With no enabled filters every record
    passes; with only independent filters the regular row is suppressed.
    """
    active = [f for f in filters if f.enabled]
    if not active:
        return [FilterResult(match=True)]

    lookup = RecordLookup(all_records)
    regular = [f for f in active if not f.independent]
    independent = [f for f in active if f.independent]

    results: list[FilterResult] = []
    if regular:
        matched = True
        action, highlight = None, None
        for flt in regular:
            result = _evaluate(record, flt, all_columns, lookup, cache, now)
            if not result.match:
                matched = False
                break
            action = result.action or action
            highlight = result.highlight or highlight
        if matched:
            results.append(FilterResult(match=True, action=action, highlight=highlight))

    for flt in independent:
        result = _evaluate(record, flt, all_columns, lookup, cache, now)
        if result.match:
            results.append(result)

    return results


def apply_filters(
    records: Sequence[Record],
    filters: Sequence[Filter],
    all_columns: Sequence[Column] = (),
    cache: "TimeseriesCache | None" = None,
    now: int | None = None,
) -> list[tuple[Record, FilterResult]]:
    """Filter a whole table; a record may yield several rows."""
    rows = []
    for record in records:
        for result in evaluate_filters(record, filters, all_columns, records, cache, now):
            rows.append((record, result))
    logger.debug("Filtered {} records into {} rows", len(records), len(rows))
    return rows


def validate_filter_expression(code: str) -> bool:
    return validate_expression(code)
