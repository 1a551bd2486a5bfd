"""Tests for filter evaluation, presets and the filter store."""

import asyncio

from app.models import Column, Filter, FilterExpression, Record
from app.repositories import MemoryStorage
from app.services.filters import (
    PRESET_FILTERS,
    FilterStore,
    RecordLookup,
    apply_filters,
    evaluate_filter,
    evaluate_filters,
    resolve_highlight,
    uses_column,
    validate_filter_expression,
)

PROFIT = Column(id="profit", name="Margin", expression="round((record.high * 0.98) - record.low)")
ROI = Column(id="roi", name="ROI", expression="((record.high * 0.98 - record.low) / record.low) * 100")
VOLUME = Column(id="volume", name="Volume", expression="record.volume")
COLUMNS = [PROFIT, ROI, VOLUME]


def flt(id, *codes, **kwargs):
    expressions = [c if isinstance(c, FilterExpression) else FilterExpression(code=c) for c in codes]
    return Filter(id=id, name=kwargs.pop("name", id), expressions=expressions, **kwargs)


class TestEvaluateFilter:
    def test_first_truthy_expression_wins(self, record):
        f = flt(
            "f",
            FilterExpression(code="record.high > 1000", action="big"),
            FilterExpression(code="record.high > 10", action="medium"),
            FilterExpression(code="record.high > 1", action="small"),
        )
        result = evaluate_filter(record, f)
        assert result.match is True
        assert result.action == "medium"
        assert result.filter_id == "f"

    def test_no_match(self, record):
        assert evaluate_filter(record, flt("f", "record.high > 1000")).match is False

    def test_disabled_or_empty_never_match(self, record):
        assert evaluate_filter(record, flt("f", "true", enabled=False)).match is False
        assert evaluate_filter(record, flt("g")).match is False

    def test_errors_do_not_match(self, record):
        assert evaluate_filter(record, flt("f", "record.high / 0 > 1")).match is False
        assert evaluate_filter(record, flt("g", "record.high >")).match is False

    def test_inclusive_boundary(self):
        f = flt("f", "columns.profit >= 10000")
        below = Record(id=1, name="a", high=20000, low=9601)
        exact = Record(id=2, name="b", high=20000, low=9600)
        assert evaluate_filter(below, f, COLUMNS).match is False
        assert evaluate_filter(exact, f, COLUMNS).match is True

    def test_get_record(self, record):
        other = Record(id=2, name="Dragon", high=500, low=400)
        f = flt("f", "getRecord(2, 'high') > record.high and getRecord('Dragon').low == 400")
        assert evaluate_filter(record, f, all_records=[record, other]).match is True

    def test_get_item_alias(self, record):
        other = Record(id=2, name="Dragon", high=500, low=400)
        f = flt("f", "getItem(2, 'high') == 500")
        assert evaluate_filter(record, f, all_records=[record, other]).match is True

    def test_get_record_missing(self, record):
        f = flt("f", "getRecord(99) == null")
        assert evaluate_filter(record, f, all_records=[record]).match is True


class TestHighlight:
    def setup_method(self):
        self.target = Record(id=2434, name="Prayer potion(4)", high=10000, low=9000)
        self.lookup = RecordLookup([self.target])

    def test_numeric_literal(self):
        assert resolve_highlight("2434", {}, self.lookup) is self.target

    def test_string_expression(self):
        assert resolve_highlight("'Prayer potion(4)'", {}, self.lookup) is self.target

    def test_record_value(self):
        assert resolve_highlight("getRecord(2434)", {"getRecord": self.lookup}, self.lookup) is self.target

    def test_literal_fallback(self):
        assert resolve_highlight("Prayer potion(4)", {}, self.lookup) is self.target

    def test_unresolvable(self):
        assert resolve_highlight("true", {}, self.lookup) is None

    def test_infinite_id_is_unresolved(self):
        assert resolve_highlight("1e999", {}, self.lookup) is None
        assert resolve_highlight("inf", {}, self.lookup) is None
        assert self.lookup.by_id(float("nan")) is None

    def test_infinite_target_does_not_escape(self, record):
        f = flt("f", FilterExpression(code="true", highlight_target="1e999"))
        result = evaluate_filter(record, f, all_records=[record])
        assert result.match and result.highlight is None
        results = evaluate_filters(record, [flt("g", FilterExpression(code="true", highlight_target="inf"))])
        assert results[0].match and results[0].highlight is None

    def test_highlight_on_result(self, record):
        f = flt("f", FilterExpression(code="true", action="go", highlight_target="2434"))
        result = evaluate_filter(record, f, all_records=[record, self.target])
        assert result.highlight is self.target


class TestComposition:
    def setup_method(self):
        self.regular = [flt("roi", "columns.roi > 1"), flt("vol", "columns.volume > 1000000")]
        self.independent = flt("ind", FilterExpression(code="record.high > 50", action="flag"), independent=True)

    def test_no_filters_pass_everything(self, record):
        results = evaluate_filters(record, [], COLUMNS)
        assert len(results) == 1 and results[0].match

    def test_disabled_filters_are_ignored(self, record):
        results = evaluate_filters(record, [flt("f", "false", enabled=False)], COLUMNS)
        assert len(results) == 1 and results[0].match

    def test_failing_regular_keeps_independent_row(self, record):
        results = evaluate_filters(record, [*self.regular, self.independent], COLUMNS)
        assert len(results) == 1
        assert results[0].filter_id == "ind"
        assert results[0].action == "flag"

    def test_all_regular_pass_plus_independent(self):
        record = Record(id=1, name="Rune", high=100, low=50, volume=2_000_000)
        results = evaluate_filters(record, [*self.regular, self.independent], COLUMNS)
        assert len(results) == 2
        assert results[0].filter_id is None
        assert results[1].filter_id == "ind"

    def test_independent_only_suppresses_regular_row(self):
        record = Record(id=1, name="Rune", high=10, low=50, volume=10)
        assert evaluate_filters(record, [self.independent], COLUMNS) == []

    def test_one_row_per_independent_match(self, record):
        other = flt("ind2", "true", independent=True)
        results = evaluate_filters(record, [self.independent, other], COLUMNS)
        assert [r.filter_id for r in results] == ["ind", "ind2"]


class TestPresets:
    def test_all_disabled(self):
        assert all(not f.enabled and f.is_preset for f in PRESET_FILTERS)

    def test_presets_parse(self):
        for f in PRESET_FILTERS:
            for e in f.expressions:
                assert validate_filter_expression(e.code), e.code

    def test_decanting(self):
        decant = next(f for f in PRESET_FILTERS if f.id == "decanting_opportunities")
        assert decant.independent
        source = Record(id=139, name="Prayer potion(3)", high=7000, low=7400, volume=200000)
        target = Record(id=2434, name="Prayer potion(4)", high=10000, low=9900, volume=200000)
        result = evaluate_filter(source, decant, all_records=[source, target])
        assert result.match is False

        source = Record(id=139, name="Prayer potion(3)", high=7000, low=6000, volume=200000)
        result = evaluate_filter(source, decant, all_records=[source, target])
        assert result.match is True
        assert result.action == "Decant 3→4"
        assert result.highlight is target


class TestFilterStore:
    def test_seeds_presets(self):
        store = FilterStore(MemoryStorage())
        filters = asyncio.run(store.load())
        assert [f.id for f in filters] == [f.id for f in PRESET_FILTERS]

    def test_migrates_missing_expressions(self):
        storage = MemoryStorage({"flip-analyzer-filters-v1": [{"id": "old", "name": "Old"}]})
        filters = asyncio.run(FilterStore(storage).load())
        assert filters[0].expressions == []

    def test_empty_list_is_not_reseeded(self):
        storage = MemoryStorage({"flip-analyzer-filters-v1": []})
        assert asyncio.run(FilterStore(storage).load()) == []

    def test_crud(self):
        store = FilterStore(MemoryStorage({"flip-analyzer-filters-v1": []}))
        asyncio.run(store.add(flt("a", "true")))
        filters = asyncio.run(store.toggle("a"))
        assert filters[0].enabled is False
        filters = asyncio.run(store.update("a", {"name": "Renamed"}))
        assert filters[0].name == "Renamed"
        assert asyncio.run(store.delete("a")) == []

    def test_round_trip_keeps_highlight(self):
        store = FilterStore(MemoryStorage({"flip-analyzer-filters-v1": []}))
        asyncio.run(store.add(flt("a", FilterExpression(code="true", highlight_target="columns.best"))))
        loaded = asyncio.run(store.load())
        assert loaded[0].expressions[0].highlight_target == "columns.best"
        assert [f.id for f in asyncio.run(store.referencing_column("best"))] == ["a"]


class TestUsesColumn:
    def test_matches_member_access(self):
        assert uses_column("columns.roi > 2", "roi")
        assert not uses_column("columns.roi2 > 2", "roi")
        assert not uses_column(None, "roi")

    def test_falls_back_to_text_for_bad_code(self):
        assert uses_column("columns.roi >", "roi")


class TestApplyFilters:
    def test_rows_per_record(self):
        records = [
            Record(id=1, name="a", high=100, low=50, volume=2_000_000),
            Record(id=2, name="b", high=100, low=99, volume=10),
        ]
        filters = [flt("roi", "columns.roi > 1"), flt("ind", "record.id == 2", independent=True)]
        rows = apply_filters(records, filters, COLUMNS)
        assert [(r.id, res.filter_id) for r, res in rows] == [(1, None), (2, "ind")]
