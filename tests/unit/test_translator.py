"""Tests for the simple filter builder."""

import pytest

from app.models import FieldType, Logic, SimpleCondition, SimpleFilterConfig
from app.services.filters import (
    FILTER_FIELDS,
    generate_filter_name,
    parse_advanced_filter,
    parse_filter_value,
    simple_filter_to_saved,
    translate_condition,
    translate_simple_filter,
    validate_condition,
    validate_filter_expression,
)


def cond(field, operator, value, value_type):
    return SimpleCondition(field=field, operator=operator, value=value, value_type=value_type)


class TestParseValue:
    def test_booleans(self):
        assert parse_filter_value(" Yes ", "boolean") is True
        assert parse_filter_value("0", "boolean") is False
        assert parse_filter_value("maybe", "boolean") is None

    def test_percentage_stays_in_percent(self):
        assert parse_filter_value("5%", "percentage") == 5
        assert parse_filter_value("2.5", "percentage") == 2.5

    def test_currency_suffixes(self):
        assert parse_filter_value("10k", "currency") == 10_000
        assert parse_filter_value("1.5m", "currency") == 1_500_000
        assert parse_filter_value("1,234 gp", "currency") == 1234

    def test_invalid_number(self):
        assert parse_filter_value("abc", "number") is None
        assert parse_filter_value("", "number") is None

    def test_string(self):
        assert parse_filter_value("  Rune  ", "string") == "Rune"


class TestTranslate:
    def test_column_and_record_prefixes(self):
        assert translate_condition(cond("roi", ">=", 5, FieldType.PERCENTAGE)) == "columns.roi >= 5"
        assert translate_condition(cond("low", "<", 1000, FieldType.CURRENCY)) == "record.low < 1000"
        assert translate_condition(cond("avg5m", ">", 2.5, FieldType.CURRENCY)) == "record.avg5m > 2.5"

    def test_booleans(self):
        assert translate_condition(cond("members", "==", True, FieldType.BOOLEAN)) == "record.members"
        assert translate_condition(cond("members", "==", False, FieldType.BOOLEAN)) == "not record.members"
        assert translate_condition(cond("members", "!=", True, FieldType.BOOLEAN)) == "not record.members"

    def test_unknown_field(self):
        with pytest.raises(ValueError):
            translate_condition(cond("nope", ">", 1, FieldType.NUMBER))

    def test_join(self):
        conditions = [cond("roi", ">", 2, FieldType.PERCENTAGE), cond("volume", ">", 1000, FieldType.NUMBER)]
        assert translate_simple_filter(conditions, "AND").code == "columns.roi > 2 and record.volume > 1000"
        assert translate_simple_filter(conditions, Logic.OR).code == "columns.roi > 2 or record.volume > 1000"

    def test_empty_conditions(self):
        with pytest.raises(ValueError):
            translate_simple_filter([], Logic.AND)

    def test_every_field_translates_to_valid_code(self):
        for field in FILTER_FIELDS:
            value = True if field.value_type == FieldType.BOOLEAN else 1
            code = translate_condition(cond(field.id, "==", value, field.value_type))
            assert validate_filter_expression(code), code


class TestValidateCondition:
    def test_valid(self):
        assert validate_condition(cond("roi", ">", 5, FieldType.PERCENTAGE)) is None

    def test_errors(self):
        assert validate_condition(cond("", ">", 5, FieldType.NUMBER)) == "Field is required"
        assert validate_condition(cond("nope", ">", 5, FieldType.NUMBER)) == "Unknown field: nope"
        assert validate_condition(cond("roi", "", 5, FieldType.NUMBER)) == "Operator is required"
        assert validate_condition(cond("roi", ">", None, FieldType.NUMBER)) == "Value is required"
        assert validate_condition(cond("roi", ">", "abc", FieldType.NUMBER)) == "Value must be a number"
        assert validate_condition(cond("members", "==", 1, FieldType.BOOLEAN)) == "Value must be true or false"


class TestNames:
    def test_single(self):
        assert generate_filter_name([cond("roi", ">=", 5, FieldType.PERCENTAGE)]) == "ROI % >= 5%"
        assert generate_filter_name([cond("profit", ">", 10000, FieldType.CURRENCY)]) == "Margin > 10k"
        assert generate_filter_name([cond("profit", ">", 2500000, FieldType.CURRENCY)]) == "Margin > 2.5m"

    def test_multiple(self):
        conditions = [cond("members", "==", False, FieldType.BOOLEAN), cond("limit", ">", 100, FieldType.NUMBER)]
        assert generate_filter_name(conditions, Logic.OR) == "Members Only == false OR Buy Limit > 100"

    def test_empty(self):
        assert generate_filter_name([]) == "Unnamed Filter"


class TestSavedFilter:
    def test_from_config(self):
        config = SimpleFilterConfig(conditions=[cond("roi", ">=", 5, FieldType.PERCENTAGE)])
        saved = simple_filter_to_saved(config, filter_id="filter_1")
        assert saved.id == "filter_1"
        assert saved.name == "ROI % >= 5%"
        assert saved.category == "Custom"
        assert saved.description == "AND filter with 1 condition(s)"
        assert saved.enabled and not saved.independent
        assert saved.expressions[0].code == "columns.roi >= 5"

    def test_generated_id(self):
        config = SimpleFilterConfig(name="Mine", conditions=[cond("limit", ">", 1, FieldType.NUMBER)])
        assert simple_filter_to_saved(config).id.startswith("filter_")


class TestParseAdvanced:
    def test_round_trip(self):
        conditions = [
            cond("roi", ">=", 5, FieldType.PERCENTAGE),
            cond("low", "<", 1000, FieldType.CURRENCY),
            cond("members", "==", False, FieldType.BOOLEAN),
        ]
        code = translate_simple_filter(conditions, Logic.AND).code
        parsed = parse_advanced_filter(code)
        assert parsed.logic == Logic.AND
        assert parsed.failed_count == 0
        assert [(c.field, c.operator, c.value) for c in parsed.conditions] == [
            ("roi", ">=", 5),
            ("low", "<", 1000),
            ("members", "==", False),
        ]

    def test_or_and_legacy_prefix(self):
        parsed = parse_advanced_filter("(item.volume > 10) or !item.favorite")
        assert parsed.logic == Logic.OR
        assert [(c.field, c.value) for c in parsed.conditions] == [("volume", 10), ("favorite", False)]

    def test_counts_failures(self):
        parsed = parse_advanced_filter("columns.roi > 2 and getRecord(1, 'high') > 5 and columns.nope > 1")
        assert len(parsed.conditions) == 1
        assert parsed.failed_count == 2

    def test_blank(self):
        assert parse_advanced_filter("  ") is None
