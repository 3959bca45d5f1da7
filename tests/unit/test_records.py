"""Tests for record field access and reducers."""

from decimal import Decimal
from types import SimpleNamespace

import pytest

from chartkit.aggregation.records import MISSING, get_field, lookup_field, normalize_path, resolve_path
from chartkit.aggregation.reducers import AggregateOp, coerce_number, parse_op, reduce_records
from chartkit.core.errors import ConfigurationError, FieldNotFoundError, ParseError


def test_lookup_field_mapping_and_attributes():
    """Mappings and attribute objects are both records."""
    assert lookup_field({"a": 1}, "a") == 1
    assert lookup_field(SimpleNamespace(a=2), "a") == 2
    assert lookup_field({"a": 1}, "b") is MISSING
    assert lookup_field(SimpleNamespace(), "b") is MISSING


def test_none_is_a_present_value():
    """A field holding None still exists."""
    assert lookup_field({"a": None}, "a") is not MISSING
    assert get_field({"a": None}, "a") is None


def test_get_field_missing():
    """Missing fields raise FieldNotFoundError."""
    with pytest.raises(FieldNotFoundError) as exc_info:
        get_field({"a": 1}, "b")

    assert exc_info.value.segment == "b"


def test_normalize_path():
    """Paths come as dotted strings or segment sequences."""
    assert normalize_path("a.b.c") == ("a", "b", "c")
    assert normalize_path("a") == ("a",)
    assert normalize_path(["a", "b"]) == ("a", "b")


@pytest.mark.parametrize("path", ["", "a..b", [], ".a"])
def test_normalize_path_invalid(path):
    """Empty segments are a configuration error."""
    with pytest.raises(ConfigurationError, match="Invalid field path"):
        normalize_path(path)


def test_resolve_path_mixed_records():
    """Paths may cross mappings and attribute objects."""
    record = {"author": SimpleNamespace(profile={"name": "Ann"})}

    assert resolve_path(record, "author.profile.name") == "Ann"


def test_resolve_path_missing_segment():
    """The unresolved segment is reported."""
    record = {"author": {"name": "Ann"}}

    with pytest.raises(FieldNotFoundError) as exc_info:
        resolve_path(record, "author.team.name")

    assert exc_info.value.segment == "team"
    assert exc_info.value.path == ("author", "team", "name")
    assert "author.team.name" in str(exc_info.value)


@pytest.mark.parametrize(
    "name,expected",
    [
        ("sum", AggregateOp.SUM),
        ("AVG", AggregateOp.AVG),
        ("mean", AggregateOp.AVG),
        (" max ", AggregateOp.MAX),
        (AggregateOp.MIN, AggregateOp.MIN),
    ],
)
def test_parse_op(name, expected):
    """Operation names are case-insensitive with aliases."""
    assert parse_op(name) is expected


def test_parse_op_unknown():
    """Unknown operations list the supported ones."""
    with pytest.raises(ConfigurationError, match="expected one of"):
        parse_op("variance")


def test_coerce_number():
    """Numbers pass through, numeric strings are converted."""
    assert coerce_number({}, "v", 3) == 3
    assert coerce_number({}, "v", Decimal("2.5")) == Decimal("2.5")
    assert coerce_number({}, "v", " 7 ") == 7
    assert coerce_number({}, "v", "1e3") == 1000.0


@pytest.mark.parametrize("value", [True, "abc", [1], object()])
def test_coerce_number_invalid(value):
    """Non-numeric values raise ParseError naming the field."""
    with pytest.raises(ParseError) as exc_info:
        coerce_number({"v": value}, "v", value)

    assert exc_info.value.field == "v"


def test_reduce_records_count_ignores_field_values():
    """Count is the number of records, even without usable values."""
    records = [{"v": None}, {}, {"v": 1}]

    assert reduce_records(records, None, None) == 3
    assert reduce_records(records, "v", AggregateOp.COUNT) == 3


def test_reduce_records_empty_is_zero():
    """Empty input is 0 for every operation."""
    for op in AggregateOp:
        assert reduce_records([], "v", op) == 0


def test_reduce_records_median_even():
    """Median of an even-sized bucket averages the middle values."""
    records = [{"v": 1}, {"v": 2}, {"v": 3}, {"v": 10}]

    assert reduce_records(records, "v", AggregateOp.MEDIAN) == 2.5


def test_reduce_records_decimal_promotes_other_values():
    """A Decimal in the bucket turns the whole reduction into Decimal arithmetic."""
    records = [{"v": Decimal("2.50")}, {"v": "1.5"}, {"v": 0.5}, {"v": 2}]

    total = reduce_records(records, "v", AggregateOp.SUM)

    assert total == Decimal("6.50")
    assert isinstance(total, Decimal)
    assert reduce_records(records, "v", AggregateOp.AVG) == Decimal("1.625")
