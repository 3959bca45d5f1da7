"""Reduction operations applied to the records of one bucket."""

from __future__ import annotations

import statistics
from collections.abc import Callable, Sequence
from decimal import Decimal
from enum import Enum
from typing import Any

from ..core.errors import ConfigurationError, ParseError
from .records import MISSING, lookup_field

__all__ = [
    "AggregateOp",
    "coerce_number",
    "parse_op",
    "reduce_records",
]

Number = int | float | Decimal


class AggregateOp(str, Enum):
    """Supported reduction operations."""

    COUNT = "count"
    SUM = "sum"
    AVG = "avg"
    MIN = "min"
    MAX = "max"
    MEDIAN = "median"


# Accepted spellings besides the canonical value
_ALIASES = {
    "average": AggregateOp.AVG,
    "mean": AggregateOp.AVG,
}


def parse_op(op: str | AggregateOp) -> AggregateOp:
    """Parse an operation name.

    Raises
    ------
    ConfigurationError
        If the operation is unknown
    """
    if isinstance(op, AggregateOp):
        return op

    name = str(op).strip().lower()
    if name in _ALIASES:
        return _ALIASES[name]

    try:
        return AggregateOp(name)
    except ValueError as exc:
        known = ", ".join(member.value for member in AggregateOp)
        raise ConfigurationError(f"Unknown aggregation operation: {op!r} (expected one of: {known})") from exc


def coerce_number(record: Any, field: str, value: Any) -> Number:
    """Convert an aggregate field value to a number.

    Numeric strings are accepted; anything else non-numeric raises ParseError.
    """
    if isinstance(value, bool):
        raise ParseError(record, field, value, "boolean is not a number")

    if isinstance(value, (int, float, Decimal)):
        return value

    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            return float(text)
        except ValueError as exc:
            raise ParseError(record, field, value, "not a number") from exc

    raise ParseError(record, field, value, "not a number")


def _avg(values: Sequence[Number]) -> Number:
    return sum(values) / len(values)


_REDUCERS: dict[AggregateOp, Callable[[Sequence[Number]], Number]] = {
    AggregateOp.SUM: sum,
    AggregateOp.AVG: _avg,
    AggregateOp.MIN: min,
    AggregateOp.MAX: max,
    AggregateOp.MEDIAN: statistics.median,
}


def reduce_records(records: Sequence[Any], field: str | None, op: AggregateOp | None) -> Number:
    """Reduce the records of one bucket to a single value.

    Without a field (or with COUNT) the value is the number of records.
    Otherwise records whose field is absent or None are skipped and the
    remaining values are reduced. No usable values gives 0 for every
    operation, so avg of an empty bucket is 0 rather than NaN.

    Parameters
    ----------
    records
        Records matched by the bucket
    field
        Numeric source field
    op
        Reduction operation

    Returns
    -------
    Number
        Bucket value
    """
    if field is None or op is None or op is AggregateOp.COUNT:
        return len(records)

    values = []
    for record in records:
        raw = lookup_field(record, field)
        if raw is MISSING or raw is None:
            continue
        values.append(coerce_number(record, field, raw))

    if not values:
        return 0

    # Decimal does not mix with float arithmetic
    if any(isinstance(value, Decimal) for value in values):
        values = [value if isinstance(value, Decimal) else Decimal(str(value)) for value in values]

    return _REDUCERS[op](values)
