"""Bucket records into time windows and reduce them to chart series.

Produces two aligned sequences, labels and values, for a chart builder to
consume. The record set is read-only during a call; mutating it while a
bucketing method runs is unsupported.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

from ..core.errors import ConfigurationError, ParseError
from ..core.time import Clock, parse_timestamp, to_wall_clock
from ..observability import get_logger, timing_context
from .buckets import (
    Bucket,
    Granularity,
    bucket_key,
    day_buckets,
    hour_buckets,
    last_day_buckets,
    last_month_buckets,
    month_buckets,
    year_buckets,
)
from .records import MISSING, get_field, lookup_field, normalize_path, resolve_path
from .reducers import AggregateOp, Number, coerce_number, parse_op, reduce_records

if TYPE_CHECKING:
    from ..core.config import Config

__all__ = [
    "PREAGGREGATED_FIELD",
    "AggregationConfig",
    "Aggregator",
    "ChartSeries",
]

# Field holding the final value of a preaggregated record
PREAGGREGATED_FIELD = "aggregate"

log = get_logger("aggregation")


@dataclass(frozen=True)
class AggregationConfig:
    """How records are read and reduced.

    Attributes
    ----------
    timestamp_field : str
        Field holding the record timestamp
    date_pattern : str
        strftime pattern for fancy hour/day labels
    month_pattern : str
        strftime pattern for fancy month labels
    preaggregated : bool
        Records already carry their bucket value in ``aggregate``
    aggregate_field : str | None
        Numeric field to reduce (None = count records)
    aggregate_op : AggregateOp | None
        Reduction operation
    timezone : str | None
        IANA zone used when no clock is given (None = host-local)
    """

    timestamp_field: str = "created_at"
    date_pattern: str = "%A %d %b, %Y"
    month_pattern: str = "%B, %Y"
    preaggregated: bool = False
    aggregate_field: str | None = None
    aggregate_op: AggregateOp | None = None
    timezone: str | None = None

    def __post_init__(self) -> None:
        if not self.timestamp_field:
            raise ConfigurationError("timestamp_field is required")

        if self.aggregate_op is not None:
            object.__setattr__(self, "aggregate_op", parse_op(self.aggregate_op))

        if self.aggregate_field and self.aggregate_op is None:
            raise ConfigurationError(
                f"aggregate_op is required when aggregate_field is set (field: {self.aggregate_field!r})"
            )

        if self.aggregate_op not in (None, AggregateOp.COUNT) and not self.aggregate_field:
            raise ConfigurationError(f"aggregate_field is required for operation '{self.aggregate_op.value}'")

    @classmethod
    def from_config(cls, config: Config) -> AggregationConfig:
        """Build from the ``aggregation`` and ``core`` sections of a loaded config.

        Raises
        ------
        ConfigurationError
            If the section contains unknown keys or invalid values
        """
        section = config.section("aggregation")
        known = {f.name for f in dataclasses.fields(cls)} - {"timezone"}
        unknown = set(section) - known
        if unknown:
            raise ConfigurationError(f"Unknown aggregation settings: {', '.join(sorted(unknown))}")

        return cls(timezone=config.get("core.timezone"), **section)


@dataclass
class ChartSeries:
    """Labels and values for one chart, index-aligned.

    ``matched`` maps each label to the records that produced its value. It
    is filled only for time buckets in non-preaggregated mode, and buckets
    sharing a label contribute to the same entry.
    """

    strategy: str
    labels: list[str] = field(default_factory=list)
    values: list[Number] = field(default_factory=list)
    matched: dict[str, list[Any]] = field(default_factory=dict)

    def append(self, label: str, value: Number) -> None:
        self.labels.append(label)
        self.values.append(value)

    def pairs(self) -> list[tuple[str, Number]]:
        return list(zip(self.labels, self.values))

    def __len__(self) -> int:
        return len(self.labels)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the payload consumed by chart builders."""
        return {
            "strategy": self.strategy,
            "labels": list(self.labels),
            "values": list(self.values),
        }


class Aggregator:
    """Time-bucketing aggregation engine.

    Setters return the aggregator so configuration can be chained; bucketing
    methods return a ``ChartSeries``.

    Example:
        >>> records = [{"created_at": "2024-03-01 09:15:00", "amount": 12}]
        >>> series = (
        ...     Aggregator(records)
        ...     .set_aggregation("amount", "sum")
        ...     .group_by_day(month=3, year=2024)
        ... )
        >>> series.values[0]
        12
    """

    def __init__(
        self,
        records: Iterable[Any] | None = None,
        config: AggregationConfig | None = None,
        *,
        clock: Clock | None = None,
    ) -> None:
        """Initialize aggregator.

        Parameters
        ----------
        records
            Record set (mappings or attribute objects)
        config
            Aggregation configuration (default: AggregationConfig())
        clock
            Source of "now" (default: Clock in ``config.timezone``)
        """
        self.records: list[Any] = list(records) if records is not None else []
        self.config = config or AggregationConfig()
        self.clock = clock or Clock(self.config.timezone)

    @classmethod
    def from_config(
        cls,
        config: Config,
        records: Iterable[Any] | None = None,
        *,
        clock: Clock | None = None,
    ) -> Aggregator:
        """Create aggregator from a loaded ``Config``."""
        return cls(records, AggregationConfig.from_config(config), clock=clock)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def _update(self, **changes: Any) -> Aggregator:
        self.config = dataclasses.replace(self.config, **changes)
        return self

    def set_records(self, records: Iterable[Any]) -> Aggregator:
        self.records = list(records)
        return self

    def set_timestamp_field(self, name: str) -> Aggregator:
        return self._update(timestamp_field=name)

    def set_date_pattern(self, pattern: str) -> Aggregator:
        return self._update(date_pattern=pattern)

    def set_month_pattern(self, pattern: str) -> Aggregator:
        return self._update(month_pattern=pattern)

    def set_preaggregated(self, preaggregated: bool) -> Aggregator:
        return self._update(preaggregated=bool(preaggregated))

    def set_aggregation(self, field_name: str | None, op: str | AggregateOp | None) -> Aggregator:
        """Reduce buckets by ``op`` over ``field_name``.

        Raises
        ------
        ConfigurationError
            If the operation is unknown or the field is missing
        """
        return self._update(aggregate_field=field_name, aggregate_op=op)

    def set_clock(self, clock: Clock) -> Aggregator:
        self.clock = clock
        return self

    # ------------------------------------------------------------------
    # Time bucket strategies
    # ------------------------------------------------------------------

    def _now(self, now: datetime | None) -> datetime:
        if now is not None:
            return to_wall_clock(now, self.clock.tz)
        return self.clock.now()

    def group_by_hour(
        self,
        day: int | None = None,
        month: int | None = None,
        year: int | None = None,
        fancy: bool = False,
        *,
        now: datetime | None = None,
    ) -> ChartSeries:
        """Group records into the 24 hours of a calendar day.

        Parameters
        ----------
        day, month, year
            Calendar day (each part defaults to today)
        fancy
            Label with the date pattern instead of ``dd-mm-YYYY HH:00:00``
        now
            Override for the clock

        Returns
        -------
        ChartSeries
            24 labels and values

        Raises
        ------
        ConfigurationError
            If the day does not exist
        """
        today = self._now(now)
        buckets = hour_buckets(
            day or today.day,
            month or today.month,
            year or today.year,
            fancy=fancy,
            date_pattern=self.config.date_pattern,
        )
        return self._resolve("group_by_hour", buckets)

    def group_by_day(
        self,
        month: int | None = None,
        year: int | None = None,
        fancy: bool = False,
        *,
        now: datetime | None = None,
    ) -> ChartSeries:
        """Group records into the days of a calendar month (28-31 buckets).

        Raises
        ------
        ConfigurationError
            If ``month`` or ``year`` is out of range
        """
        today = self._now(now)
        buckets = day_buckets(
            month or today.month,
            year or today.year,
            fancy=fancy,
            date_pattern=self.config.date_pattern,
        )
        return self._resolve("group_by_day", buckets)

    def group_by_month(
        self,
        year: int | None = None,
        fancy: bool = False,
        *,
        now: datetime | None = None,
    ) -> ChartSeries:
        """Group records into the 12 months of a year."""
        today = self._now(now)
        buckets = month_buckets(year or today.year, fancy=fancy, month_pattern=self.config.month_pattern)
        return self._resolve("group_by_month", buckets)

    def group_by_year(self, count: int = 4, *, now: datetime | None = None) -> ChartSeries:
        """Group records into the last ``count`` calendar years, oldest first."""
        today = self._now(now)
        return self._resolve("group_by_year", year_buckets(today.year, count))

    def last_by_day(self, count: int = 7, fancy: bool = False, *, now: datetime | None = None) -> ChartSeries:
        """Group records into the last ``count`` days ending today, oldest first."""
        today = self._now(now).date()
        buckets = last_day_buckets(today, count, fancy=fancy, date_pattern=self.config.date_pattern)
        return self._resolve("last_by_day", buckets)

    def last_by_month(self, count: int = 6, fancy: bool = False, *, now: datetime | None = None) -> ChartSeries:
        """Group records into the last ``count`` months ending this month, oldest first."""
        today = self._now(now).date()
        buckets = last_month_buckets(today, count, fancy=fancy, month_pattern=self.config.month_pattern)
        return self._resolve("last_by_month", buckets)

    def last_by_year(self, count: int = 4, *, now: datetime | None = None) -> ChartSeries:
        """Alias for ``group_by_year``."""
        return self.group_by_year(count, now=now)

    # ------------------------------------------------------------------
    # Column strategy
    # ------------------------------------------------------------------

    def group_by(
        self,
        column: str,
        relation: str | Sequence[str] | None = None,
        label_mapping: Mapping[Any, str] | None = None,
    ) -> ChartSeries:
        """Partition records by equality of ``column`` and count each partition.

        Partitions appear in order of first occurrence in the record set.

        Parameters
        ----------
        column
            Grouping field
        relation
            Field name, dot-separated path, or path segments followed from
            the first record of each partition to build its label
        label_mapping
            Replacement labels keyed by the raw label value: the grouping
            value, or the resolved ``relation`` value when ``relation`` is given

        Returns
        -------
        ChartSeries
            One label/value pair per partition

        Raises
        ------
        FieldNotFoundError
            If ``column`` or a ``relation`` segment is absent on a record
        ConfigurationError
            If ``relation`` is an empty path or has an empty segment
        """
        mapping = label_mapping or {}
        path = normalize_path(relation) if relation is not None else None

        with timing_context("group_by", component="aggregation", column=column, records=len(self.records)) as ctx:
            partitions: dict[Any, list[Any]] = {}
            for record in self.records:
                value = get_field(record, column)
                partitions.setdefault(_partition_key(value), []).append(record)

            series = ChartSeries(strategy="group_by")
            for members in partitions.values():
                first = members[0]
                raw_label = resolve_path(first, path) if path else get_field(first, column)
                series.append(_as_label(_remap(raw_label, mapping)), len(members))

            ctx["buckets"] = len(series)

        return series

    # ------------------------------------------------------------------
    # Bucket value resolution
    # ------------------------------------------------------------------

    def _resolve(self, strategy: str, buckets: list[Bucket]) -> ChartSeries:
        """Resolve one value per bucket.

        Records are indexed by normalized key once, then each bucket is a
        single lookup.
        """
        series = ChartSeries(strategy=strategy)
        if not buckets:
            return series

        granularity = buckets[0].granularity

        with timing_context(
            strategy,
            component="aggregation",
            buckets=len(buckets),
            records=len(self.records),
            preaggregated=self.config.preaggregated,
        ):
            index = self._index(granularity)

            for bucket in buckets:
                matched = index.get(bucket.key, [])

                if self.config.preaggregated:
                    value = self._preaggregated_value(matched[0]) if matched else 0
                else:
                    value = reduce_records(matched, self.config.aggregate_field, self.config.aggregate_op)
                    series.matched.setdefault(bucket.label, []).extend(matched)

                series.append(bucket.label, value)

        return series

    def _index(self, granularity: Granularity) -> dict[tuple[int, ...], list[Any]]:
        index: dict[tuple[int, ...], list[Any]] = {}
        for record in self.records:
            index.setdefault(bucket_key(self._timestamp(record), granularity), []).append(record)
        return index

    def _timestamp(self, record: Any) -> datetime:
        field_name = self.config.timestamp_field
        raw = lookup_field(record, field_name)

        if raw is MISSING or raw is None:
            log.warning(f"Record has no timestamp in field '{field_name}'")
            raise ParseError(record, field_name, None, "missing timestamp")

        try:
            return parse_timestamp(raw, self.clock.tz)
        except ValueError as exc:
            log.warning(f"Unparsable timestamp in field '{field_name}': {raw!r}")
            raise ParseError(record, field_name, raw, str(exc)) from exc

    def _preaggregated_value(self, record: Any) -> Number:
        raw = get_field(record, PREAGGREGATED_FIELD)
        if raw is None:
            return 0
        return coerce_number(record, PREAGGREGATED_FIELD, raw)

    def __repr__(self) -> str:
        return f"Aggregator(records={len(self.records)}, config={self.config!r}, clock={self.clock!r})"


def _partition_key(value: Any) -> Any:
    try:
        hash(value)
    except TypeError:
        return ("unhashable", repr(value))
    return value


def _remap(label: Any, mapping: Mapping[Any, str]) -> Any:
    try:
        return mapping.get(label, label)
    except TypeError:
        return label


def _as_label(label: Any) -> str:
    return label if isinstance(label, str) else str(label)
