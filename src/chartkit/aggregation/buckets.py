"""Bucket enumeration for time-based chart strategies.

Each bucket carries a canonical structured key used for matching and a
display label. Matching never compares formatted strings: a record joins a
bucket when its timestamp, truncated to the bucket granularity, equals the
bucket key.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum

from ..core.errors import ConfigurationError
from ..core.time import days_in_month, shift_months

__all__ = [
    "Bucket",
    "Granularity",
    "bucket_key",
    "day_buckets",
    "hour_buckets",
    "last_day_buckets",
    "last_month_buckets",
    "month_buckets",
    "year_buckets",
]

# Non-fancy label formats
HOUR_LABEL = "%d-%m-%Y %H:00:00"
DAY_LABEL = "%d-%m-%Y"
MONTH_LABEL = "%m-%Y"
YEAR_LABEL = "%Y"


class Granularity(str, Enum):
    """Truncation level of a bucket key."""

    HOUR = "hour"
    DAY = "day"
    MONTH = "month"
    YEAR = "year"


@dataclass(frozen=True)
class Bucket:
    """One chart bucket.

    Attributes
    ----------
    label : str
        Display label
    key : tuple[int, ...]
        Canonical match key, e.g. (2024, 3, 1) for a day bucket
    granularity : Granularity
        Truncation level the key was built at
    """

    label: str
    key: tuple[int, ...]
    granularity: Granularity


def bucket_key(dt: datetime, granularity: Granularity) -> tuple[int, ...]:
    """Truncate a wall-clock datetime to a bucket key.

    Example
    -------
    >>> bucket_key(datetime(2024, 3, 1, 14, 30), Granularity.DAY)
    (2024, 3, 1)
    """
    if granularity is Granularity.HOUR:
        return (dt.year, dt.month, dt.day, dt.hour)
    if granularity is Granularity.DAY:
        return (dt.year, dt.month, dt.day)
    if granularity is Granularity.MONTH:
        return (dt.year, dt.month)
    return (dt.year,)


def _day_label(instant: datetime, fancy: bool, date_pattern: str, plain: str) -> str:
    return instant.strftime(date_pattern if fancy else plain)


def _check_date(year: int, month: int, day: int = 1) -> None:
    try:
        date(year, month, day)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid calendar date {year:04d}-{month:02d}-{day:02d}: {exc}") from exc


def hour_buckets(day: int, month: int, year: int, *, fancy: bool = False, date_pattern: str = "") -> list[Bucket]:
    """Build the 24 hourly buckets of one calendar day.

    Raises
    ------
    ConfigurationError
        If the date does not exist
    """
    _check_date(year, month, day)
    buckets = []
    for hour in range(24):
        instant = datetime(year, month, day, hour)
        buckets.append(
            Bucket(
                label=_day_label(instant, fancy, date_pattern, HOUR_LABEL),
                key=bucket_key(instant, Granularity.HOUR),
                granularity=Granularity.HOUR,
            )
        )
    return buckets


def day_buckets(month: int, year: int, *, fancy: bool = False, date_pattern: str = "") -> list[Bucket]:
    """Build one bucket per day of a calendar month (28-31 buckets)."""
    _check_date(year, month)
    buckets = []
    for day in range(1, days_in_month(year, month) + 1):
        instant = datetime(year, month, day)
        buckets.append(
            Bucket(
                label=_day_label(instant, fancy, date_pattern, DAY_LABEL),
                key=bucket_key(instant, Granularity.DAY),
                granularity=Granularity.DAY,
            )
        )
    return buckets


def month_buckets(year: int, *, fancy: bool = False, month_pattern: str = "") -> list[Bucket]:
    """Build the 12 monthly buckets of a year."""
    _check_date(year, 1)
    buckets = []
    for month in range(1, 13):
        instant = datetime(year, month, 1)
        buckets.append(
            Bucket(
                label=instant.strftime(month_pattern if fancy else MONTH_LABEL),
                key=bucket_key(instant, Granularity.MONTH),
                granularity=Granularity.MONTH,
            )
        )
    return buckets


def year_buckets(current_year: int, count: int) -> list[Bucket]:
    """Build ``count`` yearly buckets ending at ``current_year``, oldest first."""
    return [
        Bucket(label=f"{year:04d}", key=(year,), granularity=Granularity.YEAR)
        for year in range(current_year - count + 1, current_year + 1)
    ]


def last_day_buckets(today: date, count: int, *, fancy: bool = False, date_pattern: str = "") -> list[Bucket]:
    """Build ``count`` daily buckets ending ``today``, oldest first."""
    buckets = []
    for offset in range(count - 1, -1, -1):
        day = today - timedelta(days=offset)
        instant = datetime(day.year, day.month, day.day)
        buckets.append(
            Bucket(
                label=_day_label(instant, fancy, date_pattern, DAY_LABEL),
                key=bucket_key(instant, Granularity.DAY),
                granularity=Granularity.DAY,
            )
        )
    return buckets


def last_month_buckets(today: date, count: int, *, fancy: bool = False, month_pattern: str = "") -> list[Bucket]:
    """Build ``count`` monthly buckets ending in the month of ``today``, oldest first.

    Uses calendar month arithmetic: the month before March 31 is February.
    """
    buckets = []
    for offset in range(count - 1, -1, -1):
        year, month = shift_months(today.year, today.month, -offset)
        instant = datetime(year, month, 1)
        buckets.append(
            Bucket(
                label=instant.strftime(month_pattern if fancy else MONTH_LABEL),
                key=bucket_key(instant, Granularity.MONTH),
                granularity=Granularity.MONTH,
            )
        )
    return buckets
