"""Tests for bucket enumeration."""

from datetime import date, datetime

import pytest

from chartkit.aggregation.buckets import (
    Granularity,
    bucket_key,
    day_buckets,
    hour_buckets,
    last_day_buckets,
    last_month_buckets,
    month_buckets,
    year_buckets,
)
from chartkit.core.errors import ConfigurationError


@pytest.mark.parametrize(
    "granularity,expected",
    [
        (Granularity.HOUR, (2024, 3, 1, 14)),
        (Granularity.DAY, (2024, 3, 1)),
        (Granularity.MONTH, (2024, 3)),
        (Granularity.YEAR, (2024,)),
    ],
)
def test_bucket_key_truncates(granularity, expected):
    """Keys drop everything below the granularity."""
    assert bucket_key(datetime(2024, 3, 1, 14, 45, 30), granularity) == expected


def test_hour_buckets_keys_and_labels():
    """Hour buckets cover 00:00 through 23:00 of the day."""
    buckets = hour_buckets(1, 3, 2024)

    assert [b.key for b in buckets] == [(2024, 3, 1, h) for h in range(24)]
    assert buckets[5].label == "01-03-2024 05:00:00"
    assert all(b.granularity is Granularity.HOUR for b in buckets)


def test_day_buckets_leap_year():
    """February has 29 buckets in a leap year."""
    buckets = day_buckets(2, 2024)

    assert len(buckets) == 29
    assert buckets[-1].key == (2024, 2, 29)
    assert buckets[-1].label == "29-02-2024"


def test_day_buckets_fancy():
    """Fancy labels apply the date pattern."""
    buckets = day_buckets(12, 2023, fancy=True, date_pattern="%Y/%m/%d")

    assert buckets[0].label == "2023/12/01"


def test_month_buckets():
    """One bucket per month."""
    buckets = month_buckets(2023)

    assert [b.key for b in buckets] == [(2023, m) for m in range(1, 13)]
    assert buckets[1].label == "02-2023"


def test_year_buckets_oldest_first():
    """Year buckets end at the current year."""
    buckets = year_buckets(2024, 3)

    assert [b.label for b in buckets] == ["2022", "2023", "2024"]
    assert [b.key for b in buckets] == [(2022,), (2023,), (2024,)]


def test_year_buckets_zero_count():
    """No buckets requested gives no buckets."""
    assert year_buckets(2024, 0) == []


def test_last_day_buckets_across_year():
    """Daily window crosses the year boundary."""
    buckets = last_day_buckets(date(2024, 1, 2), 4)

    assert [b.key for b in buckets] == [(2023, 12, 30), (2023, 12, 31), (2024, 1, 1), (2024, 1, 2)]


def test_last_month_buckets_across_year():
    """Monthly window crosses the year boundary."""
    buckets = last_month_buckets(date(2024, 2, 29), 4)

    assert [b.label for b in buckets] == ["11-2023", "12-2023", "01-2024", "02-2024"]
    assert all(b.granularity is Granularity.MONTH for b in buckets)


@pytest.mark.parametrize(
    "build",
    [
        lambda: day_buckets(13, 2024),
        lambda: day_buckets(0, 2024),
        lambda: hour_buckets(30, 2, 2024),
        lambda: hour_buckets(1, 13, 2024),
    ],
)
def test_nonexistent_dates_are_configuration_errors(build):
    """Out-of-range calendar parts raise ConfigurationError."""
    with pytest.raises(ConfigurationError, match="Invalid calendar date"):
        build()
