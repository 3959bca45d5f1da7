"""Tests for clock, timestamp parsing and calendar helpers."""

from datetime import date, datetime, timezone

import pytest
import pytz

from chartkit.core.errors import ConfigurationError
from chartkit.core.time import (
    Clock,
    days_in_month,
    load_timezone,
    parse_timestamp,
    shift_months,
    to_wall_clock,
)


def test_load_timezone_none_is_local():
    """No timezone means host-local time."""
    assert load_timezone(None) is None
    assert load_timezone("") is None


def test_load_timezone_invalid():
    """Unknown zones fail with a configuration error."""
    with pytest.raises(ConfigurationError, match="Invalid timezone"):
        load_timezone("Mars/Olympus_Mons")


def test_clock_fixed_now():
    """A fixed instant is reported unchanged."""
    clock = Clock(now=datetime(2024, 3, 15, 12, 0))

    assert clock.now() == datetime(2024, 3, 15, 12, 0)


def test_clock_fixed_aware_now_in_zone():
    """Aware fixed instants are shown as wall-clock time in the clock zone."""
    clock = Clock("America/New_York", now=datetime(2024, 7, 1, 2, 0, tzinfo=timezone.utc))

    # 02:00 UTC is 22:00 the previous day in New York (EDT)
    assert clock.now() == datetime(2024, 6, 30, 22, 0)


def test_clock_system_time_is_naive():
    """Clock without fixed instant returns naive wall-clock time."""
    assert Clock("UTC").now().tzinfo is None
    assert Clock().now().tzinfo is None


def test_to_wall_clock_keeps_naive():
    """Naive datetimes are already wall-clock time."""
    dt = datetime(2024, 1, 1, 5, 0)

    assert to_wall_clock(dt, pytz.timezone("Asia/Tokyo")) is dt


@pytest.mark.parametrize(
    "value,expected",
    [
        ("2024-03-01", datetime(2024, 3, 1)),
        ("2024-03-01 14:30:00", datetime(2024, 3, 1, 14, 30)),
        ("2024-03-01T14:30:00", datetime(2024, 3, 1, 14, 30)),
        ("01-03-2024", datetime(2024, 3, 1)),
        ("01-03-2024 14:30:00", datetime(2024, 3, 1, 14, 30)),
        ("2024/03/01", datetime(2024, 3, 1)),
        ("03-2024", datetime(2024, 3, 1)),
        ("  2024-03-01  ", datetime(2024, 3, 1)),
        (date(2024, 3, 1), datetime(2024, 3, 1)),
        (datetime(2024, 3, 1, 9, 0), datetime(2024, 3, 1, 9, 0)),
    ],
)
def test_parse_timestamp_formats(value, expected):
    """Supported timestamp shapes parse to naive datetimes."""
    assert parse_timestamp(value) == expected


def test_parse_timestamp_zulu_into_zone():
    """Zulu suffix is UTC, converted into the requested zone."""
    result = parse_timestamp("2024-01-15T12:00:00Z", pytz.timezone("Europe/Brussels"))

    assert result == datetime(2024, 1, 15, 13, 0)


def test_parse_timestamp_epoch():
    """Epoch seconds are read in the requested zone."""
    assert parse_timestamp(0, pytz.utc) == datetime(1970, 1, 1)
    assert parse_timestamp(86400.0, pytz.utc) == datetime(1970, 1, 2)


@pytest.mark.parametrize("value", ["", "   ", "yesterday", "2024-13-45", None, True, [2024, 3, 1]])
def test_parse_timestamp_invalid(value):
    """Unparsable values raise ValueError."""
    with pytest.raises(ValueError):
        parse_timestamp(value)


@pytest.mark.parametrize(
    "year,month,expected",
    [(2023, 2, 28), (2024, 2, 29), (1900, 2, 28), (2000, 2, 29), (2024, 1, 31), (2024, 4, 30)],
)
def test_days_in_month(year, month, expected):
    """Month lengths follow the Gregorian calendar."""
    assert days_in_month(year, month) == expected


@pytest.mark.parametrize(
    "year,month,delta,expected",
    [
        (2024, 3, 0, (2024, 3)),
        (2024, 3, -2, (2024, 1)),
        (2024, 1, -1, (2023, 12)),
        (2024, 12, 1, (2025, 1)),
        (2024, 3, -27, (2021, 12)),
    ],
)
def test_shift_months(year, month, delta, expected):
    """Month shifting wraps across years."""
    assert shift_months(year, month, delta) == expected
