"""Time and calendar utilities for chart bucketing.

Provides:
- An injectable clock so "today" is explicit and testable
- Timezone loading (pytz) with host-local time as the default
- Timestamp parsing into naive wall-clock datetimes
- Calendar arithmetic (days in month, month shifting)

All bucketing compares wall-clock values in a single zone: the configured
IANA zone, or the host's local time when no zone is configured.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, tzinfo
from typing import Any

import pytz

from .errors import ConfigurationError

__all__ = [
    "Clock",
    "days_in_month",
    "load_timezone",
    "parse_timestamp",
    "shift_months",
    "to_wall_clock",
]

# Fallback formats tried after ISO-8601, in order
_STRPTIME_FORMATS = (
    "%d-%m-%Y %H:%M:%S",
    "%d-%m-%Y %H:%M",
    "%d-%m-%Y",
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d",
    "%m-%Y",
    "%Y",
)


def load_timezone(timezone_name: str | None) -> tzinfo | None:
    """Load timezone by IANA name.

    Parameters
    ----------
    timezone_name
        IANA timezone name (e.g., "Europe/Brussels"), or None for host-local time

    Returns
    -------
    tzinfo | None
        pytz timezone, or None for host-local time

    Raises
    ------
    ConfigurationError
        If timezone is unknown
    """
    if not timezone_name:
        return None

    try:
        return pytz.timezone(timezone_name)
    except pytz.UnknownTimeZoneError as exc:
        raise ConfigurationError(f"Invalid timezone: {timezone_name}") from exc


def to_wall_clock(dt: datetime, tz: tzinfo | None = None) -> datetime:
    """Convert datetime to naive wall-clock time in a zone.

    Naive datetimes are taken to already be wall-clock time and are
    returned unchanged.

    Parameters
    ----------
    dt
        Datetime (naive or aware)
    tz
        Target timezone (None = host-local)

    Returns
    -------
    datetime
        Naive datetime
    """
    if dt.tzinfo is None:
        return dt

    if tz is None:
        return dt.astimezone().replace(tzinfo=None)

    return dt.astimezone(tz).replace(tzinfo=None)


class Clock:
    """Source of "now" for bucketing calls.

    Example
    -------
    >>> clock = Clock("Europe/Brussels")
    >>> today = clock.now().date()
    >>> frozen = Clock(now=datetime(2024, 3, 15, 12, 0))
    >>> frozen.now()
    datetime.datetime(2024, 3, 15, 12, 0)
    """

    def __init__(self, timezone: str | None = None, now: datetime | None = None) -> None:
        """Initialize clock.

        Parameters
        ----------
        timezone
            IANA timezone name (None = host-local time)
        now
            Fixed instant to report instead of the system time
        """
        self.timezone_name = timezone
        self.tz = load_timezone(timezone)
        self._fixed_now = now

    def now(self) -> datetime:
        """Get current wall-clock time in the clock's zone.

        Returns
        -------
        datetime
            Naive datetime
        """
        if self._fixed_now is not None:
            return to_wall_clock(self._fixed_now, self.tz)

        if self.tz is None:
            return datetime.now()

        return datetime.now(self.tz).replace(tzinfo=None)

    def __repr__(self) -> str:
        return f"Clock(timezone={self.timezone_name!r}, now={self._fixed_now!r})"


def parse_timestamp(value: Any, tz: tzinfo | None = None) -> datetime:
    """Parse a record timestamp into naive wall-clock time.

    Supports:
    - datetime (aware values converted into ``tz``)
    - date (midnight)
    - int/float epoch seconds
    - ISO 8601: 2024-03-01, 2024-03-01 14:30:00, 2024-03-01T14:30:00Z
    - Day-first: 01-03-2024, 01-03-2024 14:30:00
    - Month-year: 03-2024

    Parameters
    ----------
    value
        Raw timestamp value
    tz
        Zone for wall-clock conversion (None = host-local)

    Returns
    -------
    datetime
        Naive datetime

    Raises
    ------
    ValueError
        If parsing fails
    """
    if isinstance(value, datetime):
        return to_wall_clock(value, tz)

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)

    if isinstance(value, bool):
        raise ValueError(f"Cannot parse timestamp: {value!r}")

    if isinstance(value, (int, float)):
        try:
            if tz is None:
                return datetime.fromtimestamp(value)
            return datetime.fromtimestamp(value, tz).replace(tzinfo=None)
        except (OverflowError, OSError) as exc:
            raise ValueError(f"Timestamp out of range: {value!r}") from exc

    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Cannot parse timestamp: {value!r}")

    text = value.strip()

    # Try ISO 8601 first
    try:
        return to_wall_clock(datetime.fromisoformat(text.replace("Z", "+00:00")), tz)
    except ValueError:
        pass

    for fmt in _STRPTIME_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue

    raise ValueError(f"Cannot parse timestamp: {value!r}")


def days_in_month(year: int, month: int) -> int:
    """Number of days in a calendar month (leap-year aware)."""
    return calendar.monthrange(year, month)[1]


def shift_months(year: int, month: int, delta: int) -> tuple[int, int]:
    """Shift a (year, month) pair by ``delta`` calendar months.

    Example
    -------
    >>> shift_months(2024, 1, -1)
    (2023, 12)
    """
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1
