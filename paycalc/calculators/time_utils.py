"""Time calculation utilities for the pay calculator.

This module provides low-level utilities for time calculations including:
- Parsing the loose timestamp strings stored on timesheet records
- Converting between timedelta and decimal hours
- UTC week boundaries for weekly payroll

All date math is UTC-anchored. Timestamps are read as wall-clock times and
labelled UTC, so the same record lands on the same calendar day regardless
of the machine's local timezone.
"""

import datetime as dt
import logging
import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

import pandas as pd

logger = logging.getLogger(__name__)

DateLike = Union[dt.date, dt.datetime, str, None]

_ISO_RE = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})"
    r"(?:[T ](\d{2}):(\d{2})(?::(\d{2})(?:\.\d+)?)?)?"
)
_MDY_RE = re.compile(
    r"^(\d{1,2})/(\d{1,2})/(\d{4})"
    r"(?:\s+(\d{1,2}):(\d{2})(?::(\d{2}))?(?:\s*(AM|PM))?)?",
    re.IGNORECASE,
)
_TIME_RE = re.compile(
    r"^(\d{1,2}):(\d{2})(?::(\d{2}))?(?:\s*(AM|PM))?$", re.IGNORECASE
)

HOURS_QUANTUM = Decimal("0.01")


def _to_24_hour(hour: int, meridiem: Optional[str]) -> int:
    """Convert a 12-hour clock hour to 24-hour form.

    Example:
        >>> _to_24_hour(12, "AM")
        0
        >>> _to_24_hour(1, "pm")
        13
    """
    if not meridiem:
        return hour
    meridiem = meridiem.upper()
    if meridiem == "PM" and hour < 12:
        return hour + 12
    if meridiem == "AM" and hour == 12:
        return 0
    return hour


def to_date(value: DateLike) -> Optional[dt.date]:
    """Coerce a date, datetime or timestamp string to a UTC calendar date.

    Args:
        value: Date-like value

    Returns:
        The calendar date, or None if it cannot be read
    """
    if value is None:
        return None
    if isinstance(value, dt.datetime):
        if value.tzinfo is not None:
            value = value.astimezone(dt.timezone.utc)
        return value.date()
    if isinstance(value, dt.date):
        return value
    parsed = parse_timestamp(value)
    return parsed.date() if parsed else None


def parse_timestamp(
    value: Optional[str], fallback_date: DateLike = None
) -> Optional[dt.datetime]:
    """Parse a timesheet timestamp into a UTC-aware datetime.

    Accepted forms:
    - ISO 8601 (``2025-06-02T07:00:00.000Z``, ``2025-06-02T07:00``,
      ``2025-06-02 07:00:00-07:00``); any zone marker is dropped and the
      wall-clock time is taken as UTC
    - US style ``6/2/2025 7:00 AM`` (seconds and meridiem optional)
    - bare date ``2025-06-02`` (midnight)
    - bare time ``07:00`` or ``7:00 PM``, anchored on ``fallback_date``
    - anything pandas can read, as a last resort

    Args:
        value: Raw timestamp string
        fallback_date: Date used to anchor time-only values

    Returns:
        UTC-aware datetime, or None if the value cannot be read

    Example:
        >>> parse_timestamp("6/2/2025 1:30 PM")
        datetime.datetime(2025, 6, 2, 13, 30, tzinfo=datetime.timezone.utc)
        >>> parse_timestamp("07:15", dt.date(2025, 6, 2))
        datetime.datetime(2025, 6, 2, 7, 15, tzinfo=datetime.timezone.utc)
        >>> parse_timestamp("not a time") is None
        True
    """
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None

    try:
        match = _ISO_RE.match(text)
        if match:
            year, month, day, hour, minute, second = match.groups()
            return dt.datetime(
                int(year),
                int(month),
                int(day),
                int(hour or 0),
                int(minute or 0),
                int(second or 0),
                tzinfo=dt.timezone.utc,
            )

        match = _MDY_RE.match(text)
        if match:
            month, day, year, hour, minute, second, meridiem = match.groups()
            return dt.datetime(
                int(year),
                int(month),
                int(day),
                _to_24_hour(int(hour or 0), meridiem),
                int(minute or 0),
                int(second or 0),
                tzinfo=dt.timezone.utc,
            )

        match = _TIME_RE.match(text)
        if match:
            anchor = to_date(fallback_date)
            if anchor is None:
                logger.debug(f"Time-only value {text!r} has no fallback date")
                return None
            hour, minute, second, meridiem = match.groups()
            return dt.datetime.combine(
                anchor,
                dt.time(
                    _to_24_hour(int(hour), meridiem), int(minute), int(second or 0)
                ),
                tzinfo=dt.timezone.utc,
            )
    except ValueError as e:
        # Out-of-range components, e.g. month 13 or hour 25
        logger.debug(f"Unreadable timestamp {text!r}: {e}")
        return None

    try:
        parsed = pd.to_datetime(text, utc=True)
    except (ValueError, TypeError, OverflowError) as e:
        logger.debug(f"Unreadable timestamp {text!r}: {e}")
        return None
    if pd.isna(parsed):
        return None
    return parsed.to_pydatetime()


def timedelta_to_decimal_hours(td: dt.timedelta) -> Decimal:
    """Convert a timedelta to decimal hours with 2 decimal precision.

    Args:
        td: Timedelta to convert

    Returns:
        Decimal hours (rounded half-up to 2 decimal places)

    Example:
        >>> timedelta_to_decimal_hours(dt.timedelta(hours=8))
        Decimal('8.00')
        >>> timedelta_to_decimal_hours(dt.timedelta(hours=7, minutes=30))
        Decimal('7.50')
        >>> timedelta_to_decimal_hours(dt.timedelta(minutes=10))
        Decimal('0.17')
    """
    hours = Decimal(str(td.total_seconds())) / Decimal("3600")
    return quantize_hours(hours)


def quantize_hours(hours: Decimal) -> Decimal:
    """Round hours (or money) to 2 decimal places, half-up."""
    return hours.quantize(HOURS_QUANTUM, rounding=ROUND_HALF_UP)


def start_of_week(value: DateLike) -> dt.date:
    """Return the Monday starting the UTC week containing ``value``.

    Raises:
        ValueError: If value cannot be read as a date

    Example:
        >>> start_of_week(dt.date(2025, 6, 4))
        datetime.date(2025, 6, 2)
        >>> start_of_week(dt.date(2025, 6, 8))
        datetime.date(2025, 6, 2)
    """
    day = to_date(value)
    if day is None:
        raise ValueError(f"Cannot determine week for {value!r}")
    return day - dt.timedelta(days=day.weekday())


def end_of_week(value: DateLike) -> dt.date:
    """Return the Sunday ending the UTC week containing ``value``."""
    return start_of_week(value) + dt.timedelta(days=6)


def add_weeks(day: dt.date, weeks: int) -> dt.date:
    """Shift a date by a whole number of weeks (negative goes back)."""
    return day + dt.timedelta(weeks=weeks)


def iso_week_number(day: dt.date) -> int:
    """ISO 8601 week number (1-53) of a date.

    Example:
        >>> iso_week_number(dt.date(2025, 1, 1))
        1
    """
    return day.isocalendar()[1]
