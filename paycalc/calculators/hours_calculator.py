"""Per-entry hours calculation for the pay calculator.

This module implements the business logic for turning one raw timesheet
entry into hours worked:
- Site time: (Clock-out - Clock-in) - Lunch, floored at zero
- Drive time: Distance / Speed x Driving factor + add-on hours
- Manual duration overrides for both

Bad input never raises. Each problem is recorded as a ParseIssue on the
result and the affected part contributes zero, so one broken record cannot
abort a report covering every employee.
"""

import datetime as dt
import logging
import math
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

from paycalc.calculators.distance import DistanceSource, resolve_distance
from paycalc.calculators.parsing import ParseIssue, parse_addon_quantity, parse_number
from paycalc.calculators.rules import DEFAULT_RULES, MissingClockOutPolicy, PayRules
from paycalc.calculators.time_utils import (
    DateLike,
    parse_timestamp,
    quantize_hours,
    timedelta_to_decimal_hours,
)
from paycalc.models.timesheet import TimesheetEntry

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
ZERO_HOURS = Decimal("0.00")


@dataclass
class EntryHours:
    """Result of the per-entry hours calculation.

    Attributes:
        hours: Hours worked (2 decimal places, never negative)
        distance: Driven miles for drive entries, zero otherwise
        distance_source: Where the distance came from
        issues: Problems met while reading the entry
    """

    hours: Decimal
    distance: Decimal = ZERO_HOURS
    distance_source: DistanceSource = DistanceSource.NONE
    issues: List[ParseIssue] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        """True if the entry was read without any issue."""
        return not self.issues


def round_to_quarter_hour(raw_hours: float) -> Decimal:
    """Apply the quarter-hour rounding rule to raw site hours.

    A shift of 7.75 up to 8 hours counts as a full 8. Otherwise the minutes
    past the hour are rounded down to 0, 15, 30 or 45. Minutes that round to
    a full 60 count as 0, so 9.995 h stays at 9.

    Args:
        raw_hours: Unrounded hours

    Returns:
        Rounded hours

    Example:
        >>> round_to_quarter_hour(7.9)
        Decimal('8')
        >>> round_to_quarter_hour(9.4)
        Decimal('9.25')
        >>> round_to_quarter_hour(6.1)
        Decimal('6')
    """
    if 7.75 <= raw_hours < 8.0:
        return Decimal("8")
    whole = math.floor(raw_hours)
    minutes = round((raw_hours - whole) * 60)
    if minutes >= 60:
        return Decimal(whole)
    quarter = (minutes // 15) * 15
    return Decimal(whole) + Decimal(quarter) / Decimal(60)


def _positive_override(value) -> Optional[Decimal]:
    """Return a manual override as Decimal if it is a positive number."""
    number = parse_number(value)
    if number is None or number <= 0:
        return None
    return quantize_hours(Decimal(repr(number)))


def _lunch_duration(
    entry: TimesheetEntry, fallback_date: DateLike, issues: List[ParseIssue]
) -> dt.timedelta:
    """Unpaid break length; zero unless both ends are present and ordered."""
    if not entry.lunch_start or not entry.lunch_end:
        return dt.timedelta(0)
    start = parse_timestamp(entry.lunch_start, fallback_date)
    end = parse_timestamp(entry.lunch_end, fallback_date)
    if start is None or end is None:
        issues.append(ParseIssue.MALFORMED_LUNCH)
        return dt.timedelta(0)
    if end <= start:
        issues.append(ParseIssue.INVERTED_LUNCH)
        return dt.timedelta(0)
    return end - start


def _site_hours(
    entry: TimesheetEntry,
    fallback_date: DateLike,
    rules: PayRules,
    issues: List[ParseIssue],
) -> Decimal:
    """Hours on site from the clock window minus lunch."""
    if not entry.clock_in:
        issues.append(ParseIssue.MISSING_CLOCK_IN)
        return ZERO_HOURS
    clock_in = parse_timestamp(entry.clock_in, fallback_date)
    if clock_in is None:
        issues.append(ParseIssue.MALFORMED_CLOCK_IN)
        return ZERO_HOURS

    if not entry.clock_out:
        issues.append(ParseIssue.MISSING_CLOCK_OUT)
        if rules.missing_clock_out_policy == MissingClockOutPolicy.ZERO:
            return ZERO_HOURS
        clock_out = clock_in + dt.timedelta(hours=float(rules.default_shift_hours))
    else:
        clock_out = parse_timestamp(entry.clock_out, clock_in.date())
        if clock_out is None:
            issues.append(ParseIssue.MALFORMED_CLOCK_OUT)
            return ZERO_HOURS

    worked = clock_out - clock_in - _lunch_duration(entry, clock_in.date(), issues)
    if worked <= dt.timedelta(0):
        issues.append(ParseIssue.NON_POSITIVE_DURATION)
        return ZERO_HOURS

    if rules.rounding_cutoff is not None and clock_in.date() >= rules.rounding_cutoff:
        raw_hours = worked.total_seconds() / 3600
        return quantize_hours(round_to_quarter_hour(raw_hours))
    return timedelta_to_decimal_hours(worked)


def compute_entry_hours(
    entry: TimesheetEntry,
    schedule_fallback_date: DateLike = None,
    rules: Optional[PayRules] = None,
) -> EntryHours:
    """Calculate hours worked (and distance driven) for one entry.

    Site entries: clock-out minus clock-in minus any lunch window. A missing
    clock-out is handled by ``rules.missing_clock_out_policy``.

    Drive entries: the distance is resolved (manual, GPS, odometer) and
    converted with ``distance / speed_mph x driving_factor``; each
    dump/washout adds 0.5 h and each shop-time unit 0.25 h.

    A positive ``manual_duration`` replaces the computed hours for both
    kinds. Entries of any other type contribute nothing.

    Args:
        entry: Raw timesheet entry
        schedule_fallback_date: Date anchoring time-only timestamps
        rules: Pay rules (defaults to DEFAULT_RULES)

    Returns:
        EntryHours with hours, distance and issues

    Example:
        >>> entry = TimesheetEntry.model_validate({
        ...     "type": "Site Time",
        ...     "clockIn": "2025-06-02T07:00:00.000Z",
        ...     "clockOut": "2025-06-02T15:30:00.000Z",
        ...     "lunchStart": "2025-06-02T11:30:00.000Z",
        ...     "lunchEnd": "2025-06-02T12:00:00.000Z",
        ... })
        >>> compute_entry_hours(entry).hours
        Decimal('8.00')
    """
    rules = rules or DEFAULT_RULES
    issues: List[ParseIssue] = []

    if entry.is_site_time:
        manual = _positive_override(entry.manual_duration)
        hours = (
            manual
            if manual is not None
            else _site_hours(entry, schedule_fallback_date, rules, issues)
        )
        result = EntryHours(hours=hours, issues=issues)

    elif entry.is_drive_time:
        distance = resolve_distance(entry, rules.earth_radius_mi)
        issues.extend(distance.issues)
        manual = _positive_override(entry.manual_duration)
        if manual is not None:
            hours = manual
        else:
            addon_hours = (
                parse_addon_quantity(entry.dump_washout) * rules.dump_washout_hours
                + parse_addon_quantity(entry.shop_time) * rules.shop_time_hours
            )
            drive_hours = distance.miles / rules.speed_mph * rules.driving_factor
            hours = quantize_hours(max(ZERO, drive_hours + addon_hours))
        result = EntryHours(
            hours=hours,
            distance=quantize_hours(distance.miles),
            distance_source=distance.source,
            issues=issues,
        )

    else:
        issues.append(ParseIssue.UNKNOWN_TYPE)
        result = EntryHours(hours=ZERO_HOURS, issues=issues)

    if result.issues:
        logger.debug(
            f"Record {entry.record_id} ({entry.employee}, {entry.type!r}) "
            f"read with issues: {[i.value for i in result.issues]}"
        )
    return result
