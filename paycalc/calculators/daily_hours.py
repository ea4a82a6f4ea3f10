"""Daily Regular/Overtime/Doubletime attribution for the pay calculator.

This module implements the per employee-day part of the calculation:
- Grouping entries by employee and UTC calendar date of clock-in
- Daily totals: Regular 0-8 h, Overtime 8-12 h, Doubletime 12 h+
- Progressive attribution of those bands onto the individual entries

Bands are filled in clock-in order. With split shifts of 6 h and 5 h the
first entry is all Regular and the second gets 2 h Regular and 3 h
Overtime. Drive time is paid separately at the travel rate and never
counts toward the daily thresholds.
"""

import datetime as dt
import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from paycalc.calculators.hours_calculator import EntryHours, compute_entry_hours
from paycalc.calculators.parsing import ParseIssue, parse_number, to_decimal
from paycalc.calculators.rates import parse_rate, resolve_site_rate, resolve_travel_rate
from paycalc.calculators.rules import DEFAULT_RULES, PayRules
from paycalc.calculators.time_utils import DateLike, parse_timestamp, quantize_hours
from paycalc.models.employee import EmployeeProfile
from paycalc.models.timesheet import TimesheetEntry

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")

DayKey = Tuple[str, dt.date]


@dataclass
class DayEntry:
    """A timesheet entry with its computed hours, ready for grouping.

    Attributes:
        entry: The raw timesheet entry
        clock_in: Parsed clock-in (UTC)
        result: Computed hours and distance
        context: Opaque caller data carried through to the attribution
            (the aggregator stores the owning schedule here)
    """

    entry: TimesheetEntry
    clock_in: dt.datetime
    result: EntryHours
    context: Any = None

    @property
    def hours(self) -> Decimal:
        return self.result.hours

    @property
    def work_date(self) -> dt.date:
        """UTC calendar date the entry belongs to."""
        return self.clock_in.date()


@dataclass
class DayAggregate:
    """All site and drive entries of one employee on one calendar day.

    Attributes:
        employee_key: Lower-cased employee identifier
        date: UTC calendar date
        entries: Entries in input order
        site_hours: Total site hours
        travel_hours: Total drive hours
        per_diem: Sum of per-diem allowances
        day_rate_site: Last non-empty per-entry site rate seen
        day_rate_drive: Last non-empty per-entry drive rate seen
    """

    employee_key: str
    date: dt.date
    entries: List[DayEntry] = field(default_factory=list)
    site_hours: Decimal = ZERO
    travel_hours: Decimal = ZERO
    per_diem: Decimal = ZERO
    day_rate_site: Optional[Decimal] = None
    day_rate_drive: Optional[Decimal] = None

    def add(self, day_entry: DayEntry) -> None:
        """Add an entry, updating totals and the day-level rate overrides.

        Rate overrides follow input order: a later entry's override
        replaces an earlier one regardless of clock-in time.
        """
        entry = day_entry.entry
        self.entries.append(day_entry)

        if entry.is_site_time:
            self.site_hours += day_entry.hours
        elif entry.is_drive_time:
            self.travel_hours += day_entry.hours

        per_diem = parse_number(entry.per_diem)
        if per_diem is not None:
            self.per_diem += to_decimal(per_diem)

        site_rate = parse_rate(entry.hourly_rate_site)
        drive_rate = parse_rate(entry.hourly_rate_drive)
        if site_rate is not None:
            self.day_rate_site = site_rate
        if drive_rate is not None:
            self.day_rate_drive = drive_rate

    @property
    def site_entries(self) -> List[DayEntry]:
        """Site entries sorted by clock-in (stable for equal times)."""
        return sorted(
            (e for e in self.entries if e.entry.is_site_time),
            key=lambda e: e.clock_in,
        )

    @property
    def drive_entries(self) -> List[DayEntry]:
        return [e for e in self.entries if e.entry.is_drive_time]


@dataclass
class DailyTotals:
    """Banded hour totals of one employee-day."""

    regular: Decimal
    overtime: Decimal
    doubletime: Decimal
    travel: Decimal

    @property
    def total(self) -> Decimal:
        return self.regular + self.overtime + self.doubletime + self.travel


@dataclass
class EntryAttribution:
    """Hours and pay attributed to one entry of an employee-day.

    Attributes:
        day_entry: The entry the amounts belong to
        reg_hours: Hours in the Regular band
        ot_hours: Hours in the Overtime band
        dt_hours: Hours in the Doubletime band
        travel_hours: Drive hours (drive entries only)
        site_rate: Site rate applied to this entry
        travel_rate: Travel rate applied to this entry
        reg_pay: reg_hours x site_rate
        ot_pay: ot_hours x site_rate x 1.5
        dt_pay: dt_hours x site_rate x 2.0
        travel_pay: travel_hours x travel_rate
    """

    day_entry: DayEntry
    reg_hours: Decimal = ZERO
    ot_hours: Decimal = ZERO
    dt_hours: Decimal = ZERO
    travel_hours: Decimal = ZERO
    site_rate: Decimal = ZERO
    travel_rate: Decimal = ZERO
    reg_pay: Decimal = ZERO
    ot_pay: Decimal = ZERO
    dt_pay: Decimal = ZERO
    travel_pay: Decimal = ZERO

    @property
    def site_hours(self) -> Decimal:
        return self.reg_hours + self.ot_hours + self.dt_hours

    @property
    def gross_pay(self) -> Decimal:
        return self.reg_pay + self.ot_pay + self.dt_pay + self.travel_pay

    @property
    def subject_wages(self) -> Decimal:
        """Straight-time wages: entry hours at the applicable rate."""
        entry = self.day_entry.entry
        if entry.is_site_time:
            return quantize_hours(self.day_entry.hours * self.site_rate)
        if entry.is_drive_time:
            return quantize_hours(self.day_entry.hours * self.travel_rate)
        return ZERO


def build_day_entry(
    entry: TimesheetEntry,
    schedule_fallback_date: DateLike = None,
    rules: Optional[PayRules] = None,
    context: Any = None,
) -> Optional[DayEntry]:
    """Compute an entry's hours and pin it to its UTC work date.

    Args:
        entry: Raw timesheet entry
        schedule_fallback_date: Date anchoring time-only timestamps
        rules: Pay rules
        context: Caller data to carry along

    Returns:
        DayEntry, or None when the clock-in cannot be read (the entry has
        no day to belong to)
    """
    clock_in = parse_timestamp(entry.clock_in, schedule_fallback_date)
    if clock_in is None:
        logger.warning(
            f"Skipping record {entry.record_id} for {entry.employee or '<unknown>'}: "
            f"unreadable clock-in {entry.clock_in!r}"
        )
        return None
    result = compute_entry_hours(entry, schedule_fallback_date, rules)
    return DayEntry(entry=entry, clock_in=clock_in, result=result, context=context)


def group_entries_by_day(day_entries: Iterable[DayEntry]) -> Dict[DayKey, DayAggregate]:
    """Group entries by (employee, UTC date) in first-seen order.

    Entries that are neither site nor drive time are left out.

    Args:
        day_entries: Entries with computed hours

    Returns:
        Ordered mapping of (employee_key, date) to DayAggregate
    """
    days: Dict[DayKey, DayAggregate] = OrderedDict()
    skipped = 0

    for day_entry in day_entries:
        entry = day_entry.entry
        if not (entry.is_site_time or entry.is_drive_time):
            skipped += 1
            continue
        key = (entry.employee_key, day_entry.work_date)
        if key not in days:
            days[key] = DayAggregate(employee_key=key[0], date=key[1])
        days[key].add(day_entry)

    if skipped:
        logger.debug(f"Left out {skipped} entries of unknown type")
    return days


def calculate_daily_totals(
    day: DayAggregate, rules: Optional[PayRules] = None
) -> DailyTotals:
    """Split a day's site hours into Regular, Overtime and Doubletime.

    Regular = min(8, H), Overtime = min(4, max(0, H - 8)),
    Doubletime = max(0, H - 12), with H the day's site hours.

    Example:
        >>> day = DayAggregate("jdoe", dt.date(2025, 6, 2), site_hours=Decimal("13"))
        >>> totals = calculate_daily_totals(day)
        >>> (totals.regular, totals.overtime, totals.doubletime)
        (Decimal('8.00'), Decimal('4.00'), Decimal('1.00'))
    """
    rules = rules or DEFAULT_RULES
    hours = day.site_hours
    zero = Decimal("0")
    return DailyTotals(
        regular=quantize_hours(min(rules.regular_threshold, hours)),
        overtime=quantize_hours(
            min(rules.overtime_cap, max(zero, hours - rules.regular_threshold))
        ),
        doubletime=quantize_hours(max(zero, hours - rules.overtime_threshold)),
        travel=quantize_hours(day.travel_hours),
    )


def attribute_daily_hours(
    day: DayAggregate,
    profile: Optional[EmployeeProfile] = None,
    rules: Optional[PayRules] = None,
) -> List[EntryAttribution]:
    """Attribute the day's Regular/Overtime/Doubletime bands to its entries.

    Site entries are walked in clock-in order with a running tally of site
    hours. For an entry spanning tally ``start`` to ``end``:

        reg = max(0, min(8, end) - min(8, start))
        ot  = max(0, min(12, end) - min(12, max(8, start)))
        dt  = max(0, end - max(12, start))

    Drive entries are paid in full at the travel rate. Rates resolve per
    entry as entry override > day override > profile > default.

    Args:
        day: The employee-day
        profile: Employee profile for rate fallback
        rules: Pay rules

    Returns:
        One EntryAttribution per entry: site entries in clock-in order,
        then drive entries in input order, then entries of any other type

    Example:
        >>> entry = TimesheetEntry.model_validate({
        ...     "employee": "jdoe", "type": "Site Time",
        ...     "clockIn": "2025-06-02T05:00:00Z", "clockOut": "2025-06-02T18:00:00Z",
        ... })
        >>> days = group_entries_by_day([build_day_entry(entry)])
        >>> day = days[("jdoe", dt.date(2025, 6, 2))]
        >>> a = attribute_daily_hours(day)[0]
        >>> (a.reg_hours, a.ot_hours, a.dt_hours)
        (Decimal('8.00'), Decimal('4.00'), Decimal('1.00'))
    """
    rules = rules or DEFAULT_RULES
    zero = Decimal("0")
    regular_limit = rules.regular_threshold
    overtime_limit = rules.overtime_threshold

    attributions: List[EntryAttribution] = []
    tally = zero

    for day_entry in day.site_entries:
        entry = day_entry.entry
        site_rate = resolve_site_rate(
            parse_rate(entry.hourly_rate_site), day.day_rate_site, profile, rules
        )
        travel_rate = resolve_travel_rate(
            parse_rate(entry.hourly_rate_drive), day.day_rate_drive, profile, rules
        )

        start_tally = tally
        end_tally = start_tally + day_entry.hours
        tally = end_tally

        reg_hours = quantize_hours(
            max(zero, min(regular_limit, end_tally) - min(regular_limit, start_tally))
        )
        ot_hours = quantize_hours(
            max(
                zero,
                min(overtime_limit, end_tally)
                - min(overtime_limit, max(regular_limit, start_tally)),
            )
        )
        dt_hours = quantize_hours(
            max(zero, end_tally - max(overtime_limit, start_tally))
        )

        attributions.append(
            EntryAttribution(
                day_entry=day_entry,
                reg_hours=reg_hours,
                ot_hours=ot_hours,
                dt_hours=dt_hours,
                site_rate=site_rate,
                travel_rate=travel_rate,
                reg_pay=quantize_hours(reg_hours * site_rate),
                ot_pay=quantize_hours(ot_hours * site_rate * rules.overtime_multiplier),
                dt_pay=quantize_hours(
                    dt_hours * site_rate * rules.doubletime_multiplier
                ),
            )
        )

    for day_entry in day.drive_entries:
        entry = day_entry.entry
        site_rate = resolve_site_rate(
            parse_rate(entry.hourly_rate_site), day.day_rate_site, profile, rules
        )
        travel_rate = resolve_travel_rate(
            parse_rate(entry.hourly_rate_drive), day.day_rate_drive, profile, rules
        )
        attributions.append(
            EntryAttribution(
                day_entry=day_entry,
                travel_hours=day_entry.hours,
                site_rate=site_rate,
                travel_rate=travel_rate,
                travel_pay=quantize_hours(day_entry.hours * travel_rate),
            )
        )

    for day_entry in day.entries:
        entry = day_entry.entry
        if not (entry.is_site_time or entry.is_drive_time):
            attributions.append(EntryAttribution(day_entry=day_entry))

    return attributions


def calculate_batch(
    entries: Iterable[TimesheetEntry],
    profiles: Optional[Mapping[str, EmployeeProfile]] = None,
    schedule_fallback_date: DateLike = None,
    rules: Optional[PayRules] = None,
) -> List[EntryAttribution]:
    """Run the full calculation over a flat batch of entries.

    Entries are grouped by employee-day, each day is attributed
    independently, and the results are concatenated in first-seen day
    order. Unreadable entries are skipped; nothing is cached between calls.

    Args:
        entries: Raw timesheet entries, any order
        profiles: Employee profiles keyed by lower-cased identifier
        schedule_fallback_date: Date anchoring time-only timestamps
        rules: Pay rules

    Returns:
        EntryAttribution for every site and drive entry with a readable
        clock-in
    """
    rules = rules or DEFAULT_RULES
    profiles = profiles or {}

    day_entries = []
    for entry in entries:
        day_entry = build_day_entry(entry, schedule_fallback_date, rules)
        if day_entry is not None:
            day_entries.append(day_entry)

    attributions: List[EntryAttribution] = []
    for (employee_key, _), day in group_entries_by_day(day_entries).items():
        attributions.extend(
            attribute_daily_hours(day, profiles.get(employee_key), rules)
        )
    return attributions


def collect_issues(attributions: Iterable[EntryAttribution]) -> Dict[ParseIssue, int]:
    """Count the parse issues behind a set of attributions."""
    counts: Dict[ParseIssue, int] = {}
    for attribution in attributions:
        for issue in attribution.day_entry.result.issues:
            counts[issue] = counts.get(issue, 0) + 1
    return counts
