"""Payroll aggregator for weekly payroll, workers-comp and fringe reporting.

This module turns schedules and their timesheet entries into reports:
- Attributed entries: every entry with its Regular/Overtime/Doubletime split,
  pay and the schedule it was recorded on
- Weekly payroll: one report per employee with a line per day (Mon-Sun UTC)
- Workers comp: pay and hours grouped by the schedule's classification item
- Fringe benefits: site-time pay grouped by the job's fringe-benefit type

The aggregator keeps no state between calls; the same input always produces
the same report.
"""

import datetime as dt
import logging
from collections import OrderedDict, defaultdict
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

import pandas as pd

from paycalc.calculators.daily_hours import (
    DayAggregate,
    EntryAttribution,
    attribute_daily_hours,
    build_day_entry,
    calculate_daily_totals,
    group_entries_by_day,
)
from paycalc.calculators.rates import parse_rate, profile_rates
from paycalc.calculators.rules import DEFAULT_RULES, PayRules
from paycalc.calculators.time_utils import (
    end_of_week,
    iso_week_number,
    quantize_hours,
    start_of_week,
)
from paycalc.models.employee import EmployeeProfile
from paycalc.models.schedule import Schedule
from paycalc.models.timesheet import TimesheetEntry
from paycalc.utils.logging_utils import LogContext, log_function_call

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")
WEEKDAY_LABELS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


@dataclass
class AttributedEntry:
    """An entry's attribution together with the schedule it belongs to.

    Attributes:
        attribution: Hours and pay attributed to the entry
        schedule: Schedule the entry was recorded on
    """

    attribution: EntryAttribution
    schedule: Schedule

    @property
    def entry(self) -> TimesheetEntry:
        return self.attribution.day_entry.entry

    @property
    def employee_key(self) -> str:
        return self.entry.employee_key

    @property
    def work_date(self) -> dt.date:
        return self.attribution.day_entry.work_date

    @property
    def hours(self) -> Decimal:
        return self.attribution.day_entry.hours

    @property
    def item(self) -> str:
        return self.schedule.classification

    def comp_cost(self, rate_per_100: Decimal) -> Decimal:
        """Estimated workers-comp cost: subject wages x rate per $100."""
        return quantize_hours(self.attribution.subject_wages * rate_per_100 / 100)


@dataclass
class DayReport:
    """One employee's payroll line for one day.

    Days without entries keep all amounts at zero.
    """

    date: dt.date
    regular: Decimal = ZERO
    overtime: Decimal = ZERO
    doubletime: Decimal = ZERO
    travel: Decimal = ZERO
    per_diem: Decimal = ZERO
    amount: Decimal = ZERO
    estimates: List[str] = field(default_factory=list)
    certified: bool = False

    @property
    def total_hours(self) -> Decimal:
        return self.regular + self.overtime + self.doubletime + self.travel

    @property
    def weekday(self) -> str:
        return WEEKDAY_LABELS[self.date.weekday()]


@dataclass
class EmployeeReport:
    """Weekly payroll for one employee.

    Attributes:
        employee_key: Lower-cased employee identifier
        display_name: Profile label, or the identifier for unknown employees
        site_rate: Profile site rate (default when no profile rate)
        travel_rate: Profile travel rate (site rate x factor when none)
        days: Seven DayReports, Monday first
        classification: Trade classification from the profile
    """

    employee_key: str
    display_name: str
    site_rate: Decimal
    travel_rate: Decimal
    days: List[DayReport]
    classification: Optional[str] = None

    def _sum(self, attribute: str) -> Decimal:
        return sum((getattr(day, attribute) for day in self.days), ZERO)

    @property
    def regular(self) -> Decimal:
        return self._sum("regular")

    @property
    def overtime(self) -> Decimal:
        return self._sum("overtime")

    @property
    def doubletime(self) -> Decimal:
        return self._sum("doubletime")

    @property
    def travel(self) -> Decimal:
        return self._sum("travel")

    @property
    def per_diem(self) -> Decimal:
        return self._sum("per_diem")

    @property
    def total_hours(self) -> Decimal:
        return self._sum("total_hours")

    @property
    def total_amount(self) -> Decimal:
        return self._sum("amount")

    @property
    def is_certified(self) -> bool:
        return any(day.certified for day in self.days)


@dataclass
class PayrollReport:
    """Weekly payroll for all employees with entries in the week."""

    week_start: dt.date
    week_end: dt.date
    employees: List[EmployeeReport] = field(default_factory=list)

    @property
    def week_number(self) -> int:
        """ISO week number of the reported week."""
        return iso_week_number(self.week_start)

    @property
    def total_amount(self) -> Decimal:
        return sum((report.total_amount for report in self.employees), ZERO)

    @property
    def total_hours(self) -> Decimal:
        return sum((report.total_hours for report in self.employees), ZERO)

    def get(self, employee: str) -> Optional[EmployeeReport]:
        key = employee.strip().lower()
        for report in self.employees:
            if report.employee_key == key:
                return report
        return None


@dataclass
class WorkersCompGroup:
    """Totals for one workers-comp classification item."""

    item: str
    rate_per_100: Decimal = ZERO
    total_amount: Decimal = ZERO
    total_hours: Decimal = ZERO
    subject_wages: Decimal = ZERO
    comp_cost: Decimal = ZERO
    record_count: int = 0


@dataclass
class WorkersCompReport:
    """Workers-comp summary over a date range.

    Attributes:
        start_date: First day of the range (inclusive)
        end_date: Last day of the range (inclusive)
        include_drive: Whether drive entries were counted
        groups: Totals per classification item, sorted by item
        records: Attributed entries behind the totals
    """

    start_date: dt.date
    end_date: dt.date
    include_drive: bool
    groups: List[WorkersCompGroup] = field(default_factory=list)
    records: List[AttributedEntry] = field(default_factory=list)

    @property
    def total_amount(self) -> Decimal:
        return sum((group.total_amount for group in self.groups), ZERO)

    @property
    def total_hours(self) -> Decimal:
        return sum((group.total_hours for group in self.groups), ZERO)

    @property
    def total_comp_cost(self) -> Decimal:
        return sum((group.comp_cost for group in self.groups), ZERO)

    @property
    def overtime_hours(self) -> Decimal:
        return sum((r.attribution.ot_hours for r in self.records), ZERO)

    @property
    def personnel_count(self) -> int:
        return len({r.employee_key for r in self.records})

    def employee_totals(self) -> Dict[str, Decimal]:
        """Gross pay per employee, highest first."""
        totals: Dict[str, Decimal] = defaultdict(lambda: ZERO)
        for record in self.records:
            totals[record.employee_key] += record.attribution.gross_pay
        return dict(sorted(totals.items(), key=lambda kv: kv[1], reverse=True))


@dataclass
class FringeRecord:
    """A site entry together with the fringe-benefit type of its job."""

    record: AttributedEntry
    fringe: str


@dataclass
class FringeGroup:
    """Totals for one fringe-benefit type."""

    fringe: str
    total_amount: Decimal = ZERO
    total_hours: Decimal = ZERO
    subject_wages: Decimal = ZERO
    record_count: int = 0


@dataclass
class FringeEmployeeSummary:
    """Banded hours and pay of one employee in a fringe report."""

    employee_key: str
    regular: Decimal = ZERO
    overtime: Decimal = ZERO
    doubletime: Decimal = ZERO
    regular_pay: Decimal = ZERO
    overtime_pay: Decimal = ZERO
    doubletime_pay: Decimal = ZERO
    gross_pay: Decimal = ZERO
    record_count: int = 0


@dataclass
class FringeReport:
    """Site time grouped by fringe-benefit type over a date range.

    Attributes:
        start_date: First day of the range (inclusive)
        end_date: Last day of the range (inclusive)
        groups: Totals per fringe type, sorted by type
        records: Site entries with their fringe type, newest first
    """

    start_date: dt.date
    end_date: dt.date
    groups: List[FringeGroup] = field(default_factory=list)
    records: List[FringeRecord] = field(default_factory=list)

    @property
    def total_amount(self) -> Decimal:
        return sum((group.total_amount for group in self.groups), ZERO)

    @property
    def total_hours(self) -> Decimal:
        return sum((group.total_hours for group in self.groups), ZERO)

    @property
    def subject_wages(self) -> Decimal:
        return sum((group.subject_wages for group in self.groups), ZERO)

    def get(self, fringe: str) -> Optional[FringeGroup]:
        for group in self.groups:
            if group.fringe.lower() == fringe.lower():
                return group
        return None

    def employee_summary(
        self, fringe: Optional[str] = None
    ) -> List[FringeEmployeeSummary]:
        """Per-employee totals, highest gross pay first.

        Args:
            fringe: Only count records of this fringe type (case-insensitive)
        """
        summaries: Dict[str, FringeEmployeeSummary] = OrderedDict()
        for fringe_record in self.records:
            if fringe and fringe_record.fringe.lower() != fringe.lower():
                continue
            record = fringe_record.record
            attribution = record.attribution
            summary = summaries.get(record.employee_key)
            if summary is None:
                summary = summaries[record.employee_key] = FringeEmployeeSummary(
                    employee_key=record.employee_key
                )
            summary.regular += attribution.reg_hours
            summary.overtime += attribution.ot_hours
            summary.doubletime += attribution.dt_hours
            summary.regular_pay += attribution.reg_pay
            summary.overtime_pay += attribution.ot_pay
            summary.doubletime_pay += attribution.dt_pay
            summary.gross_pay += attribution.gross_pay
            summary.record_count += 1
        return sorted(summaries.values(), key=lambda s: s.gross_pay, reverse=True)


class PayrollAggregator:
    """Builds payroll, workers-comp and fringe reports from schedules.

    The aggregator:
    1. Collects the timesheet entries of every schedule
    2. Computes entry hours and pins each entry to its UTC work date
    3. Keeps entries inside the requested date range
    4. Groups them per employee-day and attributes the daily bands
    5. Rolls the attributions up into the requested report

    Entries whose clock-in cannot be read are skipped with a warning.

    Example:
        >>> aggregator = PayrollAggregator()
        >>> report = aggregator.build_payroll_report(
        ...     schedules, employees, dt.date(2025, 6, 2)
        ... )
        >>> report.total_amount
        Decimal('1265.00')
    """

    def __init__(self, rules: Optional[PayRules] = None):
        """Initialize the aggregator.

        Args:
            rules: Pay rules passed to every calculation
        """
        self.rules = rules or DEFAULT_RULES

    def _attribute_days(
        self,
        schedules: Iterable[Schedule],
        employees: Mapping[str, EmployeeProfile],
        start_date: dt.date,
        end_date: dt.date,
        include_drive: bool = True,
        employee: Optional[str] = None,
    ) -> List[Tuple[DayAggregate, List[AttributedEntry]]]:
        employee_filter = employee.strip().lower() if employee else None
        day_entries = []
        skipped = 0

        for schedule in schedules:
            for entry in schedule.timesheet:
                if employee_filter and entry.employee_key != employee_filter:
                    continue
                if entry.is_drive_time and not include_drive:
                    continue
                day_entry = build_day_entry(
                    entry, schedule.from_date, self.rules, context=schedule
                )
                if day_entry is None:
                    skipped += 1
                    continue
                if start_date <= day_entry.work_date <= end_date:
                    day_entries.append(day_entry)

        if skipped:
            logger.warning(f"Skipped {skipped} entries with unreadable clock-in")

        results = []
        for (employee_key, work_date), day in group_entries_by_day(day_entries).items():
            with LogContext(employee=employee_key, work_date=work_date.isoformat()):
                attributions = attribute_daily_hours(
                    day, employees.get(employee_key), self.rules
                )
                logger.debug(
                    f"Attributed {len(attributions)} entries, "
                    f"{day.site_hours} site h, {day.travel_hours} travel h"
                )
            results.append(
                (
                    day,
                    [
                        AttributedEntry(attribution=a, schedule=a.day_entry.context)
                        for a in attributions
                    ],
                )
            )
        return results

    @log_function_call
    def aggregate_entries(
        self,
        schedules: Iterable[Schedule],
        employees: Mapping[str, EmployeeProfile],
        start_date: dt.date,
        end_date: dt.date,
        include_drive: bool = True,
    ) -> List[AttributedEntry]:
        """Attribute every entry worked between two dates (inclusive).

        Args:
            schedules: Schedules with their timesheet entries
            employees: Employee profiles keyed by lower-cased identifier
            start_date: First work date to include
            end_date: Last work date to include
            include_drive: Whether drive entries are included

        Returns:
            Attributed entries grouped per employee-day in first-seen order
        """
        days = self._attribute_days(
            schedules, employees, start_date, end_date, include_drive
        )
        records = [record for _, day_records in days for record in day_records]
        logger.info(
            f"Attributed {len(records)} entries over {len(days)} employee-days "
            f"from {start_date} to {end_date}"
        )
        return records

    @log_function_call
    def build_payroll_report(
        self,
        schedules: Iterable[Schedule],
        employees: Mapping[str, EmployeeProfile],
        week_start: dt.date,
        employee: Optional[str] = None,
    ) -> PayrollReport:
        """Build the weekly payroll for the UTC week containing ``week_start``.

        Each day line carries the banded hours of calculate_daily_totals,
        the day's per diem, the estimates worked and the certified flag. The
        day amount is the gross pay of its entries plus per diem.

        Args:
            schedules: Schedules with their timesheet entries
            employees: Employee profiles keyed by lower-cased identifier
            week_start: Any date in the week; snapped to Monday
            employee: Optional identifier restricting the report

        Returns:
            PayrollReport with employees sorted by display name
        """
        monday = start_of_week(week_start)
        sunday = end_of_week(monday)
        logger.info(f"Building payroll report for week {monday} to {sunday}")

        days_by_employee: Dict[str, Dict[dt.date, DayReport]] = OrderedDict()
        for day, records in self._attribute_days(
            schedules, employees, monday, sunday, employee=employee
        ):
            totals = calculate_daily_totals(day, self.rules)
            gross = sum((r.attribution.gross_pay for r in records), ZERO)
            estimates = sorted(
                {r.schedule.estimate for r in records if r.schedule.estimate}
            )
            days_by_employee.setdefault(day.employee_key, {})[day.date] = DayReport(
                date=day.date,
                regular=totals.regular,
                overtime=totals.overtime,
                doubletime=totals.doubletime,
                travel=totals.travel,
                per_diem=quantize_hours(day.per_diem),
                amount=quantize_hours(gross + day.per_diem),
                estimates=estimates,
                certified=any(r.schedule.is_certified for r in records),
            )

        report = PayrollReport(week_start=monday, week_end=sunday)
        for employee_key, day_reports in days_by_employee.items():
            profile = employees.get(employee_key)
            site_rate, travel_rate = profile_rates(profile, self.rules)
            week = [
                day_reports.get(monday + dt.timedelta(days=offset))
                or DayReport(date=monday + dt.timedelta(days=offset))
                for offset in range(7)
            ]
            report.employees.append(
                EmployeeReport(
                    employee_key=employee_key,
                    display_name=profile.display_name if profile else employee_key,
                    site_rate=quantize_hours(site_rate),
                    travel_rate=quantize_hours(travel_rate),
                    days=week,
                    classification=profile.classification if profile else None,
                )
            )

        report.employees.sort(key=lambda r: r.display_name.lower())
        logger.info(
            f"Built payroll for {len(report.employees)} employees, "
            f"total {report.total_amount}"
        )
        return report

    @log_function_call
    def build_workers_comp_report(
        self,
        schedules: Iterable[Schedule],
        employees: Mapping[str, EmployeeProfile],
        start_date: dt.date,
        end_date: dt.date,
        comp_rates: Optional[Mapping[str, object]] = None,
        include_drive: bool = False,
    ) -> WorkersCompReport:
        """Summarize pay and estimated comp cost per classification item.

        Args:
            schedules: Schedules with their timesheet entries
            employees: Employee profiles keyed by lower-cased identifier
            start_date: First work date to include
            end_date: Last work date to include
            comp_rates: Comp rate per $100 of wages keyed by item
                (case-insensitive); missing items cost nothing
            include_drive: Whether drive entries are included

        Returns:
            WorkersCompReport with groups sorted by item
        """
        rates: Dict[str, Decimal] = {
            str(item).strip().lower(): parse_rate(rate) or ZERO
            for item, rate in (comp_rates or {}).items()
        }

        records = self.aggregate_entries(
            schedules, employees, start_date, end_date, include_drive
        )

        groups: Dict[str, WorkersCompGroup] = {}
        for record in records:
            item = record.item
            group = groups.get(item)
            if group is None:
                group = groups[item] = WorkersCompGroup(
                    item=item, rate_per_100=rates.get(item.lower(), ZERO)
                )
            group.total_amount += record.attribution.gross_pay
            group.total_hours += record.hours
            group.subject_wages += record.attribution.subject_wages
            group.comp_cost += record.comp_cost(group.rate_per_100)
            group.record_count += 1

        report = WorkersCompReport(
            start_date=start_date,
            end_date=end_date,
            include_drive=include_drive,
            groups=[groups[item] for item in sorted(groups)],
            records=sorted(
                records, key=lambda r: r.attribution.day_entry.clock_in, reverse=True
            ),
        )
        logger.info(
            f"Built workers comp report: {len(report.groups)} items, "
            f"{len(records)} records, comp cost {report.total_comp_cost}"
        )
        return report


    @log_function_call
    def build_fringe_report(
        self,
        schedules: Iterable[Schedule],
        employees: Mapping[str, EmployeeProfile],
        start_date: dt.date,
        end_date: dt.date,
        estimate_fringe: Optional[Mapping[str, str]] = None,
    ) -> FringeReport:
        """Group site-time pay by the fringe-benefit type of each job.

        A job's fringe type is the schedule's own ``fringe`` value, else the
        type recorded for its estimate, else "No". Drive time is never
        counted.

        Args:
            schedules: Schedules with their timesheet entries
            employees: Employee profiles keyed by lower-cased identifier
            start_date: First work date to include
            end_date: Last work date to include
            estimate_fringe: Fringe type per estimate reference

        Returns:
            FringeReport with groups sorted by fringe type
        """
        estimate_fringe = estimate_fringe or {}

        def fringe_of(schedule: Schedule) -> str:
            if schedule.fringe:
                return schedule.fringe
            return estimate_fringe.get(schedule.estimate or "") or "No"

        records = self.aggregate_entries(
            schedules, employees, start_date, end_date, include_drive=False
        )

        groups: Dict[str, FringeGroup] = {}
        fringe_records = []
        for record in records:
            fringe = fringe_of(record.schedule)
            group = groups.get(fringe)
            if group is None:
                group = groups[fringe] = FringeGroup(fringe=fringe)
            group.total_amount += record.attribution.gross_pay
            group.total_hours += record.hours
            group.subject_wages += record.attribution.subject_wages
            group.record_count += 1
            fringe_records.append(FringeRecord(record=record, fringe=fringe))

        report = FringeReport(
            start_date=start_date,
            end_date=end_date,
            groups=[groups[fringe] for fringe in sorted(groups, key=str.lower)],
            records=sorted(
                fringe_records,
                key=lambda r: r.record.attribution.day_entry.clock_in,
                reverse=True,
            ),
        )
        logger.info(
            f"Built fringe report: {len(report.groups)} fringe types, "
            f"{len(records)} records, gross {report.total_amount}"
        )
        return report


def generate_weekly_matrix(report: PayrollReport) -> pd.DataFrame:
    """Generate an employee-by-day matrix of total hours.

    Args:
        report: Weekly payroll report

    Returns:
        DataFrame with employee display names as index and one column per
        weekday ("Mon 06/02" ... "Sun 06/08")

    Example:
        >>> matrix = generate_weekly_matrix(report)
        >>> matrix.loc["John Doe", "Mon 06/02"]
        Decimal('12.50')
    """
    logger.info(f"Generating weekly matrix for {len(report.employees)} employees")

    if not report.employees:
        logger.info("No employees, returning empty DataFrame")
        return pd.DataFrame()

    # Structure: {employee: {day_label: hours}}
    matrix_data: Dict[str, Dict[str, Decimal]] = OrderedDict()
    for employee in report.employees:
        matrix_data[employee.display_name] = OrderedDict(
            (f"{day.weekday} {day.date:%m/%d}", day.total_hours)
            for day in employee.days
        )

    return pd.DataFrame.from_dict(matrix_data, orient="index")
