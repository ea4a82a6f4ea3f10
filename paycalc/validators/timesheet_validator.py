"""Data-quality validation of raw timesheet entries.

The calculators never fail on bad data; unreadable values simply contribute
zero hours. This validator surfaces those values so they can be fixed at the
source before payroll is run.
"""

import logging
from typing import Any, Dict, Iterable, Optional

from paycalc.calculators.hours_calculator import compute_entry_hours
from paycalc.calculators.parsing import ParseIssue, parse_number
from paycalc.calculators.rules import DEFAULT_RULES, PayRules
from paycalc.calculators.time_utils import DateLike, parse_timestamp
from paycalc.models.schedule import Schedule
from paycalc.models.timesheet import TimesheetEntry
from paycalc.validators.validation_report import ValidationReport, ValidationSeverity

logger = logging.getLogger(__name__)

# Clock-in problems are reported separately as errors
_ISSUE_RULES = {
    ParseIssue.MISSING_CLOCK_OUT: (
        ValidationSeverity.WARNING,
        "clockOut",
        "Clock-out is missing; hours follow the missing clock-out policy",
    ),
    ParseIssue.MALFORMED_CLOCK_OUT: (
        ValidationSeverity.WARNING,
        "clockOut",
        "Clock-out cannot be read; entry counts zero hours",
    ),
    ParseIssue.NON_POSITIVE_DURATION: (
        ValidationSeverity.WARNING,
        "clockOut",
        "Clock-out is not after clock-in (net of lunch); entry counts zero hours",
    ),
    ParseIssue.MALFORMED_LUNCH: (
        ValidationSeverity.WARNING,
        "lunchStart",
        "Lunch window cannot be read; no lunch is deducted",
    ),
    ParseIssue.INVERTED_LUNCH: (
        ValidationSeverity.WARNING,
        "lunchEnd",
        "Lunch ends before it starts; no lunch is deducted",
    ),
    ParseIssue.MALFORMED_MANUAL_DISTANCE: (
        ValidationSeverity.WARNING,
        "manualDistance",
        "Manual distance is not a number and is ignored",
    ),
    ParseIssue.ODOMETER_NOT_INCREASING: (
        ValidationSeverity.WARNING,
        "locationOut",
        "Odometer reading did not increase; distance counts as zero",
    ),
    ParseIssue.NO_DISTANCE: (
        ValidationSeverity.WARNING,
        "manualDistance",
        "Drive entry has no manual distance, GPS positions or odometer readings",
    ),
    ParseIssue.UNKNOWN_TYPE: (
        ValidationSeverity.WARNING,
        "type",
        "Type is neither site nor drive time; entry is left out of payroll",
    ),
}

_NUMERIC_FIELDS = (
    ("hourlyRateSITE", "hourly_rate_site"),
    ("hourlyRateDrive", "hourly_rate_drive"),
    ("perDiem", "per_diem"),
)


class TimesheetValidator:
    """Validates timesheet entries for data quality.

    Example:
        >>> validator = TimesheetValidator()
        >>> entry = TimesheetEntry.model_validate(
        ...     {"employee": "jdoe", "type": "Site Time", "clockIn": "garbage"}
        ... )
        >>> validator.validate_entry(entry).has_errors()
        True
    """

    def __init__(self, rules: Optional[PayRules] = None) -> None:
        self.rules = rules or DEFAULT_RULES

    def validate_entry(
        self,
        entry: TimesheetEntry,
        schedule_fallback_date: DateLike = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> ValidationReport:
        """Validate a single timesheet entry.

        Args:
            entry: The timesheet entry to validate
            schedule_fallback_date: Date anchoring time-only timestamps
            context: Location info added to every issue

        Returns:
            ValidationReport with any issues found
        """
        report = ValidationReport()
        context = context or {
            "record": entry.record_id,
            "employee": entry.employee,
        }

        self._validate_clock_in(entry, schedule_fallback_date, report, context)

        result = compute_entry_hours(entry, schedule_fallback_date, self.rules)
        for issue in result.issues:
            rule = _ISSUE_RULES.get(issue)
            if rule is None:
                continue
            severity, field, message = rule
            report.add(
                severity, field, message, self._raw_value(entry, field), context
            )

        self._validate_numbers(entry, report, context)

        if entry.manual_duration is not None and parse_number(entry.manual_duration):
            report.add_info(
                "manualDuration",
                "Manual duration overrides the computed hours",
                entry.manual_duration,
                context,
            )

        return report

    def validate_entries(
        self,
        entries: Iterable[TimesheetEntry],
        schedule_fallback_date: DateLike = None,
    ) -> ValidationReport:
        """Validate multiple timesheet entries into one report."""
        report = ValidationReport()
        for entry in entries:
            report.merge(self.validate_entry(entry, schedule_fallback_date))
        return report

    def validate_schedules(self, schedules: Iterable[Schedule]) -> ValidationReport:
        """Validate every timesheet entry of every schedule.

        Issues carry the schedule id, record id and employee as context.
        """
        report = ValidationReport()
        schedule_count = 0
        entry_count = 0

        for schedule in schedules:
            schedule_count += 1
            for entry in schedule.timesheet:
                entry_count += 1
                context = {
                    "schedule": schedule.schedule_id,
                    "record": entry.record_id,
                    "employee": entry.employee,
                }
                report.merge(self.validate_entry(entry, schedule.from_date, context))

        logger.info(
            f"Validated {entry_count} entries on {schedule_count} schedules: "
            f"{report.summary()}"
        )
        return report

    @staticmethod
    def _validate_clock_in(
        entry: TimesheetEntry,
        fallback_date: DateLike,
        report: ValidationReport,
        context: Dict[str, Any],
    ) -> None:
        """Every entry needs a readable clock-in to be assigned to a day."""
        if not entry.clock_in:
            report.add_error("clockIn", "Clock-in is missing", None, context)
        elif parse_timestamp(entry.clock_in, fallback_date) is None:
            report.add_error(
                "clockIn", "Clock-in cannot be read", entry.clock_in, context
            )

    @staticmethod
    def _validate_numbers(
        entry: TimesheetEntry, report: ValidationReport, context: Dict[str, Any]
    ) -> None:
        for field, attribute in _NUMERIC_FIELDS:
            value = getattr(entry, attribute)
            if value is None:
                continue
            number = parse_number(str(value).replace("$", ""))
            if number is None:
                report.add_warning(
                    field, "Value is not a number and is ignored", value, context
                )
            elif number < 0:
                report.add_warning(field, "Value is negative", value, context)
            elif number == 0 and field != "perDiem":
                report.add_info(
                    field, "Rate is zero; the entry is paid nothing", value, context
                )

    @staticmethod
    def _raw_value(entry: TimesheetEntry, field: str) -> Any:
        return {
            "clockOut": entry.clock_out,
            "lunchStart": entry.lunch_start,
            "lunchEnd": entry.lunch_end,
            "manualDistance": entry.manual_distance,
            "locationOut": entry.location_out,
            "type": entry.type,
        }.get(field)
