"""Validation layer for timesheet data quality."""

from paycalc.validators.timesheet_validator import TimesheetValidator
from paycalc.validators.validation_report import (
    ValidationIssue,
    ValidationReport,
    ValidationSeverity,
)

__all__ = [
    "TimesheetValidator",
    "ValidationReport",
    "ValidationIssue",
    "ValidationSeverity",
]
