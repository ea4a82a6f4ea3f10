"""Aggregators module for payroll and workers-comp reporting.

This module rolls per-entry attributions up into weekly payroll and
workers-comp reports.
"""

from paycalc.aggregators.payroll_aggregator import (
    AttributedEntry,
    DayReport,
    EmployeeReport,
    PayrollAggregator,
    PayrollReport,
    WorkersCompGroup,
    WorkersCompReport,
    generate_weekly_matrix,
)

__all__ = [
    "AttributedEntry",
    "DayReport",
    "EmployeeReport",
    "PayrollAggregator",
    "PayrollReport",
    "WorkersCompGroup",
    "WorkersCompReport",
    "generate_weekly_matrix",
]
