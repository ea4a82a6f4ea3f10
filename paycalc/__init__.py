"""Timesheet pay calculation for construction payroll and workers-comp reports."""

__version__ = "1.0.0"
