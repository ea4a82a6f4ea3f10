"""Data models for the pay calculator.

This package contains Pydantic models for the raw records fed in by the
scheduling backend:
- BaseDataModel: Base class with common configuration
- TimesheetEntry: Individual clock-in/clock-out record
- EmployeeProfile: Employee directory entry with profile rates
- Schedule: Scheduled job owning timesheet entries
"""

from paycalc.models.base import BaseDataModel
from paycalc.models.employee import EmployeeProfile
from paycalc.models.schedule import Schedule
from paycalc.models.timesheet import TimesheetEntry

__all__ = [
    "BaseDataModel",
    "EmployeeProfile",
    "Schedule",
    "TimesheetEntry",
]
