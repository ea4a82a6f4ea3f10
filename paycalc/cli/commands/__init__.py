"""CLI commands."""

from paycalc.cli.commands.fringe import fringe_benefits_report
from paycalc.cli.commands.payroll import payroll_report
from paycalc.cli.commands.validate import validate_data
from paycalc.cli.commands.workers_comp import workers_comp_report

__all__ = [
    "fringe_benefits_report",
    "payroll_report",
    "validate_data",
    "workers_comp_report",
]
