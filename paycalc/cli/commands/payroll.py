"""Weekly payroll report command."""

import datetime as dt
from typing import Optional

import click

from paycalc.aggregators.payroll_aggregator import (
    EmployeeReport,
    PayrollAggregator,
    generate_weekly_matrix,
)
from paycalc.calculators.time_utils import add_weeks
from paycalc.cli.error_handlers import ProcessingError, with_error_handling
from paycalc.cli.utils.formatters import (
    format_hours,
    format_info,
    format_money,
    format_success,
    format_table,
    format_warning,
)
from paycalc.cli.utils.inputs import (
    echo_skipped,
    load_schedules,
    parse_date_input,
    prepare_run,
)
from paycalc.utils.logging_utils import LogContext, generate_correlation_id

DAY_HEADERS = [
    "Day", "Date", "Reg", "OT", "DT", "Travel", "Diem", "Estimates", "Amount"
]


def _employee_rows(report: EmployeeReport):
    rows = [
        [
            day.weekday,
            f"{day.date:%m/%d}",
            format_hours(day.regular),
            format_hours(day.overtime),
            format_hours(day.doubletime),
            format_hours(day.travel),
            format_money(day.per_diem) if day.per_diem else "-",
            ", ".join(day.estimates) + (" *" if day.certified else ""),
            format_money(day.amount) if day.amount else "-",
        ]
        for day in report.days
    ]
    rows.append(
        [
            "Total",
            "",
            format_hours(report.regular),
            format_hours(report.overtime),
            format_hours(report.doubletime),
            format_hours(report.travel),
            format_money(report.per_diem),
            "",
            format_money(report.total_amount),
        ]
    )
    return rows


@click.command(name="payroll-report")
@click.option(
    "--input",
    "input_path",
    required=True,
    type=click.Path(dir_okay=False),
    help="Schedules JSON exported from the scheduling backend",
)
@click.option(
    "--week",
    type=str,
    default=None,
    help="Any date in the week to report (YYYY-MM-DD, default: current UTC week)",
)
@click.option(
    "--weeks-back",
    type=click.IntRange(min=0),
    default=0,
    help="Report the week this many weeks before --week (default: 0)",
)
@click.option(
    "--employee",
    type=str,
    default=None,
    help="Only report this employee identifier (case-insensitive)",
)
@click.option(
    "--matrix",
    is_flag=True,
    default=False,
    help="Also print an employee x day matrix of total hours",
)
@click.pass_context
def payroll_report(
    ctx: click.Context,
    input_path: str,
    week: Optional[str],
    weeks_back: int,
    employee: Optional[str],
    matrix: bool,
):
    """Print the weekly payroll per employee.

    Each day shows Regular (first 8 h), Overtime (8-12 h) and Doubletime
    (beyond 12 h) site hours, travel hours, per diem and the day's amount.
    Days marked * include certified-payroll work.

    Example:
        paycalc payroll-report --input schedules.json --week 2025-06-02
        paycalc payroll-report --input schedules.json --employee jdoe@example.com
        paycalc payroll-report --input schedules.json --weeks-back 1
    """
    options = ctx.obj or {}
    with with_error_handling(options.get("debug", False)):
        rules = prepare_run(options)
        week_date = (
            parse_date_input(week, "--week")
            if week
            else dt.datetime.now(dt.timezone.utc).date()
        )
        week_date = add_weeks(week_date, -weeks_back)

        with LogContext(
            correlation_id=generate_correlation_id(), command="payroll-report"
        ):
            data = load_schedules(input_path)
            try:
                report = PayrollAggregator(rules).build_payroll_report(
                    data.schedules, data.employees, week_date, employee=employee
                )
            except (ArithmeticError, ValueError) as e:
                raise ProcessingError(f"Failed to build payroll report: {e}") from e

        click.echo(
            format_info(
                f"Payroll for week {report.week_start} to {report.week_end} "
                f"(week {report.week_number})"
            )
        )
        echo_skipped(data)

        if not report.employees:
            click.echo(format_warning("No site or drive time found for this week"))
            return

        for employee_report in report.employees:
            click.echo()
            title = (
                f"{employee_report.display_name} "
                f"(site {format_money(employee_report.site_rate)}/h, "
                f"travel {format_money(employee_report.travel_rate)}/h)"
            )
            if employee_report.is_certified:
                title += " [certified payroll]"
            click.echo(title)
            click.echo(format_table(DAY_HEADERS, _employee_rows(employee_report)))

        if matrix:
            click.echo()
            click.echo(generate_weekly_matrix(report).to_string())

        click.echo()
        click.echo(
            format_success(
                f"{len(report.employees)} employee(s), "
                f"{format_hours(report.total_hours)} h, "
                f"total {format_money(report.total_amount)}"
            )
        )
