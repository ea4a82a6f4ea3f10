"""Fringe-benefits summary command."""

from typing import Optional

import click

from paycalc.aggregators.payroll_aggregator import PayrollAggregator
from paycalc.cli.error_handlers import InputError, ProcessingError, with_error_handling
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


@click.command(name="fringe-benefits")
@click.option(
    "--input",
    "input_path",
    required=True,
    type=click.Path(dir_okay=False),
    help="Schedules JSON exported from the scheduling backend",
)
@click.option("--start-date", required=True, type=str, help="First day (YYYY-MM-DD)")
@click.option("--end-date", required=True, type=str, help="Last day (YYYY-MM-DD)")
@click.option(
    "--fringe",
    type=str,
    default=None,
    help="Only list employees for this fringe type (case-insensitive)",
)
@click.pass_context
def fringe_benefits_report(
    ctx: click.Context,
    input_path: str,
    start_date: str,
    end_date: str,
    fringe: Optional[str],
):
    """Summarize site-time pay per fringe-benefit type and employee.

    A job's fringe type comes from its schedule, else from its estimate,
    else it is "No".

    Example:
        paycalc fringe-benefits --input schedules.json \\
            --start-date 2025-06-01 --end-date 2025-06-30 --fringe Union
    """
    options = ctx.obj or {}
    with with_error_handling(options.get("debug", False)):
        rules = prepare_run(options)
        start = parse_date_input(start_date, "--start-date")
        end = parse_date_input(end_date, "--end-date")
        if end < start:
            raise InputError(
                f"End date {end} is before start date {start}",
                recovery_hint="Swap --start-date and --end-date",
            )

        with LogContext(
            correlation_id=generate_correlation_id(), command="fringe-benefits"
        ):
            data = load_schedules(input_path)
            try:
                report = PayrollAggregator(rules).build_fringe_report(
                    data.schedules,
                    data.employees,
                    start,
                    end,
                    estimate_fringe=data.estimate_fringe,
                )
            except (ArithmeticError, ValueError) as e:
                raise ProcessingError(f"Failed to build fringe report: {e}") from e

        click.echo(format_info(f"Fringe benefits from {start} to {end} (site time)"))
        echo_skipped(data)

        if not report.groups:
            click.echo(format_warning("No site time found in this range"))
            return

        rows = [
            [
                group.fringe,
                group.record_count,
                format_hours(group.total_hours),
                format_money(group.subject_wages),
                format_money(group.total_amount),
            ]
            for group in report.groups
        ]
        rows.append(
            [
                "Total",
                len(report.records),
                format_hours(report.total_hours),
                format_money(report.subject_wages),
                format_money(report.total_amount),
            ]
        )
        click.echo(
            format_table(
                ["Fringe", "Records", "Hours", "Subject wages", "Gross"], rows
            )
        )

        if fringe and report.get(fringe) is None:
            click.echo(format_warning(f"No site time for fringe type {fringe}"))
            return

        summaries = report.employee_summary(fringe)
        click.echo()
        if fringe:
            click.echo(format_info(f"Employees on {fringe} jobs"))
        click.echo(
            format_table(
                ["Employee", "Reg", "OT", "DT", "Reg pay", "OT pay", "Gross"],
                [
                    [
                        _display_name(data.employees, s.employee_key),
                        format_hours(s.regular),
                        format_hours(s.overtime),
                        format_hours(s.doubletime),
                        format_money(s.regular_pay),
                        format_money(s.overtime_pay),
                        format_money(s.gross_pay),
                    ]
                    for s in summaries
                ],
            )
        )

        click.echo()
        click.echo(
            format_success(
                f"{len(summaries)} employee(s), {len(report.groups)} fringe type(s), "
                f"total {format_money(report.total_amount)}"
            )
        )


def _display_name(employees, employee_key: str) -> str:
    profile = employees.get(employee_key)
    return profile.display_name if profile else employee_key
