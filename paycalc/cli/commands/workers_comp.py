"""Workers-comp summary command."""

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
    load_comp_rates,
    load_schedules,
    parse_date_input,
    prepare_run,
)
from paycalc.utils.logging_utils import LogContext, generate_correlation_id


@click.command(name="workers-comp")
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
    "--comp-rates",
    "comp_rates_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="JSON of workers-comp rates per $100 of wages, keyed by item",
)
@click.option(
    "--include-drive",
    is_flag=True,
    default=False,
    help="Count drive time as well as site time",
)
@click.pass_context
def workers_comp_report(
    ctx: click.Context,
    input_path: str,
    start_date: str,
    end_date: str,
    comp_rates_path: Optional[str],
    include_drive: bool,
):
    """Summarize gross pay and estimated comp cost per classification item.

    Example:
        paycalc workers-comp --input schedules.json \\
            --start-date 2025-06-01 --end-date 2025-06-30 --comp-rates rates.json
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
            correlation_id=generate_correlation_id(), command="workers-comp"
        ):
            comp_rates = load_comp_rates(comp_rates_path)
            data = load_schedules(input_path)
            try:
                report = PayrollAggregator(rules).build_workers_comp_report(
                    data.schedules,
                    data.employees,
                    start,
                    end,
                    comp_rates=comp_rates,
                    include_drive=include_drive,
                )
            except (ArithmeticError, ValueError) as e:
                raise ProcessingError(
                    f"Failed to build workers comp report: {e}"
                ) from e

        scope = "site and drive time" if include_drive else "site time only"
        click.echo(format_info(f"Workers comp from {start} to {end} ({scope})"))
        echo_skipped(data)

        if not report.groups:
            click.echo(format_warning("No matching time found in this range"))
            return

        rows = [
            [
                group.item,
                format_money(group.rate_per_100),
                group.record_count,
                format_hours(group.total_hours),
                format_money(group.total_amount),
                format_money(group.comp_cost),
            ]
            for group in report.groups
        ]
        rows.append(
            [
                "Total",
                "",
                len(report.records),
                format_hours(report.total_hours),
                format_money(report.total_amount),
                format_money(report.total_comp_cost),
            ]
        )
        click.echo(
            format_table(
                ["Item", "Rate/$100", "Records", "Hours", "Gross", "Comp cost"], rows
            )
        )

        missing = [g.item for g in report.groups if not g.rate_per_100]
        if comp_rates and missing:
            click.echo(format_warning(f"No comp rate for: {', '.join(missing)}"))

        click.echo()
        click.echo(
            format_success(
                f"{report.personnel_count} employee(s), "
                f"{format_hours(report.overtime_hours)} overtime h, "
                f"estimated comp cost {format_money(report.total_comp_cost)}"
            )
        )
