"""Validate timesheet data command."""

import click

from paycalc.cli.error_handlers import DataValidationError, with_error_handling
from paycalc.cli.utils.formatters import (
    format_error,
    format_info,
    format_success,
    format_warning,
)
from paycalc.cli.utils.inputs import echo_skipped, load_schedules, prepare_run
from paycalc.utils.logging_utils import LogContext, generate_correlation_id
from paycalc.validators.timesheet_validator import TimesheetValidator
from paycalc.validators.validation_report import ValidationSeverity

MAX_ISSUES_PER_SEVERITY = 20

_STYLES = {
    ValidationSeverity.ERROR: format_error,
    ValidationSeverity.WARNING: format_warning,
    ValidationSeverity.INFO: format_info,
}


@click.command(name="validate")
@click.option(
    "--input",
    "input_path",
    required=True,
    type=click.Path(dir_okay=False),
    help="Schedules JSON exported from the scheduling backend",
)
@click.option(
    "--severity",
    type=click.Choice(["error", "warning", "info"], case_sensitive=False),
    default="error",
    help="Minimum severity level to display (default: error)",
)
@click.pass_context
def validate_data(ctx: click.Context, input_path: str, severity: str):
    """Check timesheet entries for data-quality problems.

    Checks for:
    - Missing or unreadable clock-in (error)
    - Missing clock-out, inverted lunch, clock-out before clock-in
    - Unknown entry types and drive time without a distance
    - Rates and per diem that are not numbers

    Returns non-zero exit code if errors are found.

    Example:
        paycalc validate --input schedules.json --severity warning
    """
    options = ctx.obj or {}
    with with_error_handling(options.get("debug", False)):
        rules = prepare_run(options)
        severity_level = ValidationSeverity.from_name(severity)

        with LogContext(correlation_id=generate_correlation_id(), command="validate"):
            data = load_schedules(input_path)
            report = TimesheetValidator(rules).validate_schedules(data.schedules)

        click.echo("=" * 60)
        click.echo("Validation Summary")
        click.echo("=" * 60)
        click.echo(f"Schedules:        {len(data.schedules)}")
        click.echo(f"Entries:          {data.entry_count}")
        click.echo(f"Errors:           {report.error_count}")
        click.echo(f"Warnings:         {report.warning_count}")
        click.echo(f"Info:             {report.info_count}")
        echo_skipped(data)

        shown = report.get_issues(severity_level)
        if shown:
            click.echo()
            click.echo(f"Issues (showing {severity.upper()} and above):")
            click.echo("-" * 60)
            for level in sorted(ValidationSeverity, reverse=True):
                issues = [i for i in shown if i.severity == level]
                if not issues:
                    continue
                click.echo()
                click.echo(f"{level.name} ({len(issues)}):")
                for issue in issues[:MAX_ISSUES_PER_SEVERITY]:
                    click.echo(_STYLES[level](f"  {issue}"))
                if len(issues) > MAX_ISSUES_PER_SEVERITY:
                    click.echo(
                        f"  ... and {len(issues) - MAX_ISSUES_PER_SEVERITY} more"
                    )

        click.echo()
        if report.has_errors():
            raise DataValidationError(
                f"Validation failed with {report.error_count} error(s)",
                recovery_hint="Entries with errors are left out of payroll",
            )
        if report.warning_count:
            click.echo(
                format_warning(
                    f"Validation completed with {report.warning_count} warning(s)"
                )
            )
        else:
            click.echo(format_success("Validation passed! No issues found."))
