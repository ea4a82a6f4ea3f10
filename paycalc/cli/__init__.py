"""Pay calculator CLI.

This module provides a command-line interface for the pay calculator.
It includes commands for weekly payroll, workers-comp and fringe-benefit
summaries and timesheet data validation.
"""

from typing import Optional

import click

from paycalc import __version__
from paycalc.cli.commands.fringe import fringe_benefits_report
from paycalc.cli.commands.payroll import payroll_report
from paycalc.cli.commands.validate import validate_data
from paycalc.cli.commands.workers_comp import workers_comp_report


@click.group(help="Pay calculator CLI - Turn timesheets into payroll and reports")
@click.version_option(version=__version__)
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Log at DEBUG level and show full stack traces",
)
@click.option(
    "--env-file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Load settings from this .env file",
)
@click.pass_context
def cli(ctx: click.Context, debug: bool, env_file: Optional[str]):
    """Pay calculator CLI main entry point."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    ctx.obj["env_file"] = env_file


# Register commands
cli.add_command(payroll_report)
cli.add_command(workers_comp_report)
cli.add_command(fringe_benefits_report)
cli.add_command(validate_data)


def main():
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
