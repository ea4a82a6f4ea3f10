"""Shared setup for CLI commands: settings, logging and input files."""

import datetime as dt
import logging
from typing import Dict, Optional

import click
from pydantic import ValidationError

from paycalc.calculators.rules import PayRules
from paycalc.cli.error_handlers import ConfigurationError, InputError
from paycalc.cli.utils.formatters import format_warning
from paycalc.config.logging_config import LoggingConfig, configure_logging
from paycalc.config.settings import PayrollConfig, get_config, reload_config
from paycalc.readers.schedule_reader import (
    ScheduleData,
    ScheduleReadError,
    ScheduleReader,
    read_comp_rates,
)

logger = logging.getLogger(__name__)


def parse_date_input(date_str: str, option: str = "date") -> dt.date:
    """Parse a YYYY-MM-DD command-line date.

    Raises:
        InputError: If the date format is invalid
    """
    try:
        return dt.datetime.strptime(date_str.strip(), "%Y-%m-%d").date()
    except ValueError:
        raise InputError(
            f"Invalid {option}: {date_str}",
            recovery_hint="Use the YYYY-MM-DD format, e.g. 2025-06-02",
        ) from None


def load_settings(env_file: Optional[str] = None) -> PayrollConfig:
    """Load settings, reporting bad values as a ConfigurationError."""
    try:
        return reload_config(env_file) if env_file else get_config()
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid settings: {e.error_count()} problem(s)\n{e}",
            recovery_hint="Check the environment variables and your .env file",
        ) from e


def setup_logging(settings: PayrollConfig, debug: bool = False) -> None:
    try:
        config = LoggingConfig.from_env(
            log_level="DEBUG" if debug else settings.log_level
        )
    except ValueError as e:
        raise ConfigurationError(str(e)) from e
    configure_logging(config)


def load_rules(settings: PayrollConfig) -> PayRules:
    try:
        return settings.pay_rules()
    except ValidationError as e:
        raise ConfigurationError(
            f"Inconsistent pay rules: {e}",
            recovery_hint=(
                "OVERTIME_HOURS_THRESHOLD must be above REGULAR_HOURS_THRESHOLD"
            ),
        ) from e


def load_schedules(path: str) -> ScheduleData:
    try:
        return ScheduleReader().read(path)
    except ScheduleReadError as e:
        raise InputError(
            str(e), recovery_hint="Pass the JSON exported from the schedules page"
        ) from e


def echo_skipped(data: ScheduleData) -> None:
    """Warn about schedules and timesheet entries dropped while reading."""
    if data.skipped:
        click.echo(format_warning(f"{data.skipped} invalid schedule(s) skipped"))
    if data.skipped_entries:
        click.echo(
            format_warning(
                f"{data.skipped_entries} invalid timesheet entries skipped"
            )
        )


def load_comp_rates(path: Optional[str]) -> Dict:
    if not path:
        return {}
    try:
        return read_comp_rates(path)
    except ScheduleReadError as e:
        raise InputError(
            str(e),
            recovery_hint='Use a JSON object such as {"Excavation": 4.25}',
        ) from e


def prepare_run(options: Optional[Dict]) -> PayRules:
    """Load settings, configure logging and return the pay rules.

    Args:
        options: Group options from ``ctx.obj`` (``debug``, ``env_file``)
    """
    options = options or {}
    settings = load_settings(options.get("env_file"))
    setup_logging(settings, options.get("debug", False))
    rules = load_rules(settings)
    logger.debug(f"Running in {settings.environment} with {rules!r}")
    return rules
