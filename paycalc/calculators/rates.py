"""Hourly rate resolution for the pay calculator.

Rates cascade from the most specific source to the least specific one:

    per-entry override > day-level override > employee profile > default

The day-level override is the last non-empty per-entry override seen for
that employee-day, in input order. The travel rate falls back to the site
rate times the travel factor (0.75) when no travel rate exists anywhere.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Tuple

from paycalc.calculators.rules import DEFAULT_RULES, PayRules
from paycalc.models.employee import EmployeeProfile

_NON_NUMERIC_RE = re.compile(r"[^0-9.\-]")


def parse_rate(value: Any) -> Optional[Decimal]:
    """Parse a loose rate value into a Decimal.

    Currency symbols and units are stripped ("$45.00/hr" reads as 45.00).
    Only empty or unreadable values mean "no rate" so that the next tier of
    the cascade applies. A zero rate is a real rate and is kept.

    Args:
        value: Raw rate (number or string)

    Returns:
        Rate as Decimal, or None

    Example:
        >>> parse_rate("$52.50/hr")
        Decimal('52.50')
        >>> parse_rate(0)
        Decimal('0')
        >>> parse_rate("n/a") is None
        True
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        text = repr(value)
    else:
        text = _NON_NUMERIC_RE.sub("", str(value))
    try:
        rate = Decimal(text)
    except InvalidOperation:
        return None
    if not rate.is_finite():
        return None
    return rate


def resolve_rate(*candidates: Optional[Decimal]) -> Optional[Decimal]:
    """Return the first candidate that is not None.

    Candidates are given from highest to lowest precedence.

    Example:
        >>> resolve_rate(None, Decimal("50"), Decimal("45"))
        Decimal('50')
        >>> resolve_rate(None, None) is None
        True
    """
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None


def profile_rates(
    profile: Optional[EmployeeProfile], rules: Optional[PayRules] = None
) -> Tuple[Decimal, Decimal]:
    """Site and travel rates from an employee profile with defaults applied.

    Args:
        profile: Employee profile, or None when the employee is unknown
        rules: Pay rules supplying the default rate and travel factor

    Returns:
        (site_rate, travel_rate)

    Example:
        >>> profile_rates(None)
        (Decimal('45.00'), Decimal('33.7500'))
    """
    rules = rules or DEFAULT_RULES
    site_profile = parse_rate(profile.hourly_rate_site) if profile else None
    drive_profile = parse_rate(profile.hourly_rate_drive) if profile else None

    site_rate = resolve_rate(site_profile, rules.default_site_rate)
    travel_rate = resolve_rate(drive_profile, site_rate * rules.travel_rate_factor)
    return site_rate, travel_rate


def resolve_site_rate(
    entry_rate: Optional[Decimal],
    day_rate: Optional[Decimal],
    profile: Optional[EmployeeProfile],
    rules: Optional[PayRules] = None,
) -> Decimal:
    """Site rate for one entry: entry > day > profile > default."""
    site_default, _ = profile_rates(profile, rules)
    return resolve_rate(entry_rate, day_rate, site_default)


def resolve_travel_rate(
    entry_rate: Optional[Decimal],
    day_rate: Optional[Decimal],
    profile: Optional[EmployeeProfile],
    rules: Optional[PayRules] = None,
) -> Decimal:
    """Travel rate for one entry: entry > day > profile > site x factor."""
    _, travel_default = profile_rates(profile, rules)
    return resolve_rate(entry_rate, day_rate, travel_default)
