"""Lenient parsing helpers for free-text timesheet fields.

Timesheet records are typed by hand on job sites, so numeric fields arrive
as strings with units, blanks and typos. These helpers never raise; they
return None (or zero) and let the caller record a ParseIssue.
"""

import math
import re
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional

_LEADING_NUMBER_RE = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+))")
_QTY_RE = re.compile(r"\((\d+(?:\.\d+)?)\s*qty\)", re.IGNORECASE)
_TRUTHY = {"true", "yes"}


class ParseIssue(str, Enum):
    """Reasons an entry contributed less than its face value.

    Every issue folds to a zero contribution at the aggregation boundary;
    they are kept so reports and the validator can explain the zeros.
    """

    MISSING_CLOCK_IN = "missing_clock_in"
    MALFORMED_CLOCK_IN = "malformed_clock_in"
    MISSING_CLOCK_OUT = "missing_clock_out"
    MALFORMED_CLOCK_OUT = "malformed_clock_out"
    MALFORMED_LUNCH = "malformed_lunch"
    INVERTED_LUNCH = "inverted_lunch"
    NON_POSITIVE_DURATION = "non_positive_duration"
    MALFORMED_MANUAL_DISTANCE = "malformed_manual_distance"
    ODOMETER_NOT_INCREASING = "odometer_not_increasing"
    NO_DISTANCE = "no_distance"
    UNKNOWN_TYPE = "unknown_type"


def parse_number(value: Any) -> Optional[float]:
    """Parse the leading number of a loose value.

    Mirrors how operators enter numbers: "50", "50 mi", " 12.5".
    Booleans are not numbers.

    Args:
        value: Raw value (str, int, float or None)

    Returns:
        Parsed float, or None if no finite number can be read

    Example:
        >>> parse_number("50 mi")
        50.0
        >>> parse_number("abc") is None
        True
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _LEADING_NUMBER_RE.match(str(value))
        if not match:
            return None
        number = float(match.group(1))
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def to_decimal(value: float) -> Decimal:
    """Convert a float to Decimal via its shortest repr.

    Example:
        >>> to_decimal(0.1)
        Decimal('0.1')
    """
    try:
        return Decimal(repr(value))
    except InvalidOperation:
        return Decimal("0")


def parse_addon_quantity(value: Any) -> Decimal:
    """Read the quantity of a drive add-on (dump/washout, shop time).

    The UI stores add-ons as display strings like "1.00 hrs (2 qty)".
    Older records store a plain yes/true flag, which counts as one.

    Args:
        value: Raw add-on value

    Returns:
        Quantity as Decimal, zero when absent or unreadable

    Example:
        >>> parse_addon_quantity("1.00 hrs (2 qty)")
        Decimal('2')
        >>> parse_addon_quantity(True)
        Decimal('1')
        >>> parse_addon_quantity("no")
        Decimal('0')
    """
    if value is True:
        return Decimal("1")
    text = str(value if value is not None else "")
    match = _QTY_RE.search(text)
    if match:
        return Decimal(match.group(1))
    if text.strip().lower() in _TRUTHY:
        return Decimal("1")
    return Decimal("0")
