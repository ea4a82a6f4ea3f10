"""Pay rules for the timesheet pay calculator.

This module holds the constants of the pay calculation and the PayRules
value object that carries them into the calculators. Calculators never read
configuration themselves; callers pass a PayRules instance (or rely on the
defaults below), so a calculation depends only on its arguments.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import ConfigDict, Field, model_validator

from paycalc.models.base import BaseDataModel

# Average driving speed used to turn distance into drive hours
SPEED_MPH = Decimal("55")
# Overhead multiplier on drive hours (traffic, loading)
DRIVING_FACTOR = Decimal("1.50")
EARTH_RADIUS_MI = 3958.8

DEFAULT_SITE_RATE = Decimal("45.00")
TRAVEL_RATE_FACTOR = Decimal("0.75")

REGULAR_HOURS_THRESHOLD = Decimal("8")
OVERTIME_HOURS_THRESHOLD = Decimal("12")
OVERTIME_MULTIPLIER = Decimal("1.5")
DOUBLETIME_MULTIPLIER = Decimal("2.0")

DUMP_WASHOUT_HOURS = Decimal("0.5")
SHOP_TIME_HOURS = Decimal("0.25")

DEFAULT_SHIFT_HOURS = Decimal("8")
# Site entries clocked in on or after this date get quarter-hour rounding
ROUNDING_CUTOFF_DATE = dt.date(2025, 10, 26)


class MissingClockOutPolicy(str, Enum):
    """What a site entry without a clock-out contributes.

    ZERO: the employee is treated as still clocked in; the entry
        contributes no hours until it is closed.
    DEFAULT_SHIFT: clock-out is inferred as clock-in plus the configured
        default shift length.
    """

    ZERO = "zero"
    DEFAULT_SHIFT = "default_shift"


class PayRules(BaseDataModel):
    """Immutable set of constants used by the pay calculation.

    Attributes:
        default_site_rate: Site rate when no override or profile rate exists
        travel_rate_factor: Share of the site rate paid for travel when no
            travel rate exists anywhere
        speed_mph: Average speed for distance to hours conversion
        driving_factor: Multiplier applied to distance-derived drive hours
        earth_radius_mi: Earth radius for GPS haversine distance
        regular_threshold: Cumulative daily site hours paid at 1.0x
        overtime_threshold: Cumulative daily site hours after which
            doubletime starts
        overtime_multiplier: Pay multiplier for overtime hours
        doubletime_multiplier: Pay multiplier for doubletime hours
        dump_washout_hours: Hours credited per dump/washout
        shop_time_hours: Hours credited per shop-time unit
        missing_clock_out_policy: Handling of site entries with no clock-out
        default_shift_hours: Shift length for DEFAULT_SHIFT policy
        rounding_cutoff: Entries clocked in on/after this date get
            quarter-hour rounding (default 2025-10-26); None disables it

    Example:
        >>> rules = PayRules()
        >>> rules.travel_rate_factor
        Decimal('0.75')
        >>> PayRules(speed_mph=Decimal("50")).speed_mph
        Decimal('50')
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    default_site_rate: Decimal = Field(DEFAULT_SITE_RATE, gt=0)
    travel_rate_factor: Decimal = Field(TRAVEL_RATE_FACTOR, ge=0)
    speed_mph: Decimal = Field(SPEED_MPH, gt=0)
    driving_factor: Decimal = Field(DRIVING_FACTOR, gt=0)
    earth_radius_mi: float = Field(EARTH_RADIUS_MI, gt=0)
    regular_threshold: Decimal = Field(REGULAR_HOURS_THRESHOLD, gt=0)
    overtime_threshold: Decimal = Field(OVERTIME_HOURS_THRESHOLD, gt=0)
    overtime_multiplier: Decimal = Field(OVERTIME_MULTIPLIER, gt=0)
    doubletime_multiplier: Decimal = Field(DOUBLETIME_MULTIPLIER, gt=0)
    dump_washout_hours: Decimal = Field(DUMP_WASHOUT_HOURS, ge=0)
    shop_time_hours: Decimal = Field(SHOP_TIME_HOURS, ge=0)
    missing_clock_out_policy: MissingClockOutPolicy = MissingClockOutPolicy.ZERO
    default_shift_hours: Decimal = Field(DEFAULT_SHIFT_HOURS, gt=0)
    rounding_cutoff: Optional[dt.date] = ROUNDING_CUTOFF_DATE

    @model_validator(mode="after")
    def validate_thresholds(self) -> "PayRules":
        """Overtime must start before doubletime.

        Raises:
            ValueError: If overtime_threshold is not above regular_threshold
        """
        if self.overtime_threshold <= self.regular_threshold:
            raise ValueError(
                f"overtime_threshold ({self.overtime_threshold}) must be greater "
                f"than regular_threshold ({self.regular_threshold})"
            )
        return self

    @property
    def overtime_cap(self) -> Decimal:
        """Maximum overtime hours per day (4 with the default thresholds)."""
        return self.overtime_threshold - self.regular_threshold


DEFAULT_RULES = PayRules()
