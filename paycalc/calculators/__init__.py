"""Calculator modules for the pay calculator."""

from paycalc.calculators.daily_hours import (
    DailyTotals,
    DayAggregate,
    DayEntry,
    EntryAttribution,
    attribute_daily_hours,
    build_day_entry,
    calculate_batch,
    calculate_daily_totals,
    group_entries_by_day,
)
from paycalc.calculators.distance import (
    DistanceResult,
    DistanceSource,
    GeoPoint,
    haversine,
    parse_location,
    resolve_distance,
)
from paycalc.calculators.hours_calculator import (
    EntryHours,
    compute_entry_hours,
    round_to_quarter_hour,
)
from paycalc.calculators.parsing import ParseIssue
from paycalc.calculators.rates import (
    parse_rate,
    profile_rates,
    resolve_rate,
    resolve_site_rate,
    resolve_travel_rate,
)
from paycalc.calculators.rules import DEFAULT_RULES, MissingClockOutPolicy, PayRules
from paycalc.calculators.time_utils import (
    end_of_week,
    parse_timestamp,
    start_of_week,
    timedelta_to_decimal_hours,
)

__all__ = [
    # daily_hours
    "DailyTotals",
    "DayAggregate",
    "DayEntry",
    "EntryAttribution",
    "attribute_daily_hours",
    "build_day_entry",
    "calculate_batch",
    "calculate_daily_totals",
    "group_entries_by_day",
    # distance
    "DistanceResult",
    "DistanceSource",
    "GeoPoint",
    "haversine",
    "parse_location",
    "resolve_distance",
    # hours_calculator
    "EntryHours",
    "compute_entry_hours",
    "round_to_quarter_hour",
    # parsing
    "ParseIssue",
    # rates
    "parse_rate",
    "profile_rates",
    "resolve_rate",
    "resolve_site_rate",
    "resolve_travel_rate",
    # rules
    "DEFAULT_RULES",
    "MissingClockOutPolicy",
    "PayRules",
    # time_utils
    "end_of_week",
    "parse_timestamp",
    "start_of_week",
    "timedelta_to_decimal_hours",
]
