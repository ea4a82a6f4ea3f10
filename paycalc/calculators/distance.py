"""Drive distance resolution for the pay calculator.

A drive entry's distance comes from the first source that yields a value:

1. The operator-entered manual distance, when positive
2. GPS haversine distance between "lat,lon" clock-in and clock-out positions
3. The difference between two odometer readings
4. Zero
"""

import logging
import math
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Tuple, Union

from paycalc.calculators.parsing import ParseIssue, parse_number, to_decimal
from paycalc.calculators.rules import EARTH_RADIUS_MI
from paycalc.models.timesheet import TimesheetEntry

logger = logging.getLogger(__name__)


class DistanceSource(str, Enum):
    """Where a drive entry's distance came from."""

    MANUAL = "manual"
    GPS = "gps"
    ODOMETER = "odometer"
    NONE = "none"


@dataclass(frozen=True)
class GeoPoint:
    """A latitude/longitude position in decimal degrees."""

    lat: float
    lon: float


@dataclass
class DistanceResult:
    """Resolved distance of a drive entry.

    Attributes:
        miles: Distance in miles (never negative)
        source: Which source produced the distance
        issues: Problems met while resolving
    """

    miles: Decimal
    source: DistanceSource
    issues: List[ParseIssue] = field(default_factory=list)


def parse_location(value: Optional[str]) -> Union[GeoPoint, float, None]:
    """Interpret a location field as a GPS position or an odometer reading.

    A value containing a comma whose first two parts are numbers within
    latitude (+/-90) and longitude (+/-180) range is a GPS position.
    Otherwise the value (with thousands separators removed) is read as an
    odometer reading, so "104,233" is 104233 miles.

    Args:
        value: Raw location string

    Returns:
        GeoPoint, odometer reading as float, or None

    Example:
        >>> parse_location("33.4484, -112.0740")
        GeoPoint(lat=33.4484, lon=-112.074)
        >>> parse_location("104,233")
        104233.0
        >>> parse_location("Yard") is None
        True
    """
    text = str(value or "").strip()
    if not text:
        return None
    if "," in text:
        parts = [parse_number(p) for p in text.split(",")]
        if len(parts) >= 2 and parts[0] is not None and parts[1] is not None:
            lat, lon = parts[0], parts[1]
            if abs(lat) <= 90 and abs(lon) <= 180:
                return GeoPoint(lat=lat, lon=lon)
    return parse_number(text.replace(",", ""))


def haversine(
    point_a: GeoPoint, point_b: GeoPoint, radius: float = EARTH_RADIUS_MI
) -> float:
    """Great-circle distance between two positions.

    Args:
        point_a: Start position
        point_b: End position
        radius: Sphere radius; the unit of the result follows it (miles)

    Returns:
        Distance in the unit of ``radius``

    Example:
        >>> round(haversine(GeoPoint(0.0, 0.0), GeoPoint(0.0, 1.0)), 2)
        69.09
    """
    d_lat = math.radians(point_b.lat - point_a.lat)
    d_lon = math.radians(point_b.lon - point_a.lon)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(point_a.lat))
        * math.cos(math.radians(point_b.lat))
        * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return radius * c


def _manual_distance(entry: TimesheetEntry) -> Tuple[Optional[float], bool]:
    """Return (distance, malformed) for the manual distance override."""
    if entry.manual_distance is None:
        return None, False
    distance = parse_number(entry.manual_distance)
    if distance is None:
        return None, True
    return (distance if distance > 0 else None), False


def resolve_distance(
    entry: TimesheetEntry, earth_radius_mi: float = EARTH_RADIUS_MI
) -> DistanceResult:
    """Resolve the driven distance of an entry by source priority.

    Args:
        entry: Timesheet entry (any type; only drive entries use the result)
        earth_radius_mi: Earth radius for the GPS calculation

    Returns:
        DistanceResult with miles, source and any issues

    Example:
        >>> entry = TimesheetEntry.model_validate({
        ...     "type": "Drive Time", "manualDistance": "50",
        ...     "locationIn": "33.0,-112.0", "locationOut": "34.0,-112.0",
        ... })
        >>> resolve_distance(entry).miles
        Decimal('50.0')
    """
    issues: List[ParseIssue] = []

    manual, malformed = _manual_distance(entry)
    if malformed:
        logger.debug(
            f"Ignoring unreadable manual distance {entry.manual_distance!r} "
            f"on record {entry.record_id}"
        )
        issues.append(ParseIssue.MALFORMED_MANUAL_DISTANCE)
    if manual is not None:
        return DistanceResult(to_decimal(manual), DistanceSource.MANUAL, issues)

    start = parse_location(entry.location_in)
    end = parse_location(entry.location_out)

    if isinstance(start, GeoPoint) and isinstance(end, GeoPoint):
        miles = haversine(start, end, earth_radius_mi)
        return DistanceResult(to_decimal(miles), DistanceSource.GPS, issues)

    if isinstance(start, float) and isinstance(end, float):
        driven = end - start
        if driven > 0:
            return DistanceResult(to_decimal(driven), DistanceSource.ODOMETER, issues)
        issues.append(ParseIssue.ODOMETER_NOT_INCREASING)
        return DistanceResult(Decimal("0"), DistanceSource.ODOMETER, issues)

    issues.append(ParseIssue.NO_DISTANCE)
    return DistanceResult(Decimal("0"), DistanceSource.NONE, issues)
