"""Timesheet data model for the pay calculator.

This module defines the TimesheetEntry model which represents a single raw
clock-in/clock-out record as exported by the scheduling backend. The model
is deliberately permissive: timestamps, locations and rate overrides are kept
as the loose strings the backend stores, and interpretation happens in the
calculators where bad values degrade to zero instead of failing validation.
"""

import datetime as dt
from typing import Any, Optional, Union

from pydantic import AliasChoices, Field, field_validator

from paycalc.models.base import BaseDataModel

# Loose scalar accepted for numeric-ish fields stored as free text
LooseNumber = Union[float, int, str]

# Number wrappers used by MongoDB extended JSON exports
_EXTENDED_JSON_NUMBERS = (
    "$numberDecimal",
    "$numberDouble",
    "$numberInt",
    "$numberLong",
)


class TimesheetEntry(BaseDataModel):
    """Represents a single raw timesheet entry.

    Site entries carry a clock-in/clock-out window and an optional unpaid
    lunch window. Drive entries carry either GPS positions ("lat,lon"),
    odometer readings, or an operator-entered distance, plus optional
    dump/washout and shop-time add-ons.

    Attributes:
        record_id: Backend record identifier (``_id`` or ``recordId``)
        employee: Employee identifier (usually an email address)
        type: Free-text category, matched on "site" / "drive"
        clock_in: Clock-in timestamp as stored
        clock_out: Clock-out timestamp as stored
        lunch_start: Start of the unpaid break
        lunch_end: End of the unpaid break
        location_in: Start position, "lat,lon" or odometer reading
        location_out: End position, "lat,lon" or odometer reading
        manual_distance: Operator-entered distance override (miles)
        manual_duration: Operator-entered hours override
        dump_washout: Dump/washout add-on, e.g. "1.00 hrs (2 qty)"
        shop_time: Shop-time add-on, e.g. "0.25 hrs (1 qty)"
        hourly_rate_site: Per-entry site rate override
        hourly_rate_drive: Per-entry drive rate override
        per_diem: Flat daily allowance recorded on the entry

    Example:
        >>> entry = TimesheetEntry.model_validate({
        ...     "employee": "jdoe@example.com",
        ...     "type": "Site Time",
        ...     "clockIn": "2025-06-02T07:00:00.000Z",
        ...     "clockOut": "2025-06-02T15:30:00.000Z",
        ... })
        >>> entry.is_site_time
        True
    """

    record_id: Optional[str] = Field(
        None, validation_alias=AliasChoices("_id", "recordId", "record_id")
    )
    employee: str = Field("", description="Employee identifier")
    type: str = Field("", description="Entry category (site/drive)")
    clock_in: Optional[str] = Field(None, alias="clockIn")
    clock_out: Optional[str] = Field(None, alias="clockOut")
    lunch_start: Optional[str] = Field(None, alias="lunchStart")
    lunch_end: Optional[str] = Field(None, alias="lunchEnd")
    location_in: Optional[str] = Field(None, alias="locationIn")
    location_out: Optional[str] = Field(None, alias="locationOut")
    manual_distance: Optional[LooseNumber] = Field(None, alias="manualDistance")
    manual_duration: Optional[LooseNumber] = Field(None, alias="manualDuration")
    dump_washout: Optional[Union[bool, float, int, str]] = Field(
        None, alias="dumpWashout"
    )
    shop_time: Optional[Union[bool, float, int, str]] = Field(None, alias="shopTime")
    hourly_rate_site: Optional[LooseNumber] = Field(None, alias="hourlyRateSITE")
    hourly_rate_drive: Optional[LooseNumber] = Field(None, alias="hourlyRateDrive")
    per_diem: Optional[LooseNumber] = Field(None, alias="perDiem")

    @field_validator("record_id", mode="before")
    @classmethod
    def coerce_record_id(cls, v: Any) -> Optional[str]:
        """Accept numeric or ObjectId-like identifiers as strings."""
        if v is None:
            return None
        return str(v)

    @field_validator("employee", "type", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        """Treat missing text fields as empty strings.

        Args:
            v: The raw value

        Returns:
            The value as a stripped string ("" for None)
        """
        if v is None:
            return ""
        return str(v).strip()

    @field_validator(
        "clock_in",
        "clock_out",
        "lunch_start",
        "lunch_end",
        "location_in",
        "location_out",
        mode="before",
    )
    @classmethod
    def coerce_optional_text(cls, v: Any) -> Optional[str]:
        """Normalise optional text fields.

        Datetimes are rendered as ISO strings, numbers (odometer readings)
        as plain strings, and blank strings become None.

        Args:
            v: The raw value

        Returns:
            The value as a stripped string, or None when blank
        """
        if v is None:
            return None
        if isinstance(v, (dt.datetime, dt.date)):
            return v.isoformat()
        text = str(v).strip()
        return text or None

    @field_validator(
        "manual_distance",
        "manual_duration",
        "hourly_rate_site",
        "hourly_rate_drive",
        "per_diem",
        mode="before",
    )
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        """Blank strings in numeric-ish fields mean "not set".

        Extended JSON numbers such as ``{"$numberDecimal": "5"}`` are unwrapped.
        """
        if isinstance(v, dict) and len(v) == 1:
            key = next(iter(v))
            if key in _EXTENDED_JSON_NUMBERS:
                v = v[key]
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def type_key(self) -> str:
        """Lower-cased entry type used for category matching."""
        return self.type.lower()

    @property
    def is_site_time(self) -> bool:
        """True if the entry type mentions "site"."""
        return "site" in self.type_key

    @property
    def is_drive_time(self) -> bool:
        """True if the entry type mentions "drive" and not "site"."""
        return not self.is_site_time and "drive" in self.type_key

    @property
    def employee_key(self) -> str:
        """Lower-cased employee identifier used for grouping."""
        return self.employee.lower()
