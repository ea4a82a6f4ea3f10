"""Employee profile model for the pay calculator.

Profiles come from the employee directory and supply the fallback site and
drive rates used when a timesheet entry carries no rate override.
"""

from typing import Any, Optional

from pydantic import AliasChoices, Field, field_validator

from paycalc.models.base import BaseDataModel
from paycalc.models.timesheet import LooseNumber


class EmployeeProfile(BaseDataModel):
    """Represents an employee as listed by the employee directory.

    Attributes:
        value: Employee identifier, matches ``TimesheetEntry.employee``
        label: Display name
        hourly_rate_site: Profile site rate (loose number or string)
        hourly_rate_drive: Profile drive rate (loose number or string)
        address: Mailing address
        phone: Phone number
        company_position: Job title
        classification: Trade classification used on certified payroll

    Example:
        >>> profile = EmployeeProfile.model_validate(
        ...     {"value": "jdoe@example.com", "label": "John Doe",
        ...      "hourlyRateSITE": "52.50"}
        ... )
        >>> profile.key
        'jdoe@example.com'
    """

    value: str = Field(
        ..., min_length=1, validation_alias=AliasChoices("value", "email", "employee")
    )
    label: Optional[str] = Field(None, description="Display name")
    hourly_rate_site: Optional[LooseNumber] = Field(None, alias="hourlyRateSITE")
    hourly_rate_drive: Optional[LooseNumber] = Field(None, alias="hourlyRateDrive")
    address: Optional[str] = None
    phone: Optional[str] = None
    company_position: Optional[str] = Field(None, alias="companyPosition")
    classification: Optional[str] = None

    @field_validator("value")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        """Validate that the identifier is not whitespace only.

        Raises:
            ValueError: If the identifier is blank
        """
        if not v.strip():
            raise ValueError("value cannot be empty or whitespace")
        return v.strip()

    @field_validator("hourly_rate_site", "hourly_rate_drive", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def key(self) -> str:
        """Lower-cased identifier used to match timesheet entries."""
        return self.value.lower()

    @property
    def display_name(self) -> str:
        return self.label or self.value
