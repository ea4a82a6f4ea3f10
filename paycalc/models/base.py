"""Base model for all data models in the pay calculator.

This module provides a base Pydantic model with common configuration
for raw backend records and derived report values.
"""

from pydantic import BaseModel, ConfigDict


class BaseDataModel(BaseModel):
    """Base class for all data models.

    Provides common configuration for:
    - Accepting the backend's camelCase keys as well as snake_case names
    - Ignoring unknown keys present in raw records (``_id``, ``scheduleId``...)
    - Arbitrary types support for dates and decimals

    Example:
        >>> from pydantic import Field
        >>> class Crew(BaseDataModel):
        ...     crew_name: str = Field(alias="crewName")
        >>> Crew.model_validate({"crewName": "Bore crew", "_id": "x1"}).crew_name
        'Bore crew'
    """

    model_config = ConfigDict(
        # Allow arbitrary types like Decimal, date, datetime
        arbitrary_types_allowed=True,
        # Validate on assignment to catch errors early
        validate_assignment=True,
        # Raw records arrive with loose types (numbers for strings etc.)
        strict=False,
        # Backend records carry many fields the calculator never reads
        extra="ignore",
        # Allow construction by field name as well as alias
        populate_by_name=True,
        frozen=False,
    )
