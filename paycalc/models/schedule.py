"""Schedule data model for the pay calculator.

A schedule is one crew assignment on a job. It owns the timesheet entries
recorded against it and supplies the report context for them: the estimate
reference, the certified-payroll flag, the workers-comp classification
and the fringe-benefit type.
"""

import datetime as dt
import logging
from typing import Any, List, Optional

from pydantic import (
    AliasChoices,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from paycalc.models.base import BaseDataModel
from paycalc.models.timesheet import TimesheetEntry

logger = logging.getLogger(__name__)


class Schedule(BaseDataModel):
    """Represents a scheduled job and its timesheet entries.

    Attributes:
        schedule_id: Backend identifier (``_id``)
        estimate: Estimate reference the job was sold under
        from_date: Scheduled start, used as a date fallback for entries
        certified_payroll: Raw certified-payroll flag ("Yes"/"No")
        item: Workers-comp classification of the work
        fringe: Fringe-benefit type set on the schedule itself
        title: Job title (``title``, ``projectTitle`` or ``jobTitle``)
        timesheet: Raw timesheet entries recorded on this schedule
        skipped_entries: Number of timesheet entries dropped as invalid

    Example:
        >>> schedule = Schedule.model_validate({
        ...     "_id": "sch-1",
        ...     "estimate": "EST-1001",
        ...     "fromDate": "2025-06-02T07:00:00.000Z",
        ...     "certifiedPayroll": "Yes",
        ...     "timesheet": [],
        ... })
        >>> schedule.is_certified
        True
    """

    schedule_id: Optional[str] = Field(
        None, validation_alias=AliasChoices("_id", "id", "schedule_id")
    )
    estimate: Optional[str] = None
    from_date: Optional[str] = Field(None, alias="fromDate")
    certified_payroll: Optional[str] = Field(None, alias="certifiedPayroll")
    item: Optional[str] = None
    fringe: Optional[str] = None
    title: Optional[str] = Field(
        None, validation_alias=AliasChoices("projectTitle", "title", "jobTitle")
    )
    timesheet: List[TimesheetEntry] = Field(default_factory=list)
    skipped_entries: int = Field(0, exclude=True)

    @model_validator(mode="before")
    @classmethod
    def drop_invalid_entries(cls, data: Any) -> Any:
        """Validate timesheet entries one at a time.

        An entry that cannot be read is dropped with a warning so the other
        entries on the schedule still reach payroll.
        """
        if not isinstance(data, dict) or not isinstance(data.get("timesheet"), list):
            return data

        raw_entries = data["timesheet"]
        entries = []
        for index, raw in enumerate(raw_entries):
            try:
                entries.append(TimesheetEntry.model_validate(raw))
            except ValidationError as e:
                logger.warning(
                    f"Dropping invalid timesheet entry {index} on schedule "
                    f"{data.get('_id')}: {e}"
                )
        return {
            **data,
            "timesheet": entries,
            "skipped_entries": len(raw_entries) - len(entries),
        }

    @field_validator(
        "schedule_id", "estimate", "from_date", "item", "fringe", mode="before"
    )
    @classmethod
    def coerce_optional_text(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        if isinstance(v, (dt.datetime, dt.date)):
            return v.isoformat()
        text = str(v).strip()
        return text or None

    @field_validator("certified_payroll", mode="before")
    @classmethod
    def coerce_flag(cls, v: Any) -> Optional[str]:
        """Render boolean flags the way the backend stores them."""
        if isinstance(v, bool):
            return "Yes" if v else "No"
        return v

    @field_validator("timesheet", mode="before")
    @classmethod
    def coerce_timesheet(cls, v: Any) -> Any:
        """A missing or non-list timesheet means no entries."""
        if not isinstance(v, list):
            return []
        return v

    @property
    def is_certified(self) -> bool:
        return (self.certified_payroll or "").strip().lower() == "yes"

    @property
    def classification(self) -> str:
        """Workers-comp classification, "Uncategorized" when missing."""
        return self.item or "Uncategorized"

    @property
    def display_title(self) -> str:
        return self.title or "Unknown Project"
