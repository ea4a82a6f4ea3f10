"""Schedule reader for loading schedules and employee profiles from JSON.

The backend's schedules page returns a document of this shape:

```
{
  "schedules": [{"_id": ..., "timesheet": [...], ...}, ...],
  "initialData": {
    "employees": [{"value": ..., "label": ..., ...}, ...],
    "estimates": [{"value": ..., "fringe": ...}, ...]
  }
}
```

A document holding only ``schedules`` (or ``employees`` and ``estimates``
at top level), or a bare list of schedules, is accepted as well.
"""

import json
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Union

from pydantic import ValidationError

from paycalc.calculators.rates import parse_rate
from paycalc.models.employee import EmployeeProfile
from paycalc.models.schedule import Schedule

logger = logging.getLogger(__name__)


class ScheduleReadError(Exception):
    """Raised when an input file cannot be read or has the wrong shape."""


@dataclass
class ScheduleData:
    """Schedules and employee profiles read from one document.

    Attributes:
        schedules: Valid schedules, in document order
        employees: Employee profiles keyed by lower-cased identifier
        estimate_fringe: Fringe-benefit type per estimate reference
        skipped: Number of schedules that failed validation
        skipped_entries: Number of timesheet entries dropped from valid
            schedules
    """

    schedules: List[Schedule] = field(default_factory=list)
    employees: Dict[str, EmployeeProfile] = field(default_factory=dict)
    estimate_fringe: Dict[str, str] = field(default_factory=dict)
    skipped: int = 0

    @property
    def entry_count(self) -> int:
        return sum(len(schedule.timesheet) for schedule in self.schedules)

    @property
    def skipped_entries(self) -> int:
        return sum(schedule.skipped_entries for schedule in self.schedules)


def _load_json(path: Union[str, Path]) -> Any:
    path = Path(path)
    try:
        with path.open(encoding="utf-8") as handle:
            return json.load(handle)
    except FileNotFoundError:
        raise ScheduleReadError(f"File not found: {path}") from None
    except json.JSONDecodeError as e:
        raise ScheduleReadError(f"Invalid JSON in {path}: {e}") from e
    except OSError as e:
        raise ScheduleReadError(f"Cannot read {path}: {e}") from e


class ScheduleReader:
    """Reader for schedule documents exported by the scheduling backend.

    Invalid schedules, timesheet entries and employee records are logged and
    skipped so one bad record does not block a payroll run.

    Example:
        >>> reader = ScheduleReader()
        >>> data = reader.read("schedules.json")
        >>> len(data.schedules), len(data.employees)
        (12, 5)
    """

    def read(self, path: Union[str, Path]) -> ScheduleData:
        """Read a schedules document from disk.

        Args:
            path: Path of the JSON document

        Returns:
            ScheduleData with schedules and employee profiles

        Raises:
            ScheduleReadError: If the file is missing, not JSON, or not a
                schedules document
        """
        logger.info(f"Reading schedules from {path}")
        data = self.parse(_load_json(path))
        logger.info(
            f"Read {len(data.schedules)} schedules with {data.entry_count} entries "
            f"and {len(data.employees)} employees ({data.skipped} schedules and "
            f"{data.skipped_entries} entries skipped)"
        )
        return data

    def parse(self, document: Any) -> ScheduleData:
        """Build ScheduleData from an already decoded document."""
        raw_estimates: Any = []
        if isinstance(document, list):
            raw_schedules, raw_employees = document, []
        elif isinstance(document, dict):
            raw_schedules = document.get("schedules", [])
            initial_data = document.get("initialData") or {}
            raw_employees = initial_data.get("employees") or document.get(
                "employees", []
            )
            raw_estimates = initial_data.get("estimates") or document.get(
                "estimates", []
            )
        else:
            raise ScheduleReadError(
                f"Expected a JSON object or list, got {type(document).__name__}"
            )

        if not isinstance(raw_schedules, list):
            raise ScheduleReadError("'schedules' must be a list")

        data = ScheduleData(
            employees=self.parse_employees(raw_employees),
            estimate_fringe=self.parse_estimate_fringe(raw_estimates),
        )
        for index, raw in enumerate(raw_schedules):
            try:
                data.schedules.append(Schedule.model_validate(raw))
            except ValidationError as e:
                data.skipped += 1
                logger.warning(f"Skipping invalid schedule at index {index}: {e}")
        return data

    def parse_employees(self, raw_employees: Any) -> Dict[str, EmployeeProfile]:
        """Build the employee map keyed by lower-cased identifier.

        Later records with the same identifier replace earlier ones.
        """
        employees: Dict[str, EmployeeProfile] = {}
        if not isinstance(raw_employees, list):
            logger.warning("Ignoring employees: expected a list")
            return employees

        for raw in raw_employees:
            try:
                profile = EmployeeProfile.model_validate(raw)
            except ValidationError as e:
                logger.warning(f"Skipping invalid employee record: {e}")
                continue
            employees[profile.key] = profile
        return employees

    def parse_estimate_fringe(self, raw_estimates: Any) -> Dict[str, str]:
        """Map estimate references to their fringe-benefit type.

        Estimates without a reference or a fringe type are left out.
        """
        if not isinstance(raw_estimates, list):
            logger.warning("Ignoring estimates: expected a list")
            return {}

        fringe: Dict[str, str] = {}
        for raw in raw_estimates:
            if not isinstance(raw, dict):
                continue
            reference = str(raw.get("value") or "").strip()
            fringe_type = str(raw.get("fringe") or "").strip()
            if reference and fringe_type:
                fringe[reference] = fringe_type
        return fringe


def read_comp_rates(path: Union[str, Path]) -> Dict[str, Decimal]:
    """Read workers-comp rates per $100 of wages.

    Accepts a mapping ``{"Excavation": 4.25}`` or the backend's constants
    list ``[{"description": "Excavation", "value": "4.25"}, ...]``. Keys are
    lower-cased; unreadable rates are skipped.

    Raises:
        ScheduleReadError: If the file cannot be read or has the wrong shape
    """
    document = _load_json(path)
    if isinstance(document, dict):
        pairs = list(document.items())
    elif isinstance(document, list):
        pairs = [
            (item.get("description"), item.get("value"))
            for item in document
            if isinstance(item, dict)
        ]
    else:
        raise ScheduleReadError(
            f"Expected a JSON object or list of comp rates in {path}"
        )

    rates: Dict[str, Decimal] = {}
    for description, value in pairs:
        rate = parse_rate(value)
        if not description or rate is None:
            logger.debug(f"Skipping comp rate {description!r}: {value!r}")
            continue
        rates[str(description).strip().lower()] = rate
    logger.info(f"Read {len(rates)} workers comp rates from {path}")
    return rates
