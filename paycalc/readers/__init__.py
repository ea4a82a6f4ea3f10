"""Readers for schedule documents and workers-comp rates."""

from paycalc.readers.schedule_reader import (
    ScheduleData,
    ScheduleReadError,
    ScheduleReader,
    read_comp_rates,
)

__all__ = [
    "ScheduleData",
    "ScheduleReadError",
    "ScheduleReader",
    "read_comp_rates",
]
