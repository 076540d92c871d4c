# salon_app/scheduling.py
#
# Which working hours apply to a staff member on a given salon-local day.
# Every caller (booking availability, calendar day view, schedule debugging)
# goes through resolve_schedule so they all agree on what "same day" means.

import logging
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Iterable, Optional

from .timezone import day_of_week, get_salon_tz, salon_day_start, to_salon_date

logger = logging.getLogger(__name__)


class ScheduleMatch(str, Enum):
    specific = "specific"
    recurring = "recurring"
    none = "none"


def _field(record, name):
    if isinstance(record, dict):
        return record.get(name)
    return getattr(record, name, None)


@dataclass(frozen=True)
class ResolvedSchedule:
    schedule: Optional[Any]
    match: ScheduleMatch
    local_date: date
    day_of_week: int
    day_start: datetime  # aware, salon-local midnight
    timezone: str

    @property
    def is_available(self) -> bool:
        return self.schedule is not None

    @property
    def start_time(self) -> Optional[str]:
        return _field(self.schedule, "start_time") if self.schedule is not None else None

    @property
    def end_time(self) -> Optional[str]:
        return _field(self.schedule, "end_time") if self.schedule is not None else None

    @property
    def break_start(self) -> Optional[str]:
        return _field(self.schedule, "break_start") if self.schedule is not None else None

    @property
    def break_end(self) -> Optional[str]:
        return _field(self.schedule, "break_end") if self.schedule is not None else None

    def working_hours(self) -> Optional[dict]:
        if self.schedule is None:
            return None
        return {
            "start": self.start_time,
            "end": self.end_time,
            "break_start": self.break_start,
            "break_end": self.break_end,
        }


def is_specific_match(schedule, target, tz=None) -> bool:
    """True if ``schedule`` is a date override falling on the salon-local day of ``target``."""
    stored = _field(schedule, "date")
    if stored is None:
        return False
    zone = get_salon_tz(tz)
    stored_day = to_salon_date(stored, zone)
    target_day = to_salon_date(target, zone)
    return (stored_day.year, stored_day.month, stored_day.day) == (
        target_day.year,
        target_day.month,
        target_day.day,
    )


def is_recurring_match(schedule, target, tz=None) -> bool:
    if _field(schedule, "date") is not None:
        return False
    return _field(schedule, "day_of_week") == day_of_week(to_salon_date(target, tz))


def find_specific(schedules: Iterable, target, tz=None):
    return next((s for s in schedules if is_specific_match(s, target, tz)), None)


def find_recurring(schedules: Iterable, target, tz=None):
    return next((s for s in schedules if is_recurring_match(s, target, tz)), None)


def resolve_schedule(schedules: Iterable, target, tz=None) -> ResolvedSchedule:
    """Pick the schedule that applies to ``target`` in the salon's timezone.

    A specific-date entry always beats a recurring weekday entry. When two
    entries of the same kind match, the first one in input order wins. No
    match is a normal result: the staff member is simply off that day.
    """
    zone = get_salon_tz(tz)
    schedules = list(schedules or [])

    local_date = to_salon_date(target, zone)
    day_start = salon_day_start(local_date, zone)
    weekday = day_of_week(local_date)

    schedule = find_specific(schedules, local_date, zone)
    match = ScheduleMatch.specific
    if schedule is None:
        schedule = find_recurring(schedules, local_date, zone)
        match = ScheduleMatch.recurring if schedule is not None else ScheduleMatch.none

    logger.debug(f"Resolved schedule for {local_date} ({zone.key}, dow={weekday}): {match.value}")

    return ResolvedSchedule(
        schedule=schedule,
        match=match,
        local_date=local_date,
        day_of_week=weekday,
        day_start=day_start,
        timezone=zone.key,
    )
