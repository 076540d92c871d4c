# salon_app/availability.py

from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from .config import SLOT_MINUTES
from .core import overlaps, parse_hhmm, minutes_to_hhmm
from .scheduling import ResolvedSchedule
from .timezone import salon_local_to_utc

CANCELLED = "CANCELLED"


def total_duration(services: Iterable, overrides: Optional[dict] = None) -> int:
    # per-staff override wins over the service's default duration
    overrides = overrides or {}
    total = 0
    for service in services:
        override = overrides.get(service.id)
        total += override if override is not None else service.duration
    return total


def slot_conflict(
    resolved: ResolvedSchedule,
    start_minute: int,
    duration: int,
    appointments: Iterable = (),
) -> Optional[str]:
    """Why a booking of ``duration`` minutes at local ``start_minute`` can't happen, or None."""
    if not resolved.is_available:
        return "no_schedule"

    end_minute = start_minute + duration
    if start_minute < parse_hhmm(resolved.start_time) or end_minute > parse_hhmm(resolved.end_time):
        return "outside_hours"

    if resolved.break_start and resolved.break_end:
        if overlaps(start_minute, end_minute, parse_hhmm(resolved.break_start), parse_hhmm(resolved.break_end)):
            return "break"

    slot_start = salon_local_to_utc(resolved.local_date, minutes_to_hhmm(start_minute), resolved.timezone)
    slot_end = slot_start + timedelta(minutes=duration)
    for appt in appointments:
        if appt.status == CANCELLED:
            continue
        if overlaps(slot_start, slot_end, appt.starts_at, appt.ends_at):
            return "booked"

    return None


def available_times(
    resolved: ResolvedSchedule,
    duration: int,
    appointments: Iterable = (),
    now: Optional[datetime] = None,
    step: int = SLOT_MINUTES,
    include_details: bool = False,
) -> List:
    if not resolved.is_available:
        return []

    if now is None:
        now = datetime.utcnow()
    appointments = list(appointments)

    times = []
    for start_minute in range(0, 24 * 60, step):
        label = minutes_to_hhmm(start_minute)
        reason = slot_conflict(resolved, start_minute, duration, appointments)

        # outside working hours are not offered at all
        if reason == "outside_hours":
            continue

        if salon_local_to_utc(resolved.local_date, label, resolved.timezone) < now:
            reason = "past"

        if include_details:
            entry = {"time": label, "available": reason is None}
            if reason is not None:
                entry["reason"] = reason
            times.append(entry)
        elif reason is None:
            times.append(label)

    return times
