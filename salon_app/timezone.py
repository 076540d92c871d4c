# salon_app/timezone.py
#
# Salon-local calendar helpers. Stored instants are naive UTC; everything a
# customer or owner sees (dates, HH:mm labels, weekdays) is in the salon's zone.

import logging
from datetime import date, datetime, time, timedelta, timezone
from functools import lru_cache
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .config import DEFAULT_SALON_TIMEZONE

logger = logging.getLogger(__name__)

FALLBACK_TIMEZONE = "Asia/Ho_Chi_Minh"


@lru_cache(maxsize=128)
def _load_zone(name: str) -> Optional[ZoneInfo]:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, TypeError, OSError):
        # OSError covers names that hit a tzdata directory or are too long
        logger.warning(f"Unknown timezone {name!r}, falling back to {DEFAULT_SALON_TIMEZONE}")
        return None


def is_known_timezone(name) -> bool:
    return isinstance(name, str) and bool(name) and _load_zone(name) is not None


def get_salon_tz(tz=None) -> ZoneInfo:
    """Return the salon's zone, or the default zone when ``tz`` is missing or bad.

    Never raises: timezone is operator-configured and a bad value must not
    block availability computation.
    """
    if isinstance(tz, ZoneInfo):
        return tz
    if isinstance(tz, str) and tz:
        zone = _load_zone(tz)
        if zone is not None:
            return zone
    default = _load_zone(DEFAULT_SALON_TIMEZONE)
    if default is None:
        return ZoneInfo(FALLBACK_TIMEZONE)
    return default


def day_of_week(day: date) -> int:
    # 0=Sunday ... 6=Saturday
    return day.isoweekday() % 7


def to_salon_date(value, tz=None) -> date:
    """Calendar day of ``value`` as seen in the salon.

    Plain dates are already calendar days. Datetimes are instants: aware ones
    are converted to the salon zone, naive ones are taken as UTC.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(get_salon_tz(tz)).date()
    return value


def salon_day_start(day: date, tz=None) -> datetime:
    # aware local midnight
    return datetime.combine(day, time.min, tzinfo=get_salon_tz(tz))


def salon_local_to_utc(day: date, hhmm: str, tz=None) -> datetime:
    hour, minute = (int(part) for part in hhmm.split(":"))
    local = datetime.combine(day, time(hour, minute), tzinfo=get_salon_tz(tz))
    return local.astimezone(timezone.utc).replace(tzinfo=None)


def salon_day_bounds_utc(day: date, tz=None):
    """Naive-UTC ``[start, end)`` covering the salon-local calendar day."""
    zone = get_salon_tz(tz)
    start = salon_day_start(day, zone).astimezone(timezone.utc).replace(tzinfo=None)
    end = salon_day_start(day + timedelta(days=1), zone).astimezone(timezone.utc).replace(tzinfo=None)
    return start, end


def format_salon_time(instant: datetime, tz=None) -> str:
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(get_salon_tz(tz)).strftime("%H:%M")


def salon_today(tz=None, now: Optional[datetime] = None) -> date:
    if now is None:
        now = datetime.now(timezone.utc)
    return to_salon_date(now, tz)
