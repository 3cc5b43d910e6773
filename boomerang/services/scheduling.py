"""
Timing bucket -> concrete send time.

All rules are evaluated in the owner's wall-clock timezone and the result is
handed to the store as naive UTC.
"""
import os
from datetime import datetime, timedelta, timezone, time
from typing import Optional
from zoneinfo import ZoneInfo

from boomerang.models.enums import Timing

LOCAL_TZ = ZoneInfo(os.getenv("APP_TIMEZONE", "America/New_York"))

END_OF_DAY_HOUR = 17
MORNING_HOUR = 9
AFTERNOON_HOUR = 14
LATER_MORNING_HOUR = 10


def local_now(tz: ZoneInfo = LOCAL_TZ) -> datetime:
    return datetime.now(tz)


def _at(day: datetime, hour: int) -> datetime:
    return datetime.combine(day.date(), time(hour=hour), tzinfo=day.tzinfo)


def compute_scheduled_for(timing: Timing | str, now: datetime) -> datetime:
    """Resolve a timing bucket against `now`, keeping `now`'s timezone.

    - immediate          -> now
    - end_of_day         -> today 17:00, tomorrow 17:00 once past 17:00
    - tomorrow           -> tomorrow 09:00
    - next_week          -> +7 days 09:00
    - tomorrow_afternoon -> tomorrow 14:00
    - in_two_days        -> +2 days 10:00
    """
    timing = Timing(timing)

    if timing is Timing.IMMEDIATE:
        return now
    if timing is Timing.END_OF_DAY:
        end_of_day = _at(now, END_OF_DAY_HOUR)
        if now > end_of_day:
            end_of_day = _at(now + timedelta(days=1), END_OF_DAY_HOUR)
        return end_of_day
    if timing is Timing.TOMORROW:
        return _at(now + timedelta(days=1), MORNING_HOUR)
    if timing is Timing.NEXT_WEEK:
        return _at(now + timedelta(days=7), MORNING_HOUR)
    if timing is Timing.TOMORROW_AFTERNOON:
        return _at(now + timedelta(days=1), AFTERNOON_HOUR)
    if timing is Timing.IN_TWO_DAYS:
        return _at(now + timedelta(days=2), LATER_MORNING_HOUR)

    raise ValueError(f"Unhandled timing: {timing}")


def to_storage(dt: Optional[datetime]) -> Optional[datetime]:
    """Aware datetime -> naive UTC for the store."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def from_storage(dt: Optional[datetime]) -> Optional[datetime]:
    """Naive UTC from the store -> aware UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def start_of_local_day(now: datetime) -> datetime:
    return _at(now, 0)
