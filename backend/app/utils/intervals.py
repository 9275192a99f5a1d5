# backend/app/utils/intervals.py
"""
Wall-clock time and half-open interval helpers shared by the slot resolver
and the settlement engine.

All datetimes handled here are naive and expressed in the business timezone.
"""

from datetime import date, datetime, time, timedelta
from typing import NamedTuple, Optional
from zoneinfo import ZoneInfo


class Interval(NamedTuple):
    """Half-open interval [start, end)."""
    start: datetime
    end: datetime

    def overlaps(self, other: "Interval") -> bool:
        return overlaps(self.start, self.end, other.start, other.end)


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Strict intersection; touching endpoints do not overlap."""
    return a_start < b_end and a_end > b_start


def time_str_to_minutes(value: str) -> int:
    """'HH:MM' or 'HH:MM:SS' → minutes since midnight."""
    parts = value.strip().split(":")
    if len(parts) not in (2, 3):
        raise ValueError(f"Invalid time string: {value!r}")
    hours, minutes = int(parts[0]), int(parts[1])
    if not (0 <= hours < 24 and 0 <= minutes < 60):
        raise ValueError(f"Invalid time string: {value!r}")
    return hours * 60 + minutes


def parse_time(value: time | str | None) -> Optional[time]:
    """Accept a time or 'HH:MM[:SS]' string as stored by the hours tables."""
    if value is None or isinstance(value, time):
        return value
    total = time_str_to_minutes(value)
    return time(total // 60, total % 60)


def at(target_date: date, value: time | str) -> datetime:
    """Wall-clock datetime for a time of day on target_date."""
    return datetime.combine(target_date, parse_time(value))


def day_bounds(target_date: date) -> Interval:
    """[00:00, next day 00:00) of target_date."""
    start = datetime.combine(target_date, time.min)
    return Interval(start, start + timedelta(days=1))


def weekday_index(target_date: date) -> int:
    """Day-of-week index as stored in business_hours (0 = Sunday ... 6 = Saturday)."""
    return (target_date.weekday() + 1) % 7


def local_now(tz_name: str) -> datetime:
    """Current wall-clock time in tz_name, returned naive."""
    return datetime.now(ZoneInfo(tz_name)).replace(tzinfo=None)


def to_local(value: datetime, tz_name: str) -> datetime:
    """Normalize an aware datetime into naive wall-clock time; naive passes through."""
    if value.tzinfo is None:
        return value
    return value.astimezone(ZoneInfo(tz_name)).replace(tzinfo=None)
