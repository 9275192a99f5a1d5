# backend/app/services/slots/calculator.py
"""
Level 1: Effective opening window of a business on one date.

Precedence:
  1. Whole-day closure (is_closed, no open_time)  → closed, nothing else matters
  2. Open override (not is_closed)                → its hours replace the weekly row
  3. Weekly hours for the weekday                 → closed if missing or is_closed

Blackouts (is_closed with both times) are collected separately and carved out
of whichever window applies.

Does NOT contain:
✗ Bookings (checked at Level 2)
✗ Service duration (Level 2)
✗ "Now" (Level 2)
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ...models.generated import BusinessAvailabilityExceptions
from ...repositories.availability_exceptions import ExceptionRepository
from ...repositories.hours import HoursRepository
from ...utils.intervals import Interval, at, weekday_index

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DayWindow:
    """Open interval of a day plus the blackouts inside it."""
    opens_at: datetime
    closes_at: datetime
    blackouts: tuple[Interval, ...] = ()
    source: str = "weekly"  # "weekly" | "override"

    @property
    def interval(self) -> Interval:
        return Interval(self.opens_at, self.closes_at)


def is_whole_day_closure(ex: BusinessAvailabilityExceptions) -> bool:
    return bool(ex.is_closed) and ex.open_time is None


def is_blackout(ex: BusinessAvailabilityExceptions) -> bool:
    return bool(ex.is_closed) and ex.open_time is not None and ex.close_time is not None


def is_open_override(ex: BusinessAvailabilityExceptions) -> bool:
    return not ex.is_closed


def resolve_day_window(
    hours: HoursRepository,
    exceptions: ExceptionRepository,
    business_id: int,
    target_date: date,
) -> Optional[DayWindow]:
    """
    Resolve the window in which slots may be tiled.

    Returns:
        DayWindow, or None when the business is closed for the whole day.
    """
    # Step 1: Exceptions for the date
    day_exceptions = exceptions.list_for_date(business_id, target_date)

    # Step 2: Whole-day closure wins over everything
    if any(is_whole_day_closure(ex) for ex in day_exceptions):
        return None

    # Step 3: Open override replaces weekly hours
    overrides = [
        ex for ex in day_exceptions
        if is_open_override(ex) and ex.open_time is not None and ex.close_time is not None
    ]
    if len(overrides) > 1:
        logger.warning(
            f"Business {business_id} has {len(overrides)} open overrides on {target_date}, "
            f"using exception {overrides[0].id}"
        )

    if overrides:
        opens_at = at(target_date, overrides[0].open_time)
        closes_at = at(target_date, overrides[0].close_time)
        source = "override"
    else:
        row = hours.get_for_day(business_id, weekday_index(target_date))
        if row is None or row.is_closed:
            return None
        opens_at = at(target_date, row.open_time)
        closes_at = at(target_date, row.close_time)
        source = "weekly"

    if closes_at <= opens_at:
        logger.warning(
            f"Business {business_id} has an empty {source} window on {target_date} "
            f"({opens_at.time()}–{closes_at.time()})"
        )
        return None

    # Step 4: Blackouts inside the window
    blackouts = tuple(
        Interval(at(target_date, ex.open_time), at(target_date, ex.close_time))
        for ex in day_exceptions
        if is_blackout(ex)
    )

    return DayWindow(
        opens_at=opens_at,
        closes_at=closes_at,
        blackouts=blackouts,
        source=source,
    )
