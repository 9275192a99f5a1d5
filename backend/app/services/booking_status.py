# backend/app/services/booking_status.py
"""
Booking status lifecycle and the completion time gate.

    pending_approval --confirm--> confirmed --complete--> completed
    pending_approval --decline--> declined
    pending_approval --cancel---> cancelled
    confirmed        --cancel---> cancelled
    confirmed        --no_show--> no_show

completed, cancelled, declined and no_show are terminal.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta

TRANSITIONS: dict[str, frozenset[str]] = {
    "pending_approval": frozenset({"confirmed", "declined", "cancelled"}),
    "confirmed": frozenset({"completed", "cancelled", "no_show"}),
}


def can_transition(current: str, target: str) -> bool:
    return target in TRANSITIONS.get(current, frozenset())


def sources_for(target: str) -> tuple[str, ...]:
    """Statuses from which target is reachable, in a stable order."""
    return tuple(sorted(s for s, targets in TRANSITIONS.items() if target in targets))


@dataclass(frozen=True)
class CompletionWindow:
    allowed_at: datetime
    can_complete: bool
    minutes_left: int

    @property
    def wait_message(self) -> str:
        if self.can_complete:
            return ""
        plural = "s" if self.minutes_left != 1 else ""
        return f"Can complete in {self.minutes_left} min{plural}"


def completion_allowed_at(start_time: datetime, duration_minutes: int, max_wait_minutes: int = 20) -> datetime:
    """start_time + min(max_wait, duration)."""
    return start_time + timedelta(minutes=min(max_wait_minutes, duration_minutes))


def completion_window(
    start_time: datetime,
    duration_minutes: int,
    now: datetime,
    max_wait_minutes: int = 20,
) -> CompletionWindow:
    allowed_at = completion_allowed_at(start_time, duration_minutes, max_wait_minutes)
    if now >= allowed_at:
        return CompletionWindow(allowed_at, True, 0)
    minutes_left = math.ceil((allowed_at - now).total_seconds() / 60)
    return CompletionWindow(allowed_at, False, minutes_left)
