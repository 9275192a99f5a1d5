"""
Pydantic schemas for slots API.
"""

from datetime import date, datetime
from pydantic import BaseModel, Field


class TimeSlotRead(BaseModel):
    """A candidate booking interval and whether it can be booked."""
    start_time: datetime
    end_time: datetime
    is_available: bool

    model_config = {"from_attributes": True}


class SlotsDayResponse(BaseModel):
    """Slots for one service on one day. Empty slots = closed that day."""
    business_id: int
    service_id: int
    date: date
    slot_step_minutes: int = Field(description="Cadence of slot start times (15/30/60)")
    slots: list[TimeSlotRead]

    model_config = {"from_attributes": True}
