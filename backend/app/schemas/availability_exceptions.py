# backend/app/schemas/availability_exceptions.py

from datetime import date, datetime, time
from typing import Optional
from pydantic import BaseModel, model_validator


class AvailabilityExceptionCreate(BaseModel):
    exception_date: date
    is_closed: bool = True

    # both NULL + is_closed  → whole day closed
    # both set  + is_closed  → blackout within the day
    # both set  + !is_closed → special opening hours
    open_time: Optional[time] = None
    close_time: Optional[time] = None

    reason: Optional[str] = None

    @model_validator(mode="after")
    def check_shape(self):
        if (self.open_time is None) != (self.close_time is None):
            raise ValueError("open_time and close_time must be given together")
        if not self.is_closed and self.open_time is None:
            raise ValueError("special opening hours need open_time and close_time")
        if self.open_time is not None and self.close_time <= self.open_time:
            raise ValueError("close_time must be after open_time")
        return self


class AvailabilityExceptionRead(BaseModel):
    id: int
    business_id: int

    exception_date: date
    is_closed: bool
    open_time: Optional[time] = None
    close_time: Optional[time] = None
    reason: Optional[str] = None

    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class AvailabilityExceptionChange(BaseModel):
    exception: AvailabilityExceptionRead
    affected_bookings: int
