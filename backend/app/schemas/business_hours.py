# backend/app/schemas/business_hours.py

from datetime import time
from pydantic import BaseModel, Field, model_validator


class BusinessHoursRead(BaseModel):
    id: int
    business_id: int
    day_of_week: int  # 0 = Sunday
    open_time: time
    close_time: time
    is_closed: bool

    model_config = {"from_attributes": True}


class BusinessHoursUpdate(BaseModel):
    day_of_week: int = Field(..., ge=0, le=6)
    open_time: time
    close_time: time
    is_closed: bool = False

    @model_validator(mode="after")
    def check_window(self):
        if not self.is_closed and self.close_time <= self.open_time:
            raise ValueError("close_time must be after open_time")
        return self


class BusinessHoursChange(BaseModel):
    hours: BusinessHoursRead
    affected_bookings: int
