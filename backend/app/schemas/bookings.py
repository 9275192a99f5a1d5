# backend/app/schemas/bookings.py

from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field, model_validator

PaymentMethod = Literal["cash", "digital_wallet"]


class BookingCreate(BaseModel):
    customer_id: int
    business_id: int
    service_id: int

    start_time: datetime
    end_time: datetime

    payment_method: PaymentMethod
    original_price: float = Field(..., ge=0)
    discount_amount: float = Field(0, ge=0)
    final_total: Optional[float] = Field(None, ge=0)
    tip_amount: float = Field(0, ge=0)
    voucher_code_used: Optional[str] = None

    @model_validator(mode="after")
    def check_interval(self):
        if (self.start_time.tzinfo is None) != (self.end_time.tzinfo is None):
            raise ValueError("start_time and end_time must both carry a UTC offset, or neither")
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class BookingCreated(BaseModel):
    booking_id: int
    status: str
    payment_status: str
    platform_fee: float

    model_config = {"from_attributes": True}


class BookingRead(BaseModel):
    id: int

    customer_id: int
    business_id: int
    service_id: int

    start_time: datetime
    end_time: datetime

    status: str
    payment_method: str
    payment_status: str

    original_price: float
    discount_amount: float
    tip_amount: float
    platform_fee: float
    final_total: float
    voucher_code_used: Optional[str] = None
    decline_reason: Optional[str] = None
    approved_by: Optional[int] = None

    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class BookingAccept(BaseModel):
    approver_id: int


class BookingStatusUpdate(BaseModel):
    status: Literal["confirmed", "completed", "cancelled", "declined", "no_show"]
    reason: Optional[str] = Field(None, max_length=500)


class CompletionRead(BaseModel):
    booking_id: int
    allowed_at: datetime
    can_complete: bool
    minutes_left: int
    wait_message: str


class ExistingBookingsCount(BaseModel):
    business_id: int
    count: int


class QuoteRequest(BaseModel):
    business_id: int
    service_id: int
    customer_id: int
    voucher_code: Optional[str] = None


class QuoteRead(BaseModel):
    original_price: float
    sale_discount: float
    coupon_discount: float
    discount_amount: float
    final_total: float
    commission_rate: float
    platform_fee: float
    cash_available: bool
    voucher_code: Optional[str] = None

    model_config = {"from_attributes": True}
