# backend/app/routers/bookings.py
# Booking lifecycle goes through the settlement engine; no raw CRUD.

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ..dependencies import get_pricing_service, get_settlement_engine
from ..schemas.bookings import (
    BookingAccept,
    BookingCreate,
    BookingCreated,
    BookingRead,
    BookingStatusUpdate,
    CompletionRead,
    ExistingBookingsCount,
    QuoteRead,
    QuoteRequest,
)
from ..services.booking_settlement import BookingCandidate, BookingSettlementEngine
from ..services.pricing import PricingService

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post("/quote", response_model=QuoteRead)
def quote_booking(
    data: QuoteRequest,
    pricing: PricingService = Depends(get_pricing_service),
):
    """Checkout price for a service, with optional coupon."""
    return pricing.quote(
        data.business_id,
        data.service_id,
        data.customer_id,
        voucher_code=data.voucher_code,
    )


@router.get("/existing-count", response_model=ExistingBookingsCount)
def existing_bookings_count(
    business_id: int,
    date: Optional[date] = None,
    day_of_week: Optional[int] = Query(None, ge=0, le=6),
    engine: BookingSettlementEngine = Depends(get_settlement_engine),
):
    """Pending/confirmed bookings a schedule change on date/day_of_week would touch."""
    count = engine.check_existing_bookings(business_id, target_date=date, day_of_week=day_of_week)
    return ExistingBookingsCount(business_id=business_id, count=count)


@router.post("/", response_model=BookingCreated, status_code=status.HTTP_201_CREATED)
def create_booking(
    data: BookingCreate,
    engine: BookingSettlementEngine = Depends(get_settlement_engine),
):
    return engine.create_booking(BookingCandidate(**data.model_dump()))


@router.get("/{id}", response_model=BookingRead)
def get_booking(id: int, engine: BookingSettlementEngine = Depends(get_settlement_engine)):
    return engine.bookings.get_or_raise(id)


@router.post("/{id}/accept", response_model=BookingRead)
def accept_booking(
    id: int,
    data: BookingAccept,
    engine: BookingSettlementEngine = Depends(get_settlement_engine),
):
    return engine.accept_booking(id, data.approver_id)


@router.patch("/{id}/status", response_model=BookingRead)
def update_booking_status(
    id: int,
    data: BookingStatusUpdate,
    engine: BookingSettlementEngine = Depends(get_settlement_engine),
):
    return engine.update_booking_status(id, data.status, reason=data.reason)


@router.get("/{id}/completion", response_model=CompletionRead)
def get_completion_window(
    id: int,
    engine: BookingSettlementEngine = Depends(get_settlement_engine),
):
    window = engine.completion_window(id)
    return CompletionRead(
        booking_id=id,
        allowed_at=window.allowed_at,
        can_complete=window.can_complete,
        minutes_left=window.minutes_left,
        wait_message=window.wait_message,
    )
