# backend/app/routers/slots.py
"""
Slots API endpoints.

GET /slots/day - Service slots for a business on one day
"""

from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import get_config
from ..schemas.slots import SlotsDayResponse
from ..services.slots import BookingConfig, calculate_service_availability


router = APIRouter(prefix="/slots", tags=["slots"])


@router.get("/day", response_model=SlotsDayResponse)
def get_slots_day(
    business_id: int,
    service_id: int,
    date: date,
    db: Session = Depends(get_db),
    config: BookingConfig = Depends(get_config),
):
    """
    Candidate slots for one service on one day.

    Empty list = business closed that day. Unknown service → 404.
    """
    return calculate_service_availability(db, business_id, service_id, date, config)
