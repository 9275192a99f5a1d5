# backend/app/routers/schedule.py
"""
Owner schedule: weekly hours and date exceptions.

Changes never touch existing bookings; responses carry the number of
pending/confirmed bookings the change may affect.
"""

from datetime import date

from fastapi import APIRouter, Depends, status

from ..dependencies import get_schedule_service
from ..schemas.availability_exceptions import (
    AvailabilityExceptionChange,
    AvailabilityExceptionCreate,
    AvailabilityExceptionRead,
)
from ..schemas.business_hours import (
    BusinessHoursChange,
    BusinessHoursRead,
    BusinessHoursUpdate,
)
from ..services.schedule import ScheduleService

router = APIRouter(prefix="/businesses", tags=["schedule"])


# ──────────────────────────────────────────────────────────────────────────────
# Weekly hours
# ──────────────────────────────────────────────────────────────────────────────

@router.get("/{business_id}/hours", response_model=list[BusinessHoursRead])
def list_hours(business_id: int, schedule: ScheduleService = Depends(get_schedule_service)):
    return schedule.weekly_hours(business_id)


@router.post(
    "/{business_id}/hours/initialize",
    response_model=list[BusinessHoursRead],
    status_code=status.HTTP_201_CREATED,
)
def initialize_hours(business_id: int, schedule: ScheduleService = Depends(get_schedule_service)):
    """Mon–Fri 09:00–17:00, weekend closed. Existing days are kept."""
    return schedule.initialize_hours(business_id)


@router.put("/{business_id}/hours", response_model=BusinessHoursChange)
def update_hours(
    business_id: int,
    data: BusinessHoursUpdate,
    schedule: ScheduleService = Depends(get_schedule_service),
):
    change = schedule.update_day(
        business_id,
        data.day_of_week,
        data.open_time,
        data.close_time,
        data.is_closed,
    )
    return BusinessHoursChange(
        hours=BusinessHoursRead.model_validate(change.row),
        affected_bookings=change.affected_bookings,
    )


# ──────────────────────────────────────────────────────────────────────────────
# Exceptions
# ──────────────────────────────────────────────────────────────────────────────

@router.get("/{business_id}/exceptions", response_model=list[AvailabilityExceptionRead])
def list_exceptions(business_id: int, schedule: ScheduleService = Depends(get_schedule_service)):
    return schedule.list_exceptions(business_id)


@router.get("/{business_id}/exceptions/exists")
def exception_exists(
    business_id: int,
    date: date,
    schedule: ScheduleService = Depends(get_schedule_service),
):
    """Whether date already has an exception (the form warns before adding another)."""
    return {"date": date, "exists": schedule.has_exception(business_id, date)}


@router.post(
    "/{business_id}/exceptions",
    response_model=AvailabilityExceptionChange,
    status_code=status.HTTP_201_CREATED,
)
def create_exception(
    business_id: int,
    data: AvailabilityExceptionCreate,
    schedule: ScheduleService = Depends(get_schedule_service),
):
    change = schedule.add_exception(business_id, **data.model_dump())
    return AvailabilityExceptionChange(
        exception=AvailabilityExceptionRead.model_validate(change.row),
        affected_bookings=change.affected_bookings,
    )


@router.delete("/{business_id}/exceptions/{exception_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_exception(
    business_id: int,
    exception_id: int,
    schedule: ScheduleService = Depends(get_schedule_service),
):
    schedule.remove_exception(business_id, exception_id)
