import datetime as dt
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.base.models import (
    Actor,
    AvailabilityResponse,
    BookingCreate,
    BookingResponse,
    CancelRequest,
    InterviewMode,
    InterviewStatus,
    ModeRequirementsResponse,
    RescheduleRequest,
)
from app.routers.deps import get_actor, get_db, get_scheduler
from app.services.interview_scheduler_service import InterviewSchedulerService

router = APIRouter(prefix="/bookings")


@router.get("/slots", response_model=AvailabilityResponse)
def available_slots(
    day: dt.date = Query(..., alias="date"),
    mode: InterviewMode = InterviewMode.LIVE,
    scheduler: InterviewSchedulerService = Depends(get_scheduler),
    db: Session = Depends(get_db),
):
    return scheduler.available(day, mode, db)


@router.get("/requirements/{mode}", response_model=ModeRequirementsResponse)
def mode_requirements(
    mode: InterviewMode,
    scheduler: InterviewSchedulerService = Depends(get_scheduler),
):
    return scheduler.mode_requirements(mode)


@router.post("", response_model=BookingResponse, status_code=201)
def create_booking(
    req: BookingCreate,
    actor: Actor = Depends(get_actor),
    scheduler: InterviewSchedulerService = Depends(get_scheduler),
    db: Session = Depends(get_db),
):
    return scheduler.book(actor, req, db)


@router.get("", response_model=List[BookingResponse])
def list_bookings(
    status: Optional[InterviewStatus] = None,
    mode: Optional[InterviewMode] = None,
    actor: Actor = Depends(get_actor),
    scheduler: InterviewSchedulerService = Depends(get_scheduler),
    db: Session = Depends(get_db),
):
    return scheduler.list_bookings(actor, db, status, mode)


@router.put("/{booking_id}/reschedule", response_model=BookingResponse)
def reschedule_booking(
    booking_id: str,
    req: RescheduleRequest,
    actor: Actor = Depends(get_actor),
    scheduler: InterviewSchedulerService = Depends(get_scheduler),
    db: Session = Depends(get_db),
):
    return scheduler.reschedule(actor, booking_id, req, db)


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
def cancel_booking(
    booking_id: str,
    req: Optional[CancelRequest] = None,
    actor: Actor = Depends(get_actor),
    scheduler: InterviewSchedulerService = Depends(get_scheduler),
    db: Session = Depends(get_db),
):
    return scheduler.cancel(actor, booking_id, req.reason if req else None, db)
