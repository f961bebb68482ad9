import datetime as dt
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.base.models import (
    Actor,
    BookingResponse,
    InterviewStatus,
    PublishSlotRequest,
    SlotResponse,
    StatusUpdateRequest,
)
from app.routers.deps import get_actor, get_db, get_scheduler
from app.services.interview_scheduler_service import InterviewSchedulerService

router = APIRouter(prefix="/interviewer")


# === Availability ===

@router.get("/availability", response_model=List[SlotResponse])
def list_slots(
    day: Optional[dt.date] = Query(None, alias="date"),
    include_booked: bool = False,
    actor: Actor = Depends(get_actor),
    scheduler: InterviewSchedulerService = Depends(get_scheduler),
    db: Session = Depends(get_db),
):
    return scheduler.list_interviewer_slots(actor, db, day, include_booked)


@router.post("/availability", response_model=SlotResponse, status_code=201)
def create_slot(
    req: PublishSlotRequest,
    actor: Actor = Depends(get_actor),
    scheduler: InterviewSchedulerService = Depends(get_scheduler),
    db: Session = Depends(get_db),
):
    return scheduler.publish_slot(actor, req, db)


@router.delete("/availability/{slot_id}")
def delete_slot(
    slot_id: str,
    actor: Actor = Depends(get_actor),
    scheduler: InterviewSchedulerService = Depends(get_scheduler),
    db: Session = Depends(get_db),
):
    return scheduler.withdraw_slot(actor, slot_id, db)


# === Assigned interviews ===

@router.get("/interviews", response_model=List[BookingResponse])
def list_interviews(
    status: Optional[InterviewStatus] = None,
    actor: Actor = Depends(get_actor),
    scheduler: InterviewSchedulerService = Depends(get_scheduler),
    db: Session = Depends(get_db),
):
    return scheduler.assigned_interviews(actor, db, status)


@router.get("/interviews/{booking_id}", response_model=BookingResponse)
def get_interview(
    booking_id: str,
    actor: Actor = Depends(get_actor),
    scheduler: InterviewSchedulerService = Depends(get_scheduler),
    db: Session = Depends(get_db),
):
    return scheduler.assigned_interview(actor, booking_id, db)


@router.put("/interviews/{booking_id}/status", response_model=BookingResponse)
def update_interview_status(
    booking_id: str,
    req: StatusUpdateRequest,
    actor: Actor = Depends(get_actor),
    scheduler: InterviewSchedulerService = Depends(get_scheduler),
    db: Session = Depends(get_db),
):
    return scheduler.update_status(actor, booking_id, req.status, db)
