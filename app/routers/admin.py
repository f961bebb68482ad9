from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.base.models import (
    Actor,
    AdminEditRequest,
    AdminEditResponse,
    BookingListResponse,
    BookingResponse,
    CancellationNote,
    CancelRequest,
    InterviewMode,
    InterviewStatus,
    UserProfileResponse,
    UserProfileUpsert,
)
from app.routers.deps import get_actor, get_db, get_scheduler
from app.services.interview_scheduler_service import InterviewSchedulerService

router = APIRouter(prefix="/admin")


@router.get("/interviews", response_model=BookingListResponse)
def list_interviews(
    mode: Optional[InterviewMode] = None,
    status: Optional[InterviewStatus] = None,
    user_id: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    actor: Actor = Depends(get_actor),
    scheduler: InterviewSchedulerService = Depends(get_scheduler),
    db: Session = Depends(get_db),
):
    return scheduler.admin_list(actor, db, mode, status, user_id, page, limit)


@router.put("/interviews/{booking_id}", response_model=AdminEditResponse)
def edit_interview(
    booking_id: str,
    req: AdminEditRequest,
    actor: Actor = Depends(get_actor),
    scheduler: InterviewSchedulerService = Depends(get_scheduler),
    db: Session = Depends(get_db),
):
    return scheduler.admin_edit(actor, booking_id, req, db)


@router.post("/interviews/{booking_id}/cancel", response_model=BookingResponse)
def cancel_interview(
    booking_id: str,
    req: CancelRequest,
    actor: Actor = Depends(get_actor),
    scheduler: InterviewSchedulerService = Depends(get_scheduler),
    db: Session = Depends(get_db),
):
    return scheduler.admin_cancel(actor, booking_id, req.reason, db)


@router.put("/interviews/{booking_id}/cancellation-reason", response_model=BookingResponse)
def update_cancellation_reason(
    booking_id: str,
    req: CancellationNote,
    actor: Actor = Depends(get_actor),
    scheduler: InterviewSchedulerService = Depends(get_scheduler),
    db: Session = Depends(get_db),
):
    return scheduler.annotate_cancellation(actor, booking_id, req.reason, db)


@router.put("/users/{user_id}", response_model=UserProfileResponse)
def upsert_user(
    user_id: str,
    req: UserProfileUpsert,
    actor: Actor = Depends(get_actor),
    scheduler: InterviewSchedulerService = Depends(get_scheduler),
    db: Session = Depends(get_db),
):
    return scheduler.upsert_user_profile(actor, user_id, req, db)
