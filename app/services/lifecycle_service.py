# app/services/lifecycle_service.py

import logging
from datetime import date
from typing import Dict, FrozenSet, List, Optional, Tuple

from sqlalchemy.orm import Session

from app.base.errors import Forbidden, InvalidTransition, ValidationError
from app.base.models import (
    Actor,
    AdminEditRequest,
    InterviewMode,
    InterviewStatus,
    RescheduleRequest,
    UserRole,
)
from app.models.booking_model import InterviewBookingModel
from app.services.allocator_service import Allocator
from app.services.booking_ledger_service import BookingLedger
from app.services.slot_store_service import SlotStore
from app.utils.time_utils import BookingWindow, ensure_time_label

logger = logging.getLogger("interview_scheduler.lifecycle")

S = InterviewStatus

PARTICIPANT_TRANSITIONS: Dict[InterviewStatus, FrozenSet[InterviewStatus]] = {
    S.SCHEDULED: frozenset({S.IN_PROGRESS, S.CANCELLED}),
    S.IN_PROGRESS: frozenset({S.COMPLETED}),
}

FORCED_TRANSITIONS: Dict[InterviewStatus, FrozenSet[InterviewStatus]] = {
    S.SCHEDULED: frozenset({S.COMPLETED, S.CANCELLED, S.NO_SHOW}),
    S.IN_PROGRESS: frozenset({S.COMPLETED, S.CANCELLED, S.NO_SHOW}),
}

TERMINAL_STATUSES = frozenset({S.COMPLETED, S.CANCELLED, S.NO_SHOW})


def allowed_transitions(current: InterviewStatus, forced: bool = False) -> FrozenSet[InterviewStatus]:
    allowed = PARTICIPANT_TRANSITIONS.get(InterviewStatus(current), frozenset())
    if forced:
        allowed = allowed | FORCED_TRANSITIONS.get(InterviewStatus(current), frozenset())
    return allowed


class LifecycleController:
    """
    Owns every status write on a booking and every booked -> free slot flip.

    Methods run inside the caller's transaction; a reschedule or admin edit
    that fails part-way leaves nothing behind once the transaction rolls back.
    """

    def __init__(
        self,
        slot_store: SlotStore,
        ledger: BookingLedger,
        allocator: Allocator,
        window: BookingWindow,
    ):
        self.slot_store = slot_store
        self.ledger = ledger
        self.allocator = allocator
        self.window = window

    # === Authorization ===

    def ensure_participant(self, booking: InterviewBookingModel, actor: Actor) -> None:
        if actor.is_admin:
            return
        if actor.role == UserRole.TRAINEE and booking.trainee_id == actor.user_id:
            return
        if actor.role == UserRole.INTERVIEWER and booking.interviewer_id == actor.user_id:
            return
        raise Forbidden("You are not a participant of this interview", {"booking_id": booking.booking_id})

    # === Status transitions ===

    def transition(
        self,
        db: Session,
        booking_id: str,
        target: InterviewStatus,
        actor: Actor,
        reason: Optional[str] = None,
        forced: bool = False,
    ) -> Tuple[InterviewBookingModel, InterviewStatus]:
        target = InterviewStatus(target)
        if forced and not actor.is_admin:
            raise Forbidden("Administrative transitions require the admin role")

        booking = self.ledger.get(db, booking_id)
        self.ensure_participant(booking, actor)
        current = InterviewStatus(booking.status)

        if target not in allowed_transitions(current, forced):
            raise InvalidTransition(
                f"Cannot move interview from {current.value} to {target.value}",
                {"booking_id": booking_id, "from": current.value, "to": target.value},
            )

        now = self.window.now().replace(tzinfo=None)
        values = {"status": target.value, "updated_at": now}
        if target == S.IN_PROGRESS:
            values["started_at"] = booking.started_at or now
        elif target == S.COMPLETED:
            values["completed_at"] = now
            values["started_at"] = booking.started_at or now
        elif target == S.CANCELLED:
            values["cancelled_at"] = now
            if reason:
                values["cancellation_reason"] = reason

        slot_id = booking.slot_id
        booking = self.ledger.compare_and_set(db, booking_id, current, values)

        if target == S.CANCELLED and booking.mode == InterviewMode.LIVE.value and slot_id:
            self.slot_store.release(db, slot_id, sanctioned=True)

        logger.info(f"[Transition] Booking {booking_id}: {current.value} -> {target.value} by {actor.role.value}")
        return booking, current

    def start(self, db: Session, booking_id: str, actor: Actor):
        return self.transition(db, booking_id, S.IN_PROGRESS, actor)

    def complete(self, db: Session, booking_id: str, actor: Actor):
        return self.transition(db, booking_id, S.COMPLETED, actor)

    def cancel(self, db: Session, booking_id: str, actor: Actor, reason: Optional[str] = None):
        return self.transition(db, booking_id, S.CANCELLED, actor, reason=reason)

    def force_transition(
        self,
        db: Session,
        booking_id: str,
        target: InterviewStatus,
        actor: Actor,
        reason: Optional[str] = None,
    ):
        return self.transition(db, booking_id, target, actor, reason=reason, forced=True)

    def annotate_cancellation(self, db: Session, booking_id: str, actor: Actor, reason: str) -> InterviewBookingModel:
        booking = self.ledger.get(db, booking_id)
        self.ensure_participant(booking, actor)
        if booking.status != S.CANCELLED.value:
            raise InvalidTransition(
                "Only cancelled interviews carry a cancellation reason",
                {"booking_id": booking_id, "status": booking.status},
            )
        return self.ledger.set_cancellation_reason(db, booking_id, reason, self.window.now().replace(tzinfo=None))

    # === Schedule changes ===

    def reschedule(
        self,
        db: Session,
        booking_id: str,
        actor: Actor,
        req: RescheduleRequest,
    ) -> Tuple[InterviewBookingModel, List[str]]:
        booking = self.ledger.get(db, booking_id)
        if booking.trainee_id != actor.user_id:
            raise Forbidden("You can only reschedule your own bookings", {"booking_id": booking_id})
        if booking.status != S.SCHEDULED.value:
            raise InvalidTransition(
                f"Cannot reschedule an interview that is {booking.status}",
                {"booking_id": booking_id, "status": booking.status},
            )
        if not any([req.date, req.time, req.slot_id, req.interviewer_id]):
            raise ValidationError("Nothing to reschedule: provide a new date, time or slot")

        return self._move(
            db,
            booking,
            new_date=req.date or booking.scheduled_date,
            new_time=req.time or booking.time_label,
            interviewer_id=req.interviewer_id,
            slot_id=req.slot_id,
        )

    def admin_edit(
        self,
        db: Session,
        booking_id: str,
        actor: Actor,
        req: AdminEditRequest,
    ) -> Tuple[InterviewBookingModel, List[str], Optional[InterviewStatus]]:
        if not actor.is_admin:
            raise Forbidden("Only administrators can edit interviews")

        booking = self.ledger.get(db, booking_id)
        changes: List[str] = []
        previous_status: Optional[InterviewStatus] = None

        schedule_changed = (
            (req.date is not None and req.date != booking.scheduled_date)
            or (req.time is not None and req.time != booking.time_label)
            or (req.interviewer_id is not None and req.interviewer_id != booking.interviewer_id)
        )
        if schedule_changed:
            if InterviewStatus(booking.status) in TERMINAL_STATUSES:
                raise InvalidTransition(
                    f"Cannot edit the schedule of an interview that is {booking.status}",
                    {"booking_id": booking_id, "status": booking.status},
                )
            booking, changes = self._move(
                db,
                booking,
                new_date=req.date or booking.scheduled_date,
                new_time=req.time or booking.time_label,
                interviewer_id=req.interviewer_id,
            )

        if req.status is not None and req.status.value != booking.status:
            booking, previous_status = self.force_transition(db, booking_id, req.status, actor)
            changes.append(f"Status changed from {previous_status.value} to {req.status.value}")

        return booking, changes, previous_status

    def _move(
        self,
        db: Session,
        booking: InterviewBookingModel,
        new_date: date,
        new_time: str,
        interviewer_id: Optional[str] = None,
        slot_id: Optional[str] = None,
    ) -> Tuple[InterviewBookingModel, List[str]]:
        ensure_time_label(new_time, self.allocator.time_labels)
        self.window.ensure_bookable(new_date, new_time)
        self.allocator.ensure_no_overlap(db, booking.trainee_id, new_date, new_time, booking.booking_id)

        changes: List[str] = []
        values = {
            "scheduled_date": new_date,
            "time_label": new_time,
            "updated_at": self.window.now().replace(tzinfo=None),
        }
        old_slot_id = booking.slot_id

        if booking.mode == InterviewMode.LIVE.value:
            if old_slot_id:
                self.slot_store.release(db, old_slot_id, sanctioned=True)
                changes.append(f"Old time slot {booking.time_label} has been freed")

            slot = self.allocator.acquire_slot(
                db,
                booking_id=booking.booking_id,
                slot_date=new_date,
                time_label=new_time,
                interviewer_id=interviewer_id or (None if slot_id else booking.interviewer_id),
                slot_id=slot_id,
            )
            values["slot_id"] = slot.slot_id
            values["interviewer_id"] = slot.interviewer_id
            changes.append(f"New time slot {new_time} has been booked")
            if slot.interviewer_id != booking.interviewer_id:
                changes.append(f"Interviewer changed from {booking.interviewer_id} to {slot.interviewer_id}")
        elif interviewer_id or slot_id:
            raise ValidationError(
                f"{booking.mode} sessions do not take a slot or interviewer",
                {"booking_id": booking.booking_id},
            )

        if new_date != booking.scheduled_date:
            changes.append(f"Date changed from {booking.scheduled_date.isoformat()} to {new_date.isoformat()}")
        if new_time != booking.time_label:
            changes.append(f"Time changed from {booking.time_label} to {new_time}")

        updated = self.ledger.compare_and_set(
            db,
            booking.booking_id,
            InterviewStatus(booking.status),
            values,
            expected_slot_id=old_slot_id,
            check_slot=True,
        )
        logger.info(f"[Reschedule] Booking {booking.booking_id} moved to {new_date} {new_time}")
        return updated, changes
