# app/services/interview_scheduler_service.py

import logging
from datetime import date
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from app.base.config import settings
from app.base.database import transaction
from app.base.errors import Forbidden, SchedulingError, SlotTaken
from app.base.metrics import booking_attempts, lifecycle_transitions, slot_conflicts, slots_published
from app.base.models import (
    Actor,
    AdminEditRequest,
    AdminEditResponse,
    AvailabilityResponse,
    BookingCreate,
    BookingListResponse,
    BookingRequest,
    BookingResponse,
    InterviewMode,
    InterviewStatus,
    ModeRequirementsResponse,
    Pagination,
    PublishSlotRequest,
    RescheduleRequest,
    SlotResponse,
    UserProfileResponse,
    UserProfileUpsert,
    UserRole,
)
from app.models.booking_model import InterviewBookingModel
from app.services.allocator_service import Allocator
from app.services.availability_service import AvailabilityQueryService
from app.services.booking_ledger_service import BookingLedger
from app.services.lifecycle_service import LifecycleController
from app.services.notification_service import NotificationDispatcher, SchedulingEvent, default_dispatcher
from app.services.slot_store_service import SlotStore
from app.services.user_directory_service import UserDirectory
from app.utils.booking_rules import required_fields
from app.utils.time_utils import BookingWindow, SystemClock

logger = logging.getLogger("interview_scheduler.service")


def _require_role(actor: Actor, *roles: UserRole) -> None:
    if actor.role not in roles:
        allowed = ", ".join(r.value for r in roles)
        raise Forbidden(f"This action requires one of the roles: {allowed}", {"role": actor.role.value})


def _participants(booking: InterviewBookingModel) -> tuple:
    return tuple(p for p in (booking.trainee_id, booking.interviewer_id) if p)


class InterviewSchedulerService:
    """
    Entry point used by the HTTP routers.

    Wires the scheduling components around one shared BookingWindow, runs
    every operation in a single database transaction, and emits a
    notification event once that transaction has committed.
    """

    def __init__(
        self,
        clock=None,
        buffer_minutes: Optional[int] = None,
        dispatcher: Optional[NotificationDispatcher] = None,
    ):
        self.window = BookingWindow(
            clock or SystemClock(),
            settings.BOOKING_BUFFER_MINUTES if buffer_minutes is None else buffer_minutes,
        )
        self.directory = UserDirectory()
        self.slots = SlotStore(self.window, settings.SLOT_TIME_LABELS)
        self.ledger = BookingLedger()
        self.allocator = Allocator(
            self.slots,
            self.ledger,
            self.directory,
            self.window,
            time_labels=settings.SLOT_TIME_LABELS,
            allowed_durations=settings.ALLOWED_DURATIONS,
            meeting_link_base=settings.MEETING_LINK_BASE,
        )
        self.lifecycle = LifecycleController(self.slots, self.ledger, self.allocator, self.window)
        self.availability = AvailabilityQueryService(
            self.slots, self.directory, self.window, settings.SLOT_TIME_LABELS
        )
        self.notifier = dispatcher or default_dispatcher(settings.ENABLE_NOTIFICATIONS)

    def _emit(self, kind: str, entity_id: str, transition: str, participants: Iterable[str], **details) -> None:
        self.notifier.emit(
            SchedulingEvent(
                entity_kind=kind,
                entity_id=entity_id,
                transition=transition,
                participant_ids=tuple(participants),
                occurred_at=self.window.now(),
                details=details,
            )
        )

    # === Interviewer availability ===

    def publish_slot(self, actor: Actor, req: PublishSlotRequest, db: Session) -> SlotResponse:
        _require_role(actor, UserRole.INTERVIEWER)
        with transaction(db):
            slot = self.slots.publish(db, actor.user_id, req.date, req.time, req.mode)

        slots_published.inc()
        self._emit("slot", slot.slot_id, "published", [actor.user_id],
                   date=slot.slot_date.isoformat(), time=slot.time_label)
        return SlotResponse.from_record(slot)

    def list_interviewer_slots(
        self,
        actor: Actor,
        db: Session,
        day: Optional[date] = None,
        include_booked: bool = False,
    ) -> List[SlotResponse]:
        _require_role(actor, UserRole.INTERVIEWER)
        slots = self.slots.list_for_interviewer(db, actor.user_id, day, include_booked)
        db.rollback()
        logger.info(f"[List] {len(slots)} slots for interviewer {actor.user_id}")
        return [SlotResponse.from_record(s) for s in slots]

    def withdraw_slot(self, actor: Actor, slot_id: str, db: Session) -> dict:
        _require_role(actor, UserRole.INTERVIEWER, UserRole.ADMIN)
        with transaction(db):
            self.slots.delete(db, slot_id, None if actor.is_admin else actor.user_id)

        self._emit("slot", slot_id, "withdrawn", [actor.user_id])
        return {"status": "deleted", "slot_id": slot_id}

    # === Availability ===

    def available(self, day: date, mode: InterviewMode, db: Session) -> AvailabilityResponse:
        offerings = self.availability.available(db, day, mode)
        db.rollback()
        return AvailabilityResponse(
            date=day,
            mode=mode,
            buffer_minutes=self.window.buffer_minutes,
            slots=offerings,
        )

    def mode_requirements(self, mode: InterviewMode) -> ModeRequirementsResponse:
        return ModeRequirementsResponse(
            mode=mode,
            required=sorted(r.value for r in required_fields(mode)),
        )

    # === Trainee bookings ===

    def book(self, actor: Actor, body: BookingCreate, db: Session) -> BookingResponse:
        _require_role(actor, UserRole.TRAINEE)
        request = BookingRequest(**body.model_dump(), trainee_id=actor.user_id)

        try:
            with transaction(db):
                booking = self.allocator.book(db, request)
        except SlotTaken:
            slot_conflicts.inc()
            booking_attempts.labels(mode=request.mode.value, outcome="slot_taken").inc()
            raise
        except SchedulingError as e:
            booking_attempts.labels(mode=request.mode.value, outcome=e.code).inc()
            raise

        booking_attempts.labels(mode=request.mode.value, outcome="booked").inc()
        logger.info(f"[Book] Booking {booking.booking_id} confirmed for {actor.user_id}")
        self._emit("booking", booking.booking_id, "booked", _participants(booking),
                   mode=booking.mode, date=booking.scheduled_date.isoformat(), time=booking.time_label)
        return BookingResponse.from_record(booking)

    def list_bookings(
        self,
        actor: Actor,
        db: Session,
        status: Optional[InterviewStatus] = None,
        mode: Optional[InterviewMode] = None,
    ) -> List[BookingResponse]:
        bookings = self.ledger.list_for_trainee(db, actor.user_id, status, mode)
        db.rollback()
        return [BookingResponse.from_record(b) for b in bookings]

    def reschedule(self, actor: Actor, booking_id: str, req: RescheduleRequest, db: Session) -> BookingResponse:
        _require_role(actor, UserRole.TRAINEE)
        try:
            with transaction(db):
                booking, changes = self.lifecycle.reschedule(db, booking_id, actor, req)
        except SlotTaken:
            slot_conflicts.inc()
            raise

        self._emit("booking", booking_id, "rescheduled", _participants(booking), changes=changes)
        return BookingResponse.from_record(booking)

    def cancel(self, actor: Actor, booking_id: str, reason: Optional[str], db: Session) -> BookingResponse:
        with transaction(db):
            booking, previous = self.lifecycle.cancel(db, booking_id, actor, reason)

        return self._after_transition(booking, previous, reason=reason)

    # === Interviewer sessions ===

    def assigned_interviews(
        self,
        actor: Actor,
        db: Session,
        status: Optional[InterviewStatus] = None,
    ) -> List[BookingResponse]:
        _require_role(actor, UserRole.INTERVIEWER)
        bookings = self.ledger.list_for_interviewer(db, actor.user_id, status)
        db.rollback()
        return [BookingResponse.from_record(b) for b in bookings]

    def assigned_interview(self, actor: Actor, booking_id: str, db: Session) -> BookingResponse:
        _require_role(actor, UserRole.INTERVIEWER)
        booking = self.ledger.get(db, booking_id)
        db.rollback()
        self.lifecycle.ensure_participant(booking, actor)
        return BookingResponse.from_record(booking)

    def update_status(self, actor: Actor, booking_id: str, status: InterviewStatus, db: Session) -> BookingResponse:
        _require_role(actor, UserRole.INTERVIEWER)
        with transaction(db):
            booking, previous = self.lifecycle.transition(db, booking_id, status, actor)

        return self._after_transition(booking, previous)

    # === Administration ===

    def admin_list(
        self,
        actor: Actor,
        db: Session,
        mode: Optional[InterviewMode] = None,
        status: Optional[InterviewStatus] = None,
        participant_id: Optional[str] = None,
        page: int = 1,
        limit: int = 50,
    ) -> BookingListResponse:
        _require_role(actor, UserRole.ADMIN)
        items, pagination = self.ledger.search(
            db,
            mode=mode,
            status=status,
            participant_ids=[participant_id] if participant_id else None,
            page=page,
            limit=limit,
        )
        stats = self.ledger.status_counts(db)
        db.rollback()
        return BookingListResponse(
            items=[BookingResponse.from_record(b) for b in items],
            pagination=Pagination(**pagination),
            stats=stats,
        )

    def admin_edit(self, actor: Actor, booking_id: str, req: AdminEditRequest, db: Session) -> AdminEditResponse:
        with transaction(db):
            booking, changes, previous = self.lifecycle.admin_edit(db, booking_id, actor, req)

        if previous is not None:
            lifecycle_transitions.labels(from_status=previous.value, to_status=booking.status).inc()
        if changes:
            self._emit("booking", booking_id, "updated", _participants(booking), changes=changes)
        return AdminEditResponse(booking=BookingResponse.from_record(booking), changes=changes)

    def admin_cancel(self, actor: Actor, booking_id: str, reason: Optional[str], db: Session) -> BookingResponse:
        with transaction(db):
            booking, previous = self.lifecycle.force_transition(
                db, booking_id, InterviewStatus.CANCELLED, actor, reason
            )

        return self._after_transition(booking, previous, reason=reason)

    def annotate_cancellation(self, actor: Actor, booking_id: str, reason: str, db: Session) -> BookingResponse:
        _require_role(actor, UserRole.ADMIN)
        with transaction(db):
            booking = self.lifecycle.annotate_cancellation(db, booking_id, actor, reason)
        return BookingResponse.from_record(booking)

    def upsert_user_profile(
        self,
        actor: Actor,
        user_id: str,
        req: UserProfileUpsert,
        db: Session,
    ) -> UserProfileResponse:
        _require_role(actor, UserRole.ADMIN)
        with transaction(db):
            profile = self.directory.upsert(db, user_id, req, self.window.now().replace(tzinfo=None))
        return UserProfileResponse.model_validate(profile)

    def _after_transition(
        self,
        booking: InterviewBookingModel,
        previous: InterviewStatus,
        reason: Optional[str] = None,
    ) -> BookingResponse:
        lifecycle_transitions.labels(from_status=previous.value, to_status=booking.status).inc()
        transition = "cancelled" if booking.status == InterviewStatus.CANCELLED.value else (
            f"{previous.value}->{booking.status}"
        )
        self._emit("booking", booking.booking_id, transition, _participants(booking),
                   reason=reason, slot_id=booking.slot_id)
        return BookingResponse.from_record(booking)
