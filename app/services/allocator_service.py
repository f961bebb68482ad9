# app/services/allocator_service.py

import logging
import uuid
from datetime import date
from typing import Any, Dict, Optional, Sequence

from sqlalchemy.orm import Session

from app.base.errors import AlreadyBooked, DuplicateBooking, SlotNotFound, SlotTaken, ValidationError
from app.base.models import BookingRequest, InterviewMode, InterviewStatus
from app.models.booking_model import InterviewBookingModel
from app.models.slot_model import AvailabilitySlotModel
from app.services.booking_ledger_service import BookingLedger
from app.services.slot_store_service import SlotStore
from app.services.user_directory_service import UserDirectory
from app.utils.booking_rules import MODE_SESSION_TYPES, validate_booking_request
from app.utils.time_utils import BookingWindow, ensure_time_label

logger = logging.getLogger("interview_scheduler.allocator")


class Allocator:
    """
    Matches booking requests to slots.

    The only writer of new bookings and the only caller of
    ``SlotStore.mark_booked``. Exclusivity rests entirely on that CAS: a
    lost race surfaces as ``SlotTaken`` and the caller re-queries availability.
    """

    def __init__(
        self,
        slot_store: SlotStore,
        ledger: BookingLedger,
        directory: UserDirectory,
        window: BookingWindow,
        time_labels: Sequence[str],
        allowed_durations: Sequence[int],
        meeting_link_base: str,
    ):
        self.slot_store = slot_store
        self.ledger = ledger
        self.directory = directory
        self.window = window
        self.time_labels = list(time_labels)
        self.allowed_durations = list(allowed_durations)
        self.meeting_link_base = meeting_link_base

    def book(self, db: Session, request: BookingRequest) -> InterviewBookingModel:
        validate_booking_request(request, self.allowed_durations)
        ensure_time_label(request.time, self.time_labels)
        self.window.ensure_bookable(request.date, request.time)
        self.ensure_no_overlap(db, request.trainee_id, request.date, request.time)

        booking_id = str(uuid.uuid4())
        slot: Optional[AvailabilitySlotModel] = None
        if request.mode == InterviewMode.LIVE:
            slot = self.acquire_slot(
                db,
                booking_id=booking_id,
                slot_date=request.date,
                time_label=request.time,
                interviewer_id=request.interviewer_id,
                slot_id=request.slot_id,
            )

        now = self.window.now().replace(tzinfo=None)
        booking = self.ledger.create(
            db,
            booking_id=booking_id,
            mode=request.mode.value,
            trainee_id=request.trainee_id,
            interviewer_id=slot.interviewer_id if slot else None,
            scheduled_date=request.date,
            time_label=request.time,
            duration_minutes=request.duration,
            difficulty=request.difficulty.value,
            language=request.language.value,
            focus_area=request.focus_area.strip(),
            recording_consent=request.consent_flags.recording,
            data_usage_consent=request.consent_flags.data_usage,
            status=InterviewStatus.SCHEDULED.value,
            slot_id=slot.slot_id if slot else None,
            created_at=now,
            updated_at=now,
            **self.provision_session(request.mode),
        )
        return booking

    def ensure_no_overlap(
        self,
        db: Session,
        trainee_id: str,
        slot_date: date,
        time_label: str,
        exclude_booking_id: Optional[str] = None,
    ) -> None:
        if self.ledger.has_active_booking_at(db, trainee_id, slot_date, time_label, exclude_booking_id):
            raise DuplicateBooking(
                "You already have a booking at this time",
                {"date": slot_date.isoformat(), "time": time_label},
            )

    def acquire_slot(
        self,
        db: Session,
        booking_id: str,
        slot_date: date,
        time_label: str,
        interviewer_id: Optional[str] = None,
        slot_id: Optional[str] = None,
    ) -> AvailabilitySlotModel:
        """Resolve a live slot reference and flip it to booked for ``booking_id``."""
        slot = self.resolve_slot(db, slot_date, time_label, interviewer_id, slot_id)
        self.directory.require_bookable_interviewer(db, slot.interviewer_id)

        try:
            return self.slot_store.mark_booked(db, slot.slot_id, booking_id)
        except AlreadyBooked:
            logger.info(f"[Book] Slot {slot.slot_id} taken before booking {booking_id} could claim it")
            raise SlotTaken(
                "The selected time slot has already been booked. Please select another time.",
                {"slot_id": slot.slot_id},
            )

    def resolve_slot(
        self,
        db: Session,
        slot_date: date,
        time_label: str,
        interviewer_id: Optional[str] = None,
        slot_id: Optional[str] = None,
    ) -> AvailabilitySlotModel:
        if slot_id:
            slot = self.slot_store.get(db, slot_id)
            mismatched = (
                slot.slot_date != slot_date
                or slot.time_label != time_label
                or (interviewer_id and slot.interviewer_id != interviewer_id)
            )
            if mismatched:
                raise ValidationError(
                    "The selected time slot does not match the requested date, time and interviewer.",
                    {"slot_id": slot_id},
                )
            return slot

        if not interviewer_id:
            raise ValidationError("Interviewer ID is required for live mode", {"missing": ["slot_reference"]})

        slot = self.slot_store.find(db, interviewer_id, slot_date, time_label)
        if not slot:
            raise SlotNotFound(
                "The selected time slot is not available. It may have been removed "
                "or the interviewer is no longer available at this time.",
                {"interviewer_id": interviewer_id, "date": slot_date.isoformat(), "time": time_label},
            )
        return slot

    def provision_session(self, mode: InterviewMode) -> Dict[str, Any]:
        metadata: Dict[str, Any] = {"type": MODE_SESSION_TYPES[mode]}
        fields: Dict[str, Any] = {"meeting_link": None, "session_id": None}

        if mode in (InterviewMode.LIVE, InterviewMode.FAMILY):
            fields["meeting_link"] = f"{self.meeting_link_base}{uuid.uuid4().hex[:11]}"
        elif mode == InterviewMode.AI:
            stamp = int(self.window.now().timestamp() * 1000)
            fields["session_id"] = f"ai_{stamp}_{uuid.uuid4().hex[:8]}"
        elif mode == InterviewMode.PEER:
            metadata["match_status"] = "pending"

        fields["session_metadata"] = metadata
        return fields
