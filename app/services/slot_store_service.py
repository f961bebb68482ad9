# app/services/slot_store_service.py

import logging
import uuid
from datetime import date
from typing import List, Optional, Sequence

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.base.errors import (
    AlreadyBooked,
    AlreadyFree,
    DuplicateSlot,
    Forbidden,
    SlotCurrentlyBooked,
    SlotInUse,
    SlotNotFound,
    ValidationError,
)
from app.base.models import InterviewMode
from app.models.slot_model import AvailabilitySlotModel
from app.utils.time_utils import BookingWindow, ensure_time_label, label_sort_key

logger = logging.getLogger("interview_scheduler.slot_store")


def _utc_naive(window: BookingWindow):
    return window.now().replace(tzinfo=None)


class SlotStore:
    """
    Durable record of interviewer-published live availability.

    Methods never commit; callers wrap them in ``app.base.database.transaction``.
    The ``is_booked`` flag is only ever flipped through ``mark_booked`` /
    ``mark_free``, each a single conditional UPDATE on the expected prior state.
    """

    def __init__(self, window: BookingWindow, time_labels: Sequence[str]):
        self.window = window
        self.time_labels = list(time_labels)

    def publish(
        self,
        db: Session,
        interviewer_id: str,
        slot_date: date,
        time_label: str,
        mode: InterviewMode = InterviewMode.LIVE,
    ) -> AvailabilitySlotModel:
        if InterviewMode(mode) != InterviewMode.LIVE:
            raise ValidationError(
                "Only live interviews are backed by published slots",
                {"mode": InterviewMode(mode).value},
            )
        ensure_time_label(time_label, self.time_labels)
        self.window.ensure_bookable(slot_date, time_label)

        if self.find(db, interviewer_id, slot_date, time_label):
            raise DuplicateSlot(
                "This time slot already exists for this date",
                {"date": slot_date.isoformat(), "time": time_label},
            )

        now = _utc_naive(self.window)
        slot = AvailabilitySlotModel(
            slot_id=str(uuid.uuid4()),
            interviewer_id=interviewer_id,
            slot_date=slot_date,
            time_label=time_label,
            mode=InterviewMode.LIVE.value,
            is_booked=False,
            version=1,
            timezone="UTC",
            created_at=now,
            updated_at=now,
        )
        db.add(slot)
        try:
            db.flush()
        except IntegrityError:
            # Lost a publish race on the unique constraint
            raise DuplicateSlot(
                "This time slot already exists for this date",
                {"date": slot_date.isoformat(), "time": time_label},
            )

        logger.info(f"[Publish] Slot {slot.slot_id} for {interviewer_id} on {slot_date} {time_label}")
        return slot

    def get(self, db: Session, slot_id: str) -> AvailabilitySlotModel:
        slot = db.get(AvailabilitySlotModel, slot_id, populate_existing=True)
        if not slot:
            raise SlotNotFound("Availability slot not found", {"slot_id": slot_id})
        return slot

    def find(
        self,
        db: Session,
        interviewer_id: str,
        slot_date: date,
        time_label: str,
        mode: InterviewMode = InterviewMode.LIVE,
    ) -> Optional[AvailabilitySlotModel]:
        return db.query(AvailabilitySlotModel).filter_by(
            interviewer_id=interviewer_id,
            slot_date=slot_date,
            time_label=time_label,
            mode=InterviewMode(mode).value,
        ).populate_existing().first()

    def list_for_date(
        self,
        db: Session,
        slot_date: date,
        mode: InterviewMode = InterviewMode.LIVE,
        include_booked: bool = False,
    ) -> List[AvailabilitySlotModel]:
        query = db.query(AvailabilitySlotModel).filter_by(
            slot_date=slot_date,
            mode=InterviewMode(mode).value,
        )
        if not include_booked:
            query = query.filter_by(is_booked=False)

        slots = query.all()
        return sorted(slots, key=lambda s: (label_sort_key(s.time_label), s.interviewer_id))

    def list_for_interviewer(
        self,
        db: Session,
        interviewer_id: str,
        slot_date: Optional[date] = None,
        include_booked: bool = False,
    ) -> List[AvailabilitySlotModel]:
        query = db.query(AvailabilitySlotModel).filter(
            AvailabilitySlotModel.interviewer_id == interviewer_id,
            AvailabilitySlotModel.slot_date >= self.window.today(),
        )
        if slot_date:
            query = query.filter(AvailabilitySlotModel.slot_date == slot_date)
        if not include_booked:
            query = query.filter(AvailabilitySlotModel.is_booked == False)  # noqa: E712

        slots = [s for s in query.all() if self.window.is_upcoming(s.slot_date, s.time_label)]
        return sorted(slots, key=lambda s: (s.slot_date, label_sort_key(s.time_label)))

    # === Flag flips (compare-and-swap) ===

    def mark_booked(self, db: Session, slot_id: str, interview_id: str) -> AvailabilitySlotModel:
        result = db.execute(
            update(AvailabilitySlotModel)
            .where(
                AvailabilitySlotModel.slot_id == slot_id,
                AvailabilitySlotModel.is_booked == False,  # noqa: E712
            )
            .values(
                is_booked=True,
                interview_id=interview_id,
                version=AvailabilitySlotModel.version + 1,
                updated_at=_utc_naive(self.window),
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            self.get(db, slot_id)
            raise AlreadyBooked("Slot is already booked", {"slot_id": slot_id})

        logger.info(f"[MarkBooked] Slot {slot_id} -> booking {interview_id}")
        return self.get(db, slot_id)

    def mark_free(self, db: Session, slot_id: str) -> AvailabilitySlotModel:
        result = db.execute(
            update(AvailabilitySlotModel)
            .where(
                AvailabilitySlotModel.slot_id == slot_id,
                AvailabilitySlotModel.is_booked == True,  # noqa: E712
            )
            .values(
                is_booked=False,
                interview_id=None,
                version=AvailabilitySlotModel.version + 1,
                updated_at=_utc_naive(self.window),
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            self.get(db, slot_id)
            raise AlreadyFree("Slot is already free", {"slot_id": slot_id})

        logger.info(f"[MarkFree] Slot {slot_id} released")
        return self.get(db, slot_id)

    def release(self, db: Session, slot_id: str, sanctioned: bool = False) -> AvailabilitySlotModel:
        """
        Free a booked slot. Only the lifecycle controller passes ``sanctioned=True``;
        any other caller is refused while the slot is held by a booking.
        """
        slot = self.get(db, slot_id)
        if slot.is_booked and not sanctioned:
            raise SlotCurrentlyBooked(
                "Slot is held by a booking; cancel the interview first",
                {"slot_id": slot_id, "interview_id": slot.interview_id},
            )
        return self.mark_free(db, slot_id)

    def delete(self, db: Session, slot_id: str, interviewer_id: Optional[str] = None) -> None:
        slot = self.get(db, slot_id)
        if interviewer_id is not None and slot.interviewer_id != interviewer_id:
            raise Forbidden("You do not have permission to delete this slot", {"slot_id": slot_id})

        deleted = db.query(AvailabilitySlotModel).filter(
            AvailabilitySlotModel.slot_id == slot_id,
            AvailabilitySlotModel.is_booked == False,  # noqa: E712
        ).delete(synchronize_session=False)
        if deleted != 1:
            raise SlotInUse(
                "Cannot delete a slot that has been booked. Please cancel the interview first.",
                {"slot_id": slot_id, "interview_id": slot.interview_id},
            )
        db.expunge(slot)
        logger.info(f"[Delete] Slot {slot_id} withdrawn")
