# app/services/availability_service.py

import logging
from datetime import date
from typing import List, Sequence

from sqlalchemy.orm import Session

from app.base.models import AvailableOffering, InterviewMode
from app.services.slot_store_service import SlotStore
from app.services.user_directory_service import UserDirectory
from app.utils.time_utils import BookingWindow, label_sort_key

logger = logging.getLogger("interview_scheduler.availability")


class AvailabilityQueryService:
    """
    Read path answering "what can be booked now".

    Uses the same BookingWindow instance as the allocator, so a time listed
    here is accepted by ``Allocator.book`` and vice versa.
    """

    def __init__(
        self,
        slot_store: SlotStore,
        directory: UserDirectory,
        window: BookingWindow,
        time_labels: Sequence[str],
    ):
        self.slot_store = slot_store
        self.directory = directory
        self.window = window
        self.time_labels = sorted(time_labels, key=label_sort_key)

    def available(self, db: Session, day: date, mode: InterviewMode) -> List[AvailableOffering]:
        now = self.window.now()
        if day < now.date():
            return []

        if InterviewMode(mode) != InterviewMode.LIVE:
            return [
                AvailableOffering(time=label)
                for label in self.time_labels
                if self.window.is_bookable(day, label, now)
            ]

        slots = [
            s for s in self.slot_store.list_for_date(db, day, InterviewMode.LIVE, include_booked=False)
            if self.window.is_bookable(s.slot_date, s.time_label, now)
        ]
        identities = self.directory.bookable_interviewers(db, (s.interviewer_id for s in slots))

        offerings = [
            AvailableOffering(
                time=s.time_label,
                slot_id=s.slot_id,
                interviewer=identities[s.interviewer_id],
            )
            for s in slots
            if s.interviewer_id in identities
        ]
        logger.info(f"[Available] {len(offerings)} live offerings on {day}")
        return offerings
