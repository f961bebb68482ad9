# app/services/booking_ledger_service.py

import logging
import math
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from app.base.errors import BookingNotFound, InvalidTransition
from app.base.models import InterviewMode, InterviewStatus
from app.models.booking_model import InterviewBookingModel

logger = logging.getLogger("interview_scheduler.booking_ledger")

ACTIVE_STATUSES = (InterviewStatus.SCHEDULED.value, InterviewStatus.IN_PROGRESS.value)


class BookingLedger:
    """Durable record of interviews of every mode. Never commits."""

    def create(self, db: Session, **fields: Any) -> InterviewBookingModel:
        booking = InterviewBookingModel(**fields)
        db.add(booking)
        db.flush()
        logger.info(
            f"[Create] Booking {booking.booking_id} ({booking.mode}) for trainee {booking.trainee_id} "
            f"on {booking.scheduled_date} {booking.time_label}"
        )
        return booking

    def get(self, db: Session, booking_id: str) -> InterviewBookingModel:
        booking = db.get(InterviewBookingModel, booking_id, populate_existing=True)
        if not booking:
            raise BookingNotFound("Interview not found", {"booking_id": booking_id})
        return booking

    def has_active_booking_at(
        self,
        db: Session,
        trainee_id: str,
        scheduled_date: date,
        time_label: str,
        exclude_booking_id: Optional[str] = None,
    ) -> bool:
        query = db.query(InterviewBookingModel.booking_id).filter(
            InterviewBookingModel.trainee_id == trainee_id,
            InterviewBookingModel.scheduled_date == scheduled_date,
            InterviewBookingModel.time_label == time_label,
            InterviewBookingModel.status.in_(ACTIVE_STATUSES),
        )
        if exclude_booking_id:
            query = query.filter(InterviewBookingModel.booking_id != exclude_booking_id)
        return query.first() is not None

    # === Reads ===

    def list_for_trainee(
        self,
        db: Session,
        trainee_id: str,
        status: Optional[InterviewStatus] = None,
        mode: Optional[InterviewMode] = None,
    ) -> List[InterviewBookingModel]:
        query = db.query(InterviewBookingModel).filter(InterviewBookingModel.trainee_id == trainee_id)
        if status:
            query = query.filter(InterviewBookingModel.status == InterviewStatus(status).value)
        if mode:
            query = query.filter(InterviewBookingModel.mode == InterviewMode(mode).value)
        return query.order_by(
            InterviewBookingModel.scheduled_date.asc(),
            InterviewBookingModel.created_at.desc(),
        ).all()

    def list_for_interviewer(
        self,
        db: Session,
        interviewer_id: str,
        status: Optional[InterviewStatus] = None,
    ) -> List[InterviewBookingModel]:
        query = db.query(InterviewBookingModel).filter(
            InterviewBookingModel.interviewer_id == interviewer_id,
            InterviewBookingModel.mode == InterviewMode.LIVE.value,
        )
        if status:
            query = query.filter(InterviewBookingModel.status == InterviewStatus(status).value)
        return query.order_by(
            InterviewBookingModel.scheduled_date.asc(),
            InterviewBookingModel.time_label.asc(),
        ).all()

    def search(
        self,
        db: Session,
        mode: Optional[InterviewMode] = None,
        status: Optional[InterviewStatus] = None,
        participant_ids: Optional[Iterable[str]] = None,
        page: int = 1,
        limit: int = 50,
    ) -> Tuple[List[InterviewBookingModel], Dict[str, int]]:
        query = db.query(InterviewBookingModel)
        if mode:
            query = query.filter(InterviewBookingModel.mode == InterviewMode(mode).value)
        if status:
            query = query.filter(InterviewBookingModel.status == InterviewStatus(status).value)
        if participant_ids is not None:
            ids = list(participant_ids)
            query = query.filter(
                InterviewBookingModel.trainee_id.in_(ids) | InterviewBookingModel.interviewer_id.in_(ids)
            )

        total = query.count()
        items = query.order_by(
            InterviewBookingModel.scheduled_date.desc(),
            InterviewBookingModel.created_at.desc(),
        ).offset((page - 1) * limit).limit(limit).all()

        return items, {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": math.ceil(total / limit) if limit else 0,
        }

    def status_counts(self, db: Session) -> Dict[str, int]:
        rows = db.query(InterviewBookingModel.status, func.count(InterviewBookingModel.booking_id)).group_by(
            InterviewBookingModel.status
        ).all()
        counts = {s.value: 0 for s in InterviewStatus}
        counts.update({status: count for status, count in rows})
        counts["total"] = sum(count for _, count in rows)
        return counts

    # === Writes ===

    def compare_and_set(
        self,
        db: Session,
        booking_id: str,
        expected_status: InterviewStatus,
        values: Dict[str, Any],
        expected_slot_id: Optional[str] = None,
        check_slot: bool = False,
    ) -> InterviewBookingModel:
        """
        Apply ``values`` only if the booking is still in ``expected_status``
        (and, with ``check_slot``, still holds ``expected_slot_id``).
        """
        conditions = [
            InterviewBookingModel.booking_id == booking_id,
            InterviewBookingModel.status == InterviewStatus(expected_status).value,
        ]
        if check_slot:
            conditions.append(
                InterviewBookingModel.slot_id.is_(None)
                if expected_slot_id is None
                else InterviewBookingModel.slot_id == expected_slot_id
            )

        result = db.execute(
            update(InterviewBookingModel)
            .where(*conditions)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            current = self.get(db, booking_id)
            raise InvalidTransition(
                "Interview changed while the request was in flight",
                {"booking_id": booking_id, "status": current.status},
            )
        return self.get(db, booking_id)

    def set_cancellation_reason(self, db: Session, booking_id: str, reason: str, at: datetime) -> InterviewBookingModel:
        return self.compare_and_set(
            db,
            booking_id,
            InterviewStatus.CANCELLED,
            {"cancellation_reason": reason, "updated_at": at},
        )
