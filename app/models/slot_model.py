# app/models/slot_model.py

from sqlalchemy import Boolean, Column, Date, DateTime, Index, Integer, String, UniqueConstraint

from app.base.database import Base


class AvailabilitySlotModel(Base):
    __tablename__ = "availability_slots"
    __table_args__ = (
        UniqueConstraint("interviewer_id", "slot_date", "time_label", "mode", name="uq_slot_publication"),
        Index("ix_slots_interviewer_date_mode", "interviewer_id", "slot_date", "mode"),
        Index("ix_slots_date_mode_booked", "slot_date", "mode", "is_booked"),
    )

    slot_id = Column(String, primary_key=True, index=True)
    interviewer_id = Column(String, nullable=False)
    slot_date = Column(Date, nullable=False)
    time_label = Column(String(8), nullable=False)  # "09:00 AM", "02:00 PM", ...
    mode = Column(String, nullable=False, default="live")
    is_booked = Column(Boolean, nullable=False, default=False)
    interview_id = Column(String, nullable=True)  # booking holding the slot
    version = Column(Integer, nullable=False, default=1)
    timezone = Column(String, default="UTC")
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)
