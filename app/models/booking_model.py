# app/models/booking_model.py

from sqlalchemy import JSON, Boolean, Column, Date, DateTime, Index, Integer, String, Text

from app.base.database import Base


class InterviewBookingModel(Base):
    __tablename__ = "interview_bookings"
    __table_args__ = (
        Index("ix_bookings_trainee_status", "trainee_id", "status"),
        Index("ix_bookings_interviewer_status", "interviewer_id", "status"),
        Index("ix_bookings_schedule", "scheduled_date", "time_label"),
    )

    booking_id = Column(String, primary_key=True, index=True)
    mode = Column(String, nullable=False)  # ai, peer, family, live
    trainee_id = Column(String, nullable=False, index=True)
    interviewer_id = Column(String, nullable=True, index=True)  # live only

    scheduled_date = Column(Date, nullable=False)
    time_label = Column(String(8), nullable=False)
    duration_minutes = Column(Integer, nullable=False)

    difficulty = Column(String, nullable=False, default="intermediate")
    language = Column(String, nullable=False, default="english")
    focus_area = Column(String, nullable=False)
    recording_consent = Column(Boolean, nullable=False, default=False)
    data_usage_consent = Column(Boolean, nullable=False, default=False)

    status = Column(String, nullable=False, default="scheduled", index=True)
    slot_id = Column(String, nullable=True)  # live only

    meeting_link = Column(String, nullable=True)  # live, family
    session_id = Column(String, nullable=True)  # ai
    session_metadata = Column("metadata", JSON, nullable=False, default=dict)

    cancellation_reason = Column(Text, nullable=True)
    started_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    cancelled_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)
