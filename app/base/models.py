import datetime as dt
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


# === Enumerations ===

class InterviewMode(str, Enum):
    AI = "ai"
    PEER = "peer"
    FAMILY = "family"
    LIVE = "live"


class InterviewStatus(str, Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


class Difficulty(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"


class Language(str, Enum):
    ENGLISH = "english"
    ARABIC = "arabic"


class UserRole(str, Enum):
    TRAINEE = "trainee"
    INTERVIEWER = "interviewer"
    ADMIN = "admin"


class ProfileStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# === 🔐 Acting Identity ===
class Actor(BaseModel):
    user_id: str
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


# === 👤 User Directory ===
class UserProfileUpsert(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    role: UserRole
    status: ProfileStatus = ProfileStatus.APPROVED


class UserProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    name: str
    email: str
    role: UserRole
    status: ProfileStatus


class InterviewerIdentity(BaseModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None


# === 🗓 Availability Slots ===
class PublishSlotRequest(BaseModel):
    date: dt.date
    time: str = Field(..., description='Slot start label, e.g. "09:00 AM"')
    mode: InterviewMode = InterviewMode.LIVE


class SlotResponse(BaseModel):
    slot_id: str
    interviewer_id: str
    date: dt.date
    time: str
    mode: InterviewMode
    is_booked: bool
    interview_id: Optional[str] = None
    timezone: Optional[str] = "UTC"
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None

    @classmethod
    def from_record(cls, slot) -> "SlotResponse":
        return cls(
            slot_id=slot.slot_id,
            interviewer_id=slot.interviewer_id,
            date=slot.slot_date,
            time=slot.time_label,
            mode=slot.mode,
            is_booked=slot.is_booked,
            interview_id=slot.interview_id,
            timezone=slot.timezone,
            created_at=slot.created_at,
            updated_at=slot.updated_at,
        )


class AvailableOffering(BaseModel):
    time: str
    slot_id: Optional[str] = None
    interviewer: Optional[InterviewerIdentity] = None


class AvailabilityResponse(BaseModel):
    date: dt.date
    mode: InterviewMode
    buffer_minutes: int
    slots: List[AvailableOffering]


class ModeRequirementsResponse(BaseModel):
    mode: InterviewMode
    required: List[str]


# === 📅 Bookings ===
class ConsentFlags(BaseModel):
    recording: bool = False
    data_usage: bool = False


class BookingCreate(BaseModel):
    mode: InterviewMode
    date: dt.date
    time: str
    duration: int
    language: Language = Language.ENGLISH
    difficulty: Difficulty = Difficulty.INTERMEDIATE
    focus_area: Optional[str] = None
    consent_flags: ConsentFlags = Field(default_factory=ConsentFlags)
    slot_id: Optional[str] = None  # live only
    interviewer_id: Optional[str] = None  # live only


class BookingRequest(BookingCreate):
    trainee_id: str


class RescheduleRequest(BaseModel):
    date: Optional[dt.date] = None
    time: Optional[str] = None
    slot_id: Optional[str] = None
    interviewer_id: Optional[str] = None


class CancelRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class StatusUpdateRequest(BaseModel):
    status: InterviewStatus


class AdminEditRequest(BaseModel):
    status: Optional[InterviewStatus] = None
    interviewer_id: Optional[str] = None
    date: Optional[dt.date] = None
    time: Optional[str] = None


class CancellationNote(BaseModel):
    reason: str = Field(..., min_length=1, max_length=500)


class BookingResponse(BaseModel):
    booking_id: str
    mode: InterviewMode
    trainee_id: str
    interviewer_id: Optional[str] = None
    date: dt.date
    time: str
    duration: int
    difficulty: Difficulty
    language: Language
    focus_area: str
    consent_flags: ConsentFlags
    status: InterviewStatus
    slot_id: Optional[str] = None
    meeting_link: Optional[str] = None
    session_id: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    cancellation_reason: Optional[str] = None
    started_at: Optional[dt.datetime] = None
    completed_at: Optional[dt.datetime] = None
    cancelled_at: Optional[dt.datetime] = None
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None

    @classmethod
    def from_record(cls, booking) -> "BookingResponse":
        return cls(
            booking_id=booking.booking_id,
            mode=booking.mode,
            trainee_id=booking.trainee_id,
            interviewer_id=booking.interviewer_id,
            date=booking.scheduled_date,
            time=booking.time_label,
            duration=booking.duration_minutes,
            difficulty=booking.difficulty,
            language=booking.language,
            focus_area=booking.focus_area,
            consent_flags=ConsentFlags(
                recording=booking.recording_consent,
                data_usage=booking.data_usage_consent,
            ),
            status=booking.status,
            slot_id=booking.slot_id,
            meeting_link=booking.meeting_link,
            session_id=booking.session_id,
            metadata=dict(booking.session_metadata or {}),
            cancellation_reason=booking.cancellation_reason,
            started_at=booking.started_at,
            completed_at=booking.completed_at,
            cancelled_at=booking.cancelled_at,
            created_at=booking.created_at,
            updated_at=booking.updated_at,
        )


class AdminEditResponse(BaseModel):
    booking: BookingResponse
    changes: List[str]


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class BookingListResponse(BaseModel):
    items: List[BookingResponse]
    pagination: Pagination
    stats: Dict[str, int]
