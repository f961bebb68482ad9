from enum import Enum
from typing import Dict, FrozenSet, List, Sequence

from app.base.errors import ValidationError
from app.base.models import BookingRequest, InterviewMode


class Requirement(str, Enum):
    FOCUS_AREA = "focus_area"
    RECORDING_CONSENT = "recording_consent"
    SLOT_REFERENCE = "slot_reference"


MODE_REQUIREMENTS: Dict[InterviewMode, FrozenSet[Requirement]] = {
    InterviewMode.AI: frozenset({Requirement.FOCUS_AREA, Requirement.RECORDING_CONSENT}),
    InterviewMode.PEER: frozenset({Requirement.FOCUS_AREA}),
    InterviewMode.FAMILY: frozenset({Requirement.FOCUS_AREA}),
    InterviewMode.LIVE: frozenset(
        {Requirement.FOCUS_AREA, Requirement.RECORDING_CONSENT, Requirement.SLOT_REFERENCE}
    ),
}

# Presentation data attached to each new booking
MODE_SESSION_TYPES: Dict[InterviewMode, str] = {
    InterviewMode.AI: "ai_powered",
    InterviewMode.PEER: "peer_to_peer",
    InterviewMode.FAMILY: "family_friends",
    InterviewMode.LIVE: "live_mock_interview",
}


def required_fields(mode: InterviewMode) -> FrozenSet[Requirement]:
    return MODE_REQUIREMENTS[InterviewMode(mode)]


def missing_requirements(request: BookingRequest) -> List[str]:
    required = required_fields(request.mode)
    missing = []
    if Requirement.FOCUS_AREA in required and not (request.focus_area or "").strip():
        missing.append(Requirement.FOCUS_AREA.value)
    if Requirement.RECORDING_CONSENT in required and not request.consent_flags.recording:
        missing.append(Requirement.RECORDING_CONSENT.value)
    if Requirement.SLOT_REFERENCE in required and not (request.slot_id or request.interviewer_id):
        missing.append(Requirement.SLOT_REFERENCE.value)
    return missing


def validate_booking_request(request: BookingRequest, allowed_durations: Sequence[int]) -> None:
    """Raise ValidationError unless the request carries every field its mode needs."""
    missing = missing_requirements(request)
    if missing:
        raise ValidationError(
            f"Missing required fields for {request.mode.value} mode: {', '.join(missing)}",
            {"missing": missing},
        )

    if request.duration not in allowed_durations:
        raise ValidationError(
            f"Invalid duration. Must be one of {', '.join(str(d) for d in allowed_durations)} minutes",
            {"duration": request.duration},
        )

    if request.mode != InterviewMode.LIVE and (request.slot_id or request.interviewer_id):
        raise ValidationError(
            f"{request.mode.value} sessions do not take a slot or interviewer",
            {"mode": request.mode.value},
        )
