import pytest

from app.base.errors import ValidationError
from app.base.models import BookingRequest, ConsentFlags, InterviewMode
from app.utils.booking_rules import (
    Requirement,
    missing_requirements,
    required_fields,
    validate_booking_request,
)
from conftest import booking_request

DURATIONS = [30, 45, 60, 90]


def _request(**overrides) -> BookingRequest:
    return BookingRequest(**booking_request(**overrides).model_dump(), trainee_id="trainee-a")


class TestRequiredFields:
    def test_focus_area_required_for_every_mode(self):
        for mode in InterviewMode:
            assert Requirement.FOCUS_AREA in required_fields(mode)

    def test_recording_consent_only_for_ai_and_live(self):
        needs_consent = {m for m in InterviewMode if Requirement.RECORDING_CONSENT in required_fields(m)}
        assert needs_consent == {InterviewMode.AI, InterviewMode.LIVE}

    def test_slot_reference_only_for_live(self):
        needs_slot = {m for m in InterviewMode if Requirement.SLOT_REFERENCE in required_fields(m)}
        assert needs_slot == {InterviewMode.LIVE}

    def test_accepts_raw_mode_string(self):
        assert required_fields("peer") == required_fields(InterviewMode.PEER)


class TestValidateBookingRequest:
    def test_live_without_slot_reference(self):
        request = _request(mode=InterviewMode.LIVE)
        assert missing_requirements(request) == ["slot_reference"]
        with pytest.raises(ValidationError) as exc:
            validate_booking_request(request, DURATIONS)
        assert exc.value.details == {"missing": ["slot_reference"]}

    def test_ai_requires_recording_consent(self):
        request = _request(mode=InterviewMode.AI, consent_flags=ConsentFlags(recording=False))
        with pytest.raises(ValidationError) as exc:
            validate_booking_request(request, DURATIONS)
        assert exc.value.details["missing"] == ["recording_consent"]

    def test_peer_does_not_require_recording_consent(self):
        request = _request(mode=InterviewMode.PEER, consent_flags=ConsentFlags(recording=False))
        validate_booking_request(request, DURATIONS)

    def test_blank_focus_area_is_missing(self):
        request = _request(mode=InterviewMode.FAMILY, focus_area="   ")
        assert missing_requirements(request) == ["focus_area"]

    @pytest.mark.parametrize("duration", [0, 20, 120])
    def test_rejects_unsupported_duration(self, duration):
        with pytest.raises(ValidationError):
            validate_booking_request(_request(mode=InterviewMode.AI, duration=duration), DURATIONS)

    def test_non_live_request_cannot_name_an_interviewer(self):
        request = _request(mode=InterviewMode.PEER, interviewer_id="interviewer-1")
        with pytest.raises(ValidationError):
            validate_booking_request(request, DURATIONS)
