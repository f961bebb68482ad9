import pytest

from app.base.errors import PastSchedule, SlotTaken
from app.base.models import InterviewMode, InterviewStatus
from conftest import TODAY


def test_cancelled_slot_can_be_rebooked(scheduler, db, interviewer, trainee, other_trainee, publish, make_request):
    slot = publish(interviewer)  # tomorrow 10:00 AM

    first = scheduler.book(trainee, make_request(slot_id=slot.slot_id), db)
    assert first.status == InterviewStatus.SCHEDULED
    assert scheduler.slots.get(db, slot.slot_id).is_booked is True

    with pytest.raises(SlotTaken):
        scheduler.book(other_trainee, make_request(slot_id=slot.slot_id), db)

    cancelled = scheduler.cancel(trainee, first.booking_id, None, db)
    assert cancelled.status == InterviewStatus.CANCELLED
    assert scheduler.slots.get(db, slot.slot_id).is_booked is False

    retry = scheduler.book(other_trainee, make_request(slot_id=slot.slot_id), db)
    assert retry.status == InterviewStatus.SCHEDULED
    assert scheduler.slots.get(db, slot.slot_id).interview_id == retry.booking_id


def test_booking_inside_buffer_rejected_everywhere(scheduler, db, trainee, make_request):
    # clock reads 09:50, buffer is 30 minutes
    offered = [o.time for o in scheduler.available(TODAY, InterviewMode.AI, db).slots]
    assert "10:00 AM" not in offered

    with pytest.raises(PastSchedule):
        scheduler.book(trainee, make_request(mode=InterviewMode.AI, day=TODAY, time="10:00 AM"), db)
