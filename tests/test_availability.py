import pytest

from app.base.config import settings
from app.base.errors import PastSchedule
from app.base.models import Actor, InterviewMode, ProfileStatus, UserRole
from conftest import TODAY, TOMORROW, YESTERDAY


class TestNonLiveAvailability:
    def test_future_day_offers_every_label(self, scheduler, db):
        result = scheduler.available(TOMORROW, InterviewMode.AI, db)
        assert [o.time for o in result.slots] == settings.SLOT_TIME_LABELS
        assert all(o.slot_id is None for o in result.slots)
        assert result.buffer_minutes == 30

    def test_today_drops_labels_inside_buffer(self, scheduler, db):
        # 09:50 now: 09:00 has passed and 10:00 is only 10 minutes away
        times = [o.time for o in scheduler.available(TODAY, InterviewMode.PEER, db).slots]
        assert "09:00 AM" not in times
        assert "10:00 AM" not in times
        assert times[0] == "11:00 AM"

    def test_past_day_is_empty(self, scheduler, db):
        assert scheduler.available(YESTERDAY, InterviewMode.FAMILY, db).slots == []


class TestLiveAvailability:
    def test_lists_free_slots_with_interviewer_identity(self, scheduler, db, interviewer, publish):
        publish(interviewer, time="02:00 PM")
        publish(interviewer, time="09:00 AM")

        offerings = scheduler.available(TOMORROW, InterviewMode.LIVE, db).slots

        assert [o.time for o in offerings] == ["09:00 AM", "02:00 PM"]
        assert offerings[0].interviewer.name == "Dana Reyes"
        assert offerings[0].interviewer.email == "interviewer-1@example.com"

    def test_booked_slot_disappears(self, scheduler, db, interviewer, trainee, publish, make_request):
        slot = publish(interviewer)
        scheduler.book(trainee, make_request(slot_id=slot.slot_id), db)
        assert scheduler.available(TOMORROW, InterviewMode.LIVE, db).slots == []

    def test_unapproved_interviewers_are_hidden(self, scheduler, db, seed_profile, publish):
        pending = seed_profile("interviewer-7", status=ProfileStatus.PENDING)
        publish(pending)
        assert scheduler.available(TOMORROW, InterviewMode.LIVE, db).slots == []

    def test_slot_without_profile_is_hidden(self, scheduler, db, publish):
        publish(Actor(user_id="ghost", role=UserRole.INTERVIEWER))
        assert scheduler.available(TOMORROW, InterviewMode.LIVE, db).slots == []


class TestBufferConsistency:
    """A time is listed exactly when booking it would pass the time checks."""

    @pytest.mark.parametrize("mode", [InterviewMode.AI, InterviewMode.PEER, InterviewMode.FAMILY])
    def test_non_live_listing_matches_booking(self, scheduler, db, make_request, mode):
        listed = {o.time for o in scheduler.available(TODAY, mode, db).slots}

        for i, label in enumerate(settings.SLOT_TIME_LABELS):
            actor = Actor(user_id=f"trainee-{i}", role=UserRole.TRAINEE)
            try:
                scheduler.book(actor, make_request(mode=mode, day=TODAY, time=label), db)
                accepted = True
            except PastSchedule:
                accepted = False
            assert accepted == (label in listed), label

    def test_live_listing_matches_booking(self, scheduler, db, clock, interviewer, publish, make_request):
        clock.advance(hours=-2)  # 07:50, every label today can still be published
        slots = {label: publish(interviewer, day=TODAY, time=label) for label in settings.SLOT_TIME_LABELS}
        clock.advance(hours=2)

        listed = {o.time for o in scheduler.available(TODAY, InterviewMode.LIVE, db).slots}

        for i, label in enumerate(settings.SLOT_TIME_LABELS):
            actor = Actor(user_id=f"trainee-{i}", role=UserRole.TRAINEE)
            try:
                scheduler.book(actor, make_request(day=TODAY, time=label, slot_id=slots[label].slot_id), db)
                accepted = True
            except PastSchedule:
                accepted = False
            assert accepted == (label in listed), label

    def test_ten_minutes_out_rejected_by_both_paths(self, scheduler, db, trainee, make_request):
        listed = {o.time for o in scheduler.available(TODAY, InterviewMode.AI, db).slots}
        assert "10:00 AM" not in listed
        with pytest.raises(PastSchedule):
            scheduler.book(trainee, make_request(mode=InterviewMode.AI, day=TODAY, time="10:00 AM"), db)
