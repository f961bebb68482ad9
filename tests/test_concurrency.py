from concurrent.futures import ThreadPoolExecutor

from app.base.errors import SlotTaken
from app.base.models import Actor, InterviewStatus, UserRole

CONTENDERS = 8


def test_concurrent_bookings_of_one_slot_yield_one_winner(
    scheduler, db, session_factory, interviewer, publish, make_request
):
    slot = publish(interviewer)
    db.close()

    def attempt(i):
        session = session_factory()
        try:
            actor = Actor(user_id=f"trainee-{i}", role=UserRole.TRAINEE)
            return scheduler.book(actor, make_request(slot_id=slot.slot_id), session)
        except SlotTaken:
            return None
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=CONTENDERS) as pool:
        outcomes = list(pool.map(attempt, range(CONTENDERS)))

    winners = [o for o in outcomes if o is not None]
    assert len(winners) == 1
    assert outcomes.count(None) == CONTENDERS - 1

    check = session_factory()
    try:
        stored = scheduler.slots.get(check, slot.slot_id)
        assert stored.is_booked is True
        assert stored.interview_id == winners[0].booking_id
        bookings, pagination = scheduler.ledger.search(check, status=InterviewStatus.SCHEDULED)
        assert pagination["total"] == 1
    finally:
        check.close()


RACE_TIMES = ["10:00 AM", "11:00 AM", "02:00 PM", "03:00 PM"]


def test_cancel_racing_rebook_leaves_slot_and_ledger_in_step(
    scheduler, db, session_factory, interviewer, publish, make_request
):
    holders = []
    for i, time in enumerate(RACE_TIMES):
        slot = publish(interviewer, time=time)
        owner = Actor(user_id=f"holder-{i}", role=UserRole.TRAINEE)
        holders.append((slot, owner, scheduler.book(owner, make_request(time=time, slot_id=slot.slot_id), db)))
    db.close()

    def cancel(i):
        slot, owner, booking = holders[i]
        session = session_factory()
        try:
            return scheduler.cancel(owner, booking.booking_id, "Conflict", session)
        finally:
            session.close()

    def rebook(i):
        slot = holders[i][0]
        session = session_factory()
        try:
            actor = Actor(user_id=f"challenger-{i}", role=UserRole.TRAINEE)
            return scheduler.book(actor, make_request(time=RACE_TIMES[i], slot_id=slot.slot_id), session)
        except SlotTaken:
            return None
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=CONTENDERS) as pool:
        cancels = [pool.submit(cancel, i) for i in range(len(RACE_TIMES))]
        rebooks = [pool.submit(rebook, i) for i in range(len(RACE_TIMES))]
        cancelled = [f.result() for f in cancels]
        rebooked = [f.result() for f in rebooks]

    assert all(c.status == InterviewStatus.CANCELLED for c in cancelled)

    check = session_factory()
    try:
        for (slot, owner, booking), challenger in zip(holders, rebooked):
            assert scheduler.ledger.get(check, booking.booking_id).status == InterviewStatus.CANCELLED.value

            stored = scheduler.slots.get(check, slot.slot_id)
            if challenger is None:
                assert stored.is_booked is False
                assert stored.interview_id is None
            else:
                assert stored.is_booked is True
                assert stored.interview_id == challenger.booking_id
                assert scheduler.ledger.get(check, challenger.booking_id).status == InterviewStatus.SCHEDULED.value

        _, pagination = scheduler.ledger.search(check, status=InterviewStatus.SCHEDULED)
        assert pagination["total"] == sum(1 for c in rebooked if c is not None)
    finally:
        check.close()
