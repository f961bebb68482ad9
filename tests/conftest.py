import os

# Settings are read at import time
os.environ.setdefault("DB_HOST", "sqlite")
os.environ.setdefault("ENABLE_API_KEY_SECURITY", "true")
os.environ.setdefault("API_KEY", "test-key")
os.environ.setdefault("ENABLE_PROMETHEUS", "false")

from datetime import datetime, timedelta, timezone  # noqa: E402

import pytest  # noqa: E402

from app.base.database import build_engine, build_session_factory, init_db  # noqa: E402
from app.base.models import (  # noqa: E402
    Actor,
    BookingCreate,
    ConsentFlags,
    InterviewMode,
    ProfileStatus,
    PublishSlotRequest,
    UserProfileUpsert,
    UserRole,
)
from app.services.interview_scheduler_service import InterviewSchedulerService  # noqa: E402
from app.services.notification_service import NotificationDispatcher  # noqa: E402
from app.services.user_directory_service import UserDirectory  # noqa: E402
from app.utils.time_utils import FrozenClock  # noqa: E402

NOW = datetime(2030, 1, 15, 9, 50, tzinfo=timezone.utc)
TODAY = NOW.date()
TOMORROW = TODAY + timedelta(days=1)
YESTERDAY = TODAY - timedelta(days=1)


@pytest.fixture
def engine(tmp_path):
    # File-backed so concurrent sessions see each other's commits
    engine = build_engine(f"sqlite:///{tmp_path / 'scheduler.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    return FrozenClock(NOW)


@pytest.fixture
def events():
    return []


@pytest.fixture
def scheduler(clock, events):
    dispatcher = NotificationDispatcher()
    dispatcher.subscribe(events.append)
    return InterviewSchedulerService(clock=clock, dispatcher=dispatcher)


@pytest.fixture
def seed_profile(db, clock):
    """Insert or update a directory profile and commit it."""

    def _seed(user_id, role=UserRole.INTERVIEWER, status=ProfileStatus.APPROVED, name=None):
        UserDirectory().upsert(
            db,
            user_id,
            UserProfileUpsert(
                name=name or user_id.replace("-", " ").title(),
                email=f"{user_id}@example.com",
                role=role,
                status=status,
            ),
            clock.now().replace(tzinfo=None),
        )
        db.commit()
        return Actor(user_id=user_id, role=role)

    return _seed


@pytest.fixture
def interviewer(seed_profile):
    return seed_profile("interviewer-1", name="Dana Reyes")


@pytest.fixture
def second_interviewer(seed_profile):
    return seed_profile("interviewer-2", name="Sam Okafor")


@pytest.fixture
def trainee():
    return Actor(user_id="trainee-a", role=UserRole.TRAINEE)


@pytest.fixture
def other_trainee():
    return Actor(user_id="trainee-b", role=UserRole.TRAINEE)


@pytest.fixture
def admin():
    return Actor(user_id="admin-1", role=UserRole.ADMIN)


@pytest.fixture
def publish(scheduler, db):
    def _publish(actor, day=TOMORROW, time="10:00 AM"):
        return scheduler.publish_slot(actor, PublishSlotRequest(date=day, time=time), db)

    return _publish


def booking_request(mode=InterviewMode.LIVE, day=TOMORROW, time="10:00 AM", **overrides) -> BookingCreate:
    fields = dict(
        mode=mode,
        date=day,
        time=time,
        duration=60,
        focus_area="System design",
        consent_flags=ConsentFlags(recording=True, data_usage=True),
    )
    fields.update(overrides)
    return BookingCreate(**fields)


@pytest.fixture
def make_request():
    return booking_request
