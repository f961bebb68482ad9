import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Sequence

from app.base.errors import PastDate, PastTime, ValidationError

TIME_LABEL_PATTERN = re.compile(r"^(0?[1-9]|1[0-2]):([0-5][0-9]) (AM|PM)$", re.IGNORECASE)


def parse_time_label(label: str) -> time:
    """Convert a 12-hour label such as ``"02:00 PM"`` into a ``time``."""
    match = TIME_LABEL_PATTERN.match(label.strip()) if label else None
    if not match:
        raise ValidationError(
            f"Invalid time format '{label}'. Use a format like \"09:00 AM\" or \"02:00 PM\"",
            {"time": label},
        )
    hour, minute, period = int(match.group(1)), int(match.group(2)), match.group(3).upper()
    if period == "PM" and hour != 12:
        hour += 12
    if period == "AM" and hour == 12:
        hour = 0
    return time(hour, minute)


def label_sort_key(label: str) -> int:
    start = parse_time_label(label)
    return start.hour * 60 + start.minute


def slot_start(day: date, label: str) -> datetime:
    return datetime.combine(day, parse_time_label(label), tzinfo=timezone.utc)


def ensure_time_label(label: str, allowed: Sequence[str]) -> str:
    parse_time_label(label)
    if label not in allowed:
        raise ValidationError(
            f"Time '{label}' is not one of the bookable slot starts",
            {"time": label, "allowed": list(allowed)},
        )
    return label


# === Clocks ===

class SystemClock:
    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def today(self) -> date:
        return self.now().date()


class FrozenClock:
    """Clock pinned to a fixed instant; tests move it with ``advance``."""

    def __init__(self, moment: datetime):
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        self._moment = moment

    def now(self) -> datetime:
        return self._moment

    def today(self) -> date:
        return self._moment.date()

    def advance(self, **delta) -> None:
        self._moment += timedelta(**delta)


# === Booking window ===

class BookingWindow:
    """
    The single past/near-past rule shared by slot publishing, booking,
    rescheduling and the availability read path.

    A (date, time label) pair is bookable iff its start is strictly later than
    now plus the buffer.
    """

    def __init__(self, clock=None, buffer_minutes: int = 30):
        self.clock = clock or SystemClock()
        self.buffer = timedelta(minutes=buffer_minutes)

    @property
    def buffer_minutes(self) -> int:
        return int(self.buffer.total_seconds() // 60)

    def now(self) -> datetime:
        return self.clock.now()

    def today(self) -> date:
        return self.clock.now().date()

    def is_bookable(self, day: date, label: str, now: Optional[datetime] = None) -> bool:
        now = now or self.clock.now()
        if day < now.date():
            return False
        return slot_start(day, label) > now + self.buffer

    def is_upcoming(self, day: date, label: str) -> bool:
        return slot_start(day, label) > self.clock.now()

    def ensure_bookable(self, day: date, label: str) -> None:
        now = self.clock.now()
        if day < now.date():
            raise PastDate(
                "Date must not be in the past",
                {"date": day.isoformat()},
            )
        if not self.is_bookable(day, label, now):
            raise PastTime(
                f"Selected time must be at least {self.buffer_minutes} minutes in the future",
                {"date": day.isoformat(), "time": label, "buffer_minutes": self.buffer_minutes},
            )
