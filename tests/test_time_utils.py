from datetime import date, datetime, time, timezone

import pytest

from app.base.errors import PastDate, PastTime, ValidationError
from app.utils.time_utils import (
    BookingWindow,
    FrozenClock,
    ensure_time_label,
    label_sort_key,
    parse_time_label,
    slot_start,
)

LABELS = ["09:00 AM", "10:00 AM", "11:00 AM", "12:00 PM", "02:00 PM", "03:00 PM", "04:00 PM", "05:00 PM"]


class TestParseTimeLabel:
    @pytest.mark.parametrize(
        "label, expected",
        [
            ("09:00 AM", time(9, 0)),
            ("12:00 PM", time(12, 0)),
            ("12:00 AM", time(0, 0)),
            ("02:00 PM", time(14, 0)),
            ("5:30 pm", time(17, 30)),
        ],
    )
    def test_parses_twelve_hour_labels(self, label, expected):
        assert parse_time_label(label) == expected

    @pytest.mark.parametrize("label", ["", "14:00", "13:00 PM", "09:60 AM", "nine", None])
    def test_rejects_malformed_labels(self, label):
        with pytest.raises(ValidationError):
            parse_time_label(label)

    def test_noon_sorts_before_afternoon(self):
        shuffled = ["02:00 PM", "12:00 PM", "09:00 AM", "05:00 PM"]
        assert sorted(shuffled, key=label_sort_key) == ["09:00 AM", "12:00 PM", "02:00 PM", "05:00 PM"]

    def test_slot_start_is_utc(self):
        start = slot_start(date(2030, 1, 16), "02:00 PM")
        assert start == datetime(2030, 1, 16, 14, 0, tzinfo=timezone.utc)


class TestEnsureTimeLabel:
    def test_accepts_configured_label(self):
        assert ensure_time_label("12:00 PM", LABELS) == "12:00 PM"

    def test_rejects_label_outside_grid(self):
        with pytest.raises(ValidationError) as exc:
            ensure_time_label("01:00 PM", LABELS)
        assert exc.value.details["time"] == "01:00 PM"


class TestBookingWindow:
    def test_start_exactly_at_buffer_edge_is_not_bookable(self):
        window = BookingWindow(FrozenClock(datetime(2030, 1, 15, 9, 30)), buffer_minutes=30)
        assert window.is_bookable(date(2030, 1, 15), "10:00 AM") is False

    def test_start_one_minute_past_buffer_is_bookable(self):
        window = BookingWindow(FrozenClock(datetime(2030, 1, 15, 9, 29)), buffer_minutes=30)
        assert window.is_bookable(date(2030, 1, 15), "10:00 AM") is True

    def test_past_date_is_never_bookable(self):
        window = BookingWindow(FrozenClock(datetime(2030, 1, 15, 9, 0)))
        assert window.is_bookable(date(2030, 1, 14), "05:00 PM") is False

    def test_ensure_bookable_distinguishes_past_date_and_past_time(self):
        window = BookingWindow(FrozenClock(datetime(2030, 1, 15, 9, 50)))
        with pytest.raises(PastDate):
            window.ensure_bookable(date(2030, 1, 14), "10:00 AM")
        with pytest.raises(PastTime) as exc:
            window.ensure_bookable(date(2030, 1, 15), "10:00 AM")
        assert exc.value.details["buffer_minutes"] == 30

    def test_frozen_clock_advances(self):
        clock = FrozenClock(datetime(2030, 1, 15, 9, 0))
        window = BookingWindow(clock)
        assert window.is_bookable(date(2030, 1, 15), "10:00 AM")
        clock.advance(minutes=45)
        assert not window.is_bookable(date(2030, 1, 15), "10:00 AM")

    def test_custom_buffer(self):
        window = BookingWindow(FrozenClock(datetime(2030, 1, 15, 9, 50)), buffer_minutes=5)
        assert window.buffer_minutes == 5
        assert window.is_bookable(date(2030, 1, 15), "10:00 AM")
