"""Tests for the slot availability calculator."""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional

from carwash.core import count_overlapping, end_time_for, find_slot, generate_slots, overlaps
from carwash.models import BusinessHours

DAY = date(2030, 1, 14)  # a Monday


@dataclass
class FakeBooking:
    id: int
    starts_at: datetime
    duration: int = 60
    status: str = "CONFIRMED"

    @property
    def ends_at(self):
        return self.starts_at + timedelta(minutes=self.duration)


def at(hour, minute=0):
    return datetime.combine(DAY, time(hour, minute))


def hours(start=time(8, 0), end=time(17, 0), break_start: Optional[time] = None, break_end: Optional[time] = None, is_open=True):
    return BusinessHours(
        day_of_week=DAY.weekday(),
        is_open=is_open,
        start_time=start,
        end_time=end,
        break_start=break_start,
        break_end=break_end,
    )


def times(slots, only_available=False):
    return [s.time for s in slots if s.available or not only_available]


class TestOverlaps:

    def test_adjacent_intervals_do_not_overlap(self):
        assert not overlaps(at(9), at(10), at(10), at(11))
        assert not overlaps(at(10), at(11), at(9), at(10))

    def test_partial_and_containing_intervals_overlap(self):
        assert overlaps(at(9), at(10), at(9, 30), at(10, 30))
        assert overlaps(at(9), at(12), at(10), at(11))
        assert overlaps(at(10), at(11), at(9), at(12))

    def test_count_skips_inactive_and_excluded(self):
        bookings = [
            FakeBooking(1, at(9)),
            FakeBooking(2, at(9), status="CANCELLED"),
            FakeBooking(3, at(9), status="NO_SHOW"),
            FakeBooking(4, at(9, 30), status="IN_PROGRESS"),
        ]
        assert count_overlapping(at(9), at(10), bookings) == 2
        assert count_overlapping(at(9), at(10), bookings, exclude_id=1) == 1


class TestGenerateSlots:

    def test_closed_day_has_no_slots(self):
        assert generate_slots(DAY, 30, None, []) == []
        assert generate_slots(DAY, 30, hours(is_open=False), []) == []

    def test_service_must_finish_before_closing(self):
        slots = generate_slots(DAY, 60, hours(time(8, 0), time(10, 0)), [])
        assert times(slots) == ["08:00", "08:30", "09:00"]

    def test_service_longer_than_opening_hours(self):
        assert generate_slots(DAY, 240, hours(time(8, 0), time(10, 0)), []) == []

    def test_break_window_is_skipped(self):
        slots = generate_slots(DAY, 30, hours(time(11, 0), time(14, 0), time(12, 0), time(13, 0)), [])
        assert times(slots) == ["11:00", "11:30", "13:00", "13:30"]

    def test_slot_running_into_break_is_skipped(self):
        slots = generate_slots(DAY, 60, hours(time(11, 0), time(14, 0), time(12, 0), time(12, 30)), [])
        assert times(slots) == ["11:00", "12:30", "13:00"]

    def test_booked_interval_marks_overlapping_slots_unavailable(self):
        bookings = [FakeBooking(1, at(9), duration=60)]
        slots = generate_slots(DAY, 30, hours(time(8, 0), time(11, 0)), bookings)

        assert times(slots) == ["08:00", "08:30", "09:00", "09:30", "10:00", "10:30"]
        assert times(slots, only_available=True) == ["08:00", "08:30", "10:00", "10:30"]

    def test_long_service_blocked_by_later_booking(self):
        bookings = [FakeBooking(1, at(10), duration=30)]
        slots = generate_slots(DAY, 90, hours(time(8, 0), time(12, 0)), bookings)

        # 08:30-10:00 ends exactly when the booking starts
        assert times(slots, only_available=True) == ["08:00", "08:30", "10:30"]

    def test_capacity_allows_parallel_bookings(self):
        one = [FakeBooking(1, at(9), duration=30)]
        two = one + [FakeBooking(2, at(9), duration=30)]
        day_hours = hours(time(9, 0), time(10, 0))

        assert times(generate_slots(DAY, 30, day_hours, one, capacity=2), only_available=True) == ["09:00", "09:30"]
        assert times(generate_slots(DAY, 30, day_hours, two, capacity=2), only_available=True) == ["09:30"]

    def test_cancelled_bookings_free_the_slot(self):
        bookings = [FakeBooking(1, at(9), duration=30, status="CANCELLED")]
        slots = generate_slots(DAY, 30, hours(time(9, 0), time(10, 0)), bookings)
        assert all(s.available for s in slots)

    def test_excluded_booking_does_not_block_itself(self):
        bookings = [FakeBooking(7, at(9), duration=30)]
        slots = generate_slots(DAY, 30, hours(time(9, 0), time(10, 0)), bookings, exclude_id=7)
        assert all(s.available for s in slots)

    def test_past_slots_are_unavailable(self):
        slots = generate_slots(DAY, 30, hours(time(8, 0), time(10, 0)), [], now=at(9))
        assert times(slots, only_available=True) == ["09:30"]

    def test_custom_interval(self):
        slots = generate_slots(DAY, 15, hours(time(8, 0), time(9, 0)), [], interval_minutes=15)
        assert times(slots) == ["08:00", "08:15", "08:30", "08:45"]


def test_find_slot():
    slots = generate_slots(DAY, 30, hours(time(8, 0), time(9, 0)), [])
    assert find_slot(slots, time(8, 30)).time == "08:30"
    assert find_slot(slots, time(8, 15)) is None


def test_end_time_for():
    assert end_time_for(time(9, 45), 30) == time(10, 15)
    assert end_time_for(time(14, 0), 240) == time(18, 0)
