# carwash/core.py
"""Slot arithmetic for the booking calendar.

Everything here is pure: callers load the day's opening hours and bookings
from the database and pass them in.
"""

from dataclasses import dataclass
from datetime import datetime, date, time, timedelta
from typing import Iterable, List, Optional

ACTIVE_STATUSES = ("PENDING", "CONFIRMED", "IN_PROGRESS")


@dataclass
class TimeSlot:
    time: str
    available: bool


def overlaps(start_a, end_a, start_b, end_b) -> bool:
    return start_a < end_b and start_b < end_a


def count_overlapping(start: datetime, end: datetime, bookings: Iterable, exclude_id: Optional[int] = None) -> int:
    """Number of active bookings whose interval intersects [start, end)."""
    count = 0
    for b in bookings:
        if b.status not in ACTIVE_STATUSES:
            continue
        if exclude_id is not None and b.id == exclude_id:
            continue
        if overlaps(start, end, b.starts_at, b.ends_at):
            count += 1
    return count


def in_break(start: datetime, end: datetime, hours) -> bool:
    if hours.break_start is None or hours.break_end is None:
        return False
    day = start.date()
    break_start = datetime.combine(day, hours.break_start)
    break_end = datetime.combine(day, hours.break_end)
    return overlaps(start, end, break_start, break_end)


def generate_slots(
    day: date,
    duration_minutes: int,
    hours,
    bookings: Iterable,
    capacity: int = 1,
    now: Optional[datetime] = None,
    interval_minutes: int = 30,
    exclude_id: Optional[int] = None,
) -> List[TimeSlot]:
    """Candidate start times for a service of `duration_minutes` on `day`.

    Starts step by `interval_minutes` from opening time. A start is only
    listed when the whole service fits before closing and outside the break.
    It is marked unavailable when `capacity` active bookings already overlap
    it or when it is not in the future.
    """
    if hours is None or not hours.is_open:
        return []

    bookings = list(bookings)
    duration = timedelta(minutes=duration_minutes)
    step = timedelta(minutes=interval_minutes)

    work_start = datetime.combine(day, hours.start_time)
    work_end = datetime.combine(day, hours.end_time)

    slots = []
    current = work_start
    while current + duration <= work_end:
        slot_start = current
        slot_end = current + duration
        current += step

        if in_break(slot_start, slot_end, hours):
            continue

        taken = count_overlapping(slot_start, slot_end, bookings, exclude_id=exclude_id)
        past = now is not None and slot_start <= now

        slots.append(TimeSlot(time=slot_start.strftime("%H:%M"), available=taken < capacity and not past))

    return slots


def find_slot(slots: List[TimeSlot], start_time: time) -> Optional[TimeSlot]:
    wanted = start_time.strftime("%H:%M")
    for slot in slots:
        if slot.time == wanted:
            return slot
    return None


def end_time_for(start_time: time, duration_minutes: int) -> time:
    # Slots never cross midnight: generate_slots keeps them inside opening hours.
    start = datetime.combine(date.min, start_time)
    return (start + timedelta(minutes=duration_minutes)).time()
