"""
Calendar arithmetic for courts: slot generation from a day's configuration,
interval overlap and the cells a booking occupies.
"""
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Iterable, List, Optional

from quickcourt.models.enums import DayOfWeek

MINUTES_PER_DAY = 24 * 60
CELL_MINUTES = 30

DEFAULT_START_TIME = time(10, 0)
DEFAULT_SLOT_DURATION = 1
DEFAULT_NUMBER_OF_SLOTS = 11


def time_to_minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def minutes_to_time(minutes: int) -> time:
    return time(minutes // 60, minutes % 60)


def intervals_overlap(start1: int, end1: int, start2: int, end2: int) -> bool:
    """Half-open intervals [start1, end1) and [start2, end2) intersect."""
    return start1 < end2 and start2 < end1


def times_overlap(start1: time, end1: time, start2: time, end2: time) -> bool:
    return intervals_overlap(
        time_to_minutes(start1), time_to_minutes(end1),
        time_to_minutes(start2), time_to_minutes(end2),
    )


def day_end_minutes(start_time: time, slot_duration: int, number_of_slots: int) -> int:
    return time_to_minutes(start_time) + slot_duration * number_of_slots * 60


def day_slots(config) -> List[dict]:
    """All bookable slots of a day configuration, in order."""
    if config is None or not config.is_open:
        return []
    start = time_to_minutes(config.start_time)
    length = config.slot_duration * 60
    slots = []
    for i in range(config.number_of_slots):
        slot_start = start + i * length
        slots.append({
            "start_time": minutes_to_time(slot_start),
            "end_time": minutes_to_time(slot_start + length),
            "price": Decimal(config.price),
        })
    return slots


def booking_end(start_time: time, number_of_slots: int, slot_duration: int) -> Optional[time]:
    """End of a booking, or None when it would run past midnight."""
    end = time_to_minutes(start_time) + number_of_slots * slot_duration * 60
    if end >= MINUTES_PER_DAY:
        return None
    return minutes_to_time(end)


def is_slot_boundary(config, start_time: time) -> bool:
    offset = time_to_minutes(start_time) - time_to_minutes(config.start_time)
    return offset >= 0 and offset % (config.slot_duration * 60) == 0


def within_operating_hours(config, start_time: time, end_time: time) -> bool:
    if config is None or not config.is_open:
        return False
    open_at = time_to_minutes(config.start_time)
    close_at = day_end_minutes(config.start_time, config.slot_duration, config.number_of_slots)
    return open_at <= time_to_minutes(start_time) and time_to_minutes(end_time) <= close_at


def occupied_cells(start_time: time, end_time: time) -> List[time]:
    """
    Start times of the CELL_MINUTES cells covering [start_time, end_time).

    Cells are aligned to the clock, so two intervals overlap exactly when
    they share at least one cell.
    """
    first = time_to_minutes(start_time) // CELL_MINUTES * CELL_MINUTES
    last = time_to_minutes(end_time)
    return [minutes_to_time(m) for m in range(first, last, CELL_MINUTES)]


def default_slot_configurations(default_price) -> List[dict]:
    return [
        {
            "day_of_week": day.value,
            "is_open": True,
            "start_time": DEFAULT_START_TIME,
            "slot_duration": DEFAULT_SLOT_DURATION,
            "number_of_slots": DEFAULT_NUMBER_OF_SLOTS,
            "price": default_price,
        }
        for day in DayOfWeek
    ]


def mark_availability(slots: List[dict], on: date, bookings: Iterable, unavailabilities: Iterable) -> List[dict]:
    """Flags every slot as available unless a booking or a block covers it."""
    bookings = list(bookings)
    unavailabilities = list(unavailabilities)
    for slot in slots:
        taken = any(
            times_overlap(slot["start_time"], slot["end_time"], b.start_time, b.end_time)
            for b in bookings
        )
        blocked = not taken and any(
            u.blocks(on, slot["start_time"], slot["end_time"]) for u in unavailabilities
        )
        slot["is_available"] = not (taken or blocked)
    return slots


def date_range(start: date, days: int) -> List[date]:
    return [start + timedelta(days=i) for i in range(days)]


def combine(on: date, at: time) -> datetime:
    return datetime.combine(on, at)
