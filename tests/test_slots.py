from datetime import date, datetime, time
from decimal import Decimal
from types import SimpleNamespace

from quickcourt.models.court_unavailability import CourtUnavailability
from quickcourt.models.enums import DayOfWeek
from quickcourt.services import slots


def config(**overrides):
    fields = dict(is_open=True, start_time=time(10, 0), slot_duration=1, number_of_slots=11, price=Decimal("400"))
    fields.update(overrides)
    return SimpleNamespace(**fields)


def test_intervals_overlap_is_half_open():
    assert slots.intervals_overlap(600, 660, 630, 690)
    assert slots.intervals_overlap(600, 720, 630, 660)
    assert not slots.intervals_overlap(600, 660, 660, 720)
    assert not slots.intervals_overlap(660, 720, 600, 660)


def test_day_slots_follow_configuration():
    generated = slots.day_slots(config(start_time=time(6, 30), slot_duration=2, number_of_slots=3))

    assert [(s["start_time"], s["end_time"]) for s in generated] == [
        (time(6, 30), time(8, 30)),
        (time(8, 30), time(10, 30)),
        (time(10, 30), time(12, 30)),
    ]
    assert all(s["price"] == Decimal("400") for s in generated)


def test_closed_day_has_no_slots():
    assert slots.day_slots(config(is_open=False)) == []
    assert slots.day_slots(None) == []


def test_booking_end_refuses_to_cross_midnight():
    assert slots.booking_end(time(20, 0), 2, 1) == time(22, 0)
    assert slots.booking_end(time(22, 0), 2, 1) is None


def test_slot_boundary_and_operating_hours():
    day = config(slot_duration=2, number_of_slots=4)  # 10:00 - 18:00

    assert slots.is_slot_boundary(day, time(12, 0))
    assert not slots.is_slot_boundary(day, time(11, 0))
    assert not slots.is_slot_boundary(day, time(9, 0))
    assert slots.within_operating_hours(day, time(16, 0), time(18, 0))
    assert not slots.within_operating_hours(day, time(16, 0), time(20, 0))


def test_occupied_cells_cover_the_interval():
    assert slots.occupied_cells(time(10, 0), time(11, 30)) == [time(10, 0), time(10, 30), time(11, 0)]
    assert slots.occupied_cells(time(10, 30), time(11, 30)) == [time(10, 30), time(11, 0)]


def test_overlapping_intervals_share_a_cell():
    first = set(slots.occupied_cells(time(10, 0), time(12, 0)))
    second = set(slots.occupied_cells(time(11, 0), time(13, 0)))
    adjacent = set(slots.occupied_cells(time(12, 0), time(13, 0)))

    assert first & second
    assert not first & adjacent


def test_default_configuration_covers_every_day():
    configs = slots.default_slot_configurations(Decimal("500"))

    assert {c["day_of_week"] for c in configs} == {d.value for d in DayOfWeek}
    assert all(c["start_time"] == time(10, 0) and c["number_of_slots"] == 11 for c in configs)
    assert all(c["price"] == Decimal("500") for c in configs)


def test_one_off_unavailability_blocks_its_datetime_range():
    block = CourtUnavailability(
        start_datetime=datetime(2030, 5, 6, 14, 0),
        end_datetime=datetime(2030, 5, 7, 9, 0),
        is_recurring=False,
        recurring_days=[],
    )

    assert block.blocks(date(2030, 5, 6), time(15, 0), time(16, 0))
    assert block.blocks(date(2030, 5, 7), time(8, 0), time(9, 0))
    assert not block.blocks(date(2030, 5, 7), time(9, 0), time(10, 0))
    assert not block.blocks(date(2030, 5, 6), time(13, 0), time(14, 0))


def test_recurring_unavailability_compares_time_of_day_on_listed_days():
    block = CourtUnavailability(
        start_datetime=datetime(2030, 1, 1, 6, 0),
        end_datetime=datetime(2030, 1, 1, 8, 0),
        is_recurring=True,
        recurring_days=["monday", "wednesday"],
    )
    monday = date(2030, 5, 6)
    tuesday = date(2030, 5, 7)

    assert DayOfWeek.from_date(monday) == DayOfWeek.MONDAY
    assert block.blocks(monday, time(7, 0), time(8, 0))
    assert not block.blocks(monday, time(8, 0), time(9, 0))
    assert not block.blocks(tuesday, time(7, 0), time(8, 0))


def test_mark_availability_flags_booked_and_blocked_slots():
    day = slots.day_slots(config(number_of_slots=3))  # 10-11, 11-12, 12-13
    booking = SimpleNamespace(start_time=time(10, 0), end_time=time(11, 0))
    block = SimpleNamespace(blocks=lambda on, start, end: start == time(12, 0))

    slots.mark_availability(day, date(2030, 5, 6), [booking], [block])

    assert [s["is_available"] for s in day] == [False, True, False]
