from datetime import date, time
from types import SimpleNamespace

import pytest

from spa_scheduler.core.enums import AppointmentStatus, DayOfWeek
from spa_scheduler.scheduling.conflicts import (
    BookedInterval,
    blocks_all_statuses,
    blocks_unless_cancelled,
    conflict_predicate,
    filter_conflicts,
)
from spa_scheduler.scheduling.slots import Slot, generate_slots, generate_window_slots
from spa_scheduler.scheduling.time_math import intervals_overlap
from spa_scheduler.scheduling.weekly_index import day_of_week_for, windows_for_date


def _window(day: DayOfWeek, start: time, end: time, is_active: bool = True) -> SimpleNamespace:
    return SimpleNamespace(day_of_week=day, start_time=start, end_time=end, is_active=is_active)


@pytest.mark.parametrize(
    ('target_date', 'expected'),
    [
        (date(2026, 1, 4), DayOfWeek.SUNDAY),
        (date(2026, 1, 5), DayOfWeek.MONDAY),
        (date(2026, 1, 10), DayOfWeek.SATURDAY),
    ],
)
def test_day_of_week_for_maps_calendar_dates(target_date: date, expected: DayOfWeek) -> None:
    assert day_of_week_for(target_date) == expected


def test_windows_for_date_keeps_active_windows_for_that_weekday_in_order() -> None:
    morning = _window(DayOfWeek.MONDAY, time(9, 0), time(12, 0))
    inactive = _window(DayOfWeek.MONDAY, time(12, 0), time(13, 0), is_active=False)
    tuesday = _window(DayOfWeek.TUESDAY, time(9, 0), time(17, 0))
    afternoon = _window(DayOfWeek.MONDAY, time(14, 0), time(18, 0))

    result = windows_for_date([morning, inactive, tuesday, afternoon], date(2026, 1, 5))

    assert result == [morning, afternoon]


def test_windows_for_date_returns_empty_list_on_a_day_off() -> None:
    assert windows_for_date([_window(DayOfWeek.MONDAY, time(9, 0), time(12, 0))], date(2026, 1, 6)) == []


@pytest.mark.parametrize(
    ('start', 'end', 'duration'),
    [
        (540, 720, 60),
        (540, 720, 15),
        (547, 700, 45),
        (600, 630, 30),
        (480, 1020, 90),
    ],
)
def test_generate_window_slots_count_and_alignment(start: int, end: int, duration: int) -> None:
    slots = list(generate_window_slots(start, end, duration, 15))

    assert len(slots) == (end - start - duration) // 15 + 1
    for slot in slots:
        assert slot.start % 15 == start % 15
        assert slot.end == slot.start + duration
        assert slot.end <= end


def test_generate_window_slots_aligns_to_window_start() -> None:
    slots = list(generate_window_slots(547, 637, 60, 15))

    assert [slot.start for slot in slots] == [547, 562, 577]


def test_generate_window_slots_yields_nothing_when_service_is_longer_than_window() -> None:
    assert list(generate_window_slots(540, 570, 60, 15)) == []


def test_generate_window_slots_rejects_non_positive_duration() -> None:
    with pytest.raises(ValueError):
        list(generate_window_slots(540, 600, 0, 15))


def test_generate_slots_concatenates_overlapping_windows_without_dedup() -> None:
    windows = [
        _window(DayOfWeek.MONDAY, time(9, 0), time(10, 0)),
        _window(DayOfWeek.MONDAY, time(9, 30), time(10, 30)),
    ]

    slots = generate_slots(windows, 30, 15)

    assert slots == [
        Slot(540, 570), Slot(555, 585), Slot(570, 600),
        Slot(570, 600), Slot(585, 615), Slot(600, 630),
    ]


def test_filter_conflicts_removes_only_overlapping_candidates_and_keeps_order() -> None:
    candidates = list(generate_window_slots(540, 720, 60, 15))
    booked = [BookedInterval(600, 660, AppointmentStatus.CONFIRMED)]

    kept = filter_conflicts(candidates, booked)

    assert kept == [Slot(540, 600), Slot(660, 720)]
    for slot in candidates:
        overlaps = intervals_overlap(slot.start, slot.end, 600, 660)
        assert (slot in kept) is not overlaps


def test_filter_conflicts_counts_cancelled_appointments_by_default() -> None:
    candidates = [Slot(540, 600)]
    booked = [BookedInterval(540, 600, AppointmentStatus.CANCELLED)]

    assert filter_conflicts(candidates, booked) == []
    assert filter_conflicts(candidates, booked, blocks_unless_cancelled) == candidates


def test_conflict_predicate_follows_configuration(monkeypatch: pytest.MonkeyPatch) -> None:
    assert conflict_predicate() is blocks_all_statuses

    monkeypatch.setattr('spa_scheduler.core.config.SLOT_CONFLICT_IGNORES_CANCELLED', True)

    assert conflict_predicate() is blocks_unless_cancelled
