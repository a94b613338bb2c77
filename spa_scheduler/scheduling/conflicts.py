from typing import Callable, Iterable, NamedTuple

from spa_scheduler.core import config
from spa_scheduler.core.enums import AppointmentStatus
from spa_scheduler.scheduling.slots import Slot
from spa_scheduler.scheduling.time_math import intervals_overlap, normalize_time, to_minutes

ConflictPredicate = Callable[[AppointmentStatus], bool]


class BookedInterval(NamedTuple):
    start: int
    end: int
    status: AppointmentStatus


def blocks_all_statuses(status: AppointmentStatus) -> bool:
    return True


def blocks_unless_cancelled(status: AppointmentStatus) -> bool:
    return status != AppointmentStatus.CANCELLED


def conflict_predicate() -> ConflictPredicate:
    if config.SLOT_CONFLICT_IGNORES_CANCELLED:
        return blocks_unless_cancelled
    return blocks_all_statuses


def booked_intervals(appointments: Iterable) -> list[BookedInterval]:
    return [
        BookedInterval(
            to_minutes(normalize_time(appointment.start_time)),
            to_minutes(normalize_time(appointment.end_time)),
            AppointmentStatus(appointment.status),
        )
        for appointment in appointments
    ]


def filter_conflicts(
    candidates: Iterable[Slot],
    booked: Iterable[BookedInterval],
    blocks: ConflictPredicate = blocks_all_statuses,
) -> list[Slot]:
    """Drop candidates that overlap a blocking booked interval, keeping order."""
    blocking = [interval for interval in booked if blocks(interval.status)]
    return [
        slot
        for slot in candidates
        if not any(
            intervals_overlap(slot.start, slot.end, interval.start, interval.end)
            for interval in blocking
        )
    ]
