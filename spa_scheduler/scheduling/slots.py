from typing import Iterable, Iterator, NamedTuple

from spa_scheduler.core import config
from spa_scheduler.scheduling.time_math import normalize_time, to_minutes


class Slot(NamedTuple):
    """A candidate interval ``[start, end)`` in minutes from midnight."""

    start: int
    end: int


def generate_window_slots(
    window_start: int,
    window_end: int,
    duration_minutes: int,
    granularity_minutes: int = config.SLOT_GRANULARITY_MINUTES,
) -> Iterator[Slot]:
    """Yield every slot of ``duration_minutes`` that fits inside the window.

    Starts step by ``granularity_minutes`` from the window's own start, so a
    window opening at 09:07 yields 09:07, 09:22, 09:37 and so on. A service
    longer than the window yields nothing.
    """
    if duration_minutes <= 0:
        raise ValueError('Service duration must be a positive number of minutes.')
    if granularity_minutes <= 0:
        raise ValueError('Slot granularity must be a positive number of minutes.')

    current = window_start
    while current + duration_minutes <= window_end:
        yield Slot(current, current + duration_minutes)
        current += granularity_minutes


def generate_slots(
    windows: Iterable,
    duration_minutes: int,
    granularity_minutes: int = config.SLOT_GRANULARITY_MINUTES,
) -> list[Slot]:
    # Each window gets its own grid; grids are concatenated, never merged.
    slots: list[Slot] = []
    for window in windows:
        slots.extend(
            generate_window_slots(
                to_minutes(normalize_time(window.start_time)),
                to_minutes(normalize_time(window.end_time)),
                duration_minutes,
                granularity_minutes,
            )
        )
    return slots
