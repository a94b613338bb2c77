"""Time-of-day arithmetic in minute space.

Times cross the API boundary as zero-padded 24-hour ``HH:MM`` strings. Storage
keeps ``TIME`` columns, which may carry seconds, so everything read back goes
through :func:`normalize_time` before any arithmetic.
"""

import re
from datetime import time

from spa_scheduler.core.errors import MalformedTimeError, UnsupportedTimeRangeError

MINUTES_PER_DAY = 24 * 60

TIME_PATTERN = r'^([01][0-9]|2[0-3]):[0-5][0-9]$'

_HH_MM = re.compile(r'([0-9]{2}):([0-9]{2})')
_HH_MM_SS = re.compile(r'([0-9]{2}):([0-9]{2}):([0-9]{2})(\.[0-9]+)?')


def to_minutes(value: str) -> int:
    if not isinstance(value, str):
        raise MalformedTimeError(value)

    match = _HH_MM.fullmatch(value)
    if match is None:
        raise MalformedTimeError(value)

    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise MalformedTimeError(value)

    return hours * 60 + minutes


def from_minutes(minutes: int) -> str:
    if minutes < 0 or minutes >= MINUTES_PER_DAY:
        raise UnsupportedTimeRangeError(minutes)

    hours, mins = divmod(minutes, 60)
    return f'{hours:02d}:{mins:02d}'


def intervals_overlap(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    # Half-open intervals: touching endpoints do not overlap.
    return start_a < end_b and end_a > start_b


def normalize_time(value) -> str:
    """Render a stored or submitted time of day as ``HH:MM``.

    Accepts ``datetime.time`` values and ``HH:MM`` / ``HH:MM:SS`` strings;
    seconds are dropped.
    """
    if isinstance(value, time):
        return f'{value.hour:02d}:{value.minute:02d}'

    if isinstance(value, str):
        match = _HH_MM_SS.fullmatch(value)
        if match is not None:
            value = f'{match.group(1)}:{match.group(2)}'
        # Range check.
        to_minutes(value)
        return value

    raise MalformedTimeError(value)


def parse_time(value: str) -> time:
    hours, minutes = divmod(to_minutes(value), 60)
    return time(hours, minutes)
