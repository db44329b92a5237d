"""Minute-of-day arithmetic shared by the conflict checker and the day grid.

All values are whole minutes since midnight. Seconds are dropped as soon as a
time enters the system, so overlap math and grid labels never disagree.
"""

import math
import re
from datetime import time

from backend.scheduling.errors import InvalidDuration, InvalidTime

MINUTES_PER_DAY = 24 * 60
ROUNDING_MINUTES = 5

_TIME_LABEL_PATTERN = re.compile(r'^(\d{1,2}):(\d{2})(?::(\d{2}))?$')


def parse_time_label(value: str) -> int:
    if not isinstance(value, str):
        raise InvalidTime(f'Time must be a string like HH:MM, got {value!r}.')

    match = _TIME_LABEL_PATTERN.match(value.strip())
    if not match:
        raise InvalidTime(f'Time must look like HH:MM or HH:MM:SS, got {value!r}.')

    hours = int(match.group(1))
    minutes = int(match.group(2))
    seconds = int(match.group(3) or 0)
    if hours > 23 or minutes > 59 or seconds > 59:
        raise InvalidTime(f'Time {value!r} is out of range.')

    return hours * 60 + minutes


def to_minutes(value: time | str | int) -> int:
    if isinstance(value, bool):
        raise InvalidTime(f'Unsupported time value {value!r}.')
    if isinstance(value, time):
        return value.hour * 60 + value.minute
    if isinstance(value, str):
        return parse_time_label(value)
    if isinstance(value, int):
        if value < 0:
            raise InvalidTime(f'Start minute must not be negative, got {value}.')
        return value
    raise InvalidTime(f'Unsupported time value {value!r}.')


def minutes_to_label(total_minutes: int) -> str:
    hours, minutes = divmod(total_minutes, 60)
    return f'{hours:02d}:{minutes:02d}'


def minutes_to_time(total_minutes: int) -> time:
    hours, minutes = divmod(total_minutes % MINUTES_PER_DAY, 60)
    return time(hours, minutes)


def round_to_nearest_five(total_minutes: int) -> int:
    """Round to the nearest 5-minute boundary, ties up, wrapping past midnight.

    10:27 becomes 10:25, 10:28 becomes 10:30 and 23:58 wraps to 00:00.
    """
    rounded = math.floor(total_minutes / ROUNDING_MINUTES + 0.5) * ROUNDING_MINUTES
    return rounded % MINUTES_PER_DAY


def validate_duration(duration_minutes) -> int:
    if isinstance(duration_minutes, bool) or not isinstance(duration_minutes, int):
        raise InvalidDuration(f'Duration must be a whole number of minutes, got {duration_minutes!r}.')
    if duration_minutes <= 0:
        raise InvalidDuration(f'Duration must be positive, got {duration_minutes}.')
    return duration_minutes


def intervals_overlap(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    # [start_a, end_a) and [start_b, end_b); touching ends do not overlap
    return start_a < end_b and start_b < end_a
