from __future__ import annotations
import math
from datetime import datetime, timezone
from fractions import Fraction
from typing import Tuple, Union

from .errors import DateOutOfRange
from .types import TimeOfDay

NumT = Union[int, float, Fraction]


def seconds_per_hour(tc) -> int:
    return tc.minutes_in_hour * tc.seconds_in_minute

def seconds_per_day(tc) -> int:
    return tc.hours_in_day * seconds_per_hour(tc)

def whole_seconds(world_time: NumT) -> int:
    """Floor a world time to whole seconds (floor, so -0.5 s lands in the previous second)."""
    if isinstance(world_time, float) and not math.isfinite(world_time):
        raise ValueError(f"world time must be finite, got {world_time!r}")
    return math.floor(world_time)


def split_seconds(total: int, tc) -> Tuple[int, TimeOfDay]:
    """
    Split whole seconds into (day index, time of day).
    Floor division keeps the time of day in [0, seconds_per_day) for negative totals.
    """
    days, rem = divmod(total, seconds_per_day(tc))
    hour, rem = divmod(rem, seconds_per_hour(tc))
    minute, second = divmod(rem, tc.seconds_in_minute)
    return days, TimeOfDay(hour, minute, second)


def time_to_seconds(t: TimeOfDay | None, tc) -> int:
    if t is None:
        return 0
    if not (0 <= t.hour < tc.hours_in_day):
        raise DateOutOfRange(f"hour {t.hour} outside 0..{tc.hours_in_day - 1}")
    if not (0 <= t.minute < tc.minutes_in_hour):
        raise DateOutOfRange(f"minute {t.minute} outside 0..{tc.minutes_in_hour - 1}")
    if not (0 <= t.second < tc.seconds_in_minute):
        raise DateOutOfRange(f"second {t.second} outside 0..{tc.seconds_in_minute - 1}")
    return t.hour * seconds_per_hour(tc) + t.minute * tc.seconds_in_minute + t.second


def utc_components(timestamp: NumT) -> Tuple[int, int, int, TimeOfDay]:
    """Unix timestamp (seconds) -> (year, month, day, time) in UTC."""
    dt = datetime.fromtimestamp(whole_seconds(timestamp), tz=timezone.utc)
    return dt.year, dt.month, dt.day, TimeOfDay(dt.hour, dt.minute, dt.second)


def hhmm_to_hours(s: str, tc) -> float:
    """'HH:MM' -> decimal hours, with minutes measured in the calendar's minutes per hour."""
    parts = s.split(":")
    if len(parts) != 2:
        raise ValueError(f"Invalid time format: {s!r}. Expected HH:MM")
    try:
        h, m = int(parts[0]), int(parts[1])
    except ValueError as e:
        raise ValueError(f"Invalid time values: {s!r}") from e
    return h + m / tc.minutes_in_hour


def hours_to_hhmm(hours: float, tc) -> str:
    h = math.floor(hours)
    m = round((hours - h) * tc.minutes_in_hour)
    if m == tc.minutes_in_hour:
        h, m = h + 1, 0
    return f"{h:02d}:{m:02d}"
