"""worldcal public API.

Keep this surface small: users should mostly interact with functions re-exported here.
"""

# Initialize registry on import
from . import api_init as _api_init  # noqa: F401

from .api import (
    world_time_to_date,
    date_to_world_time,
    calculate_weekday,
    is_leap_year,
    year_length,
    month_length,
    explain,
    phase_at,
    phases_at,
    occurrences_on_date,
    occurrences_in_range,
    next_occurrence,
    season_at,
    sun_times,
    day_info,
    list_calendars,
    calendar_info,
    register_calendar,
    load_calendar,
    set_active_calendar,
    active_calendar,
    get_engine,
    make_engine,
)
from .core.definition import CalendarDefinition
from .core.errors import CalendarError, DateOutOfRange, InvalidLeapRule, UnknownCalendar, UnknownVariant
from .core.types import CalendarDate, TimeOfDay

__all__ = [
    "world_time_to_date",
    "date_to_world_time",
    "calculate_weekday",
    "is_leap_year",
    "year_length",
    "month_length",
    "explain",
    "phase_at",
    "phases_at",
    "occurrences_on_date",
    "occurrences_in_range",
    "next_occurrence",
    "season_at",
    "sun_times",
    "day_info",
    "list_calendars",
    "calendar_info",
    "register_calendar",
    "load_calendar",
    "set_active_calendar",
    "active_calendar",
    "get_engine",
    "make_engine",
    "CalendarDate",
    "TimeOfDay",
    "CalendarDefinition",
    "CalendarError",
    "DateOutOfRange",
    "InvalidLeapRule",
    "UnknownCalendar",
    "UnknownVariant",
]
