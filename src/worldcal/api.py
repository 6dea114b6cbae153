from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .attributes.registry import compute_attributes
from .core.definition import CalendarDefinition, EventDef
from .core.engine import ActiveCalendar, CalendarRegistry
from .core.time import NumT, whole_seconds
from .core.types import CalendarDate, DayInfo, EventOccurrence, MoonPhaseInfo, SunTimes
from .engines.calendar import CalendarEngine
from .engines.factory import as_definition
from .engines.factory import make_engine as _make_engine

_registry: Optional[CalendarRegistry] = None

def set_registry(reg: CalendarRegistry) -> None:
    global _registry
    _registry = reg

def _reg() -> CalendarRegistry:
    if _registry is None:
        raise RuntimeError("Calendar registry not initialized")
    return _registry

def _eng(calendar: Optional[str]) -> CalendarEngine:
    if calendar is None:
        return _reg().active.engine  # type: ignore[return-value]
    return _reg().get(calendar)  # type: ignore[return-value]

# ============================================================
# Registry / selection
# ============================================================

def list_calendars() -> List[str]:
    return _reg().list()

def calendar_info(calendar: Optional[str] = None) -> Dict[str, Any]:
    return _eng(calendar).info()

def get_engine(calendar: Optional[str] = None) -> CalendarEngine:
    return _eng(calendar)

def register_calendar(definition: CalendarDefinition, *, overwrite: bool = False) -> None:
    _reg().register(definition, overwrite=overwrite)

def load_calendar(raw: Mapping[str, Any], *, overwrite: bool = False) -> CalendarDefinition:
    """Parse a plain wire mapping into a base definition and register it."""
    definition = as_definition(raw)
    register_calendar(definition, overwrite=overwrite)
    return definition

def set_active_calendar(calendar: str) -> ActiveCalendar:
    return _reg().set_active(calendar)

def active_calendar() -> ActiveCalendar:
    return _reg().active

def make_engine(
    definition,
    *,
    variant: Optional[str] = None,
    system_id: Optional[str] = None,
    world_events: Sequence[EventDef] = (),
    disabled_event_ids: Sequence[str] = (),
) -> CalendarEngine:
    return _make_engine(
        definition,
        variant=variant,
        system_id=system_id,
        world_events=world_events,
        disabled_event_ids=disabled_event_ids,
    )

# ============================================================
# Conversion
# ============================================================

def world_time_to_date(
    world_time: NumT,
    *,
    calendar: Optional[str] = None,
    creation_timestamp: Optional[NumT] = None,
) -> CalendarDate:
    return _eng(calendar).world_time_to_date(world_time, creation_timestamp=creation_timestamp)

def date_to_world_time(
    date: CalendarDate,
    *,
    calendar: Optional[str] = None,
    creation_timestamp: Optional[NumT] = None,
) -> int:
    return _eng(calendar).date_to_world_time(date, creation_timestamp=creation_timestamp)

def calculate_weekday(year: int, month: int, day: int, *, calendar: Optional[str] = None) -> Optional[int]:
    return _eng(calendar).calculate_weekday(year, month, day)

def is_leap_year(year: int, *, calendar: Optional[str] = None) -> bool:
    return _eng(calendar).is_leap_year(year)

def year_length(year: int, *, calendar: Optional[str] = None) -> int:
    return _eng(calendar).year_length(year)

def month_length(month: int, year: int, *, calendar: Optional[str] = None) -> int:
    return _eng(calendar).month_length(month, year)

def explain(world_time: NumT, *, calendar: Optional[str] = None, creation_timestamp: Optional[NumT] = None) -> Dict[str, Any]:
    return _eng(calendar).explain(world_time, creation_timestamp=creation_timestamp)

# ============================================================
# Moons, events, seasons
# ============================================================

def phase_at(moon, date: CalendarDate, *, calendar: Optional[str] = None) -> MoonPhaseInfo:
    return _eng(calendar).phase_at(moon, date)

def phases_at(date: CalendarDate, *, calendar: Optional[str] = None) -> List[MoonPhaseInfo]:
    return _eng(calendar).phases_at(date)

def occurrences_on_date(
    date: CalendarDate,
    *,
    calendar: Optional[str] = None,
    include_hidden: bool = True,
) -> List[EventOccurrence]:
    return _eng(calendar).occurrences_on_date(date, include_hidden=include_hidden)

def occurrences_in_range(
    event_id: str,
    year_start: int,
    year_end: int,
    *,
    calendar: Optional[str] = None,
) -> List[EventOccurrence]:
    return _eng(calendar).occurrences_in_range(event_id, year_start, year_end)

def next_occurrence(event_id: str, after: CalendarDate, *, calendar: Optional[str] = None) -> Optional[EventOccurrence]:
    return _eng(calendar).next_occurrence(event_id, after)

def season_at(date: CalendarDate, *, calendar: Optional[str] = None):
    return _eng(calendar).season_at(date)

def sun_times(date: CalendarDate, *, calendar: Optional[str] = None) -> SunTimes:
    return _eng(calendar).sun_times(date)

# ============================================================
# Day records
# ============================================================

def day_info(
    world_time: NumT,
    *,
    calendar: Optional[str] = None,
    attributes: Sequence[str] = (),
    creation_timestamp: Optional[NumT] = None,
) -> DayInfo:
    eng = _eng(calendar)
    date = eng.world_time_to_date(world_time, creation_timestamp=creation_timestamp)
    info = DayInfo(calendar_id=eng.id, world_time=whole_seconds(world_time), date=date)
    if attributes:
        attrs = compute_attributes(info, eng, attributes)
        info = replace(info, attributes=attrs)
    return info
