from __future__ import annotations
from dataclasses import dataclass, replace
from fractions import Fraction
from typing import Any, Dict, Optional

@dataclass(frozen=True)
class TimeOfDay:
    hour: int = 0
    minute: int = 0
    second: int = 0

@dataclass(frozen=True)
class CalendarDate:
    year: int
    month: int               # 1-based
    day: int                 # 1-based (position inside the block for intercalary days)
    weekday: Optional[int] = None
    time: Optional[TimeOfDay] = None
    intercalary: Optional[str] = None

    def with_time(self, hour: int = 0, minute: int = 0, second: int = 0) -> "CalendarDate":
        return replace(self, time=TimeOfDay(hour, minute, second))

    def date_only(self) -> "CalendarDate":
        return replace(self, time=None)

    def ymd(self) -> tuple:
        return (self.year, self.month, self.day)

    def __str__(self) -> str:
        s = f"{self.year}-{self.month:02d}-{self.day:02d}"
        if self.intercalary:
            s += f" [{self.intercalary}]"
        if self.time is not None:
            t = self.time
            s += f" {t.hour:02d}:{t.minute:02d}:{t.second:02d}"
        return s

@dataclass(frozen=True)
class MoonPhaseInfo:
    moon: Any                 # MoonDef
    phase: Any                # MoonPhaseDef
    phase_index: int
    day_in_phase: int
    day_in_phase_exact: Fraction
    days_until_next: int
    days_until_next_exact: Fraction
    progress: Fraction

@dataclass(frozen=True)
class EventOccurrence:
    event: Any                # EventDef
    rule_year: int
    date: CalendarDate
    start_world_time: int
    end_world_time: int

    @property
    def event_id(self) -> str:
        return self.event.id

@dataclass(frozen=True)
class SunTimes:
    sunrise: float            # decimal hours
    sunset: float

@dataclass(frozen=True)
class DayInfo:
    calendar_id: str
    world_time: int
    date: CalendarDate
    attributes: Optional[Dict[str, Any]] = None
