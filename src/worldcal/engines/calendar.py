"""
worldcal.engines.calendar
-------------------------
The Conversion Core. Maps world time (seconds) to structured calendar dates and
back, and owns every day-counting fact the other components rely on.

Internal reference frame:
  day index 0 is the first day of `year.epoch`. Every layout day counts
  (months, leap extra days, intercalary blocks present that year). World time
  is shifted onto this frame according to the calendar's world-time
  interpretation or an explicit world-creation timestamp.
"""

from __future__ import annotations

import logging
import math
from functools import lru_cache
from dataclasses import replace
from fractions import Fraction
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..core.definition import CalendarDefinition, EventDef, IntercalaryDef
from ..core.errors import DateOutOfRange
from ..core.time import NumT, seconds_per_day, seconds_per_hour, split_seconds, time_to_seconds, utc_components, whole_seconds
from ..core.tracker import WarningTracker
from ..core.types import CalendarDate, TimeOfDay
from .compat import apply_weekday_offset, weekday_offset
from .events import EventEngine
from .layout import Segment, YearLayout, anchor_intercalary, build_year_layout
from .leap import is_leap_year
from .moons import MoonCalculator
from .seasons import SeasonResolver

logger = logging.getLogger(__name__)

# year layouts kept per engine; year starts are a prefix table and stay unbounded
LAYOUT_CACHE_SIZE = 1024


class CalendarEngine:
    """
    One flattened calendar definition turned into executable date math.
    Immutable from the outside; per-year layouts and cumulative year starts
    are cached privately.
    """
    def __init__(
        self,
        definition: CalendarDefinition,
        *,
        system_id: Optional[str] = None,
        world_events: Sequence[EventDef] = (),
        disabled_event_ids: Sequence[str] = (),
        tracker: Optional[WarningTracker] = None,
    ):
        self.definition = definition
        self.id = definition.id
        self.system_id = system_id
        self.tracker = tracker if tracker is not None else WarningTracker()

        self._anchored = anchor_intercalary(definition)
        for ic in self._anchored[2]:
            logger.warning(
                "Calendar %s: intercalary block %r is anchored on unknown month %r and is ignored",
                self.id, ic.name, ic.anchor,
            )

        self._weekday_offset = weekday_offset(definition, system_id)
        self._layout = lru_cache(maxsize=LAYOUT_CACHE_SIZE)(self._build_layout)
        # year -> (day index, weekday-counting day index) of its first day
        self._year_starts: Dict[int, Tuple[int, int]] = {definition.year.epoch: (0, 0)}
        self._mean_year = self._mean_year_length()

        self.moons = MoonCalculator(self)
        self.seasons = SeasonResolver(self, tracker=self.tracker)
        self.events = EventEngine(
            self,
            definition.events,
            world_events=world_events,
            disabled_ids=disabled_event_ids,
            tracker=self.tracker,
        )

    # ---------------------------------------------------------
    # Definition shortcuts
    # ---------------------------------------------------------

    @property
    def epoch(self) -> int:
        return self.definition.year.epoch

    @property
    def months_in_year(self) -> int:
        return len(self.definition.months)

    @property
    def weekday_count(self) -> int:
        return len(self.definition.weekdays)

    @property
    def seconds_per_day(self) -> int:
        return seconds_per_day(self.definition.time)

    # ---------------------------------------------------------
    # Year structure
    # ---------------------------------------------------------

    def _build_layout(self, year: int) -> YearLayout:
        return build_year_layout(self.definition, year, self._anchored)

    def layout(self, year: int) -> YearLayout:
        return self._layout(year)

    def is_leap_year(self, year: int) -> bool:
        return is_leap_year(self.definition.leap_year, year)

    def year_length(self, year: int) -> int:
        return self.layout(year).length

    def month_lengths(self, year: int) -> List[int]:
        return list(self.layout(year).month_lengths)

    def month_length(self, month: int, year: int) -> int:
        self._check_month(month)
        return self.layout(year).month_lengths[month - 1]

    def intercalary_before(self, month: int, year: int) -> List[IntercalaryDef]:
        self._check_month(month)
        return [s.intercalary for s in self.layout(year).blocks_for(month, "before")]  # type: ignore[misc]

    def intercalary_after(self, month: int, year: int) -> List[IntercalaryDef]:
        self._check_month(month)
        return [s.intercalary for s in self.layout(year).blocks_for(month, "after")]  # type: ignore[misc]

    def _check_month(self, month: int) -> None:
        if not (1 <= month <= self.months_in_year):
            raise DateOutOfRange(f"month {month} outside 1..{self.months_in_year} in calendar {self.id}")

    def _mean_year_length(self) -> Fraction:
        rule = self.definition.leap_year
        if rule.rule == "gregorian":
            cycle = 400
        elif rule.rule == "custom":
            cycle = int(rule.interval)  # type: ignore[arg-type]
        else:
            cycle = 1
        cycle = min(cycle, 4000)
        total = sum(self.layout(self.epoch + i).length for i in range(cycle))
        if total <= 0:
            raise ValueError(f"Calendar {self.id}: years must contain at least one day")
        return Fraction(total, cycle)

    def _year_start(self, year: int) -> Tuple[int, int]:
        """(day index, weekday day index) of the first day of `year`."""
        hit = self._year_starts.get(year)
        if hit is not None:
            return hit

        if year > self.epoch:
            y = year - 1
            while y not in self._year_starts:
                y -= 1
            d, w = self._year_starts[y]
            for yy in range(y, year):
                lay = self.layout(yy)
                d += lay.length
                w += lay.weekday_length
                self._year_starts[yy + 1] = (d, w)
        else:
            y = year + 1
            while y not in self._year_starts:
                y += 1
            d, w = self._year_starts[y]
            for yy in range(y - 1, year - 1, -1):
                lay = self.layout(yy)
                d -= lay.length
                w -= lay.weekday_length
                self._year_starts[yy] = (d, w)
        return self._year_starts[year]

    def _locate_year(self, n: int) -> int:
        y = self.epoch + math.floor(Fraction(n) / self._mean_year)
        while self._year_start(y)[0] > n:
            y -= 1
        while self._year_start(y + 1)[0] <= n:
            y += 1
        return y

    # ---------------------------------------------------------
    # Validation and weekdays
    # ---------------------------------------------------------

    def _segment_for(self, date: CalendarDate) -> Segment:
        self._check_month(date.month)
        lay = self.layout(date.year)
        if date.intercalary is not None:
            seg = lay.intercalary_segment(date.intercalary)
            if seg is None:
                raise DateOutOfRange(
                    f"intercalary day {date.intercalary!r} does not exist in year {date.year} of calendar {self.id}"
                )
            if seg.month != date.month:
                raise DateOutOfRange(
                    f"intercalary day {date.intercalary!r} is anchored on month {seg.month}, not {date.month}"
                )
        else:
            seg = lay.month_segment(date.month)
        if not (1 <= date.day <= seg.length):
            what = date.intercalary or f"month {date.month}"
            raise DateOutOfRange(f"day {date.day} outside 1..{seg.length} of {what} in year {date.year}")
        return seg

    def _weekday_from_count(self, count: int) -> Optional[int]:
        n = self.weekday_count
        if n == 0:
            return None
        w = (self.definition.year.start_day + count) % n
        return apply_weekday_offset(w, n, self._weekday_offset)

    def _weekday_for(self, date: CalendarDate, seg: Segment) -> Optional[int]:
        if not seg.counts_for_weekdays:
            return None
        count = self._year_start(date.year)[1] + seg.weekday_start + date.day - 1
        return self._weekday_from_count(count)

    def calculate_weekday(self, year: int, month: int, day: int) -> Optional[int]:
        """Weekday index of a regular date; None when the calendar has no weekdays."""
        d = CalendarDate(year, month, day)
        return self._weekday_for(d, self._segment_for(d))

    def weekday_of(self, date: CalendarDate) -> Optional[int]:
        """Weekday of any date, intercalary included (None for non-counting intercalary days)."""
        return self._weekday_for(date, self._segment_for(date))

    def make_date(
        self,
        year: int,
        month: int,
        day: int,
        *,
        time: Optional[TimeOfDay] = None,
        intercalary: Optional[str] = None,
    ) -> CalendarDate:
        d = CalendarDate(year, month, day, time=time, intercalary=intercalary)
        return self.normalize(d)

    def normalize(self, date: CalendarDate) -> CalendarDate:
        """Validate a date and recompute its weekday (caller-supplied weekdays are never trusted)."""
        seg = self._segment_for(date)
        if date.time is not None:
            time_to_seconds(date.time, self.definition.time)
        return replace(date, weekday=self._weekday_for(date, seg))

    # ---------------------------------------------------------
    # Day counting
    # ---------------------------------------------------------

    def day_index(self, date: CalendarDate) -> int:
        seg = self._segment_for(date)
        return self._year_start(date.year)[0] + seg.start + date.day - 1

    def day_of_year(self, date: CalendarDate) -> int:
        """1-based position of the date in its year, intercalary days included."""
        seg = self._segment_for(date)
        return seg.start + date.day

    def date_from_day_index(self, n: int, time: Optional[TimeOfDay] = None) -> CalendarDate:
        year = self._locate_year(n)
        start = self._year_start(year)[0]
        lay = self.layout(year)
        seg = lay.segment_at(n - start)
        day = n - start - seg.start + 1
        d = CalendarDate(
            year=year,
            month=seg.month,
            day=day,
            time=time,
            intercalary=seg.intercalary.name if seg.intercalary is not None else None,
        )
        return replace(d, weekday=self._weekday_for(d, seg))

    def days_between(self, a: CalendarDate, b: CalendarDate) -> int:
        return self.day_index(b) - self.day_index(a)

    # ---------------------------------------------------------
    # World time
    # ---------------------------------------------------------

    def reference_shift(self, creation_timestamp: Optional[NumT] = None) -> int:
        """
        Seconds to add to a world time to land in the internal frame.

        creation timestamp (Unix seconds): its UTC calendar position in year
            utc_year + epoch is world time 0; takes precedence.
            Month, day and time are not validated against this calendar;
            anything past the end of a month or day rolls forward.
        real-time-based: world time 0 is the first day of world_time.current_year
            (shift = days from world_time.epoch_year to current_year).
        epoch-based / no config: no shift.
        """
        spd = self.seconds_per_day
        if creation_timestamp is not None:
            y, m, d, t = utc_components(creation_timestamp)
            tc = self.definition.time
            tod = t.hour * seconds_per_hour(tc) + t.minute * tc.seconds_in_minute + t.second
            return self._rolled_day_index(y + self.epoch, m, d) * spd + tod

        wt = self.definition.world_time
        if wt is None or wt.interpretation == "epoch-based":
            return 0
        days = self._year_start(wt.current_year)[0] - self._year_start(wt.epoch_year)[0]
        return days * spd

    def _rolled_day_index(self, year: int, month: int, day: int) -> int:
        """
        Day index of (year, month, day) without validation: preceding segments are
        summed and day - 1 is added, so a day past the month rolls forward.
        """
        lay = self.layout(year)
        month = max(month, 1)
        offset = lay.month_segment(month).start if month <= self.months_in_year else lay.length
        return self._year_start(year)[0] + offset + day - 1

    def world_time_to_date(self, world_time: NumT, *, creation_timestamp: Optional[NumT] = None) -> CalendarDate:
        total = whole_seconds(world_time) + self.reference_shift(creation_timestamp)
        days, tod = split_seconds(total, self.definition.time)
        return self.date_from_day_index(days, tod)

    def date_to_world_time(self, date: CalendarDate, *, creation_timestamp: Optional[NumT] = None) -> int:
        internal = self.day_index(date) * self.seconds_per_day + time_to_seconds(date.time, self.definition.time)
        return internal - self.reference_shift(creation_timestamp)

    # ---------------------------------------------------------
    # Arithmetic
    # ---------------------------------------------------------

    def add_days(self, date: CalendarDate, days: int) -> CalendarDate:
        return self.date_from_day_index(self.day_index(date) + days, date.time)

    def add_seconds(self, date: CalendarDate, seconds: int) -> CalendarDate:
        internal = self.day_index(date) * self.seconds_per_day + time_to_seconds(date.time, self.definition.time)
        days, tod = split_seconds(internal + seconds, self.definition.time)
        return self.date_from_day_index(days, tod)

    def add_months(self, date: CalendarDate, months: int) -> CalendarDate:
        """Month arithmetic on the month number; the day is clamped to the target month (intercalary dates use their anchor month)."""
        total = (date.month - 1) + months
        year = date.year + total // self.months_in_year
        month = total % self.months_in_year + 1
        day = min(date.day, self.month_length(month, year))
        return self.make_date(year, month, day, time=date.time)

    def add_years(self, date: CalendarDate, years: int) -> CalendarDate:
        year = date.year + years
        day = min(date.day, self.month_length(date.month, year))
        return self.make_date(year, date.month, day, time=date.time)

    # ---------------------------------------------------------
    # Queries delegated to the moon / event / season components
    # ---------------------------------------------------------

    def phase_at(self, moon, date: CalendarDate):
        return self.moons.phase_at(moon, date)

    def phases_at(self, date: CalendarDate):
        return self.moons.phases_at(date)

    def occurrences_on_date(self, date: CalendarDate, *, include_hidden: bool = True):
        return self.events.occurrences_on_date(date, include_hidden=include_hidden)

    def occurrences_in_range(self, event_id: str, year_start: int, year_end: int):
        return self.events.occurrences_in_range(event_id, year_start, year_end)

    def next_occurrence(self, event_id: str, after: CalendarDate):
        return self.events.next_occurrence(event_id, after)

    def season_at(self, date: CalendarDate):
        return self.seasons.season_at(date)

    def sun_times(self, date: CalendarDate):
        return self.seasons.sun_times(date)

    # ---------------------------------------------------------
    # High-Level API Methods (Required by CLI / api.py)
    # ---------------------------------------------------------

    def info(self) -> Dict[str, Any]:
        d = self.definition
        return {
            "id": d.id,
            "label": d.label,
            "variant": d.active_variant,
            "months": len(d.months),
            "weekdays": len(d.weekdays),
            "epoch": d.year.epoch,
            "current_year": d.year.current_year,
            "leap_rule": d.leap_year.rule,
            "interpretation": d.world_time.interpretation if d.world_time else "epoch-based",
            "moons": [m.name for m in d.moons],
            "seasons": [s.name for s in d.seasons],
            "events": [e.id for e in self.events.all_events()],
            "system_id": self.system_id,
        }

    def explain(self, world_time: NumT, *, creation_timestamp: Optional[NumT] = None) -> Dict[str, Any]:
        shift = self.reference_shift(creation_timestamp)
        total = whole_seconds(world_time) + shift
        days, tod = split_seconds(total, self.definition.time)
        date = self.date_from_day_index(days, tod)
        start, wstart = self._year_start(date.year)
        return {
            "world_time": world_time,
            "reference_shift": shift,
            "internal_seconds": total,
            "day_index": days,
            "year_start_day_index": start,
            "year_start_weekday_days": wstart,
            "year_length": self.year_length(date.year),
            "leap": self.is_leap_year(date.year),
            "date": date,
        }
