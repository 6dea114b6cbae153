"""
worldcal.engines.events
-----------------------
Recurring events. A rule (fixed, ordinal, interval) yields at most one date per
rule year; year windows and per-year exceptions (skip, move) are applied after
the rule. Start time and duration turn that date into a world-time span.

Malformed rules never raise here: they are logged and treated as not occurring.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Sequence

from ..core.definition import EventDef, FixedRecurrence, IntervalRecurrence, OrdinalRecurrence
from ..core.errors import DateOutOfRange
from ..core.time import seconds_per_day, seconds_per_hour
from ..core.tracker import WarningTracker
from ..core.types import CalendarDate, EventOccurrence, TimeOfDay

if TYPE_CHECKING:
    from .calendar import CalendarEngine

logger = logging.getLogger(__name__)

SEARCH_YEARS = 100

_START_RE = re.compile(r"^(\d+)(?::(\d+)(?::(\d+))?)?$")
_DURATION_RE = re.compile(r"^(\d+)([smhdw])$")


# ============================================================
# Start time / duration
# ============================================================

def parse_start_time(s: Optional[str], tc) -> TimeOfDay:
    """'H[:M[:S]]' -> TimeOfDay. Missing means midnight; invalid means midnight with a warning."""
    if not s:
        return TimeOfDay()
    m = _START_RE.match(s.strip())
    if not m:
        logger.warning("Invalid event start time format %r, using 00:00:00", s)
        return TimeOfDay()
    h = int(m.group(1))
    mi = int(m.group(2) or 0)
    sec = int(m.group(3) or 0)
    if not (0 <= h < tc.hours_in_day and 0 <= mi < tc.minutes_in_hour and 0 <= sec < tc.seconds_in_minute):
        logger.warning("Event start time %r outside the calendar's day, using 00:00:00", s)
        return TimeOfDay()
    return TimeOfDay(h, mi, sec)


def parse_duration(s: Optional[str], tc, days_per_week: int = 7) -> int:
    """'<n><s|m|h|d|w>' -> seconds. Missing means one day; invalid means one day with a warning."""
    day = seconds_per_day(tc)
    if not s:
        return day
    m = _DURATION_RE.match(s.strip())
    if not m:
        logger.warning("Invalid event duration format %r, using 1d", s)
        return day
    n, unit = int(m.group(1)), m.group(2)
    unit_seconds = {
        "s": 1,
        "m": tc.seconds_in_minute,
        "h": seconds_per_hour(tc),
        "d": day,
        "w": day * days_per_week,
    }
    return n * unit_seconds[unit]


# ============================================================
# Engine
# ============================================================

def merge_events(
    calendar_events: Iterable[EventDef],
    world_events: Iterable[EventDef] = (),
    disabled_ids: Iterable[str] = (),
) -> List[EventDef]:
    """Calendar events minus disabled ids; world events replace same-id events or are appended."""
    disabled = set(disabled_ids)
    out: Dict[str, EventDef] = {e.id: e for e in calendar_events if e.id not in disabled}
    for e in world_events:
        out[e.id] = e
    return list(out.values())


class EventEngine:
    def __init__(
        self,
        engine: "CalendarEngine",
        events: Sequence[EventDef],
        *,
        world_events: Sequence[EventDef] = (),
        disabled_ids: Sequence[str] = (),
        tracker: Optional[WarningTracker] = None,
    ):
        self.engine = engine
        self.tracker = tracker if tracker is not None else WarningTracker()
        self._events = merge_events(events, world_events, disabled_ids)
        self._by_id = {e.id: e for e in self._events}

    def all_events(self) -> List[EventDef]:
        return list(self._events)

    def get(self, event_id: str) -> EventDef:
        if event_id not in self._by_id:
            raise KeyError(f"Unknown event '{event_id}'. Available: {sorted(self._by_id)}")
        return self._by_id[event_id]

    def _warn(self, key: str, msg: str, *args) -> None:
        self.tracker.warn_once(logger, self.engine.id, key, msg, *args)

    # ---------------------------------------------------------
    # Rules
    # ---------------------------------------------------------

    def _fixed(self, ev: EventDef, month: int, day: int, policy: Optional[str], year: int) -> Optional[CalendarDate]:
        eng = self.engine
        if not (1 <= month <= eng.months_in_year):
            self._warn(f"event:{ev.id}:month", "Event %s: month %s does not exist in calendar %s",
                       ev.id, month, eng.id)
            return None
        mlen = eng.month_length(month, year)
        if 1 <= day <= mlen:
            return eng.make_date(year, month, day)
        if day < 1 or policy is None:
            return None
        if policy in ("lastDay", "beforeDay"):
            return eng.make_date(year, month, mlen)
        if policy == "afterDay":
            if month == eng.months_in_year:
                return eng.make_date(year + 1, 1, 1)
            return eng.make_date(year, month + 1, 1)
        self._warn(f"event:{ev.id}:policy", "Event %s: unknown ifDayNotExists %r", ev.id, policy)
        return None

    def _ordinal(self, ev: EventDef, rule: OrdinalRecurrence, year: int) -> Optional[CalendarDate]:
        eng = self.engine
        if eng.weekday_count == 0:
            return None
        if not (1 <= rule.month <= eng.months_in_year):
            self._warn(f"event:{ev.id}:month", "Event %s: month %s does not exist in calendar %s",
                       ev.id, rule.month, eng.id)
            return None
        if rule.occurrence == 0 or rule.occurrence < -1:
            self._warn(f"event:{ev.id}:occurrence", "Event %s: occurrence %s is not 1..N or -1",
                       ev.id, rule.occurrence)
            return None

        matches: List[CalendarDate] = []
        for seg in eng.layout(year).segments:
            if seg.month != rule.month:
                continue
            if seg.intercalary is not None and not (rule.include_intercalary and seg.counts_for_weekdays):
                continue
            name = seg.intercalary.name if seg.intercalary is not None else None
            for d in range(1, seg.length + 1):
                date = CalendarDate(year, rule.month, d, intercalary=name)
                wd = eng.weekday_of(date)
                if wd == rule.weekday:
                    matches.append(eng.normalize(date))

        if not matches:
            return None
        if rule.occurrence == -1:
            return matches[-1]
        if rule.occurrence > len(matches):
            return None
        return matches[rule.occurrence - 1]

    def occurrence_in_year(self, ev: EventDef, year: int) -> Optional[CalendarDate]:
        """The event's date for rule year `year`, after windows and exceptions; None when it does not occur."""
        if ev.start_year is not None and year < ev.start_year:
            return None
        if ev.end_year is not None and year > ev.end_year:
            return None

        rule = ev.recurrence
        if isinstance(rule, FixedRecurrence):
            date = self._fixed(ev, rule.month, rule.day, rule.if_day_not_exists, year)
        elif isinstance(rule, OrdinalRecurrence):
            date = self._ordinal(ev, rule, year)
        elif isinstance(rule, IntervalRecurrence):
            if rule.interval_years < 1:
                self._warn(f"event:{ev.id}:interval", "Event %s: intervalYears must be >= 1", ev.id)
                return None
            if (year - rule.anchor_year) % rule.interval_years != 0:
                return None
            date = self._fixed(ev, rule.month, rule.day, rule.if_day_not_exists, year)
        else:
            self._warn(f"event:{ev.id}:rule", "Event %s: unsupported recurrence %r", ev.id, rule)
            return None

        if date is None:
            return None

        ex = ev.exception_for(year)
        if ex is None:
            return date
        if ex.type == "skip":
            return None
        if ex.type == "move":
            if ex.move_to_month is None or ex.move_to_day is None:
                logger.warning("Event %s: move exception for %s has no target; skipping", ev.id, year)
                return None
            try:
                return self.engine.make_date(year, int(ex.move_to_month), int(ex.move_to_day))
            except DateOutOfRange as e:
                logger.warning("Event %s: move exception for %s is invalid (%s); skipping", ev.id, year, e)
                return None
        logger.warning("Event %s: unknown exception type %r for %s", ev.id, ex.type, year)
        return date

    # ---------------------------------------------------------
    # Occurrences
    # ---------------------------------------------------------

    def occurrence(self, ev: EventDef, year: int) -> Optional[EventOccurrence]:
        date = self.occurrence_in_year(ev, year)
        if date is None:
            return None
        eng = self.engine
        tc = eng.definition.time
        start_t = parse_start_time(ev.start_time, tc)
        dur = parse_duration(ev.duration, tc, eng.weekday_count or 7)
        start = eng.date_to_world_time(date.with_time(start_t.hour, start_t.minute, start_t.second))
        end = start + dur - 1 if dur > 0 else start
        return EventOccurrence(event=ev, rule_year=year, date=date, start_world_time=start, end_world_time=end)

    def occurrences_on_date(self, date: CalendarDate, *, include_hidden: bool = True) -> List[EventOccurrence]:
        eng = self.engine
        day_start = eng.date_to_world_time(date.date_only())
        day_end = day_start + eng.seconds_per_day - 1

        out: List[EventOccurrence] = []
        for ev in self._events:
            if not include_hidden and ev.visibility == "gm-only":
                continue
            for year in (date.year - 1, date.year):
                occ = self.occurrence(ev, year)
                if occ is None:
                    continue
                if occ.start_world_time <= day_end and occ.end_world_time >= day_start:
                    out.append(occ)
                    break
        return out

    def occurrences_in_range(self, event_id: str, year_start: int, year_end: int) -> List[EventOccurrence]:
        """Occurrences for rule years year_start..year_end inclusive."""
        ev = self.get(event_id)
        out = []
        for year in range(year_start, year_end + 1):
            occ = self.occurrence(ev, year)
            if occ is not None:
                out.append(occ)
        return out

    def next_occurrence(self, event_id: str, after: CalendarDate) -> Optional[EventOccurrence]:
        ev = self.get(event_id)
        n0 = self.engine.day_index(after.date_only())
        for year in range(after.year - 1, after.year + SEARCH_YEARS + 1):
            occ = self.occurrence(ev, year)
            if occ is not None and self.engine.day_index(occ.date) > n0:
                return occ
        return None

    def events_in_year(self, year: int, *, include_hidden: bool = True) -> List[EventOccurrence]:
        """Every occurrence with rule year `year`, in date order."""
        out = []
        for ev in self._events:
            if not include_hidden and ev.visibility == "gm-only":
                continue
            occ = self.occurrence(ev, year)
            if occ is not None:
                out.append(occ)
        out.sort(key=lambda o: (o.start_world_time, o.event.id))
        return out
