"""
worldcal.engines.seasons
------------------------
Season lookup and sunrise/sunset interpolation.

A season spans from (start_month, start_day) to (end_month, end_day) measured
as day-of-year positions, so intercalary days between the two count as
inside. A span whose end lies before its start wraps across the year end.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict, Optional, Tuple

from ..core.definition import SeasonDef
from ..core.errors import DateOutOfRange
from ..core.time import hhmm_to_hours
from ..core.tracker import WarningTracker
from ..core.types import CalendarDate, SunTimes

if TYPE_CHECKING:
    from .calendar import CalendarEngine

logger = logging.getLogger(__name__)

GREGORIAN_SUN_TIMES: Dict[str, Tuple[str, str]] = {
    "Winter": ("07:00", "16:45"),
    "Spring": ("06:30", "17:45"),
    "Summer": ("05:45", "20:15"),
    "Autumn": ("06:30", "19:30"),
    "Fall": ("06:30", "19:30"),
}


class SeasonResolver:
    def __init__(self, engine: "CalendarEngine", *, tracker: Optional[WarningTracker] = None):
        self.engine = engine
        self.tracker = tracker if tracker is not None else WarningTracker()

    @property
    def seasons(self) -> Tuple[SeasonDef, ...]:
        return self.engine.definition.seasons

    # ---------------------------------------------------------
    # Spans
    # ---------------------------------------------------------

    def _position(self, month: int, day: int, year: int) -> int:
        """1-based day of year of (month, day) without validating the day."""
        return self.engine.layout(year).month_segment(month).start + day

    def span(self, season: SeasonDef, year: int) -> Tuple[int, int]:
        """(start, end) day-of-year positions of a season in `year`; end < start means it wraps."""
        eng = self.engine
        end_month = season.end_month if season.end_month is not None else season.start_month
        mlen = eng.month_length(end_month, year)
        end_day = season.end_day if season.end_day is not None else mlen
        if end_day > mlen:
            self.tracker.warn_once(
                logger, eng.id, f"season:{season.name}:overflow",
                "Calendar %s: season %r ends on day %s of month %s which has %s days; span overflows",
                eng.id, season.name, end_day, end_month, mlen,
            )
        start = self._position(season.start_month, season.start_day, year)
        end = self._position(end_month, 1, year) + end_day - 1
        year_len = eng.year_length(year)
        if end > year_len:
            # overflow past the last day of the year continues into the next year
            end -= year_len
        return start, end

    def contains(self, season: SeasonDef, date: CalendarDate) -> bool:
        start, end = self.span(season, date.year)
        pos = self.engine.day_of_year(date)
        if start <= end:
            return start <= pos <= end
        return pos >= start or pos <= end

    def season_index(self, date: CalendarDate) -> Optional[int]:
        if not self.seasons:
            self.tracker.warn_once(
                logger, self.engine.id, "seasons:missing",
                "Calendar %s defines no seasons", self.engine.id,
            )
            return None
        self.engine.day_of_year(date)  # invalid dates raise here, not inside the loop
        for i, s in enumerate(self.seasons):
            try:
                hit = self.contains(s, date)
            except (KeyError, DateOutOfRange):
                self.tracker.warn_once(
                    logger, self.engine.id, f"season:{s.name}:month",
                    "Calendar %s: season %r names a month the calendar does not have; ignored",
                    self.engine.id, s.name,
                )
                continue
            if hit:
                return i
        return None

    def season_at(self, date: CalendarDate) -> Optional[SeasonDef]:
        i = self.season_index(date)
        return self.seasons[i] if i is not None else None

    # ---------------------------------------------------------
    # Sunrise / sunset
    # ---------------------------------------------------------

    def default_sun_times(self) -> SunTimes:
        h = self.engine.definition.time.hours_in_day
        return SunTimes(sunrise=h / 4, sunset=h * 3 / 4)

    def season_sun_times(self, season: SeasonDef) -> SunTimes:
        tc = self.engine.definition.time
        if season.sunrise and season.sunset:
            return SunTimes(hhmm_to_hours(season.sunrise, tc), hhmm_to_hours(season.sunset, tc))
        named = GREGORIAN_SUN_TIMES.get(season.name)
        if named is not None:
            return SunTimes(hhmm_to_hours(named[0], tc), hhmm_to_hours(named[1], tc))
        return self.default_sun_times()

    def progress(self, date: CalendarDate, current: SeasonDef, nxt: SeasonDef) -> float:
        """Fraction of the way from the current season's start to the next season's start."""
        year_len = self.engine.year_length(date.year)
        start = self._position(current.start_month, current.start_day, date.year)
        end = self._position(nxt.start_month, nxt.start_day, date.year)
        pos = self.engine.day_of_year(date)

        total = end - start if end > start else year_len - start + end
        into = pos - start if pos >= start else year_len - start + pos
        return into / total if total > 0 else 0.0

    def sun_times(self, date: CalendarDate) -> SunTimes:
        """Sunrise/sunset in decimal hours, interpolated toward the next season's times."""
        if not self.seasons:
            return self.default_sun_times()
        i = self.season_index(date)
        if i is None:
            return self.default_sun_times()
        cur = self.seasons[i]
        nxt = self.seasons[(i + 1) % len(self.seasons)]
        a = self.season_sun_times(cur)
        b = self.season_sun_times(nxt)
        p = self.progress(date, cur, nxt)
        return SunTimes(
            sunrise=a.sunrise + (b.sunrise - a.sunrise) * p,
            sunset=a.sunset + (b.sunset - a.sunset) * p,
        )
