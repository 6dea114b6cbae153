"""
worldcal.engines.layout
-----------------------
The day layout of one calendar year: an ordered list of segments
(intercalary blocks before a month, the month itself, blocks after it).

Every segment contributes to the year's day count; only segments with
counts_for_weekdays advance the weekday cycle.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ..core.definition import CalendarDefinition, IntercalaryDef
from .leap import is_leap_year, month_lengths


@dataclass(frozen=True)
class Segment:
    month: int                                  # 1-based month the segment belongs to / is anchored on
    length: int
    start: int                                  # day offset from the start of the year
    weekday_start: int                          # weekday-counting days before this segment
    intercalary: Optional[IntercalaryDef] = None

    @property
    def counts_for_weekdays(self) -> bool:
        return self.intercalary is None or self.intercalary.counts_for_weekdays

    @property
    def end(self) -> int:
        return self.start + self.length


@dataclass(frozen=True)
class YearLayout:
    year: int
    leap: bool
    segments: Tuple[Segment, ...]
    month_lengths: Tuple[int, ...]
    length: int
    weekday_length: int

    def month_segment(self, month: int) -> Segment:
        for s in self.segments:
            if s.intercalary is None and s.month == month:
                return s
        raise KeyError(month)

    def intercalary_segment(self, name: str) -> Optional[Segment]:
        for s in self.segments:
            if s.intercalary is not None and s.intercalary.name == name:
                return s
        return None

    def blocks_for(self, month: int, where: str) -> List[Segment]:
        """Intercalary segments anchored 'before' or 'after' a month, in layout order."""
        out = []
        for s in self.segments:
            ic = s.intercalary
            if ic is None or s.month != month:
                continue
            if (where == "before" and ic.before is not None) or (where == "after" and ic.after is not None):
                out.append(s)
        return out

    def segment_at(self, offset: int) -> Segment:
        """Segment containing day offset (0 <= offset < length)."""
        for s in self.segments:
            if offset < s.end:
                return s
        raise IndexError(offset)


def anchor_intercalary(defn: CalendarDefinition) -> Tuple[Dict[int, List[IntercalaryDef]], Dict[int, List[IntercalaryDef]], List[IntercalaryDef]]:
    """
    Group intercalary blocks by anchor month (1-based), keeping definition order.
    Returns (before, after, orphans); orphans name a month the calendar does not have.
    """
    before: Dict[int, List[IntercalaryDef]] = {}
    after: Dict[int, List[IntercalaryDef]] = {}
    orphans: List[IntercalaryDef] = []
    for ic in defn.intercalary:
        idx = defn.month_index(ic.anchor)
        if idx is None:
            orphans.append(ic)
            continue
        target = after if ic.after is not None else before
        target.setdefault(idx + 1, []).append(ic)
    return before, after, orphans


def build_year_layout(defn: CalendarDefinition, year: int, anchored=None) -> YearLayout:
    if anchored is None:
        anchored = anchor_intercalary(defn)
    before, after, _ = anchored
    leap = is_leap_year(defn.leap_year, year)
    lengths = month_lengths(defn.leap_year, defn.months, year, leap=leap)

    segments: List[Segment] = []
    pos = 0
    wpos = 0

    def push(month: int, length: int, ic: Optional[IntercalaryDef]) -> None:
        nonlocal pos, wpos
        seg = Segment(month=month, length=length, start=pos, weekday_start=wpos, intercalary=ic)
        segments.append(seg)
        pos += length
        if seg.counts_for_weekdays:
            wpos += length

    for m in range(1, len(defn.months) + 1):
        for ic in before.get(m, ()):
            if leap or not ic.leap_year_only:
                push(m, ic.days, ic)
        push(m, lengths[m - 1], None)
        for ic in after.get(m, ()):
            if leap or not ic.leap_year_only:
                push(m, ic.days, ic)

    return YearLayout(
        year=year,
        leap=leap,
        segments=tuple(segments),
        month_lengths=tuple(lengths),
        length=pos,
        weekday_length=wpos,
    )
