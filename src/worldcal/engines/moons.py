"""
worldcal.engines.moons
----------------------
Moon phases from day counting alone. A moon is a fixed cycle (in days, exact
Fraction) anchored on the date of one new moon; its phases partition that
cycle in order.
"""

from __future__ import annotations

import logging
import math
from fractions import Fraction
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple, Union

from ..core.definition import MoonDef
from ..core.types import CalendarDate, MoonPhaseInfo

if TYPE_CHECKING:
    from .calendar import CalendarEngine

logger = logging.getLogger(__name__)

MoonRef = Union[str, int, MoonDef]


def effective_phase_lengths(moon: MoonDef) -> List[Fraction]:
    """
    single_day phases last exactly one day, the others keep their nominal
    length, and the last phase absorbs the residue so the lengths sum to the cycle.
    """
    lengths = [Fraction(1) if p.single_day else Fraction(p.length) for p in moon.phases]
    lengths[-1] = moon.cycle_length - sum(lengths[:-1], Fraction(0))
    return lengths


class MoonCalculator:
    def __init__(self, engine: "CalendarEngine"):
        self.engine = engine
        self._bounds: Dict[str, Tuple[Fraction, ...]] = {}
        self._anchors: Dict[str, int] = {}

    def _phase_bounds(self, moon: MoonDef) -> Tuple[Fraction, ...]:
        """Cumulative phase ends: bounds[i] is the cycle offset where phase i ends."""
        b = self._bounds.get(moon.name)
        if b is None:
            lengths = effective_phase_lengths(moon)
            if lengths[-1] <= 0:
                self.engine.tracker.warn_once(
                    logger, self.engine.id, f"moon:{moon.name}:residue",
                    "Calendar %s: phases of moon %r exceed its %s-day cycle; last phase %r never shows",
                    self.engine.id, moon.name, moon.cycle_length, moon.phases[-1].name,
                )
            acc = Fraction(0)
            out = []
            for ln in lengths:
                acc += ln
                out.append(acc)
            b = tuple(out)
            self._bounds[moon.name] = b
        return b

    def _anchor(self, moon: MoonDef) -> int:
        n = self._anchors.get(moon.name)
        if n is None:
            y, m, d = moon.first_new_moon
            n = self.engine.day_index(CalendarDate(y, m, d))
            self._anchors[moon.name] = n
        return n

    def cycle_offset(self, moon: MoonRef, date: CalendarDate) -> Fraction:
        """Days since the most recent new moon, in [0, cycle_length)."""
        md = self.engine.definition.moon(moon)
        elapsed = Fraction(self.engine.day_index(date) - self._anchor(md))
        return elapsed % md.cycle_length

    def phase_at(self, moon: MoonRef, date: CalendarDate) -> MoonPhaseInfo:
        md = self.engine.definition.moon(moon)
        offset = self.cycle_offset(md, date)
        bounds = self._phase_bounds(md)

        idx = len(bounds) - 1
        for i, end in enumerate(bounds):
            if offset < end:
                idx = i
                break
        start = bounds[idx - 1] if idx > 0 else Fraction(0)
        end = bounds[idx]
        length = end - start

        into = offset - start
        left = end - offset
        return MoonPhaseInfo(
            moon=md,
            phase=md.phases[idx],
            phase_index=idx,
            day_in_phase=math.floor(into),
            day_in_phase_exact=into,
            days_until_next=math.ceil(left),
            days_until_next_exact=left,
            progress=into / length if length > 0 else Fraction(0),
        )

    def phases_at(self, date: CalendarDate) -> List[MoonPhaseInfo]:
        return [self.phase_at(m, date) for m in self.engine.definition.moons]

    def next_phase(self, moon: MoonRef, phase_name: str, after: CalendarDate) -> Optional[CalendarDate]:
        """
        First date strictly after `after` on which the named phase begins.
        None when the phase is shorter than a day and never lands on a day boundary.
        """
        md = self.engine.definition.moon(moon)
        names = [p.name for p in md.phases]
        if phase_name not in names:
            raise KeyError(f"Unknown phase {phase_name!r} for moon {md.name!r}. Available: {names}")
        idx = names.index(phase_name)

        n0 = self.engine.day_index(after)
        prev = self.phase_at(md, after).phase_index
        for n in range(n0 + 1, n0 + math.ceil(md.cycle_length) + 2):
            d = self.engine.date_from_day_index(n)
            cur = self.phase_at(md, d).phase_index
            if cur == idx and prev != idx:
                return d
            prev = cur
        return None
