"""
worldcal.engines.compat
-----------------------
Per-system weekday offsets. Some host systems expect weekdays that differ from
the calendar's own epoch alignment; a calendar can carry a fixed offset per
system id, applied after the weekday has been computed.
"""

from __future__ import annotations

from typing import Optional

from ..core.definition import CalendarDefinition


def weekday_offset(defn: CalendarDefinition, system_id: Optional[str]) -> int:
    if system_id is None:
        return 0
    return int(defn.compatibility.get(system_id, 0))


def apply_weekday_offset(weekday: int, cycle: int, offset: int) -> int:
    if not offset:
        return weekday
    return (weekday + offset) % cycle
