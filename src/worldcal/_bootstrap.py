from __future__ import annotations
from typing import Optional

from worldcal.core.definition import CalendarDefinition
from worldcal.core.engine import CalendarRegistry
from worldcal.core.tracker import WarningTracker
from worldcal.engines.factory import make_engine
from worldcal.engines.specs import ALL_SPECS

DEFAULT_CALENDAR = "gregorian"

def build_registry(*, system_id: Optional[str] = None, tracker: Optional[WarningTracker] = None) -> CalendarRegistry:
    tracker = tracker if tracker is not None else WarningTracker()

    def build(base: CalendarDefinition, variant: Optional[str]):
        return make_engine(base, variant=variant, system_id=system_id, tracker=tracker)

    bases = {name: CalendarDefinition.from_dict(raw) for name, raw in ALL_SPECS.items()}
    reg = CalendarRegistry(bases, build)
    reg.set_active(DEFAULT_CALENDAR)
    return reg
