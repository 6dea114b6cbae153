"""
worldcal.engines.factory
------------------------
Transforms calendar definitions (parsed or plain wire mappings) into live,
executable engines.
"""

from __future__ import annotations
from typing import Any, Mapping, Optional, Sequence, Union

from worldcal.core.definition import CalendarDefinition, EventDef
from worldcal.core.tracker import WarningTracker
from worldcal.engines.calendar import CalendarEngine
from worldcal.engines.variants import resolve_variant

DefinitionLike = Union[CalendarDefinition, Mapping[str, Any]]


def as_definition(spec: DefinitionLike) -> CalendarDefinition:
    if isinstance(spec, CalendarDefinition):
        return spec
    if isinstance(spec, Mapping):
        return CalendarDefinition.from_dict(spec)
    raise TypeError(f"Unknown calendar definition type: {type(spec)}")


def build_calendar_engine(
    definition: CalendarDefinition,
    *,
    system_id: Optional[str] = None,
    world_events: Sequence[EventDef] = (),
    disabled_event_ids: Sequence[str] = (),
    tracker: Optional[WarningTracker] = None,
) -> CalendarEngine:
    """Transforms a flattened CalendarDefinition into a live CalendarEngine."""
    return CalendarEngine(
        definition,
        system_id=system_id,
        world_events=world_events,
        disabled_event_ids=disabled_event_ids,
        tracker=tracker,
    )


def make_engine(
    spec: DefinitionLike,
    *,
    variant: Optional[str] = None,
    system_id: Optional[str] = None,
    world_events: Sequence[EventDef] = (),
    disabled_event_ids: Sequence[str] = (),
    tracker: Optional[WarningTracker] = None,
) -> CalendarEngine:
    """The universal entry point: parse, resolve the variant (default one if declared), build."""
    flat = resolve_variant(as_definition(spec), variant)
    return build_calendar_engine(
        flat,
        system_id=system_id,
        world_events=world_events,
        disabled_event_ids=disabled_event_ids,
        tracker=tracker,
    )
