from __future__ import annotations
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Protocol

from .definition import CalendarDefinition
from .errors import UnknownCalendar
from .types import CalendarDate, TimeOfDay
from ..engines.variants import default_variant, split_calendar_id, variant_id

class CalendarEngineProtocol(Protocol):
    id: str
    definition: CalendarDefinition
    def info(self) -> Dict[str, Any]: ...
    def world_time_to_date(self, world_time, *, creation_timestamp=None) -> CalendarDate: ...
    def date_to_world_time(self, date: CalendarDate, *, creation_timestamp=None) -> int: ...
    def calculate_weekday(self, year: int, month: int, day: int) -> Optional[int]: ...
    def make_date(self, year: int, month: int, day: int, *, time: Optional[TimeOfDay] = None,
                  intercalary: Optional[str] = None) -> CalendarDate: ...
    def explain(self, world_time, *, creation_timestamp=None) -> Dict[str, Any]: ...

# (base definition, variant key or None) -> engine
EngineBuilder = Callable[[CalendarDefinition, Optional[str]], CalendarEngineProtocol]

@dataclass(frozen=True)
class ActiveCalendar:
    """The active selection; replaced as a whole, so id/definition/engine always agree."""
    id: str
    definition: CalendarDefinition
    engine: CalendarEngineProtocol

@dataclass
class CalendarRegistry:
    """
    Base calendar definitions, a cache of resolved engines keyed by resolved id
    ('base' or 'base(variant)'), and the active selection.
    """
    _bases: Dict[str, CalendarDefinition]
    _build: EngineBuilder
    _engines: Dict[str, CalendarEngineProtocol] = field(default_factory=dict)
    _active: Optional[ActiveCalendar] = None
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def base(self, base_id: str) -> CalendarDefinition:
        if base_id not in self._bases:
            raise UnknownCalendar(f"Unknown calendar '{base_id}'. Available: {sorted(self._bases)}")
        return self._bases[base_id]

    def resolve_id(self, calendar_id: str) -> str:
        """Canonical id: a bare base id with a default variant becomes 'base(default)'."""
        base_id, key = split_calendar_id(calendar_id)
        base = self.base(base_id)
        if key is None:
            key = default_variant(base)
        return base_id if key is None else variant_id(base_id, key)

    def get(self, calendar_id: str) -> CalendarEngineProtocol:
        rid = self.resolve_id(calendar_id)
        eng = self._engines.get(rid)
        if eng is None:
            base_id, key = split_calendar_id(rid)
            eng = self._build(self.base(base_id), key)
            with self._lock:
                eng = self._engines.setdefault(rid, eng)
        return eng

    def list(self) -> List[str]:
        """
        Every selectable id, sorted: 'base(variant)' for each variant, plus the bare
        base id when it has no default variant (otherwise it is only an alias).
        """
        out = []
        for base_id, d in self._bases.items():
            if default_variant(d) is None:
                out.append(base_id)
            out.extend(variant_id(base_id, k) for k in d.variants)
        return sorted(out)

    def register(self, definition: CalendarDefinition, *, overwrite: bool = False) -> None:
        with self._lock:
            if (not overwrite) and (definition.id in self._bases):
                raise KeyError(f"Calendar '{definition.id}' already exists. Use overwrite=True to replace.")
            self._bases[definition.id] = definition
            prefix = definition.id + "("
            for rid in [r for r in self._engines if r == definition.id or r.startswith(prefix)]:
                del self._engines[rid]
            if self._active is not None and split_calendar_id(self._active.id)[0] == definition.id:
                self._active = self._rebuild_active(definition)

    def _rebuild_active(self, definition: CalendarDefinition) -> ActiveCalendar:
        """Re-resolve the active selection against a replaced base (caller holds the lock)."""
        key = split_calendar_id(self._active.id)[1]  # type: ignore[union-attr]
        if key is None or key not in definition.variants:
            key = default_variant(definition)
        eng = self._build(definition, key)
        rid = definition.id if key is None else variant_id(definition.id, key)
        self._engines[rid] = eng
        return ActiveCalendar(id=eng.id, definition=eng.definition, engine=eng)

    # ---------------------------------------------------------
    # Active selection
    # ---------------------------------------------------------

    def set_active(self, calendar_id: str) -> ActiveCalendar:
        eng = self.get(calendar_id)
        sel = ActiveCalendar(id=eng.id, definition=eng.definition, engine=eng)
        with self._lock:
            self._active = sel
        return sel

    @property
    def active(self) -> ActiveCalendar:
        sel = self._active
        if sel is None:
            raise RuntimeError("No active calendar selected")
        return sel
