"""
worldcal.engines.variants
-------------------------
Variant resolution: flatten a base calendar plus one named variant into a
single definition. Consumers only ever see the flattened result.
"""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import Any, Dict, Mapping, Optional, Tuple

from ..core.definition import CalendarDefinition, MonthDef, VariantDef, WeekdayDef, _EMPTY, _frozen
from ..core.errors import UnknownVariant

logger = logging.getLogger(__name__)

_ID_RE = re.compile(r"^(?P<base>.+?)\((?P<variant>[^()]+)\)$")


def split_calendar_id(calendar_id: str) -> Tuple[str, Optional[str]]:
    """'golarion-pf2e(imperial)' -> ('golarion-pf2e', 'imperial'); a bare id -> (id, None)."""
    m = _ID_RE.match(calendar_id)
    if m is None:
        return calendar_id, None
    return m.group("base"), m.group("variant")


def variant_id(base_id: str, key: str) -> str:
    return f"{base_id}({key})"


def default_variant(base: CalendarDefinition) -> Optional[str]:
    for key, v in base.variants.items():
        if v.default:
            return key
    return None


def _month_wire(m: MonthDef) -> Dict[str, Any]:
    return {**m.extra, "name": m.name, "days": m.days, "abbreviation": m.abbreviation}


def _weekday_wire(w: WeekdayDef) -> Dict[str, Any]:
    return {**w.extra, "name": w.name, "abbreviation": w.abbreviation}


def _merge_named(records, overrides: Mapping[str, Mapping[str, Any]], to_wire, parse, what: str, cid: str):
    by_name = {r.name: i for i, r in enumerate(records)}
    out = list(records)
    for name, patch in overrides.items():
        i = by_name.get(name)
        if i is None:
            logger.warning("Calendar %s: variant overrides unknown %s %r; ignored", cid, what, name)
            continue
        out[i] = parse({**to_wire(out[i]), **patch})
    return tuple(out)


def _merge_formats(base: Mapping[str, Any], patch: Mapping[str, Any]) -> Mapping[str, Any]:
    merged = {**base, **patch}
    if "widgets" in base or "widgets" in patch:
        merged["widgets"] = {**(base.get("widgets") or {}), **(patch.get("widgets") or {})}
    return _frozen(merged)


def apply_variant(base: CalendarDefinition, key: str, variant: VariantDef) -> CalendarDefinition:
    ov = variant.overrides
    changes: Dict[str, Any] = {}
    if ov.year:
        changes["year"] = replace(base.year, **ov.year)
    if ov.months:
        changes["months"] = _merge_named(base.months, ov.months, _month_wire, MonthDef.from_dict, "month", base.id)
    if ov.weekdays:
        changes["weekdays"] = _merge_named(base.weekdays, ov.weekdays, _weekday_wire, WeekdayDef.from_dict, "weekday", base.id)
    if ov.moons is not None:
        changes["moons"] = ov.moons
    if ov.seasons is not None:
        changes["seasons"] = ov.seasons
    if ov.events is not None:
        changes["events"] = ov.events
    if ov.formats is not None:
        changes["formats"] = _merge_formats(base.formats, ov.formats)

    label = f"{base.label} ({variant.name or key})" if base.label else ""
    return replace(
        base,
        id=variant_id(base.id, key),
        label=label,
        variants=_EMPTY,
        active_variant=key,
        **changes,
    )


def resolve_variant(base: CalendarDefinition, variant_key: Optional[str] = None) -> CalendarDefinition:
    """
    Flattened definition for `variant_key`. Without a key the variant flagged
    default is used; with no default the base itself is returned (variants kept,
    active_variant None).
    """
    if variant_key is None:
        variant_key = default_variant(base)
        if variant_key is None:
            return base
    if variant_key not in base.variants:
        raise UnknownVariant(
            f"Calendar '{base.id}' has no variant '{variant_key}'. Available: {sorted(base.variants)}"
        )
    return apply_variant(base, variant_key, base.variants[variant_key])
