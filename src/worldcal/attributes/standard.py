from __future__ import annotations
from typing import Any, Dict

from ..core.time import hours_to_hhmm
from .registry import register_attribute

def weekday_name(info, engine) -> Dict[str, Any]:
    wd = info.date.weekday
    names = engine.definition.weekdays
    return {"weekday_name": names[wd].name if wd is not None else None}

def month_name(info, engine) -> Dict[str, Any]:
    d = info.date
    return {"month_name": d.intercalary or engine.definition.months[d.month - 1].name}

def day_of_year(info, engine) -> Dict[str, Any]:
    return {"day_of_year": engine.day_of_year(info.date)}

def moons(info, engine) -> Dict[str, Any]:
    out = []
    for p in engine.phases_at(info.date):
        out.append({
            "moon": p.moon.name,
            "phase": p.phase.name,
            "day_in_phase": p.day_in_phase,
            "days_until_next": p.days_until_next,
            "progress": float(p.progress),
        })
    return {"moons": out}

def season(info, engine) -> Dict[str, Any]:
    s = engine.season_at(info.date)
    return {"season": s.name if s is not None else None}

def events(info, engine) -> Dict[str, Any]:
    occ = engine.occurrences_on_date(info.date)
    return {"events": [o.event_id for o in occ]}

def sun(info, engine) -> Dict[str, Any]:
    st = engine.sun_times(info.date)
    tc = engine.definition.time
    return {"sunrise": hours_to_hhmm(st.sunrise, tc), "sunset": hours_to_hhmm(st.sunset, tc)}

register_attribute("weekday_name", weekday_name)
register_attribute("month_name", month_name)
register_attribute("day_of_year", day_of_year)
register_attribute("moons", moons)
register_attribute("season", season)
register_attribute("events", events)
register_attribute("sun", sun)
