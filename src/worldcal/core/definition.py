"""
worldcal.core.definition
------------------------
The Calendar Definition: immutable records parsed once from the declarative
wire format (camelCase JSON-style mappings).

Every record keeps a closed set of known fields plus an `extra` mapping that
carries anything else (descriptions, icons, translations) untouched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from fractions import Fraction
from types import MappingProxyType
from typing import Any, Dict, Literal, Mapping, Optional, Tuple, Union

from .errors import InvalidLeapRule

logger = logging.getLogger(__name__)

LeapRuleName = Literal["none", "gregorian", "custom"]
Interpretation = Literal["epoch-based", "real-time-based"]
IfDayNotExists = Literal["lastDay", "beforeDay", "afterDay"]

_EMPTY: Mapping[str, Any] = MappingProxyType({})


def _empty() -> Mapping[str, Any]:
    return _EMPTY


def _frozen(d: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    return MappingProxyType(dict(d)) if d else _EMPTY


def _frac(x: Union[int, float, str, Fraction]) -> Fraction:
    """Exact day count. Floats go through their decimal repr so 29.530588 stays 29530588/10**6."""
    if isinstance(x, float):
        return Fraction(repr(x))
    return Fraction(x)


def _split(raw: Mapping[str, Any], known: Tuple[str, ...]) -> Mapping[str, Any]:
    return _frozen({k: v for k, v in raw.items() if k not in known})


# ============================================================
# Structural records
# ============================================================

@dataclass(frozen=True)
class MonthDef:
    name: str
    days: int
    abbreviation: Optional[str] = None
    extra: Mapping[str, Any] = field(default_factory=_empty)

    KEYS = ("name", "days", "abbreviation")

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "MonthDef":
        return cls(
            name=raw["name"],
            days=int(raw["days"]),
            abbreviation=raw.get("abbreviation"),
            extra=_split(raw, cls.KEYS),
        )

@dataclass(frozen=True)
class WeekdayDef:
    name: str
    abbreviation: Optional[str] = None
    extra: Mapping[str, Any] = field(default_factory=_empty)

    KEYS = ("name", "abbreviation")

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "WeekdayDef":
        return cls(name=raw["name"], abbreviation=raw.get("abbreviation"), extra=_split(raw, cls.KEYS))

@dataclass(frozen=True)
class YearConfig:
    epoch: int = 0
    current_year: int = 0
    start_day: int = 0        # weekday index of the epoch's first day
    prefix: str = ""
    suffix: str = ""

    WIRE = {"epoch": "epoch", "currentYear": "current_year", "startDay": "start_day",
            "prefix": "prefix", "suffix": "suffix"}

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "YearConfig":
        return cls(**{cls.WIRE[k]: v for k, v in raw.items() if k in cls.WIRE})

@dataclass(frozen=True)
class LeapYearRule:
    rule: LeapRuleName = "none"
    interval: Optional[int] = None
    offset: int = 0
    month: Optional[str] = None
    extra_days: int = 1

    def __post_init__(self) -> None:
        if self.rule not in ("none", "gregorian", "custom"):
            raise InvalidLeapRule(f"Unknown leap rule {self.rule!r}")
        if self.rule == "custom" and (self.interval is None or self.interval < 1):
            raise InvalidLeapRule(f"Custom leap rule needs interval >= 1, got {self.interval!r}")

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "LeapYearRule":
        rule = raw.get("rule", "none")
        if rule == "none":
            return cls()
        interval = raw.get("interval")
        return cls(
            rule=rule,
            interval=int(interval) if interval is not None else None,
            offset=int(raw.get("offset", 0) or 0),
            month=raw.get("month"),
            extra_days=int(raw.get("extraDays", 1)),
        )

@dataclass(frozen=True)
class IntercalaryDef:
    name: str
    days: int = 1
    after: Optional[str] = None
    before: Optional[str] = None
    leap_year_only: bool = False
    counts_for_weekdays: bool = True
    extra: Mapping[str, Any] = field(default_factory=_empty)

    KEYS = ("name", "days", "after", "before", "leapYearOnly", "countsForWeekdays")

    def __post_init__(self) -> None:
        if (self.after is None) == (self.before is None):
            raise ValueError(f"Intercalary block {self.name!r} needs exactly one of 'after'/'before'")

    @property
    def anchor(self) -> str:
        return self.after if self.after is not None else self.before  # type: ignore[return-value]

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "IntercalaryDef":
        return cls(
            name=raw["name"],
            days=int(raw.get("days") or 1),
            after=raw.get("after"),
            before=raw.get("before"),
            leap_year_only=bool(raw.get("leapYearOnly", False)),
            counts_for_weekdays=bool(raw.get("countsForWeekdays", True)),
            extra=_split(raw, cls.KEYS),
        )

@dataclass(frozen=True)
class TimeConfig:
    hours_in_day: int = 24
    minutes_in_hour: int = 60
    seconds_in_minute: int = 60

    def __post_init__(self) -> None:
        for k in ("hours_in_day", "minutes_in_hour", "seconds_in_minute"):
            if getattr(self, k) < 1:
                raise ValueError(f"{k} must be >= 1")

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "TimeConfig":
        return cls(
            hours_in_day=int(raw.get("hoursInDay", 24)),
            minutes_in_hour=int(raw.get("minutesInHour", 60)),
            seconds_in_minute=int(raw.get("secondsInMinute", 60)),
        )

@dataclass(frozen=True)
class WorldTimeConfig:
    interpretation: Interpretation = "epoch-based"
    epoch_year: int = 0
    current_year: int = 0

    def __post_init__(self) -> None:
        if self.interpretation not in ("epoch-based", "real-time-based"):
            raise ValueError(f"Unknown world time interpretation {self.interpretation!r}")

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "WorldTimeConfig":
        return cls(
            interpretation=raw.get("interpretation", "epoch-based"),
            epoch_year=int(raw.get("epochYear", 0)),
            current_year=int(raw.get("currentYear", 0)),
        )


# ============================================================
# Moons and seasons
# ============================================================

@dataclass(frozen=True)
class MoonPhaseDef:
    name: str
    length: Fraction
    single_day: bool = False
    icon: Optional[str] = None
    extra: Mapping[str, Any] = field(default_factory=_empty)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "MoonPhaseDef":
        return cls(
            name=raw["name"],
            length=_frac(raw["length"]),
            single_day=bool(raw.get("singleDay", False)),
            icon=raw.get("icon"),
            extra=_split(raw, ("name", "length", "singleDay", "icon")),
        )

@dataclass(frozen=True)
class MoonDef:
    name: str
    cycle_length: Fraction
    first_new_moon: Tuple[int, int, int]    # (year, month, day)
    phases: Tuple[MoonPhaseDef, ...]
    extra: Mapping[str, Any] = field(default_factory=_empty)

    def __post_init__(self) -> None:
        if self.cycle_length <= 0:
            raise ValueError(f"Moon {self.name!r}: cycle length must be positive")
        if not self.phases:
            raise ValueError(f"Moon {self.name!r}: needs at least one phase")

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "MoonDef":
        ref = raw["firstNewMoon"]
        return cls(
            name=raw["name"],
            cycle_length=_frac(raw["cycleLength"]),
            first_new_moon=(int(ref["year"]), int(ref["month"]), int(ref["day"])),
            phases=tuple(MoonPhaseDef.from_dict(p) for p in raw["phases"]),
            extra=_split(raw, ("name", "cycleLength", "firstNewMoon", "phases")),
        )

@dataclass(frozen=True)
class SeasonDef:
    name: str
    start_month: int
    start_day: int = 1
    end_month: Optional[int] = None
    end_day: Optional[int] = None
    sunrise: Optional[str] = None     # "HH:MM"
    sunset: Optional[str] = None
    extra: Mapping[str, Any] = field(default_factory=_empty)

    KEYS = ("name", "startMonth", "startDay", "endMonth", "endDay", "sunrise", "sunset")

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "SeasonDef":
        return cls(
            name=raw["name"],
            start_month=int(raw["startMonth"]),
            start_day=int(raw.get("startDay") or 1),
            end_month=raw.get("endMonth"),
            end_day=raw.get("endDay"),
            sunrise=raw.get("sunrise"),
            sunset=raw.get("sunset"),
            extra=_split(raw, cls.KEYS),
        )


# ============================================================
# Events
# ============================================================

@dataclass(frozen=True)
class FixedRecurrence:
    month: int
    day: int
    if_day_not_exists: Optional[IfDayNotExists] = None
    type: str = "fixed"

@dataclass(frozen=True)
class OrdinalRecurrence:
    month: int
    occurrence: int          # 1..N, or -1 for the last
    weekday: int
    include_intercalary: bool = False
    type: str = "ordinal"

@dataclass(frozen=True)
class IntervalRecurrence:
    interval_years: int
    anchor_year: int
    month: int
    day: int
    if_day_not_exists: Optional[IfDayNotExists] = None
    type: str = "interval"

RecurrenceRule = Union[FixedRecurrence, OrdinalRecurrence, IntervalRecurrence]


def parse_recurrence(raw: Mapping[str, Any]) -> RecurrenceRule:
    kind = raw.get("type")
    if kind == "fixed":
        return FixedRecurrence(int(raw["month"]), int(raw["day"]), raw.get("ifDayNotExists"))
    if kind == "ordinal":
        return OrdinalRecurrence(
            month=int(raw["month"]),
            occurrence=int(raw["occurrence"]),
            weekday=int(raw["weekday"]),
            include_intercalary=bool(raw.get("includeIntercalary", False)),
        )
    if kind == "interval":
        return IntervalRecurrence(
            interval_years=int(raw["intervalYears"]),
            anchor_year=int(raw["anchorYear"]),
            month=int(raw["month"]),
            day=int(raw["day"]),
            if_day_not_exists=raw.get("ifDayNotExists"),
        )
    raise ValueError(f"Unknown recurrence type {kind!r}")

@dataclass(frozen=True)
class EventException:
    year: int
    type: Literal["skip", "move"]
    move_to_month: Optional[int] = None
    move_to_day: Optional[int] = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "EventException":
        return cls(
            year=int(raw["year"]),
            type=raw["type"],
            move_to_month=raw.get("moveToMonth"),
            move_to_day=raw.get("moveToDay"),
        )

@dataclass(frozen=True)
class EventDef:
    id: str
    recurrence: RecurrenceRule
    name: str = ""
    start_time: Optional[str] = None     # "H[:M[:S]]"
    duration: Optional[str] = None       # "<n><s|m|h|d|w>"
    start_year: Optional[int] = None
    end_year: Optional[int] = None
    exceptions: Tuple[EventException, ...] = ()
    visibility: Literal["player-visible", "gm-only"] = "player-visible"
    extra: Mapping[str, Any] = field(default_factory=_empty)

    KEYS = ("id", "recurrence", "name", "startTime", "duration", "startYear", "endYear",
            "exceptions", "visibility")

    def exception_for(self, year: int) -> Optional[EventException]:
        for ex in self.exceptions:
            if ex.year == year:
                return ex
        return None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "EventDef":
        return cls(
            id=raw["id"],
            recurrence=parse_recurrence(raw["recurrence"]),
            name=raw.get("name", raw["id"]),
            start_time=raw.get("startTime"),
            duration=raw.get("duration"),
            start_year=raw.get("startYear"),
            end_year=raw.get("endYear"),
            exceptions=tuple(EventException.from_dict(e) for e in raw.get("exceptions", ())),
            visibility=raw.get("visibility", "player-visible"),
            extra=_split(raw, cls.KEYS),
        )


def parse_events(raw_events, calendar_id: str) -> Tuple[EventDef, ...]:
    """Parse event mappings; an event that cannot be parsed is dropped with a warning."""
    out = []
    for raw in raw_events or ():
        try:
            out.append(EventDef.from_dict(raw))
        except (KeyError, TypeError, ValueError) as e:
            eid = raw.get("id") if isinstance(raw, Mapping) else raw
            logger.warning("Calendar %s: dropping malformed event %r (%s)", calendar_id, eid, e)
    return tuple(out)


# ============================================================
# Variants
# ============================================================

@dataclass(frozen=True)
class VariantOverrides:
    year: Mapping[str, Any] = field(default_factory=_empty)                       # snake_case YearConfig fields
    months: Mapping[str, Mapping[str, Any]] = field(default_factory=_empty)       # month name -> partial month (wire keys)
    weekdays: Mapping[str, Mapping[str, Any]] = field(default_factory=_empty)
    moons: Optional[Tuple[MoonDef, ...]] = None
    seasons: Optional[Tuple[SeasonDef, ...]] = None
    events: Optional[Tuple[EventDef, ...]] = None
    formats: Optional[Mapping[str, Any]] = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "VariantOverrides":
        year = {YearConfig.WIRE[k]: v for k, v in raw.get("year", {}).items() if k in YearConfig.WIRE}
        return cls(
            year=_frozen(year),
            months=_frozen({k: _frozen(v) for k, v in raw.get("months", {}).items()}),
            weekdays=_frozen({k: _frozen(v) for k, v in raw.get("weekdays", {}).items()}),
            moons=tuple(MoonDef.from_dict(m) for m in raw["moons"]) if "moons" in raw else None,
            seasons=tuple(SeasonDef.from_dict(s) for s in raw["seasons"]) if "seasons" in raw else None,
            events=parse_events(raw["events"], "<variant>") if "events" in raw else None,
            formats=_frozen(raw["dateFormats"]) if "dateFormats" in raw else None,
        )

@dataclass(frozen=True)
class VariantDef:
    name: str
    description: str = ""
    default: bool = False
    overrides: VariantOverrides = field(default_factory=VariantOverrides)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "VariantDef":
        return cls(
            name=raw.get("name", ""),
            description=raw.get("description", ""),
            default=bool(raw.get("default", False)),
            overrides=VariantOverrides.from_dict(raw.get("overrides", {})),
        )


# ============================================================
# The definition
# ============================================================

@dataclass(frozen=True)
class CalendarDefinition:
    id: str
    months: Tuple[MonthDef, ...]
    weekdays: Tuple[WeekdayDef, ...] = ()
    year: YearConfig = field(default_factory=YearConfig)
    leap_year: LeapYearRule = field(default_factory=LeapYearRule)
    intercalary: Tuple[IntercalaryDef, ...] = ()
    time: TimeConfig = field(default_factory=TimeConfig)
    world_time: Optional[WorldTimeConfig] = None
    variants: Mapping[str, VariantDef] = field(default_factory=_empty)
    moons: Tuple[MoonDef, ...] = ()
    seasons: Tuple[SeasonDef, ...] = ()
    events: Tuple[EventDef, ...] = ()
    formats: Mapping[str, Any] = field(default_factory=_empty)
    compatibility: Mapping[str, int] = field(default_factory=_empty)          # system id -> weekday offset
    label: str = ""
    active_variant: Optional[str] = None
    extra: Mapping[str, Any] = field(default_factory=_empty)

    def __post_init__(self) -> None:
        if not self.months:
            raise ValueError(f"Calendar {self.id!r} needs at least one month")

    def month_index(self, name: str) -> Optional[int]:
        """0-based index of a month by name."""
        for i, m in enumerate(self.months):
            if m.name == name:
                return i
        return None

    def moon(self, ref: Union[str, int, MoonDef]) -> MoonDef:
        if isinstance(ref, MoonDef):
            return ref
        if isinstance(ref, int):
            if not (0 <= ref < len(self.moons)):
                raise KeyError(f"Moon index {ref} out of range for calendar {self.id!r}")
            return self.moons[ref]
        for m in self.moons:
            if m.name == ref:
                return m
        raise KeyError(f"Unknown moon {ref!r}. Available: {[m.name for m in self.moons]}")

    KEYS = ("id", "label", "months", "weekdays", "year", "leapYear", "intercalary", "time",
            "worldTime", "variants", "moons", "seasons", "events", "dateFormats", "compatibility")

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "CalendarDefinition":
        """
        Parse the wire format once. Missing structural sections fall back to
        Gregorian defaults, with one warning per section.
        """
        cid = raw.get("id", "<anonymous>")
        data: Dict[str, Any] = dict(raw)
        for key in ("year", "leapYear", "time", "months", "weekdays", "intercalary"):
            if data.get(key) is None:
                logger.warning("Calendar %s missing %s data; using Gregorian defaults", cid, key)
                data[key] = GREGORIAN_DEFAULTS[key]

        compat = {
            sid: int(v.get("weekdayOffset", 0))
            for sid, v in (data.get("compatibility") or {}).items()
        }
        wt = data.get("worldTime")
        return cls(
            id=cid,
            label=data.get("label") or data.get("name") or cid,
            months=tuple(MonthDef.from_dict(m) for m in data["months"]),
            weekdays=tuple(WeekdayDef.from_dict(w) for w in data["weekdays"]),
            year=YearConfig.from_dict(data["year"]),
            leap_year=LeapYearRule.from_dict(data["leapYear"]),
            intercalary=tuple(IntercalaryDef.from_dict(i) for i in data["intercalary"]),
            time=TimeConfig.from_dict(data["time"]),
            world_time=WorldTimeConfig.from_dict(wt) if wt else None,
            variants=_frozen({k: VariantDef.from_dict(v) for k, v in (data.get("variants") or {}).items()}),
            moons=tuple(MoonDef.from_dict(m) for m in data.get("moons") or ()),
            seasons=tuple(SeasonDef.from_dict(s) for s in data.get("seasons") or ()),
            events=parse_events(data.get("events"), cid),
            formats=_frozen(data.get("dateFormats")),
            compatibility=_frozen(compat),
            extra=_split(data, cls.KEYS),
        )


GREGORIAN_DEFAULTS: Dict[str, Any] = {
    "year": {"epoch": 1970, "currentYear": 2025, "startDay": 4, "prefix": "", "suffix": ""},
    "leapYear": {"rule": "gregorian", "month": "February", "extraDays": 1},
    "time": {"hoursInDay": 24, "minutesInHour": 60, "secondsInMinute": 60},
    "months": [
        {"name": "January", "abbreviation": "Jan", "days": 31},
        {"name": "February", "abbreviation": "Feb", "days": 28},
        {"name": "March", "abbreviation": "Mar", "days": 31},
        {"name": "April", "abbreviation": "Apr", "days": 30},
        {"name": "May", "abbreviation": "May", "days": 31},
        {"name": "June", "abbreviation": "Jun", "days": 30},
        {"name": "July", "abbreviation": "Jul", "days": 31},
        {"name": "August", "abbreviation": "Aug", "days": 31},
        {"name": "September", "abbreviation": "Sep", "days": 30},
        {"name": "October", "abbreviation": "Oct", "days": 31},
        {"name": "November", "abbreviation": "Nov", "days": 30},
        {"name": "December", "abbreviation": "Dec", "days": 31},
    ],
    "weekdays": [
        {"name": "Sunday", "abbreviation": "Sun"},
        {"name": "Monday", "abbreviation": "Mon"},
        {"name": "Tuesday", "abbreviation": "Tue"},
        {"name": "Wednesday", "abbreviation": "Wed"},
        {"name": "Thursday", "abbreviation": "Thu"},
        {"name": "Friday", "abbreviation": "Fri"},
        {"name": "Saturday", "abbreviation": "Sat"},
    ],
    "intercalary": [],
}
