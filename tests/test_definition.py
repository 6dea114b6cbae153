# tests/test_definition.py

import dataclasses
import logging
from fractions import Fraction

import pytest

from worldcal.core.definition import (
    CalendarDefinition,
    FixedRecurrence,
    IntercalaryDef,
    IntervalRecurrence,
    MonthDef,
    MoonDef,
    OrdinalRecurrence,
    TimeConfig,
    VariantOverrides,
    parse_recurrence,
)
from worldcal.core.errors import InvalidLeapRule
from worldcal.engines.specs import ALL_SPECS

def test_missing_sections_fall_back_to_gregorian(caplog):
    with caplog.at_level(logging.WARNING, logger="worldcal.core.definition"):
        d = CalendarDefinition.from_dict({"id": "bare"})
    assert len(d.months) == 12
    assert d.months[1].name == "February"
    assert [w.name for w in d.weekdays][:2] == ["Sunday", "Monday"]
    assert d.leap_year.rule == "gregorian"
    assert d.year.epoch == 1970
    assert d.world_time is None
    warned = [r for r in caplog.records if "Gregorian defaults" in r.getMessage()]
    assert len(warned) == 6

def test_extra_keys_are_preserved():
    d = CalendarDefinition.from_dict({
        "id": "x",
        "months": [{"name": "Only", "days": 10, "description": "the one month", "color": "red"}],
        "weekdays": [],
        "flavor": "salty",
    })
    assert d.months[0].extra["description"] == "the one month"
    assert d.months[0].extra["color"] == "red"
    assert "days" not in d.months[0].extra
    assert d.extra["flavor"] == "salty"

def test_fractional_lengths_are_exact():
    d = CalendarDefinition.from_dict(ALL_SPECS["gregorian"])
    luna = d.moon("Luna")
    assert luna.cycle_length == Fraction(29530588, 1000000)
    assert isinstance(luna.phases[1].length, Fraction)

def test_moon_lookup():
    d = CalendarDefinition.from_dict(ALL_SPECS["gregorian"])
    assert d.moon(0) is d.moon("Luna")
    with pytest.raises(KeyError):
        d.moon("Phobos")
    with pytest.raises(KeyError):
        d.moon(3)

def test_moon_requires_positive_cycle():
    with pytest.raises(ValueError):
        MoonDef.from_dict({"name": "Bad", "cycleLength": 0, "firstNewMoon": {"year": 1, "month": 1, "day": 1},
                           "phases": [{"name": "Only", "length": 1}]})

def test_leap_rule_errors_surface_from_parsing():
    with pytest.raises(InvalidLeapRule):
        CalendarDefinition.from_dict({"id": "x", "leapYear": {"rule": "custom", "interval": 0}})

def test_intercalary_needs_exactly_one_anchor():
    with pytest.raises(ValueError):
        IntercalaryDef(name="Both", after="A", before="B")
    with pytest.raises(ValueError):
        IntercalaryDef(name="Neither")
    assert IntercalaryDef(name="Ok", before="A").anchor == "A"

def test_time_config_units_positive():
    with pytest.raises(ValueError):
        TimeConfig(hours_in_day=0)
    tc = TimeConfig.from_dict({"hoursInDay": 10})
    assert (tc.hours_in_day, tc.minutes_in_hour, tc.seconds_in_minute) == (10, 60, 60)

def test_recurrence_parsing():
    assert parse_recurrence({"type": "fixed", "month": 2, "day": 29, "ifDayNotExists": "lastDay"}) == \
        FixedRecurrence(2, 29, "lastDay")
    o = parse_recurrence({"type": "ordinal", "month": 9, "occurrence": -1, "weekday": 1})
    assert isinstance(o, OrdinalRecurrence) and o.occurrence == -1 and not o.include_intercalary
    i = parse_recurrence({"type": "interval", "intervalYears": 4, "anchorYear": 2000, "month": 7, "day": 1})
    assert isinstance(i, IntervalRecurrence) and i.interval_years == 4
    with pytest.raises(ValueError):
        parse_recurrence({"type": "lunar"})

def test_compatibility_offsets_parsed():
    d = CalendarDefinition.from_dict({"id": "c", "compatibility": {"foundry": {"weekdayOffset": 2}, "other": {}}})
    assert d.compatibility == {"foundry": 2, "other": 0}

def test_variants_parsed_with_snake_case_year():
    d = CalendarDefinition.from_dict(ALL_SPECS["golarion-pf2e"])
    imp = d.variants["imperial-calendar"]
    assert imp.overrides.year["epoch"] == 5200
    assert imp.overrides.year["current_year"] == 7225
    assert imp.overrides.moons is None
    assert d.variants["absalom-reckoning"].default

def test_malformed_events_dropped_with_warning(caplog):
    raw = dict(ALL_SPECS["gregorian"], events=[
        {"id": "ok", "recurrence": {"type": "fixed", "month": 1, "day": 1}},
        {"id": "lunar", "recurrence": {"type": "lunar"}},
        {"id": "no-rule"},
        {"recurrence": {"type": "fixed", "month": 1, "day": 1}},
    ])
    with caplog.at_level(logging.WARNING, logger="worldcal.core.definition"):
        d = CalendarDefinition.from_dict(raw)
    assert [e.id for e in d.events] == ["ok"]
    assert len(caplog.records) == 3

def test_mapping_defaults_are_factories():
    # a mappingproxy is unhashable, so older dataclasses reject it as a plain default
    for cls in (MonthDef, MoonDef, VariantOverrides, CalendarDefinition):
        for f in dataclasses.fields(cls):
            assert f.default is dataclasses.MISSING or f.default.__hash__ is not None, (cls, f.name)
    m = MonthDef(name="Only", days=10)
    assert m.extra == {}
    assert VariantOverrides().months == {}
