# tests/test_variants.py

import logging

import pytest

from worldcal.core.definition import CalendarDefinition
from worldcal.core.errors import UnknownVariant
from worldcal.engines.factory import make_engine
from worldcal.engines.specs import ALL_SPECS
from worldcal.engines.variants import default_variant, resolve_variant, split_calendar_id

GOLARION = CalendarDefinition.from_dict(ALL_SPECS["golarion-pf2e"])
GREG = CalendarDefinition.from_dict(ALL_SPECS["gregorian"])

def test_split_calendar_id():
    assert split_calendar_id("golarion-pf2e(imperial-calendar)") == ("golarion-pf2e", "imperial-calendar")
    assert split_calendar_id("gregorian") == ("gregorian", None)

def test_default_variant_is_used_without_key():
    assert default_variant(GOLARION) == "absalom-reckoning"
    flat = resolve_variant(GOLARION)
    assert flat.id == "golarion-pf2e(absalom-reckoning)"
    assert flat.active_variant == "absalom-reckoning"
    assert dict(flat.variants) == {}
    assert flat.label == "Golarion Calendar (Absalom Reckoning)"

def test_no_default_returns_base_unchanged():
    flat = resolve_variant(GREG)
    assert flat is GREG
    assert flat.active_variant is None

def test_unknown_variant():
    with pytest.raises(UnknownVariant):
        resolve_variant(GOLARION, "nope")
    with pytest.raises(KeyError):
        resolve_variant(GREG, "anything")

def test_year_override_merges_field_by_field():
    flat = resolve_variant(GOLARION, "imperial-calendar")
    assert flat.year.epoch == 5200
    assert flat.year.current_year == 7225
    assert flat.year.suffix == " IC"
    assert flat.year.start_day == GOLARION.year.start_day
    assert flat.months == GOLARION.months

def test_year_override_changes_numbering_not_weekdays():
    imperial = make_engine(GOLARION, variant="imperial-calendar")
    ar = make_engine(GOLARION)
    assert imperial.calculate_weekday(7212, 10, 21) == ar.calculate_weekday(4712, 10, 21) == 6
    assert imperial.world_time_to_date(0).ymd() == (5200, 1, 1)

def test_month_and_weekday_overrides_match_by_name():
    flat = resolve_variant(GOLARION, "earth-names")
    assert [m.name for m in flat.months[:3]] == ["January", "February", "Pharast"]
    assert flat.months[1].days == 28
    assert flat.months[0].abbreviation == "Aba"
    assert flat.weekdays[0].name == "Monday"
    assert flat.weekdays[0].abbreviation == "Mon"
    assert flat.weekdays[1].name == "Toilday"
    assert flat.formats["short"] == "{{month}} {{day}}"
    # base is untouched
    assert GOLARION.months[0].name == "Abadius"

def test_leap_month_rename_keeps_leap_rule_by_name():
    # the leap rule still names "Calistril"; renaming it moves the extra day to the final month
    eng = make_engine(GOLARION, variant="earth-names")
    assert eng.month_length(2, 4712) == 28
    assert eng.month_length(12, 4712) == 32
    assert eng.year_length(4712) == 366

def test_unknown_override_names_are_ignored(caplog):
    raw = dict(ALL_SPECS["gregorian"], variants={
        "odd": {"name": "Odd", "overrides": {"months": {"Smarch": {"days": 30}, "March": {"days": 30}}}},
    })
    with caplog.at_level(logging.WARNING, logger="worldcal.engines.variants"):
        flat = resolve_variant(CalendarDefinition.from_dict(raw), "odd")
    assert flat.months[2].days == 30
    assert len(flat.months) == 12
    assert any("Smarch" in r.getMessage() for r in caplog.records)

def test_wholesale_replacement_and_format_merge():
    raw = dict(
        ALL_SPECS["gregorian"],
        dateFormats={"short": "x", "widgets": {"mini": "a", "main": "b"}},
        variants={
            "moonless": {
                "name": "Moonless",
                "overrides": {"moons": [], "seasons": [], "events": [], "dateFormats": {"widgets": {"mini": "c"}}},
            },
        },
    )
    flat = resolve_variant(CalendarDefinition.from_dict(raw), "moonless")
    assert flat.moons == ()
    assert flat.seasons == ()
    assert flat.events == ()
    assert flat.formats["short"] == "x"
    assert dict(flat.formats["widgets"]) == {"mini": "c", "main": "b"}
