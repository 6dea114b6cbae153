# tests/test_registry_api.py

import threading

import pytest

import worldcal
from worldcal import api
from worldcal._bootstrap import build_registry
from worldcal.attributes.registry import available_attributes
from worldcal.core.errors import UnknownCalendar, UnknownVariant

TINY = {
    "id": "tiny",
    "label": "Tiny",
    "year": {"epoch": 0, "startDay": 0},
    "leapYear": {"rule": "none"},
    "time": {"hoursInDay": 10, "minutesInHour": 10, "secondsInMinute": 10},
    "months": [{"name": "One", "days": 5}, {"name": "Two", "days": 5}],
    "weekdays": [{"name": "A"}, {"name": "B"}],
    "intercalary": [],
    "variants": {"late": {"name": "Late", "overrides": {"year": {"epoch": 100}}}},
}

@pytest.fixture()
def fresh_registry():
    old = api._reg()
    reg = build_registry()
    api.set_registry(reg)
    try:
        yield reg
    finally:
        api.set_registry(old)

def test_builtin_calendars_listed(fresh_registry):
    ids = worldcal.list_calendars()
    for cid in ("gregorian", "golarion-pf2e(absalom-reckoning)", "golarion-pf2e(imperial-calendar)",
                "golarion-pf2e(earth-names)", "harptos"):
        assert cid in ids
    assert ids == sorted(ids)

def test_base_with_default_variant_is_not_listed(fresh_registry):
    ids = worldcal.list_calendars()
    assert "golarion-pf2e" not in ids
    assert worldcal.get_engine("golarion-pf2e").id == "golarion-pf2e(absalom-reckoning)"

def test_default_active_is_gregorian(fresh_registry):
    sel = worldcal.active_calendar()
    assert sel.id == "gregorian"
    assert sel.engine.id == sel.definition.id == "gregorian"

def test_bare_id_resolves_to_default_variant(fresh_registry):
    sel = worldcal.set_active_calendar("golarion-pf2e")
    assert sel.id == "golarion-pf2e(absalom-reckoning)"
    assert sel.definition.active_variant == "absalom-reckoning"
    assert worldcal.get_engine("golarion-pf2e") is worldcal.get_engine("golarion-pf2e(absalom-reckoning)")
    assert worldcal.world_time_to_date(0).year == 2700

def test_unknown_calendar_and_variant(fresh_registry):
    with pytest.raises(UnknownCalendar):
        worldcal.set_active_calendar("middle-earth")
    with pytest.raises(UnknownVariant):
        worldcal.get_engine("golarion-pf2e(steam-age)")
    assert worldcal.active_calendar().id == "gregorian"

def test_variant_shifts_year_numbering(fresh_registry):
    t = 86400 * 1000
    ar = worldcal.world_time_to_date(t, calendar="golarion-pf2e")
    ic = worldcal.world_time_to_date(t, calendar="golarion-pf2e(imperial-calendar)")
    assert ic.year - ar.year == 2500
    assert (ic.month, ic.day, ic.weekday) == (ar.month, ar.day, ar.weekday)
    assert worldcal.calendar_info("golarion-pf2e(imperial-calendar)")["label"].endswith("(Imperial Calendar)")

def test_load_calendar(fresh_registry):
    worldcal.load_calendar(TINY)
    assert "tiny" in worldcal.list_calendars()
    assert "tiny(late)" in worldcal.list_calendars()
    assert worldcal.year_length(3, calendar="tiny") == 10
    assert worldcal.world_time_to_date(0, calendar="tiny(late)").year == 100

    with pytest.raises(KeyError):
        worldcal.load_calendar(TINY)
    worldcal.load_calendar(dict(TINY, months=[{"name": "Only", "days": 7}]), overwrite=True)
    assert worldcal.year_length(3, calendar="tiny") == 7

def test_overwrite_drops_cached_engines(fresh_registry):
    worldcal.load_calendar(TINY)
    before = worldcal.get_engine("tiny(late)")
    worldcal.load_calendar(TINY, overwrite=True)
    assert worldcal.get_engine("tiny(late)") is not before

def test_module_level_queries_use_active_calendar(fresh_registry):
    assert worldcal.is_leap_year(2024)
    assert worldcal.month_length(2, 2023) == 28
    assert worldcal.calculate_weekday(1970, 1, 1) == 4
    d = worldcal.world_time_to_date(946684800)
    assert d.ymd() == (2000, 1, 1)
    assert worldcal.date_to_world_time(d) == 946684800
    assert worldcal.season_at(d).name == "Winter"
    assert [o.event_id for o in worldcal.occurrences_on_date(d)] == ["new-year"]
    assert worldcal.next_occurrence("new-year", d).date.year == 2001
    assert len(worldcal.occurrences_in_range("new-year", 2000, 2009)) == 10
    assert worldcal.phase_at("Luna", worldcal.world_time_to_date(947116800)).phase.name == "New Moon"
    assert worldcal.sun_times(d).sunrise < 7.0

    worldcal.set_active_calendar("harptos")
    assert not worldcal.is_leap_year(1491)
    assert worldcal.year_length(1492) == 366

# ------------------------------------------------------------
# Day records and attributes
# ------------------------------------------------------------

def test_day_info_without_attributes(fresh_registry):
    info = worldcal.day_info(86399.9)
    assert info.calendar_id == "gregorian"
    assert info.world_time == 86399
    assert info.date.ymd() == (1970, 1, 1)
    assert info.attributes is None

def test_day_info_attributes(fresh_registry):
    info = worldcal.day_info(0, attributes=["weekday_name", "month_name", "day_of_year", "season", "events", "sun", "moons"])
    a = info.attributes
    assert a["weekday_name"] == "Thursday"
    assert a["month_name"] == "January"
    assert a["day_of_year"] == 1
    assert a["season"] == "Winter"
    assert a["events"] == ["new-year"]
    assert a["sunrise"] < "07:00" < a["sunset"]
    assert [m["moon"] for m in a["moons"]] == ["Luna"]

def test_intercalary_day_attributes(fresh_registry):
    eng = worldcal.get_engine("harptos")
    d = eng.make_date(1492, 1, 1, intercalary="Midwinter")
    wt = eng.date_to_world_time(d)
    a = worldcal.day_info(wt, calendar="harptos", attributes=["weekday_name", "month_name"]).attributes
    assert a == {"weekday_name": None, "month_name": "Midwinter"}

def test_unknown_attribute(fresh_registry):
    assert "season" in available_attributes()
    with pytest.raises(KeyError):
        worldcal.day_info(0, attributes=["horoscope"])

# ------------------------------------------------------------
# Concurrency
# ------------------------------------------------------------

def test_active_selection_is_always_consistent(fresh_registry):
    ids = ["gregorian", "harptos", "golarion-pf2e(imperial-calendar)"]
    seen = []
    errors = []

    def flip(i):
        for k in range(50):
            worldcal.set_active_calendar(ids[(i + k) % len(ids)])
            sel = worldcal.active_calendar()
            if not (sel.id == sel.engine.id == sel.definition.id):
                errors.append(sel.id)
            seen.append(sel.id)

    threads = [threading.Thread(target=flip, args=(i,)) for i in range(6)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert errors == []
    assert set(seen) <= set(ids)

def test_overwriting_active_calendar_refreshes_selection(fresh_registry):
    worldcal.load_calendar(TINY)
    worldcal.set_active_calendar("tiny")
    assert worldcal.year_length(1) == 10
    worldcal.load_calendar(dict(TINY, months=[{"name": "Only", "days": 9}]), overwrite=True)
    sel = worldcal.active_calendar()
    assert sel.id == "tiny"
    assert worldcal.year_length(1) == 9
    assert sel.engine is worldcal.get_engine("tiny")

def test_overwriting_active_variant_keeps_variant(fresh_registry):
    worldcal.load_calendar(TINY)
    worldcal.set_active_calendar("tiny(late)")
    worldcal.load_calendar(dict(TINY, months=[{"name": "Only", "days": 9}]), overwrite=True)
    assert worldcal.active_calendar().id == "tiny(late)"
    assert worldcal.year_length(100) == 9
    assert worldcal.world_time_to_date(0).year == 100

def test_overwriting_other_calendar_leaves_selection(fresh_registry):
    worldcal.load_calendar(TINY)
    before = worldcal.active_calendar()
    worldcal.load_calendar(TINY, overwrite=True)
    assert worldcal.active_calendar() is before
