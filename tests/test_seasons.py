# tests/test_seasons.py

import logging

import pytest

from worldcal.core.errors import DateOutOfRange
from worldcal.core.tracker import WarningTracker
from worldcal.core.types import CalendarDate
from worldcal.engines.factory import make_engine
from worldcal.engines.specs import ALL_SPECS

GREG = make_engine(ALL_SPECS["gregorian"])
HARPTOS = make_engine(ALL_SPECS["harptos"])

def _with_seasons(seasons):
    return make_engine(dict(ALL_SPECS["gregorian"], seasons=seasons))

def _season(eng, y, m, d):
    s = eng.season_at(eng.make_date(y, m, d))
    return s.name if s is not None else None

@pytest.mark.parametrize("ymd, name", [
    ((2025, 1, 15), "Winter"),
    ((2025, 3, 19), "Winter"),
    ((2025, 3, 20), "Spring"),
    ((2025, 6, 20), "Spring"),
    ((2025, 6, 21), "Summer"),
    ((2025, 9, 22), "Autumn"),
    ((2025, 12, 20), "Autumn"),
    ((2025, 12, 21), "Winter"),
    ((2024, 2, 29), "Winter"),
])
def test_gregorian_seasons(ymd, name):
    assert _season(GREG, *ymd) == name

def test_every_day_has_exactly_one_season():
    start = GREG.day_index(GREG.make_date(2024, 1, 1))
    for n in range(start, start + 366):
        d = GREG.date_from_day_index(n)
        hits = [s.name for s in GREG.definition.seasons if GREG.seasons.contains(s, d)]
        assert len(hits) == 1, (str(d), hits)

def test_intercalary_day_inside_a_season():
    d = HARPTOS.make_date(1492, 1, 1, intercalary="Midwinter")
    assert HARPTOS.season_at(d).name == "Winter"
    assert _season(HARPTOS, 1492, 2, 30) == "Winter"
    assert _season(HARPTOS, 1492, 3, 1) == "Spring"
    d = HARPTOS.make_date(1492, 7, 1, intercalary="Shieldmeet")
    assert HARPTOS.season_at(d).name == "Summer"

def test_missing_seasons_warn_once(caplog):
    eng = _with_seasons([])
    with caplog.at_level(logging.WARNING, logger="worldcal.engines.seasons"):
        assert eng.season_at(eng.make_date(2025, 1, 1)) is None
        assert eng.season_at(eng.make_date(2025, 7, 1)) is None
    assert len(caplog.records) == 1

def test_end_month_defaults_to_start_month():
    eng = _with_seasons([{"name": "Thaw", "startMonth": 2, "startDay": 10}])
    assert _season(eng, 2025, 2, 9) is None
    assert _season(eng, 2025, 2, 10) == "Thaw"
    assert _season(eng, 2025, 2, 28) == "Thaw"
    assert _season(eng, 2024, 2, 29) == "Thaw"
    assert _season(eng, 2025, 3, 1) is None

def test_overflowing_end_day_warns_once(caplog):
    eng = _with_seasons([{"name": "Long", "startMonth": 2, "startDay": 1, "endMonth": 2, "endDay": 31}])
    with caplog.at_level(logging.WARNING, logger="worldcal.engines.seasons"):
        assert _season(eng, 2025, 3, 3) == "Long"
        assert _season(eng, 2025, 3, 4) is None
    assert len([r for r in caplog.records if "overflows" in r.getMessage()]) == 1

def test_season_with_unknown_month_is_skipped(caplog):
    eng = _with_seasons([
        {"name": "Bogus", "startMonth": 13, "startDay": 1, "endMonth": 14},
        {"name": "Year", "startMonth": 1, "startDay": 1, "endMonth": 12, "endDay": 31},
    ])
    with caplog.at_level(logging.WARNING, logger="worldcal.engines.seasons"):
        assert _season(eng, 2025, 5, 5) == "Year"
        assert _season(eng, 2025, 6, 6) == "Year"
    assert len(caplog.records) == 1

def test_invalid_date_raises():
    with pytest.raises(DateOutOfRange):
        GREG.season_at(CalendarDate(2025, 2, 30))

# ------------------------------------------------------------
# Sunrise / sunset
# ------------------------------------------------------------

def test_sun_times_at_season_start():
    st = GREG.sun_times(GREG.make_date(2025, 12, 21))
    assert st.sunrise == pytest.approx(7.0)
    assert st.sunset == pytest.approx(16.75)
    st = GREG.sun_times(GREG.make_date(2025, 3, 20))
    assert st.sunrise == pytest.approx(6.5)
    assert st.sunset == pytest.approx(17.75)

def test_sun_times_interpolate_toward_next_season():
    a = GREG.sun_times(GREG.make_date(2025, 3, 20))
    b = GREG.sun_times(GREG.make_date(2025, 5, 1))
    c = GREG.sun_times(GREG.make_date(2025, 6, 20))
    assert a.sunset < b.sunset < c.sunset < 20.25
    assert a.sunrise > b.sunrise > c.sunrise > 5.75

def test_sun_times_without_seasons():
    eng = _with_seasons([])
    st = eng.sun_times(eng.make_date(2025, 6, 1))
    assert (st.sunrise, st.sunset) == (6.0, 18.0)

def test_sun_times_follow_the_day_length():
    raw = dict(ALL_SPECS["gregorian"], seasons=[], time={"hoursInDay": 20, "minutesInHour": 60, "secondsInMinute": 60})
    eng = make_engine(raw)
    st = eng.sun_times(eng.make_date(2025, 6, 1))
    assert (st.sunrise, st.sunset) == (5.0, 15.0)

def test_custom_sunrise_strings():
    eng = _with_seasons([{"name": "Only", "startMonth": 1, "startDay": 1, "endMonth": 12, "endDay": 31,
                          "sunrise": "05:30", "sunset": "21:00"}])
    st = eng.sun_times(eng.make_date(2025, 8, 8))
    assert st.sunrise == pytest.approx(5.5)
    assert st.sunset == pytest.approx(21.0)

def test_tracker_is_per_consumer(caplog):
    t = WarningTracker()
    eng = make_engine(dict(ALL_SPECS["gregorian"], id="bare-seasons", seasons=[]), tracker=t)
    other = make_engine(dict(ALL_SPECS["gregorian"], id="bare-seasons", seasons=[]))
    d = eng.make_date(2025, 1, 1)
    with caplog.at_level(logging.WARNING, logger="worldcal.engines.seasons"):
        eng.season_at(d)
        other.season_at(d)
        assert t.already_warned("bare-seasons", "seasons:missing")
        eng.season_at(d)
        t.reset("bare-seasons")
        assert not t.already_warned("bare-seasons", "seasons:missing")
        eng.season_at(d)
    assert len(caplog.records) == 3

def test_overflow_past_year_end_wraps_into_january():
    eng = _with_seasons([{"name": "Deep", "startMonth": 12, "startDay": 1, "endMonth": 12, "endDay": 40}])
    assert _season(eng, 2023, 11, 30) is None
    assert _season(eng, 2023, 12, 31) == "Deep"
    assert _season(eng, 2023, 1, 5) == "Deep"
    assert _season(eng, 2023, 1, 9) == "Deep"
    assert _season(eng, 2023, 1, 10) is None
