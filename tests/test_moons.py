# tests/test_moons.py

import math
import random
from fractions import Fraction

import pytest

from worldcal.core.definition import MoonDef
from worldcal.engines.factory import make_engine
from worldcal.engines.moons import effective_phase_lengths
from worldcal.engines.specs import ALL_SPECS

GREG = make_engine(ALL_SPECS["gregorian"])

def _d(y, m, d):
    return GREG.make_date(y, m, d)

def test_new_moon_reference_day():
    p = GREG.phase_at("Luna", _d(2000, 1, 6))
    assert p.phase.name == "New Moon"
    assert p.phase_index == 0
    assert p.day_in_phase == 0
    assert p.days_until_next == 1
    assert p.progress == 0

def test_phase_boundaries():
    p = GREG.phase_at("Luna", _d(2000, 1, 7))
    assert p.phase.name == "Waxing Crescent"
    assert p.day_in_phase == 0
    assert p.days_until_next == 7
    assert p.days_until_next_exact == Fraction("6.3826")

    full = GREG.phase_at("Luna", _d(2000, 1, 21))
    assert full.phase.name == "Full Moon"
    assert full.day_in_phase == 0

def test_day_before_reference_wraps_to_last_phase():
    p = GREG.phase_at("Luna", _d(2000, 1, 5))
    assert p.phase.name == "Waning Crescent"
    assert p.phase_index == 7
    assert p.day_in_phase == 5
    assert p.days_until_next == 1
    assert p.days_until_next_exact == 1
    assert float(p.progress) == pytest.approx(5.382788 / 6.382788)

def test_moon_reference_by_name_index_or_def():
    d = _d(2024, 3, 10)
    by_name = GREG.phase_at("Luna", d)
    assert GREG.phase_at(0, d) == by_name
    assert GREG.phase_at(GREG.definition.moons[0], d) == by_name
    with pytest.raises(KeyError):
        GREG.phase_at("Phobos", d)
    with pytest.raises(KeyError):
        GREG.phase_at(1, d)

def test_effective_lengths_sum_to_cycle():
    for raw in ALL_SPECS.values():
        for m in raw.get("moons", []):
            md = MoonDef.from_dict(m)
            assert sum(effective_phase_lengths(md)) == md.cycle_length

def test_single_day_phase_is_one_day():
    md = MoonDef.from_dict({
        "name": "Tiny",
        "cycleLength": 10,
        "firstNewMoon": {"year": 0, "month": 1, "day": 1},
        "phases": [
            {"name": "Dark", "length": 3, "singleDay": True},
            {"name": "Bright", "length": 3},
            {"name": "Rest", "length": 3},
        ],
    })
    assert effective_phase_lengths(md) == [1, 3, 6]

def test_exact_cycle_has_no_drift():
    # 29530 days is just short of 1000 cycles of 29.530588 days
    d0 = _d(2000, 1, 6)
    later = GREG.date_from_day_index(GREG.day_index(d0) + 29530)
    assert GREG.moons.cycle_offset("Luna", later) == Fraction("28.942588")

def test_offsets_stay_in_cycle():
    random.seed(1)
    cycle = GREG.definition.moons[0].cycle_length
    for _ in range(300):
        n = random.randint(-10**6, 10**6)
        p = GREG.phase_at("Luna", GREG.date_from_day_index(n))
        off = GREG.moons.cycle_offset("Luna", GREG.date_from_day_index(n))
        assert 0 <= off < cycle
        assert 0 <= p.progress < 1
        assert p.day_in_phase_exact + p.days_until_next_exact == \
            effective_phase_lengths(GREG.definition.moons[0])[p.phase_index]

def test_phases_at_lists_every_moon():
    eng = make_engine(dict(ALL_SPECS["gregorian"], moons=ALL_SPECS["gregorian"]["moons"] + [{
        "name": "Second",
        "cycleLength": 12,
        "firstNewMoon": {"year": 2000, "month": 1, "day": 1},
        "phases": [{"name": "Waxing", "length": 6}, {"name": "Waning", "length": 6}],
    }]))
    out = eng.phases_at(eng.make_date(2000, 1, 8))
    assert [p.moon.name for p in out] == ["Luna", "Second"]
    assert out[1].phase.name == "Waning"
    assert out[1].day_in_phase == 1

def test_next_phase():
    nxt = GREG.moons.next_phase("Luna", "Full Moon", _d(2000, 1, 6))
    assert nxt.ymd() == (2000, 1, 21)
    with pytest.raises(KeyError):
        GREG.moons.next_phase("Luna", "Blue Moon", _d(2000, 1, 6))

def _phase_walk(eng, moon, start):
    n0 = eng.day_index(start)
    # every day up to, not including, the next day that starts a new cycle
    days = math.ceil(eng.definition.moon(moon).cycle_length - eng.moons.cycle_offset(moon, start))
    return [eng.phase_at(moon, eng.date_from_day_index(n0 + k)).phase_index for k in range(days)]

def _assert_full_cycle(eng, moon, start):
    md = eng.definition.moon(moon)
    seen = _phase_walk(eng, moon, start)
    assert seen[0] == 0
    for a, b in zip(seen, seen[1:]):
        assert b - a in (0, 1)
    assert sorted(set(seen)) == list(range(len(md.phases)))
    for i, ph in enumerate(md.phases):
        if ph.single_day:
            assert seen.count(i) == 1

def test_one_cycle_of_days_visits_every_luna_phase():
    _assert_full_cycle(GREG, "Luna", _d(2000, 1, 6))
    # a cycle that starts partway through a day
    later = GREG.moons.next_phase("Luna", "New Moon", _d(2024, 1, 1))
    _assert_full_cycle(GREG, "Luna", later)

def test_one_cycle_of_days_visits_single_day_phase_once():
    eng = make_engine(dict(ALL_SPECS["gregorian"], moons=[{
        "name": "Tiny",
        "cycleLength": 10,
        "firstNewMoon": {"year": 2000, "month": 1, "day": 1},
        "phases": [
            {"name": "Dark", "length": 3, "singleDay": True},
            {"name": "Bright", "length": 3},
            {"name": "Rest", "length": 3},
        ],
    }]))
    assert _phase_walk(eng, "Tiny", eng.make_date(2000, 1, 1)) == [0, 1, 1, 1, 2, 2, 2, 2, 2, 2]
    _assert_full_cycle(eng, "Tiny", eng.make_date(2000, 1, 11))
