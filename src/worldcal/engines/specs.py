from __future__ import annotations

from typing import Any, Dict, List

# ============================================================
# SHARED PIECES
# ============================================================

# Eight-phase cycle; quarter phases are single days, the last phase absorbs the residue.
def _eight_phases(span: float) -> List[Dict[str, Any]]:
    return [
        {"name": "New Moon", "length": 1, "singleDay": True, "icon": "new"},
        {"name": "Waxing Crescent", "length": span, "icon": "waxing-crescent"},
        {"name": "First Quarter", "length": 1, "singleDay": True, "icon": "first-quarter"},
        {"name": "Waxing Gibbous", "length": span, "icon": "waxing-gibbous"},
        {"name": "Full Moon", "length": 1, "singleDay": True, "icon": "full"},
        {"name": "Waning Gibbous", "length": span, "icon": "waning-gibbous"},
        {"name": "Last Quarter", "length": 1, "singleDay": True, "icon": "last-quarter"},
        {"name": "Waning Crescent", "length": span, "icon": "waning-crescent"},
    ]


# ============================================================
# GREGORIAN
# ============================================================

GREGORIAN: Dict[str, Any] = {
    "id": "gregorian",
    "label": "Gregorian Calendar",
    "year": {"epoch": 1970, "currentYear": 2025, "startDay": 4, "prefix": "", "suffix": " CE"},
    "leapYear": {"rule": "gregorian", "month": "February", "extraDays": 1},
    "time": {"hoursInDay": 24, "minutesInHour": 60, "secondsInMinute": 60},
    "worldTime": {"interpretation": "epoch-based", "epochYear": 1970, "currentYear": 2025},
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
    "moons": [
        {
            "name": "Luna",
            "cycleLength": 29.530588,
            "firstNewMoon": {"year": 2000, "month": 1, "day": 6},
            "phases": _eight_phases(6.3826),
            "color": "#f0f0f0",
        },
    ],
    "seasons": [
        {"name": "Winter", "startMonth": 12, "startDay": 21, "endMonth": 3, "endDay": 19},
        {"name": "Spring", "startMonth": 3, "startDay": 20, "endMonth": 6, "endDay": 20},
        {"name": "Summer", "startMonth": 6, "startDay": 21, "endMonth": 9, "endDay": 21},
        {"name": "Autumn", "startMonth": 9, "startDay": 22, "endMonth": 12, "endDay": 20},
    ],
    "events": [
        {"id": "new-year", "name": "New Year's Day", "recurrence": {"type": "fixed", "month": 1, "day": 1}},
        {
            "id": "leap-day",
            "name": "Leap Day",
            "recurrence": {"type": "fixed", "month": 2, "day": 29, "ifDayNotExists": "lastDay"},
        },
        {
            "id": "labor-day",
            "name": "Labor Day",
            "recurrence": {"type": "ordinal", "month": 9, "occurrence": 1, "weekday": 1},
        },
        {
            "id": "thanksgiving",
            "name": "Thanksgiving",
            "recurrence": {"type": "ordinal", "month": 11, "occurrence": 4, "weekday": 4},
        },
    ],
}


# ============================================================
# GOLARION (Pathfinder 2e, Absalom Reckoning)
# ============================================================

GOLARION_PF2E: Dict[str, Any] = {
    "id": "golarion-pf2e",
    "label": "Golarion Calendar",
    "year": {"epoch": 2700, "currentYear": 4725, "startDay": 4, "prefix": "", "suffix": " AR"},
    "leapYear": {"rule": "custom", "interval": 4, "offset": 0, "month": "Calistril", "extraDays": 1},
    "time": {"hoursInDay": 24, "minutesInHour": 60, "secondsInMinute": 60},
    "months": [
        {"name": "Abadius", "abbreviation": "Aba", "days": 31},
        {"name": "Calistril", "abbreviation": "Cal", "days": 28},
        {"name": "Pharast", "abbreviation": "Pha", "days": 31},
        {"name": "Gozran", "abbreviation": "Goz", "days": 30},
        {"name": "Desnus", "abbreviation": "Des", "days": 31},
        {"name": "Sarenith", "abbreviation": "Sar", "days": 30},
        {"name": "Erastus", "abbreviation": "Era", "days": 31},
        {"name": "Arodus", "abbreviation": "Aro", "days": 31},
        {"name": "Rova", "abbreviation": "Rov", "days": 30},
        {"name": "Lamashan", "abbreviation": "Lam", "days": 31},
        {"name": "Neth", "abbreviation": "Net", "days": 30},
        {"name": "Kuthona", "abbreviation": "Kut", "days": 31},
    ],
    "weekdays": [
        {"name": "Moonday", "abbreviation": "Mo"},
        {"name": "Toilday", "abbreviation": "To"},
        {"name": "Wealday", "abbreviation": "We"},
        {"name": "Oathday", "abbreviation": "Oa"},
        {"name": "Fireday", "abbreviation": "Fi"},
        {"name": "Starday", "abbreviation": "St"},
        {"name": "Sunday", "abbreviation": "Su"},
    ],
    "intercalary": [],
    "moons": [
        {
            "name": "Somal",
            "cycleLength": 29.5,
            "firstNewMoon": {"year": 4700, "month": 1, "day": 8},
            "phases": _eight_phases(6.375),
        },
    ],
    "seasons": [
        {"name": "Winter", "startMonth": 12, "startDay": 21, "endMonth": 3, "endDay": 19},
        {"name": "Spring", "startMonth": 3, "startDay": 20, "endMonth": 6, "endDay": 20},
        {"name": "Summer", "startMonth": 6, "startDay": 21, "endMonth": 9, "endDay": 21},
        {"name": "Autumn", "startMonth": 9, "startDay": 22, "endMonth": 12, "endDay": 20},
    ],
    "events": [
        {"id": "new-year", "name": "New Year", "recurrence": {"type": "fixed", "month": 1, "day": 1}},
        {
            "id": "crystalhue",
            "name": "Crystalhue",
            "recurrence": {"type": "fixed", "month": 12, "day": 21},
            "startTime": "18:00",
            "duration": "6h",
        },
        {
            "id": "first-crusader-day",
            "name": "First Crusader Day",
            "recurrence": {"type": "interval", "intervalYears": 10, "anchorYear": 4710, "month": 8, "day": 6},
        },
        {
            "id": "night-of-the-pale",
            "name": "Night of the Pale",
            "recurrence": {"type": "fixed", "month": 10, "day": 31},
            "visibility": "gm-only",
        },
    ],
    "variants": {
        "absalom-reckoning": {
            "name": "Absalom Reckoning",
            "description": "Standard reckoning used across the Inner Sea.",
            "default": True,
            "overrides": {},
        },
        "imperial-calendar": {
            "name": "Imperial Calendar",
            "description": "Chelish reckoning, 2500 years ahead of Absalom Reckoning.",
            "overrides": {"year": {"epoch": 5200, "currentYear": 7225, "suffix": " IC"}},
        },
        "earth-names": {
            "name": "Earth Names",
            "description": "Golarion dates with familiar month and weekday names.",
            "overrides": {
                "months": {
                    "Abadius": {"name": "January"},
                    "Calistril": {"name": "February"},
                },
                "weekdays": {"Moonday": {"name": "Monday", "abbreviation": "Mon"}},
                "dateFormats": {"short": "{{month}} {{day}}"},
            },
        },
    },
}


# ============================================================
# HARPTOS (Forgotten Realms)
# ============================================================

def _harptos_months() -> List[Dict[str, Any]]:
    names = [
        ("Hammer", "Deepwinter"), ("Alturiak", "The Claw of Winter"), ("Ches", "The Claw of the Sunsets"),
        ("Tarsakh", "The Claw of the Storms"), ("Mirtul", "The Melting"), ("Kythorn", "The Time of Flowers"),
        ("Flamerule", "Summertide"), ("Eleasis", "Highsun"), ("Eleint", "The Fading"),
        ("Marpenoth", "Leaffall"), ("Uktar", "The Rotting"), ("Nightal", "The Drawing Down"),
    ]
    return [{"name": n, "days": 30, "description": d} for n, d in names]


HARPTOS: Dict[str, Any] = {
    "id": "harptos",
    "label": "Calendar of Harptos",
    "year": {"epoch": 0, "currentYear": 1492, "startDay": 0, "prefix": "", "suffix": " DR"},
    "leapYear": {"rule": "custom", "interval": 4, "offset": 0, "extraDays": 0},
    "time": {"hoursInDay": 24, "minutesInHour": 60, "secondsInMinute": 60},
    "months": _harptos_months(),
    "weekdays": [{"name": f"{n}-day"} for n in
                 ("First", "Second", "Third", "Fourth", "Fifth", "Sixth", "Seventh", "Eighth", "Ninth", "Tenth")],
    "intercalary": [
        {"name": "Midwinter", "after": "Hammer", "days": 1, "countsForWeekdays": False},
        {"name": "Greengrass", "after": "Tarsakh", "days": 1, "countsForWeekdays": False},
        {"name": "Midsummer", "after": "Flamerule", "days": 1, "countsForWeekdays": False},
        {"name": "Shieldmeet", "after": "Flamerule", "days": 1, "leapYearOnly": True, "countsForWeekdays": False},
        {"name": "Highharvestide", "after": "Eleint", "days": 1, "countsForWeekdays": False},
        {"name": "Feast of the Moon", "after": "Uktar", "days": 1, "countsForWeekdays": False},
    ],
    "moons": [
        {
            "name": "Selûne",
            "cycleLength": 30.4375,
            "firstNewMoon": {"year": 1372, "month": 1, "day": 1},
            "phases": _eight_phases(6.6),
        },
    ],
    "seasons": [
        {"name": "Winter", "startMonth": 11, "startDay": 1, "endMonth": 2},
        {"name": "Spring", "startMonth": 3, "startDay": 1, "endMonth": 5},
        {"name": "Summer", "startMonth": 6, "startDay": 1, "endMonth": 8},
        {"name": "Autumn", "startMonth": 9, "startDay": 1, "endMonth": 10},
    ],
    "events": [
        {
            "id": "shieldmeet",
            "name": "Shieldmeet Festival",
            "recurrence": {"type": "interval", "intervalYears": 4, "anchorYear": 0, "month": 7, "day": 30},
        },
        {
            "id": "first-tenday",
            "name": "First-day of Ches",
            "recurrence": {"type": "ordinal", "month": 3, "occurrence": 1, "weekday": 0},
        },
    ],
}


ALL_SPECS: Dict[str, Dict[str, Any]] = {
    "gregorian": GREGORIAN,
    "golarion-pf2e": GOLARION_PF2E,
    "harptos": HARPTOS,
}
