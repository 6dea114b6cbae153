"""
worldcal.engines.leap
---------------------
Leap-year families: none, gregorian (4/100/400) and custom
((year - offset) mod interval == 0).
"""

from __future__ import annotations

from typing import List, Optional

from ..core.definition import LeapYearRule


def is_leap_year(rule: LeapYearRule, year: int) -> bool:
    if rule.rule == "none":
        return False
    if rule.rule == "gregorian":
        return (year % 4 == 0 and year % 100 != 0) or year % 400 == 0
    # custom: interval >= 1 is guaranteed by LeapYearRule.__post_init__.
    # Python's % is floored, so years before the offset test correctly.
    return (year - rule.offset) % rule.interval == 0  # type: ignore[operator]


def leap_month_index(rule: LeapYearRule, months: tuple) -> int:
    """
    0-based index of the month that receives extra_days.
    Without a (known) named month the extra days go to the final month of the year.
    """
    if rule.month is not None:
        for i, m in enumerate(months):
            if m.name == rule.month:
                return i
    return len(months) - 1


def month_lengths(rule: LeapYearRule, months: tuple, year: int, *, leap: Optional[bool] = None) -> List[int]:
    out = [m.days for m in months]
    if leap is None:
        leap = is_leap_year(rule, year)
    if leap and rule.rule != "none":
        out[leap_month_index(rule, months)] += rule.extra_days
    return out


def leap_years_between(rule: LeapYearRule, start: int, end: int) -> List[int]:
    """Leap years in [start, end)."""
    return [y for y in range(start, end) if is_leap_year(rule, y)]
