from __future__ import annotations

import argparse
from typing import List

import worldcal


def parse_calendars(arg: str) -> List[str]:
    return [x.strip() for x in arg.split(",") if x.strip()]


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(
        description="Print a year table: length, leap flag and weekday of the first day, per calendar."
    )
    p.add_argument("--from-year", type=int, default=None)
    p.add_argument("--to-year", type=int, default=None)
    p.add_argument("--calendars", type=str, default="gregorian,golarion-pf2e,harptos")
    args = p.parse_args(argv)

    cals = parse_calendars(args.calendars)
    engines = [worldcal.get_engine(c) for c in cals]

    Y0 = args.from_year if args.from_year is not None else engines[0].definition.year.current_year
    Y1 = args.to_year if args.to_year is not None else Y0 + 10
    if Y1 < Y0:
        raise SystemExit("--to-year must be >= --from-year")

    colw = [max(18, len(c)) for c in cals]
    print("Year   " + "  ".join(c.ljust(w) for c, w in zip(cals, colw)))
    print("-" * (7 + sum(colw) + 2 * (len(colw) - 1)))
    for Y in range(Y0, Y1 + 1):
        cells = []
        for eng, w in zip(engines, colw):
            wd = eng.calculate_weekday(Y, 1, 1)
            first = (eng.definition.weekdays[wd].abbreviation or eng.definition.weekdays[wd].name) if wd is not None else "-"
            leap = "L" if eng.is_leap_year(Y) else " "
            cells.append(f"{eng.year_length(Y):4d} {leap} {first}".ljust(w))
        print(f"{Y:<6d} " + "  ".join(cells))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
