from __future__ import annotations

import argparse

import worldcal


def cell(top: str, bot: str, w: int = 6) -> tuple[str, str]:
    return (top[:w].ljust(w), bot[:w].ljust(w))


def dow_header(eng, w: int = 6) -> str:
    names = [(wd.abbreviation or wd.name)[:w].ljust(w) for wd in eng.definition.weekdays]
    return " ".join(names).rstrip()


def print_grid(title: str, header: str, weeks: list[list[tuple[str, str]]]) -> None:
    print(title)
    print(header)
    print("-" * len(header))
    for wk in weeks:
        print(" ".join(c[0] for c in wk))
        print(" ".join(c[1] for c in wk))
    print()


def month_calendar(calendar: str | None, Y: int, M: int) -> None:
    """Weekday grid of one month; the bottom line shows moon phase and event markers."""
    eng = worldcal.get_engine(calendar)
    n = eng.weekday_count or 7
    mlen = eng.month_length(M, Y)

    days = []
    for d in range(1, mlen + 1):
        date = eng.make_date(Y, M, d)
        bot = ""
        if eng.definition.moons:
            ph = eng.phase_at(0, date)
            bot = str(ph.phase_index) + "".join(w[0] for w in ph.phase.name.split())
        if eng.occurrences_on_date(date):
            bot = (bot + " *").strip()
        days.append((date, f"{d:2d}", bot))

    weeks: list[list[tuple[str, str]]] = []
    wk: list[tuple[str, str]] = []
    first = days[0][0].weekday
    pad = first if first is not None else 0
    for _ in range(pad):
        wk.append(cell("", ""))
    for _, top, bot in days:
        wk.append(cell(top, bot))
        if len(wk) == n:
            weeks.append(wk)
            wk = []
    if wk:
        while len(wk) < n:
            wk.append(cell("", ""))
        weeks.append(wk)

    name = eng.definition.months[M - 1].name
    title = f"{eng.id}  {name} {Y}  ({mlen} days)"
    for ic in eng.intercalary_before(M, Y):
        print(f"  - {ic.name} ({ic.days} day{'s' if ic.days != 1 else ''})")
    print_grid(title, dow_header(eng), weeks)

    after = eng.intercalary_after(M, Y)
    for ic in after:
        print(f"  + {ic.name} ({ic.days} day{'s' if ic.days != 1 else ''})")
    if after:
        print()


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Print a month grid with weekday columns, moon phases and event markers.")
    p.add_argument("--calendar", default=None)
    p.add_argument("--month", nargs=2, type=int, metavar=("Y", "M"),
                   help="Month to print: Y M (default: first month of the calendar's current year)")
    args = p.parse_args(argv)

    if args.month:
        Y, M = args.month
    else:
        Y, M = worldcal.get_engine(args.calendar).definition.year.current_year, 1
    month_calendar(args.calendar, Y, M)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
