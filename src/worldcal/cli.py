from __future__ import annotations

import argparse
import importlib
import inspect
import logging
import re
import sys


_NUMBER_RE = re.compile(r"^-?\d+(\.\d+)?$")


def _run_module_main(modpath: str, argv: list[str]) -> int:
    """
    Import module and run its main().

    Supports:
      - main(argv: list[str] | None = None) -> int|None
      - main() -> int|None
    """
    mod = importlib.import_module(modpath)
    if not hasattr(mod, "main"):
        raise SystemExit(f"Module {modpath} has no main()")
    fn = getattr(mod, "main")

    sig = inspect.signature(fn)
    if len(sig.parameters) == 0:
        rv = fn()
    else:
        rv = fn(argv)
    return int(rv or 0)


def _number(s: str):
    return float(s) if "." in s else int(s)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def cmd_date(argv: list[str]) -> int:
    import worldcal

    p = argparse.ArgumentParser(prog="worldcal date", description="World time -> calendar date")
    p.add_argument("world_time", help="seconds (may be negative or fractional)")
    p.add_argument("--calendar", default=None, help="calendar id, e.g. golarion-pf2e(imperial-calendar)")
    p.add_argument("--creation-ts", type=float, default=None, help="world creation as Unix seconds")
    p.add_argument("--attr", action="append", default=[], help="attribute name (repeatable)")
    p.add_argument("--explain", action="store_true")
    args = p.parse_args(argv)

    wt = _number(args.world_time)
    info = worldcal.day_info(
        wt,
        calendar=args.calendar,
        attributes=tuple(args.attr),
        creation_timestamp=args.creation_ts,
    )
    print(info)
    if args.explain:
        for k, v in worldcal.explain(wt, calendar=args.calendar, creation_timestamp=args.creation_ts).items():
            print(f"  {k:24s} {v}")
    return 0


def cmd_time(argv: list[str]) -> int:
    import worldcal

    p = argparse.ArgumentParser(prog="worldcal time", description="Calendar date -> world time")
    p.add_argument("year", type=int)
    p.add_argument("month", type=int)
    p.add_argument("day", type=int)
    p.add_argument("--hms", type=int, nargs=3, metavar=("H", "M", "S"), default=None)
    p.add_argument("--intercalary", default=None, help="intercalary block name")
    p.add_argument("--calendar", default=None)
    p.add_argument("--creation-ts", type=float, default=None)
    args = p.parse_args(argv)

    eng = worldcal.get_engine(args.calendar)
    t = worldcal.TimeOfDay(*args.hms) if args.hms else None
    try:
        d = eng.make_date(args.year, args.month, args.day, time=t, intercalary=args.intercalary)
    except worldcal.DateOutOfRange as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    print(eng.date_to_world_time(d, creation_timestamp=args.creation_ts))
    return 0


def cmd_year(argv: list[str]) -> int:
    import worldcal

    p = argparse.ArgumentParser(prog="worldcal year", description="Year structure: months, intercalary days, leap status")
    p.add_argument("year", type=int)
    p.add_argument("--calendar", default=None)
    args = p.parse_args(argv)

    eng = worldcal.get_engine(args.calendar)
    Y = args.year
    lay = eng.layout(Y)
    print(f"{eng.id}  year {Y}  leap={lay.leap}  days={lay.length}  weekday-days={lay.weekday_length}")
    for seg in lay.segments:
        if seg.intercalary is not None:
            ic = seg.intercalary
            flag = "" if ic.counts_for_weekdays else "  (no weekday)"
            print(f"   * {ic.name:20s} {seg.length:3d}{flag}")
        else:
            m = eng.definition.months[seg.month - 1]
            wd = eng.calculate_weekday(Y, seg.month, 1)
            first = eng.definition.weekdays[wd].name if wd is not None else "-"
            print(f"  {seg.month:2d} {m.name:20s} {seg.length:3d}  starts {first}")
    return 0


def cmd_events(argv: list[str]) -> int:
    import worldcal

    p = argparse.ArgumentParser(prog="worldcal events", description="Event occurrences in a year")
    p.add_argument("year", type=int)
    p.add_argument("--calendar", default=None)
    p.add_argument("--hide-gm", action="store_true", help="drop gm-only events")
    args = p.parse_args(argv)

    eng = worldcal.get_engine(args.calendar)
    for occ in eng.events.events_in_year(args.year, include_hidden=not args.hide_gm):
        print(f"  {str(occ.date):24s} {occ.event_id:24s} {occ.event.name}")
    return 0


def cmd_list(argv: list[str]) -> int:
    import worldcal

    p = argparse.ArgumentParser(prog="worldcal list", description="List registered calendars")
    p.parse_args(argv)
    active = worldcal.active_calendar().id
    for cid in worldcal.list_calendars():
        mark = "*" if cid == active else " "
        print(f"{mark} {cid}")
    return 0


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    verbose = "--verbose" in argv or "-v" in argv
    argv = [a for a in argv if a not in ("--verbose", "-v")]
    _configure_logging(verbose)

    # Shortcut: `worldcal <world_time> ...`
    if argv and _NUMBER_RE.match(argv[0]):
        return cmd_date(argv)

    p = argparse.ArgumentParser(prog="worldcal", description="Fantasy calendar engine CLI. Use -v/--verbose for debug logs.")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("date", help="World time -> calendar date", add_help=False)
    sub.add_parser("time", help="Calendar date -> world time", add_help=False)
    sub.add_parser("year", help="Print the structure of a year", add_help=False)
    sub.add_parser("events", help="List event occurrences in a year", add_help=False)
    sub.add_parser("list", help="List registered calendars", add_help=False)

    p_diag = sub.add_parser("diag", help="Diagnostics tools")
    p_diag.add_argument(
        "tool",
        choices=["round-trip", "pretty-month", "year-table", "moon-drift"],
        help="Which diagnostic to run",
    )

    args, rest = p.parse_known_args(argv)

    commands = {
        "date": cmd_date,
        "time": cmd_time,
        "year": cmd_year,
        "events": cmd_events,
        "list": cmd_list,
    }
    if args.cmd in commands:
        return commands[args.cmd](rest)

    if args.cmd == "diag":
        tool_map = {
            "round-trip": "worldcal.diagnostics.round_trip",
            "pretty-month": "worldcal.diagnostics.pretty_month",
            "year-table": "worldcal.diagnostics.year_table",
            "moon-drift": "worldcal.diagnostics.moon_drift",
        }
        return _run_module_main(tool_map[args.tool], rest)

    raise RuntimeError("unreachable")


if __name__ == "__main__":
    raise SystemExit(main())
