from __future__ import annotations

import argparse
import random
from typing import List

import worldcal


def parse_calendars(s: str) -> List[str]:
    # "gregorian,harptos" -> ["gregorian", "harptos"]
    return [x.strip() for x in s.split(",") if x.strip()]


def roundtrip_test(
    calendar: str,
    N: int,
    start_year: int,
    end_year: int,
    seed: int,
    *,
    max_failures: int,
) -> int:
    """
    Two directions per trial:
      world time -> date -> world time must be the identity (whole seconds);
      date -> day index -> date must be the identity, weekday included.
    """
    random.seed(seed)
    eng = worldcal.get_engine(calendar)
    spd = eng.seconds_per_day
    lo = eng.date_to_world_time(eng.make_date(start_year, 1, 1))
    hi = eng.date_to_world_time(eng.make_date(end_year + 1, 1, 1)) - 1
    failures = 0

    for _ in range(N):
        t0 = random.randint(lo, hi)
        d = eng.world_time_to_date(t0)
        t1 = eng.date_to_world_time(d)
        if t1 != t0:
            failures += 1
            print("\nFAIL (world time)")
            print("calendar:", calendar)
            print("t0:", t0, " date:", d, " back:", t1)
            print("explain:", eng.explain(t0))
            if failures >= max_failures:
                return failures

        n = t0 // spd
        dd = eng.date_from_day_index(n)
        if eng.day_index(dd) != n or eng.normalize(dd) != dd:
            failures += 1
            print("\nFAIL (day index)")
            print("calendar:", calendar)
            print("n:", n, " date:", dd, " normalized:", eng.normalize(dd))
            if failures >= max_failures:
                return failures

    return failures


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Random round-trip tests: world time -> date -> world time.")
    p.add_argument("--calendars", type=str, default="gregorian,golarion-pf2e,harptos",
                   help="Comma-separated calendar list.")
    p.add_argument("--N", type=int, default=2000, help="Trials per calendar.")
    p.add_argument("--start-year", type=int, default=None, help="First year (default: epoch - 500).")
    p.add_argument("--end-year", type=int, default=None, help="Last year (default: epoch + 3000).")
    p.add_argument("--seed", type=int, default=123, help="RNG seed.")
    p.add_argument("--max-failures", type=int, default=5, help="Stop after this many failures per calendar.")
    args = p.parse_args(argv)

    total_fail = 0
    for cal in parse_calendars(args.calendars):
        epoch = worldcal.get_engine(cal).epoch
        y0 = args.start_year if args.start_year is not None else epoch - 500
        y1 = args.end_year if args.end_year is not None else epoch + 3000
        if y1 < y0:
            raise SystemExit("--end-year must be >= --start-year")
        print(f"Testing {cal} ({y0}..{y1}) ...")
        total_fail += roundtrip_test(cal, N=args.N, start_year=y0, end_year=y1, seed=args.seed,
                                     max_failures=args.max_failures)

    if total_fail == 0:
        print("All round-trip tests passed.")
        return 0

    print(f"Round-trip failures: {total_fail}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
