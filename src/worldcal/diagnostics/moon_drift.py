#!/usr/bin/env python3
from __future__ import annotations

import argparse
from typing import List, Optional

import worldcal


def _need_numpy():
    try:
        import numpy as np
        return np
    except ImportError as e:
        raise RuntimeError('Need numpy. Install: pip install "worldcal[diagnostics]"') from e


def _need_matplotlib():
    try:
        import matplotlib.pyplot as plt
        return plt
    except ImportError as e:
        raise RuntimeError('Need matplotlib. Install: pip install "worldcal[diagnostics]"') from e


def new_moon_offsets(np, eng, moon, year_start: int, year_end: int):
    """
    Cycle offset (days since new moon) on the first day of every month.
    With an exact Fraction cycle the series is a sawtooth with no secular drift.
    """
    xs, ys = [], []
    for Y in range(year_start, year_end + 1):
        for M in range(1, eng.months_in_year + 1):
            d = eng.make_date(Y, M, 1)
            xs.append(eng.day_index(d))
            ys.append(float(eng.moons.cycle_offset(moon, d)))
    return np.array(xs, dtype=float), np.array(ys, dtype=float)


def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(description="Plot a moon's phase offset over many years to check for drift.")
    p.add_argument("--calendar", default=None)
    p.add_argument("--moon", default="0", help="moon name or index (default: first moon)")
    p.add_argument("--year-start", type=int, default=None)
    p.add_argument("--years", type=int, default=50)
    p.add_argument("--out-png", default="moon_drift.png")
    args = p.parse_args(argv)

    np = _need_numpy()
    plt = _need_matplotlib()

    eng = worldcal.get_engine(args.calendar)
    if not eng.definition.moons:
        raise SystemExit(f"Calendar {eng.id} has no moons")
    moon = int(args.moon) if args.moon.isdigit() else args.moon
    md = eng.definition.moon(moon)

    y0 = args.year_start if args.year_start is not None else eng.definition.year.current_year
    xs, ys = new_moon_offsets(np, eng, md, y0, y0 + args.years - 1)

    # expected sawtooth from the mean cycle
    cycle = float(md.cycle_length)
    expected = np.mod(ys[0] + (xs - xs[0]), cycle)
    resid = ys - expected
    print(f"{eng.id} / {md.name}: {len(xs)} samples, max |residual| = {np.max(np.abs(resid)):.3e} days")

    fig, axs = plt.subplots(2, 1, figsize=(12, 7), sharex=True)
    axs[0].plot(xs, ys, lw=0.8, color="0.2")
    axs[0].set_ylabel("days since new moon")
    axs[0].set_title(f"{md.name} phase offset on the first day of each month ({eng.id})")
    axs[0].grid(True, alpha=0.3)

    axs[1].scatter(xs, resid, s=2, color="tab:blue")
    axs[1].set_ylabel("residual (days)")
    axs[1].set_xlabel("day index")
    axs[1].grid(True, alpha=0.3)

    fig.tight_layout()
    fig.savefig(args.out_png, dpi=150)
    print(f"Saved {args.out_png}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
