"""Diagnostics package.

- round_trip, pretty_month, year_table: always available, plain-text checks
- moon_drift: optional plot (requires the diagnostics extras: numpy, matplotlib)
"""

__all__ = ["round_trip", "pretty_month", "year_table", "moon_drift"]
