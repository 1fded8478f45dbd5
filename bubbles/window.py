# bubbles/window.py
"""Date windows for the weekly grid and bulk entry.

Both functions are clock-free: callers pass the reference date (normally
`bubbles.util.tz.today_date(...)` read once at the entry point).
"""

from __future__ import annotations

import datetime as dt
from typing import List

from .errors import InvariantViolation

WEEK_DAYS = 7


def days_before(reference_date: dt.date, days: int) -> dt.date:
    """`reference_date - days`; ValueError when that leaves the representable date range."""
    try:
        return reference_date - dt.timedelta(days=days)
    except OverflowError:
        raise ValueError(f"{days} days before {reference_date} is out of range") from None


def rolling_week(reference_date: dt.date, offset_days: int = 0) -> List[dt.date]:
    """The 7 consecutive dates ending at `reference_date - offset_days`, oldest first."""
    if offset_days < 0:
        raise ValueError(f"offset_days must be >= 0, got {offset_days}")
    anchor = days_before(reference_date, offset_days)
    first = days_before(anchor, WEEK_DAYS - 1)
    return [first + dt.timedelta(days=i) for i in range(WEEK_DAYS)]


def last_occurrence_of_weekday(reference_date: dt.date, target_weekday: int) -> dt.date:
    """The date in [reference_date-6, reference_date] whose weekday() is `target_weekday`.

    `target_weekday` follows `datetime.date.weekday()` (Monday=0 .. Sunday=6).
    """
    if not 0 <= target_weekday <= 6:
        raise ValueError(f"weekday must be in 0..6, got {target_weekday}")
    hits = [d for d in rolling_week(reference_date) if d.weekday() == target_weekday]
    if len(hits) != 1:
        raise InvariantViolation(
            f"expected exactly one {target_weekday} in week ending {reference_date}, found {len(hits)}"
        )
    return hits[0]


__all__ = ["WEEK_DAYS", "days_before", "last_occurrence_of_weekday", "rolling_week"]
