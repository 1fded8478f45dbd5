# bubbles/util/timeparse.py
from __future__ import annotations

import datetime as dt
from typing import Dict

_WEEKDAYS: Dict[str, int] = {}
for _i, _name in enumerate(("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")):
    _WEEKDAYS[_name] = _i
    _WEEKDAYS[_name[:3]] = _i
_WEEKDAYS.update({"tues": 1, "wednes": 2, "thur": 3, "thurs": 3})


def parse_date_yyyy_mm_dd(s: str) -> dt.date:
    return dt.datetime.strptime(s, "%Y-%m-%d").date()


def parse_weekday(s: str) -> int:
    """Weekday name or abbreviation -> date.weekday() number (Monday=0)."""
    key = str(s or "").strip().lower()
    if key not in _WEEKDAYS:
        raise ValueError(f"Invalid weekday: {s!r} (expected e.g. mon, tue, wednesday)")
    return _WEEKDAYS[key]


def parse_day_offset(s: str) -> int:
    """Non-negative day offset: 0 = today, 1 = yesterday, ..."""
    try:
        v = int(str(s).strip())
    except ValueError:
        raise ValueError(f"Invalid day offset: {s!r}") from None
    if v < 0:
        raise ValueError(f"Day offset must be >= 0, got {v}")
    return v
