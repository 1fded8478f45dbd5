# bubbles/util/tz.py
"""What "today" means: BUBBLES_TZ / --tz is "local", "UTC", an IANA name or "+HH:MM"."""

from __future__ import annotations

import datetime as dt
import os
import re
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

TZ_ENV = "BUBBLES_TZ"

_ALIASES = {"": "local", "local": "local", "system": "local", "utc": "UTC", "z": "UTC", "gmt": "UTC"}
_OFFSET_RE = re.compile(r"^([+-])(\d{2}):?(\d{2})$")


def normalize_tz_name(name: Optional[str]) -> str:
    s = str(name or "").strip()
    return _ALIASES.get(s.lower(), s)


def resolve_tz(name: Optional[str]) -> dt.tzinfo:
    """Raises ValueError for names that are neither an alias, an offset nor a known zone."""
    tz_name = normalize_tz_name(name)
    if tz_name == "UTC":
        return dt.timezone.utc
    if tz_name == "local":
        return dt.datetime.now().astimezone().tzinfo or dt.timezone.utc

    m = _OFFSET_RE.match(tz_name)
    if m:
        sign, hh, mm = m.group(1), int(m.group(2)), int(m.group(3))
        if hh > 23 or mm > 59:
            raise ValueError(f"Invalid timezone offset: {tz_name!r}")
        minutes = hh * 60 + mm
        return dt.timezone(dt.timedelta(minutes=-minutes if sign == "-" else minutes))

    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError, OSError) as ex:
        raise ValueError(f"Invalid timezone identifier: {tz_name!r}") from ex


def default_tz_name() -> str:
    return normalize_tz_name(os.getenv(TZ_ENV, "local"))


def today_date(tz: dt.tzinfo) -> dt.date:
    """The only place the wall clock is read; callers pass the result down."""
    return dt.datetime.now(tz=tz).date()
