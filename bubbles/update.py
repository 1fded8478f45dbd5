# bubbles/update.py
from __future__ import annotations

import datetime as dt
from typing import List, Sequence

from .errors import InputLengthError
from .model import Bubble
from .status import Status, parse_many
from .window import last_occurrence_of_weekday


def apply_statuses(ledger: Sequence[Bubble], day: dt.date, statuses: Sequence[Status]) -> None:
    """Set `day` on every entry from `statuses`, entry i <- statuses[i]."""
    if len(statuses) != len(ledger):
        raise InputLengthError(f"got {len(statuses)} statuses for {len(ledger)} bubbles")
    for bubble, st in zip(ledger, statuses):
        bubble.set_status(day, st)


def apply_tokens(ledger: Sequence[Bubble], day: dt.date, tokens: str) -> List[Status]:
    statuses = parse_many(tokens)
    apply_statuses(ledger, day, statuses)
    return statuses


def apply_weekly_update(
    ledger: Sequence[Bubble],
    reference_date: dt.date,
    weekday: int,
    tokens: str,
) -> dt.date:
    """Bulk-enter one weekday of the current rolling week; returns the resolved date.

    `tokens` holds one status token per entry, e.g. "xo/?x".
    """
    day = last_occurrence_of_weekday(reference_date, weekday)
    apply_tokens(ledger, day, tokens)
    return day


def set_day(ledger: Sequence[Bubble], index: int, day: dt.date, status: Status) -> None:
    if not 0 <= index < len(ledger):
        raise IndexError(f"bubble index {index} out of range (0..{len(ledger) - 1})")
    ledger[index].set_status(day, status)


__all__ = ["apply_statuses", "apply_tokens", "apply_weekly_update", "set_day"]
