# bubbles/merge.py
"""Server-side folding of a partial ledger into the stored one.

Entries correlate by position only. Pairs are taken with `zip`, so extra
entries on either side are ignored: stored extras keep their history and
incoming extras are dropped.
"""

from __future__ import annotations

import datetime as dt
from typing import Optional, Sequence

from .model import Bubble, Ledger
from .status import Status


def merge_days(stored: Bubble, incoming: Bubble) -> Bubble:
    """`stored` with every day of `incoming` written over it (last write wins)."""
    days = stored.known_days()
    for d, st in incoming.days.items():
        if st is Status.UNKNOWN:
            days.pop(d, None)
        else:
            days[d] = st
    return stored.with_days(days)


def merge(stored: Sequence[Bubble], incoming: Sequence[Bubble]) -> Ledger:
    merged = [merge_days(s, i) for s, i in zip(stored, incoming)]
    merged.extend(b.with_days(b.known_days()) for b in stored[len(merged):])
    return merged


def project_day(ledger: Sequence[Bubble], target: Optional[dt.date]) -> Ledger:
    """Copy of `ledger` whose day maps hold only `target` (or nothing when None)."""
    out: Ledger = []
    for b in ledger:
        st = b.status_on(target) if target is not None else Status.UNKNOWN
        out.append(b.with_days({} if st is Status.UNKNOWN else {target: st}))
    return out


__all__ = ["merge", "merge_days", "project_day"]
