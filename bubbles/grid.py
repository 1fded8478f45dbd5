# bubbles/grid.py
"""Table rows for the CLI views (rendering itself lives in bubbles.cli)."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .errors import MalformedBrief
from .model import Bubble, split_brief
from .status import Status


def grid_header(days: Sequence[dt.date], *, with_brief: bool = True) -> List[str]:
    cols = ["Tasks"]
    if with_brief:
        cols.append("Brief")
    cols.extend(d.strftime("%a\n%m/%d") for d in days)
    return cols


def grid_rows(ledger: Sequence[Bubble], days: Sequence[dt.date], *, with_brief: bool = True) -> List[List[str]]:
    return [b.make_row(days, with_brief=with_brief) for b in ledger]


@dataclass(frozen=True)
class ExplainRow:
    name: str
    brief: str
    description: str
    malformed: bool = False


def explain_rows(ledger: Sequence[Bubble]) -> List[ExplainRow]:
    """Rows for the explain view with briefs aligned on their `/`.

    Entries whose brief is not a two-segment pair are returned unpadded with
    `malformed=True`.
    """
    pairs: List[Optional[Tuple[str, str]]] = []
    for b in ledger:
        try:
            pairs.append(split_brief(b.brief))
        except MalformedBrief:
            pairs.append(None)

    ok = [p for p in pairs if p is not None]
    front_w = max((len(f) for f, _ in ok), default=0)
    back_w = max((len(k) for _, k in ok), default=0)

    out: List[ExplainRow] = []
    for b, p in zip(ledger, pairs):
        if p is None:
            out.append(ExplainRow(b.name, b.brief, b.description, malformed=True))
            continue
        front, back = p
        out.append(ExplainRow(b.name, f"{front.rjust(front_w)}/{back.ljust(back_w)}", b.description))
    return out


def count_unknown(ledger: Sequence[Bubble], day: dt.date) -> int:
    return sum(1 for b in ledger if b.status_on(day) is Status.UNKNOWN)


__all__ = ["ExplainRow", "count_unknown", "explain_rows", "grid_header", "grid_rows"]
