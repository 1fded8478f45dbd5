# bubbles/model.py
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .errors import MalformedBrief
from .status import Status, display


@dataclass
class Bubble:
    """One tracked habit and its date-keyed status history.

    An absent day is Unknown. A stored ledger never keeps Status.UNKNOWN values;
    an explicit UNKNOWN only appears in pushed data, where it clears that day.
    """

    name: str
    description: str = ""
    brief: str = ""
    days: Dict[dt.date, Status] = field(default_factory=dict)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Bubble):
            return NotImplemented
        return (
            (self.name, self.description, self.brief) == (other.name, other.description, other.brief)
            and self.known_days() == other.known_days()
        )

    def known_days(self) -> Dict[dt.date, Status]:
        return {d: s for d, s in self.days.items() if s is not Status.UNKNOWN}

    def status_on(self, day: dt.date) -> Status:
        return self.days.get(day, Status.UNKNOWN)

    def set_status(self, day: dt.date, status: Status) -> None:
        if status is Status.UNKNOWN:
            self.days.pop(day, None)
        else:
            self.days[day] = status

    def stage(self, day: dt.date, status: Status) -> None:
        """Record `status` verbatim, keeping UNKNOWN so a push clears that day remotely."""
        self.days[day] = status

    def with_days(self, days: Dict[dt.date, Status]) -> "Bubble":
        return replace(self, days=dict(days))

    def make_row(self, days: Sequence[dt.date], *, with_brief: bool = True) -> List[str]:
        row = [self.name]
        if with_brief:
            row.append(self.brief)
        row.extend(display(self.status_on(d)) for d in days)
        return row


# Position in the list is the entry's identity everywhere (merge, grid, bulk update).
Ledger = List[Bubble]


SEED_NAMES: Tuple[str, ...] = (
    "Review",
    "Sleep",
    "Water",
    "Diet",
    "Stretch",
    "Walk",
    "Clean",
    "Exercise",
    "Breath",
    "Writing",
)


def seed_ledger(names: Optional[Iterable[str]] = None) -> Ledger:
    return [Bubble(name=n) for n in (SEED_NAMES if names is None else names)]


def copy_ledger(ledger: Sequence[Bubble]) -> Ledger:
    return [b.with_days(b.days) for b in ledger]


def normalize_ledger(ledger: Sequence[Bubble]) -> Ledger:
    return [b.with_days(b.known_days()) for b in ledger]


def split_brief(brief: str) -> Tuple[str, str]:
    """Split a brief into its (front, back) pair.

    A brief is exactly two `/`-separated segments, e.g. "8h/in bed by 23:00".
    """
    parts = brief.split("/")
    if len(parts) != 2:
        raise MalformedBrief(f"brief must have exactly 2 '/'-separated segments, got {len(parts)}: {brief!r}")
    return parts[0], parts[1]


def brief_ok(brief: str) -> bool:
    try:
        split_brief(brief)
    except MalformedBrief:
        return False
    return True


__all__ = [
    "Bubble",
    "Ledger",
    "SEED_NAMES",
    "brief_ok",
    "copy_ledger",
    "normalize_ledger",
    "seed_ledger",
    "split_brief",
]
