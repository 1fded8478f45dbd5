# bubbles/status.py
from __future__ import annotations

from enum import Enum
from typing import Dict

from .errors import InvalidToken


class Status(Enum):
    UNKNOWN = "Unknown"
    EMPTY = "Empty"
    HALF_FULL = "HalfFull"
    FULL = "Full"


_GLYPHS: Dict[Status, str] = {
    Status.UNKNOWN: "◌",
    Status.EMPTY: "○",
    Status.HALF_FULL: "◐",
    Status.FULL: "●",
}

_TOKENS: Dict[Status, str] = {
    Status.UNKNOWN: "?",
    Status.EMPTY: "o",
    Status.HALF_FULL: "/",
    Status.FULL: "x",
}

_BY_TOKEN: Dict[str, Status] = {tok: st for st, tok in _TOKENS.items()}


def parse(token: str) -> Status:
    """Parse a single input token (`?`, `o`, `/`, `x`) into a Status."""
    st = _BY_TOKEN.get(token) if isinstance(token, str) else None
    if st is None:
        raise InvalidToken(f"Bad bubble token: {token!r} (expected one of ? o / x)")
    return st


def parse_many(tokens: str) -> list[Status]:
    return [parse(ch) for ch in tokens]


def display(status: Status) -> str:
    return _GLYPHS[status]


def token_for(status: Status) -> str:
    return _TOKENS[status]


__all__ = ["Status", "display", "parse", "parse_many", "token_for"]
