"""bubbles.api

Stable *library* entrypoint for the habit ledger.

Policy:
  - Only names listed in __all__ are considered public API.
  - Everything else is internal and may change without notice.
"""

from __future__ import annotations

from pathlib import Path
from typing import Union

from bubbles.codec import decode_ledger, encode_ledger
from bubbles.errors import (
    BubblesError,
    DecodeError,
    InputLengthError,
    InvalidToken,
    InvariantViolation,
    MalformedBrief,
    StoreError,
)
from bubbles.grid import count_unknown, explain_rows, grid_header, grid_rows
from bubbles.merge import merge, project_day
from bubbles.model import Bubble, Ledger, seed_ledger, split_brief
from bubbles.protocol import (
    ErrorResponse,
    FetchRequest,
    FetchResponse,
    PushRequest,
    PushResponse,
    handle_fetch,
    handle_push,
)
from bubbles.status import Status, display, parse, token_for
from bubbles.store import LedgerStore
from bubbles.update import apply_weekly_update, set_day
from bubbles.window import last_occurrence_of_weekday, rolling_week

JsonPath = Union[str, Path]


def load_ledger(path: JsonPath) -> Ledger:
    """Read a ledger file (raises StoreError when missing or corrupt)."""
    return LedgerStore(path).load()


def save_ledger(path: JsonPath, ledger: Ledger) -> None:
    LedgerStore(path).save(ledger)


# --- Public API exports (locked by contract tests) ------------------------
# Keep changes intentional and reviewable.
_PUBLIC_EXPORTS = (
    "Bubble",
    "BubblesError",
    "DecodeError",
    "ErrorResponse",
    "FetchRequest",
    "FetchResponse",
    "InputLengthError",
    "InvalidToken",
    "InvariantViolation",
    "Ledger",
    "LedgerStore",
    "MalformedBrief",
    "PushRequest",
    "PushResponse",
    "Status",
    "StoreError",
    "apply_weekly_update",
    "count_unknown",
    "decode_ledger",
    "display",
    "encode_ledger",
    "explain_rows",
    "grid_header",
    "grid_rows",
    "handle_fetch",
    "handle_push",
    "last_occurrence_of_weekday",
    "load_ledger",
    "merge",
    "parse",
    "project_day",
    "rolling_week",
    "save_ledger",
    "seed_ledger",
    "set_day",
    "split_brief",
    "token_for",
)

__all__ = [n for n in _PUBLIC_EXPORTS if n in globals()]
# --- /Public API exports --------------------------------------------------
