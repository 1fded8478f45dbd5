"""Sync protocol: wire messages and their server-side handlers.

Two round trips, each stateless:

  FetchRequest(day_offset?)  -> FetchResponse(entries)   read-only day projection
  PushRequest(entries)       -> PushResponse()           merge into the store

Any failure is answered with an ErrorResponse; handlers never let a
StoreError escape to the serving loop.
"""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from .codec import ledger_from_obj, ledger_to_obj
from .errors import BubblesError, DecodeError, StoreError
from .merge import merge, project_day
from .model import Ledger
from .store import LedgerStore
from .window import days_before

logger = logging.getLogger(__name__)

JsonDict = Dict[str, Any]


@dataclass(frozen=True)
class FetchRequest:
    """day_offset: None = no days at all, 0 = today, 1 = yesterday, ..."""

    day_offset: Optional[int] = None

    def __post_init__(self) -> None:
        off = self.day_offset
        if off is not None and (isinstance(off, bool) or not isinstance(off, int) or off < 0):
            raise DecodeError(f"day_offset must be a non-negative integer, got {off!r}")

    def target(self, reference_date: dt.date) -> Optional[dt.date]:
        if self.day_offset is None:
            return None
        try:
            return days_before(reference_date, self.day_offset)
        except ValueError as ex:
            raise DecodeError(f"day_offset {self.day_offset} is out of range") from ex

    def to_obj(self) -> JsonDict:
        return {} if self.day_offset is None else {"day_offset": self.day_offset}

    @classmethod
    def from_obj(cls, obj: Any) -> "FetchRequest":
        if not isinstance(obj, dict):
            raise DecodeError("fetch request must be an object")
        return cls(day_offset=obj.get("day_offset"))


@dataclass(frozen=True)
class FetchResponse:
    entries: Ledger

    ok = True

    def to_obj(self) -> JsonDict:
        return {"ok": True, "entries": ledger_to_obj(self.entries)}


@dataclass(frozen=True)
class PushRequest:
    entries: Ledger

    def to_obj(self) -> JsonDict:
        return {"entries": ledger_to_obj(self.entries)}

    @classmethod
    def from_obj(cls, obj: Any) -> "PushRequest":
        # Older clients post the bare entry list.
        if isinstance(obj, dict):
            if "entries" not in obj:
                raise DecodeError("push request is missing 'entries'")
            obj = obj["entries"]
        return cls(entries=ledger_from_obj(obj, label="entries"))


@dataclass(frozen=True)
class PushResponse:
    ok = True

    def to_obj(self) -> JsonDict:
        return {"ok": True}


@dataclass(frozen=True)
class ErrorResponse:
    code: str
    message: str

    ok = False

    def to_obj(self) -> JsonDict:
        return {"ok": False, "error": {"code": self.code, "message": self.message}}

    @classmethod
    def from_exc(cls, ex: BubblesError) -> "ErrorResponse":
        return cls(code=ex.code, message=str(ex))


Response = Union[FetchResponse, PushResponse, ErrorResponse]


def handle_fetch(store: LedgerStore, request: FetchRequest, reference_date: dt.date) -> Union[FetchResponse, ErrorResponse]:
    try:
        target = request.target(reference_date)
    except DecodeError as ex:
        logger.warning(f"fetch rejected: {ex}")
        return ErrorResponse.from_exc(ex)
    try:
        with store.locked():
            ledger = store.load()
    except StoreError as ex:
        logger.error(f"fetch failed: {ex}")
        return ErrorResponse.from_exc(ex)
    logger.info(f"fetch day={target.isoformat() if target else '-'} entries={len(ledger)}")
    return FetchResponse(entries=project_day(ledger, target))


def handle_push(store: LedgerStore, request: PushRequest) -> Union[PushResponse, ErrorResponse]:
    stored_len = 0

    def _fold(stored: Ledger) -> Ledger:
        nonlocal stored_len
        stored_len = len(stored)
        return merge(stored, request.entries)

    try:
        store.update(_fold)
    except StoreError as ex:
        logger.error(f"push failed: {ex}")
        return ErrorResponse.from_exc(ex)

    if stored_len != len(request.entries):
        logger.warning(f"push length mismatch: stored={stored_len} incoming={len(request.entries)}; extras ignored")
    logger.info(f"push merged entries={min(stored_len, len(request.entries))}")
    return PushResponse()


def response_from_obj(obj: Any, *, kind: str) -> Response:
    """Client-side decoding of a server reply; `kind` is "fetch" or "push"."""
    if not isinstance(obj, dict) or not isinstance(obj.get("ok"), bool):
        raise DecodeError(f"{kind} response must be an object with boolean 'ok'")
    if not obj["ok"]:
        err = obj.get("error") if isinstance(obj.get("error"), dict) else {}
        return ErrorResponse(code=str(err.get("code") or "ERROR"), message=str(err.get("message") or ""))
    if kind == "fetch":
        return FetchResponse(entries=ledger_from_obj(obj.get("entries"), label="entries"))
    if kind == "push":
        return PushResponse()
    raise ValueError(f"unknown response kind: {kind!r}")


__all__ = [
    "ErrorResponse",
    "FetchRequest",
    "FetchResponse",
    "PushRequest",
    "PushResponse",
    "Response",
    "handle_fetch",
    "handle_push",
    "response_from_obj",
]
