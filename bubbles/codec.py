"""Ledger (de)serialization for the ledger file and the sync wire.

Shape:
  [ {"name": str, "description": str, "brief": str,
     "days": {"YYYY-MM-DD": "?"|"o"|"/"|"x", ...}}, ... ]

Reads also accept the legacy variant names ("Unknown", "Empty", "HalfFull",
"Full") for day values. Writes always use tokens.
"""

from __future__ import annotations

import datetime as dt
from typing import Any, Dict, List, Sequence

import orjson

from .errors import DecodeError, InvalidToken
from .model import Bubble, Ledger
from .status import Status, parse, token_for
from .util.timeparse import parse_date_yyyy_mm_dd

_BY_NAME: Dict[str, Status] = {st.value: st for st in Status}


def _require(cond: bool, msg: str, errs: List[str]) -> None:
    if not cond:
        errs.append(msg)


def _day_key(k: Any) -> dt.date:
    # Keys must round-trip exactly, so no two keys name the same day.
    d = parse_date_yyyy_mm_dd(k)
    if d.isoformat() != k:
        raise ValueError(f"not a YYYY-MM-DD date: {k!r}")
    return d


def _status_from_wire(v: Any) -> Status:
    if isinstance(v, str) and v in _BY_NAME:
        return _BY_NAME[v]
    return parse(v)


def validate_ledger_obj(obj: Any, *, label: str = "ledger") -> List[str]:
    """Structural check of a decoded JSON value; returns a list of problems."""
    if not isinstance(obj, list):
        return [f"{label}: must be a list of entries, got {type(obj).__name__}"]

    errs: List[str] = []
    for i, e in enumerate(obj):
        if not isinstance(e, dict):
            errs.append(f"{label}[{i}] must be an object")
            continue
        _require(isinstance(e.get("name"), str), f"{label}[{i}].name must be a string", errs)
        for k in ("description", "brief"):
            if k in e:
                _require(isinstance(e[k], str), f"{label}[{i}].{k} must be a string", errs)
        days = e.get("days", {})
        if not isinstance(days, dict):
            errs.append(f"{label}[{i}].days must be an object")
            continue
        for k, v in days.items():
            try:
                _day_key(k)
            except (TypeError, ValueError):
                errs.append(f"{label}[{i}].days has non-ISO date key: {k!r}")
                continue
            try:
                _status_from_wire(v)
            except InvalidToken:
                errs.append(f"{label}[{i}].days[{k}] has invalid status: {v!r}")
    return errs


def ledger_from_obj(obj: Any, *, label: str = "ledger") -> Ledger:
    errs = validate_ledger_obj(obj, label=label)
    if errs:
        raise DecodeError(errs[0])

    out: Ledger = []
    for e in obj:
        days = {_day_key(k): _status_from_wire(v) for k, v in (e.get("days") or {}).items()}
        out.append(
            Bubble(
                name=e["name"],
                description=e.get("description", ""),
                brief=e.get("brief", ""),
                days=days,
            )
        )
    return out


def ledger_to_obj(ledger: Sequence[Bubble]) -> List[Dict[str, Any]]:
    return [
        {
            "name": b.name,
            "description": b.description,
            "brief": b.brief,
            "days": {d.isoformat(): token_for(s) for d, s in sorted(b.days.items())},
        }
        for b in ledger
    ]


def loads_json(data: bytes | str, *, label: str = "payload") -> Any:
    try:
        return orjson.loads(data)
    except orjson.JSONDecodeError as ex:
        raise DecodeError(f"{label}: invalid JSON: {ex}") from ex


def dumps_json(obj: Any, *, pretty: bool = False) -> bytes:
    opts = orjson.OPT_INDENT_2 if pretty else 0
    return orjson.dumps(obj, option=opts)


def decode_ledger(data: bytes | str, *, label: str = "ledger") -> Ledger:
    return ledger_from_obj(loads_json(data, label=label), label=label)


def encode_ledger(ledger: Sequence[Bubble], *, pretty: bool = False) -> bytes:
    return dumps_json(ledger_to_obj(ledger), pretty=pretty)


__all__ = [
    "decode_ledger",
    "dumps_json",
    "encode_ledger",
    "ledger_from_obj",
    "ledger_to_obj",
    "loads_json",
    "validate_ledger_obj",
]
