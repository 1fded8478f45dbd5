#!/usr/bin/env python3
"""Sync client: fetch one day from a bubbles server, edit it, push it back."""

from __future__ import annotations

import argparse
import datetime as dt
import os
import time
from typing import Any, List, Optional
from urllib import error, request

from rich import box
from rich.console import Console
from rich.table import Table

from bubbles.codec import dumps_json, loads_json
from bubbles.errors import BubblesError, DecodeError, InputLengthError, TransportError
from bubbles.model import Bubble, Ledger
from bubbles.protocol import ErrorResponse, FetchRequest, FetchResponse, PushRequest, response_from_obj
from bubbles.status import Status, display, parse_many
from bubbles.util.console import eprint, obs_enabled
from bubbles.util.timeparse import parse_date_yyyy_mm_dd
from bubbles.util.tz import default_tz_name, resolve_tz, today_date

DEFAULT_URL = "http://127.0.0.1:54438"

console = Console(highlight=False)


def _timeout_s() -> float:
    raw = (os.getenv("BUBBLES_HTTP_TIMEOUT_S", "30") or "").strip()
    try:
        v = float(raw)
        if v > 0:
            return v
    except ValueError:
        pass
    return 30.0


def _call(url: str, *, data: Optional[bytes] = None, timeout: Optional[float] = None) -> Any:
    req = request.Request(url, data=data, method="POST" if data is not None else "GET")
    if data is not None:
        req.add_header("Content-Type", "application/json")
    t0 = time.monotonic()
    try:
        with request.urlopen(req, timeout=timeout or _timeout_s()) as resp:
            body = resp.read()
    except error.HTTPError as e:
        # Error replies still carry a JSON body describing the failure.
        body = e.read()
        if not body:
            raise TransportError(f"HTTP {e.code} from {url}") from e
    except (error.URLError, OSError) as e:
        raise TransportError(f"Cannot reach {url}: {e}") from e

    if obs_enabled():
        eprint(f"[bubbles.sync] {req.get_method()} {url} ms={int((time.monotonic() - t0) * 1000)} bytes={len(body)}")
    return loads_json(body, label="response")


def _raise_on_error(resp: Any) -> None:
    if isinstance(resp, ErrorResponse):
        raise TransportError(f"server error {resp.code}: {resp.message}")


def fetch(base_url: str, req: FetchRequest, *, timeout: Optional[float] = None) -> Ledger:
    url = base_url.rstrip("/") + "/bubbles/get"
    if req.day_offset is not None:
        url += f"/{req.day_offset}"
    resp = response_from_obj(_call(url, timeout=timeout), kind="fetch")
    _raise_on_error(resp)
    assert isinstance(resp, FetchResponse)
    return resp.entries


def push(base_url: str, req: PushRequest, *, timeout: Optional[float] = None) -> None:
    url = base_url.rstrip("/") + "/bubbles/set"
    resp = response_from_obj(_call(url, data=dumps_json(req.to_obj()), timeout=timeout), kind="push")
    _raise_on_error(resp)


def stage_tokens(ledger: List[Bubble], day: dt.date, tokens: str) -> None:
    """Stage one status per entry for `day`; `?` is sent so it clears the day remotely."""
    statuses = parse_many(tokens)
    if len(statuses) != len(ledger):
        raise InputLengthError(f"got {len(statuses)} statuses for {len(ledger)} bubbles")
    for bubble, st in zip(ledger, statuses):
        bubble.stage(day, st)


def _print_day(ledger: Ledger, day: dt.date) -> None:
    table = Table(box=box.ROUNDED, show_header=True, header_style="bold")
    table.add_column("#", justify="right")
    table.add_column("Tasks", justify="right")
    table.add_column("Brief")
    table.add_column(day.strftime("%a\n%m/%d"), justify="center")
    for i, b in enumerate(ledger):
        table.add_row(str(i), b.name, b.brief, display(b.days.get(day, Status.UNKNOWN)))
    console.print(table)


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Fetch or push one day of bubbles against a bubbles server.")
    ap.add_argument("--url", default=os.getenv("BUBBLES_URL", DEFAULT_URL), help="Server base URL")
    ap.add_argument("--tz", default=default_tz_name(), help="Timezone deciding what 'today' is")
    ap.add_argument("--today", default=None, help="Override today's date YYYY-MM-DD")
    ap.add_argument("--offset", type=int, default=0, help="Days before today (default: 0)")

    sub = ap.add_subparsers(dest="command", required=True)
    sub.add_parser("fetch", help="Show the server's statuses for the day")
    p = sub.add_parser("push", help="Set the day's statuses (one token per bubble) on the server")
    p.add_argument("tokens", help="One token per bubble: ? unknown, o empty, / half, x full")

    args = ap.parse_args(argv)

    try:
        req = FetchRequest(day_offset=args.offset)
    except DecodeError as e:
        raise SystemExit(f"Invalid --offset value: {e}")
    try:
        ref = parse_date_yyyy_mm_dd(args.today) if args.today else today_date(resolve_tz(args.tz))
    except ValueError as e:
        raise SystemExit(f"Invalid --today/--tz value: {e}")
    try:
        day = req.target(ref)
    except DecodeError as e:
        raise SystemExit(f"Invalid --offset value: {e}")

    try:
        ledger = fetch(args.url, req)
        if args.command == "push":
            stage_tokens(ledger, day, args.tokens)
            push(args.url, PushRequest(entries=ledger))
            print(f"Set {len(ledger)} bubbles for {day.isoformat()}")
        else:
            _print_day(ledger, day)
    except BubblesError as e:
        raise SystemExit(f"[bubbles-sync] ERROR: {e}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
