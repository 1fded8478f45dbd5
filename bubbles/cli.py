from __future__ import annotations

import argparse
import datetime as dt
import os
import sys
from pathlib import Path
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from .errors import BubblesError, InvariantViolation
from .grid import count_unknown, explain_rows, grid_header, grid_rows
from .model import seed_ledger
from .status import parse
from .store import LedgerStore, default_ledger_path
from .update import apply_weekly_update, set_day
from .util.console import eprint
from .util.timeparse import parse_date_yyyy_mm_dd, parse_weekday
from .util.tz import TZ_ENV, normalize_tz_name, resolve_tz, today_date
from .window import days_before, rolling_week

console = Console(highlight=False)


def _reference_date(args: argparse.Namespace) -> dt.date:
    if args.today:
        try:
            return parse_date_yyyy_mm_dd(args.today)
        except ValueError:
            raise SystemExit(f"Invalid --today value: {args.today!r} (expected YYYY-MM-DD)")
    try:
        return today_date(resolve_tz(normalize_tz_name(args.tz)))
    except ValueError as e:
        raise SystemExit(f"Invalid --tz value: {e}")


def _offset(v: int) -> int:
    if v < 0:
        raise SystemExit(f"--offset must be >= 0, got {v}")
    return v


def _day(args: argparse.Namespace) -> dt.date:
    try:
        return days_before(_reference_date(args), _offset(args.offset))
    except ValueError as e:
        raise SystemExit(f"Invalid --offset value: {e}")


def cmd_show(store: LedgerStore, args: argparse.Namespace) -> None:
    ledger = store.load()
    try:
        days = rolling_week(_reference_date(args), _offset(args.offset))
    except ValueError as e:
        raise SystemExit(f"Invalid --offset value: {e}")
    with_brief = not args.simple

    table = Table(box=box.ROUNDED, show_header=True, header_style="bold")
    for i, col in enumerate(grid_header(days, with_brief=with_brief)):
        table.add_column(col, justify="right" if i == 0 else "center")
    for row in grid_rows(ledger, days, with_brief=with_brief):
        table.add_row(*row)
    console.print(table)


def cmd_explain(store: LedgerStore, args: argparse.Namespace) -> None:
    rows = explain_rows(store.load())

    table = Table(box=box.ROUNDED, show_header=True, header_style="bold")
    table.add_column("Task", justify="right")
    table.add_column("Brief", justify="center")
    table.add_column("Description", justify="left", overflow="fold")
    for r in rows:
        brief = f"[yellow]{r.brief}[/yellow]" if r.malformed else r.brief
        table.add_row(r.name, brief, r.description)
    console.print(table)

    bad = [i for i, r in enumerate(rows) if r.malformed]
    if bad:
        msg = f"malformed brief (expected 'front/back') at index: {', '.join(str(i) for i in bad)}"
        if args.strict:
            raise SystemExit(f"[bubbles] ERROR: {msg}")
        eprint(f"[bubbles] WARN: {msg}")


def cmd_init(store: LedgerStore, args: argparse.Namespace) -> None:
    if store.exists() and not args.force:
        raise SystemExit(f"Ledger file already exists: {store.path} (use --force to re-initialize)")
    ledger = seed_ledger()
    store.save(ledger)
    print(f"Initialized {store.path} with {len(ledger)} bubbles")


def cmd_count(store: LedgerStore, args: argparse.Namespace) -> None:
    day = _day(args)
    print(count_unknown(store.load(), day))


def cmd_set(store: LedgerStore, args: argparse.Namespace) -> None:
    try:
        weekday = parse_weekday(args.weekday)
    except ValueError as e:
        raise SystemExit(str(e))
    ref = _reference_date(args)
    resolved: List[dt.date] = []

    def _apply(ledger):
        resolved.append(apply_weekly_update(ledger, ref, weekday, args.tokens))
        return ledger

    store.update(_apply)
    print(resolved[0].isoformat())


def cmd_mark(store: LedgerStore, args: argparse.Namespace) -> None:
    status = parse(args.token)
    day = _day(args)

    def _apply(ledger):
        try:
            set_day(ledger, args.index, day, status)
        except IndexError as e:
            raise SystemExit(str(e))
        return ledger

    store.update(_apply)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="bubbles", description="Track daily habit bubbles over a rolling week.")
    ap.add_argument(
        "--file",
        default=None,
        help="Ledger JSON file (default: env BUBBLES_FILE or ./bubbles.json)",
    )
    ap.add_argument(
        "--tz",
        default=os.getenv(TZ_ENV, "local"),
        help="Timezone deciding what 'today' is (default: env BUBBLES_TZ or 'local')",
    )
    ap.add_argument("--today", default=None, help="Override today's date YYYY-MM-DD")

    sub = ap.add_subparsers(dest="command")

    p = sub.add_parser("show", help="Show the rolling 7-day grid (default)")
    p.add_argument("--simple", action="store_true", help="Hide the Brief column")
    p.add_argument("--offset", type=int, default=0, help="Shift the week N days into the past")
    p.set_defaults(func=cmd_show)

    p = sub.add_parser("explain", help="List bubbles with their brief and description")
    p.add_argument("--strict", action="store_true", help="Exit non-zero when a brief is malformed")
    p.set_defaults(func=cmd_explain)

    p = sub.add_parser("init", help="Create the ledger file with the default bubbles")
    p.add_argument("--force", action="store_true", help="Overwrite an existing ledger")
    p.set_defaults(func=cmd_init)

    p = sub.add_parser("count", help="Count bubbles still unknown on a day")
    p.add_argument("--offset", type=int, default=1, help="Days before today (default: 1, yesterday)")
    p.set_defaults(func=cmd_count)

    p = sub.add_parser("set", help="Bulk-enter one weekday of the current week")
    p.add_argument("weekday", help="Weekday name, e.g. mon / tuesday")
    p.add_argument("tokens", help="One token per bubble: ? unknown, o empty, / half, x full")
    p.set_defaults(func=cmd_set)

    p = sub.add_parser("mark", help="Set one bubble's status for one day")
    p.add_argument("index", type=int, help="Bubble position (0-based)")
    p.add_argument("token", help="Status token: ? o / x")
    p.add_argument("--offset", type=int, default=0, help="Days before today (default: 0)")
    p.set_defaults(func=cmd_mark)

    return ap


def main(argv: Optional[List[str]] = None) -> None:
    if argv is None:
        argv = sys.argv[1:]
    ap = build_parser()
    args = ap.parse_args(argv)
    if args.command is None:
        args = ap.parse_args(list(argv) + ["show"])

    store = LedgerStore(Path(args.file) if args.file else default_ledger_path())
    try:
        args.func(store, args)
    except InvariantViolation:
        raise
    except BubblesError as e:
        raise SystemExit(f"[bubbles] ERROR: {e}")


if __name__ == "__main__":
    main()
