#!/usr/bin/env python3
"""HTTP transport for the sync protocol.

Routes:
  GET  /bubbles/get            -> entries with empty day maps
  GET  /bubbles/get/<offset>   -> entries projected onto today - offset
  POST /bubbles/set            -> merge {"entries": [...]} (or a bare list)
  GET  /bubbles/health         -> {"ok": true}
"""

from __future__ import annotations

import argparse
import logging
import os
import signal
import sys
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Dict, List, Optional, Tuple

from bubbles.codec import dumps_json, loads_json
from bubbles.errors import DecodeError
from bubbles.protocol import (
    ErrorResponse,
    FetchRequest,
    PushRequest,
    Response,
    handle_fetch,
    handle_push,
)
from bubbles.store import LedgerStore, default_ledger_path
from bubbles.util.timeparse import parse_day_offset
from bubbles.util.tz import default_tz_name, normalize_tz_name, resolve_tz, today_date

# Configuration
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 54438
ROUTE_PREFIX = "/bubbles"

# Resource limits
MAX_PAYLOAD_SIZE = 1 * 1024 * 1024  # 1MB

logger = logging.getLogger(__name__)


def _status_for(resp: Response) -> int:
    if not isinstance(resp, ErrorResponse):
        return 200
    if resp.code == DecodeError.code:
        return 400
    return 500


def _json_response(handler: BaseHTTPRequestHandler, payload: Dict[str, Any], status: int = 200) -> None:
    """Send JSON response with proper headers."""
    data = dumps_json(payload)
    handler.send_response(status)
    handler.send_header("Content-Type", "application/json")
    handler.send_header("Content-Length", str(len(data)))
    handler.send_header("Access-Control-Allow-Origin", "*")
    handler.end_headers()
    handler.wfile.write(data)


def _error_response(handler: BaseHTTPRequestHandler, message: str, code: str, status: int) -> None:
    _json_response(handler, ErrorResponse(code=code, message=message).to_obj(), status)


def _route(path: str) -> Tuple[str, List[str]]:
    """Split "/bubbles/get/1?x=y" into ("get", ["1"]); ("", []) for foreign paths."""
    path = path.split("?", 1)[0].rstrip("/")
    if not path.startswith(ROUTE_PREFIX + "/"):
        return "", []
    parts = [p for p in path[len(ROUTE_PREFIX) + 1:].split("/") if p]
    if not parts:
        return "", []
    return parts[0], parts[1:]


class SyncHandler(BaseHTTPRequestHandler):
    # Set on the class built by make_server().
    store: LedgerStore
    tz_name: str = "local"

    def _reference_date(self):
        return today_date(resolve_tz(self.tz_name))

    def do_OPTIONS(self) -> None:
        self.send_response(204)
        self.send_header("Access-Control-Allow-Origin", "*")
        self.send_header("Access-Control-Allow-Methods", "POST, OPTIONS, GET")
        self.send_header("Access-Control-Allow-Headers", "Content-Type")
        self.end_headers()

    def do_GET(self) -> None:
        name, rest = _route(self.path)
        if name == "health" and not rest:
            _json_response(self, {"ok": True})
            return
        if name != "get" or len(rest) > 1:
            _error_response(self, "Not found", "NOT_FOUND", 404)
            return

        try:
            req = FetchRequest(day_offset=parse_day_offset(rest[0]) if rest else None)
        except ValueError as e:
            logger.warning(f"Rejected fetch {self.path}: {e}")
            _error_response(self, str(e), DecodeError.code, 400)
            return

        resp = handle_fetch(self.store, req, self._reference_date())
        _json_response(self, resp.to_obj(), _status_for(resp))

    def do_POST(self) -> None:
        name, rest = _route(self.path)
        if name != "set" or rest:
            _error_response(self, "Not found", "NOT_FOUND", 404)
            return

        try:
            length = int(self.headers.get("Content-Length", "0"))
        except ValueError:
            _error_response(self, "Invalid Content-Length", "INVALID_LENGTH", 400)
            return
        if length < 0:
            _error_response(self, "Invalid Content-Length", "INVALID_LENGTH", 400)
            return
        if length > MAX_PAYLOAD_SIZE:
            _error_response(self, "Payload too large", "PAYLOAD_TOO_LARGE", 413)
            return

        raw = self.rfile.read(length)
        try:
            req = PushRequest.from_obj(loads_json(raw, label="push request"))
        except DecodeError as e:
            logger.warning(f"Invalid push payload: {e}")
            _error_response(self, str(e), e.code, 400)
            return

        resp = handle_push(self.store, req)
        _json_response(self, resp.to_obj(), _status_for(resp))

    def log_message(self, fmt: str, *args: Any) -> None:
        # Request outcomes are logged by the protocol handlers.
        return


def make_server(store: LedgerStore, host: str, port: int, tz_name: str = "local") -> ThreadingHTTPServer:
    handler = type("BoundSyncHandler", (SyncHandler,), {"store": store, "tz_name": normalize_tz_name(tz_name)})
    return ThreadingHTTPServer((host, port), handler)


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Serve the bubbles ledger over HTTP for sync clients.")
    ap.add_argument("--file", default=None, help="Ledger JSON file (default: env BUBBLES_FILE or ./bubbles.json)")
    ap.add_argument("--host", default=os.getenv("BUBBLES_HOST", DEFAULT_HOST), help="Bind address")
    ap.add_argument("--port", type=int, default=int(os.getenv("BUBBLES_PORT", str(DEFAULT_PORT))), help="Bind port")
    ap.add_argument("--tz", default=default_tz_name(), help="Timezone deciding what 'today' is")
    ap.add_argument("--debug", action="store_true", help="Verbose logging")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    try:
        resolve_tz(args.tz)
    except ValueError as e:
        raise SystemExit(f"Invalid --tz value: {e}")

    store = LedgerStore(args.file or default_ledger_path())
    if not store.exists():
        logger.warning(f"Ledger file {store.path} does not exist yet; requests will fail until `bubbles init`")

    server = make_server(store, args.host, args.port, args.tz)

    def _shutdown_handler(signum, frame) -> None:
        logger.info("Received shutdown signal")
        server.server_close()
        sys.exit(0)

    signal.signal(signal.SIGTERM, _shutdown_handler)

    logger.info(f"Server listening on http://{args.host}:{args.port}{ROUTE_PREFIX}")
    logger.info(f"Ledger: {store.path} tz={normalize_tz_name(args.tz)}")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Server interrupted")
    finally:
        server.server_close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
