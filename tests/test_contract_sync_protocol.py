from __future__ import annotations

import datetime as dt
import tempfile
import unittest
from pathlib import Path

from bubbles.errors import DecodeError
from bubbles.model import Bubble
from bubbles.protocol import (
    ErrorResponse,
    FetchRequest,
    FetchResponse,
    PushRequest,
    PushResponse,
    handle_fetch,
    handle_push,
    response_from_obj,
)
from bubbles.status import Status
from bubbles.store import LedgerStore

REF = dt.date(2024, 1, 7)
D1 = dt.date(2024, 1, 1)
D6 = dt.date(2024, 1, 6)


class TestSyncProtocolContract(unittest.TestCase):
    def setUp(self) -> None:
        self._td = tempfile.TemporaryDirectory()
        self.store = LedgerStore(Path(self._td.name) / "bubbles.json")
        self.store.save(
            [
                Bubble(name="Sleep", brief="8h/bed", days={D6: Status.HALF_FULL, D1: Status.FULL}),
                Bubble(name="Water", brief="2l/glass", days={D1: Status.EMPTY}),
            ]
        )

    def tearDown(self) -> None:
        self._td.cleanup()

    def test_fetch_projects_single_day(self) -> None:
        resp = handle_fetch(self.store, FetchRequest(day_offset=1), REF)
        self.assertIsInstance(resp, FetchResponse)
        self.assertEqual(resp.entries[0].days, {D6: Status.HALF_FULL})
        self.assertEqual(resp.entries[1].days, {})
        self.assertEqual([b.name for b in resp.entries], ["Sleep", "Water"])

    def test_fetch_without_offset_strips_days(self) -> None:
        resp = handle_fetch(self.store, FetchRequest(), REF)
        self.assertEqual([b.days for b in resp.entries], [{}, {}])

    def test_fetch_never_mutates_store(self) -> None:
        before = self.store.path.read_bytes()
        handle_fetch(self.store, FetchRequest(day_offset=1), REF)
        self.assertEqual(self.store.path.read_bytes(), before)

    def test_fetch_edit_push_preserves_history(self) -> None:
        fetched = handle_fetch(self.store, FetchRequest(day_offset=1), REF)
        fetched.entries[0].set_status(D6, Status.FULL)
        resp = handle_push(self.store, PushRequest(entries=fetched.entries))
        self.assertIsInstance(resp, PushResponse)
        stored = self.store.load()
        self.assertEqual(stored[0].days, {D6: Status.FULL, D1: Status.FULL})
        self.assertEqual(stored[1].days, {D1: Status.EMPTY})

    def test_push_shorter_ledger(self) -> None:
        handle_push(self.store, PushRequest(entries=[Bubble(name="Sleep", days={REF: Status.EMPTY})]))
        stored = self.store.load()
        self.assertEqual(stored[0].days, {D6: Status.HALF_FULL, D1: Status.FULL, REF: Status.EMPTY})
        self.assertEqual(stored[1].days, {D1: Status.EMPTY})

    def test_store_errors_become_error_responses(self) -> None:
        self.store.path.write_text("garbage", encoding="utf-8")
        resp = handle_fetch(self.store, FetchRequest(day_offset=0), REF)
        self.assertIsInstance(resp, ErrorResponse)
        self.assertEqual(resp.code, "STORE_ERROR")
        self.assertEqual(resp.to_obj()["ok"], False)

        resp = handle_push(self.store, PushRequest(entries=[]))
        self.assertIsInstance(resp, ErrorResponse)
        self.assertEqual(self.store.path.read_text(encoding="utf-8"), "garbage")

    def test_fetch_request_validation(self) -> None:
        for bad in (-1, "1", 1.5, True):
            with self.assertRaises(DecodeError, msg=repr(bad)):
                FetchRequest(day_offset=bad)
        self.assertEqual(FetchRequest.from_obj({"day_offset": 2}).day_offset, 2)
        self.assertIsNone(FetchRequest.from_obj({}).day_offset)
        self.assertEqual(FetchRequest(day_offset=1).target(REF), D6)
        self.assertIsNone(FetchRequest().target(REF))

    def test_out_of_range_offset_is_a_decode_error(self) -> None:
        req = FetchRequest(day_offset=800000)
        with self.assertRaises(DecodeError):
            req.target(REF)
        resp = handle_fetch(self.store, req, REF)
        self.assertIsInstance(resp, ErrorResponse)
        self.assertEqual(resp.code, "INVALID_PAYLOAD")

    def test_push_request_decoding(self) -> None:
        entry = {"name": "Sleep", "description": "", "brief": "", "days": {"2024-01-06": "x"}}
        a = PushRequest.from_obj({"entries": [entry]})
        b = PushRequest.from_obj([entry])
        self.assertEqual(a, b)
        self.assertEqual(a.entries[0].days, {D6: Status.FULL})
        with self.assertRaises(DecodeError):
            PushRequest.from_obj({"bubbles": []})
        with self.assertRaises(DecodeError):
            PushRequest.from_obj("nope")

    def test_response_wire_shapes(self) -> None:
        resp = handle_fetch(self.store, FetchRequest(day_offset=1), REF)
        obj = resp.to_obj()
        self.assertTrue(obj["ok"])
        self.assertEqual(obj["entries"][0]["days"], {"2024-01-06": "/"})
        self.assertEqual(response_from_obj(obj, kind="fetch"), resp)
        self.assertEqual(PushResponse().to_obj(), {"ok": True})

        err = response_from_obj({"ok": False, "error": {"code": "STORE_ERROR", "message": "x"}}, kind="push")
        self.assertEqual(err, ErrorResponse(code="STORE_ERROR", message="x"))
        with self.assertRaises(DecodeError):
            response_from_obj({"entries": []}, kind="fetch")


if __name__ == "__main__":
    unittest.main(verbosity=2)
