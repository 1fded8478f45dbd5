from __future__ import annotations

import datetime as dt
import json
import unittest

from bubbles.codec import decode_ledger, encode_ledger, ledger_to_obj, validate_ledger_obj
from bubbles.errors import DecodeError
from bubbles.model import Bubble
from bubbles.status import Status

D1 = dt.date(2024, 1, 1)
D6 = dt.date(2024, 1, 6)


class TestCodecContract(unittest.TestCase):
    def test_encode_uses_tokens_and_iso_dates(self) -> None:
        ledger = [Bubble(name="Sleep", brief="8h/bed", days={D6: Status.HALF_FULL, D1: Status.FULL})]
        obj = json.loads(encode_ledger(ledger))
        self.assertEqual(
            obj,
            [{"name": "Sleep", "description": "", "brief": "8h/bed", "days": {"2024-01-01": "x", "2024-01-06": "/"}}],
        )

    def test_decode(self) -> None:
        raw = '[{"name": "Sleep", "description": "d", "brief": "a/b", "days": {"2024-01-06": "o"}}]'
        ledger = decode_ledger(raw)
        self.assertEqual(ledger, [Bubble(name="Sleep", description="d", brief="a/b", days={D6: Status.EMPTY})])

    def test_decode_accepts_variant_names(self) -> None:
        raw = '[{"name": "Sleep", "description": "", "brief": "", "days": {"2024-01-06": "HalfFull", "2024-01-01": "Full"}}]'
        self.assertEqual(decode_ledger(raw)[0].days, {D6: Status.HALF_FULL, D1: Status.FULL})

    def test_missing_optional_fields_default(self) -> None:
        b = decode_ledger('[{"name": "Water"}]')[0]
        self.assertEqual((b.description, b.brief, b.days), ("", "", {}))

    def test_explicit_unknown_survives_decode(self) -> None:
        b = decode_ledger('[{"name": "Water", "days": {"2024-01-06": "?"}}]')[0]
        self.assertIs(b.days[D6], Status.UNKNOWN)
        self.assertEqual(ledger_to_obj([b])[0]["days"], {"2024-01-06": "?"})

    def test_malformed_payloads(self) -> None:
        bad = [
            "not json",
            '{"name": "x"}',
            "[1]",
            '[{"description": "no name"}]',
            '[{"name": 3}]',
            '[{"name": "x", "brief": 1}]',
            '[{"name": "x", "days": []}]',
            '[{"name": "x", "days": {"yesterday": "x"}}]',
            '[{"name": "x", "days": {"20240106": "x"}}]',
            '[{"name": "x", "days": {"2024-1-6": "x"}}]',
            '[{"name": "x", "days": {"2024-01-06": "full"}}]',
            '[{"name": "x", "days": {"2024-01-06": 1}}]',
        ]
        for raw in bad:
            with self.assertRaises(DecodeError, msg=raw):
                decode_ledger(raw)

    def test_validate_reports_every_problem(self) -> None:
        errs = validate_ledger_obj([{"name": 1}, "x", {"name": "ok", "days": {"2024-13-01": "x"}}])
        self.assertEqual(len(errs), 3)
        self.assertTrue(errs[0].startswith("ledger[0].name"))


if __name__ == "__main__":
    unittest.main(verbosity=2)
