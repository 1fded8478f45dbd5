# bubbles/store.py
"""File-backed ledger store.

The ledger file is the only shared mutable resource. `LedgerStore.update`
runs load -> mutate -> persist under the store's lock, and persisting goes
through a sibling `.tmp` file + `os.replace`, so a failed request never leaves
a partially written ledger behind.
"""

from __future__ import annotations

import logging
import os
import threading
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, Sequence, Union

from .codec import decode_ledger, encode_ledger
from .errors import DecodeError, StoreError
from .model import Bubble, Ledger, normalize_ledger
from .util.console import eprint, obs_enabled

FILE_ENV = "BUBBLES_FILE"
DEFAULT_FILE = "bubbles.json"

logger = logging.getLogger(__name__)


def default_ledger_path() -> Path:
    return Path(os.getenv(FILE_ENV, DEFAULT_FILE) or DEFAULT_FILE)


class LedgerStore:
    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self._lock = threading.RLock()

    def __repr__(self) -> str:
        return f"LedgerStore({str(self.path)!r})"

    def exists(self) -> bool:
        return self.path.exists()

    @contextmanager
    def locked(self) -> Iterator["LedgerStore"]:
        with self._lock:
            yield self

    def load(self) -> Ledger:
        t0 = time.monotonic()
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError as ex:
            raise StoreError(f"Ledger file not found: {self.path} (run `bubbles init` first)") from ex
        except OSError as ex:
            raise StoreError(f"Cannot read ledger file {self.path}: {ex}") from ex
        try:
            ledger = normalize_ledger(decode_ledger(raw, label=self.path.name))
        except DecodeError as ex:
            raise StoreError(f"Corrupt ledger file {self.path}: {ex}") from ex
        self._obs("load", t0, len(ledger))
        return ledger

    def save(self, ledger: Sequence[Bubble]) -> None:
        t0 = time.monotonic()
        data = encode_ledger(normalize_ledger(ledger), pretty=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_bytes(data)
            os.replace(tmp, self.path)
        except OSError as ex:
            try:
                tmp.unlink()
            except OSError:
                pass
            raise StoreError(f"Cannot write ledger file {self.path}: {ex}") from ex
        self._obs("save", t0, len(ledger))

    def update(self, fn: Callable[[Ledger], Ledger]) -> Ledger:
        """Atomically load, transform with `fn` and persist the ledger."""
        with self._lock:
            ledger = fn(self.load())
            self.save(ledger)
            return ledger

    def _obs(self, op: str, t0: float, n: int) -> None:
        elapsed_ms = int((time.monotonic() - t0) * 1000)
        logger.debug(f"store.{op} path={self.path} entries={n} ms={elapsed_ms}")
        if obs_enabled():
            eprint(f"[bubbles.store] {op}.ok ms={elapsed_ms} entries={n}")


__all__ = ["DEFAULT_FILE", "FILE_ENV", "LedgerStore", "default_ledger_path"]
