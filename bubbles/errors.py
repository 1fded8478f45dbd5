"""Error kinds raised by the ledger core.

Every error derives from `BubblesError` so the CLI and the sync server can
convert them to a diagnostic / error response at a single boundary.
"""

from __future__ import annotations


class BubblesError(Exception):
    """Base class for all ledger errors."""

    code = "BUBBLES_ERROR"


class InvalidToken(BubblesError, ValueError):
    """A status token is not one of `?`, `o`, `/`, `x`."""

    code = "INVALID_TOKEN"


class DecodeError(BubblesError, ValueError):
    """A wire or file payload does not have the ledger shape."""

    code = "INVALID_PAYLOAD"


class StoreError(BubblesError):
    """The backing store could not be read or written."""

    code = "STORE_ERROR"


class InputLengthError(BubblesError, ValueError):
    """Bulk-update token count differs from the ledger length."""

    code = "INPUT_LENGTH"


class MalformedBrief(BubblesError, ValueError):
    """A brief does not split into exactly two `/`-separated segments."""

    code = "MALFORMED_BRIEF"


class TransportError(BubblesError):
    """A sync request could not reach the server or got an error reply."""

    code = "TRANSPORT_ERROR"


class InvariantViolation(BubblesError, AssertionError):
    """A broken precondition inside the core (a defect, not a user error)."""

    code = "INVARIANT_VIOLATION"


__all__ = [
    "BubblesError",
    "DecodeError",
    "InputLengthError",
    "InvalidToken",
    "InvariantViolation",
    "MalformedBrief",
    "StoreError",
    "TransportError",
]
