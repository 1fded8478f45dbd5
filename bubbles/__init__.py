"""Bubbles: a daily-habit ledger with a small sync protocol.

Public API:
  - import from `bubbles.api` (preferred) or `import bubbles` (re-export)
"""

from __future__ import annotations

from .api import *  # noqa: F401,F403
from . import api as _api

__all__ = list(_api.__all__)
