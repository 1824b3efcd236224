from __future__ import annotations

from .ledger import LedgerClient

__all__ = ["LedgerClient"]
