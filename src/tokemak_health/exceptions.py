"""Error kinds surfaced by an audit cycle."""

from __future__ import annotations


class TokemakHealthError(Exception):
    """Base class for all audit errors."""


class LedgerReadError(TokemakHealthError):
    """A ledger call failed, reverted or returned something unusable."""


class ConfigurationError(TokemakHealthError):
    """The registry or static configuration is missing or malformed."""


class DecimalScaleError(TokemakHealthError, ArithmeticError):
    """A decimal rescale or arithmetic step lost precision or overflowed."""
