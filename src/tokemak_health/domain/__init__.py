"""Domain models for the health check."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TokenRef:
    """An ERC20 token with its metadata, resolved once per audit cycle."""

    address: str
    decimals: int
    symbol: str
    name: str


@dataclass(frozen=True)
class ProportionalPool:
    """Uniswap V2 style pair: the pool token and the reserve holder share one address."""

    address: str


@dataclass(frozen=True)
class SharePricePool:
    """Curve style pool exposing ``get_virtual_price``.

    ``rewards`` is an optional staking wrapper whose balances count as LP
    tokens at 18 decimals.
    """

    pool: str
    lp_token: str
    rewards: str | None = None
