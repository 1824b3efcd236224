from __future__ import annotations

import asyncio
from decimal import Decimal
from typing import TYPE_CHECKING, Iterable

from web3 import Web3

from ..concurrency import gather_fail_fast
from ..domain import TokenRef
from ..logger import get_logger
from ..units import to_report_scale, total

if TYPE_CHECKING:
    from ..clients.ledger import LedgerClient

logger = get_logger(__name__)


class TokenBalanceResolver:
    """Reads ERC20 balances and supplies as report-scale decimals.

    Token metadata is resolved lazily and cached for the lifetime of the
    resolver, which is one audit cycle. Concurrent lookups of the same token
    share a single in-flight read.
    """

    def __init__(self, ledger: LedgerClient):
        self.ledger = ledger
        self._tokens: dict[str, asyncio.Task[TokenRef]] = {}

    async def token(self, address: str) -> TokenRef:
        key = address.lower()
        task = self._tokens.get(key)
        if task is None:
            task = asyncio.ensure_future(self._resolve_token(address))
            self._tokens[key] = task
        return await task

    async def _resolve_token(self, address: str) -> TokenRef:
        checksum = Web3.to_checksum_address(address)
        decimals, symbol, name = await gather_fail_fast(
            self.ledger.read_token_decimals(checksum),
            self.ledger.read_token_symbol(checksum),
            self.ledger.read_token_name(checksum),
        )
        logger.debug(
            "Resolved token %s: symbol=%s decimals=%d", checksum, symbol, decimals
        )
        return TokenRef(address=checksum, decimals=decimals, symbol=symbol, name=name)

    async def balance_of(self, token: TokenRef, account: str) -> Decimal:
        raw = await self.ledger.read_balance(token.address, account)
        return to_report_scale(raw, token.decimals)

    async def balances_of(self, token: TokenRef, accounts: Iterable[str]) -> Decimal:
        """Sum of ``token`` balances held by ``accounts``."""
        balances = await gather_fail_fast(
            *[self.balance_of(token, account) for account in accounts]
        )
        return total(balances)

    async def total_supply(self, token: TokenRef) -> Decimal:
        raw = await self.ledger.read_total_supply(token.address)
        return to_report_scale(raw, token.decimals)
