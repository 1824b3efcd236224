from __future__ import annotations

from typing import TYPE_CHECKING

from web3 import Web3

from ..concurrency import gather_fail_fast
from ..constants import CLAIM_TOKEN_OVERRIDES
from ..domain import TokenRef
from ..logger import get_logger
from .token_balances import TokenBalanceResolver

if TYPE_CHECKING:
    from ..clients.ledger import LedgerClient

logger = get_logger(__name__)


class AssetLocator:
    """Resolves a strategy's underlying ("want") token and its claim token."""

    def __init__(
        self,
        ledger: LedgerClient,
        resolver: TokenBalanceResolver,
        claim_token_overrides: dict[str, str] | None = None,
    ):
        self.ledger = ledger
        self.resolver = resolver
        overrides = (
            CLAIM_TOKEN_OVERRIDES
            if claim_token_overrides is None
            else claim_token_overrides
        )
        self._claim_token_overrides = {
            strategy.lower(): claim_token for strategy, claim_token in overrides.items()
        }

    async def want_address(self, strategy: str) -> str:
        return await self.ledger.read_strategy_want(strategy)

    async def claim_token_address(self, strategy: str) -> str:
        """The strategy's tAsset, taken from the override table when listed."""
        override = self._claim_token_overrides.get(strategy.lower())
        if override is not None:
            logger.debug(
                "Using claim token override %s for strategy %s", override, strategy
            )
            return Web3.to_checksum_address(override)
        return await self.ledger.read_strategy_claim_token(strategy)

    async def locate(self, strategy: str) -> tuple[TokenRef, TokenRef]:
        """Return ``(want, claim_token)`` for ``strategy``."""
        want_address, claim_address = await gather_fail_fast(
            self.want_address(strategy),
            self.claim_token_address(strategy),
        )
        want, claim_token = await gather_fail_fast(
            self.resolver.token(want_address),
            self.resolver.token(claim_address),
        )
        return want, claim_token
