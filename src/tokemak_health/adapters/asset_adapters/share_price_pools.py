from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from ...concurrency import gather_fail_fast
from ...constants import REWARDS_TOKEN_DECIMALS, VIRTUAL_PRICE_DECIMALS
from ...domain import SharePricePool, TokenRef
from ...logger import get_logger
from ...processors.token_balances import TokenBalanceResolver
from ...settings import HealthSettings
from ...units import ZERO, from_raw, multiply, to_report_scale, total
from .base import BaseExposureAdapter

if TYPE_CHECKING:
    from ...clients.ledger import LedgerClient

logger = get_logger(__name__)


def is_relevant_pool(want: TokenRef, lp_token: TokenRef) -> bool:
    """Whether a pool is believed to back ``want``.

    Case-sensitive substring match of the asset symbol against the LP
    token's name or symbol.
    """
    return want.symbol in lp_token.name or want.symbol in lp_token.symbol


class SharePricePoolAdapter(BaseExposureAdapter):
    """Exposure through Curve style pools priced by ``get_virtual_price``."""

    def __init__(
        self,
        config: HealthSettings,
        ledger: LedgerClient,
        resolver: TokenBalanceResolver,
        pools: list[SharePricePool] | None = None,
    ):
        super().__init__(config, ledger, resolver)
        self.pools = (
            pools if pools is not None else config.share_price_pool_descriptors
        )

    @property
    def adapter_name(self) -> str:
        return "share_price_pools"

    async def fetch_exposure(self, want: TokenRef, accounts: list[str]) -> Decimal:
        """Sum ``(lp_balances + rewards_balances) * virtual_price`` over relevant pools."""
        per_pool = await gather_fail_fast(
            *[self._pool_exposure(want, pool, accounts) for pool in self.pools]
        )
        exposure = total(per_pool)
        logger.debug(
            "%s exposure for %s across %d pools: %s",
            self.adapter_name,
            want.symbol,
            len(self.pools),
            exposure,
        )
        return exposure

    async def _pool_exposure(
        self, want: TokenRef, pool: SharePricePool, accounts: list[str]
    ) -> Decimal:
        lp_token = await self.resolver.token(pool.lp_token)
        if not is_relevant_pool(want, lp_token):
            logger.debug(
                "Skipping pool %s: %s (%s) does not match %s",
                pool.pool,
                lp_token.name,
                lp_token.symbol,
                want.symbol,
            )
            return ZERO

        lp_amount = await self._lp_amount(lp_token, pool, accounts)
        if lp_amount == 0:
            return ZERO

        raw_virtual_price = await self.ledger.read_pool_virtual_price(pool.pool)
        virtual_price = from_raw(raw_virtual_price, VIRTUAL_PRICE_DECIMALS)
        exposure = multiply(lp_amount, virtual_price)
        logger.debug(
            "Pool %s: %s LP tokens at virtual price %s -> %s %s",
            pool.pool,
            lp_amount,
            virtual_price,
            exposure,
            want.symbol,
        )
        return exposure

    async def _lp_amount(
        self, lp_token: TokenRef, pool: SharePricePool, accounts: list[str]
    ) -> Decimal:
        reads = [self.resolver.balance_of(lp_token, account) for account in accounts]
        if pool.rewards is not None:
            reads.extend(self._rewards_balance(pool.rewards, account) for account in accounts)
        return total(await gather_fail_fast(*reads))

    async def _rewards_balance(self, rewards: str, account: str) -> Decimal:
        # staking wrappers mirror the LP token 1:1, so decimals() is not consulted
        raw = await self.ledger.read_balance(rewards, account)
        return to_report_scale(raw, REWARDS_TOKEN_DECIMALS)
