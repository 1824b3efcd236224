from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from ...concurrency import gather_fail_fast
from ...domain import ProportionalPool, TokenRef
from ...exceptions import LedgerReadError
from ...logger import get_logger
from ...processors.token_balances import TokenBalanceResolver
from ...settings import HealthSettings
from ...units import multiply, ratio, total
from .base import BaseExposureAdapter

if TYPE_CHECKING:
    from ...clients.ledger import LedgerClient

logger = get_logger(__name__)


class ProportionalPoolAdapter(BaseExposureAdapter):
    """Exposure through Uniswap V2 style pairs.

    A holder owns ``pool_token_balance / pool_token_supply`` of whatever the
    pair holds of the underlying asset.
    """

    def __init__(
        self,
        config: HealthSettings,
        ledger: LedgerClient,
        resolver: TokenBalanceResolver,
        pools: list[ProportionalPool] | None = None,
    ):
        super().__init__(config, ledger, resolver)
        self.pools = (
            pools if pools is not None else config.proportional_pool_descriptors
        )

    @property
    def adapter_name(self) -> str:
        return "proportional_pools"

    async def fetch_exposure(self, want: TokenRef, accounts: list[str]) -> Decimal:
        """Sum ``reserve * share`` over every candidate pool and checked account.

        Args:
            want: The underlying asset
            accounts: Accounts whose pool tokens are counted

        Returns:
            Exposure in ``want`` at report scale

        Raises:
            LedgerReadError: If a read fails, or a pool holds reserves while
                its pool token has zero supply.
        """
        per_pool = await gather_fail_fast(
            *[self._pool_contributions(want, pool, accounts) for pool in self.pools]
        )
        exposure = total(
            contribution for contributions in per_pool for contribution in contributions
        )
        logger.debug(
            "%s exposure for %s across %d pools: %s",
            self.adapter_name,
            want.symbol,
            len(self.pools),
            exposure,
        )
        return exposure

    async def _pool_contributions(
        self, want: TokenRef, pool: ProportionalPool, accounts: list[str]
    ) -> list[Decimal]:
        reserve = await self.resolver.balance_of(want, pool.address)
        if reserve == 0:
            logger.debug("Skipping pool %s: no %s reserves", pool.address, want.symbol)
            return []

        supply, balances = await gather_fail_fast(
            self.ledger.read_total_supply(pool.address),
            gather_fail_fast(
                *[self.ledger.read_balance(pool.address, account) for account in accounts]
            ),
        )
        if supply == 0:
            raise LedgerReadError(
                f"Pool {pool.address} holds {reserve} {want.symbol} "
                f"but its pool token supply is zero"
            )

        contributions: list[Decimal] = []
        for account, balance in zip(accounts, balances):
            if balance == 0:
                continue
            share = ratio(Decimal(balance), Decimal(supply))
            contribution = multiply(reserve, share)
            logger.debug(
                "Pool %s: account %s holds share %s -> %s %s",
                pool.address,
                account,
                share,
                contribution,
                want.symbol,
            )
            contributions.append(contribution)
        return contributions
