"""Per-asset aggregation of direct and pool exposure."""

from __future__ import annotations

from web3 import Web3

from ..concurrency import gather_fail_fast
from ..domain import TokenRef
from ..report import AssetReport, HealthReport, build_asset_report
from ..units import display
from .context import PipelineContext


def _dedupe_accounts(accounts: list[str]) -> list[str]:
    deduped: dict[str, str] = {}
    for account in accounts:
        checksum = Web3.to_checksum_address(account)
        deduped.setdefault(checksum.lower(), checksum)
    return list(deduped.values())


def free_balance_accounts(
    ctx: PipelineContext, symbol: str, strategy: str, claim_token: TokenRef
) -> list[str]:
    """Holders whose direct ``want`` balances count as free assets.

    The claim-token contract, the strategy, the configured accounts to check
    and any per-asset extra accounts (e.g. the treasury for native ETH).
    """
    s = ctx.state.settings
    return _dedupe_accounts(
        [
            claim_token.address,
            strategy,
            *s.accounts_to_check,
            *s.extra_free_balance_accounts.get(symbol, []),
        ]
    )


async def collect_asset_report(
    ctx: PipelineContext, symbol: str, strategy: str
) -> AssetReport:
    """Build the report of one registry entry."""
    log = ctx.state.logger
    s = ctx.state.settings

    want, claim_token = await ctx.locator.locate(strategy)
    if want.symbol != symbol:
        log.warning(
            "Registry symbol %s differs from on-chain want symbol %s (strategy %s)",
            symbol,
            want.symbol,
            strategy,
        )
    log.debug(
        "%s: strategy %s, want %s, claim token %s (%s)",
        symbol,
        strategy,
        want.address,
        claim_token.address,
        claim_token.symbol,
    )

    free_accounts = free_balance_accounts(ctx, symbol, strategy, claim_token)
    pool_accounts = _dedupe_accounts(s.accounts_to_check)
    (
        claim_token_balance,
        claim_token_total_supply,
        free_assets,
        pool_assets_fixed_price,
        pool_assets_proportional,
    ) = await gather_fail_fast(
        ctx.resolver.balance_of(claim_token, strategy),
        ctx.resolver.total_supply(claim_token),
        ctx.resolver.balances_of(want, free_accounts),
        ctx.adapter("share_price_pools").fetch_exposure(want, pool_accounts),
        ctx.adapter("proportional_pools").fetch_exposure(want, pool_accounts),
    )

    report = build_asset_report(
        asset_name=symbol,
        claim_token_balance=claim_token_balance,
        claim_token_total_supply=claim_token_total_supply,
        free_assets=free_assets,
        pool_assets_fixed_price=pool_assets_fixed_price,
        pool_assets_proportional=pool_assets_proportional,
    )
    log.info(
        "%s: total assets %s / supply %s (health %s)",
        symbol,
        display(report.total_underlying_assets),
        display(report.claim_token_total_supply),
        report.health_ratio_display,
    )
    return report


async def collect_health_report(ctx: PipelineContext) -> None:
    """Collect one ``AssetReport`` per registry entry, all or nothing.

    Sets the report in the context.
    """
    log = ctx.state.logger
    log.info("Collecting balances for %d assets...", len(ctx.registry))

    assets = await gather_fail_fast(
        *[
            collect_asset_report(ctx, symbol, strategy)
            for symbol, strategy in ctx.registry.items()
        ]
    )

    ctx.report = HealthReport(block_number=ctx.block_number, assets=assets)
