"""High-level pipeline orchestration."""

from __future__ import annotations

import asyncio

from ..adapters.asset_adapters import ADAPTER_REGISTRY
from ..clients.ledger import LedgerClient
from ..processors import AssetLocator, TokenBalanceResolver
from ..registry import load_registry
from ..report import HealthReport, notify_operator, publish_report
from ..state import AppState
from .audit import collect_health_report
from .context import PipelineContext


async def build_context(
    state: AppState, ledger: LedgerClient | None = None
) -> PipelineContext:
    """Load the registry and pin the ledger to one block for this cycle."""
    s = state.settings
    log = state.logger

    registry = load_registry(s)

    ledger = ledger or LedgerClient(s)
    if s.block_number is None:
        block_number = await ledger.read_block_number()
        ledger.pin_block(block_number)
    else:
        block_number = s.block_number
    log.info("Audit pinned to block %d", block_number)

    resolver = TokenBalanceResolver(ledger)
    locator = AssetLocator(ledger, resolver, s.claim_token_overrides)
    adapters = {
        name: adapter_cls(s, ledger, resolver)
        for name, adapter_cls in ADAPTER_REGISTRY.items()
    }

    return PipelineContext(
        state=state,
        ledger=ledger,
        resolver=resolver,
        locator=locator,
        adapters=adapters,
        registry=registry,
        block_number=block_number,
    )


async def publish_health_report(ctx: PipelineContext) -> None:
    s = ctx.state.settings
    log = ctx.state.logger

    log.info("Publishing report (dry_run=%s)...", s.dry_run)
    delivered = await publish_report(s, ctx.report_required)
    if not delivered:
        log.warning("Report computed but not delivered to chat %s", s.telegram_chat_id)


async def run_audit(
    state: AppState, ledger: LedgerClient | None = None
) -> HealthReport:
    """Execute one complete audit cycle.

    1. Registry load and block pinning
    2. Per-asset balance collection (fail-fast)
    3. Publication

    Any error aborts the whole cycle; no partial report is published.

    Args:
        state: Application state containing settings and logger
        ledger: Ledger accessor to use instead of one built from settings

    Returns:
        The report of this cycle
    """
    s = state.settings
    log = state.logger

    log.info("Starting audit cycle", extra={"dry_run": s.dry_run})

    timeout_s = s.global_timeout_seconds

    async def _run_cycle() -> HealthReport:
        ctx = await build_context(state, ledger)
        await collect_health_report(ctx)
        await publish_health_report(ctx)
        return ctx.report_required

    try:
        if timeout_s is None or timeout_s <= 0:
            report = await _run_cycle()
        else:
            async with asyncio.timeout(timeout_s):
                report = await _run_cycle()
    except asyncio.TimeoutError as exc:
        log.error(
            "Audit cycle timed out",
            extra={"timeout_seconds": timeout_s},
        )
        raise asyncio.TimeoutError(
            f"Audit cycle exceeded global timeout {timeout_s}s\n"
            "N.B. This can be changed via `global_timeout_seconds`."
        ) from exc

    log.info("Audit cycle completed", extra={"assets": len(report.assets)})
    return report


async def run_forever(state: AppState, max_cycles: int | None = None) -> None:
    """Run audit cycles back to back, ``audit_interval_seconds`` apart.

    A failed cycle is logged and sent to the operator chat; the next cycle
    still runs on schedule.
    """
    s = state.settings
    log = state.logger

    cycle = 0
    while max_cycles is None or cycle < max_cycles:
        cycle += 1
        try:
            await run_audit(state)
        except Exception as e:
            log.exception("Audit cycle %d failed", cycle)
            await notify_operator(
                s, f"Tokemak health check failed: {type(e).__name__}: {e}"
            )

        if max_cycles is not None and cycle >= max_cycles:
            break
        log.info("Next audit in %ss", s.audit_interval_seconds)
        await asyncio.sleep(s.audit_interval_seconds)
