from __future__ import annotations

from decimal import Decimal

from rich.console import Console

from tokemak_health.report import (
    HealthReport,
    build_asset_report,
    format_report_message,
    format_report_table,
)


def _health_report() -> HealthReport:
    return HealthReport(
        block_number=18_500_000,
        assets=[
            build_asset_report(
                asset_name="DAI",
                claim_token_balance=Decimal("400.000000"),
                claim_token_total_supply=Decimal("1000.000000"),
                free_assets=Decimal("500.000000"),
                pool_assets_fixed_price=Decimal("0.000000"),
                pool_assets_proportional=Decimal("1000.000000"),
            ),
            build_asset_report(
                asset_name="USDC",
                claim_token_balance=Decimal("0.000000"),
                claim_token_total_supply=Decimal("0.000000"),
                free_assets=Decimal("12.345678"),
                pool_assets_fixed_price=Decimal("0.000000"),
                pool_assets_proportional=Decimal("0.000000"),
            ),
        ],
    )


def test_message_has_one_line_per_asset():
    message = format_report_message(_health_report())

    header, dai, usdc = message.splitlines()
    assert header == "Tokemak health check (block 18500000)"
    assert dai == (
        "DAI: tDAI held 400.00 | health 1.500 | free 500.00 | "
        "fixed-price pools 0.00 | proportional pools 1,000.00 | "
        "tDAI supply 1,000.00"
    )
    assert "health n/a" in usdc
    assert "free 12.35" in usdc


def test_message_without_block_says_latest():
    report = HealthReport(block_number=None, assets=[])

    assert format_report_message(report) == "Tokemak health check (block latest)"


def test_table_lists_every_asset():
    console = Console(record=True, width=200)

    format_report_table(_health_report(), console=console)

    text = console.export_text()
    assert "Tokemak Health Check" in text
    assert "DAI" in text
    assert "1.500" in text
    assert "n/a" in text
