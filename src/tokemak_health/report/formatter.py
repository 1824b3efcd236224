"""Text and rich console rendering of health reports."""

from __future__ import annotations

from decimal import Decimal

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..units import RATIO_DISPLAY_SCALE, display
from .generator import AssetReport, HealthReport

NOT_AVAILABLE = "n/a"


def _format_ratio(value: Decimal | None) -> str:
    if value is None:
        return NOT_AVAILABLE
    return display(value, RATIO_DISPLAY_SCALE)


def format_asset_line(asset: AssetReport) -> str:
    """One report line for a tracked asset."""
    return (
        f"{asset.asset_name}: "
        f"t{asset.asset_name} held {display(asset.claim_token_balance)} | "
        f"health {_format_ratio(asset.health_ratio_display)} | "
        f"free {display(asset.free_assets)} | "
        f"fixed-price pools {display(asset.pool_assets_fixed_price)} | "
        f"proportional pools {display(asset.pool_assets_proportional)} | "
        f"t{asset.asset_name} supply {display(asset.claim_token_total_supply)}"
    )


def format_report_message(report: HealthReport) -> str:
    """Plain-text message for the notification channel."""
    block = report.block_number if report.block_number is not None else "latest"
    lines = [f"Tokemak health check (block {block})"]
    lines.extend(format_asset_line(asset) for asset in report.assets)
    return "\n".join(lines)


def format_report_table(report: HealthReport, console: Console | None = None) -> None:
    """Print a rich table of the report to stdout."""
    console = console or Console()

    table = Table(expand=True, show_lines=False)
    table.add_column("Asset", style="cyan", no_wrap=True)
    table.add_column("tAsset Held", justify="right")
    table.add_column("Health", justify="right", style="bold")
    table.add_column("Free", justify="right", style="green")
    table.add_column("Fixed-Price Pools", justify="right", style="yellow")
    table.add_column("Proportional Pools", justify="right", style="yellow")
    table.add_column("Total Assets", justify="right", style="green")
    table.add_column("tAsset Supply", justify="right", style="dim")

    for asset in report.assets:
        health = asset.health_ratio_display
        if health is None:
            health_cell = f"[dim]{NOT_AVAILABLE}[/]"
        elif health < 1:
            health_cell = f"[red]{_format_ratio(health)}[/]"
        else:
            health_cell = _format_ratio(health)

        table.add_row(
            asset.asset_name,
            display(asset.claim_token_balance),
            health_cell,
            display(asset.free_assets),
            display(asset.pool_assets_fixed_price),
            display(asset.pool_assets_proportional),
            display(asset.total_underlying_assets),
            display(asset.claim_token_total_supply),
        )

    block = report.block_number if report.block_number is not None else "latest"
    console.print()
    console.print(
        Panel(
            table,
            title=f"[bold white]Tokemak Health Check[/] [dim](block {block})[/]",
            border_style="white",
        )
    )
    console.print()
