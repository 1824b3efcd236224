from __future__ import annotations

from .formatter import format_report_message, format_report_table
from .generator import AssetReport, HealthReport, build_asset_report
from .publisher import notify_operator, publish_report

__all__ = [
    "AssetReport",
    "HealthReport",
    "build_asset_report",
    "format_report_message",
    "format_report_table",
    "notify_operator",
    "publish_report",
]
