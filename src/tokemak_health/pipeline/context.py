from __future__ import annotations

from dataclasses import dataclass, field

from ..adapters.asset_adapters import BaseExposureAdapter
from ..clients.ledger import LedgerClient
from ..processors import AssetLocator, TokenBalanceResolver
from ..report import HealthReport
from ..state import AppState


@dataclass
class PipelineContext:
    """Everything one audit cycle needs. Built fresh for every cycle."""

    state: AppState
    ledger: LedgerClient
    resolver: TokenBalanceResolver
    locator: AssetLocator
    adapters: dict[str, BaseExposureAdapter] = field(default_factory=dict)
    registry: dict[str, str] = field(default_factory=dict)
    block_number: int | None = None
    report: HealthReport | None = None

    def adapter(self, name: str) -> BaseExposureAdapter:
        try:
            return self.adapters[name]
        except KeyError:
            raise RuntimeError(
                f"Adapter '{name}' has not been set up. Ensure build_context() is used to create the context."
            ) from None

    @property
    def report_required(self) -> HealthReport:
        if self.report is None:
            raise RuntimeError(
                "Report has not been set. Ensure collect_health_report() is called before accessing this property."
            )
        return self.report
