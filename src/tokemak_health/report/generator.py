from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from decimal import Decimal

from ..units import RATIO_DISPLAY_SCALE, ratio, rescale, total


@dataclass(frozen=True)
class AssetReport:
    """Coverage of one tracked asset for a single audit cycle.

    ``total_underlying_assets`` is always
    ``free_assets + pool_assets_fixed_price + pool_assets_proportional``;
    build instances with ``build_asset_report``.
    """

    asset_name: str
    claim_token_balance: Decimal
    claim_token_total_supply: Decimal
    total_underlying_assets: Decimal
    free_assets: Decimal
    pool_assets_fixed_price: Decimal
    pool_assets_proportional: Decimal

    @property
    def health_ratio(self) -> Decimal | None:
        """Assets over liabilities at full precision; ``None`` without liabilities."""
        if self.claim_token_total_supply == 0:
            return None
        return ratio(self.total_underlying_assets, self.claim_token_total_supply)

    @property
    def health_ratio_display(self) -> Decimal | None:
        health_ratio = self.health_ratio
        if health_ratio is None:
            return None
        return rescale(health_ratio, RATIO_DISPLAY_SCALE)

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {
            key: str(value) if isinstance(value, Decimal) else value
            for key, value in asdict(self).items()
        }
        display_ratio = self.health_ratio_display
        data["health_ratio"] = str(display_ratio) if display_ratio is not None else None
        return data


@dataclass(frozen=True)
class HealthReport:
    """All asset reports of one audit cycle, pinned to a block."""

    block_number: int | None
    assets: list[AssetReport]
    generated_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    def to_dict(self) -> dict[str, object]:
        return {
            "block_number": self.block_number,
            "generated_at": self.generated_at.isoformat(),
            "assets": [asset.to_dict() for asset in self.assets],
        }


def build_asset_report(
    asset_name: str,
    claim_token_balance: Decimal,
    claim_token_total_supply: Decimal,
    free_assets: Decimal,
    pool_assets_fixed_price: Decimal,
    pool_assets_proportional: Decimal,
) -> AssetReport:
    """Assemble an ``AssetReport``, deriving the total from its three parts."""
    return AssetReport(
        asset_name=asset_name,
        claim_token_balance=claim_token_balance,
        claim_token_total_supply=claim_token_total_supply,
        total_underlying_assets=total(
            [free_assets, pool_assets_fixed_price, pool_assets_proportional]
        ),
        free_assets=free_assets,
        pool_assets_fixed_price=pool_assets_fixed_price,
        pool_assets_proportional=pool_assets_proportional,
    )
