from __future__ import annotations

from .asset_locator import AssetLocator
from .token_balances import TokenBalanceResolver

__all__ = [
    "AssetLocator",
    "TokenBalanceResolver",
]
