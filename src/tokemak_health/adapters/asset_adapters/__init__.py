from __future__ import annotations

from .base import BaseExposureAdapter
from .proportional_pools import ProportionalPoolAdapter
from .share_price_pools import SharePricePoolAdapter

ADAPTER_REGISTRY: dict[str, type[BaseExposureAdapter]] = {
    "proportional_pools": ProportionalPoolAdapter,
    "share_price_pools": SharePricePoolAdapter,
}

EXPOSURE_ADAPTERS: list[type[BaseExposureAdapter]] = list(ADAPTER_REGISTRY.values())


def get_adapter_class(adapter_name: str) -> type[BaseExposureAdapter]:
    """Get adapter class by name.

    Args:
        adapter_name: Name of the adapter (case-insensitive)

    Returns:
        Adapter class

    Raises:
        ValueError: If adapter_name is not recognized
    """
    adapter_name_normalized = adapter_name.lower()
    if adapter_name_normalized not in ADAPTER_REGISTRY:
        raise ValueError(
            f"Unknown adapter '{adapter_name}'. "
            f"Available: {', '.join(ADAPTER_REGISTRY.keys())}"
        )
    return ADAPTER_REGISTRY[adapter_name_normalized]


__all__ = [
    "ADAPTER_REGISTRY",
    "BaseExposureAdapter",
    "EXPOSURE_ADAPTERS",
    "ProportionalPoolAdapter",
    "SharePricePoolAdapter",
    "get_adapter_class",
]
