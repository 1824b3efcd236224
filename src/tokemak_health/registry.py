"""Asset registry: which strategy backs each tracked asset symbol."""

from __future__ import annotations

import json
from pathlib import Path

from web3 import Web3

from .exceptions import ConfigurationError
from .logger import get_logger
from .settings import HealthSettings

logger = get_logger(__name__)


def _read_registry_file(path: Path) -> dict[str, str]:
    try:
        with path.open() as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Cannot read registry file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Registry file {path} must contain a JSON object of symbol -> strategy"
        )
    return data


def validate_registry(raw: dict[str, object]) -> dict[str, str]:
    """Normalize a symbol -> strategy mapping.

    Raises:
        ConfigurationError: If the registry is empty, a symbol is blank or a
            strategy is not a valid address.
    """
    if not raw:
        raise ConfigurationError("Asset registry is empty")

    registry: dict[str, str] = {}
    seen_strategies: dict[str, str] = {}
    for symbol, strategy in raw.items():
        if not isinstance(symbol, str) or not symbol.strip():
            raise ConfigurationError(f"Registry entry has a blank symbol: {symbol!r}")
        if not isinstance(strategy, str) or not Web3.is_address(strategy):
            raise ConfigurationError(
                f"Registry entry {symbol} has an invalid strategy address: {strategy!r}"
            )
        checksum = Web3.to_checksum_address(strategy)
        if checksum in seen_strategies:
            raise ConfigurationError(
                f"Strategy {checksum} is registered for both "
                f"{seen_strategies[checksum]} and {symbol}"
            )
        seen_strategies[checksum] = symbol
        registry[symbol.strip()] = checksum
    return registry


def load_registry(config: HealthSettings) -> dict[str, str]:
    """Load the registry for one audit cycle.

    ``registry_path`` (JSON) takes precedence over the ``registry`` table.
    """
    if config.registry_path is not None:
        logger.debug("Loading asset registry from %s", config.registry_path)
        raw = _read_registry_file(config.registry_path)
    else:
        raw = dict(config.registry)
    registry = validate_registry(raw)
    logger.info("Loaded %d registry entries: %s", len(registry), ", ".join(registry))
    return registry
