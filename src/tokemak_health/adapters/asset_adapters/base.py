from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import TYPE_CHECKING

from ...domain import TokenRef
from ...processors.token_balances import TokenBalanceResolver
from ...settings import HealthSettings

if TYPE_CHECKING:
    from ...clients.ledger import LedgerClient


class BaseExposureAdapter(ABC):
    """Abstract base class for pool exposure calculators."""

    def __init__(
        self,
        config: HealthSettings,
        ledger: LedgerClient,
        resolver: TokenBalanceResolver,
    ):
        """Initialize the adapter with configuration.

        Args:
            config: Health check configuration
            ledger: Ledger accessor for the current cycle
            resolver: Token balance resolver for the current cycle
        """
        self.config = config
        self.ledger = ledger
        self.resolver = resolver

    @property
    @abstractmethod
    def adapter_name(self) -> str:
        """Return the name of this adapter."""
        ...

    @abstractmethod
    async def fetch_exposure(self, want: TokenRef, accounts: list[str]) -> Decimal:
        """Underlying ``want`` attributable to ``accounts``, at report scale."""
        ...
