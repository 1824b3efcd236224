from __future__ import annotations

import logging

import pytest

from tokemak_health.exceptions import LedgerReadError
from tokemak_health.settings import HealthSettings
from tokemak_health.state import AppState

STRATEGY = "0x1111111111111111111111111111111111111111"
OTHER_STRATEGY = "0x2222222222222222222222222222222222222222"
DAI = "0x3333333333333333333333333333333333333333"
TDAI = "0x4444444444444444444444444444444444444444"
MANAGER = "0x5555555555555555555555555555555555555555"
TREASURY = "0x6666666666666666666666666666666666666666"
PAIR = "0x7777777777777777777777777777777777777777"
OTHER_PAIR = "0x8888888888888888888888888888888888888888"
CURVE_POOL = "0x9999999999999999999999999999999999999999"
CURVE_LP = "0xaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaa"
REWARDS = "0xbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbb"
USDC = "0xcccccccccccccccccccccccccccccccccccccccc"
TUSDC = "0xdddddddddddddddddddddddddddddddddddddddd"

E18 = 10**18


class FakeLedger:
    """In-memory ledger keyed by lower-cased addresses."""

    def __init__(self, block_number: int = 19_000_000):
        self.block_number = block_number
        self.block_identifier: int | str = "latest"
        self.decimals: dict[str, int] = {}
        self.symbols: dict[str, str] = {}
        self.names: dict[str, str] = {}
        self.supplies: dict[str, int] = {}
        self.balances: dict[tuple[str, str], int] = {}
        self.virtual_prices: dict[str, int] = {}
        self.wants: dict[str, str] = {}
        self.claim_tokens: dict[str, str] = {}
        self.failures: dict[tuple[str, str], Exception] = {}
        self.calls: list[tuple[str, ...]] = []

    def add_token(
        self,
        address: str,
        symbol: str,
        decimals: int = 18,
        name: str | None = None,
        supply: int = 0,
    ) -> None:
        key = address.lower()
        self.symbols[key] = symbol
        self.names[key] = name or symbol
        self.decimals[key] = decimals
        self.supplies[key] = supply

    def add_strategy(self, strategy: str, want: str, claim_token: str) -> None:
        self.wants[strategy.lower()] = want
        self.claim_tokens[strategy.lower()] = claim_token

    def set_balance(self, token: str, account: str, raw: int) -> None:
        self.balances[(token.lower(), account.lower())] = raw

    def fail(self, method: str, address: str, error: Exception | None = None) -> None:
        self.failures[(method, address.lower())] = error or LedgerReadError(
            f"{method} reverted on {address}"
        )

    def _record(self, method: str, address: str, *extra: str) -> None:
        self.calls.append((method, address.lower(), *[e.lower() for e in extra]))
        failure = self.failures.get((method, address.lower()))
        if failure is not None:
            raise failure

    def called(self, method: str) -> list[tuple[str, ...]]:
        return [call for call in self.calls if call[0] == method]

    def _lookup(self, table: dict, method: str, address: str):
        try:
            return table[address.lower()]
        except KeyError:
            raise LedgerReadError(f"{method}() reverted on {address}") from None

    async def read_block_number(self) -> int:
        return self.block_number

    def pin_block(self, block_number: int) -> None:
        self.block_identifier = block_number

    async def read_token_decimals(self, token: str) -> int:
        self._record("decimals", token)
        return self._lookup(self.decimals, "decimals", token)

    async def read_token_symbol(self, token: str) -> str:
        self._record("symbol", token)
        return self._lookup(self.symbols, "symbol", token)

    async def read_token_name(self, token: str) -> str:
        self._record("name", token)
        return self._lookup(self.names, "name", token)

    async def read_balance(self, token: str, account: str) -> int:
        self._record("balanceOf", token, account)
        return self.balances.get((token.lower(), account.lower()), 0)

    async def read_total_supply(self, token: str) -> int:
        self._record("totalSupply", token)
        return self.supplies.get(token.lower(), 0)

    async def read_pool_virtual_price(self, pool: str) -> int:
        self._record("get_virtual_price", pool)
        return self._lookup(self.virtual_prices, "get_virtual_price", pool)

    async def read_strategy_want(self, strategy: str) -> str:
        self._record("want", strategy)
        return self._lookup(self.wants, "want", strategy)

    async def read_strategy_claim_token(self, strategy: str) -> str:
        self._record("tAsset", strategy)
        return self._lookup(self.claim_tokens, "tAsset", strategy)


@pytest.fixture
def fake_ledger() -> FakeLedger:
    ledger = FakeLedger()
    ledger.add_token(DAI, "DAI", name="Dai Stablecoin")
    ledger.add_token(TDAI, "tDAI", name="tokemak DAI")
    ledger.add_strategy(STRATEGY, want=DAI, claim_token=TDAI)
    return ledger


@pytest.fixture
def settings(monkeypatch) -> HealthSettings:
    """Settings isolated from the defaults' mainnet pools and overrides."""
    monkeypatch.delenv("TOKEMAK_HEALTH_CONFIG", raising=False)
    return HealthSettings(
        registry={"DAI": STRATEGY},
        accounts_to_check=[MANAGER],
        extra_free_balance_accounts={},
        claim_token_overrides={},
        proportional_pools=[],
        share_price_pools=[],
        block_number=18_500_000,
        rpc_url="http://localhost:8545",
        rpc_delay=0,
        rpc_jitter=0,
        global_timeout_seconds=5,
    )


@pytest.fixture
def state(settings: HealthSettings) -> AppState:
    return AppState(settings=settings, logger=logging.getLogger("test"))
