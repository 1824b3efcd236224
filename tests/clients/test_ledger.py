from __future__ import annotations

from types import SimpleNamespace

import pytest
from web3 import Web3
from web3.exceptions import ContractLogicError

from tokemak_health.clients.ledger import LedgerClient
from tokemak_health.exceptions import LedgerReadError

from conftest import DAI, MANAGER, STRATEGY, TDAI


class _Call:
    def __init__(self, result, calls: list[dict]):
        self._result = result
        self._calls = calls

    def call(self, *args, **kwargs):
        self._calls.append(kwargs)
        if isinstance(self._result, Exception):
            raise self._result
        return self._result


class DummyWeb3:
    """Just enough of Web3 for contract calls: ``eth.contract(...).functions``."""

    def __init__(self, functions: dict[str, object], block_number: int = 100):
        self.calls: list[dict] = []
        self.contracts: list[str] = []
        calls = self.calls
        namespace = SimpleNamespace(
            **{
                name: (lambda *args, _result=result: _Call(_result, calls))
                for name, result in functions.items()
            }
        )

        def contract(address, abi):
            self.contracts.append(address)
            return SimpleNamespace(functions=namespace)

        self.eth = SimpleNamespace(contract=contract, block_number=block_number)


def _client(settings, **functions) -> tuple[LedgerClient, DummyWeb3]:
    w3 = DummyWeb3(functions)
    return LedgerClient(settings, w3=w3), w3  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_reads_raw_integers_at_pinned_block(settings):
    client, w3 = _client(
        settings, balanceOf=1234, totalSupply=10**24, decimals=18
    )

    assert await client.read_balance(DAI, MANAGER) == 1234
    assert await client.read_total_supply(DAI) == 10**24
    assert await client.read_token_decimals(DAI) == 18
    assert all(call["block_identifier"] == 18_500_000 for call in w3.calls)
    assert w3.contracts[0] == Web3.to_checksum_address(DAI)


@pytest.mark.asyncio
async def test_block_defaults_to_latest_and_can_be_pinned(settings):
    settings.block_number = None
    client, w3 = _client(settings, totalSupply=1)

    assert client.block_identifier == "latest"
    client.pin_block(await client.read_block_number())
    await client.read_total_supply(DAI)

    assert w3.calls[-1]["block_identifier"] == 100


@pytest.mark.asyncio
async def test_reverted_call_raises_ledger_read_error(settings):
    client, _ = _client(settings, totalSupply=ContractLogicError("execution reverted"))

    with pytest.raises(LedgerReadError, match="totalSupply"):
        await client.read_total_supply(DAI)


@pytest.mark.parametrize("bad_value", ["12", -1, True, None])
@pytest.mark.asyncio
async def test_malformed_uint_raises_ledger_read_error(settings, bad_value):
    client, _ = _client(settings, balanceOf=bad_value)

    with pytest.raises(LedgerReadError, match="non-uint"):
        await client.read_balance(DAI, MANAGER)


@pytest.mark.asyncio
async def test_invalid_account_raises_ledger_read_error(settings):
    client, _ = _client(settings, balanceOf=1)

    with pytest.raises(LedgerReadError):
        await client.read_balance(DAI, "not-an-address")


@pytest.mark.asyncio
async def test_strategy_addresses_are_checksummed(settings):
    client, _ = _client(settings, want=DAI, tAsset=TDAI)

    assert await client.read_strategy_want(STRATEGY) == Web3.to_checksum_address(DAI)
    assert await client.read_strategy_claim_token(
        STRATEGY
    ) == Web3.to_checksum_address(TDAI)


@pytest.mark.asyncio
async def test_invalid_strategy_address_raises(settings):
    client, _ = _client(settings, want="0x1234")

    with pytest.raises(LedgerReadError, match="invalid address"):
        await client.read_strategy_want(STRATEGY)


@pytest.mark.asyncio
async def test_non_string_metadata_raises_ledger_read_error(settings):
    client, _ = _client(settings, symbol=b"MKR" + b"\x00" * 29, name="Maker")

    assert await client.read_token_name(DAI) == "Maker"
    with pytest.raises(LedgerReadError, match="non-string"):
        await client.read_token_symbol(DAI)


@pytest.mark.asyncio
async def test_virtual_price_read(settings):
    client, _ = _client(settings, get_virtual_price=1_020_000_000_000_000_000)

    assert await client.read_pool_virtual_price(DAI) == 1_020_000_000_000_000_000


@pytest.mark.integration
@pytest.mark.asyncio
async def test_reads_dai_metadata_from_mainnet(settings):
    from tokemak_health.constants import DAI_STRATEGY

    settings.rpc_url = None
    settings.block_number = None
    ledger = LedgerClient(settings)

    ledger.pin_block(await ledger.read_block_number())
    want = await ledger.read_strategy_want(DAI_STRATEGY)

    assert await ledger.read_token_symbol(want) == "DAI"
    assert await ledger.read_token_decimals(want) == 18
