"""Read-only access to contract state over JSON-RPC."""

from __future__ import annotations

import asyncio
import random
from typing import Any

import backoff
from eth_typing import URI
from web3 import Web3
from web3.exceptions import ProviderConnectionError

from ..abi import load_curve_pool_abi, load_erc20_abi, load_strategy_abi
from ..exceptions import LedgerReadError
from ..logger import TRACE, get_logger
from ..settings import HealthSettings

logger = get_logger(__name__)


class LedgerClient:
    """Ledger accessor returning raw integers, strings and addresses.

    Scaling is the caller's job. Every failed or malformed call raises
    ``LedgerReadError`` naming the contract function and address.
    """

    def __init__(self, config: HealthSettings, w3: Web3 | None = None):
        self.config = config
        self.w3 = w3 or Web3(
            Web3.HTTPProvider(
                URI(config.resolved_rpc_url), request_kwargs={"timeout": 15}
            )
        )
        self.block_identifier: int | str = (
            config.block_number if config.block_number is not None else "latest"
        )

        self._erc20_abi = load_erc20_abi()
        self._strategy_abi = load_strategy_abi()
        self._curve_pool_abi = load_curve_pool_abi()

        self._rpc_sem = asyncio.Semaphore(config.max_calls)
        self._rpc_delay = config.rpc_delay
        self._rpc_jitter = config.rpc_jitter

    @backoff.on_exception(
        backoff.expo, (ProviderConnectionError), max_time=30, jitter=backoff.full_jitter
    )
    async def _rpc(self, fn, *args, **kwargs):
        """Throttle + backoff a single RPC."""
        async with self._rpc_sem:
            try:
                return await asyncio.to_thread(fn, *args, **kwargs)
            finally:
                delay = self._rpc_delay + random.random() * self._rpc_jitter
                if delay > 0:
                    await asyncio.sleep(delay)

    async def _call(
        self, address: str, abi: list[dict], function_name: str, *args: Any
    ) -> Any:
        label = f"{function_name}() on {address}"
        try:
            contract = self.w3.eth.contract(
                address=Web3.to_checksum_address(address), abi=abi
            )
            fn = getattr(contract.functions, function_name)(*args).call
            result = await self._rpc(fn, block_identifier=self.block_identifier)
        except Exception as e:
            raise LedgerReadError(f"Ledger call {label} failed: {e}") from e
        logger.log(TRACE, "%s -> %r", label, result)
        return result

    async def _call_uint(
        self, address: str, abi: list[dict], function_name: str, *args: Any
    ) -> int:
        result = await self._call(address, abi, function_name, *args)
        if isinstance(result, bool) or not isinstance(result, int) or result < 0:
            raise LedgerReadError(
                f"Ledger call {function_name}() on {address} returned "
                f"non-uint value {result!r}"
            )
        return result

    async def _call_str(self, address: str, abi: list[dict], function_name: str) -> str:
        result = await self._call(address, abi, function_name)
        if not isinstance(result, str):
            raise LedgerReadError(
                f"Ledger call {function_name}() on {address} returned "
                f"non-string value {result!r}"
            )
        return result

    async def _call_address(
        self, address: str, abi: list[dict], function_name: str
    ) -> str:
        result = await self._call(address, abi, function_name)
        if not isinstance(result, str) or not Web3.is_address(result):
            raise LedgerReadError(
                f"Ledger call {function_name}() on {address} returned "
                f"invalid address {result!r}"
            )
        return Web3.to_checksum_address(result)

    def _account(self, account: str) -> str:
        try:
            return Web3.to_checksum_address(account)
        except ValueError as e:
            raise LedgerReadError(f"Invalid account address {account!r}") from e

    async def read_block_number(self) -> int:
        """Latest block number, used to pin a whole audit cycle."""
        try:
            block_number = await self._rpc(lambda: self.w3.eth.block_number)
        except Exception as e:
            raise LedgerReadError(f"Failed to read latest block number: {e}") from e
        if not isinstance(block_number, int):
            raise LedgerReadError(f"Invalid block number {block_number!r}")
        return block_number

    def pin_block(self, block_number: int) -> None:
        self.block_identifier = block_number

    async def read_token_decimals(self, token: str) -> int:
        return await self._call_uint(token, self._erc20_abi, "decimals")

    async def read_balance(self, token: str, account: str) -> int:
        return await self._call_uint(
            token, self._erc20_abi, "balanceOf", self._account(account)
        )

    async def read_total_supply(self, token: str) -> int:
        return await self._call_uint(token, self._erc20_abi, "totalSupply")

    async def read_pool_virtual_price(self, pool: str) -> int:
        """``get_virtual_price()`` of a Curve pool, 18 decimals."""
        return await self._call_uint(pool, self._curve_pool_abi, "get_virtual_price")

    async def read_token_name(self, token: str) -> str:
        return await self._call_str(token, self._erc20_abi, "name")

    async def read_token_symbol(self, token: str) -> str:
        return await self._call_str(token, self._erc20_abi, "symbol")

    async def read_strategy_want(self, strategy: str) -> str:
        return await self._call_address(strategy, self._strategy_abi, "want")

    async def read_strategy_claim_token(self, strategy: str) -> str:
        return await self._call_address(strategy, self._strategy_abi, "tAsset")
