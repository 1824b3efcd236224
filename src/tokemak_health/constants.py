"""Blockchain contract address constants."""

from typing import Optional, TypedDict


class SharePricePoolAddresses(TypedDict):
    pool: str
    lp_token: str
    rewards: Optional[str]


DEFAULT_MAINNET_RPC_URL = "https://eth.drpc.org"
INFURA_MAINNET_URL_TEMPLATE = "https://mainnet.infura.io/v3/{api_key}"

TELEGRAM_API_URL = "https://api.telegram.org"
TOKEMAK_COMMITTEE_TELEGRAM_CHAT_ID = "-1001175962929"

TOKEMAK_MANAGER = "0xa86e412109f77c45a3bc1c5870b880492fb86a14"
TOKEMAK_TREASURY = "0x8b4334d4812c530574bd4f2763fcd22de94a969b"

DAI_STRATEGY = "0xbd455373692c8f4bae2131d66bffd5fe26c6b659"

# Asset symbol -> strategy holding the claim token
DEFAULT_REGISTRY: dict[str, str] = {
    "DAI": DAI_STRATEGY,
}

# Strategy -> claim token to use instead of the strategy's tAsset().
# Default of the `claim_token_overrides` setting.
CLAIM_TOKEN_OVERRIDES: dict[str, str] = {}

DEFAULT_ACCOUNTS_TO_CHECK: list[str] = [TOKEMAK_MANAGER]

# Native ETH deposits are swept to the treasury before wrapping
EXTRA_FREE_BALANCE_ACCOUNTS: dict[str, list[str]] = {
    "WETH": [TOKEMAK_TREASURY],
}

# Uniswap V2 / SushiSwap pairs
PROPORTIONAL_POOLS: list[str] = [
    "0xd4e7a6e2d03e4e48dfc27dd3f46df1c176647e38",  # SushiSwap TOKE/WETH
    "0x5fa464cefe8901d66c09b85d5fcdc55b3738c688",  # Uniswap V2 TOKE/WETH
    "0xae461ca67b15dc8dc81ce7615e0320da1a9ab8d5",  # Uniswap V2 DAI/USDC
    "0xaaf5110db6e744ff70fb339de037b990a20bdace",  # SushiSwap DAI/USDC
]

# Curve pools; rewards is the Convex reward pool staking the LP token
SHARE_PRICE_POOLS: list[SharePricePoolAddresses] = [
    {
        "pool": "0xbebc44782c7db0a1a60cb6fe97d0b483032ff1c7",
        "lp_token": "0x6c3f90f043a72fa612cbac8115ee7e52bde6e490",
        "rewards": None,
    },
    {
        "pool": "0xd632f22692fac7611d2aa1c0d552930d43caed3b",
        "lp_token": "0xd632f22692fac7611d2aa1c0d552930d43caed3b",
        "rewards": "0xb900ef131301b307db5efcbed9dbb50a3e209b2e",
    },
]

VIRTUAL_PRICE_DECIMALS = 18
REWARDS_TOKEN_DECIMALS = 18

AUDIT_INTERVAL_SECONDS = 24 * 60 * 60
