"""Settings module with unified configuration precedence: CLI > ENV > CONFIG FILE."""

from __future__ import annotations

import os
import tomllib
from enum import Enum
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    field_validator,
)
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from .constants import (
    AUDIT_INTERVAL_SECONDS,
    CLAIM_TOKEN_OVERRIDES,
    DEFAULT_ACCOUNTS_TO_CHECK,
    DEFAULT_MAINNET_RPC_URL,
    DEFAULT_REGISTRY,
    EXTRA_FREE_BALANCE_ACCOUNTS,
    INFURA_MAINNET_URL_TEMPLATE,
    PROPORTIONAL_POOLS,
    SHARE_PRICE_POOLS,
    TOKEMAK_COMMITTEE_TELEGRAM_CHAT_ID,
)
from .domain import ProportionalPool, SharePricePool

load_dotenv()

SECRET_FIELDS = {"telegram_token", "infura_api_key"}


class DryRunFormat(str, Enum):
    TABLE = "table"
    JSON = "json"


class SharePricePoolSettings(BaseModel):
    """A Curve style pool entry from the config file."""

    pool: str
    lp_token: str
    rewards: str | None = None

    model_config = ConfigDict(extra="ignore")


def _default_share_price_pools() -> list[SharePricePoolSettings]:
    return [SharePricePoolSettings(**entry) for entry in SHARE_PRICE_POOLS]


class HealthSettings(BaseSettings):
    """Single source of truth for configuration. Values may come from:
    - CLI (init kwargs)
    - ENV / .env (prefixed with TOKEMAK_HEALTH_)
    - Config file (TOML), lowest precedence

    Do not read os.environ or files elsewhere in the codebase.
    """

    # --- global toggles ---
    dry_run: bool = True
    dry_run_format: DryRunFormat = DryRunFormat.TABLE

    # --- ledger ---
    rpc_url: str | None = None
    infura_api_key: SecretStr | None = None
    block_number: int | None = None

    # --- notification ---
    telegram_token: SecretStr | None = None
    telegram_chat_id: str = TOKEMAK_COMMITTEE_TELEGRAM_CHAT_ID
    operator_chat_id: str | None = None

    # --- registry ---
    registry: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_REGISTRY))
    registry_path: Path | None = None

    # --- accounts and pools ---
    accounts_to_check: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ACCOUNTS_TO_CHECK)
    )
    extra_free_balance_accounts: dict[str, list[str]] = Field(
        default_factory=lambda: {
            symbol: list(accounts)
            for symbol, accounts in EXTRA_FREE_BALANCE_ACCOUNTS.items()
        }
    )
    claim_token_overrides: dict[str, str] = Field(
        default_factory=lambda: dict(CLAIM_TOKEN_OVERRIDES)
    )
    proportional_pools: list[str] = Field(
        default_factory=lambda: list(PROPORTIONAL_POOLS)
    )
    share_price_pools: list[SharePricePoolSettings] = Field(
        default_factory=_default_share_price_pools
    )

    # --- RPC settings ---
    max_calls: int = Field(default=5, gt=0)
    rpc_delay: float = Field(default=0.15, ge=0)
    rpc_jitter: float = Field(default=0.10, ge=0)

    # --- scheduling ---
    global_timeout_seconds: float | None = 600.0
    audit_interval_seconds: float = Field(default=AUDIT_INTERVAL_SECONDS, gt=0)

    # --- logging ---
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="TOKEMAK_HEALTH_",
        env_file=".env",
        extra="ignore",  # ignore unknown keys in env/config file
    )

    @field_validator("telegram_token", "infura_api_key", mode="before")
    @classmethod
    def wrap_secrets(cls, v: Any) -> SecretStr | None:
        """Wrap string secrets in SecretStr."""
        if v is None or isinstance(v, SecretStr):
            return v
        return SecretStr(v)

    @field_validator("telegram_chat_id", "operator_chat_id", mode="before")
    @classmethod
    def chat_ids_as_strings(cls, v: Any) -> Any:
        """TOML and env allow bare integers for chat ids."""
        if isinstance(v, int):
            return str(v)
        return v

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Custom config-file source with explicit precedence: CLI > ENV > FILE."""
        env_cfg = os.environ.get("TOKEMAK_HEALTH_CONFIG")
        cfg_path = Path(env_cfg) if env_cfg else None

        class TomlConfigSource(PydanticBaseSettingsSource):
            def __init__(self, settings_cls: type[BaseSettings], path: Path | None):
                super().__init__(settings_cls)
                self._path = path

            def get_field_value(
                self, field: Any, field_name: str
            ) -> tuple[Any, str, bool]:
                return None, "", False

            def __call__(self) -> dict[str, Any]:
                if not self._path:
                    local_config = Path("tokemak-health.toml")
                    user_config = (
                        Path.home() / ".config" / "tokemak-health" / "config.toml"
                    )
                    if local_config.exists():
                        self._path = local_config
                    elif user_config.exists():
                        self._path = user_config
                    else:
                        return {}

                if not self._path.exists():
                    return {}

                with self._path.open("rb") as f:
                    data = tomllib.load(f)  # supports top-level or [tokemak_health]
                body = data.get("tokemak_health", data)
                if not isinstance(body, dict):
                    return {}

                for key in SECRET_FIELDS:
                    if key in body:
                        raise ValueError(
                            f"Security violation: '{key}' found in TOML config file. "
                            f"Secrets must only be provided via environment variables or CLI flags."
                        )

                return body

        return (
            init_settings,  # CLI (highest)
            env_settings,  # ENV
            dotenv_settings,
            TomlConfigSource(settings_cls, cfg_path),  # CONFIG (lowest)
            file_secret_settings,
        )

    def as_safe_dict(self) -> dict[str, Any]:
        """Return the config as a JSON-friendly dict with secrets redacted."""
        data = self.model_dump(mode="json")
        for key in SECRET_FIELDS:
            if getattr(self, key):
                data[key] = "***redacted***"
        return data

    @property
    def resolved_rpc_url(self) -> str:
        """Explicit RPC URL, else Infura when a key is set, else the public default."""
        if self.rpc_url:
            return self.rpc_url
        if self.infura_api_key:
            return INFURA_MAINNET_URL_TEMPLATE.format(
                api_key=self.infura_api_key.get_secret_value()
            )
        return DEFAULT_MAINNET_RPC_URL

    @property
    def using_default_rpc(self) -> bool:
        return not self.rpc_url and not self.infura_api_key

    @property
    def proportional_pool_descriptors(self) -> list[ProportionalPool]:
        return [ProportionalPool(address=address) for address in self.proportional_pools]

    @property
    def share_price_pool_descriptors(self) -> list[SharePricePool]:
        return [
            SharePricePool(pool=p.pool, lp_token=p.lp_token, rewards=p.rewards or None)
            for p in self.share_price_pools
        ]
