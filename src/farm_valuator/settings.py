"""Settings module with unified configuration precedence: CLI > ENV > CONFIG FILE."""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import (
    Field,
    SecretStr,
    field_validator,
)
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

load_dotenv()

CONFIG_ENV_VAR = "FARM_VALUATOR_CONFIG"
CONFIG_TABLE = "farm_valuator"
SECRET_FIELDS = {"coingecko_api_key"}


def default_config_paths() -> list[Path]:
    return [
        Path("farm-valuator.toml"),
        Path.home() / ".config" / "farm-valuator" / "config.toml",
    ]


class ValuatorSettings(BaseSettings):
    """Single source of truth for configuration. Values may come from:
    - CLI (init kwargs)
    - ENV / .env (prefixed with FARM_VALUATOR_)
    - Config file (TOML), lowest precedence

    Do not read os.environ or files elsewhere in the codebase.
    """

    # --- chain access ---
    rpc_urls: dict[int, str] = Field(default_factory=dict)
    block_number: int | None = None
    rpc_timeout: float = Field(default=15.0, gt=0)

    # --- RPC throttling ---
    max_calls: int = Field(default=5, gt=0)
    rpc_delay: float = Field(default=0.15, ge=0)
    rpc_jitter: float = Field(default=0.10, ge=0)

    # --- price feed ---
    price_feed: str = "coingecko"
    coingecko_endpoint: str = "https://api.coingecko.com/api/v3"
    coingecko_api_key: SecretStr | None = None
    coingecko_api_key_header: str = "x-cg-demo-api-key"
    price_request_timeout: float = Field(default=10.0, gt=0)
    price_request_retries: int = Field(default=3, ge=1)
    static_prices: dict[str, float] = Field(default_factory=dict)

    # --- catalog (from config file) ---
    tokens: dict[str, dict[str, Any]] = Field(default_factory=dict)
    positions: list[dict[str, Any]] = Field(default_factory=list)
    auxiliary_contracts: dict[str, str] = Field(default_factory=dict)

    # --- logging ---
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="FARM_VALUATOR_",
        env_file=".env",
        extra="ignore",  # ignore unknown keys in env/config file
    )

    @field_validator("coingecko_api_key", mode="before")
    @classmethod
    def wrap_secrets(cls, v: Any) -> SecretStr | None:
        """Wrap string secrets in SecretStr."""
        if v is None or isinstance(v, SecretStr):
            return v
        return SecretStr(v)

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> str:
        return str(v).upper()

    @field_validator("price_feed", mode="before")
    @classmethod
    def normalize_price_feed(cls, v: Any) -> str:
        return str(v).lower()

    @field_validator("auxiliary_contracts", mode="after")
    @classmethod
    def normalize_protocol_keys(cls, v: dict[str, str]) -> dict[str, str]:
        return {protocol.lower(): address for protocol, address in v.items()}

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
        env_cfg = os.environ.get(CONFIG_ENV_VAR)
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
                    self._path = next(
                        (path for path in default_config_paths() if path.exists()),
                        None,
                    )
                    if self._path is None:
                        return {}

                if not self._path.exists():
                    return {}

                with self._path.open("rb") as f:
                    data = tomllib.load(f)  # supports top-level or [farm_valuator]
                body = data.get(CONFIG_TABLE, data)
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
            dotenv_settings,  # .env
            TomlConfigSource(settings_cls, cfg_path),  # CONFIG (lowest)
            file_secret_settings,  # optional secrets dir
        )

    def as_safe_dict(self) -> dict[str, Any]:
        """Return the config as a dict with secrets redacted."""
        data = self.model_dump(mode="json")
        if self.coingecko_api_key:
            data["coingecko_api_key"] = "***redacted***"
        return data

    def rpc_url_for(self, chain_id: int) -> str | None:
        """RPC endpoint configured for ``chain_id``, if any."""
        return self.rpc_urls.get(chain_id)
