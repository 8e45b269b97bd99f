"""Tests for settings configuration loading."""

from __future__ import annotations

from textwrap import dedent

import pytest
from pydantic import ValidationError

from farm_valuator.settings import ValuatorSettings


def _write_config(tmp_path, body: str):
    config_path = tmp_path / "config.toml"
    config_path.write_text(dedent(body).strip())
    return config_path


def test_loads_table_from_config_file(tmp_path, monkeypatch):
    config_path = _write_config(
        tmp_path,
        """
        [farm_valuator]
        block_number = 1234
        max_calls = 9
        rpc_delay = 0.33
        price_feed = "STATIC"
        log_level = "debug"

        [farm_valuator.rpc_urls]
        42161 = "https://arb.example"

        [farm_valuator.static_prices]
        gmx = 35.5

        [farm_valuator.auxiliary_contracts]
        GMX = "0x1111111111111111111111111111111111111111"
        """,
    )
    monkeypatch.setenv("FARM_VALUATOR_CONFIG", str(config_path))

    settings = ValuatorSettings()

    assert settings.block_number == 1234
    assert settings.max_calls == 9
    assert settings.rpc_delay == 0.33
    assert settings.price_feed == "static"
    assert settings.log_level == "DEBUG"
    assert settings.rpc_urls == {42161: "https://arb.example"}
    assert settings.rpc_url_for(42161) == "https://arb.example"
    assert settings.rpc_url_for(1) is None
    assert settings.static_prices == {"gmx": 35.5}
    assert settings.auxiliary_contracts == {
        "gmx": "0x1111111111111111111111111111111111111111"
    }


def test_loads_top_level_tokens_and_positions(tmp_path, monkeypatch):
    config_path = _write_config(
        tmp_path,
        """
        [tokens.gmx]
        chain_id = 42161
        address = "0xfc5A1A6EB076a2C7aD06eD22C90d7E710E35ad0a"
        decimals = 18
        price_feed_key = "gmx"

        [[positions]]
        protocol = "gmx"
        kind = "staking"
        """,
    )
    monkeypatch.setenv("FARM_VALUATOR_CONFIG", str(config_path))

    settings = ValuatorSettings()

    assert settings.tokens["gmx"]["decimals"] == 18
    assert settings.positions == [{"protocol": "gmx", "kind": "staking"}]


def test_default_config_path_in_working_directory(tmp_path):
    (tmp_path / "farm-valuator.toml").write_text("max_calls = 3\n")

    assert ValuatorSettings().max_calls == 3


def test_env_overrides_file_and_cli_overrides_env(tmp_path, monkeypatch):
    config_path = _write_config(
        tmp_path,
        """
        price_feed = "coingecko"
        max_calls = 2
        """,
    )
    monkeypatch.setenv("FARM_VALUATOR_CONFIG", str(config_path))
    monkeypatch.setenv("FARM_VALUATOR_PRICE_FEED", "static")
    monkeypatch.setenv("FARM_VALUATOR_MAX_CALLS", "4")

    settings = ValuatorSettings()
    assert settings.price_feed == "static"
    assert settings.max_calls == 4

    settings = ValuatorSettings(max_calls=7)
    assert settings.max_calls == 7


def test_missing_config_file_yields_defaults(tmp_path, monkeypatch):
    monkeypatch.setenv("FARM_VALUATOR_CONFIG", str(tmp_path / "absent.toml"))

    settings = ValuatorSettings()

    assert settings.price_feed == "coingecko"
    assert settings.positions == []
    assert settings.block_number is None


def test_secret_in_config_file_is_rejected(tmp_path, monkeypatch):
    config_path = _write_config(
        tmp_path,
        """
        [farm_valuator]
        coingecko_api_key = "leaked"
        """,
    )
    monkeypatch.setenv("FARM_VALUATOR_CONFIG", str(config_path))

    with pytest.raises(ValueError, match="Security violation"):
        ValuatorSettings()


def test_secret_from_env_is_redacted(monkeypatch):
    monkeypatch.setenv("FARM_VALUATOR_COINGECKO_API_KEY", "cg-secret")

    settings = ValuatorSettings()

    assert settings.coingecko_api_key.get_secret_value() == "cg-secret"
    safe = settings.as_safe_dict()
    assert safe["coingecko_api_key"] == "***redacted***"
    assert "cg-secret" not in str(safe)


def test_max_calls_must_be_positive():
    with pytest.raises(ValidationError, match="greater than 0"):
        ValuatorSettings(max_calls=0)


def test_price_request_retries_at_least_one():
    with pytest.raises(ValidationError, match="greater than or equal to 1"):
        ValuatorSettings(price_request_retries=0)
