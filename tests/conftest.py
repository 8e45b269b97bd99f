from __future__ import annotations

import pytest

from farm_valuator.abi import (
    load_reward_tracker_abi,
    load_staking_rewards_abi,
    load_vester_abi,
)
from farm_valuator.domain import PositionDescriptor, PositionKind
from farm_valuator.settings import ValuatorSettings
from tests.fakes import (
    ESGMX,
    FEE_GMX_TRACKER,
    GLP_TRACKER,
    GMX,
    GMX_VESTER,
    GMX_WETH_FARM,
    STAKED_GMX_TRACKER,
    WETH,
    FakePriceFeed,
)


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Keep user config files and FARM_VALUATOR_* variables out of tests."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("FARM_VALUATOR_CONFIG", raising=False)
    monkeypatch.delenv("FARM_VALUATOR_LOG_LEVEL", raising=False)
    monkeypatch.delenv("FARM_VALUATOR_PRICE_FEED", raising=False)
    monkeypatch.delenv("FARM_VALUATOR_COINGECKO_API_KEY", raising=False)


@pytest.fixture
def settings() -> ValuatorSettings:
    return ValuatorSettings(rpc_delay=0, rpc_jitter=0)


@pytest.fixture
def price_feed(settings) -> FakePriceFeed:
    return FakePriceFeed(settings, {"gmx": "35.5", "weth": "3000.25"})


@pytest.fixture
def staked_gmx() -> PositionDescriptor:
    return PositionDescriptor(
        name="Staked GMX",
        protocol="gmx",
        kind=PositionKind.STAKING,
        chain_id=42161,
        address=STAKED_GMX_TRACKER,
        abi=load_reward_tracker_abi(),
        token=GMX,
        reward_token=ESGMX,
        fee_tracker_address=FEE_GMX_TRACKER,
        fee_reward_token=WETH,
    )


@pytest.fixture
def vested_gmx() -> PositionDescriptor:
    return PositionDescriptor(
        name="Vested GMX",
        protocol="gmx",
        kind=PositionKind.VESTING,
        chain_id=42161,
        address=GMX_VESTER,
        abi=load_vester_abi(),
        token=GMX,
        reward_token=ESGMX,
    )


@pytest.fixture
def staked_glp() -> PositionDescriptor:
    return PositionDescriptor(
        name="Staked GLP",
        protocol="gmx",
        kind=PositionKind.STAKING,
        chain_id=42161,
        address=GLP_TRACKER,
        abi=load_reward_tracker_abi(),
        token=GMX,
        reward_token=ESGMX,
    )


@pytest.fixture
def gmx_farm() -> PositionDescriptor:
    return PositionDescriptor(
        name="GMX-WETH farm",
        protocol="farms",
        kind=PositionKind.FARM,
        chain_id=42161,
        address=GMX_WETH_FARM,
        abi=load_staking_rewards_abi(),
        token=GMX,
        reward_token=WETH,
    )
