from __future__ import annotations

from decimal import Decimal

import pytest

from farm_valuator.adapters.price_feeds import CoinGeckoPriceFeed, StaticPriceFeed
from farm_valuator.adapters.protocol_adapters import GmxAdapter
from farm_valuator.domain import ProtocolType
from farm_valuator.errors import InvalidAddressError, MalformedNumberError
from farm_valuator.orchestrator import build_price_feed, value_wallet
from farm_valuator.settings import ValuatorSettings
from tests.fakes import (
    RAW_POSITIONS,
    RAW_TOKENS,
    WALLET,
    FakeChainReader,
    FakeContract,
    FakePriceFeed,
)

GMX_TRACKER = RAW_POSITIONS[0]["address"]
FEE_TRACKER = RAW_POSITIONS[0]["fee_tracker_address"]
FARM = RAW_POSITIONS[1]["address"]


@pytest.fixture
def config():
    return ValuatorSettings(
        tokens=RAW_TOKENS,
        positions=RAW_POSITIONS,
        rpc_delay=0,
        rpc_jitter=0,
        static_prices={"gmx": 20, "weth": 2000},
    )


@pytest.fixture
def reader():
    return FakeChainReader(
        {
            GMX_TRACKER: FakeContract({"stakedAmounts": 10**18, "claimable": 0}),
            FEE_TRACKER: FakeContract({"claimable": 10**16}),
            FARM: FakeContract({"balanceOf": 2 * 10**18, "earned": 5 * 10**15}),
        }
    )


@pytest.mark.asyncio
async def test_values_wallet_per_protocol(config, reader):
    feed = FakePriceFeed(config, {"gmx": "20", "weth": "2000"})

    summaries = await value_wallet(config, WALLET, chain_reader=reader, price_feed=feed)

    assert list(summaries) == ["gmx", "farms"]
    assert summaries["gmx"].type == ProtocolType.FARMS
    # 1 GMX at 20 plus 0.01 WETH at 2000
    assert summaries["gmx"].usd_value == Decimal("40")
    # 2 GMX deposited at 20 plus 0.005 WETH earned at 2000
    assert summaries["farms"].usd_value == Decimal("50")
    assert len(feed.requests) == 2


@pytest.mark.asyncio
async def test_static_feed_is_one_snapshot_for_the_batch(config, reader, monkeypatch):
    feed = StaticPriceFeed(config)

    async def _no_fetch(tokens):
        raise AssertionError("static snapshot should be passed down")

    monkeypatch.setattr(feed, "fetch_prices", _no_fetch)

    summaries = await value_wallet(config, WALLET, chain_reader=reader, price_feed=feed)

    assert summaries["gmx"].usd_value == Decimal("40")


@pytest.mark.asyncio
async def test_failed_adapter_yields_empty_summary(config, reader, monkeypatch):
    async def _boom(self, *args, **kwargs):
        raise RuntimeError("adapter down")

    monkeypatch.setattr(GmxAdapter, "get_staking_info", _boom)
    feed = FakePriceFeed(config, {"gmx": "20"})

    summaries = await value_wallet(config, WALLET, chain_reader=reader, price_feed=feed)

    assert summaries["gmx"].items == []
    assert summaries["farms"].items


@pytest.mark.asyncio
async def test_malformed_number_is_not_swallowed(config, reader, monkeypatch):
    def _malformed(value, places=6):
        raise MalformedNumberError(value)

    monkeypatch.setattr("farm_valuator.pricing.usd.truncate_decimal", _malformed)
    feed = FakePriceFeed(config, {"gmx": "20"})

    with pytest.raises(MalformedNumberError):
        await value_wallet(config, WALLET, chain_reader=reader, price_feed=feed)


@pytest.mark.asyncio
async def test_fault_sink_is_passed_to_adapters(config, monkeypatch):
    faults = []
    reader = FakeChainReader()
    feed = FakePriceFeed(config, {})

    summaries = await value_wallet(
        config,
        WALLET,
        chain_reader=reader,
        price_feed=feed,
        fault_sink=lambda descriptor, fault: faults.append(descriptor.name),
    )

    assert all(not summary.items for summary in summaries.values())
    assert sorted(faults) == ["Staked GMX", "farms-farm-0x199070DD"]


@pytest.mark.asyncio
async def test_invalid_wallet_fails_before_any_read(config, reader):
    feed = FakePriceFeed(config, {"gmx": "20"})

    with pytest.raises(InvalidAddressError) as exc_info:
        await value_wallet(
            config, "0xnot-an-address", chain_reader=reader, price_feed=feed
        )

    assert exc_info.value.address == "0xnot-an-address"
    assert reader.requests == []
    assert feed.requests == []


@pytest.mark.asyncio
async def test_no_positions_configured(settings):
    assert await value_wallet(settings, WALLET) == {}


def test_build_price_feed():
    assert isinstance(build_price_feed(ValuatorSettings()), CoinGeckoPriceFeed)
    assert isinstance(
        build_price_feed(ValuatorSettings(price_feed="static")), StaticPriceFeed
    )
