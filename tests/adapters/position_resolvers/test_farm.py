from __future__ import annotations

from dataclasses import replace
from decimal import Decimal

import pytest

from farm_valuator.adapters.position_resolvers import FarmReads, FarmResolver
from farm_valuator.domain import PositionKind, PriceQuote
from farm_valuator.errors import PositionConfigError
from tests.fakes import GMX, GMX_WETH_FARM, WALLET, WETH, FakeChainReader, FakeContract

QUOTES = {
    "gmx": PriceQuote(usd=Decimal("35.5")),
    "weth": PriceQuote(usd=Decimal("3000.25")),
}


def test_kind_and_methods():
    assert FarmResolver.kind is PositionKind.FARM
    assert (FarmResolver.balance_method, FarmResolver.reward_method) == (
        "balanceOf",
        "earned",
    )


@pytest.mark.asyncio
async def test_reads_deposit_and_earned(gmx_farm):
    contract = FakeContract({"balanceOf": 2 * 10**18, "earned": 10**15})
    resolver = FarmResolver(FakeChainReader())

    reads = await resolver.read(WALLET, gmx_farm, contract)

    assert reads == FarmReads(deposit=2 * 10**18, earned=10**15)
    assert contract.calls == [("balanceOf", (WALLET,)), ("earned", (WALLET,))]


@pytest.mark.asyncio
async def test_zero_deposit_skips_earned_read(gmx_farm):
    contract = FakeContract({"balanceOf": 0, "earned": 10**15})
    resolver = FarmResolver(FakeChainReader())

    assert await resolver.read(WALLET, gmx_farm, contract) is None
    assert contract.calls == [("balanceOf", (WALLET,))]


@pytest.mark.asyncio
async def test_read_errors_propagate(gmx_farm):
    contract = FakeContract({"balanceOf": 10**18, "earned": TimeoutError("slow rpc")})
    resolver = FarmResolver(FakeChainReader())

    with pytest.raises(TimeoutError):
        await resolver.read(WALLET, gmx_farm, contract)


def test_build_record(gmx_farm):
    resolver = FarmResolver(FakeChainReader())

    record = resolver.build_record(
        gmx_farm, FarmReads(deposit=2 * 10**18, earned=10**15), QUOTES
    )

    (balance,) = record.balances
    (reward,) = record.rewards
    assert (balance.amount, balance.token, balance.usd_value) == ("2", GMX, Decimal("71"))
    assert (reward.amount, reward.token, reward.usd_value) == (
        "0.001",
        WETH,
        Decimal("3.00025"),
    )
    assert record.pool == (GMX,)
    assert record.address == GMX_WETH_FARM
    assert record.usd_value == Decimal("74.00025")


def test_build_record_with_nothing_earned(gmx_farm):
    resolver = FarmResolver(FakeChainReader())

    record = resolver.build_record(gmx_farm, FarmReads(deposit=10**18, earned=0), QUOTES)

    assert record.rewards[0].amount == "0"
    assert record.rewards[0].unit_price == Decimal("3000.25")
    assert record.rewards[0].usd_value == 0
    assert record.usd_value == Decimal("35.5")


def test_build_record_with_unpriced_reward(gmx_farm):
    resolver = FarmResolver(FakeChainReader())

    record = resolver.build_record(
        gmx_farm, FarmReads(deposit=10**18, earned=10**18), {"gmx": QUOTES["gmx"]}
    )

    assert record.rewards[0].amount == "1"
    assert record.rewards[0].usd_value == 0
    assert record.usd_value == Decimal("35.5")


def test_validate_requires_reward_token(gmx_farm):
    resolver = FarmResolver(FakeChainReader())

    with pytest.raises(PositionConfigError, match="'reward_token'"):
        resolver.validate(replace(gmx_farm, reward_token=None))
