from __future__ import annotations

from decimal import Decimal

import pytest

from farm_valuator.domain import PriceQuote, TokenDetails
from farm_valuator.errors import MalformedNumberError
from farm_valuator.pricing import NO_PRICE, UsdValuation, resolve_usd_value

USDC = TokenDetails(
    symbol="USDC",
    chain_id=42161,
    address="0xaf88d065e77c8cC2239327C5EDb3A432268e5831",
    decimals=6,
    price_feed_key="usd-coin",
)
GMX = TokenDetails(
    symbol="GMX",
    chain_id=42161,
    address="0xfc5A1A6EB076a2C7aD06eD22C90d7E710E35ad0a",
    decimals=18,
    price_feed_key="gmx",
)


def test_missing_quote_yields_zero_price_and_value():
    assert resolve_usd_value({}, GMX, 10**18) == NO_PRICE
    assert NO_PRICE == UsdValuation(unit_price=Decimal(0), usd_value=Decimal(0))


def test_zero_amount_keeps_unit_price(monkeypatch):
    def _fail(*args):
        raise AssertionError("multiply must not be called for a zero amount")

    monkeypatch.setattr("farm_valuator.pricing.usd.multiply", _fail)
    quotes = {"gmx": PriceQuote(usd=Decimal("35.5"))}

    valuation = resolve_usd_value(quotes, GMX, 0)

    assert valuation.unit_price == Decimal("35.5")
    assert valuation.usd_value == 0


def test_value_is_truncated_to_six_digits():
    quotes = {"gmx": PriceQuote(usd=Decimal("1"))}

    valuation = resolve_usd_value(quotes, GMX, 1_234_567_891_234_567_891)

    assert valuation.usd_value == Decimal("1.234567")


def test_value_uses_token_decimals():
    quotes = {"usd-coin": PriceQuote(usd=Decimal("0.999999"))}

    # 1.234567 * 0.999999 = 1.234565765433, truncated in raw units then to 6 digits
    valuation = resolve_usd_value(quotes, USDC, 1_234_567)

    assert valuation.unit_price == Decimal("0.999999")
    assert valuation.usd_value == Decimal("1.234565")


def test_unusable_price_falls_back_to_99_percent():
    quotes = {"usd-coin": PriceQuote(usd=Decimal("NaN"))}

    valuation = resolve_usd_value(quotes, USDC, 1_000_000)

    assert valuation.usd_value == Decimal("0.99")


def test_malformed_formatted_product_propagates(monkeypatch):
    monkeypatch.setattr(
        "farm_valuator.pricing.usd.format_units", lambda raw, decimals: "1e5e5"
    )
    quotes = {"gmx": PriceQuote(usd=Decimal("35.5"))}

    with pytest.raises(MalformedNumberError):
        resolve_usd_value(quotes, GMX, 10**18)
