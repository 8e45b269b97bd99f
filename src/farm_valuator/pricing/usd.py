"""USD valuation of raw token amounts against a price snapshot."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from ..domain import ZERO, PriceQuoteTable, TokenDetails
from ..units import USD_FRACTION_DIGITS, format_units, multiply, truncate_decimal


@dataclass(frozen=True, slots=True)
class UsdValuation:
    unit_price: Decimal
    usd_value: Decimal


NO_PRICE = UsdValuation(unit_price=ZERO, usd_value=ZERO)


def resolve_usd_value(
    quotes: PriceQuoteTable, token: TokenDetails, raw_amount: int
) -> UsdValuation:
    """Price ``raw_amount`` of ``token`` using the quote table.

    Args:
        quotes: Price snapshot keyed by price-feed key
        token: Token the amount is denominated in
        raw_amount: Amount in the token's smallest unit

    Returns:
        The unit price used and the USD value truncated to 6 decimals. A
        missing quote yields zeros; a zero amount yields a zero value.

    Raises:
        MalformedNumberError: If the formatted product is not a plain number
    """
    quote = quotes.get(token.price_feed_key)
    if quote is None:
        return NO_PRICE

    price = quote.usd
    if raw_amount == 0:
        return UsdValuation(unit_price=price, usd_value=ZERO)

    usd_raw = multiply(raw_amount, price)
    usd_value = truncate_decimal(
        format_units(usd_raw, token.decimals), USD_FRACTION_DIGITS
    )
    return UsdValuation(unit_price=price, usd_value=usd_value)
