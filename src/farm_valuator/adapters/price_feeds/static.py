from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Sequence

from ...domain import PriceQuote, PriceQuoteTable, TokenDetails
from ...settings import ValuatorSettings
from .base import BasePriceFeed, parse_quote, unique_feed_keys


class StaticPriceFeed(BasePriceFeed):
    """Serves a fixed price snapshot (``static_prices`` from config by default)."""

    def __init__(
        self,
        config: ValuatorSettings,
        quotes: Mapping[str, PriceQuote] | None = None,
    ):
        super().__init__(config)
        if quotes is None:
            parsed = (
                (key, parse_quote(key, value))
                for key, value in config.static_prices.items()
            )
            quotes = {key: quote for key, quote in parsed if quote is not None}
        self._quotes = MappingProxyType(dict(quotes))

    @property
    def feed_name(self) -> str:
        return "static"

    @property
    def quotes(self) -> PriceQuoteTable:
        return self._quotes

    async def fetch_prices(self, tokens: Sequence[TokenDetails]) -> PriceQuoteTable:
        return MappingProxyType(
            {
                key: self._quotes[key]
                for key in unique_feed_keys(tokens)
                if key in self._quotes
            }
        )
