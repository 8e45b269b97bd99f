from __future__ import annotations

import asyncio
from types import MappingProxyType
from typing import Any, Sequence

import backoff
import requests

from ...domain import PriceQuote, PriceQuoteTable, TokenDetails
from ...errors import PriceFeedError
from ...logger import get_logger
from ...settings import ValuatorSettings
from .base import BasePriceFeed, parse_quote, unique_feed_keys

logger = get_logger(__name__)

VS_CURRENCY = "usd"


class CoinGeckoPriceFeed(BasePriceFeed):
    """Spot USD prices from the CoinGecko ``/simple/price`` endpoint."""

    def __init__(self, config: ValuatorSettings):
        super().__init__(config)
        self.endpoint = config.coingecko_endpoint.rstrip("/")
        self.timeout = config.price_request_timeout
        self.max_tries = config.price_request_retries
        self._headers: dict[str, str] = {"accept": "application/json"}
        if config.coingecko_api_key is not None:
            self._headers[config.coingecko_api_key_header] = (
                config.coingecko_api_key.get_secret_value()
            )

    @property
    def feed_name(self) -> str:
        return "coingecko"

    async def _http_get(self, url: str, *, params: dict | None = None):
        return await asyncio.to_thread(
            lambda: requests.get(
                url, params=params, headers=self._headers, timeout=self.timeout
            )
        )

    async def _get_json(self, url: str, params: dict[str, str]) -> Any:
        def _on_backoff(details: Any) -> None:
            logger.warning(
                "CoinGecko request failed (attempt %d of %d): %s",
                details["tries"],
                self.max_tries,
                details.get("exception"),
            )

        @backoff.on_exception(
            backoff.expo,
            requests.RequestException,
            max_tries=self.max_tries,
            jitter=backoff.full_jitter,
            on_backoff=_on_backoff,
        )
        async def _attempt() -> Any:
            response = await self._http_get(url, params=params)
            response.raise_for_status()
            return response.json()

        try:
            return await _attempt()
        except requests.RequestException as exc:
            raise PriceFeedError(f"CoinGecko request to {url} failed: {exc}") from exc

    async def fetch_prices(self, tokens: Sequence[TokenDetails]) -> PriceQuoteTable:
        keys = unique_feed_keys(tokens)
        if not keys:
            return MappingProxyType({})

        payload = await self._get_json(
            f"{self.endpoint}/simple/price",
            {"ids": ",".join(keys), "vs_currencies": VS_CURRENCY},
        )
        if not isinstance(payload, dict):
            raise PriceFeedError(
                f"Unexpected CoinGecko payload type: {type(payload).__name__}"
            )

        quotes: dict[str, PriceQuote] = {}
        for key in keys:
            entry = payload.get(key)
            if not isinstance(entry, dict) or VS_CURRENCY not in entry:
                logger.debug("No CoinGecko price for %s", key)
                continue
            quote = parse_quote(key, entry[VS_CURRENCY])
            if quote is not None:
                quotes[key] = quote

        logger.debug("CoinGecko returned %d/%d prices", len(quotes), len(keys))
        return MappingProxyType(quotes)
