from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal, InvalidOperation
from typing import Any, Sequence

from ...domain import PriceQuote, PriceQuoteTable, TokenDetails
from ...logger import get_logger
from ...settings import ValuatorSettings

logger = get_logger(__name__)


def parse_quote(key: str, value: Any) -> PriceQuote | None:
    """Build a quote from a feed value, or None if it is not a number."""
    if isinstance(value, bool):
        return None
    try:
        return PriceQuote(usd=Decimal(str(value)))
    except (InvalidOperation, ValueError):
        logger.warning("Ignoring non-numeric price %r for %s", value, key)
        return None


def unique_feed_keys(tokens: Sequence[TokenDetails]) -> list[str]:
    """Price-feed keys of ``tokens`` in first-seen order, without duplicates."""
    return list(dict.fromkeys(t.price_feed_key for t in tokens if t.price_feed_key))


class BasePriceFeed(ABC):
    """Abstract base class for price feeds."""

    def __init__(self, config: ValuatorSettings):
        """Initialize the feed with configuration."""
        self.config = config

    @property
    @abstractmethod
    def feed_name(self) -> str:
        """Return the name of this feed."""
        ...

    @abstractmethod
    async def fetch_prices(self, tokens: Sequence[TokenDetails]) -> PriceQuoteTable:
        """Fetch USD quotes for ``tokens`` in one request.

        Keys the feed has no price for are absent from the result.
        """
        ...
