from __future__ import annotations

from .base import BasePriceFeed
from .coingecko import CoinGeckoPriceFeed
from .static import StaticPriceFeed

PRICE_FEED_REGISTRY: dict[str, type[BasePriceFeed]] = {
    "coingecko": CoinGeckoPriceFeed,
    "static": StaticPriceFeed,
}


def get_price_feed_class(feed_name: str) -> type[BasePriceFeed]:
    """Get price feed class by name.

    Args:
        feed_name: Name of the feed (case-insensitive)

    Returns:
        Price feed class

    Raises:
        ValueError: If feed_name is not recognized
    """
    normalized = feed_name.lower()
    if normalized not in PRICE_FEED_REGISTRY:
        raise ValueError(
            f"Unknown price feed '{feed_name}'. "
            f"Available: {', '.join(PRICE_FEED_REGISTRY.keys())}"
        )
    return PRICE_FEED_REGISTRY[normalized]


__all__ = [
    "PRICE_FEED_REGISTRY",
    "BasePriceFeed",
    "CoinGeckoPriceFeed",
    "StaticPriceFeed",
    "get_price_feed_class",
]
