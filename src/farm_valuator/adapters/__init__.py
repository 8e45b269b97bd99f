from __future__ import annotations

from .position_resolvers import RESOLVER_REGISTRY
from .price_feeds import PRICE_FEED_REGISTRY
from .protocol_adapters import ADAPTER_REGISTRY

__all__ = ["ADAPTER_REGISTRY", "PRICE_FEED_REGISTRY", "RESOLVER_REGISTRY"]
