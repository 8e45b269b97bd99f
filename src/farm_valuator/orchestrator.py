"""Wallet-level valuation across every configured protocol."""

from __future__ import annotations

import asyncio

from .adapters.position_resolvers.base import ReadHandleFactory
from .adapters.price_feeds import BasePriceFeed, StaticPriceFeed, get_price_feed_class
from .adapters.protocol_adapters import FaultSink, get_adapter_class
from .chains import ChainReader, checksum_address
from .config_loader import group_by_protocol, load_catalog
from .domain import PriceQuoteTable, ProtocolSummary
from .errors import MalformedNumberError
from .logger import get_logger
from .settings import ValuatorSettings

logger = get_logger(__name__)


def build_price_feed(settings: ValuatorSettings) -> BasePriceFeed:
    """Instantiate the configured price feed."""
    return get_price_feed_class(settings.price_feed)(settings)


async def value_wallet(
    settings: ValuatorSettings,
    address: str,
    *,
    chain_reader: ReadHandleFactory | None = None,
    price_feed: BasePriceFeed | None = None,
    fault_sink: FaultSink | None = None,
) -> dict[str, ProtocolSummary]:
    """Value ``address`` across all configured protocols.

    Args:
        settings: Valuator configuration holding the token registry and positions
        address: Wallet to value
        chain_reader: Read handle factory; a ChainReader over ``settings`` by default
        price_feed: Price source; the configured feed by default
        fault_sink: Receives recoverable position failures

    Returns:
        Summary per protocol name, in configuration order. A protocol whose
        adapter failed as a whole is reported with an empty summary.

    Raises:
        InvalidAddressError: If ``address`` is not a valid wallet address
        MalformedNumberError: If any record could not be formatted
    """
    address = checksum_address(address)
    positions = load_catalog(settings)
    grouped = group_by_protocol(positions)
    if not grouped:
        logger.warning("No positions configured")
        return {}

    chain_reader = chain_reader or ChainReader(settings)
    price_feed = price_feed or build_price_feed(settings)

    # A static feed is one snapshot for the whole batch.
    batch_quotes: PriceQuoteTable | None = (
        price_feed.quotes if isinstance(price_feed, StaticPriceFeed) else None
    )

    logger.info(
        "Valuing %s across %d protocols (%d positions) using %s prices",
        address,
        len(grouped),
        len(positions),
        price_feed.feed_name,
    )

    adapters = {
        protocol: get_adapter_class(protocol)(
            settings, chain_reader, price_feed, fault_sink
        )
        for protocol in grouped
    }
    results = await asyncio.gather(
        *[
            adapters[protocol].get_staking_info(
                address,
                protocol_positions,
                settings.auxiliary_contracts.get(protocol),
                batch_quotes,
            )
            for protocol, protocol_positions in grouped.items()
        ],
        return_exceptions=True,
    )

    summaries: dict[str, ProtocolSummary] = {}
    for protocol, result in zip(grouped, results):
        if isinstance(result, MalformedNumberError):
            raise result
        if isinstance(result, Exception):
            logger.error("Adapter '%s' failed: %s", protocol, result)
            summaries[protocol] = ProtocolSummary(type=adapters[protocol].summary_type)
        elif isinstance(result, BaseException):
            raise result
        else:
            summaries[protocol] = result
    return summaries
