from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Callable, ClassVar, Sequence

from ...domain import (
    PositionDescriptor,
    PositionKind,
    PositionOutcome,
    PositionRecord,
    PriceQuoteTable,
    ProtocolSummary,
    ProtocolType,
)
from ...chains import checksum_address
from ...errors import (
    ContractUnavailableError,
    MalformedNumberError,
    PositionConfigError,
)
from ...logger import get_logger
from ...settings import ValuatorSettings
from ..position_resolvers import BasePositionResolver, get_resolver_class
from ..position_resolvers.base import ReadHandleFactory
from ..price_feeds import BasePriceFeed

logger = get_logger(__name__)

FaultSink = Callable[[PositionDescriptor, Exception], None]


def log_fault(descriptor: PositionDescriptor, fault: Exception) -> None:
    """Default fault sink: log the failed position and carry on."""
    logger.error(
        "Position '%s' (%s %s on chain %s) failed: %s: %s",
        descriptor.name,
        descriptor.kind.value,
        descriptor.address,
        descriptor.chain_id,
        type(fault).__name__,
        fault,
    )


def _process_position_results(
    positions: Sequence[PositionDescriptor],
    results: Sequence[BaseException | PositionRecord | None],
    fault_sink: FaultSink,
) -> list[PositionOutcome]:
    """Turn asyncio.gather results into per-position outcomes.

    Recoverable faults are reported to ``fault_sink``. A MalformedNumberError
    is re-raised once every result has been processed, as is any
    BaseException that is not an Exception (e.g. cancellation).
    """
    outcomes: list[PositionOutcome] = []
    programmer_faults: list[MalformedNumberError] = []

    for descriptor, result in zip(positions, results):
        if isinstance(result, MalformedNumberError):
            programmer_faults.append(result)
        elif isinstance(result, Exception):
            fault_sink(descriptor, result)
            outcomes.append(PositionOutcome(descriptor=descriptor, fault=result))
        elif isinstance(result, BaseException):
            raise result
        else:
            outcomes.append(PositionOutcome(descriptor=descriptor, record=result))

    if programmer_faults:
        raise programmer_faults[0]
    return outcomes


class BaseProtocolAdapter(ABC):
    """Abstract base class for protocol adapters.

    Evaluates a protocol's positions for one wallet, concurrently and with
    failures isolated per position.
    """

    summary_type: ProtocolType = ProtocolType.FARMS
    # position kinds this protocol deploys; any other kind is a config fault
    supported_kinds: ClassVar[frozenset[PositionKind]] = frozenset(PositionKind)

    def __init__(
        self,
        config: ValuatorSettings,
        chain_reader: ReadHandleFactory,
        price_feed: BasePriceFeed,
        fault_sink: FaultSink | None = None,
    ):
        """Initialize the adapter.

        Args:
            config: Valuator configuration
            chain_reader: Builds read handles for position contracts
            price_feed: Source of per-position price snapshots
            fault_sink: Receives every recoverable position failure
        """
        self.config = config
        self.chain_reader = chain_reader
        self.price_feed = price_feed
        self.fault_sink = fault_sink or log_fault
        self.resolvers: dict[PositionKind, BasePositionResolver] = {
            kind: get_resolver_class(kind)(chain_reader)
            for kind in self.supported_kinds
        }

    @property
    @abstractmethod
    def adapter_name(self) -> str:
        """Return the name of this adapter."""
        ...

    def resolver_for(self, descriptor: PositionDescriptor) -> BasePositionResolver:
        """Return the resolver for the descriptor's kind.

        Raises:
            PositionConfigError: If this protocol has no positions of that kind
        """
        resolver = self.resolvers.get(descriptor.kind)
        if resolver is None:
            raise PositionConfigError(
                f"Position '{descriptor.name}': {self.adapter_name} has no "
                f"{descriptor.kind.value} positions. Supported: "
                f"{', '.join(sorted(kind.value for kind in self.resolvers))}"
            )
        return resolver

    async def _evaluate_position(
        self,
        address: str,
        descriptor: PositionDescriptor,
        auxiliary_contract: str | None,
        quotes: PriceQuoteTable | None,
    ) -> PositionRecord | None:
        resolver = self.resolver_for(descriptor)
        resolver.validate(descriptor)

        contract = self.chain_reader.get_read_contract(
            descriptor.chain_id, descriptor.address, descriptor.abi
        )
        if contract is None:
            raise ContractUnavailableError(descriptor.chain_id, descriptor.address)

        reads = await resolver.read(
            address, descriptor, contract, auxiliary_contract=auxiliary_contract
        )
        if reads is None:
            return None

        if quotes is None:
            quotes = await self.price_feed.fetch_prices(descriptor.priced_tokens)
        return resolver.build_record(descriptor, reads, quotes)

    async def evaluate_positions(
        self,
        address: str,
        positions: Sequence[PositionDescriptor],
        auxiliary_contract: str | None = None,
        quotes: PriceQuoteTable | None = None,
    ) -> list[PositionOutcome]:
        """Evaluate every position concurrently.

        Args:
            address: Wallet to value
            positions: Configured positions of this protocol
            auxiliary_contract: Protocol-level fee tracker used as a fallback
            quotes: Price snapshot for the whole batch; fetched per position
                when omitted

        Returns:
            One outcome per position, in input order

        Raises:
            InvalidAddressError: If ``address`` is not a valid wallet address;
                this is a caller error and no position is evaluated
            MalformedNumberError: If a record could not be formatted
        """
        user = checksum_address(address)
        logger.debug(
            "%s: evaluating %d positions for %s", self.adapter_name, len(positions), user
        )
        results = await asyncio.gather(
            *[
                self._evaluate_position(user, descriptor, auxiliary_contract, quotes)
                for descriptor in positions
            ],
            return_exceptions=True,
        )
        return _process_position_results(positions, results, self.fault_sink)

    async def get_staking_info(
        self,
        address: str,
        positions: Sequence[PositionDescriptor],
        auxiliary_contract: str | None = None,
        quotes: PriceQuoteTable | None = None,
    ) -> ProtocolSummary:
        """Value ``address``'s positions and collect them into a summary.

        Failed and empty positions are left out; the call itself only fails
        on an InvalidAddressError or a MalformedNumberError.
        """
        summary = ProtocolSummary(type=self.summary_type)
        outcomes = await self.evaluate_positions(
            address, positions, auxiliary_contract, quotes
        )
        for outcome in outcomes:
            if outcome.record is not None:
                summary.items.append(outcome.record)

        logger.info(
            "%s: %d positions with balance, %d failed, %d empty",
            self.adapter_name,
            len(summary.items),
            sum(1 for outcome in outcomes if outcome.fault is not None),
            sum(1 for outcome in outcomes if outcome.skipped),
        )
        return summary
