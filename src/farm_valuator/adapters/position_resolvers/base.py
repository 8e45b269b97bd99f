from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Protocol

from ...domain import (
    PositionDescriptor,
    PositionKind,
    PositionRecord,
    PriceQuoteTable,
    TokenDetails,
    ValueEntry,
)
from ...errors import PositionConfigError
from ...pricing import resolve_usd_value
from ...units import format_units


class ReadHandle(Protocol):
    """What resolvers need from a contract handle."""

    async def call(self, method: str, *args: Any) -> Any: ...


class ReadHandleFactory(Protocol):
    def get_read_contract(
        self, chain_id: int, address: str, abi: Any
    ) -> ReadHandle | None: ...


def value_entry(
    quotes: PriceQuoteTable, token: TokenDetails, raw_amount: int
) -> ValueEntry:
    """Build a priced line for ``raw_amount`` of ``token``."""
    valuation = resolve_usd_value(quotes, token, raw_amount)
    return ValueEntry(
        amount=format_units(raw_amount, token.decimals),
        token=token,
        unit_price=valuation.unit_price,
        usd_value=valuation.usd_value,
    )


def require_token(
    descriptor: PositionDescriptor, field_name: str
) -> TokenDetails:
    token = getattr(descriptor, field_name)
    if token is None:
        raise PositionConfigError(
            f"Position '{descriptor.name}' ({descriptor.kind.value}) requires '{field_name}'"
        )
    return token


class BasePositionResolver(ABC):
    """Abstract base class for position-type resolvers.

    Evaluation is split in two: ``read`` performs the chain reads and returns
    ``None`` when the position holds nothing, ``build_record`` shapes the
    reads into a priced record from a single quote snapshot.
    """

    kind: PositionKind

    def __init__(self, chain_reader: ReadHandleFactory):
        self.chain_reader = chain_reader

    def validate(self, descriptor: PositionDescriptor) -> None:
        """Raise PositionConfigError if a required descriptor field is missing."""
        require_token(descriptor, "token")
        require_token(descriptor, "reward_token")

    @abstractmethod
    async def read(
        self,
        address: str,
        descriptor: PositionDescriptor,
        contract: ReadHandle,
        *,
        auxiliary_contract: str | None = None,
    ) -> Any | None:
        """Read on-chain state for ``address``; None if the primary balance is zero."""
        ...

    @abstractmethod
    def build_record(
        self,
        descriptor: PositionDescriptor,
        reads: Any,
        quotes: PriceQuoteTable,
    ) -> PositionRecord:
        """Shape reads into a priced position record."""
        ...
