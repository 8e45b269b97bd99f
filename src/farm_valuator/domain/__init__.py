"""Domain models for position valuation."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping

ZERO = Decimal(0)


class PositionKind(str, Enum):
    STAKING = "staking"
    VESTING = "vesting"
    FARM = "farm"


class ProtocolType(str, Enum):
    FARMS = "farms"


@dataclass(frozen=True, slots=True)
class TokenDetails:
    """Token metadata as supplied by the token registry.

    ``decimals`` is the exponent used for every raw-amount conversion of this
    token; ``price_feed_key`` is the identifier looked up in a price table.
    """

    symbol: str
    chain_id: int
    address: str
    decimals: int
    price_feed_key: str


@dataclass(frozen=True, slots=True)
class PriceQuote:
    """Spot price of one unit of a token."""

    usd: Decimal


# price_feed_key -> quote; a snapshot, never mutated once built
PriceQuoteTable = Mapping[str, PriceQuote]


@dataclass(frozen=True, slots=True)
class PositionDescriptor:
    """Configuration for one on-chain position to evaluate."""

    name: str
    protocol: str
    kind: PositionKind
    chain_id: int
    address: str
    abi: tuple[dict[str, Any], ...]
    token: TokenDetails | None = None
    reward_token: TokenDetails | None = None
    fee_tracker_address: str | None = None
    fee_reward_token: TokenDetails | None = None

    @property
    def priced_tokens(self) -> list[TokenDetails]:
        """Tokens this position needs a price for, de-duplicated by feed key."""
        seen: dict[str, TokenDetails] = {}
        for token in (self.token, self.reward_token, self.fee_reward_token):
            if token is not None:
                seen.setdefault(token.price_feed_key, token)
        return list(seen.values())


@dataclass(frozen=True, slots=True)
class ValueEntry:
    """One priced balance or reward line."""

    amount: str  # exact decimal string in token units
    token: TokenDetails
    unit_price: Decimal
    usd_value: Decimal


@dataclass(frozen=True, slots=True)
class PositionRecord:
    """One evaluated position."""

    balances: tuple[ValueEntry, ...]
    pool: tuple[TokenDetails, ...]
    rewards: tuple[ValueEntry, ...]
    usd_value: Decimal
    address: str

    @classmethod
    def from_entries(
        cls,
        *,
        balances: tuple[ValueEntry, ...],
        pool: tuple[TokenDetails, ...],
        rewards: tuple[ValueEntry, ...],
        address: str,
    ) -> PositionRecord:
        total = sum((entry.usd_value for entry in (*balances, *rewards)), ZERO)
        return cls(
            balances=balances,
            pool=pool,
            rewards=rewards,
            usd_value=total,
            address=address,
        )


@dataclass
class ProtocolSummary:
    """Protocol-level output of an adapter call.

    ``items`` is in completion order; callers must not index-align it with
    the input positions.
    """

    type: ProtocolType
    items: list[PositionRecord] = field(default_factory=list)

    @property
    def usd_value(self) -> Decimal:
        return sum((item.usd_value for item in self.items), ZERO)


@dataclass(frozen=True, slots=True)
class PositionOutcome:
    """Result of evaluating one descriptor.

    Exactly one of ``record`` / ``fault`` is set, or neither when the position
    was skipped for having no primary balance.
    """

    descriptor: PositionDescriptor
    record: PositionRecord | None = None
    fault: BaseException | None = None

    @property
    def skipped(self) -> bool:
        return self.record is None and self.fault is None


__all__ = [
    "PositionDescriptor",
    "PositionKind",
    "PositionOutcome",
    "PositionRecord",
    "PriceQuote",
    "PriceQuoteTable",
    "ProtocolSummary",
    "ProtocolType",
    "TokenDetails",
    "ValueEntry",
    "ZERO",
]
