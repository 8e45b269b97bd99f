"""USD valuation of staking, vesting and farm positions across protocols and chains."""

from __future__ import annotations

from .domain import (
    PositionDescriptor,
    PositionKind,
    PositionRecord,
    PriceQuote,
    ProtocolSummary,
    ProtocolType,
    TokenDetails,
    ValueEntry,
)
from .errors import (
    InvalidAddressError,
    MalformedNumberError,
    PositionError,
    ValuationError,
)

__version__ = "0.1.0"

__all__ = [
    "InvalidAddressError",
    "MalformedNumberError",
    "PositionDescriptor",
    "PositionError",
    "PositionKind",
    "PositionRecord",
    "PriceQuote",
    "ProtocolSummary",
    "ProtocolType",
    "TokenDetails",
    "ValuationError",
    "ValueEntry",
]
