from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Mapping

from ..domain import ZERO, PositionRecord, ProtocolSummary, TokenDetails, ValueEntry
from ..units import plain_decimal


def token_to_dict(token: TokenDetails) -> dict[str, Any]:
    return {
        "symbol": token.symbol,
        "chain_id": token.chain_id,
        "address": token.address,
        "decimals": token.decimals,
        "price_feed_key": token.price_feed_key,
    }


def entry_to_dict(entry: ValueEntry) -> dict[str, Any]:
    return {
        "amount": entry.amount,
        "token": token_to_dict(entry.token),
        "unit_price": plain_decimal(entry.unit_price),
        "usd_value": plain_decimal(entry.usd_value),
    }


def record_to_dict(record: PositionRecord) -> dict[str, Any]:
    return {
        "address": record.address,
        "balances": [entry_to_dict(entry) for entry in record.balances],
        "pool": [token_to_dict(token) for token in record.pool],
        "rewards": [entry_to_dict(entry) for entry in record.rewards],
        "usd_value": plain_decimal(record.usd_value),
    }


def summary_to_dict(summary: ProtocolSummary) -> dict[str, Any]:
    """Convert a protocol summary to a JSON-safe dict (decimals as strings)."""
    return {
        "type": summary.type.value,
        "usd_value": plain_decimal(summary.usd_value),
        "items": [record_to_dict(item) for item in summary.items],
    }


@dataclass
class WalletReport:
    """Valuation of one wallet across protocols."""

    address: str
    protocols: dict[str, ProtocolSummary] = field(default_factory=dict)

    @property
    def usd_value(self) -> Decimal:
        return sum((summary.usd_value for summary in self.protocols.values()), ZERO)

    def to_dict(self) -> dict[str, Any]:
        """Convert report to dictionary format."""
        return {
            "address": self.address,
            "usd_value": plain_decimal(self.usd_value),
            "protocols": {
                name: summary_to_dict(summary)
                for name, summary in self.protocols.items()
            },
        }


def generate_report(
    address: str, summaries: Mapping[str, ProtocolSummary]
) -> WalletReport:
    return WalletReport(address=address, protocols=dict(summaries))
