from __future__ import annotations

from ...domain import PositionKind
from .base import BaseProtocolAdapter


class GmxAdapter(BaseProtocolAdapter):
    """GMX staking (reward trackers with a fee tracker) and vesting (vesters)."""

    supported_kinds = frozenset({PositionKind.STAKING, PositionKind.VESTING})

    @property
    def adapter_name(self) -> str:
        return "gmx"


class FarmsAdapter(BaseProtocolAdapter):
    """Liquidity farms of any protocol.

    Covers staking-rewards farms (``balanceOf`` / ``earned``) and
    reward-tracker style farms (``stakedAmounts`` / ``claimable``).
    """

    supported_kinds = frozenset({PositionKind.FARM, PositionKind.STAKING})

    @property
    def adapter_name(self) -> str:
        return "farms"
