from __future__ import annotations

from dataclasses import dataclass

from ...domain import PositionDescriptor, PositionKind, PositionRecord, PriceQuoteTable
from ...logger import get_logger
from ...units import rescale
from .base import BasePositionResolver, ReadHandle, require_token, value_entry

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class VestingReads:
    total: int  # reward-token raw units
    claimable: int  # reward-token raw units

    @property
    def remaining(self) -> int:
        """Still-vesting part of the allocation (never negative)."""
        return max(self.total - self.claimable, 0)


class VestingResolver(BasePositionResolver):
    """Vesting schedule split into claimable and still-vesting amounts."""

    kind = PositionKind.VESTING
    balance_method = "balanceOf"
    reward_method = "claimable"

    async def read(
        self,
        address: str,
        descriptor: PositionDescriptor,
        contract: ReadHandle,
        *,
        auxiliary_contract: str | None = None,
    ) -> VestingReads | None:
        total = int(await contract.call(self.balance_method, address))
        if total == 0:
            logger.debug(
                "Skipping '%s' for %s: nothing vesting", descriptor.name, address
            )
            return None

        claimable = int(await contract.call(self.reward_method, address))
        if claimable > total:
            logger.warning(
                "Vesting '%s' for %s reports claimable %d above total %d",
                descriptor.name,
                address,
                claimable,
                total,
            )
        return VestingReads(total=total, claimable=claimable)

    def build_record(
        self,
        descriptor: PositionDescriptor,
        reads: VestingReads,
        quotes: PriceQuoteTable,
    ) -> PositionRecord:
        token = require_token(descriptor, "token")
        reward_token = require_token(descriptor, "reward_token")

        # The split is exact in reward-token units; pricing uses the vault token's.
        remaining = rescale(reads.remaining, reward_token.decimals, token.decimals)

        return PositionRecord.from_entries(
            balances=(value_entry(quotes, token, remaining),),
            pool=(token,),
            rewards=(value_entry(quotes, reward_token, reads.claimable),),
            address=descriptor.address,
        )
