from __future__ import annotations

from dataclasses import dataclass

from ...domain import PositionDescriptor, PositionKind, PositionRecord, PriceQuoteTable
from ...logger import get_logger
from .base import BasePositionResolver, ReadHandle, require_token, value_entry

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class FarmReads:
    deposit: int  # token raw units
    earned: int  # reward-token raw units


class FarmResolver(BasePositionResolver):
    """Liquidity deposited in a staking-rewards farm and the reward it earned."""

    kind = PositionKind.FARM
    balance_method = "balanceOf"
    reward_method = "earned"

    async def read(
        self,
        address: str,
        descriptor: PositionDescriptor,
        contract: ReadHandle,
        *,
        auxiliary_contract: str | None = None,
    ) -> FarmReads | None:
        deposit = int(await contract.call(self.balance_method, address))
        if deposit == 0:
            logger.debug(
                "Skipping '%s' for %s: nothing deposited", descriptor.name, address
            )
            return None

        earned = int(await contract.call(self.reward_method, address))
        return FarmReads(deposit=deposit, earned=earned)

    def build_record(
        self,
        descriptor: PositionDescriptor,
        reads: FarmReads,
        quotes: PriceQuoteTable,
    ) -> PositionRecord:
        token = require_token(descriptor, "token")
        reward_token = require_token(descriptor, "reward_token")

        return PositionRecord.from_entries(
            balances=(value_entry(quotes, token, reads.deposit),),
            pool=(token,),
            rewards=(value_entry(quotes, reward_token, reads.earned),),
            address=descriptor.address,
        )
