from __future__ import annotations

from dataclasses import dataclass

from ...abi import load_reward_tracker_abi
from ...domain import (
    PositionDescriptor,
    PositionKind,
    PositionRecord,
    PriceQuoteTable,
    ValueEntry,
)
from ...errors import ContractUnavailableError, PositionConfigError
from ...logger import get_logger
from .base import BasePositionResolver, ReadHandle, require_token, value_entry

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class StakingReads:
    staked: int
    claimable: int
    fee_claimable: int | None = None


class StakingResolver(BasePositionResolver):
    """Stake in a reward tracker, its claimable reward and optional fee reward."""

    kind = PositionKind.STAKING
    balance_method = "stakedAmounts"
    reward_method = "claimable"
    fee_reward_method = "claimable"

    def validate(self, descriptor: PositionDescriptor) -> None:
        super().validate(descriptor)
        if descriptor.fee_tracker_address and descriptor.fee_reward_token is None:
            raise PositionConfigError(
                f"Position '{descriptor.name}' declares a fee tracker "
                "but no 'fee_reward_token'"
            )

    def fee_tracker_for(
        self, descriptor: PositionDescriptor, auxiliary_contract: str | None
    ) -> str | None:
        """Tracker to read fee rewards from; the auxiliary contract is a fallback."""
        if descriptor.fee_tracker_address:
            return descriptor.fee_tracker_address
        if descriptor.fee_reward_token is not None:
            return auxiliary_contract
        return None

    async def read(
        self,
        address: str,
        descriptor: PositionDescriptor,
        contract: ReadHandle,
        *,
        auxiliary_contract: str | None = None,
    ) -> StakingReads | None:
        staked = int(await contract.call(self.balance_method, address))
        if staked == 0:
            logger.debug(
                "Skipping '%s' for %s: nothing staked", descriptor.name, address
            )
            return None

        claimable = int(await contract.call(self.reward_method, address))

        fee_claimable: int | None = None
        fee_tracker = self.fee_tracker_for(descriptor, auxiliary_contract)
        if fee_tracker:
            tracker = self.chain_reader.get_read_contract(
                descriptor.chain_id, fee_tracker, load_reward_tracker_abi()
            )
            if tracker is None:
                raise ContractUnavailableError(descriptor.chain_id, fee_tracker)
            fee_claimable = int(await tracker.call(self.fee_reward_method, address))

        return StakingReads(
            staked=staked, claimable=claimable, fee_claimable=fee_claimable
        )

    def build_record(
        self,
        descriptor: PositionDescriptor,
        reads: StakingReads,
        quotes: PriceQuoteTable,
    ) -> PositionRecord:
        token = require_token(descriptor, "token")
        reward_token = require_token(descriptor, "reward_token")

        rewards: list[ValueEntry] = [value_entry(quotes, reward_token, reads.claimable)]
        if reads.fee_claimable is not None:
            fee_token = require_token(descriptor, "fee_reward_token")
            rewards.append(value_entry(quotes, fee_token, reads.fee_claimable))

        return PositionRecord.from_entries(
            balances=(value_entry(quotes, token, reads.staked),),
            pool=(token,),
            rewards=tuple(rewards),
            address=descriptor.address,
        )
