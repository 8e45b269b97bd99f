"""Read-only contract access across chains."""

from __future__ import annotations

import asyncio
import random
from typing import Any, Sequence

import backoff
from eth_typing import URI
from web3 import Web3
from web3.contract import Contract
from web3.exceptions import ProviderConnectionError

from .errors import InvalidAddressError
from .logger import get_logger
from .settings import ValuatorSettings

logger = get_logger(__name__)


def checksum_address(address: str) -> str:
    """Return the EIP-55 checksummed form of ``address``.

    Raises:
        InvalidAddressError: If ``address`` is not a 20-byte hex address
    """
    try:
        return Web3.to_checksum_address(address)
    except (ValueError, TypeError) as exc:
        raise InvalidAddressError(address) from exc


class ReadContract:
    """A view-only handle on one deployed contract."""

    def __init__(self, reader: ChainReader, chain_id: int, contract: Contract):
        self._reader = reader
        self._contract = contract
        self.chain_id = chain_id

    @property
    def address(self) -> str:
        return self._contract.address

    async def call(self, method: str, *args: Any) -> Any:
        """Call a view function by name and return its decoded result."""
        fn = getattr(self._contract.functions, method)(*args)
        logger.debug(
            "eth_call %s.%s%s on chain %s", self.address, method, args, self.chain_id
        )
        return await self._reader._rpc(
            fn.call, block_identifier=self._reader.block_identifier
        )


class ChainReader:
    """Builds read handles on every chain that has an RPC configured."""

    def __init__(self, config: ValuatorSettings):
        self.config = config
        self.block_identifier: int | str = (
            config.block_number if config.block_number is not None else "latest"
        )
        self._web3_by_chain: dict[int, Web3] = {}

        self._rpc_sem = asyncio.Semaphore(self.config.max_calls)
        self._rpc_delay = self.config.rpc_delay  # seconds
        self._rpc_jitter = self.config.rpc_jitter  # seconds

    @backoff.on_exception(
        backoff.expo, (ProviderConnectionError,), max_time=30, jitter=backoff.full_jitter
    )
    async def _rpc(self, fn, *args, **kwargs):
        """Throttle + backoff a single RPC."""
        async with self._rpc_sem:
            try:
                return await asyncio.to_thread(fn, *args, **kwargs)
            finally:
                delay = self._rpc_delay + random.random() * self._rpc_jitter
                if delay > 0:
                    await asyncio.sleep(delay)

    def web3_for(self, chain_id: int) -> Web3 | None:
        """Return the (cached) Web3 client for ``chain_id``, if configured."""
        w3 = self._web3_by_chain.get(chain_id)
        if w3 is not None:
            return w3
        rpc_url = self.config.rpc_url_for(chain_id)
        if not rpc_url:
            return None
        w3 = Web3(
            Web3.HTTPProvider(
                URI(rpc_url), request_kwargs={"timeout": self.config.rpc_timeout}
            )
        )
        self._web3_by_chain[chain_id] = w3
        return w3

    def get_read_contract(
        self, chain_id: int, address: str, abi: Sequence[dict]
    ) -> ReadContract | None:
        """Build a read handle, or None when the chain is not reachable."""
        w3 = self.web3_for(chain_id)
        if w3 is None:
            logger.warning("No RPC configured for chain %s", chain_id)
            return None
        contract = w3.eth.contract(
            address=Web3.to_checksum_address(address), abi=list(abi)
        )
        return ReadContract(self, chain_id, contract)
