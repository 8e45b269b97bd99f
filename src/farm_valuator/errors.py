"""Exception hierarchy for position valuation.

Recoverable faults (``PositionError`` and ``PriceFeedError``) are caught at the
per-position boundary of a protocol adapter. ``MalformedNumberError`` signals a
broken invariant in our own number formatting and is never caught locally.
``InvalidAddressError`` rejects the wallet to value before any position is
read.
"""

from __future__ import annotations


class ValuationError(Exception):
    """Base class for all valuation errors."""


class MalformedNumberError(ValuationError, ValueError):
    """Raised when a value we produced cannot be parsed back as a plain number."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Malformed number: {value!r}")


class PositionError(ValuationError):
    """A single position could not be evaluated."""


class PositionConfigError(PositionError):
    """A position descriptor is missing a field its kind requires."""


class ContractUnavailableError(PositionError):
    """No read handle could be built for a position contract."""

    def __init__(self, chain_id: int, address: str):
        self.chain_id = chain_id
        self.address = address
        super().__init__(
            f"No read contract available for {address} on chain {chain_id}"
        )


class PriceFeedError(ValuationError):
    """The price feed transport failed."""


class InvalidAddressError(ValuationError, ValueError):
    """The wallet address to value is not a valid EVM address.

    This is a caller error: it is raised before any position is evaluated.
    """

    def __init__(self, address: object):
        self.address = address
        super().__init__(f"Invalid address: {address!r}")
