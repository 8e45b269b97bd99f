from __future__ import annotations

from ...domain import PositionKind
from .base import BasePositionResolver
from .farm import FarmReads, FarmResolver
from .staking import StakingReads, StakingResolver
from .vesting import VestingReads, VestingResolver

RESOLVER_REGISTRY: dict[PositionKind, type[BasePositionResolver]] = {
    PositionKind.STAKING: StakingResolver,
    PositionKind.VESTING: VestingResolver,
    PositionKind.FARM: FarmResolver,
}


def get_resolver_class(kind: PositionKind | str) -> type[BasePositionResolver]:
    """Get the resolver class for a position kind.

    Raises:
        ValueError: If kind is not a known position kind
    """
    try:
        return RESOLVER_REGISTRY[PositionKind(kind)]
    except (KeyError, ValueError):
        raise ValueError(
            f"Unknown position kind '{kind}'. "
            f"Available: {', '.join(k.value for k in RESOLVER_REGISTRY)}"
        ) from None


__all__ = [
    "RESOLVER_REGISTRY",
    "BasePositionResolver",
    "FarmReads",
    "FarmResolver",
    "StakingReads",
    "StakingResolver",
    "VestingReads",
    "VestingResolver",
    "get_resolver_class",
]
