from __future__ import annotations

import json
from functools import cache
from pathlib import Path
from typing import Any

ABIS_DIR = Path(__file__).parent / "abis"

REWARD_TRACKER_ABI_PATH = ABIS_DIR / "RewardTracker.json"
VESTER_ABI_PATH = ABIS_DIR / "Vester.json"
STAKING_REWARDS_ABI_PATH = ABIS_DIR / "StakingRewards.json"


def load_abi(path: str | Path) -> list[dict]:
    """Load an ABI from a JSON file and return its "abi" field.

    Args:
        path: Path to the JSON file containing an "abi" field.

    Returns:
        ABI as a list of dictionaries.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
        KeyError: If the JSON does not contain an "abi" field.
    """
    p = Path(path)
    with p.open() as f:
        data = json.load(f)
    return data["abi"]


@cache
def load_reward_tracker_abi() -> tuple[dict, ...]:
    """Load the reward tracker ABI (stakedAmounts / claimable)."""
    return tuple(load_abi(REWARD_TRACKER_ABI_PATH))


@cache
def load_vester_abi() -> tuple[dict, ...]:
    """Load the vester ABI (balanceOf / claimable)."""
    return tuple(load_abi(VESTER_ABI_PATH))


@cache
def load_staking_rewards_abi() -> tuple[dict, ...]:
    """Load the staking-rewards farm ABI (balanceOf / earned)."""
    return tuple(load_abi(STAKING_REWARDS_ABI_PATH))


NAMED_ABIS = {
    "reward_tracker": load_reward_tracker_abi,
    "vester": load_vester_abi,
    "staking_rewards": load_staking_rewards_abi,
}


def resolve_abi(abi: Any) -> tuple[dict, ...]:
    """Resolve a config ABI reference to an ABI.

    Args:
        abi: Either the name of a bundled ABI or an inline list of ABI entries

    Raises:
        ValueError: If the name is unknown or the inline ABI is not a list of objects
    """
    if isinstance(abi, str):
        loader = NAMED_ABIS.get(abi.lower())
        if loader is None:
            raise ValueError(
                f"Unknown ABI '{abi}'. Available: {', '.join(NAMED_ABIS)}"
            )
        return loader()
    if isinstance(abi, (list, tuple)) and all(isinstance(item, dict) for item in abi):
        return tuple(abi)
    raise ValueError(f"ABI must be a bundled ABI name or a list of entries, got {abi!r}")
