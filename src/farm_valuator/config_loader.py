"""Token registry and position catalog parsing.

Tokens and positions live in the TOML config::

    [tokens.gmx]
    symbol = "GMX"
    chain_id = 42161
    address = "0xfc5A1A6EB076a2C7aD06eD22C90d7E710E35ad0a"
    decimals = 18
    price_feed_key = "gmx"

    [[positions]]
    name = "Staked GMX"
    protocol = "gmx"
    kind = "staking"
    chain_id = 42161
    address = "0x908C4D94D34924765f1eDc22A1DD098397c59dD4"
    abi = "reward_tracker"
    token = "gmx"
    reward_token = "esgmx"
    fee_tracker_address = "0xd2D1162512F927a7e282Ef43a362659E4F2a728F"
    fee_reward_token = "weth"

    [[positions]]
    protocol = "farms"
    kind = "farm"
    chain_id = 1
    address = "0x7FBa4B8Dc5E7616e59622806932DBea72537A56b"
    abi = "staking_rewards"
    token = "uni-v3-lp"
    reward_token = "weth"
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any

from .abi import resolve_abi
from .adapters.protocol_adapters import ADAPTER_REGISTRY
from .domain import PositionDescriptor, PositionKind, TokenDetails
from .settings import ValuatorSettings

TOKEN_REFERENCE_FIELDS = ("token", "reward_token", "fee_reward_token")
MAX_DECIMALS = 255


def _require(raw: dict[str, Any], key: str, where: str) -> Any:
    value = raw.get(key)
    if value is None or value == "":
        raise ValueError(f"{key} is required in {where}")
    return value


def _as_int(value: Any, key: str, where: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{key} must be an integer in {where}, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(
            f"{key} must be an integer in {where}, got {value!r}"
        ) from None


def parse_tokens(raw_tokens: dict[str, dict[str, Any]]) -> dict[str, TokenDetails]:
    """Parse the ``[tokens.<key>]`` tables into TokenDetails keyed by registry key.

    Raises:
        ValueError: If a required field is missing or out of range
    """

    def parse_single_token(key: str, raw: dict[str, Any]) -> TokenDetails:
        where = f"[tokens.{key}]"
        if not isinstance(raw, dict):
            raise ValueError(f"{where} must be a table")
        decimals = _as_int(_require(raw, "decimals", where), "decimals", where)
        if not 0 <= decimals <= MAX_DECIMALS:
            raise ValueError(
                f"decimals must be between 0 and {MAX_DECIMALS} in {where}, got {decimals}"
            )
        return TokenDetails(
            symbol=str(raw.get("symbol") or key.upper()),
            chain_id=_as_int(_require(raw, "chain_id", where), "chain_id", where),
            address=str(_require(raw, "address", where)),
            decimals=decimals,
            price_feed_key=str(_require(raw, "price_feed_key", where)),
        )

    return {key: parse_single_token(key, raw) for key, raw in raw_tokens.items()}


def parse_positions(
    raw_positions: list[dict[str, Any]],
    tokens: dict[str, TokenDetails],
) -> list[PositionDescriptor]:
    """Parse ``[[positions]]`` entries, resolving token references and ABIs.

    Args:
        raw_positions: List of dicts from TOML [[positions]] sections
        tokens: Token registry from ``parse_tokens``

    Returns:
        List of PositionDescriptor objects

    Raises:
        ValueError: If an entry has an unknown kind, protocol, token or ABI
    """

    def resolve_token(raw: dict[str, Any], field: str, where: str) -> TokenDetails | None:
        key = raw.get(field)
        if key is None:
            return None
        if key not in tokens:
            raise ValueError(
                f"Unknown token '{key}' for {field} in {where}. "
                f"Known tokens: {', '.join(sorted(tokens)) or 'none'}"
            )
        return tokens[key]

    def parse_single_position(index: int, raw: dict[str, Any]) -> PositionDescriptor:
        where = f"[[positions]] #{index} ({raw.get('name', 'unnamed')})"

        kind_raw = str(_require(raw, "kind", where)).lower()
        try:
            kind = PositionKind(kind_raw)
        except ValueError:
            valid = ", ".join(k.value for k in PositionKind)
            raise ValueError(
                f"Invalid kind '{kind_raw}' in {where}. Must be one of: {valid}"
            ) from None

        protocol = str(_require(raw, "protocol", where)).lower()
        if protocol not in ADAPTER_REGISTRY:
            raise ValueError(
                f"Invalid protocol '{protocol}' in {where}. "
                f"Available adapters: {', '.join(ADAPTER_REGISTRY)}"
            )
        supported = ADAPTER_REGISTRY[protocol].supported_kinds
        if kind not in supported:
            raise ValueError(
                f"Protocol '{protocol}' has no {kind.value} positions ({where}). "
                f"Supported kinds: {', '.join(sorted(k.value for k in supported))}"
            )

        address = str(_require(raw, "address", where))
        resolved = {
            field: resolve_token(raw, field, where) for field in TOKEN_REFERENCE_FIELDS
        }

        return PositionDescriptor(
            name=str(raw.get("name") or f"{protocol}-{kind.value}-{address[:10]}"),
            protocol=protocol,
            kind=kind,
            chain_id=_as_int(_require(raw, "chain_id", where), "chain_id", where),
            address=address,
            abi=resolve_abi(_require(raw, "abi", where)),
            fee_tracker_address=raw.get("fee_tracker_address") or None,
            **resolved,
        )

    return [
        parse_single_position(index, raw)
        for index, raw in enumerate(raw_positions, start=1)
    ]


def group_by_protocol(
    positions: list[PositionDescriptor],
) -> dict[str, list[PositionDescriptor]]:
    """Group positions by protocol, preserving configuration order."""
    grouped: dict[str, list[PositionDescriptor]] = defaultdict(list)
    for position in positions:
        grouped[position.protocol].append(position)
    return dict(grouped)


def load_catalog(settings: ValuatorSettings) -> list[PositionDescriptor]:
    """Parse the configured token registry and positions."""
    return parse_positions(settings.positions, parse_tokens(settings.tokens))
