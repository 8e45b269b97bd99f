from __future__ import annotations

from .base import BaseProtocolAdapter, FaultSink, log_fault
from .gmx import FarmsAdapter, GmxAdapter

ADAPTER_REGISTRY: dict[str, type[BaseProtocolAdapter]] = {
    "gmx": GmxAdapter,
    "farms": FarmsAdapter,
}


def get_adapter_class(adapter_name: str) -> type[BaseProtocolAdapter]:
    """Get adapter class by name.

    Args:
        adapter_name: Name of the adapter (case-insensitive)

    Returns:
        Adapter class

    Raises:
        ValueError: If adapter_name is not recognized
    """
    adapter_name_normalized = adapter_name.lower()
    if adapter_name_normalized not in ADAPTER_REGISTRY:
        raise ValueError(
            f"Unknown adapter '{adapter_name}'. "
            f"Available: {', '.join(ADAPTER_REGISTRY.keys())}"
        )
    return ADAPTER_REGISTRY[adapter_name_normalized]


__all__ = [
    "ADAPTER_REGISTRY",
    "BaseProtocolAdapter",
    "FarmsAdapter",
    "FaultSink",
    "GmxAdapter",
    "get_adapter_class",
    "log_fault",
]
