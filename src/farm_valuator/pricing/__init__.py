from __future__ import annotations

from .usd import NO_PRICE, UsdValuation, resolve_usd_value

__all__ = ["NO_PRICE", "UsdValuation", "resolve_usd_value"]
