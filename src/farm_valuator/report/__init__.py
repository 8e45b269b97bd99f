from __future__ import annotations

from .formatter import format_wallet_table
from .generator import WalletReport, generate_report, summary_to_dict

__all__ = ["WalletReport", "format_wallet_table", "generate_report", "summary_to_dict"]
