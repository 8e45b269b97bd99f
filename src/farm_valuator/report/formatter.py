"""Rich console formatter for wallet valuations."""

from __future__ import annotations

from decimal import Decimal

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..domain import ValueEntry
from .generator import WalletReport


def _truncate_address(address: str) -> str:
    """Truncate address for display."""
    return f"{address[:10]}...{address[-4:]}"


def _format_usd(value: Decimal) -> str:
    return f"${value:,.2f}"


def _format_entries(entries: tuple[ValueEntry, ...]) -> str:
    return "\n".join(f"{entry.amount} {entry.token.symbol}" for entry in entries) or "-"


def build_protocol_table(name: str, report: WalletReport) -> Table:
    summary = report.protocols[name]
    table = Table(
        title=f"[bold]{name}[/] ({summary.type.value})", expand=True, show_lines=True
    )
    table.add_column("Contract", style="cyan", no_wrap=True)
    table.add_column("Balance", justify="right")
    table.add_column("Rewards", justify="right", style="yellow")
    table.add_column("Value (USD)", justify="right", style="green")

    for item in summary.items:
        table.add_row(
            _truncate_address(item.address),
            _format_entries(item.balances),
            _format_entries(item.rewards),
            _format_usd(item.usd_value),
        )

    table.add_row(
        "[bold]TOTAL[/]", "", "", f"[bold]{_format_usd(summary.usd_value)}[/]"
    )
    return table


def format_wallet_table(report: WalletReport, console: Console | None = None) -> None:
    """Print one table per protocol plus the wallet total to stdout."""
    console = console or Console()

    console.print()
    for name in report.protocols:
        console.print(build_protocol_table(name, report))
    console.print(
        Panel(
            f"[bold green]{_format_usd(report.usd_value)}[/]",
            title=f"[bold]Wallet {_truncate_address(report.address)}[/]",
            border_style="green",
        )
    )
    console.print()
