"""CLI entrypoint for farm-valuator."""

from __future__ import annotations

import asyncio
import json
import os
from pathlib import Path
from typing import Annotated

import typer

from .chains import checksum_address
from .errors import InvalidAddressError
from .logger import get_logger, setup_logging
from .orchestrator import value_wallet
from .report import format_wallet_table, generate_report
from .settings import CONFIG_ENV_VAR, ValuatorSettings

logger = get_logger("farm_valuator")

app = typer.Typer(
    add_completion=False,
    no_args_is_help=False,
    add_help_option=True,
    pretty_exceptions_enable=True,
    pretty_exceptions_short=True,
    pretty_exceptions_show_locals=False,
    rich_markup_mode="rich",
    help="USD valuation of staking, vesting and farm positions held by a wallet.",
)


def parse_rpc_overrides(values: list[str]) -> dict[int, str]:
    """Parse ``CHAIN_ID=URL`` pairs given with --rpc."""
    overrides: dict[int, str] = {}
    for value in values:
        chain, sep, url = value.partition("=")
        if not sep or not url or not chain.strip().isdigit():
            raise typer.BadParameter(
                f"expected CHAIN_ID=URL, got {value!r}", param_hint="--rpc"
            )
        overrides[int(chain)] = url.strip()
    return overrides


async def run_valuation(
    settings: ValuatorSettings, address: str, *, as_json: bool
) -> None:
    summaries = await value_wallet(settings, address)
    report = generate_report(address, summaries)
    logger.info("Total value of %s: %s USD", address, report.usd_value)
    if as_json:
        typer.echo(json.dumps(report.to_dict(), indent=2))
    else:
        format_wallet_table(report)


@app.command()
def report(
    address: Annotated[
        str | None, typer.Argument(help="Wallet address to value.")
    ] = None,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to a TOML config file (can include [farm_valuator] table).",
        ),
    ] = None,
    rpc: Annotated[
        list[str] | None,
        typer.Option(
            "--rpc",
            help="RPC endpoint override as CHAIN_ID=URL; repeatable.",
        ),
    ] = None,
    block_number: Annotated[
        int | None,
        typer.Option(
            "--block-number",
            help="Block number to read at. If not provided, the latest block is used.",
        ),
    ] = None,
    price_feed: Annotated[
        str | None,
        typer.Option(
            "--price-feed",
            help="Price source: coingecko or static (static_prices from config).",
        ),
    ] = None,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the valuation as JSON."),
    ] = False,
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            help="Override logging verbosity (TRACE, DEBUG, INFO, WARNING, ERROR, CRITICAL).",
        ),
    ] = None,
    show_config: Annotated[
        bool,
        typer.Option(
            "--show-config",
            help="Print effective config (with secrets redacted) and exit.",
        ),
    ] = False,
):
    """Value every configured position of ADDRESS and print the summary."""
    if config_path:
        os.environ[CONFIG_ENV_VAR] = str(config_path)

    init_kwargs: dict[str, int | str] = {}
    if block_number is not None:
        init_kwargs["block_number"] = block_number
    if price_feed is not None:
        init_kwargs["price_feed"] = price_feed
    if log_level is not None:
        init_kwargs["log_level"] = log_level.upper()

    settings = ValuatorSettings(**init_kwargs)
    if rpc:
        settings.rpc_urls.update(parse_rpc_overrides(rpc))

    setup_logging(settings.log_level)

    if show_config:
        typer.echo(json.dumps(settings.as_safe_dict(), indent=2))
        raise typer.Exit(code=0)

    if not address:
        raise typer.BadParameter("a wallet address is required", param_hint="ADDRESS")
    try:
        address = checksum_address(address)
    except InvalidAddressError as exc:
        raise typer.BadParameter(str(exc), param_hint="ADDRESS") from None
    if not settings.positions:
        raise typer.BadParameter(
            "no [[positions]] configured",
            param_hint=["--config", CONFIG_ENV_VAR],
        )

    asyncio.run(run_valuation(settings, address, as_json=as_json))


def run() -> None:
    """Entrypoint used by the console script."""
    app()


if __name__ == "__main__":
    run()
