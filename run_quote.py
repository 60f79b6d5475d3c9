#!/usr/bin/env python3
"""
run_quote.py - CLI entrypoint: quote (and optionally build) a vault swap.

Acts as a minimal host: discovers both vaults, fetches their accounts over
RPC, refreshes the adapters, then asks the chosen one for a quote.

Usage:
    python run_quote.py --direction redeem --amount 1000000000
    python run_quote.py -d deposit -a 5000 --payer <PUBKEY> --source <PUBKEY> --destination <PUBKEY>
"""

import asyncio
import json
import sys
from pathlib import Path

import click
from solders.pubkey import Pubkey

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from chains.providers import RPCProvider
from config import get_rpc_urls, get_vault_config
from core.constants import Direction
from core.exceptions import AdapterError
from core.logging import get_logger, setup_logging, set_global_context
from core.math import normalize_to_decimals
from core.models import UserAccounts
from discovery.registry import VaultRegistry

logger = get_logger("deaura.quote")


def _parse_pubkey(ctx: click.Context, param: click.Parameter, value: str | None) -> Pubkey | None:
    if value is None:
        return None
    try:
        return Pubkey.from_string(value)
    except ValueError:
        raise click.BadParameter(f"not a valid pubkey: {value}")


async def quote_once(
    registry: VaultRegistry,
    provider: RPCProvider,
    direction: Direction,
    amount: int,
    user_accounts: UserAccounts | None,
) -> dict:
    """
    Fetch vault state, refresh, quote and optionally build.

    Returns:
        Result summary (quote, and plan when user accounts were given)
    """
    fetch = await provider.get_multiple_accounts(sorted(registry.required_accounts(), key=str))
    failures = registry.update_all(fetch.accounts, slot=fetch.slot)

    adapter = registry.require(registry.config.vault(direction).address)
    if adapter.key in failures:
        raise failures[adapter.key]

    quote = adapter.quote(amount)
    result = {
        "label": adapter.label,
        "slot": fetch.slot,
        "quote": quote.to_dict(),
    }

    if user_accounts is not None and quote.valid:
        plan = adapter.build(amount, direction, user_accounts)
        result["plan"] = plan.to_dict()

    return result


@click.command()
@click.option(
    "--direction",
    "-d",
    required=True,
    type=click.Choice([d.value for d in Direction]),
    help="deposit (VNX->GOLDC) or redeem (GOLDC->VNX)",
)
@click.option(
    "--amount",
    "-a",
    required=True,
    type=click.IntRange(min=0),
    help="Input amount in raw units",
)
@click.option("--payer", callback=_parse_pubkey, default=None, help="Signing wallet")
@click.option("--source", callback=_parse_pubkey, default=None, help="Payer's input token account")
@click.option("--destination", callback=_parse_pubkey, default=None, help="Payer's output token account")
@click.option(
    "--log-level",
    "-l",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Log level",
)
@click.option(
    "--json-logs/--no-json-logs",
    default=True,
    help="Use JSON log format",
)
def main(
    direction: str,
    amount: int,
    payer: Pubkey | None,
    source: Pubkey | None,
    destination: Pubkey | None,
    log_level: str,
    json_logs: bool,
) -> None:
    """
    Deaura vault quote.

    Prints the quote for AMOUNT and, when payer/source/destination are all
    given and the quote is executable, the instruction plan.
    """
    setup_logging(level=log_level, json_output=json_logs)
    set_global_context(service="deaura-quote", version="0.1.0")

    config = get_vault_config()
    registry = VaultRegistry(config)
    registry.discover_configured()

    user_accounts = None
    if payer or source or destination:
        user_accounts = UserAccounts(
            token_transfer_authority=payer,
            source_token_account=source,
            destination_token_account=destination,
        )

    async def _run() -> dict:
        async with RPCProvider(get_rpc_urls()) as provider:
            try:
                return await quote_once(registry, provider, Direction(direction), amount, user_accounts)
            finally:
                logger.info("RPC stats", extra={"context": {"endpoints": provider.get_stats_summary()}})

    try:
        result = asyncio.run(_run())
    except AdapterError as e:
        logger.error(
            f"Quote failed: {e}",
            extra={"context": e.to_dict()},
        )
        click.echo(json.dumps(e.to_dict(), indent=2), err=True)
        sys.exit(1)

    quote = result["quote"]
    out_token = config.asset_b if direction == Direction.DEPOSIT.value else config.asset_a
    click.echo(json.dumps(result, indent=2))
    click.echo(
        f"{result['label']}: {quote['amount_in']} -> {quote['amount_out']} "
        f"({normalize_to_decimals(quote['amount_out'], out_token.decimals)} {out_token.symbol}) "
        f"valid={quote['valid']}"
    )


if __name__ == "__main__":
    main()
