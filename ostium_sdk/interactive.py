"""
Ostium SDK Interactive CLI

Menu-driven console for a single wallet:
- Long BTC (market order)
- Close a position
- Deposit USDC to the OLP vault
- Request an OLP withdrawal
- View balances, OLP position, pending withdrawals and open positions

The signer is chosen from the environment: the Fordefi vault when
FORDEFI_ACCESS_TOKEN is set, otherwise the local PRIVATE_KEY.

Usage:
    ostium-interactive
    ostium-interactive --env path/to/.env
"""

import argparse
import asyncio
import os
import sys
from typing import Dict, List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from ostium_sdk.client import OstiumClient
from ostium_sdk.models import CloseTradeParams, DepositParams, PlaceOrderParams, Position, VaultEpoch
from ostium_sdk.price import get_btc_price, get_eth_price
from ostium_sdk.signers.base_signer import TransactionOutcome, TransactionSigner
from ostium_sdk.signers.fordefi_signer import FordefiSigner
from ostium_sdk.signers.local_signer import LocalSigner
from ostium_sdk.utils.config import NetworkConfig, get_fordefi_config, get_local_credentials, load_environment
from ostium_sdk.utils.exceptions import OstiumError
from ostium_sdk.utils.scaling import USDC_DECIMALS, scale_to_decimals, unscale_usdc

console = Console()

PAIR_NAMES = {0: "BTC/USD", 1: "ETH/USD"}

# Long BTC flow: $2 collateral at 10x
LONG_BTC_COLLATERAL = 2.0
LONG_BTC_LEVERAGE = 10.0
DEFAULT_DEPOSIT = 0.02
DEFAULT_WITHDRAW_SHARES = 0.01
# Epochs before the current one checked for pending withdrawals
PENDING_EPOCH_LOOKBACK = 10
SETTLE_DELAY = 2.0


async def build_signer(config: NetworkConfig) -> TransactionSigner:
    if os.getenv("FORDEFI_ACCESS_TOKEN"):
        return await FordefiSigner.from_config(get_fordefi_config(), config.rpc_url)

    credentials = get_local_credentials()
    return LocalSigner(credentials["private_key"], config.rpc_url)


def pair_name(pair_index: int) -> str:
    return PAIR_NAMES.get(pair_index, "Unknown")


def select_position(positions: List[Position], choice: str) -> Optional[Position]:
    """Pick a position by its 1-based row in the positions table."""
    try:
        row = int(choice)
    except ValueError:
        return None
    if 1 <= row <= len(positions):
        return positions[row - 1]
    return None


def print_positions(positions: List[Position], title: str = "Open Positions"):
    if not positions:
        console.print("[dim]No open positions.[/dim]")
        return

    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("#", style="bold", width=3)
    table.add_column("Index", style="cyan", width=6)
    table.add_column("Pair", width=10)
    table.add_column("Dir", width=6)
    table.add_column("Lev", justify="right", width=8)
    table.add_column("Collateral", justify="right", width=12)
    table.add_column("Open Price", justify="right", width=14)
    table.add_column("TP / SL", justify="right", width=22)

    for row, position in enumerate(positions, start=1):
        color = "green" if position.is_long else "red"
        tp = f"{position.take_profit:,.2f}" if position.take_profit is not None else "-"
        sl = f"{position.stop_loss:,.2f}" if position.stop_loss is not None else "-"
        table.add_row(
            str(row),
            str(position.trade_index),
            pair_name(position.pair_index),
            f"[{color}]{position.direction}[/{color}]",
            f"{position.leverage:.1f}x",
            f"${position.collateral:,.2f}",
            f"${position.open_price:,.2f}",
            f"{tp} / {sl}",
        )

    console.print(table)


async def wait_and_report(client: OstiumClient, outcome: TransactionOutcome, label: str) -> bool:
    console.print(f"Transaction: [cyan]{outcome}[/cyan]")
    with console.status("Waiting for receipt..."):
        receipt = await client.wait_for_receipt(outcome)

    if receipt.success:
        console.print(f"[green]{label} successful![/green]")
    else:
        console.print(f"[red]{label} transaction reverted![/red]")
    return receipt.success


def pending_epochs(epoch: VaultEpoch) -> range:
    start = max(0, epoch.current_epoch - PENDING_EPOCH_LOOKBACK)
    return range(start, epoch.current_epoch + 2)


def print_pending(pending: Dict[int, int], title: str = "Pending Withdrawals"):
    console.print(f"\n[bold]--- {title} ---[/bold]")
    found = False
    for epoch, shares in pending.items():
        if shares > 0:
            console.print(f"  Epoch {epoch}: {unscale_usdc(shares):.6f} OLP shares pending")
            found = True
    if not found:
        console.print("  No pending withdrawal requests")


# ==================== FLOWS ====================

async def long_btc_flow(client: OstiumClient):
    console.rule("LONG BTC")

    positions_before, current_price = await asyncio.gather(client.get_positions(), get_btc_price())
    console.print(f"Positions BEFORE: {len(positions_before)}")
    print_positions(positions_before)
    console.print(f"\nCurrent BTC price: [yellow]${current_price:,.2f}[/yellow]")

    console.print(f"Placing LONG ${LONG_BTC_COLLATERAL * LONG_BTC_LEVERAGE:.0f} position...")
    params = (
        PlaceOrderParams.market(0, LONG_BTC_COLLATERAL, LONG_BTC_LEVERAGE, True)
        .with_open_price(current_price)
        .with_slippage(2.0)
    )

    outcome = await client.place_order(params)
    if await wait_and_report(client, outcome, "LONG trade"):
        await asyncio.sleep(SETTLE_DELAY)
        positions_after = await client.get_positions()
        console.print(f"\nPositions AFTER: {len(positions_after)}")
        print_positions(positions_after)


async def close_position_flow(client: OstiumClient):
    console.rule("Close Position")

    with console.status("Querying positions..."):
        positions = await client.get_positions()
    if not positions:
        console.print("No open positions to close.")
        return

    print_positions(positions)
    choice = Prompt.ask("Enter row # to close", default="1")
    position = select_position(positions, choice)
    if position is None:
        console.print(f"[red]No position at row {choice}[/red]")
        return
    trade_index = position.trade_index

    if position.pair_index == 0:
        market_price = await get_btc_price()
    elif position.pair_index == 1:
        market_price = await get_eth_price()
    else:
        market_price = position.open_price

    console.print(
        f"\nClosing {pair_name(position.pair_index)} {position.direction} position at index {trade_index}..."
    )
    console.print(f"Current price: ${market_price:,.2f}")

    params = CloseTradeParams.close_all(position.pair_index, trade_index, market_price)
    outcome = await client.close_trade(params)
    if await wait_and_report(client, outcome, "Position close"):
        await asyncio.sleep(SETTLE_DELAY)
        print_positions(await client.get_positions(), title="Positions AFTER")


async def deposit_olp_flow(client: OstiumClient):
    console.rule("Deposit to OLP Vault")

    if not client.config.vault:
        console.print("OLP Vault is not configured for this network.")
        return

    balance_before, usdc_balance = await asyncio.gather(client.get_olp_balance(), client.get_usdc_balance())
    console.print("\nOLP Position BEFORE deposit:")
    console.print(f"  Shares: {balance_before.shares_value:.6f}")
    console.print(f"  Value: ${balance_before.value:.2f}")
    console.print(f"\nAvailable USDC: ${usdc_balance:.2f}")

    raw = Prompt.ask("Amount to deposit (USDC)", default=str(DEFAULT_DEPOSIT))
    try:
        amount = float(raw)
    except ValueError:
        amount = DEFAULT_DEPOSIT

    if amount > usdc_balance:
        console.print("[red]Insufficient USDC balance![/red]")
        return

    console.print(f"\nDepositing ${amount:.2f} USDC...")
    outcome = await client.deposit_olp(DepositParams(amount))
    if not await wait_and_report(client, outcome, "Deposit"):
        return

    await asyncio.sleep(SETTLE_DELAY)
    balance_after = await client.get_olp_balance()
    delta = balance_after.shares_value - balance_before.shares_value
    console.print("\nOLP Position AFTER deposit:")
    console.print(f"  Shares: {balance_after.shares_value:.6f} (+{delta:.6f})")
    console.print(f"  Value: ${balance_after.value:.2f}")


async def withdraw_olp_flow(client: OstiumClient):
    console.rule("Initialize OLP Withdrawal Request")

    if not client.config.vault:
        console.print("OLP Vault is not configured for this network.")
        return

    epoch, balance = await asyncio.gather(client.get_vault_epoch(), client.get_olp_balance())

    console.print("\n[bold]--- Vault Epoch Info ---[/bold]")
    console.print(f"  Current Epoch: {epoch.current_epoch}")
    console.print(f"  Withdrawals Open: {'YES' if epoch.withdrawals_open else 'NO'}")

    console.print("\n[bold]--- Current OLP Position ---[/bold]")
    console.print(f"  Shares: {balance.shares_value:.6f} OLP")
    console.print(f"  Value: ${balance.value:.2f} USDC")

    epochs = pending_epochs(epoch)
    print_pending(await client.get_pending_withdrawals(epochs))

    if balance.shares_value < 0.000001:
        console.print("\nNo OLP balance to withdraw.")
        return

    raw = Prompt.ask("\nAmount (OLP shares, or 'all')", default=str(DEFAULT_WITHDRAW_SHARES))
    if raw.strip().lower() == "all":
        shares_to_withdraw = balance.shares_value
    else:
        try:
            shares_to_withdraw = float(raw)
        except ValueError:
            shares_to_withdraw = DEFAULT_WITHDRAW_SHARES

    if shares_to_withdraw > balance.shares_value:
        console.print("[red]Withdrawal amount exceeds available balance![/red]")
        return

    shares_raw = min(scale_to_decimals(shares_to_withdraw, USDC_DECIMALS), balance.shares)
    console.print(f"\nInitiating withdrawal request for {shares_to_withdraw:.6f} OLP...")
    outcome = await client.request_olp_withdrawal(shares_raw)
    if not await wait_and_report(client, outcome, "Withdrawal request"):
        return

    await asyncio.sleep(SETTLE_DELAY)
    print_pending(await client.get_pending_withdrawals(epochs), title="Updated Pending Withdrawals")

    balance_after = await client.get_olp_balance()
    console.print("\n[bold]--- Remaining OLP Position ---[/bold]")
    console.print(f"  Shares: {balance_after.shares_value:.6f} OLP")
    console.print(f"  Value: ${balance_after.value:.2f} USDC")


async def view_info(client: OstiumClient):
    console.rule("Account Info")

    with console.status("Fetching account data..."):
        usdc, eth, olp, epoch, positions = await asyncio.gather(
            client.get_usdc_balance(),
            client.get_eth_balance(),
            client.get_olp_balance(),
            client.get_vault_epoch(),
            client.get_positions(),
            return_exceptions=True,
        )

    table = Table(title="Balances", show_header=True, header_style="bold magenta")
    table.add_column("Asset", style="cyan", width=12)
    table.add_column("Balance", justify="right", style="green", width=24)

    table.add_row("USDC", _or_error(usdc, lambda v: f"${v:,.2f}"))
    table.add_row("ETH", _or_error(eth, lambda v: f"{v / 1e18:.6f} ETH"))
    table.add_row("OLP", _or_error(olp, lambda v: f"{v.shares_value:.6f} (${v.value:.2f})"))
    console.print(table)

    if isinstance(epoch, VaultEpoch):
        console.print(
            f"Epoch {epoch.current_epoch} | withdrawals {'open' if epoch.withdrawals_open else 'closed'}"
        )
        print_pending(await client.get_pending_withdrawals(pending_epochs(epoch)))
    elif isinstance(epoch, Exception):
        console.print(f"[red]Vault epoch unavailable: {epoch}[/red]")

    if isinstance(positions, Exception):
        console.print(f"[red]Failed to load positions: {positions}[/red]")
    else:
        print_positions(positions)


def _or_error(value, fmt) -> str:
    if isinstance(value, Exception):
        return f"[red]error: {type(value).__name__}[/red]"
    return fmt(value)


MENU = {
    "1": ("Long BTC", long_btc_flow),
    "2": ("Close position", close_position_flow),
    "3": ("Deposit to OLP vault", deposit_olp_flow),
    "4": ("Withdraw from OLP vault", withdraw_olp_flow),
    "5": ("View info", view_info),
}


async def run(client: OstiumClient):
    console.print(Panel(
        f"[bold]Ostium SDK Interactive CLI[/bold]\nConnected wallet: [cyan]{client.address}[/cyan]\n"
        f"Signer: {client.signer.signer_name}",
        border_style="blue",
    ))

    while True:
        console.print()
        for key, (label, _) in MENU.items():
            console.print(f"  {key}. {label}")
        console.print("  q. Quit")

        choice = Prompt.ask("Enter choice").strip()
        if choice.lower() == "q":
            console.print("\nGoodbye!")
            return

        entry = MENU.get(choice)
        if entry is None:
            console.print("\nInvalid choice. Please try again.")
            continue

        try:
            await entry[1](client)
        except OstiumError as e:
            console.print(f"[red]{type(e).__name__}: {e}[/red]")


def parse_arguments():
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Ostium SDK Interactive CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment:
  ALCHEMY_API_KEY or OSTIUM_RPC_URL   Arbitrum One RPC
  PRIVATE_KEY                         Local signer key
  FORDEFI_ACCESS_TOKEN, FORDEFI_PRIVATE_KEY_PEM / FORDEFI_PRIVATE_KEY_PATH,
  FORDEFI_VAULT_ID, FORDEFI_ADDRESS   Fordefi signer (used when the token is set)
        """
    )

    parser.add_argument(
        "--env",
        "-e",
        type=str,
        default=None,
        help="Path to .env file (default: ./.env)"
    )

    return parser.parse_args()


async def async_main():
    args = parse_arguments()
    load_environment(args.env)

    config = NetworkConfig.mainnet()
    signer = await build_signer(config)
    client = OstiumClient(signer, config)
    await run(client)


def main():
    """Console script entry point."""
    try:
        asyncio.run(async_main())
    except KeyboardInterrupt:
        console.print("\nInterrupted by user")
        sys.exit(0)
    except OstiumError as e:
        console.print(f"\n[red]Fatal error: {type(e).__name__}: {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
