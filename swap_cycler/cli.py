"""
Command line interface.

    swap-cycler init                 write a default swap_bot.yaml
    swap-cycler run [--dry-run]      start the batch loop
    swap-cycler balance              show wallet balances
    swap-cycler swaps                list the swaps possible right now
"""

import sys
import asyncio
import argparse
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich import box

from . import __version__
from .bot import BotContext, build_context
from .config import DEFAULT_CONFIG, DEFAULT_CONFIG_PATH, ConfigManager, load_credentials
from .utils import (
    BalanceReadError,
    ConfigurationError,
    console,
    format_address,
    format_duration,
    format_units,
    logger,
    register_secret,
    setup_logging,
)

err_console = Console(stderr=True)


def init_command(config_path: Path) -> int:
    """Write the default config template."""
    if config_path.exists():
        err_console.print(f"[red]✗ {config_path} already exists[/red]")
        return 1

    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(DEFAULT_CONFIG + "\n")
    console.print(f"[green]✓ Default config created ({config_path})[/green]")
    console.print("[dim]Set PRIVATE_KEY and RPC_URL in your environment or .env before running.[/dim]")
    return 0


def show_banner(context: BotContext):
    config = context.config
    console.print(Panel.fit(
        f"[bold cyan]🔁 Swap Cycler v{__version__}[/bold cyan]\n"
        f"[dim]Wallet {context.wallet.address} | RPC {context.wallet.rpc_url}[/dim]",
        box=box.DOUBLE
    ))

    console.print("\n[bold cyan]⚙️  Configuration[/bold cyan]")
    console.print(f"  Router: {format_address(config.router_address)}")
    console.print(f"  ETH per swap: {config.eth_swap_amount}")
    console.print(f"  Cycles/Batch: {config.min_cycles}-{config.max_cycles}")
    console.print(f"  Cycle Delay: {format_duration(int(config.cycle_delay_seconds))}")
    console.print(f"  Batch Pause: {format_duration(int(config.batch_pause_seconds))}")
    console.print(f"  Tokens: {', '.join(t.symbol for t in context.registry.tradable())}")
    console.print(f"  Mode: {'🧪 DRY RUN' if config.dry_run else '💰 LIVE'}")


def run_command(context: BotContext, max_batches: Optional[int] = None) -> int:
    """Run the batch loop until killed (or max_batches complete)."""
    show_banner(context)
    console.print("\n[bold green]🚀 Starting swap bot...[/bold green]")
    console.print("[dim]Press Ctrl+C to stop\n[/dim]")

    try:
        asyncio.run(context.scheduler.run_forever(max_batches))
    except KeyboardInterrupt:
        console.print("\n[yellow]⚠ Bot stopped by user[/yellow]")
        context.scheduler.show_stats()
        return 130
    except Exception:
        logger.exception("A critical, unrecoverable error occurred in the bot's main loop")
        return 1

    console.print(f"\n[bold green]✅ Completed {context.scheduler.batch_count} batch(es)![/bold green]")
    return 0


def balance_command(context: BotContext) -> int:
    """Check wallet balances"""
    console.print("\n[bold cyan]💰 Wallet Balances[/bold cyan]")
    console.print(f"[dim]Address: {context.wallet.address}[/dim]\n")

    table = Table(box=box.ROUNDED)
    table.add_column("Asset", style="cyan")
    table.add_column("Balance", style="green")

    try:
        for token in context.registry.balance_tokens():
            balance = context.fetcher.get_balance(token)
            table.add_row(token.symbol, format_units(balance, token.decimals))
    except BalanceReadError as e:
        err_console.print(f"[red]✗ {e}[/red]")
        return 1

    console.print(table)
    return 0


def swaps_command(context: BotContext) -> int:
    """List the swaps the bot could pick from right now."""
    try:
        candidates = context.generator.get_possible_swaps()
    except BalanceReadError as e:
        err_console.print(f"[red]✗ {e}[/red]")
        return 1

    if not candidates:
        console.print("[yellow]No possible swaps with current balances.[/yellow]")
        return 0

    table = Table(title=f"{len(candidates)} Possible Swaps", box=box.ROUNDED)
    table.add_column("From", style="cyan")
    table.add_column("To", style="cyan")
    table.add_column("Amount", style="green")

    for candidate in candidates:
        token_in = context.registry[candidate.from_symbol]
        table.add_row(candidate.from_symbol, candidate.to_symbol,
                      format_units(candidate.amount, token_in.decimals))

    console.print(table)
    return 0


def positive_int(value: str) -> int:
    """argparse type for counts that must be at least 1."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="swap-cycler",
        description="Random swap cycling bot for a Uniswap-V2-style router"
    )
    parser.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH,
                        help=f"YAML config file (default: {DEFAULT_CONFIG_PATH})")
    parser.add_argument("--env-file", type=str, default=None,
                        help="dotenv file with PRIVATE_KEY and RPC_URL (default: search for .env)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("init", help="Write a default config file")

    run_parser = subparsers.add_parser("run", help="Start the swap loop")
    run_parser.add_argument("--dry-run", action="store_true", help="Simulation mode")
    run_parser.add_argument("--batches", type=positive_int, default=None,
                            help="Stop after this many batches (default: run forever)")

    subparsers.add_parser("balance", help="Check wallet balances")
    subparsers.add_parser("swaps", help="List currently possible swaps")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "init":
        return init_command(args.config)

    try:
        config = ConfigManager(args.config).load()
        credentials = load_credentials(args.env_file)
    except ConfigurationError as e:
        err_console.print(f"[red]✗ Configuration error: {e}[/red]")
        return 1

    register_secret(credentials.private_key)
    if getattr(args, "dry_run", False):
        config.dry_run = True
    setup_logging(config.log_level, config.log_file)

    try:
        context = build_context(config, credentials)
    except ValueError as e:
        err_console.print(f"[red]✗ Configuration error: {e}[/red]")
        return 1

    logger.info(f"Wallet Address: {context.wallet.address}")
    logger.info(f"RPC Endpoint: {credentials.rpc_url}")

    if args.command == "run":
        return run_command(context, args.batches)
    elif args.command == "balance":
        return balance_command(context)
    elif args.command == "swaps":
        return swaps_command(context)

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
