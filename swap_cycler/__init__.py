"""
Swap Cycler
===========

Keeps a wallet active on a Uniswap-V2-style DEX by repeatedly swapping its
balances at random.

Each batch draws a random number of cycles. Every cycle reads the wallet's
balances, lists every legal swap (ETH -> token, token -> ETH, token -> token),
picks one uniformly at random and executes it, approving the router first
when the source is a token. After the batch the bot pauses for a day.

Usage:
    from swap_cycler import BotConfig, build_context

    context = build_context(BotConfig(), credentials)
    await context.scheduler.run_forever()

Or from the shell:
    swap-cycler run --dry-run

License: MIT
"""

__version__ = "1.0.0"
__license__ = "MIT"

from .config import BotConfig, ConfigManager, Credentials, load_credentials
from .tokens import Token, TokenRegistry, DEFAULT_TOKENS
from .wallet import SwapWallet
from .balances import BalanceFetcher
from .candidates import SwapCandidate, SwapCandidateGenerator, derive_candidates
from .executor import SwapExecutor
from .scheduler import BatchScheduler
from .bot import BotContext, build_context
from .utils import (
    logger,
    setup_logging,
    format_units,
    format_duration,
    ConfigurationError,
    TransactionError,
    BalanceReadError,
)

__all__ = [
    "BotConfig",
    "ConfigManager",
    "Credentials",
    "load_credentials",
    "Token",
    "TokenRegistry",
    "DEFAULT_TOKENS",
    "SwapWallet",
    "BalanceFetcher",
    "SwapCandidate",
    "SwapCandidateGenerator",
    "derive_candidates",
    "SwapExecutor",
    "BatchScheduler",
    "BotContext",
    "build_context",
    "logger",
    "setup_logging",
    "format_units",
    "format_duration",
    "ConfigurationError",
    "TransactionError",
    "BalanceReadError",
]
