"""
Wiring: build every component once from config + credentials.
"""

import time
import random
import asyncio
from dataclasses import dataclass
from typing import Optional

from .balances import BalanceFetcher
from .candidates import SwapCandidateGenerator
from .config import BotConfig, Credentials
from .executor import SwapExecutor
from .scheduler import BatchScheduler
from .tokens import TokenRegistry
from .wallet import SwapWallet


@dataclass
class BotContext:
    """All long-lived objects of a running bot."""
    config: BotConfig
    wallet: SwapWallet
    registry: TokenRegistry
    fetcher: BalanceFetcher
    generator: SwapCandidateGenerator
    executor: SwapExecutor
    scheduler: BatchScheduler


def build_context(config: BotConfig, credentials: Optional[Credentials] = None,
                  wallet=None, rng: Optional[random.Random] = None,
                  sleep=asyncio.sleep, clock=time.time) -> BotContext:
    """
    Construct the bot. Pass wallet to reuse an existing client (tests);
    otherwise one is created from credentials.
    """
    if wallet is None:
        if credentials is None:
            raise ValueError("credentials are required when no wallet is given")
        wallet = SwapWallet(credentials.private_key, credentials.rpc_url,
                            timeout=config.rpc_timeout_seconds)

    registry = TokenRegistry.from_config(config.tokens)
    fetcher = BalanceFetcher(wallet, registry)
    generator = SwapCandidateGenerator(registry, fetcher, config.eth_swap_amount_wei)
    executor = SwapExecutor(config, wallet, registry, sleep=sleep, clock=clock)
    scheduler = BatchScheduler(config, generator, executor, rng=rng, sleep=sleep,
                               clock=clock)

    return BotContext(
        config=config,
        wallet=wallet,
        registry=registry,
        fetcher=fetcher,
        generator=generator,
        executor=executor,
        scheduler=scheduler,
    )
