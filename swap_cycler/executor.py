"""
Swap Executor

Submits one swap against the router and waits for it to be mined.

Three shapes of router call, chosen by which side is the native token:

    ETH   -> token : swapExactETHForTokens     path [WETH, to]
    token -> ETH   : swapExactTokensForETH     path [from, WETH]
    token -> token : swapExactTokensForTokens  path [from, to]

Token-sourced swaps first approve the router for exactly the swap amount and
wait for that approval to be mined. amountOutMin is always zero.
"""

import time
import asyncio
from typing import Any, Dict

from .candidates import SwapCandidate
from .config import BotConfig
from .contracts import ERC20_ABI, ROUTER_ABI
from .tokens import Token, TokenRegistry
from .utils import error_reason, format_units, logger


class SwapExecutor:
    """
    Executes swap candidates for one wallet against one router.
    """

    def __init__(self, config: BotConfig, wallet, registry: TokenRegistry,
                 sleep=asyncio.sleep, clock=time.time):
        self.config = config
        self.wallet = wallet
        self.registry = registry
        self._sleep = sleep
        self._clock = clock

        self.router = wallet.contract(config.router_address, ROUTER_ABI)
        self.router_address = self.router.address

        # Stats
        self.total_swaps = 0
        self.successful_swaps = 0
        self.failed_swaps = 0

    def _deadline(self) -> int:
        return int(self._clock()) + self.config.deadline_seconds

    async def _approve(self, token: Token, amount: int):
        """Approve the router for amount of token and wait until it is mined."""
        token_contract = self.wallet.contract(token.address, ERC20_ABI)
        logger.info(f"  > Approving {token.symbol} for swap...")

        tx_hash = self.wallet.transact(
            token_contract.functions.approve(self.router_address, amount)
        )
        self.wallet.wait_for_receipt(tx_hash, timeout=self.config.receipt_timeout_seconds)
        logger.info("  > Approval successful.")

        # Let the allowance propagate before the router reads it
        await self._sleep(self.config.approval_delay_seconds)

    def _build_swap_call(self, token_in: Token, token_out: Token, amount: int):
        """Return (contract_call, tx_params) for the router."""
        recipient = self.wallet.address
        deadline = self._deadline()
        weth = self.registry.wrapped.address

        if token_in.is_native:
            path = [weth, token_out.address]
            call = self.router.functions.swapExactETHForTokens(0, path, recipient, deadline)
            return call, {'value': amount, 'gas': self.config.eth_to_token_gas_limit}

        if token_out.is_native:
            path = [token_in.address, weth]
            call = self.router.functions.swapExactTokensForETH(amount, 0, path, recipient, deadline)
            return call, {'gas': self.config.token_to_eth_gas_limit}

        path = [token_in.address, token_out.address]
        call = self.router.functions.swapExactTokensForTokens(amount, 0, path, recipient, deadline)
        return call, {'gas': self.config.token_to_token_gas_limit}

    async def execute_swap(self, candidate: SwapCandidate) -> bool:
        """
        Execute one swap.

        Returns:
            True once the swap transaction is mined successfully, False on any
            failure (approval revert, swap revert, RPC error, receipt timeout).
        """
        token_in = self.registry[candidate.from_symbol]
        token_out = self.registry[candidate.to_symbol]

        logger.info(
            f"Attempting to swap {format_units(candidate.amount, token_in.decimals)} "
            f"{token_in.symbol} for {token_out.symbol}..."
        )
        self.total_swaps += 1

        if self.config.dry_run:
            logger.info(f"  > [DRY RUN] Would swap {candidate}")
            self.successful_swaps += 1
            return True

        try:
            if not token_in.is_native:
                await self._approve(token_in, candidate.amount)

            call, tx_params = self._build_swap_call(token_in, token_out, candidate.amount)
            tx_hash = self.wallet.transact(call, tx_params)
            logger.info(f"  > Swap transaction sent: {tx_hash}")

            self.wallet.wait_for_receipt(tx_hash, timeout=self.config.receipt_timeout_seconds)
            logger.info("  > Swap successful!")
            self.successful_swaps += 1
            return True

        except Exception as e:
            logger.error(f"  > ERROR during swap: {error_reason(e)}")
            self.failed_swaps += 1
            return False

    def get_stats(self) -> Dict[str, Any]:
        """Get trading statistics."""
        return {
            "total_swaps": self.total_swaps,
            "successful_swaps": self.successful_swaps,
            "failed_swaps": self.failed_swaps,
            "success_rate": (self.successful_swaps / self.total_swaps * 100) if self.total_swaps > 0 else 0
        }
