"""
Swap Candidate Generator

Turns a balance snapshot into every legal (from, to, amount) swap:

- ETH -> token for each tradable token, when the native balance is above the
  fixed swap amount (amount = that fixed amount)
- token -> ETH and token -> other token for each tradable token with a
  positive balance (amount = the full balance)

The wrapped-native token is only ever a path hop, never a candidate end.
"""

from dataclasses import dataclass
from typing import Dict, List

from .tokens import TokenRegistry
from .utils import logger


@dataclass(frozen=True)
class SwapCandidate:
    """One possible swap, amount in the source token's smallest units."""
    from_symbol: str
    to_symbol: str
    amount: int

    def __str__(self) -> str:
        return f"{self.from_symbol} -> {self.to_symbol} ({self.amount})"


def derive_candidates(registry: TokenRegistry, balances: Dict[str, int],
                      eth_swap_amount: int) -> List[SwapCandidate]:
    """Every legal swap for the given balances. Order is not meaningful."""
    candidates: List[SwapCandidate] = []
    native = registry.native
    tradable = registry.tradable()

    if balances.get(native.symbol, 0) > eth_swap_amount:
        for token_out in tradable:
            candidates.append(SwapCandidate(native.symbol, token_out.symbol, eth_swap_amount))

    for token_in in tradable:
        balance = balances.get(token_in.symbol, 0)
        if balance <= 0:
            continue

        candidates.append(SwapCandidate(token_in.symbol, native.symbol, balance))
        for token_out in tradable:
            if token_out.symbol == token_in.symbol:
                continue
            candidates.append(SwapCandidate(token_in.symbol, token_out.symbol, balance))

    return candidates


class SwapCandidateGenerator:
    """Fetches fresh balances and derives the current candidate set."""

    def __init__(self, registry: TokenRegistry, fetcher, eth_swap_amount: int):
        self.registry = registry
        self.fetcher = fetcher
        self.eth_swap_amount = eth_swap_amount

    def get_possible_swaps(self) -> List[SwapCandidate]:
        logger.info("  > Checking balances...")
        balances = self.fetcher.snapshot()
        candidates = derive_candidates(self.registry, balances, self.eth_swap_amount)
        logger.debug(f"  > {len(candidates)} possible swaps")
        return candidates
