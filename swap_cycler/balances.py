"""
Balance Fetcher

Reads the wallet's current balance of each registered token. Values are
never cached: every call goes to the chain.
"""

from typing import Dict

import requests
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from .contracts import ERC20_ABI
from .tokens import Token, TokenRegistry
from .utils import BalanceReadError, error_reason, format_units, logger


TRANSIENT_ERRORS = (requests.exceptions.ConnectionError, requests.exceptions.Timeout)


class BalanceFetcher:
    """Native and ERC20 balance queries for one wallet."""

    def __init__(self, wallet, registry: TokenRegistry):
        self.wallet = wallet
        self.registry = registry
        self._contracts = {}

    def _token_contract(self, token: Token):
        if token.address not in self._contracts:
            self._contracts[token.address] = self.wallet.contract(token.address, ERC20_ABI)
        return self._contracts[token.address]

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=8),
        retry=retry_if_exception_type(TRANSIENT_ERRORS),
        reraise=True
    )
    def _query(self, token: Token) -> int:
        if token.is_native:
            return int(self.wallet.get_native_balance())
        contract = self._token_contract(token)
        return int(contract.functions.balanceOf(self.wallet.address).call())

    def get_balance(self, token: Token) -> int:
        """
        Raw smallest-unit balance of token for the wallet.

        Raises:
            BalanceReadError: the query failed (after retrying transport errors)
        """
        try:
            return self._query(token)
        except Exception as e:
            raise BalanceReadError(f"Failed to read {token.symbol} balance: {error_reason(e)}") from e

    def snapshot(self) -> Dict[str, int]:
        """Balances of every token except the wrapped-native one, fetched one by one."""
        balances: Dict[str, int] = {}
        for token in self.registry.balance_tokens():
            balances[token.symbol] = self.get_balance(token)
            logger.info(f"  - {token.symbol}: {format_units(balances[token.symbol], token.decimals)}")
        return balances
