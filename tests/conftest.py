"""
Shared fixtures: an in-memory wallet that records every call instead of
talking to a node.
"""

import pytest
from web3 import Web3
from web3.exceptions import TimeExhausted

from swap_cycler.config import BotConfig
from swap_cycler.tokens import DEFAULT_TOKENS, TokenRegistry
from swap_cycler.utils import TransactionError


WALLET_ADDRESS = "0x1111111111111111111111111111111111111111"


class FakeCall:
    """A bound contract function: contract.functions.<name>(*args)."""

    def __init__(self, contract, name, args):
        self.contract = contract
        self.name = name
        self.args = args

    def call(self):
        return self.contract.wallet.read(self)

    def __repr__(self):
        return f"FakeCall({self.name}, {self.args})"


class FakeFunctions:
    def __init__(self, contract):
        self._contract = contract

    def __getattr__(self, name):
        return lambda *args: FakeCall(self._contract, name, args)


class FakeContract:
    def __init__(self, wallet, address, abi):
        self.wallet = wallet
        self.address = Web3.to_checksum_address(address)
        self.abi = abi
        self.functions = FakeFunctions(self)


class FakeWallet:
    """
    Stand-in for SwapWallet.

    Every write and receipt wait is appended to `events` so tests can check
    ordering. Names in `revert` make the receipt wait for that call fail;
    names in `submit_errors` make submission itself raise; names in
    `never_mined` make the receipt wait time out.
    """

    def __init__(self, native_balance=0, token_balances=None, revert=(), submit_errors=(),
                 read_errors=None, never_mined=()):
        self.address = WALLET_ADDRESS
        self.rpc_url = "http://localhost:8545"
        self.native_balance = native_balance
        self.token_balances = dict(token_balances or {})
        self.revert = set(revert)
        self.submit_errors = set(submit_errors)
        self.never_mined = set(never_mined)
        self.receipt_timeouts = []
        self.read_errors = list(read_errors or [])
        self.events = []
        self.transactions = []
        self._hashes = {}

    def is_connected(self):
        return True

    def get_native_balance(self):
        if self.read_errors:
            raise self.read_errors.pop(0)
        return self.native_balance

    def contract(self, address, abi):
        return FakeContract(self, address, abi)

    def read(self, call):
        if self.read_errors:
            raise self.read_errors.pop(0)
        if call.name == "balanceOf":
            return self.token_balances.get(call.contract.address, 0)
        raise AssertionError(f"unexpected read {call.name}")

    def transact(self, call, tx_params=None):
        if call.name in self.submit_errors:
            raise ValueError(f"RPC error submitting {call.name}")
        tx_hash = "0x%064x" % (len(self.transactions) + 1)
        self.transactions.append((call, dict(tx_params or {})))
        self._hashes[tx_hash] = call
        self.events.append(("transact", call.name))
        return tx_hash

    def wait_for_receipt(self, tx_hash, timeout=120):
        call = self._hashes[tx_hash]
        self.events.append(("wait", call.name))
        self.receipt_timeouts.append(timeout)
        if call.name in self.never_mined:
            raise TimeExhausted(f"Transaction {tx_hash} is not in the chain after {timeout} seconds")
        if call.name in self.revert:
            raise TransactionError(f"Transaction reverted: {tx_hash}")
        return {"status": 1, "transactionHash": tx_hash, "gasUsed": 21000, "blockNumber": 1}


class SleepRecorder:
    """Async sleep replacement that records durations instead of waiting."""

    def __init__(self, events=None):
        self.calls = []
        self.events = events

    async def __call__(self, seconds):
        self.calls.append(seconds)
        if self.events is not None:
            self.events.append(("sleep", seconds))


@pytest.fixture
def registry():
    return TokenRegistry(DEFAULT_TOKENS)


@pytest.fixture
def config():
    return BotConfig(log_file=None)


@pytest.fixture
def wallet():
    return FakeWallet()


def balances_by_address(registry, **amounts):
    """{symbol: raw} -> {checksummed address: raw} for FakeWallet.token_balances."""
    return {registry[symbol].address: amount for symbol, amount in amounts.items()}
