"""
Wallet Module
=============
Thin wrapper around web3.py and eth-account for the bot's single signing key.

Provides the read side (native balance, contract handles) and the write side
(sign + submit a contract call, wait for its receipt with a bounded timeout).
The private key string is wiped after the account is derived from it.
"""

import gc
from typing import Any, Dict, Optional

from web3 import Web3
from eth_account import Account

from .utils import TransactionError, validate_rpc_url


class SwapWallet:
    """
    Signing wallet bound to one RPC endpoint.
    """

    def __init__(self, private_key: str, rpc_url: str, timeout: int = 30,
                 web3: Optional[Web3] = None):
        """
        Initialize wallet with private key.

        Args:
            private_key: Ethereum private key
            rpc_url: RPC endpoint URL
            timeout: HTTP request timeout in seconds
            web3: Pre-built Web3 instance (tests, custom providers)
        """
        if web3 is None:
            if not validate_rpc_url(rpc_url):
                raise ValueError(f"Invalid RPC URL: {rpc_url}")
            web3 = Web3(Web3.HTTPProvider(rpc_url, request_kwargs={'timeout': timeout}))
        self.web3 = web3
        self.rpc_url = rpc_url

        # Convert key to mutable bytearray for secure deletion
        key_bytes = bytearray(private_key, 'utf-8')
        try:
            self.account = Account.from_key(bytes(key_bytes).decode())
        finally:
            self._secure_clear(key_bytes)

        self.address = self.account.address
        self._chain_id: Optional[int] = None

    @staticmethod
    def _secure_clear(data: bytearray) -> None:
        """Overwrite sensitive data before garbage collection."""
        for i in range(len(data)):
            data[i] = 0
        gc.collect()

    def is_connected(self) -> bool:
        return self.web3.is_connected()

    @property
    def chain_id(self) -> int:
        if self._chain_id is None:
            self._chain_id = self.web3.eth.chain_id
        return self._chain_id

    def get_native_balance(self) -> int:
        """Native balance in wei."""
        return self.web3.eth.get_balance(self.address)

    def contract(self, address: str, abi: list):
        """Contract handle at a checksummed address."""
        return self.web3.eth.contract(
            address=self.web3.to_checksum_address(address),
            abi=abi
        )

    def get_nonce(self) -> int:
        return self.web3.eth.get_transaction_count(self.address, 'pending')

    def transact(self, contract_call, tx_params: Optional[Dict[str, Any]] = None) -> str:
        """
        Build, sign and submit a contract call.

        Args:
            contract_call: Bound contract function, e.g. token.functions.approve(a, n)
            tx_params: Extra transaction fields (value, gas, ...)

        Returns:
            Transaction hash as 0x-prefixed hex
        """
        params: Dict[str, Any] = {
            'from': self.address,
            'nonce': self.get_nonce(),
            'chainId': self.chain_id,
        }
        params.update(tx_params or {})
        if 'gasPrice' not in params and 'maxFeePerGas' not in params:
            params['gasPrice'] = self.web3.eth.gas_price

        tx = contract_call.build_transaction(params)
        signed = self.account.sign_transaction(tx)
        tx_hash = self.web3.eth.send_raw_transaction(signed.raw_transaction)
        return self.web3.to_hex(tx_hash)

    def wait_for_receipt(self, tx_hash: str, timeout: float = 120):
        """
        Block until the transaction is mined.

        Raises:
            web3.exceptions.TimeExhausted: not mined within timeout
            TransactionError: mined but reverted
        """
        receipt = self.web3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout)
        if receipt['status'] != 1:
            raise TransactionError(
                f"Transaction reverted: {tx_hash} (gas used {receipt.get('gasUsed')}, "
                f"block {receipt.get('blockNumber')})"
            )
        return receipt

    def __repr__(self) -> str:
        return f"SwapWallet(address={self.address}, rpc_url={self.rpc_url!r})"
