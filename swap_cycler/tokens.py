"""
Token Registry

Static symbol -> token mapping the bot is allowed to trade. The native
currency is a pseudo-token with a sentinel address; it is never sent to a
contract directly and the wrapped-native token stands in for it in swap
paths.
"""

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional

from web3 import Web3


NATIVE_SENTINEL = "0xEeeeeEeeeEeEeeEeEeEeeEEEeeeeEeeeeeeeEEeE"
NATIVE_SYMBOL = "ETH"
WRAPPED_SYMBOL = "WETH"


@dataclass(frozen=True)
class Token:
    """A tradable asset."""
    symbol: str
    address: str
    decimals: int = 18
    is_native: bool = False

    def __post_init__(self):
        if not 0 <= self.decimals <= 18:
            raise ValueError(f"{self.symbol}: decimals must be 0-18, got {self.decimals}")
        if not Web3.is_address(self.address):
            raise ValueError(f"{self.symbol}: invalid address {self.address}")
        # Normalize so path entries and contract lookups agree
        object.__setattr__(self, "address", Web3.to_checksum_address(self.address))


# MegaETH testnet
DEFAULT_TOKENS: List[Token] = [
    Token(NATIVE_SYMBOL, NATIVE_SENTINEL, 18, is_native=True),
    Token(WRAPPED_SYMBOL, "0x776401b9bc8aae31a685731b7147d4445fd9fb19", 18),
    Token("USDT", "0xe9b6e75c243b6100ffcb1c66e8f78f96feea727f", 18),
    Token("tkUSDC", "0xfaf334e157175ff676911adcf0964d7f54f2c424", 6),
    Token("USDC", "0x8d635c4702ba38b1f1735e8e784c7265dcc0b623", 6),
    Token("tkETH", "0x176735870dc6c22b4ebfbf519de2ce758de78d94", 18),
    Token("tkWBTC", "0xf82ff0799448630eb56ce747db840a2e02cde4d8", 8),
    Token("MEGA", "0x10a6be7d23989d00d528e68cf8051d095f741145", 18),
    Token("GTE", "0x9629684df53db9e4484697d0a50c442b2bfa80a8", 18),
]


class TokenRegistry:
    """
    Ordered, immutable collection of tokens keyed by symbol.

    Exactly one native token and one wrapped-native token must be present.
    """

    def __init__(self, tokens: List[Token], wrapped_symbol: str = WRAPPED_SYMBOL):
        self._tokens: Dict[str, Token] = {}
        addresses: Dict[str, str] = {}
        for token in tokens:
            if token.symbol in self._tokens:
                raise ValueError(f"Duplicate token symbol: {token.symbol}")
            if token.address in addresses:
                raise ValueError(
                    f"Duplicate token address: {token.symbol} and {addresses[token.address]} "
                    f"both use {token.address}"
                )
            self._tokens[token.symbol] = token
            addresses[token.address] = token.symbol

        natives = [t for t in tokens if t.is_native]
        if len(natives) != 1:
            raise ValueError(f"Registry needs exactly one native token, found {len(natives)}")
        if wrapped_symbol not in self._tokens:
            raise ValueError(f"Wrapped-native token {wrapped_symbol} is not registered")
        if self._tokens[wrapped_symbol].is_native:
            raise ValueError("Wrapped-native token cannot be the native token")

        self._native = natives[0]
        self._wrapped = self._tokens[wrapped_symbol]

    @classmethod
    def from_config(cls, entries: Optional[List[dict]] = None,
                    wrapped_symbol: str = WRAPPED_SYMBOL) -> "TokenRegistry":
        """
        Build from config mappings, or the default list when none are given.

        Every entry needs a symbol; every non-native entry needs an address.

        Raises:
            ValueError: an entry is malformed or the token set is inconsistent
        """
        if not entries:
            return cls(DEFAULT_TOKENS, wrapped_symbol)

        tokens = []
        for position, entry in enumerate(entries, start=1):
            if not isinstance(entry, dict):
                raise ValueError(f"tokens entry #{position} must be a mapping")

            symbol = entry.get("symbol")
            if not symbol or not isinstance(symbol, str):
                raise ValueError(f"tokens entry #{position} has no symbol")

            is_native = bool(entry.get("is_native", False))
            address = entry.get("address")
            if is_native:
                address = address or NATIVE_SENTINEL
            elif not address:
                raise ValueError(f"{symbol}: address is required for non-native tokens")

            try:
                decimals = int(entry.get("decimals", 18))
            except (TypeError, ValueError):
                raise ValueError(f"{symbol}: decimals must be an integer, got {entry.get('decimals')!r}")

            tokens.append(Token(symbol=symbol, address=str(address),
                                decimals=decimals, is_native=is_native))

        return cls(tokens, wrapped_symbol)

    @property
    def native(self) -> Token:
        return self._native

    @property
    def wrapped(self) -> Token:
        return self._wrapped

    def is_tradable(self, token: Token) -> bool:
        return not token.is_native and token.symbol != self._wrapped.symbol

    def tradable(self) -> List[Token]:
        """Tokens that can be a swap's source or destination besides native."""
        return [t for t in self._tokens.values() if self.is_tradable(t)]

    def balance_tokens(self) -> List[Token]:
        """Tokens whose balances are checked each cycle (all but wrapped-native)."""
        return [t for t in self._tokens.values() if t.symbol != self._wrapped.symbol]

    def get(self, symbol: str) -> Optional[Token]:
        return self._tokens.get(symbol)

    def __getitem__(self, symbol: str) -> Token:
        return self._tokens[symbol]

    def __contains__(self, symbol: str) -> bool:
        return symbol in self._tokens

    def __iter__(self) -> Iterator[Token]:
        return iter(self._tokens.values())

    def __len__(self) -> int:
        return len(self._tokens)
