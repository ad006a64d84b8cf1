"""
Tests for the token registry.
"""

import pytest

from swap_cycler.tokens import DEFAULT_TOKENS, NATIVE_SENTINEL, Token, TokenRegistry


WETH = Token("WETH", "0x" + "1" * 40)
ETH = Token("ETH", NATIVE_SENTINEL, is_native=True)


class TestToken:

    def test_address_checksummed(self):
        token = Token("X", "0xa6b579684e943f7d00d616a48cf99b5147fc57a5")
        assert token.address == "0xA6b579684E943F7D00d616A48cF99b5147fC57A5"

    @pytest.mark.parametrize("decimals", [-1, 19])
    def test_decimals_range(self, decimals):
        with pytest.raises(ValueError):
            Token("X", "0x" + "2" * 40, decimals)

    def test_invalid_address(self):
        with pytest.raises(ValueError):
            Token("X", "0x1234")


class TestTokenRegistry:

    def test_defaults(self, registry):
        assert registry.native.symbol == "ETH"
        assert registry.wrapped.symbol == "WETH"
        assert len(registry) == len(DEFAULT_TOKENS)
        assert [t.symbol for t in registry.tradable()] == [
            "USDT", "tkUSDC", "USDC", "tkETH", "tkWBTC", "MEGA", "GTE"]
        assert registry["tkWBTC"].decimals == 8
        assert registry["USDC"].decimals == 6

    def test_balance_tokens_skip_wrapped(self, registry):
        symbols = [t.symbol for t in registry.balance_tokens()]
        assert "WETH" not in symbols
        assert symbols[0] == "ETH"

    def test_lookup(self, registry):
        assert "MEGA" in registry
        assert "DOGE" not in registry
        assert registry.get("DOGE") is None
        with pytest.raises(KeyError):
            registry["DOGE"]

    def test_duplicate_symbol(self):
        with pytest.raises(ValueError, match="Duplicate"):
            TokenRegistry([ETH, WETH, Token("WETH", "0x" + "3" * 40)])

    def test_requires_one_native(self):
        with pytest.raises(ValueError, match="native"):
            TokenRegistry([WETH])
        with pytest.raises(ValueError, match="native"):
            TokenRegistry([ETH, WETH, Token("ETH2", "0x" + "9" * 40, is_native=True)])

    def test_requires_wrapped(self):
        with pytest.raises(ValueError, match="WETH"):
            TokenRegistry([ETH, Token("USDT", "0x" + "4" * 40)])

    def test_from_config_defaults(self):
        assert len(TokenRegistry.from_config(None)) == len(DEFAULT_TOKENS)

    def test_duplicate_address(self):
        with pytest.raises(ValueError, match="Duplicate token address"):
            TokenRegistry([ETH, WETH, Token("WETH2", WETH.address)])


class TestFromConfig:
    """Token lists read from YAML."""

    BASE = [
        {"symbol": "ETH", "is_native": True},
        {"symbol": "WETH", "address": "0x" + "1" * 40},
    ]

    def test_native_defaults_to_sentinel(self):
        registry = TokenRegistry.from_config(self.BASE + [
            {"symbol": "FOO", "address": "0x" + "2" * 40, "decimals": "6"}])

        assert registry.native.address == NATIVE_SENTINEL
        assert registry["FOO"].decimals == 6

    def test_non_native_requires_address(self):
        with pytest.raises(ValueError, match="FOO: address is required"):
            TokenRegistry.from_config(self.BASE + [{"symbol": "FOO"}])

    def test_missing_symbol(self):
        with pytest.raises(ValueError, match="entry #3 has no symbol"):
            TokenRegistry.from_config(self.BASE + [{"address": "0x" + "2" * 40}])

    def test_entry_must_be_mapping(self):
        with pytest.raises(ValueError, match="mapping"):
            TokenRegistry.from_config(self.BASE + ["FOO"])

    def test_bad_decimals(self):
        with pytest.raises(ValueError, match="decimals"):
            TokenRegistry.from_config(self.BASE + [
                {"symbol": "FOO", "address": "0x" + "2" * 40, "decimals": "six"}])

    def test_duplicate_address(self):
        with pytest.raises(ValueError, match="Duplicate token address"):
            TokenRegistry.from_config(self.BASE + [
                {"symbol": "FOO", "address": "0x" + "1" * 40}])
