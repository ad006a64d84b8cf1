"""
Configuration Management Module

Secrets (signing key, RPC endpoint) come from the environment, optionally via
a .env file. Everything else is a tunable with a sensible default that can be
overridden from a YAML file.
"""

import os
import logging
from pathlib import Path
from typing import Dict, Any, List, Optional
from dataclasses import dataclass, asdict, field
from decimal import Decimal, InvalidOperation

import yaml
from dotenv import load_dotenv
from web3 import Web3

from .contracts import ROUTER_ADDRESS
from .tokens import TokenRegistry
from .utils import ConfigurationError, validate_private_key, validate_address, validate_rpc_url

logger = logging.getLogger("swap_bot.config")


DEFAULT_CONFIG_PATH = Path("./swap_bot.yaml")

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

INT_FIELDS = ("min_cycles", "max_cycles", "deadline_seconds", "eth_to_token_gas_limit",
              "token_to_eth_gas_limit", "token_to_token_gas_limit", "rpc_timeout_seconds")
FLOAT_FIELDS = ("cycle_delay_seconds", "idle_wait_seconds", "batch_pause_seconds",
                "approval_delay_seconds", "receipt_timeout_seconds")


@dataclass
class Credentials:
    """Values that must never be written to the config file."""
    private_key: str
    rpc_url: str

    def __repr__(self) -> str:
        return f"Credentials(private_key='***', rpc_url={self.rpc_url!r})"


@dataclass
class BotConfig:
    """Bot configuration settings."""

    # Router
    router_address: str = ROUTER_ADDRESS

    # Trading settings
    eth_swap_amount: str = "0.0001"  # ETH spent per ETH -> token swap

    # Batch settings
    min_cycles: int = 10
    max_cycles: int = 20
    cycle_delay_seconds: float = 5
    idle_wait_seconds: float = 60
    batch_pause_seconds: float = 24 * 60 * 60

    # Transaction settings
    approval_delay_seconds: float = 3
    deadline_seconds: int = 300
    eth_to_token_gas_limit: int = 400000
    token_to_eth_gas_limit: int = 400000
    token_to_token_gas_limit: int = 500000  # token-token hops cost more
    receipt_timeout_seconds: float = 120
    rpc_timeout_seconds: int = 30

    # Operation
    dry_run: bool = False
    log_level: str = "INFO"
    log_file: Optional[str] = "./swap_bot.log"

    # Optional token list override, see TokenRegistry.from_config
    tokens: Optional[List[Dict[str, Any]]] = field(default=None)

    @property
    def eth_swap_amount_wei(self) -> int:
        return int(Web3.to_wei(Decimal(str(self.eth_swap_amount)), "ether"))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BotConfig":
        """Create BotConfig from dictionary."""
        # Filter only valid fields
        valid_fields = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**valid_fields)

    def validate(self):
        """Raise ConfigurationError if any setting is unusable."""
        issues = []

        if not isinstance(self.router_address, str) or not validate_address(self.router_address):
            issues.append(f"router_address is not an address: {self.router_address}")

        try:
            amount = Decimal(str(self.eth_swap_amount))
            if not amount.is_finite() or amount <= 0:
                issues.append("eth_swap_amount must be a positive number")
        except InvalidOperation:
            issues.append(f"eth_swap_amount is not a number: {self.eth_swap_amount}")

        # YAML gives us whatever the user typed; bools are ints to Python
        bad_type = set()
        for name in INT_FIELDS + FLOAT_FIELDS:
            value = getattr(self, name)
            allowed = (int,) if name in INT_FIELDS else (int, float)
            if isinstance(value, bool) or not isinstance(value, allowed):
                issues.append(f"{name} must be a number, got {value!r}")
                bad_type.add(name)

        if not isinstance(self.dry_run, bool):
            issues.append(f"dry_run must be true or false, got {self.dry_run!r}")

        if not isinstance(self.log_level, str) or self.log_level.upper() not in LOG_LEVELS:
            issues.append(f"log_level must be one of {', '.join(LOG_LEVELS)}, got {self.log_level!r}")

        if "min_cycles" not in bad_type and self.min_cycles < 1:
            issues.append("min_cycles must be at least 1")
        if not bad_type & {"min_cycles", "max_cycles"} and self.max_cycles < self.min_cycles:
            issues.append("max_cycles must be >= min_cycles")

        for name in ("cycle_delay_seconds", "idle_wait_seconds", "batch_pause_seconds",
                     "approval_delay_seconds"):
            if name not in bad_type and getattr(self, name) < 0:
                issues.append(f"{name} cannot be negative")

        for name in ("deadline_seconds", "eth_to_token_gas_limit", "token_to_eth_gas_limit",
                     "token_to_token_gas_limit", "receipt_timeout_seconds", "rpc_timeout_seconds"):
            if name not in bad_type and getattr(self, name) <= 0:
                issues.append(f"{name} must be positive")

        if self.tokens is not None:
            if not isinstance(self.tokens, list):
                issues.append("tokens must be a list of mappings")
            else:
                try:
                    TokenRegistry.from_config(self.tokens)
                except ValueError as e:
                    issues.append(f"tokens: {e}")

        if issues:
            raise ConfigurationError("; ".join(issues))


class ConfigManager:
    """Loads tunables from a YAML file."""

    def __init__(self, config_path: Path = DEFAULT_CONFIG_PATH):
        self.config_path = Path(config_path)

    def load(self) -> BotConfig:
        """Load configuration; defaults are used when the file does not exist."""
        if not self.config_path.exists():
            logger.debug(f"No config file at {self.config_path}, using defaults")
            config = BotConfig()
        else:
            with open(self.config_path, 'r') as f:
                try:
                    data = yaml.safe_load(f) or {}
                except yaml.YAMLError as e:
                    raise ConfigurationError(f"Invalid YAML in {self.config_path}: {e}") from e

            if not isinstance(data, dict):
                raise ConfigurationError(f"{self.config_path} must contain a mapping")

            config = BotConfig.from_dict(data)
            logger.info(f"Configuration loaded from {self.config_path}")

        config.validate()
        return config

    def save(self, config: BotConfig):
        """Save configuration to YAML file."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(self.config_path, 'w') as f:
            yaml.dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)

        logger.info(f"Configuration saved to {self.config_path}")


def load_credentials(env_file: Optional[str] = None) -> Credentials:
    """
    Read PRIVATE_KEY and RPC_URL from the environment.

    A .env file is loaded first when present; real environment variables win.
    """
    load_dotenv(env_file, override=False)

    private_key = os.getenv("PRIVATE_KEY", "").strip()
    rpc_url = os.getenv("RPC_URL", "").strip()

    missing = [name for name, value in (("PRIVATE_KEY", private_key), ("RPC_URL", rpc_url))
               if not value]
    if missing:
        raise ConfigurationError(
            f"Missing required environment variable(s): {', '.join(missing)}. "
            "Add them to your environment or a .env file."
        )

    if not validate_private_key(private_key):
        raise ConfigurationError("PRIVATE_KEY must be 64 hex characters")
    if not validate_rpc_url(rpc_url):
        raise ConfigurationError(f"RPC_URL must be an http(s) URL, got: {rpc_url}")

    if not private_key.startswith("0x"):
        private_key = "0x" + private_key

    return Credentials(private_key=private_key, rpc_url=rpc_url)


# Template written by `swap-cycler init`
DEFAULT_CONFIG = """
# Swap cycler configuration
# Secrets are NOT stored here: set PRIVATE_KEY and RPC_URL in the environment or .env

router_address: "0xA6b579684E943F7D00d616A48cF99b5147fC57A5"

# Trading
eth_swap_amount: "0.0001"

# Batches
min_cycles: 10
max_cycles: 20
cycle_delay_seconds: 5
idle_wait_seconds: 60
batch_pause_seconds: 86400

# Transactions
approval_delay_seconds: 3
deadline_seconds: 300
eth_to_token_gas_limit: 400000
token_to_eth_gas_limit: 400000
token_to_token_gas_limit: 500000
receipt_timeout_seconds: 120
rpc_timeout_seconds: 30

# Operation
dry_run: false
log_level: INFO
log_file: ./swap_bot.log
""".strip()
