"""
Utility Module

Exceptions, logging setup and formatting helpers shared by the bot.

Logging goes through a single named logger ("swap_bot") with a Rich console
handler and an optional plain-text file handler. The logger is wrapped in
SecureLogger so private keys never end up on screen or on disk.
"""

import os
import re
import logging
from urllib.parse import urlparse
from decimal import Decimal
from typing import Optional

from web3 import Web3
from rich.logging import RichHandler
from rich.console import Console


# Global console for Rich output
console = Console()

LOGGER_NAME = "swap_bot"


class ConfigurationError(Exception):
    """Missing or invalid startup configuration."""
    pass


class TransactionError(Exception):
    """Custom exception for transaction failures."""
    pass


class BalanceReadError(Exception):
    """A balance query against the chain failed."""
    pass


# Exact secret values to scrub from every log line. Transaction hashes have
# the same shape as private keys, so keys are matched by value, not pattern.
_SECRETS = set()


def register_secret(value: str):
    """Redact this value (with or without 0x prefix) from all log output."""
    if not value:
        return
    clean = value[2:] if value.startswith("0x") else value
    _SECRETS.add(clean.lower())


class SecureLogger:
    """
    Logger that sanitizes sensitive data from log messages.
    """

    SENSITIVE_PATTERNS = [
        (r'private[_-]?key["\']?\s*[:=]\s*\S+', 'private_key=[REDACTED]'),
        (r'password["\']?\s*[:=]\s*\S+', 'password=[REDACTED]'),
    ]

    def __init__(self, logger: logging.Logger):
        self._logger = logger

    @property
    def raw(self) -> logging.Logger:
        return self._logger

    def _sanitize(self, msg) -> str:
        if not isinstance(msg, str):
            msg = str(msg)

        sanitized = msg
        for secret in _SECRETS:
            sanitized = re.sub(
                r'(0x)?' + re.escape(secret), '[PRIVATE_KEY_REDACTED]',
                sanitized, flags=re.IGNORECASE
            )
        for pattern, replacement in self.SENSITIVE_PATTERNS:
            sanitized = re.sub(pattern, replacement, sanitized, flags=re.IGNORECASE)
        return sanitized

    def debug(self, msg: str, *args, **kwargs):
        self._logger.debug(self._sanitize(msg), *args, **kwargs)

    def info(self, msg: str, *args, **kwargs):
        self._logger.info(self._sanitize(msg), *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        self._logger.warning(self._sanitize(msg), *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        self._logger.error(self._sanitize(msg), *args, **kwargs)

    def exception(self, msg: str, *args, **kwargs):
        self._logger.exception(self._sanitize(msg), *args, **kwargs)

    def critical(self, msg: str, *args, **kwargs):
        self._logger.critical(self._sanitize(msg), *args, **kwargs)


def setup_logging(log_level: str = "INFO", log_file: Optional[str] = None) -> SecureLogger:
    """
    Setup logging with Rich console output and an optional log file.

    Calling it again reconfigures the same underlying logger, so module-level
    references obtained at import time stay valid.
    """
    level = getattr(logging, log_level.upper())
    base_logger = logging.getLogger(LOGGER_NAME)
    base_logger.setLevel(level)
    base_logger.propagate = False

    # Remove existing handlers
    for handler in list(base_logger.handlers):
        base_logger.removeHandler(handler)
        handler.close()

    rich_handler = RichHandler(
        console=console,
        show_time=True,
        show_path=False,
        rich_tracebacks=True
    )
    rich_handler.setLevel(level)
    rich_handler.setFormatter(logging.Formatter("%(message)s"))
    base_logger.addHandler(rich_handler)

    if log_file:
        log_path = os.path.abspath(log_file)
        os.makedirs(os.path.dirname(log_path) or ".", exist_ok=True)

        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        ))
        base_logger.addHandler(file_handler)

    return SecureLogger(base_logger)


# Console-only until the CLI applies the configured level and file
logger = setup_logging()


# Formatting utilities

def format_units(raw_amount: int, decimals: int = 18) -> str:
    """Format a raw smallest-unit amount as a plain decimal string."""
    if raw_amount == 0:
        return "0"
    value = Decimal(raw_amount) / (Decimal(10) ** decimals)
    text = format(value.normalize(), "f")
    return text


def format_duration(seconds: int) -> str:
    """Format duration in seconds to human-readable string."""
    if seconds < 60:
        return f"{seconds}s"
    elif seconds < 3600:
        minutes = seconds // 60
        secs = seconds % 60
        return f"{minutes}m {secs}s" if secs > 0 else f"{minutes}m"
    else:
        hours = seconds // 3600
        minutes = (seconds % 3600) // 60
        return f"{hours}h {minutes}m" if minutes > 0 else f"{hours}h"


def format_address(address: str, length: int = 6) -> str:
    """Format Ethereum address with ellipsis."""
    if len(address) <= length * 2 + 2:
        return address
    return f"{address[:length + 2]}...{address[-length:]}"


def error_reason(error: Exception) -> str:
    """Best human-readable reason for a failed call or transaction."""
    # ContractLogicError carries the decoded revert string in .message
    message = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(error) or error.__class__.__name__


# Validation utilities

def validate_private_key(key: str) -> bool:
    """Validate private key format."""
    if not key:
        return False

    key_clean = key[2:] if key.startswith("0x") else key

    if len(key_clean) != 64:
        return False

    try:
        int(key_clean, 16)
        return True
    except ValueError:
        return False


def validate_address(address: str) -> bool:
    """Validate Ethereum address format."""
    if not address:
        return False
    return bool(Web3.is_address(address))


def validate_rpc_url(url: str) -> bool:
    """Accept http(s) URLs with a host; warn on plain http to a remote node."""
    if not url or not isinstance(url, str):
        return False
    try:
        parsed = urlparse(url)
    except ValueError:
        return False

    if parsed.scheme not in ('http', 'https') or not parsed.netloc:
        return False

    if parsed.scheme == 'http' and not parsed.netloc.startswith(('localhost', '127.')):
        logger.warning(f"Non-HTTPS RPC URL: {url}")
    return True
