"""
Configuration management for swap_pay

Loads settings from environment variables and an optional .env file.
There is no module-level config instance: build a Config once (usually
via Config.from_env()) and pass it to SwapPayClient.
"""

import os
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, List

from dotenv import load_dotenv

from .types.tokens import MONAD_TESTNET_CHAIN_ID

logger = logging.getLogger(__name__)


def _load_env_file(env_file: Optional[str] = None) -> None:
    """Load .env file (explicit path, or the project root)"""
    if env_file is not None:
        load_dotenv(env_file)
        return

    default = Path(__file__).parent.parent / ".env"
    if default.exists():
        load_dotenv(default)


def _get_env(key: str, default: Optional[str] = "") -> Optional[str]:
    """Get environment variable with default"""
    value = os.getenv(key)
    if value is None:
        return default
    return value


def _get_env_float(key: str, default: Optional[float]) -> Optional[float]:
    """Get environment variable as float"""
    value = os.getenv(key)
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        logger.warning(f"Invalid float value for {key}='{value}', using default={default}")
        return default


def _get_env_int(key: str, default: int) -> int:
    """Get environment variable as int"""
    value = os.getenv(key)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Invalid int value for {key}='{value}', using default={default}")
        return default


def _get_env_bool(key: str, default: bool) -> bool:
    """Get environment variable as bool"""
    value = os.getenv(key)
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


def _get_env_rpc_map(key: str) -> Dict[int, str]:
    """
    Get a chain id to RPC URL map from "chain_id=url" pairs separated by commas

    Malformed pairs are skipped with a warning.
    """
    value = os.getenv(key, "")
    rpc_urls: Dict[int, str] = {}
    for pair in value.split(","):
        pair = pair.strip()
        if not pair:
            continue
        chain_id, sep, url = pair.partition("=")
        try:
            if not sep or not url.strip():
                raise ValueError(pair)
            rpc_urls[int(chain_id.strip(), 0)] = url.strip()
        except ValueError:
            logger.warning(f"Invalid RPC map entry for {key}='{pair}', skipping")
    return rpc_urls


@dataclass
class ZeroExConfig:
    """0x quote proxy configuration (the proxy injects the API key)"""
    # Full URL of the proxy's quote endpoint, e.g. https://proxy.example/quote
    proxy_url: str = field(default_factory=lambda: _get_env("ZEROX_PROXY_URL", ""))
    # Path suffix the proxy URL must end with; the price URL swaps it for "price"
    quote_path: str = field(default_factory=lambda: _get_env("ZEROX_QUOTE_PATH", "quote"))
    timeout: float = field(default_factory=lambda: _get_env_float("ZEROX_TIMEOUT", 20.0))
    default_slippage_bps: int = field(default_factory=lambda: _get_env_int("ZEROX_DEFAULT_SLIPPAGE_BPS", 100))


@dataclass
class ChainConfig:
    """Chain client configuration"""
    rpc_url: str = field(default_factory=lambda: _get_env("CHAIN_RPC_URL", ""))
    chain_id: int = field(default_factory=lambda: _get_env_int("CHAIN_ID", MONAD_TESTNET_CHAIN_ID))
    request_timeout: float = field(default_factory=lambda: _get_env_float("CHAIN_REQUEST_TIMEOUT", 30.0))
    # None leaves receipt waits on the chain client's own default
    receipt_timeout: Optional[float] = field(default_factory=lambda: _get_env_float("CHAIN_RECEIPT_TIMEOUT", None))
    # Multiplier for gas limit estimates (local signer only)
    gas_limit_multiplier: float = field(default_factory=lambda: _get_env_float("CHAIN_GAS_LIMIT_MULTIPLIER", 1.2))
    # Alternate RPC endpoints per chain id, used to re-point the client on a chain mismatch
    switch_rpc_urls: Dict[int, str] = field(default_factory=lambda: _get_env_rpc_map("CHAIN_SWITCH_RPC_URLS"))


@dataclass
class ConfirmConfig:
    """Post-swap balance confirmation policy"""
    attempts: int = field(default_factory=lambda: _get_env_int("BALANCE_POLL_ATTEMPTS", 6))
    delay: float = field(default_factory=lambda: _get_env_float("BALANCE_POLL_DELAY", 0.25))


@dataclass
class SignerConfig:
    """Local signer configuration"""
    private_key: str = field(default_factory=lambda: _get_env("EVM_PRIVATE_KEY", ""))


@dataclass
class LoggingConfig:
    """
    Logging configuration with optional file output.

    Environment variables:
        LOG_FILE: Path to log file (empty disables file output)
        LOG_LEVEL: DEBUG, INFO, WARNING, ERROR, CRITICAL (default: INFO)
        LOG_FORMAT: Custom log format string
        LOG_CONSOLE: Enable console output (default: true)
        LOG_MAX_BYTES: Max log file size before rotation (default: 10MB)
        LOG_BACKUP_COUNT: Number of backup files to keep (default: 5)
    """
    log_file: str = field(default_factory=lambda: _get_env("LOG_FILE", ""))
    log_level: str = field(default_factory=lambda: _get_env("LOG_LEVEL", "INFO"))
    log_format: str = field(default_factory=lambda: _get_env(
        "LOG_FORMAT",
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    ))
    console_output: bool = field(default_factory=lambda: _get_env_bool("LOG_CONSOLE", True))
    max_bytes: int = field(default_factory=lambda: _get_env_int("LOG_MAX_BYTES", 10 * 1024 * 1024))  # 10MB
    backup_count: int = field(default_factory=lambda: _get_env_int("LOG_BACKUP_COUNT", 5))

    @property
    def level(self) -> int:
        """Get numeric log level"""
        return getattr(logging, self.log_level.upper(), logging.INFO)


@dataclass
class Config:
    """
    Main configuration container

    Usage:
        from swap_pay.config import Config

        config = Config.from_env()
        print(config.zeroex.proxy_url)
    """
    zeroex: ZeroExConfig = field(default_factory=ZeroExConfig)
    chain: ChainConfig = field(default_factory=ChainConfig)
    confirm: ConfirmConfig = field(default_factory=ConfirmConfig)
    signer: SignerConfig = field(default_factory=SignerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "Config":
        """Load .env (if present) and build configuration from the environment"""
        _load_env_file(env_file)
        return cls()


def setup_logging(
    log_config: Optional[LoggingConfig] = None,
    logger_name: str = "swap_pay",
) -> logging.Logger:
    """
    Set up logging based on configuration.

    Creates handlers for file and/or console output with optional rotation.
    The log file directory is created automatically if it doesn't exist.

    Args:
        log_config: Logging configuration (built from the environment if None)
        logger_name: Name of the logger to configure (default: swap_pay)

    Returns:
        Configured logger instance
    """
    if log_config is None:
        log_config = LoggingConfig()

    root = logging.getLogger(logger_name)
    root.setLevel(log_config.level)

    # Close before removing to flush buffers and release file handles
    for handler in root.handlers[:]:
        handler.close()
        root.removeHandler(handler)

    formatter = logging.Formatter(log_config.log_format)
    handlers: List[logging.Handler] = []

    if log_config.log_file:
        from logging.handlers import RotatingFileHandler

        log_path = Path(log_config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_config.log_file,
            maxBytes=log_config.max_bytes,
            backupCount=log_config.backup_count,
            encoding='utf-8',
        )
        file_handler.setLevel(log_config.level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if log_config.console_output:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_config.level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    for handler in handlers:
        root.addHandler(handler)

    if log_config.log_file:
        root.info(f"Logging initialized: file={log_config.log_file}, level={log_config.log_level}")

    return root
