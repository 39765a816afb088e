"""
swap_pay - swap a token through 0x and forward the proceeds

Orchestrates, on an EVM chain (Monad testnet by default):
- Executable quotes from the 0x Swap API (allowance-holder) via a proxy
- ERC-20 allowance for the 0x allowance target
- The swap transaction itself
- Bounded confirmation that the bought tokens arrived
- A transfer of those tokens to a receiver
"""

from .client import SwapPayClient
from .config import Config, setup_logging
from .types import (
    Token,
    Price,
    Quote,
    QuoteRequest,
    AllowanceDecision,
    AutoApprove,
    SwapAndPayParams,
    SwapAndPayResult,
    SwapPayProgress,
    SwapPayState,
    MONAD_TESTNET_CHAIN_ID,
    MONAD_TESTNET_TOKENS,
)
from .errors import (
    ErrorCode,
    SwapPayError,
    ChainConnectionError,
    NetworkSwitchError,
    UnauthenticatedError,
    ConfigError,
    UpstreamError,
    InvalidQuoteError,
    NoOutputReceivedError,
    TransactionError,
    ValidationError,
)
from .modules import (
    SwapAndPayOrchestrator,
    SwapPayContext,
    ensure_allowance,
    confirm_balance,
    swap_and_pay,
)
from .infra import (
    ChainReader,
    ContractWriteCapable,
    RawSubmitOnly,
    LocalSigner,
    create_web3,
)
from .protocols.zeroex import ZeroExAPI

__all__ = [
    # Client
    "SwapPayClient",
    "Config",
    "setup_logging",
    # Types
    "Token",
    "Price",
    "Quote",
    "QuoteRequest",
    "AllowanceDecision",
    "AutoApprove",
    "SwapAndPayParams",
    "SwapAndPayResult",
    "SwapPayProgress",
    "SwapPayState",
    "MONAD_TESTNET_CHAIN_ID",
    "MONAD_TESTNET_TOKENS",
    # Errors
    "ErrorCode",
    "SwapPayError",
    "ChainConnectionError",
    "NetworkSwitchError",
    "UnauthenticatedError",
    "ConfigError",
    "UpstreamError",
    "InvalidQuoteError",
    "NoOutputReceivedError",
    "TransactionError",
    "ValidationError",
    # Orchestration
    "SwapAndPayOrchestrator",
    "SwapPayContext",
    "ensure_allowance",
    "confirm_balance",
    "swap_and_pay",
    # Infrastructure
    "ChainReader",
    "ContractWriteCapable",
    "RawSubmitOnly",
    "LocalSigner",
    "create_web3",
    "ZeroExAPI",
]

__version__ = "0.1.0"
