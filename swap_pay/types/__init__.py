"""
Type definitions for swap_pay
"""

from .tokens import (
    Token,
    MONAD_TESTNET_CHAIN_ID,
    MONAD_TESTNET_TOKENS,
    NATIVE_TOKEN_ADDRESS,
    get_token,
    is_hex_address,
    resolve_token,
    resolve_token_address,
    resolve_token_decimals,
)
from .quote import (
    DEFAULT_SLIPPAGE_BPS,
    Price,
    Quote,
    QuoteRequest,
    normalize_address,
    parse_base_units,
)
from .result import (
    AllowanceDecision,
    AutoApprove,
    SwapAndPayParams,
    SwapAndPayResult,
    SwapPayProgress,
    SwapPayState,
)

__all__ = [
    # Tokens
    "Token",
    "MONAD_TESTNET_CHAIN_ID",
    "MONAD_TESTNET_TOKENS",
    "NATIVE_TOKEN_ADDRESS",
    "get_token",
    "is_hex_address",
    "resolve_token",
    "resolve_token_address",
    "resolve_token_decimals",
    # Quotes
    "DEFAULT_SLIPPAGE_BPS",
    "Price",
    "Quote",
    "QuoteRequest",
    "normalize_address",
    "parse_base_units",
    # Results
    "AllowanceDecision",
    "AutoApprove",
    "SwapAndPayParams",
    "SwapAndPayResult",
    "SwapPayProgress",
    "SwapPayState",
]
