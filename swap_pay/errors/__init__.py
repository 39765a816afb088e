"""
Error definitions for swap_pay
"""

from .exceptions import (
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

__all__ = [
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
]
