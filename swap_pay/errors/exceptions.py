"""
Exception definitions for swap_pay
"""

from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCode(Enum):
    """
    Unified error codes for swap-and-pay operations

    1xxx - Chain client errors
    2xxx - Transaction errors
    3xxx - Quote service errors
    6xxx - Signer / account errors
    8xxx - User input errors
    9xxx - Configuration errors
    """
    # Chain client errors
    CHAIN_NOT_CONNECTED = "1001"
    NETWORK_SWITCH_FAILED = "1002"

    # Transaction errors
    TX_REVERTED = "2001"
    NO_OUTPUT_RECEIVED = "2002"

    # Quote service errors
    UPSTREAM_ERROR = "3001"
    INVALID_QUOTE = "3002"

    # Signer / account errors
    UNAUTHENTICATED = "6001"

    # User input errors
    INVALID_INPUT = "8001"

    # Configuration errors
    CONFIG_INVALID = "9001"
    CONFIG_MISSING = "9002"


class SwapPayError(Exception):
    """
    Base exception for all swap_pay errors

    Attributes:
        message: Human-readable error message
        code: Error code for programmatic handling
        recoverable: Whether the error might succeed on retry
        original_error: The underlying exception if any
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        recoverable: bool = False,
        original_error: Optional[Exception] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.recoverable = recoverable
        self.original_error = original_error
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value}, message={self.message!r})"

    @property
    def should_retry(self) -> bool:
        """Indicate if the operation should be retried"""
        return self.recoverable


class ChainConnectionError(SwapPayError):
    """
    No chain client or signing capability available

    Raised when:
    - The context carries no chain reader
    - The context carries no signer
    """

    def __init__(self, message: str, missing: Optional[str] = None):
        super().__init__(
            message,
            ErrorCode.CHAIN_NOT_CONNECTED,
            details={"missing": missing},
        )
        self.missing = missing

    @classmethod
    def no_reader(cls) -> "ChainConnectionError":
        return cls("No chain client available. Check the RPC configuration.", missing="reader")

    @classmethod
    def no_signer(cls) -> "ChainConnectionError":
        return cls("No signing capability available. Connect a wallet to continue.", missing="signer")


class NetworkSwitchError(SwapPayError):
    """Switching the chain client to the required network failed"""

    def __init__(
        self,
        message: str,
        target_chain_id: Optional[int] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(
            message,
            ErrorCode.NETWORK_SWITCH_FAILED,
            recoverable=True,
            original_error=original_error,
            details={"target_chain_id": target_chain_id},
        )
        self.target_chain_id = target_chain_id


class UnauthenticatedError(SwapPayError):
    """The signing capability exposes no connected account"""

    def __init__(self, message: str = "No connected account detected."):
        super().__init__(message, ErrorCode.UNAUTHENTICATED)


class ConfigError(SwapPayError):
    """
    Configuration-related errors

    Raised when:
    - The quote proxy endpoint is malformed
    - A token symbol is not in the registry
    - Required configuration is missing
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.CONFIG_INVALID,
    ):
        super().__init__(message, code, recoverable=False)

    @classmethod
    def missing(cls, param: str) -> "ConfigError":
        return cls(f"Missing required configuration: {param}", ErrorCode.CONFIG_MISSING)

    @classmethod
    def invalid(cls, param: str, reason: str) -> "ConfigError":
        return cls(f"Invalid configuration '{param}': {reason}", ErrorCode.CONFIG_INVALID)


class UpstreamError(SwapPayError):
    """
    Quote service returned a non-success response

    Attributes:
        status_code: HTTP status returned by the service (None if unknown)
        reason: Service-provided reason, if any
        validation_errors: Field-level validation messages ("field reason")
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        reason: Optional[str] = None,
        validation_errors: Optional[List[str]] = None,
        original_error: Optional[Exception] = None,
    ):
        recoverable = status_code is not None and status_code >= 500
        super().__init__(
            message,
            ErrorCode.UPSTREAM_ERROR,
            recoverable=recoverable,
            original_error=original_error,
            details={
                "status_code": status_code,
                "reason": reason,
                "validation_errors": validation_errors or [],
            },
        )
        self.status_code = status_code
        self.reason = reason
        self.validation_errors = validation_errors or []


class InvalidQuoteError(SwapPayError):
    """
    Quote fields cannot be normalized

    Raised when:
    - An address field is neither 42 nor 66 hex characters
    - The target address or call data is missing from every known shape
    - buyAmount does not parse as an unsigned integer
    """

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        super().__init__(
            message,
            ErrorCode.INVALID_QUOTE,
            details={"field": field, "value": value},
        )
        self.field = field
        self.value = value

    @classmethod
    def bad_address(cls, field: str, value: Any) -> "InvalidQuoteError":
        return cls(
            f"Quote field '{field}' is not a valid 20-byte address: {value!r}",
            field=field,
            value=value,
        )

    @classmethod
    def missing_field(cls, field: str) -> "InvalidQuoteError":
        return cls(f"Quote response has no usable '{field}'", field=field)

    @classmethod
    def bad_amount(cls, field: str, value: Any) -> "InvalidQuoteError":
        return cls(
            f"Quote field '{field}' is not an unsigned base-unit integer: {value!r}",
            field=field,
            value=value,
        )


class NoOutputReceivedError(SwapPayError):
    """The buy token never showed up in the account after the swap"""

    def __init__(
        self,
        message: str,
        token: Optional[str] = None,
        account: Optional[str] = None,
        swap_hash: Optional[str] = None,
    ):
        super().__init__(
            message,
            ErrorCode.NO_OUTPUT_RECEIVED,
            details={"token": token, "account": account, "swap_hash": swap_hash},
        )
        self.token = token
        self.account = account
        self.swap_hash = swap_hash

    @classmethod
    def balance_never_arrived(
        cls, token: str, account: str, attempts: int, swap_hash: Optional[str] = None
    ) -> "NoOutputReceivedError":
        return cls(
            f"Buy token {token} was not received after the swap "
            f"({attempts} balance checks). Check tokens, decimals and slippage.",
            token=token,
            account=account,
            swap_hash=swap_hash,
        )

    @classmethod
    def nothing_to_send(
        cls, token: str, account: str, swap_hash: Optional[str] = None
    ) -> "NoOutputReceivedError":
        return cls(
            f"Nothing to forward: computed transfer amount of {token} is zero",
            token=token,
            account=account,
            swap_hash=swap_hash,
        )


class TransactionError(SwapPayError):
    """A submitted transaction was mined but reverted"""

    def __init__(
        self,
        message: str,
        tx_hash: Optional[str] = None,
        stage: Optional[str] = None,
    ):
        super().__init__(
            message,
            ErrorCode.TX_REVERTED,
            details={"tx_hash": tx_hash, "stage": stage},
        )
        self.tx_hash = tx_hash
        self.stage = stage

    @classmethod
    def reverted(cls, tx_hash: str, stage: str) -> "TransactionError":
        return cls(f"{stage} transaction reverted: {tx_hash}", tx_hash=tx_hash, stage=stage)


class ValidationError(SwapPayError):
    """User-supplied input rejected before any network call"""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, ErrorCode.INVALID_INPUT, details={"field": field})
        self.field = field

    def to_dict(self) -> Dict[str, Any]:
        return {"field": self.field, "message": self.message}
