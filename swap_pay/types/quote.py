"""
Quote and price type definitions
"""

import re
from dataclasses import dataclass
from typing import Any, Optional, Union

from ..errors import InvalidQuoteError
from .tokens import MONAD_TESTNET_CHAIN_ID, is_hex_address


DEFAULT_SLIPPAGE_BPS = 100

_PADDED_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{64}$")
_UINT_RE = re.compile(r"^[0-9]+$")


def parse_base_units(value: Any, field: str = "amount") -> int:
    """
    Parse a base-unit decimal string into an unsigned integer

    Python ints are arbitrary precision, so every valid string parses
    losslessly.

    Raises:
        InvalidQuoteError: If the value is not a string of decimal digits
            (or a non-negative int)
    """
    if isinstance(value, bool):
        raise InvalidQuoteError.bad_amount(field, value)
    if isinstance(value, int):
        if value < 0:
            raise InvalidQuoteError.bad_amount(field, value)
        return value
    if isinstance(value, str) and _UINT_RE.match(value):
        return int(value)
    raise InvalidQuoteError.bad_amount(field, value)


def normalize_address(value: Any, field: str) -> str:
    """
    Normalize an address field from the quote service

    - 42-character 0x hex passes through unchanged
    - 66-character 0x hex (32-byte, left-padded) reduces to its last 40 hex chars

    Raises:
        InvalidQuoteError: For any other shape, naming the field
    """
    if isinstance(value, str):
        if is_hex_address(value):
            return value
        if _PADDED_ADDRESS_RE.match(value):
            return "0x" + value[-40:]
    raise InvalidQuoteError.bad_address(field, value)


@dataclass(frozen=True)
class QuoteRequest:
    """
    Parameters shared by price and quote requests

    Attributes:
        sell_token: Address of the token being sold
        buy_token: Address of the token being bought
        sell_amount: Amount to sell in base units
        taker: Account paying for the swap (also the settlement recipient)
        slippage_bps: Max tolerated slippage in basis points (100 = 1%)
        chain_id: Chain to quote on
    """
    sell_token: str
    buy_token: str
    sell_amount: Union[int, str]
    taker: str
    slippage_bps: int = DEFAULT_SLIPPAGE_BPS
    chain_id: int = MONAD_TESTNET_CHAIN_ID

    def to_params(self) -> dict:
        """Query parameters for the quote/price endpoints"""
        return {
            "sellToken": self.sell_token,
            "buyToken": self.buy_token,
            "sellAmount": str(self.sell_amount),
            "taker": self.taker,
            "recipient": self.taker,
            "slippageBps": self.slippage_bps,
            "chainId": self.chain_id,
        }


@dataclass(frozen=True)
class Price:
    """
    Indicative price preview (never used to submit a transaction)

    Attributes:
        price: Quoted price as returned by the service
        buy_amount: Expected output in base units (decimal string)
        sell_amount: Input in base units (decimal string)
        value: Native value, if the service reports one
    """
    price: str
    buy_amount: str
    sell_amount: str
    value: Optional[str] = None

    @property
    def buy_amount_raw(self) -> int:
        return parse_base_units(self.buy_amount, "buyAmount")


@dataclass(frozen=True)
class Quote:
    """
    Executable swap quote

    Attributes:
        to: Settlement contract to call
        data: Hex-encoded call payload
        buy_amount: Expected output in base units (decimal string)
        value: Native amount to attach (None means zero)
        allowance_target: Spender needing allowance on the sell token
        sell_amount: Input in base units, if reported
        shape: Name of the response shape the target/data came from
    """
    to: str
    data: str
    buy_amount: str
    value: Optional[int] = None
    allowance_target: Optional[str] = None
    sell_amount: Optional[str] = None
    shape: str = "flat"

    @property
    def buy_amount_raw(self) -> int:
        return parse_base_units(self.buy_amount, "buyAmount")

    def __str__(self) -> str:
        return f"Quote(to={self.to}, buy_amount={self.buy_amount}, shape={self.shape})"
