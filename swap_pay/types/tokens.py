"""
Token Registry for Monad testnet

Provides token address mappings and decimals for the tokens the swap
flow trades. The native MON symbol resolves to its wrapped ERC-20 (WMON)
because the quote service only deals in ERC-20 addresses.
"""

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, localcontext
from typing import Dict, Optional, Union

from ..errors import ConfigError, ValidationError


MONAD_TESTNET_CHAIN_ID = 10143

# Native token placeholder address (UI only, never sent to the quote service)
NATIVE_TOKEN_ADDRESS = "0x0000000000000000000000000000000000000000"

NATIVE_SYMBOL = "MON"
WRAPPED_NATIVE_SYMBOL = "WMON"

_HEX_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


@dataclass(frozen=True)
class Token:
    """
    Token information

    Attributes:
        symbol: Token symbol (e.g., "WMON", "USDC")
        address: ERC-20 contract address (0x-prefixed, 20 bytes)
        decimals: Number of decimal places
        name: Full token name (optional)
    """
    symbol: str
    address: str
    decimals: int
    name: str = ""

    def __str__(self) -> str:
        return self.symbol

    def __repr__(self) -> str:
        return f"Token({self.symbol}, {self.address[:10]}...)"

    @property
    def is_native(self) -> bool:
        return self.address == NATIVE_TOKEN_ADDRESS

    def ui_amount(self, raw_amount: int) -> Decimal:
        """
        Convert raw amount to UI amount with full precision

        Args:
            raw_amount: Raw token amount (base units)

        Returns:
            UI amount as Decimal
        """
        value = Decimal(raw_amount)
        with localcontext() as ctx:
            ctx.prec = max(ctx.prec, len(value.as_tuple().digits) + 1)
            return value.scaleb(-self.decimals)

    def raw_amount(self, ui_amount: Union[Decimal, int, str]) -> int:
        """
        Convert a human-entered amount to base units

        The conversion is exact: amounts with more fractional digits than
        the token supports are rejected instead of being rounded.

        Args:
            ui_amount: UI amount (Decimal, int or decimal string)

        Returns:
            Raw token amount (base units)

        Raises:
            ValidationError: If the amount is not a non-negative number
                representable in this token's decimals
        """
        try:
            value = ui_amount if isinstance(ui_amount, Decimal) else Decimal(str(ui_amount).strip())
        except InvalidOperation:
            raise ValidationError(f"Invalid amount: {ui_amount!r}", field="amount")

        if not value.is_finite() or value < 0:
            raise ValidationError(f"Invalid amount: {ui_amount!r}", field="amount")

        # Default context keeps 28 significant digits; widen it so scaling never rounds
        with localcontext() as ctx:
            ctx.prec = len(value.as_tuple().digits) + self.decimals + 1
            scaled = value.scaleb(self.decimals)
            fractional = scaled != scaled.to_integral_value()
        if fractional:
            raise ValidationError(
                f"Amount {ui_amount} has more than {self.decimals} decimal places for {self.symbol}",
                field="amount",
            )
        return int(scaled)


# =============================================================================
# Monad Testnet Tokens (Chain ID: 10143)
# =============================================================================

MONAD_TESTNET_TOKENS: Dict[str, Token] = {
    "MON": Token("MON", NATIVE_TOKEN_ADDRESS, 18, "Monad Native Token"),
    "WMON": Token("WMON", "0x760AfE86e5de5fa0Ee542fc7B7B713e1c5425701", 18, "Wrapped MON"),
    "USDC": Token("USDC", "0xf817257fed379853cDe0fa4F97AB987181B1E5Ea", 6, "USD Coin"),
    "USDT": Token("USDT", "0x88b8E2161DEDC77EF4ab7585569D2415a1C1055D", 6, "Tether USD"),
    "WETH": Token("WETH", "0xB5a30b0FDc5EA94A52fDc42e3E9760Cb8449Fb37", 18, "Wrapped Ether"),
}


def is_hex_address(value: object) -> bool:
    """Check for a syntactically valid 0x-prefixed 20-byte hex address (any case)"""
    return isinstance(value, str) and bool(_HEX_ADDRESS_RE.match(value))


def get_token(symbol: str) -> Optional[Token]:
    """
    Get token by symbol

    Args:
        symbol: Token symbol (case-insensitive)

    Returns:
        Token or None if not found
    """
    return MONAD_TESTNET_TOKENS.get(symbol.upper())


def resolve_token(symbol: str) -> Token:
    """
    Resolve a symbol to the ERC-20 token the quote service should see

    MON (native) resolves to WMON.

    Raises:
        ConfigError: If the symbol is not in the registry
    """
    key = symbol.upper()
    if key == NATIVE_SYMBOL:
        key = WRAPPED_NATIVE_SYMBOL

    token = MONAD_TESTNET_TOKENS.get(key)
    if token is None:
        raise ConfigError.invalid(
            "token",
            f"Unknown token: {symbol}. Supported: {', '.join(MONAD_TESTNET_TOKENS)}",
        )
    return token


def resolve_token_address(symbol_or_address: str) -> str:
    """
    Resolve token symbol to address

    Args:
        symbol_or_address: Token symbol or address

    Returns:
        Token address (addresses pass through unchanged)
    """
    if is_hex_address(symbol_or_address):
        return symbol_or_address
    return resolve_token(symbol_or_address).address


def resolve_token_decimals(symbol: str) -> int:
    """Decimals to use for sellAmount base units (MON uses WMON's 18)"""
    return resolve_token(symbol).decimals
