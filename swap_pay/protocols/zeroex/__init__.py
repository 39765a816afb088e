"""
0x Swap API (v2, allowance-holder) client

Quotes and price previews through a forwarding proxy that injects the
0x credentials.

Usage:
    from swap_pay.protocols.zeroex import ZeroExAPI
    from swap_pay.types import QuoteRequest

    api = ZeroExAPI("https://proxy.example/quote")
    quote = await api.get_quote(QuoteRequest(sell_token, buy_token, 10**16, taker))
"""

from .api import ZeroExAPI
from .shapes import SHAPE_ADAPTERS, ShapeAdapter, normalize_price, normalize_quote

__all__ = [
    "ZeroExAPI",
    "SHAPE_ADAPTERS",
    "ShapeAdapter",
    "normalize_price",
    "normalize_quote",
]
