"""
Quote service protocols

Only the 0x aggregator is supported.
"""

from .zeroex import ZeroExAPI

__all__ = [
    "ZeroExAPI",
]
