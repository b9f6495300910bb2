"""
Price math and live conversion of token amounts into reference-token units.
"""

from .v3_math import (
    PRICE_CONTEXT,
    Q96,
    Q192,
    price_from_sqrt_price_x96,
)
from .resolver import PriceResolver, PriceUnavailable

__all__ = [
    "PRICE_CONTEXT",
    "PriceResolver",
    "PriceUnavailable",
    "Q96",
    "Q192",
    "price_from_sqrt_price_x96",
]
