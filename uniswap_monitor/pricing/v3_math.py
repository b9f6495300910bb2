"""
Uniswap V3 price math.

Key concepts:
- sqrtPriceX96: Square root of price in Q96 fixed-point format (96 bits of precision)
- Price: token1 per token0 in base units, price = sqrtPriceX96^2 / 2^192

All conversions use Decimal under PRICE_CONTEXT. sqrtPriceX96 fits in 160
bits, so its square has at most 97 significant digits and the 78 digit
context keeps multi-hop products well inside uint256 precision.
"""

from decimal import Context, Decimal, ROUND_HALF_EVEN, localcontext

# Q96 constants
Q96 = 2**96
Q192 = 2**192

# Bounds of a valid sqrtPriceX96 (TickMath.MIN_SQRT_RATIO / MAX_SQRT_RATIO)
MIN_SQRT_RATIO = 4295128739
MAX_SQRT_RATIO = 1461446703485210103287273052203988822378723970342

PRICE_CONTEXT = Context(prec=78, rounding=ROUND_HALF_EVEN)


def price_from_sqrt_price_x96(sqrt_price_x96: int, reciprocal: bool = False) -> Decimal:
    """
    Convert sqrtPriceX96 into a price ratio.

    Args:
        sqrt_price_x96: Pool sqrt price in Q96 format
        reciprocal: Return token0 per token1 instead of token1 per token0

    Returns:
        Price ratio in base units

    Raises:
        ValueError: If the sqrt price is not positive
    """
    if sqrt_price_x96 <= 0:
        raise ValueError(f"sqrtPriceX96 must be positive, got {sqrt_price_x96}")

    with localcontext(PRICE_CONTEXT):
        numerator = Decimal(sqrt_price_x96 * sqrt_price_x96)
        denominator = Decimal(Q192)
        if reciprocal:
            return denominator / numerator
        return numerator / denominator


def multiply(*values: Decimal) -> Decimal:
    """Product of ratios under the price context; empty product is 1."""
    with localcontext(PRICE_CONTEXT):
        result = Decimal(1)
        for value in values:
            result = result * value
        return result


def add(*values: Decimal) -> Decimal:
    """Sum of values under the price context."""
    with localcontext(PRICE_CONTEXT):
        result = Decimal(0)
        for value in values:
            result = result + value
        return result
