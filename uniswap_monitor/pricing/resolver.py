"""
Live price resolution along conversion paths.

Each hop reads slot0() of its pool; hop ratios are multiplied front to back
to get reference-token units per unit of the source token.
"""

import asyncio
import logging
from decimal import Decimal
from typing import Any, Dict, List

from ..chain.base import ChainClient
from ..chain.abi import find_function
from ..chain.errors import CallReverted, ChainClientError, MonitorError
from ..pools.types import ConversionPath, Hop
from .v3_math import MAX_SQRT_RATIO, MIN_SQRT_RATIO, multiply, price_from_sqrt_price_x96


class PriceUnavailable(MonitorError):
    """Raised when a hop of a conversion path cannot be priced."""

    def __init__(self, message: str, pool_address: str = None):
        super().__init__(message)
        self.pool_address = pool_address


class PriceResolver:
    """
    Resolve conversion paths into Decimal ratios using live pool prices.

    Example:
        resolver = PriceResolver(client, load_abi("UniswapV3Pool"))
        value = await resolver.convert(amount, token_mapping[token])
    """

    def __init__(self, chain_client: ChainClient, pool_abi: List[Dict[str, Any]]):
        """
        Initialize the resolver.

        Args:
            chain_client: Chain client used for slot0() calls
            pool_abi: Uniswap V3 pool ABI
        """
        self.chain_client = chain_client
        self.slot0_abi = find_function(pool_abi, "slot0")
        self.logger = logging.getLogger(f"{self.__class__.__module__}.{self.__class__.__name__}")

    async def hop_ratio(self, hop: Hop) -> Decimal:
        """
        Current ratio of a single hop.

        Raises:
            PriceUnavailable: If the pool call fails or the pool is uninitialised
        """
        try:
            slot0 = await self.chain_client.call(hop.pool_address, self.slot0_abi)
        except CallReverted as e:
            raise PriceUnavailable(f"slot0() reverted on {hop.pool_address}: {e}", hop.pool_address) from e
        except ChainClientError as e:
            raise PriceUnavailable(f"slot0() failed on {hop.pool_address}: {e}", hop.pool_address) from e

        sqrt_price_x96 = slot0[0] if isinstance(slot0, (tuple, list)) else slot0
        if not MIN_SQRT_RATIO <= sqrt_price_x96 <= MAX_SQRT_RATIO:
            # Zero until initialize() is called on the pool
            raise PriceUnavailable(
                f"Pool {hop.pool_address} has no usable price (sqrtPriceX96={sqrt_price_x96})",
                hop.pool_address,
            )
        return price_from_sqrt_price_x96(sqrt_price_x96, reciprocal=hop.reciprocal)

    async def resolve(self, path: ConversionPath) -> Decimal:
        """
        Reference-token units per unit of the path's source token.

        All hops are queried concurrently.

        Raises:
            PriceUnavailable: If any hop cannot be priced
        """
        if not path:
            return Decimal(1)
        ratios = await asyncio.gather(*(self.hop_ratio(hop) for hop in path), return_exceptions=True)
        errors = [ratio for ratio in ratios if isinstance(ratio, BaseException)]
        if errors:
            if len(errors) > 1:
                self.logger.debug(f"{len(errors)} of {len(path)} hops could not be priced")
            raise errors[0]
        return multiply(*ratios)

    async def convert(self, amount: int, path: ConversionPath) -> Decimal:
        """Value of ``amount`` source-token base units in reference-token base units."""
        ratio = await self.resolve(path)
        return multiply(Decimal(amount), ratio)
