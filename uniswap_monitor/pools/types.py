"""
Core types for the pool registry and conversion graph.

Domain models used to represent Uniswap V3 pools and the hop sequences that
price a token in reference-token units.
"""

from dataclasses import dataclass
from typing import Dict, Tuple


@dataclass(frozen=True)
class Pool:
    """
    Uniswap V3 pool as announced by the factory's PoolCreated event.

    Attributes:
        address: Pool contract address (lowercase)
        token0: First token address in the pair (lowercase)
        token1: Second token address in the pair (lowercase)
        fee: Fee tier in hundredths of a bip
        tick_spacing: Tick spacing for the fee tier
    """

    address: str
    token0: str
    token1: str
    fee: int
    tick_spacing: int

    def other_token(self, token: str) -> str:
        """The pair token opposite to ``token``."""
        token = token.lower()
        if token == self.token0:
            return self.token1
        if token == self.token1:
            return self.token0
        raise ValueError(f"Token {token} is not traded by pool {self.address}")


@dataclass(frozen=True)
class Hop:
    """
    One pool-mediated conversion step.

    A direct hop uses the pool price (token1 per token0); a reciprocal hop
    uses its inverse (token0 per token1).
    """

    pool_address: str
    reciprocal: bool


# Hops composed front to back give reference-token units per source token unit
ConversionPath = Tuple[Hop, ...]

TokenMapping = Dict[str, ConversionPath]


def invert_path(path: ConversionPath) -> ConversionPath:
    """Path converting reference-token units back into the source token."""
    return tuple(Hop(hop.pool_address, not hop.reciprocal) for hop in reversed(path))
