"""
Conversion graph builder.

Every pool is an edge between its two tokens. Starting from the reference
token, paths are propagated across pools until a fixed point, so each token
reachable from the reference token gets a hop sequence that prices it in
reference-token units.
"""

import logging
from typing import Iterable, Optional, Union

from .registry import PoolRegistry
from .types import ConversionPath, Hop, Pool, TokenMapping

logger = logging.getLogger(__name__)


def build_token_mapping(
    registry: Union[PoolRegistry, Iterable[Pool]],
    reference_token: str,
) -> TokenMapping:
    """
    Compute the conversion path of every token reachable from the reference token.

    Pools are scanned in ascending address order, pass after pass. In a pass,
    a pool with exactly one priced token prices the other one immediately, so
    later pools in the same pass can build on it. The first pool to reach a
    token wins. Passes stop once one prices nothing new.

    Args:
        registry: Pool registry (or any iterable of pools)
        reference_token: Token all paths convert into

    Returns:
        Token address -> conversion path; the reference token maps to ()
    """
    pools = registry.all_pools() if isinstance(registry, PoolRegistry) else list(registry)
    reference = reference_token.lower()

    mapping: TokenMapping = {reference: ()}
    pending = sorted(pools, key=lambda pool: pool.address)
    passes = 0

    while pending:
        passes += 1
        unresolved = []
        progressed = False

        for pool in pending:
            known0 = pool.token0 in mapping
            known1 = pool.token1 in mapping

            if known0 and known1:
                continue

            if known0:
                # token0 per token1 is the inverse of the pool price
                mapping[pool.token1] = (Hop(pool.address, reciprocal=True),) + mapping[pool.token0]
                progressed = True
            elif known1:
                mapping[pool.token0] = (Hop(pool.address, reciprocal=False),) + mapping[pool.token1]
                progressed = True
            else:
                unresolved.append(pool)

        if not progressed:
            break
        pending = unresolved

    logger.debug(
        f"Token mapping: {len(mapping)} tokens priced from {len(pools)} pools "
        f"in {passes} passes, {len(pending)} pools unreachable"
    )
    return mapping


class ConversionGraphBuilder:
    """Rebuilds and holds the token mapping for one reference token."""

    def __init__(self, reference_token: str):
        self.reference_token = reference_token.lower()
        self.logger = logging.getLogger(f"{self.__class__.__module__}.{self.__class__.__name__}")
        self._mapping: TokenMapping = {self.reference_token: ()}

    @property
    def mapping(self) -> TokenMapping:
        """Most recently built token mapping."""
        return self._mapping

    def rebuild(self, registry: PoolRegistry) -> TokenMapping:
        """Recompute the mapping from the full registry contents."""
        previous = len(self._mapping)
        self._mapping = build_token_mapping(registry, self.reference_token)
        self.logger.info(
            f"Rebuilt token mapping: {len(self._mapping)} tokens "
            f"({len(self._mapping) - previous:+d}) across {len(registry)} pools"
        )
        return self._mapping

    def path_for(self, token: str) -> Optional[ConversionPath]:
        """Conversion path of a token, or None when it cannot be priced yet."""
        return self._mapping.get(token.lower())
