"""
In-memory registry of known Uniswap V3 pools.

Pools are immutable once created on chain, so registration is an idempotent
insert and there is no removal.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from eth_utils import is_hex_address

from ..chain.errors import MonitorError
from .types import Pool

logger = logging.getLogger(__name__)


class DataError(MonitorError):
    """Raised when pool attributes are malformed."""
    pass


class PoolRegistry:
    """Pool address -> Pool lookup for every pool discovered so far."""

    def __init__(self):
        self._pools: Dict[str, Pool] = {}

    @staticmethod
    def _validate(pool_address: str, token0: str, token1: str, fee: Any, tick_spacing: Any) -> Pool:
        for label, address in (("pool", pool_address), ("token0", token0), ("token1", token1)):
            if not isinstance(address, str) or not is_hex_address(address):
                raise DataError(f"Malformed {label} address: {address!r}")

        token0 = token0.lower()
        token1 = token1.lower()
        if token0 == token1:
            raise DataError(f"Pool {pool_address} has identical tokens {token0}")

        try:
            fee = int(fee)
            tick_spacing = int(tick_spacing)
        except (TypeError, ValueError):
            raise DataError(f"Pool {pool_address} has non-integer fee or tick spacing")
        if fee < 0:
            raise DataError(f"Pool {pool_address} has negative fee {fee}")
        if tick_spacing == 0:
            raise DataError(f"Pool {pool_address} has zero tick spacing")

        return Pool(
            address=pool_address.lower(),
            token0=token0,
            token1=token1,
            fee=fee,
            tick_spacing=tick_spacing,
        )

    def register(self, pool_address: str, token0: str, token1: str, fee: int, tick_spacing: int) -> bool:
        """
        Register a pool.

        Args:
            pool_address: Pool contract address
            token0: First token of the pair
            token1: Second token of the pair
            fee: Fee tier
            tick_spacing: Tick spacing

        Returns:
            True if the pool was added, False if it was already registered

        Raises:
            DataError: If the attributes are malformed
        """
        pool = self._validate(pool_address, token0, token1, fee, tick_spacing)
        if pool.address in self._pools:
            return False
        self._pools[pool.address] = pool
        logger.debug(f"Registered pool {pool.address} ({pool.token0}/{pool.token1}, fee {pool.fee})")
        return True

    def register_many(self, pools: Iterable[Dict[str, Any]]) -> List[Pool]:
        """
        Register a batch of pools, skipping malformed entries.

        Args:
            pools: Dicts with address, token0, token1, fee and tick_spacing keys

        Returns:
            Pools that were newly added
        """
        added = []
        for entry in pools:
            try:
                if self.register(
                    entry.get("address"),
                    entry.get("token0"),
                    entry.get("token1"),
                    entry.get("fee"),
                    entry.get("tick_spacing"),
                ):
                    added.append(self._pools[entry["address"].lower()])
            except DataError as e:
                logger.warning(f"Skipping pool: {e}")
        return added

    def lookup(self, pool_address: str) -> Optional[Pool]:
        """Get a registered pool by address."""
        if not isinstance(pool_address, str):
            return None
        return self._pools.get(pool_address.lower())

    def all_pools(self) -> List[Pool]:
        """All registered pools."""
        return list(self._pools.values())

    def __len__(self) -> int:
        return len(self._pools)

    def __contains__(self, pool_address: object) -> bool:
        return isinstance(pool_address, str) and pool_address.lower() in self._pools
