"""
Backfill coordinator for the pool registry.

Before a transaction is evaluated the registry must contain every pool
created up to the block before it. The coordinator scans PoolCreated logs
on the factory from its cursor up to that block, registers the pools and
rebuilds the token mapping.
"""

import logging
from typing import Any, Dict, List, Optional

from ..chain.abi import find_event, event_topic
from ..chain.base import ChainClient, DecodedLog, RawLog
from ..pools.state import BackfillCursor, PoolState
from ..pools.types import Pool


def pool_entry_from_event(decoded: DecodedLog) -> Dict[str, Any]:
    """Registry entry for a decoded PoolCreated event."""
    args = decoded.args
    return {
        "address": args.get("pool"),
        "token0": args.get("token0"),
        "token1": args.get("token1"),
        "fee": args.get("fee"),
        "tick_spacing": args.get("tickSpacing"),
    }


class BackfillCoordinator:
    """
    Keeps the pool registry caught up with the factory.

    The cursor starts stale at the chain height seen by initialize(). Every
    call to ensure_fresh() scans whatever blocks were produced since the last
    scan, so the registry never falls behind for long-running processes.
    """

    def __init__(
        self,
        chain_client: ChainClient,
        state: PoolState,
        factory_address: str,
        factory_abi: List[Dict[str, Any]],
        blocks_per_request: int = 10000,
    ):
        """
        Initialize the coordinator.

        Args:
            chain_client: Chain client used for log queries
            state: Pool state to keep fresh
            factory_address: Uniswap V3 factory address
            factory_abi: Uniswap V3 factory ABI
            blocks_per_request: Maximum block range of one log query
        """
        if blocks_per_request <= 0:
            raise ValueError("blocks_per_request must be positive")
        self.chain_client = chain_client
        self.state = state
        self.factory_address = factory_address.lower()
        self.pool_created_abi = find_event(factory_abi, "PoolCreated")
        self.pool_created_topic = event_topic(self.pool_created_abi)
        self.blocks_per_request = blocks_per_request
        self.logger = logging.getLogger(f"{self.__class__.__module__}.{self.__class__.__name__}")

    @property
    def cursor(self) -> BackfillCursor:
        return self.state.cursor

    @property
    def is_fresh(self) -> bool:
        return self.state.cursor.fresh

    async def initialize(self, start_block: Optional[int] = None):
        """
        Reset the cursor and mark the registry stale.

        Args:
            start_block: Last block considered scanned, the chain head by default
        """
        if start_block is None:
            start_block = await self.chain_client.get_block_number()
        self.state.cursor = BackfillCursor(last_scanned_block=start_block, fresh=False)
        self.logger.info(f"Backfill cursor initialised at block {start_block}")

    async def _fetch_logs(self, from_block: int, to_block: int) -> List[RawLog]:
        """Fetch PoolCreated logs in chunks of blocks_per_request blocks."""
        logs = []
        for chunk_start in range(from_block, to_block + 1, self.blocks_per_request):
            chunk_end = min(chunk_start + self.blocks_per_request - 1, to_block)
            chunk = await self.chain_client.get_logs(
                self.factory_address, self.pool_created_topic, chunk_start, chunk_end
            )
            self.logger.debug(f"Blocks {chunk_start}-{chunk_end}: {len(chunk)} PoolCreated logs")
            logs.extend(chunk)
        return logs

    def _decode_entries(self, logs: List[RawLog]) -> List[Dict[str, Any]]:
        entries = []
        for raw_log in logs:
            try:
                decoded = self.chain_client.decode_log(raw_log, self.pool_created_abi)
            except ValueError as e:
                self.logger.warning(f"Skipping undecodable PoolCreated log in tx {raw_log.transaction_hash}: {e}")
                continue
            entries.append(pool_entry_from_event(decoded))
        return entries

    async def ensure_fresh(self, current_block: int) -> List[Pool]:
        """
        Bring the registry up to the block before ``current_block``.

        Args:
            current_block: Block of the event about to be evaluated

        Returns:
            Pools added by this scan

        Raises:
            ChainClientError: If the scan fails; cursor and state are left untouched
        """
        cursor = self.state.cursor
        target = current_block - 1

        if target <= cursor.last_scanned_block:
            if not cursor.fresh:
                self.state.rebuild_mapping()
                cursor.fresh = True
            return []

        from_block = cursor.last_scanned_block + 1
        self.logger.info(f"Scanning PoolCreated events in blocks {from_block}-{target}")

        # All chunks are fetched before the registry is touched
        logs = await self._fetch_logs(from_block, target)

        added = self.state.registry.register_many(self._decode_entries(logs))
        if added or not cursor.fresh:
            self.state.rebuild_mapping()

        cursor.last_scanned_block = target
        cursor.fresh = True
        self.logger.info(
            f"Backfill to block {target} complete: {len(added)} new pools, "
            f"{len(self.state.registry)} total"
        )
        return added
