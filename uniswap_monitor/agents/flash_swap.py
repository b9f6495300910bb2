"""
Large flash swap monitoring.

Flash swaps on registered Uniswap V3 pools are valued in reference-token
(USDC) base units through the token conversion graph, and a finding is
raised when the borrowed value exceeds the configured threshold. Pools
created by the factory are announced as they are discovered.
"""

import asyncio
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional, Sequence, Union
import logging

from ..chain.abi import event_topic, find_event, load_abi
from ..chain.base import ChainClient, DecodedLog, TransactionEvent
from ..config import ConfigManager
from ..pools.registry import DataError, PoolRegistry
from ..pools.state import PoolState
from ..pools.types import Pool, TokenMapping
from ..pricing.resolver import PriceResolver, PriceUnavailable
from ..pricing.v3_math import add
from .backfill import BackfillCoordinator, pool_entry_from_event
from .base import BaseAgent, Finding, FindingSeverity, FindingType

logger = logging.getLogger(__name__)

PROTOCOL = "UniswapV3"
LARGE_FLASH_SWAP_ALERT_ID = "AE-UNISWAPV3-LARGE-FLASH-SWAP"
NEW_POOL_ALERT_ID = "AE-UNISWAPV3-NEW-POOL"


@dataclass(frozen=True)
class FlashSwapEvent:
    """
    A Flash event emitted by a pool.

    Attributes:
        pool_address: Pool that lent the tokens
        sender: Address that initiated the flash
        recipient: Address that received the tokens
        amount0: token0 borrowed (positive amounts are outgoing legs)
        amount1: token1 borrowed
        paid0: token0 fee paid back
        paid1: token1 fee paid back
    """

    pool_address: str
    sender: str
    recipient: str
    amount0: int
    amount1: int
    paid0: int = 0
    paid1: int = 0

    @classmethod
    def from_decoded(cls, decoded: DecodedLog) -> "FlashSwapEvent":
        args = decoded.args
        return cls(
            pool_address=decoded.address.lower(),
            sender=args["sender"],
            recipient=args["recipient"],
            amount0=args["amount0"],
            amount1=args["amount1"],
            paid0=args.get("paid0", 0),
            paid1=args.get("paid1", 0),
        )


def create_large_flash_swap_finding(
    event: FlashSwapEvent,
    token0_value: Decimal,
    token1_value: Decimal,
    threshold: Decimal,
    everest_id: Optional[str] = None,
) -> Finding:
    return Finding(
        name="Uniswap V3 Large Flash Swap",
        description=f"Large Flash Swap from pool {event.pool_address}",
        alert_id=LARGE_FLASH_SWAP_ALERT_ID,
        severity=FindingSeverity.INFO,
        finding_type=FindingType.INFO,
        protocol=PROTOCOL,
        everest_id=everest_id,
        metadata={
            "address": event.pool_address,
            "sender": event.sender,
            "token0Amount": event.amount0,
            "token1Amount": event.amount1,
            "token0EquivalentUSDC": token0_value,
            "token1EquivalentUSDC": token1_value,
            "flashSwapThresholdUSDC": threshold,
        },
    )


def create_new_pool_finding(pool: Pool, everest_id: Optional[str] = None) -> Finding:
    return Finding(
        name="Uniswap V3 New Pool Created",
        description=f"New Pool created at {pool.address} for tokens: {pool.token0} - {pool.token1}",
        alert_id=NEW_POOL_ALERT_ID,
        severity=FindingSeverity.INFO,
        finding_type=FindingType.INFO,
        protocol=PROTOCOL,
        everest_id=everest_id,
        metadata={
            "address": pool.address,
            "token0": pool.token0,
            "token1": pool.token1,
            "fee": pool.fee,
            "tickSpacing": pool.tick_spacing,
        },
    )


class FlashSwapEvaluator:
    """
    Values flash swaps and decides which exceed the threshold.

    Legs whose token cannot be priced contribute zero instead of failing the
    evaluation, so one bad pool never hides findings on other swaps.
    """

    def __init__(self, resolver: PriceResolver, everest_id: Optional[str] = None):
        self.resolver = resolver
        self.everest_id = everest_id
        self.logger = logging.getLogger(f"{self.__class__.__module__}.{self.__class__.__name__}")

    async def leg_value(self, token: str, amount: int, token_mapping: TokenMapping) -> Decimal:
        """Reference-token value of one outgoing leg, zero when it cannot be priced."""
        if amount <= 0:
            return Decimal(0)

        path = token_mapping.get(token)
        if path is None:
            self.logger.debug(f"No conversion path for token {token}")
            return Decimal(0)

        try:
            return await self.resolver.convert(amount, path)
        except PriceUnavailable as e:
            self.logger.warning(f"Valuing {amount} of {token} as zero: {e}")
            return Decimal(0)

    async def _evaluate_event(
        self,
        event: FlashSwapEvent,
        registry: PoolRegistry,
        token_mapping: TokenMapping,
        threshold: Decimal,
    ) -> Optional[Finding]:
        pool = registry.lookup(event.pool_address)
        if pool is None:
            return None

        token0_value, token1_value = await asyncio.gather(
            self.leg_value(pool.token0, event.amount0, token_mapping),
            self.leg_value(pool.token1, event.amount1, token_mapping),
        )
        total = add(token0_value, token1_value)
        self.logger.debug(f"Flash on {pool.address} valued at {total} (threshold {threshold})")

        if total > threshold:
            return create_large_flash_swap_finding(
                event, token0_value, token1_value, threshold, self.everest_id
            )
        return None

    async def evaluate(
        self,
        events: Sequence[FlashSwapEvent],
        registry: PoolRegistry,
        token_mapping: TokenMapping,
        threshold: Union[Decimal, int],
    ) -> List[Finding]:
        """
        Evaluate the flash swaps of one transaction.

        Args:
            events: Flash swaps in log order
            registry: Known pools; swaps on other pools are ignored
            token_mapping: Conversion paths by token
            threshold: Value in reference-token base units that must be exceeded

        Returns:
            Findings in event order
        """
        threshold = Decimal(threshold)
        results = await asyncio.gather(*(
            self._evaluate_event(event, registry, token_mapping, threshold)
            for event in events
        ))
        return [finding for finding in results if finding is not None]


class LargeFlashSwapAgent(BaseAgent):
    """
    Alerts on flash swaps whose borrowed value exceeds a threshold.

    Each transaction is handled in three steps: the pool registry is caught
    up to the previous block, pools created by the transaction itself are
    registered and announced, then Flash events are evaluated.
    """

    name = "large-flash-swap"

    def __init__(
        self,
        chain_client: ChainClient,
        config: Optional[ConfigManager] = None,
        chain: str = "ethereum",
        state: Optional[PoolState] = None,
        threshold: Optional[Union[Decimal, int]] = None,
        factory_address: Optional[str] = None,
    ):
        """
        Initialize the agent.

        Args:
            chain_client: Chain client used for logs and pool prices
            config: Configuration manager, the global one by default
            chain: Chain whose factory and reference token are used
            state: Pool state to use, a new empty one by default
            threshold: Override of FLASH_SWAP_THRESHOLD_USDC
            factory_address: Override of the configured factory address
        """
        super().__init__(chain_client, config)
        monitor_config = self.config.get_monitor_config(chain)

        self.factory_address = (factory_address or monitor_config["factory_address"]).lower()
        self.threshold = (
            Decimal(threshold) if threshold is not None else monitor_config["flash_swap_threshold"]
        )
        self.everest_id = self.config.agents.EVEREST_ID
        self.state = state or PoolState(monitor_config["reference_token"])

        factory_abi = load_abi("UniswapV3Factory")
        pool_abi = load_abi("UniswapV3Pool")
        self.pool_created_abi = find_event(factory_abi, "PoolCreated")
        self.pool_created_topic = event_topic(self.pool_created_abi)
        self.flash_abi = find_event(pool_abi, "Flash")
        self.flash_topic = event_topic(self.flash_abi)

        self.resolver = PriceResolver(chain_client, pool_abi)
        self.evaluator = FlashSwapEvaluator(self.resolver, self.everest_id)
        self.backfill = BackfillCoordinator(
            chain_client,
            self.state,
            self.factory_address,
            factory_abi,
            blocks_per_request=monitor_config["blocks_per_request"],
        )

    async def initialize(self, start_block: Optional[int] = None):
        """
        Reset the backfill cursor.

        Args:
            start_block: Last block considered scanned, the chain head by default
        """
        await self.backfill.initialize(start_block)
        await super().initialize()
        self.logger.info(
            f"Watching flash swaps above {self.threshold} reference units "
            f"(reference token {self.state.reference_token})"
        )

    def _register_created_pools(self, tx_event: TransactionEvent) -> List[Finding]:
        findings = []
        added = False
        for raw_log in tx_event.filter_logs(self.pool_created_topic, self.factory_address):
            try:
                decoded = self.chain_client.decode_log(raw_log, self.pool_created_abi)
                entry = pool_entry_from_event(decoded)
                if not self.state.registry.register(
                    entry["address"],
                    entry["token0"],
                    entry["token1"],
                    entry["fee"],
                    entry["tick_spacing"],
                ):
                    continue
            except (ValueError, DataError) as e:
                self.logger.warning(f"Skipping PoolCreated log in tx {tx_event.hash}: {e}")
                continue

            added = True
            pool = self.state.registry.lookup(entry["address"])
            findings.append(create_new_pool_finding(pool, self.everest_id))

        if added:
            self.state.rebuild_mapping()
        return findings

    def _decode_flash_events(self, tx_event: TransactionEvent) -> List[FlashSwapEvent]:
        events = []
        for raw_log in tx_event.filter_logs(self.flash_topic):
            if raw_log.address not in self.state.registry:
                continue
            try:
                events.append(FlashSwapEvent.from_decoded(
                    self.chain_client.decode_log(raw_log, self.flash_abi)
                ))
            except ValueError as e:
                self.logger.warning(f"Skipping Flash log in tx {tx_event.hash}: {e}")
        return events

    async def handle_transaction(self, tx_event: TransactionEvent) -> List[Finding]:
        """
        Check a transaction for new pools and large flash swaps.

        Raises:
            InitializationError: If called before initialize()
            ChainClientError: If the registry cannot be brought up to date
        """
        self._require_initialized()

        await self.backfill.ensure_fresh(tx_event.block_number)

        findings = self._register_created_pools(tx_event)
        events = self._decode_flash_events(tx_event)
        if events:
            findings.extend(await self.evaluator.evaluate(
                events, self.state.registry, self.state.token_mapping, self.threshold
            ))
        return findings
