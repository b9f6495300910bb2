"""
Liquidity pool balance monitoring.

Reads the token balances of a configured pool every block and alerts when
either balance moved by more than the configured percentage since the
previous block. Readings are kept in memory only.
"""

import asyncio
from decimal import Decimal, localcontext
from typing import Dict, List, Optional, Union

from ..chain.abi import find_function, load_abi
from ..chain.base import BlockEvent, ChainClient
from ..chain.errors import InitializationError
from ..config import ConfigError, ConfigManager
from ..pricing.v3_math import PRICE_CONTEXT
from .base import BaseAgent, Finding, FindingSeverity, FindingType

LIQUIDITY_CHANGE_ALERT_ID = "AE-UNISWAPV3-LIQUIDITY-CHANGE"


def percent_change(previous: int, current: int) -> Decimal:
    """Absolute change from previous to current in percent of previous."""
    if previous <= 0:
        raise ValueError("previous balance must be positive")
    with localcontext(PRICE_CONTEXT):
        return abs(Decimal(current) - Decimal(previous)) * 100 / Decimal(previous)


def create_liquidity_change_finding(
    pool_name: str,
    pool_address: str,
    token: str,
    previous: int,
    current: int,
    change: Decimal,
    threshold: Decimal,
    block_number: int,
    everest_id: Optional[str] = None,
) -> Finding:
    return Finding(
        name="Uniswap V3 Liquidity Pool Balance Change",
        description=f"{pool_name} balance of {token} changed by {change:.2f}% in block {block_number}",
        alert_id=LIQUIDITY_CHANGE_ALERT_ID,
        severity=FindingSeverity.MEDIUM,
        finding_type=FindingType.INFO,
        protocol="UniswapV3",
        everest_id=everest_id,
        metadata={
            "address": pool_address,
            "token": token,
            "previousBalance": previous,
            "currentBalance": current,
            "percentChange": change,
            "thresholdPercentChange": threshold,
            "blockNumber": block_number,
        },
    )


class LiquidityChangeAgent(BaseAgent):
    """Alerts on large block-to-block swings in a pool's token balances."""

    name = "liquidity-change"

    def __init__(
        self,
        chain_client: ChainClient,
        config: Optional[ConfigManager] = None,
        pool_name: Optional[str] = None,
        threshold_percent: Optional[Union[Decimal, int, str]] = None,
    ):
        """
        Initialize the agent.

        Args:
            chain_client: Chain client used for balance reads
            config: Configuration manager, the global one by default
            pool_name: Contract name of the pool, LIQUIDITY_POOL by default
            threshold_percent: Override of LIQUIDITY_THRESHOLD_PERCENT_CHANGE
        """
        super().__init__(chain_client, config)
        self.pool_name = pool_name or self.config.agents.LIQUIDITY_POOL
        self.threshold = (
            Decimal(threshold_percent)
            if threshold_percent is not None
            else self.config.agents.liquidity_threshold_percent_change
        )
        self.pool_address: Optional[str] = None
        self.tokens: List[str] = []
        self.previous_balances: Dict[str, int] = {}
        self.balance_of_abi = find_function(load_abi("ERC20"), "balanceOf")

    async def initialize(self):
        """Resolve the pool and its two tokens."""
        try:
            pool_config = self.config.protocols.get_contract(self.pool_name)
        except ConfigError as e:
            raise InitializationError(str(e))
        pool_abi = load_abi(pool_config["abi_file"])
        self.pool_address = pool_config["address"].lower()

        self.tokens = [
            (await self.chain_client.call(self.pool_address, find_function(pool_abi, getter))).lower()
            for getter in ("token0", "token1")
        ]
        self.previous_balances = {}
        await super().initialize()
        self.logger.info(
            f"Watching {self.pool_name} ({self.pool_address}) balances of "
            f"{', '.join(self.tokens)} for changes above {self.threshold}%"
        )

    async def _balance(self, token: str, block_number: int) -> int:
        return await self.chain_client.call(
            token, self.balance_of_abi, [self.pool_address], block_identifier=block_number
        )

    async def handle_block(self, block_event: BlockEvent) -> List[Finding]:
        """Compare the pool's balances with the previous block's."""
        self._require_initialized()

        # Readings are only stored once every balance of the block was read
        balances = await asyncio.gather(*(
            self._balance(token, block_event.block_number) for token in self.tokens
        ), return_exceptions=True)
        for result in balances:
            if isinstance(result, BaseException):
                raise result

        findings = []
        for token, current in zip(self.tokens, balances):
            previous = self.previous_balances.get(token)
            if not previous:
                continue

            change = percent_change(previous, current)
            if change > self.threshold:
                findings.append(create_liquidity_change_finding(
                    self.pool_name,
                    self.pool_address,
                    token,
                    previous,
                    current,
                    change,
                    self.threshold,
                    block_event.block_number,
                    self.config.agents.EVEREST_ID,
                ))

        self.previous_balances.update(zip(self.tokens, balances))
        return findings
