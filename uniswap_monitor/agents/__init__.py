"""
Monitoring agents and the runner that drives them.
"""

from .address_watch import AddressWatchAgent
from .admin_events import AdminEventsAgent
from .backfill import BackfillCoordinator
from .base import BaseAgent, Finding, FindingSeverity, FindingType
from .flash_swap import FlashSwapEvaluator, FlashSwapEvent, LargeFlashSwapAgent
from .liquidity_change import LiquidityChangeAgent
from .runner import AgentRunner

__all__ = [
    "AddressWatchAgent",
    "AdminEventsAgent",
    "AgentRunner",
    "BackfillCoordinator",
    "BaseAgent",
    "Finding",
    "FindingSeverity",
    "FindingType",
    "FlashSwapEvaluator",
    "FlashSwapEvent",
    "LargeFlashSwapAgent",
    "LiquidityChangeAgent",
]
