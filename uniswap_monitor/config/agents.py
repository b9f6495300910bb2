"""
Agent thresholds and alert settings for uniswap_monitor.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List

from .base import BaseConfig, ConfigError


@dataclass
class AgentConfig(BaseConfig):
    """Configuration shared by the monitoring agents."""

    # Alert labelling
    EVEREST_ID: str = BaseConfig.get_env(
        "EVEREST_ID", "0xa2e07f422b5d7cbbfca764e53b251484ecf945fa"
    )
    PROTOCOL_NAME: str = BaseConfig.get_env("PROTOCOL_NAME", "Uniswap")
    PROTOCOL_ABBREVIATION: str = BaseConfig.get_env("PROTOCOL_ABBREVIATION", "UNISWAP")

    # Reference-token base units (USDC has 6 decimals, default is 1M USDC)
    FLASH_SWAP_THRESHOLD_USDC: str = BaseConfig.get_env(
        "FLASH_SWAP_THRESHOLD_USDC", "1000000000000"
    )

    # Percent change in a pool token balance between two blocks
    LIQUIDITY_THRESHOLD_PERCENT_CHANGE: str = BaseConfig.get_env(
        "LIQUIDITY_THRESHOLD_PERCENT_CHANGE", "10"
    )
    LIQUIDITY_POOL: str = BaseConfig.get_env("LIQUIDITY_POOL", "UsdcEthPool")

    # Events that mean a privileged address may have changed
    ADMIN_CHANGE_EVENTS: List[str] = field(
        default_factory=lambda: [
            "MinterChanged",
            "NewAdmin",
            "OwnerChanged",
            "OwnershipTransferred",
            "AdminChanged",
        ]
    )

    def _validate_config(self):
        super()._validate_config()
        if self.flash_swap_threshold < 0:
            raise ConfigError("FLASH_SWAP_THRESHOLD_USDC must not be negative")
        if self.liquidity_threshold_percent_change <= 0:
            raise ConfigError("LIQUIDITY_THRESHOLD_PERCENT_CHANGE must be positive")

    @property
    def flash_swap_threshold(self) -> Decimal:
        """Flash swap threshold in reference-token base units."""
        return self.parse_decimal("FLASH_SWAP_THRESHOLD_USDC", self.FLASH_SWAP_THRESHOLD_USDC)

    @property
    def liquidity_threshold_percent_change(self) -> Decimal:
        """Balance change in percent that triggers a liquidity alert."""
        return self.parse_decimal(
            "LIQUIDITY_THRESHOLD_PERCENT_CHANGE", self.LIQUIDITY_THRESHOLD_PERCENT_CHANGE
        )

    @property
    def admin_events(self) -> Dict[str, Dict[str, Dict[str, str]]]:
        """Admin events to alert on, by contract name and event name."""
        return {
            "UniswapV3Factory": {
                "OwnerChanged": {"type": "Suspicious", "severity": "High"},
                "FeeAmountEnabled": {"type": "Info", "severity": "Info"},
            },
            "UNI": {
                "MinterChanged": {"type": "Suspicious", "severity": "High"},
            },
            "GovernorBravo": {
                "NewAdmin": {"type": "Suspicious", "severity": "High"},
                "NewPendingAdmin": {"type": "Info", "severity": "Medium"},
                "NewImplementation": {"type": "Suspicious", "severity": "High"},
            },
            "Timelock": {
                "NewAdmin": {"type": "Suspicious", "severity": "High"},
                "NewPendingAdmin": {"type": "Info", "severity": "Medium"},
                "NewDelay": {"type": "Info", "severity": "Low"},
            },
        }
