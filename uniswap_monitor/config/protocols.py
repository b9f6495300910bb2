"""
Protocol-specific configuration for uniswap_monitor.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict

from .base import BaseConfig, ConfigError


class PrivilegedRole(str, Enum):
    """View function that returns the privileged address of a contract."""

    MINTER = "minter"
    OWNER = "owner"
    ADMIN = "admin"
    NONE = "none"


@dataclass
class ProtocolConfig(BaseConfig):
    """Configuration for the monitored Uniswap contracts."""

    @property
    def uniswap_v3_config(self) -> Dict[str, Dict]:
        """Uniswap V3 configuration by chain."""
        return {
            "ethereum": {
                "factory_address": "0x1F98431c8aD98523631AE4a59f267346ea31F984",
                "deployment_block": 12369621,
            },
            "base": {
                "factory_address": "0x33128a8fC17869897dcE68Ed026d694621f6FDfD",
                "deployment_block": 1371680,
            },
            "arbitrum": {
                "factory_address": "0x1F98431c8aD98523631AE4a59f267346ea31F984",
                "deployment_block": 165,
            },
        }

    @property
    def contracts(self) -> Dict[str, Dict]:
        """Monitored contracts on Ethereum keyed by logical name."""
        return {
            "UniswapV3Factory": {
                "address": "0x1F98431c8aD98523631AE4a59f267346ea31F984",
                "abi_file": "UniswapV3Factory.json",
                "role": PrivilegedRole.OWNER,
            },
            "UNI": {
                "address": "0x1f9840a85d5aF5bf1D1762F925BDADdC4201F984",
                "abi_file": "Uni.json",
                "role": PrivilegedRole.MINTER,
            },
            "GovernorBravo": {
                "address": "0x408ED6354d4973f66138C91495F2f2FCbd8724C3",
                "abi_file": "GovernorBravo.json",
                "role": PrivilegedRole.ADMIN,
            },
            "Timelock": {
                "address": "0x1a9C8182C09F50C8318d769245beA52c32BE35BC",
                "abi_file": "Timelock.json",
                "role": PrivilegedRole.ADMIN,
            },
            "UsdcEthPool": {
                "address": "0x88e6A0c2dDD26FEEb64F039a2c41296FcB3f5640",
                "abi_file": "UniswapV3Pool.json",
                "role": PrivilegedRole.NONE,
            },
        }

    def get_protocol_config(self, chain: str) -> Dict:
        """Get Uniswap V3 configuration for a specific chain."""
        if chain not in self.uniswap_v3_config:
            raise ValueError(f"Unsupported chain for uniswap_v3: {chain}")
        return self.uniswap_v3_config[chain]

    def get_factory_address(self, chain: str) -> str:
        """Get the Uniswap V3 factory address on a specific chain."""
        return self.get_protocol_config(chain)["factory_address"]

    def get_deployment_block(self, chain: str) -> int:
        """Get the Uniswap V3 deployment block on a specific chain."""
        return self.get_protocol_config(chain).get("deployment_block", 0)

    def get_contract(self, name: str) -> Dict:
        """Get address, ABI file and privileged role of a monitored contract."""
        if name not in self.contracts:
            raise ConfigError(f"No contract configured for '{name}'")
        contract = self.contracts[name]
        for key in ("address", "abi_file"):
            if not contract.get(key):
                raise ConfigError(f"No {key} configured for '{name}'")
        return contract
