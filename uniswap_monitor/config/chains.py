"""
Chain-specific configuration for uniswap_monitor.

Each supported chain has an RPC endpoint and a reference token (its native
USDC). Every flash swap value is expressed in base units of that token.
"""

from dataclasses import dataclass
from typing import Dict, Optional

from .base import BaseConfig, ConfigError


@dataclass
class ChainConfig(BaseConfig):
    """RPC endpoints, reference tokens and log scanning limits per chain."""

    DEFAULT_CHAIN: str = BaseConfig.get_env("DEFAULT_CHAIN", "ethereum")

    ETHEREUM_RPC_URL: str = BaseConfig.get_env("ETHEREUM_RPC_URL", "http://localhost:8545")
    BASE_RPC_URL: str = BaseConfig.get_env("BASE_RPC_URL", "https://mainnet.base.org")
    ARBITRUM_RPC_URL: str = BaseConfig.get_env("ARBITRUM_RPC_URL", "https://arb1.arbitrum.io/rpc")

    # eth_getLogs providers cap a single query at 10,000 blocks
    BLOCKS_PER_REQUEST: int = BaseConfig.get_env_int("BLOCKS_PER_REQUEST", 10000)
    MAX_RETRY_ATTEMPTS: int = BaseConfig.get_env_int("MAX_RETRY_ATTEMPTS", 3)
    RETRY_DELAY_SECONDS: float = BaseConfig.get_env_float("RETRY_DELAY_SECONDS", 1.0)

    # Head polling interval of the CLI runner
    POLL_INTERVAL_SECONDS: float = BaseConfig.get_env_float("POLL_INTERVAL_SECONDS", 12.0)

    # Overrides the per-chain USDC address when set
    REFERENCE_TOKEN: Optional[str] = BaseConfig.get_env("REFERENCE_TOKEN")

    def _validate_config(self):
        super()._validate_config()
        if self.DEFAULT_CHAIN not in self.supported_chains:
            raise ConfigError(f"Unsupported DEFAULT_CHAIN: {self.DEFAULT_CHAIN}")
        if self.BLOCKS_PER_REQUEST <= 0:
            raise ConfigError("BLOCKS_PER_REQUEST must be positive")
        if self.MAX_RETRY_ATTEMPTS <= 0:
            raise ConfigError("MAX_RETRY_ATTEMPTS must be positive")
        if self.REFERENCE_TOKEN:
            self.parse_address("REFERENCE_TOKEN", self.REFERENCE_TOKEN)

    @property
    def supported_chains(self) -> Dict[str, Dict]:
        """Chain id, RPC URL and USDC address of every supported chain."""
        return {
            "ethereum": {
                "chain_id": 1,
                "rpc_url": self.ETHEREUM_RPC_URL,
                "reference_token": "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
            },
            "base": {
                "chain_id": 8453,
                "rpc_url": self.BASE_RPC_URL,
                "reference_token": "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913",
            },
            "arbitrum": {
                "chain_id": 42161,
                "rpc_url": self.ARBITRUM_RPC_URL,
                "reference_token": "0xaf88d065e77c8cC2239327C5EDb3A432268e5831",
            },
        }

    def get_chain_config(self, chain_name: str) -> Dict:
        """Get configuration for a specific chain."""
        if chain_name not in self.supported_chains:
            raise ValueError(f"Unsupported chain: {chain_name}")
        return self.supported_chains[chain_name]

    def get_rpc_url(self, chain_name: str) -> str:
        return self.get_chain_config(chain_name)["rpc_url"]

    def get_chain_id(self, chain_name: str) -> int:
        return self.get_chain_config(chain_name)["chain_id"]

    def get_reference_token(self, chain_name: str) -> str:
        """Get the stablecoin every conversion is expressed in, lowercased."""
        token = self.REFERENCE_TOKEN or self.get_chain_config(chain_name)["reference_token"]
        return self.parse_address("REFERENCE_TOKEN", token)
