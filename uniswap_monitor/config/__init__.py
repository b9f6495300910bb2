"""
Configuration management for uniswap_monitor.

Use get_config() to access all configuration settings.

Example:
    from uniswap_monitor.config import get_config

    config = get_config()

    # Access chain settings
    ethereum_rpc = config.chains.get_rpc_url("ethereum")
    usdc = config.chains.get_reference_token("ethereum")

    # Access protocol settings
    factory = config.protocols.get_factory_address("ethereum")

    # Access agent thresholds
    threshold = config.agents.flash_swap_threshold
"""

from .base import BaseConfig, ConfigError
from .chains import ChainConfig
from .protocols import PrivilegedRole, ProtocolConfig
from .agents import AgentConfig
from .manager import ConfigManager, get_config, reload_config
from .nats_config import NatsConfig

__all__ = [
    "BaseConfig",
    "ConfigError",
    "ChainConfig",
    "ProtocolConfig",
    "PrivilegedRole",
    "AgentConfig",
    "NatsConfig",
    "ConfigManager",
    "get_config",
    "reload_config",
]
