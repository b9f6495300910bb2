"""
Configuration manager for uniswap_monitor.

Combines the chain, protocol, agent and NATS settings behind one object and
checks that they agree with each other: every contract an agent refers to
must be in the contract registry and every supported chain needs a factory.
"""

import logging
from typing import Any, Dict, Optional

from .agents import AgentConfig
from .base import BaseConfig, ConfigError
from .chains import ChainConfig
from .nats_config import NatsConfig
from .protocols import ProtocolConfig

logger = logging.getLogger(__name__)


class ConfigManager:
    """
    Single entry point to all monitor settings.

    Example:
        config = ConfigManager()
        monitor_config = config.get_monitor_config("ethereum")
        threshold = config.agents.flash_swap_threshold
    """

    def __init__(self, environment: Optional[str] = None):
        """
        Initialize the configuration manager.

        Args:
            environment: Override the environment (local, dev, staging, production, test)

        Raises:
            ConfigError: If any configuration class rejects its settings
        """
        try:
            self._base_config = BaseConfig()
            if environment:
                self._base_config.ENVIRONMENT = environment
            self._chain_config = ChainConfig()
            self._protocol_config = ProtocolConfig()
            self._agent_config = AgentConfig()
            self._nats_config = NatsConfig()
        except ConfigError as e:
            logger.error(f"Failed to initialize configuration: {e}")
            raise

        logger.debug(f"Configuration initialized for environment: {self.environment}")

    @property
    def environment(self) -> str:
        return self._base_config.ENVIRONMENT

    @property
    def base(self) -> BaseConfig:
        return self._base_config

    @property
    def chains(self) -> ChainConfig:
        return self._chain_config

    @property
    def protocols(self) -> ProtocolConfig:
        return self._protocol_config

    @property
    def agents(self) -> AgentConfig:
        return self._agent_config

    @property
    def nats(self) -> NatsConfig:
        return self._nats_config

    def get_monitor_config(self, chain: str) -> Dict[str, Any]:
        """
        Settings the flash swap monitor needs for one chain.

        Args:
            chain: Chain name (ethereum, base, arbitrum)

        Returns:
            Dict with chain, chain_id, rpc_url, reference_token, factory_address,
            deployment_block, blocks_per_request and flash_swap_threshold

        Raises:
            ValueError: If the chain is not supported
        """
        chain_config = self.chains.get_chain_config(chain)
        return {
            "chain": chain,
            "chain_id": chain_config["chain_id"],
            "rpc_url": chain_config["rpc_url"],
            "reference_token": self.chains.get_reference_token(chain),
            "factory_address": self.protocols.get_factory_address(chain),
            "deployment_block": self.protocols.get_deployment_block(chain),
            "blocks_per_request": self.chains.BLOCKS_PER_REQUEST,
            "flash_swap_threshold": self.agents.flash_swap_threshold,
        }

    def validate_configuration(self) -> bool:
        """
        Check that the configuration classes are consistent with each other.

        Returns:
            True if the configuration is usable

        Raises:
            ConfigError: Describing the first inconsistency found
        """
        try:
            for chain in self.chains.supported_chains:
                self.parse_factory(chain)

            for contract_name in self.agents.admin_events:
                self.protocols.get_contract(contract_name)
            self.protocols.get_contract(self.agents.LIQUIDITY_POOL)

            if self.nats.NATS_ENABLED and not self.nats.get_nats_url(self.environment):
                raise ConfigError("NATS enabled but no URL configured")
        except ConfigError as e:
            logger.error(f"Configuration validation failed: {e}")
            raise

        logger.info(f"Configuration valid for environment: {self.environment}")
        return True

    def parse_factory(self, chain: str) -> str:
        """Lowercase factory address of a chain, validated."""
        try:
            factory = self.protocols.get_factory_address(chain)
        except ValueError as e:
            raise ConfigError(str(e))
        return self.base.parse_address(f"{chain} factory_address", factory)

    def __repr__(self) -> str:
        return f"ConfigManager(environment={self.environment})"


_config_manager: Optional[ConfigManager] = None


def get_config(environment: Optional[str] = None, force_reload: bool = False) -> ConfigManager:
    """
    Get the global configuration manager, creating and validating it on first use.

    Args:
        environment: Override environment
        force_reload: Force reload of configuration

    Returns:
        ConfigManager instance
    """
    global _config_manager

    if _config_manager is None or force_reload:
        _config_manager = ConfigManager(environment=environment)
        _config_manager.validate_configuration()

    return _config_manager


def reload_config(environment: Optional[str] = None) -> ConfigManager:
    """Rebuild the global configuration manager from the current environment."""
    return get_config(environment=environment, force_reload=True)
