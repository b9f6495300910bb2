"""
Base configuration for uniswap_monitor.

Settings are dataclass fields whose defaults come from the environment (a
.env file in the working directory is loaded first). Subclasses validate
their values in _validate_config and raise ConfigError on bad input, so a
misconfigured monitor fails at startup rather than on its first alert.
"""

import os
import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from dotenv import load_dotenv
from eth_utils import is_hex_address

load_dotenv()

logger = logging.getLogger(__name__)

VALID_ENVIRONMENTS = ["local", "dev", "staging", "production", "test"]

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class ConfigError(Exception):
    """Exception raised for configuration-related errors."""
    pass


@dataclass
class BaseConfig:
    """Environment selection, logging and typed environment lookups."""

    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "local")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    def __post_init__(self):
        self._validate_config()
        self._setup_logging()

    def _setup_logging(self):
        """Configure the root logger once; later calls are no-ops."""
        logging.basicConfig(level=getattr(logging, self.LOG_LEVEL.upper()), format=LOG_FORMAT)

    def _validate_config(self):
        if self.ENVIRONMENT not in VALID_ENVIRONMENTS:
            raise ConfigError(f"Invalid environment: {self.ENVIRONMENT}")
        if not isinstance(logging.getLevelName(self.LOG_LEVEL.upper()), int):
            raise ConfigError(f"Invalid log level: {self.LOG_LEVEL}")

    @staticmethod
    def get_env(key: str, default: Optional[str] = None, required: bool = False) -> Optional[str]:
        """
        Get environment variable with validation.

        Args:
            key: Environment variable name
            default: Default value if not found
            required: Whether the variable is required

        Returns:
            Environment variable value

        Raises:
            ConfigError: If required variable is missing
        """
        value = os.getenv(key, default)
        if required and value is None:
            raise ConfigError(f"Required environment variable '{key}' is not set")
        return value

    @staticmethod
    def get_env_int(key: str, default: Optional[int] = None, required: bool = False) -> int:
        """Get environment variable as integer."""
        value = BaseConfig.get_env(key, str(default) if default is not None else None, required)
        try:
            return int(value)
        except (ValueError, TypeError):
            raise ConfigError(f"Environment variable '{key}' must be an integer, got: {value}")

    @staticmethod
    def get_env_float(key: str, default: Optional[float] = None, required: bool = False) -> float:
        """Get environment variable as float (only used for timings)."""
        value = BaseConfig.get_env(key, str(default) if default is not None else None, required)
        try:
            return float(value)
        except (ValueError, TypeError):
            raise ConfigError(f"Environment variable '{key}' must be a float, got: {value}")

    @staticmethod
    def get_env_bool(key: str, default: bool = False) -> bool:
        """Get environment variable as boolean."""
        value = BaseConfig.get_env(key, str(default))
        return value.lower() in ("true", "1", "yes", "on")

    @staticmethod
    def parse_decimal(key: str, value: Any) -> Decimal:
        """
        Parse a threshold setting exactly.

        Raises:
            ConfigError: If the value is not a finite number
        """
        try:
            result = Decimal(str(value))
        except (InvalidOperation, TypeError, ValueError):
            raise ConfigError(f"Setting '{key}' must be a number, got: {value}")
        if not result.is_finite():
            raise ConfigError(f"Setting '{key}' must be finite, got: {value}")
        return result

    @staticmethod
    def parse_address(key: str, value: Any) -> str:
        """
        Parse a contract or token address setting into lowercase hex.

        Raises:
            ConfigError: If the value is not a 20 byte hex address
        """
        if not isinstance(value, str) or not is_hex_address(value):
            raise ConfigError(f"Setting '{key}' must be a hex address, got: {value}")
        return value.lower()
