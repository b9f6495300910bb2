"""
NATS configuration for publishing findings.
"""

from dataclasses import dataclass
from typing import Dict

from .base import BaseConfig, ConfigError


@dataclass
class NatsConfig(BaseConfig):
    """NATS messaging configuration."""

    # NATS Connection Settings
    NATS_ENABLED: bool = BaseConfig.get_env_bool("NATS_ENABLED", False)
    NATS_URL_LOCAL: str = BaseConfig.get_env("NATS_URL_LOCAL", "nats://localhost:4222")
    NATS_URL_DEV: str = BaseConfig.get_env("NATS_URL_DEV", "nats://nats:4222")
    NATS_URL_PRODUCTION: str = BaseConfig.get_env(
        "NATS_URL_PRODUCTION", "nats://nats-server:4222"
    )

    # Connection Parameters
    NATS_TIMEOUT: int = BaseConfig.get_env_int("NATS_TIMEOUT", 30)
    NATS_MAX_RECONNECT_ATTEMPTS: int = BaseConfig.get_env_int(
        "NATS_MAX_RECONNECT_ATTEMPTS", 60
    )
    NATS_RECONNECT_TIME_WAIT: int = BaseConfig.get_env_int(
        "NATS_RECONNECT_TIME_WAIT", 2
    )

    # Subject prefix, findings go to "<prefix>.<alert id>"
    FINDINGS_SUBJECT: str = BaseConfig.get_env("FINDINGS_SUBJECT", "uniswap.findings")

    def _validate_config(self):
        super()._validate_config()
        # Publishing subjects may not contain wildcards or whitespace
        if not self.FINDINGS_SUBJECT or any(c in self.FINDINGS_SUBJECT for c in "*> \t"):
            raise ConfigError(f"Invalid FINDINGS_SUBJECT: {self.FINDINGS_SUBJECT!r}")

    @property
    def nats_urls(self) -> Dict[str, str]:
        """Get NATS URLs for different environments."""
        return {
            "local": self.NATS_URL_LOCAL,
            "test": self.NATS_URL_LOCAL,
            "dev": self.NATS_URL_DEV,
            "staging": self.NATS_URL_DEV,
            "production": self.NATS_URL_PRODUCTION,
        }

    def get_nats_url(self, environment: str = None) -> str:
        """Get NATS URL for the current or specified environment."""
        env = environment or self.ENVIRONMENT
        return self.nats_urls.get(env, self.NATS_URL_LOCAL)

    def get_finding_subject(self, alert_id: str) -> str:
        """Get the subject a finding with the given alert id is published on."""
        return f"{self.FINDINGS_SUBJECT}.{alert_id.lower()}"

    @property
    def connection_params(self) -> Dict:
        """Get NATS connection parameters."""
        return {
            "servers": [self.get_nats_url()],
            "max_reconnect_attempts": self.NATS_MAX_RECONNECT_ATTEMPTS,
            "reconnect_time_wait": self.NATS_RECONNECT_TIME_WAIT,
            "allow_reconnect": True,
            "connect_timeout": self.NATS_TIMEOUT,
        }
