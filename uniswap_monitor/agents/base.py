"""
Base classes for monitoring agents.

An agent inspects one transaction or block at a time and returns findings.
Agents are initialised once at startup before any handler is called.
"""

from abc import ABC
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional
import logging

from ..chain.base import BlockEvent, ChainClient, TransactionEvent
from ..chain.errors import InitializationError
from ..config import ConfigManager, get_config


class FindingSeverity(str, Enum):
    UNKNOWN = "Unknown"
    INFO = "Info"
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class FindingType(str, Enum):
    UNKNOWN = "Unknown"
    EXPLOIT = "Exploit"
    SUSPICIOUS = "Suspicious"
    DEGRADED = "Degraded"
    INFO = "Info"


@dataclass(frozen=True)
class Finding:
    """
    Alert produced by an agent.

    Attributes:
        name: Short human readable title
        description: One sentence describing what was detected
        alert_id: Stable identifier of the alert category
        severity: How urgent the finding is
        finding_type: What kind of condition was detected
        protocol: Protocol the finding belongs to
        everest_id: Everest registry id of the protocol
        metadata: Named values, all rendered as strings
    """

    name: str
    description: str
    alert_id: str
    severity: FindingSeverity
    finding_type: FindingType
    protocol: str
    everest_id: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        # frozen, so bypass __setattr__
        object.__setattr__(
            self, "metadata", {key: render_value(value) for key, value in self.metadata.items()}
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialise for alert sinks."""
        return {
            "name": self.name,
            "description": self.description,
            "alertId": self.alert_id,
            "severity": self.severity.value,
            "type": self.finding_type.value,
            "protocol": self.protocol,
            "everestId": self.everest_id,
            "metadata": dict(self.metadata),
        }


def render_value(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    if isinstance(value, (list, tuple)):
        return ",".join(render_value(item) for item in value)
    return str(value)


class BaseAgent(ABC):
    """
    Abstract base class for agents.

    Subclasses override initialize() to load what they need from the chain
    and handle_transaction() and/or handle_block() to produce findings.
    """

    name = "agent"

    def __init__(self, chain_client: ChainClient, config: Optional[ConfigManager] = None):
        """
        Initialize the agent.

        Args:
            chain_client: Chain client used for logs and view calls
            config: Configuration manager, the global one by default
        """
        self.chain_client = chain_client
        self.config = config or get_config()
        self.logger = logging.getLogger(f"{self.__class__.__module__}.{self.__class__.__name__}")
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self):
        """Prepare the agent before the first event."""
        self._initialized = True

    def _require_initialized(self):
        if not self._initialized:
            raise InitializationError(f"{self.name} agent used before initialize()")

    async def handle_transaction(self, tx_event: TransactionEvent) -> List[Finding]:
        """Inspect a transaction. Agents without transaction checks return nothing."""
        return []

    async def handle_block(self, block_event: BlockEvent) -> List[Finding]:
        """Inspect a block. Agents without block checks return nothing."""
        return []
