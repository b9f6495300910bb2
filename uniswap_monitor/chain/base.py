"""
Base classes for read-only chain access.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Set
import logging

from eth_utils import to_hex

logger = logging.getLogger(__name__)


def _as_hex(value: Any) -> str:
    """Normalise bytes or hex strings to a lowercase 0x-prefixed string."""
    if isinstance(value, (bytes, bytearray)):
        return to_hex(value)
    value = str(value).lower()
    return value if value.startswith("0x") else f"0x{value}"


@dataclass
class RawLog:
    """An undecoded event log."""
    address: str
    topics: List[str]
    data: str = "0x"
    block_number: Optional[int] = None
    transaction_hash: Optional[str] = None
    log_index: Optional[int] = None

    def __post_init__(self):
        self.address = self.address.lower()
        self.topics = [_as_hex(topic) for topic in self.topics]
        self.data = _as_hex(self.data)
        if self.transaction_hash is not None:
            self.transaction_hash = _as_hex(self.transaction_hash)

    @classmethod
    def from_web3(cls, log: Dict[str, Any]) -> "RawLog":
        """Build from a web3.py log receipt entry."""
        return cls(
            address=log["address"],
            topics=list(log["topics"]),
            data=log["data"],
            block_number=log.get("blockNumber"),
            transaction_hash=log.get("transactionHash"),
            log_index=log.get("logIndex"),
        )


@dataclass
class DecodedLog:
    """An event log decoded against its ABI."""
    name: str
    address: str
    args: Dict[str, Any] = field(default_factory=dict)
    block_number: Optional[int] = None


@dataclass
class TransactionEvent:
    """A mined transaction with its logs and every address it touched."""
    hash: str
    block_number: int
    logs: List[RawLog] = field(default_factory=list)
    addresses: Set[str] = field(default_factory=set)

    def __post_init__(self):
        self.addresses = {address.lower() for address in self.addresses}

    def filter_logs(self, topic: str, address: Optional[str] = None) -> List[RawLog]:
        """Logs carrying an event topic, optionally emitted by one contract."""
        address = address.lower() if address else None
        return [
            log for log in self.logs
            if log.topics and log.topics[0] == topic
            and (address is None or log.address == address)
        ]


@dataclass
class BlockEvent:
    """A newly mined block."""
    block_number: int
    block_hash: Optional[str] = None


class ChainClient(ABC):
    """
    Abstract read-only access to an EVM chain.

    Implementations fetch logs, decode them against event ABIs and perform
    view calls. Failures to reach the chain raise ChainClientError; a
    reverting view call raises CallReverted.
    """

    def __init__(self):
        self.logger = logging.getLogger(f"{self.__class__.__module__}.{self.__class__.__name__}")

    @abstractmethod
    async def get_logs(
        self,
        address: str,
        topic: str,
        from_block: int,
        to_block: int,
    ) -> List[RawLog]:
        """
        Fetch logs emitted by a contract for one event topic.

        Args:
            address: Contract address
            topic: Event topic (keccak of the event signature)
            from_block: First block, inclusive
            to_block: Last block, inclusive

        Returns:
            Logs in chain order
        """
        pass

    @abstractmethod
    def decode_log(self, raw_log: RawLog, event_abi: Dict[str, Any]) -> DecodedLog:
        """Decode a raw log against an event ABI entry."""
        pass

    @abstractmethod
    async def call(
        self,
        address: str,
        function_abi: Dict[str, Any],
        args: Sequence[Any] = (),
        block_identifier: Any = "latest",
    ) -> Any:
        """
        Call a view function.

        Returns:
            The single output value, or a tuple when the function has several outputs
        """
        pass

    @abstractmethod
    async def get_block_number(self) -> int:
        """Get the latest block number."""
        pass
