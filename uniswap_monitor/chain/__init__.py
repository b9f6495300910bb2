"""
Read-only chain access.

ChainClient is the abstract capability the monitor depends on; Web3ChainClient
implements it on top of web3.py.
"""

from .abi import (
    decode_log,
    event_names,
    event_topic,
    find_event,
    find_function,
    load_abi,
)
from .base import BlockEvent, ChainClient, DecodedLog, RawLog, TransactionEvent
from .errors import (
    CallReverted,
    ChainClientError,
    ErrorHandler,
    InitializationError,
    MonitorError,
    NetworkError,
    RateLimitError,
)
from .web3_client import Web3ChainClient

__all__ = [
    "BlockEvent",
    "CallReverted",
    "ChainClient",
    "ChainClientError",
    "DecodedLog",
    "ErrorHandler",
    "InitializationError",
    "MonitorError",
    "NetworkError",
    "RateLimitError",
    "RawLog",
    "TransactionEvent",
    "Web3ChainClient",
    "decode_log",
    "event_names",
    "event_topic",
    "find_event",
    "find_function",
    "load_abi",
]
