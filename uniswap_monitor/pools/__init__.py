"""
Pool registry and token conversion graph.
"""

from .graph import ConversionGraphBuilder, build_token_mapping
from .registry import DataError, PoolRegistry
from .state import BackfillCursor, PoolState
from .types import ConversionPath, Hop, Pool, TokenMapping, invert_path

__all__ = [
    "BackfillCursor",
    "ConversionGraphBuilder",
    "ConversionPath",
    "DataError",
    "Hop",
    "Pool",
    "PoolRegistry",
    "PoolState",
    "TokenMapping",
    "build_token_mapping",
    "invert_path",
]
