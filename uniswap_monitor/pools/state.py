"""
Pool state shared by the flash swap monitor.

Holds the pool registry, the derived token mapping and the backfill cursor
for one process. The flash swap agent owns it and is its only writer.
"""

from dataclasses import dataclass
from typing import Optional

from .graph import ConversionGraphBuilder
from .registry import PoolRegistry
from .types import ConversionPath, TokenMapping


@dataclass
class BackfillCursor:
    """
    Progress of the pool creation scan.

    Attributes:
        last_scanned_block: Highest block known to be scanned for PoolCreated
        fresh: Whether the registry is caught up to the last observed block
    """

    last_scanned_block: int = 0
    fresh: bool = False


class PoolState:
    """Registry, token mapping and backfill cursor for one reference token."""

    def __init__(self, reference_token: str, registry: Optional[PoolRegistry] = None):
        self.registry = registry if registry is not None else PoolRegistry()
        self.graph = ConversionGraphBuilder(reference_token)
        self.cursor = BackfillCursor()

    @property
    def reference_token(self) -> str:
        return self.graph.reference_token

    @property
    def token_mapping(self) -> TokenMapping:
        return self.graph.mapping

    def rebuild_mapping(self) -> TokenMapping:
        """Recompute the token mapping from the registry."""
        return self.graph.rebuild(self.registry)

    def path_for(self, token: str) -> Optional[ConversionPath]:
        return self.graph.path_for(token)
