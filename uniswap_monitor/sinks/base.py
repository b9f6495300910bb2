"""
Alert sinks.

A sink receives every finding produced by the agents. Emission is
fire-and-forget: agents never wait for acknowledgement.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List
import json
import logging


class AlertSink(ABC):
    """Destination for findings."""

    def __init__(self):
        self.logger = logging.getLogger(f"{self.__class__.__module__}.{self.__class__.__name__}")

    @abstractmethod
    async def emit(self, finding) -> None:
        """Deliver a finding."""
        pass

    async def aclose(self):
        """Release any connection held by the sink."""
        pass


class LoggingAlertSink(AlertSink):
    """Writes findings to the log as JSON."""

    def __init__(self, level: int = logging.INFO):
        super().__init__()
        self.level = level

    async def emit(self, finding) -> None:
        self.logger.log(self.level, f"Finding {finding.alert_id}: {json.dumps(finding.to_dict())}")


class MemoryAlertSink(AlertSink):
    """Collects findings in a list."""

    def __init__(self):
        super().__init__()
        self.findings: List[Any] = []

    async def emit(self, finding) -> None:
        self.findings.append(finding)

    @property
    def alert_ids(self) -> List[str]:
        return [finding.alert_id for finding in self.findings]

    def as_dicts(self) -> List[Dict[str, Any]]:
        return [finding.to_dict() for finding in self.findings]

    def clear(self):
        self.findings.clear()
