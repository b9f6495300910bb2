"""
Destinations for findings.
"""

from .base import AlertSink, LoggingAlertSink, MemoryAlertSink
from .nats_sink import NatsAlertSink

__all__ = [
    "AlertSink",
    "LoggingAlertSink",
    "MemoryAlertSink",
    "NatsAlertSink",
]
