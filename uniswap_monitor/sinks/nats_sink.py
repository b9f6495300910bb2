"""
NATS publisher for findings.

Each finding is published as JSON on ``<FINDINGS_SUBJECT>.<alert id>`` so
consumers can subscribe to one alert category or to all of them with a
wildcard.
"""

import json
from typing import Any, Dict, Optional

import nats
from nats.aio.client import Client as NATS
from nats.errors import Error as NatsError

from ..config import NatsConfig
from .base import AlertSink


def dumps(msg: Any) -> str:
    """Serialize message to JSON string"""
    return json.dumps(msg)


class NatsAlertSink(AlertSink):
    """
    Publishes findings to NATS.

    Methods starting with 'a' execute asynchronously.
    """

    def __init__(self, nats_config: Optional[NatsConfig] = None, environment: Optional[str] = None):
        """
        Initialize the sink.

        Args:
            nats_config: NATS settings, read from the environment by default
            environment: Environment whose NATS URL is used (local, dev, production)
        """
        super().__init__()
        self.config = nats_config or NatsConfig()
        self.url = self.config.get_nats_url(environment)
        self.nc: Optional[NATS] = None
        self.published = 0

    @property
    def connect_params(self) -> Dict[str, Any]:
        params = dict(self.config.connection_params)
        params["servers"] = [self.url]
        return params

    async def aconnect(self):
        """Asynchronously connect to NATS server"""
        self.logger.info(f"Connecting to NATS at {self.url}")
        self.nc = await nats.connect(**self.connect_params)
        self.logger.info(f"Connected to NATS at {self.url}")

    async def aclose(self):
        """Drain and close the connection"""
        if self.nc:
            await self.nc.drain()
            self.nc = None
            self.logger.info(f"NATS connection closed after {self.published} findings")

    async def apublish(self, subject: str, msg: Any):
        """Asynchronously publish a message to a subject"""
        if not self.nc:
            raise ConnectionError("Not connected to NATS server")
        await self.nc.publish(subject, dumps(msg).encode())

    async def emit(self, finding) -> None:
        """Publish a finding on its alert subject."""
        subject = self.config.get_finding_subject(finding.alert_id)
        try:
            await self.apublish(subject, finding.to_dict())
        except NatsError as e:
            self.logger.error(f"Failed to publish {finding.alert_id} to {subject}: {e}")
            return
        self.published += 1
        self.logger.debug(f"Published {finding.alert_id} to {subject}")
