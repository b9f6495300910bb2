"""
Administrative event monitoring.

Alerts whenever a monitored contract emits one of its configured admin
events (ownership changes, new admins, fee changes and so on). Finding type
and severity come from the admin events table in AgentConfig.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..chain.abi import event_topic, find_event, load_abi
from ..chain.base import ChainClient, DecodedLog, TransactionEvent
from ..chain.errors import InitializationError
from ..config import ConfigError, ConfigManager
from .base import BaseAgent, Finding, FindingSeverity, FindingType, render_value


@dataclass
class WatchedEvent:
    """An admin event of one contract with its alert classification."""
    name: str
    abi: Dict[str, Any]
    finding_type: FindingType
    severity: FindingSeverity


@dataclass
class WatchedContract:
    name: str
    address: str
    events: Dict[str, WatchedEvent]


def extract_event_args(args: Dict[str, Any]) -> Dict[str, str]:
    """Event arguments rendered as strings."""
    return {key: render_value(value) for key, value in args.items()}


def create_admin_event_finding(
    decoded: DecodedLog,
    contract: WatchedContract,
    event: WatchedEvent,
    protocol_name: str,
    protocol_abbreviation: str,
    everest_id: Optional[str] = None,
) -> Finding:
    return Finding(
        name=f"{protocol_name} Admin Event",
        description=f"The {event.name} event was emitted by the {contract.name} contract",
        alert_id=f"AE-{protocol_abbreviation}-ADMIN-EVENT",
        severity=event.severity,
        finding_type=event.finding_type,
        protocol=protocol_name,
        everest_id=everest_id,
        metadata={
            "contractName": contract.name,
            "contractAddress": contract.address,
            "eventName": event.name,
            "eventArgs": json.dumps(extract_event_args(decoded.args), sort_keys=True),
        },
    )


class AdminEventsAgent(BaseAgent):
    """Alerts on administrative events emitted by monitored contracts."""

    name = "admin-events"

    def __init__(self, chain_client: ChainClient, config: Optional[ConfigManager] = None):
        super().__init__(chain_client, config)
        self.contracts: List[WatchedContract] = []
        self._topics: Dict[str, Dict[str, WatchedEvent]] = {}

    def _load_contract(self, name: str, events: Dict[str, Dict[str, str]]) -> WatchedContract:
        try:
            contract_config = self.config.protocols.get_contract(name)
        except ConfigError as e:
            raise InitializationError(str(e))
        abi = load_abi(contract_config["abi_file"])

        watched = {}
        for event_name, classification in events.items():
            try:
                watched[event_name] = WatchedEvent(
                    name=event_name,
                    abi=find_event(abi, event_name),
                    finding_type=FindingType(classification["type"]),
                    severity=FindingSeverity(classification["severity"]),
                )
            except (KeyError, ValueError) as e:
                raise InitializationError(f"Invalid admin event {name}.{event_name}: {e}")

        return WatchedContract(name=name, address=contract_config["address"].lower(), events=watched)

    async def initialize(self):
        """Load the ABI entry of every configured admin event."""
        self.contracts = [
            self._load_contract(name, events)
            for name, events in self.config.agents.admin_events.items()
        ]
        self._topics = {
            contract.address: {event_topic(event.abi): event for event in contract.events.values()}
            for contract in self.contracts
        }
        await super().initialize()
        self.logger.info(
            f"Watching {sum(len(c.events) for c in self.contracts)} admin events "
            f"on {len(self.contracts)} contracts"
        )

    async def handle_transaction(self, tx_event: TransactionEvent) -> List[Finding]:
        """Alert on each configured admin event in the transaction's logs."""
        self._require_initialized()
        agent_config = self.config.agents

        findings = []
        for contract in self.contracts:
            topics = self._topics[contract.address]
            for raw_log in tx_event.logs:
                if raw_log.address != contract.address or not raw_log.topics:
                    continue
                event = topics.get(raw_log.topics[0])
                if event is None:
                    continue
                try:
                    decoded = self.chain_client.decode_log(raw_log, event.abi)
                except ValueError as e:
                    self.logger.warning(f"Skipping {event.name} log in tx {tx_event.hash}: {e}")
                    continue
                findings.append(create_admin_event_finding(
                    decoded,
                    contract,
                    event,
                    agent_config.PROTOCOL_NAME,
                    agent_config.PROTOCOL_ABBREVIATION,
                    agent_config.EVEREST_ID,
                ))
        return findings
