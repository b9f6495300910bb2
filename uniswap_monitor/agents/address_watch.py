"""
Privileged address watch.

Keeps the current minter, owner or admin of each monitored contract and
alerts when one of them takes part in a transaction. The addresses are read
again whenever a transaction emits an admin change event.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..chain.abi import event_names, event_topic, find_event, find_function, load_abi
from ..chain.base import ChainClient, TransactionEvent
from ..chain.errors import CallReverted
from ..config import ConfigManager, PrivilegedRole
from .base import BaseAgent, Finding, FindingSeverity, FindingType

ADDRESS_WATCH_ALERT_ID = "AE-UNISWAP-ADDRESS-WATCH-INFO"


@dataclass
class RoleContract:
    """A contract whose privileged address is read through a role getter."""
    name: str
    address: str
    role: PrivilegedRole
    getter_abi: Dict[str, Any]
    change_topics: List[str]


def create_address_watch_finding(address: str, tx_hash: str, everest_id: Optional[str] = None) -> Finding:
    return Finding(
        name="Uniswap Address Watch Notification",
        description="Key protocol address involved in a transaction",
        alert_id=ADDRESS_WATCH_ALERT_ID,
        severity=FindingSeverity.INFO,
        finding_type=FindingType.INFO,
        protocol="Uniswap",
        everest_id=everest_id,
        metadata={
            "address": address,
            "tx": tx_hash,
        },
    )


class AddressWatchAgent(BaseAgent):
    """Alerts when a privileged protocol address is involved in a transaction."""

    name = "address-watch"

    def __init__(self, chain_client: ChainClient, config: Optional[ConfigManager] = None):
        super().__init__(chain_client, config)
        self.contracts: List[RoleContract] = []
        self.addresses: List[str] = []

    def _load_contracts(self) -> List[RoleContract]:
        change_events = set(self.config.agents.ADMIN_CHANGE_EVENTS)
        contracts = []
        for name, contract_config in self.config.protocols.contracts.items():
            role = PrivilegedRole(contract_config.get("role", PrivilegedRole.NONE))
            if role is PrivilegedRole.NONE:
                continue
            abi = load_abi(contract_config["abi_file"])
            contracts.append(RoleContract(
                name=name,
                address=contract_config["address"].lower(),
                role=role,
                getter_abi=find_function(abi, role.value),
                change_topics=[
                    event_topic(find_event(abi, event_name))
                    for event_name in event_names(abi)
                    if event_name in change_events
                ],
            ))
        return contracts

    async def _read_role(self, contract: RoleContract, block_identifier: Any) -> Optional[str]:
        try:
            address = await self.chain_client.call(
                contract.address, contract.getter_abi, block_identifier=block_identifier
            )
        except CallReverted as e:
            self.logger.warning(f"Could not read {contract.role.value} of {contract.name}: {e}")
            return None
        return address.lower() if address else None

    async def refresh_addresses(self, block_identifier: Any = "latest") -> List[str]:
        """
        Read the privileged address of every role contract.

        Args:
            block_identifier: Block whose state is read

        Returns:
            Distinct privileged addresses in contract order
        """
        results = await asyncio.gather(*(
            self._read_role(contract, block_identifier) for contract in self.contracts
        ))
        addresses = []
        for address in results:
            if address and address not in addresses:
                addresses.append(address)
        self.addresses = addresses
        self.logger.info(f"Watching {len(addresses)} privileged addresses")
        return addresses

    async def initialize(self):
        """Load role contracts and read their current privileged addresses."""
        self.contracts = self._load_contracts()
        await self.refresh_addresses()
        await super().initialize()

    def _has_admin_change(self, tx_event: TransactionEvent) -> bool:
        return any(
            tx_event.filter_logs(topic, contract.address)
            for contract in self.contracts
            for topic in contract.change_topics
        )

    async def handle_transaction(self, tx_event: TransactionEvent) -> List[Finding]:
        """Alert for each privileged address the transaction touches."""
        self._require_initialized()

        if self._has_admin_change(tx_event):
            self.logger.info(f"Admin change in tx {tx_event.hash}, re-reading privileged addresses")
            await self.refresh_addresses(tx_event.block_number)

        return [
            create_address_watch_finding(address, tx_event.hash, self.config.agents.EVEREST_ID)
            for address in self.addresses
            if address in tx_event.addresses
        ]
