"""
Agent runner.

Fans each transaction and block out to every agent concurrently, flattens
their findings and forwards them to the alert sinks.
"""

import asyncio
import logging
from typing import Any, Iterable, List, Optional, Sequence, Set, Tuple

from ..chain.base import BlockEvent, TransactionEvent
from ..sinks.base import AlertSink
from .base import BaseAgent, Finding

logger = logging.getLogger(__name__)


class AgentRunner:
    """
    Runs a set of agents over transactions and blocks.

    A failing agent fails the whole invocation: the error is logged and
    re-raised so a failed scan is never reported as zero findings. A block
    whose processing failed is resumed where it stopped.
    """

    def __init__(self, agents: Sequence[BaseAgent], sinks: Optional[Iterable[AlertSink]] = None):
        self.agents = list(agents)
        self.sinks = list(sinks or [])
        # Progress of a block whose processing failed part way
        self._block_number: Optional[int] = None
        self._completed: Set[Tuple[int, int]] = set()
        self.logger = logging.getLogger(f"{self.__class__.__module__}.{self.__class__.__name__}")

    async def initialize(self):
        """Initialize every agent."""
        await self._gather("initialize", [agent.initialize() for agent in self.agents])
        self.logger.info(f"Initialized {len(self.agents)} agents: {', '.join(a.name for a in self.agents)}")

    async def _gather(self, operation: str, coroutines) -> list:
        results = await asyncio.gather(*coroutines, return_exceptions=True)
        errors = [
            (agent, result) for agent, result in zip(self.agents, results)
            if isinstance(result, BaseException)
        ]
        for agent, error in errors:
            self.logger.error(f"{agent.name} failed in {operation}: {error}", exc_info=error)
        if errors:
            raise errors[0][1]
        return results

    async def handle_transaction(self, tx_event: TransactionEvent) -> List[Finding]:
        """Findings of all agents for one transaction."""
        results = await self._gather(
            f"handle_transaction({tx_event.hash})",
            [agent.handle_transaction(tx_event) for agent in self.agents],
        )
        return [finding for findings in results for finding in findings]

    async def handle_block(self, block_event: BlockEvent) -> List[Finding]:
        """Findings of all agents for one block."""
        results = await self._gather(
            f"handle_block({block_event.block_number})",
            [agent.handle_block(block_event) for agent in self.agents],
        )
        return [finding for findings in results for finding in findings]

    async def emit(self, findings: Sequence[Finding]):
        """Send findings to every sink."""
        for finding in findings:
            for sink in self.sinks:
                await sink.emit(finding)

    async def _run_step(self, step: int, method: str, event: Any, label: Any) -> List[Finding]:
        """Run one handler of every agent that has not completed this step yet and emit its findings."""
        pending = [
            (index, agent) for index, agent in enumerate(self.agents)
            if (step, index) not in self._completed
        ]
        results = await asyncio.gather(
            *(getattr(agent, method)(event) for _, agent in pending),
            return_exceptions=True,
        )

        findings = []
        errors = []
        for (index, agent), result in zip(pending, results):
            if isinstance(result, BaseException):
                self.logger.error(f"{agent.name} failed in {method}({label}): {result}", exc_info=result)
                errors.append(result)
                continue
            self._completed.add((step, index))
            findings.extend(result)

        await self.emit(findings)
        if errors:
            raise errors[0]
        return findings

    async def process_block(
        self,
        block_event: BlockEvent,
        tx_events: Sequence[TransactionEvent],
    ) -> List[Finding]:
        """
        Run the block handlers, then each transaction in order, emitting findings.

        When a handler fails the error is raised after the findings of the
        handlers that succeeded have been emitted. Calling process_block
        again for the same block resumes it: handlers that already completed
        are not run again, so no finding is emitted twice.

        Args:
            block_event: The block
            tx_events: Its transactions in block order

        Returns:
            Findings emitted by this call
        """
        if self._block_number != block_event.block_number:
            self._block_number = block_event.block_number
            self._completed = set()

        all_findings = await self._run_step(0, "handle_block", block_event, block_event.block_number)
        for step, tx_event in enumerate(tx_events, start=1):
            all_findings.extend(await self._run_step(step, "handle_transaction", tx_event, tx_event.hash))

        self._block_number = None
        self._completed = set()
        self.logger.info(
            f"Block {block_event.block_number}: {len(tx_events)} transactions, "
            f"{len(all_findings)} findings"
        )
        return all_findings
