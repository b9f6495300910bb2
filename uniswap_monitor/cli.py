#!/usr/bin/env python3
"""
Command-line interface for the Uniswap monitor.

Usage:
    uniswap-monitor --chain ethereum
    uniswap-monitor --chain ethereum --from-deployment --sink nats
    uniswap-monitor --start-block 17000000 --blocks 100
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional, Sequence

from .agents import (
    AddressWatchAgent,
    AdminEventsAgent,
    AgentRunner,
    BaseAgent,
    LargeFlashSwapAgent,
    LiquidityChangeAgent,
)
from .chain import ChainClientError, Web3ChainClient
from .config import ConfigManager, get_config
from .sinks import AlertSink, LoggingAlertSink, NatsAlertSink

logger = logging.getLogger(__name__)

AGENT_NAMES = ["large-flash-swap", "admin-events", "address-watch", "liquidity-change"]


def build_agents(
    chain_client: Web3ChainClient,
    config: ConfigManager,
    chain: str,
    names: Sequence[str],
) -> List[BaseAgent]:
    """Instantiate the selected agents."""
    agents = []
    for name in names:
        if name == "large-flash-swap":
            agents.append(LargeFlashSwapAgent(chain_client, config, chain=chain))
        elif name == "admin-events":
            agents.append(AdminEventsAgent(chain_client, config))
        elif name == "address-watch":
            agents.append(AddressWatchAgent(chain_client, config))
        elif name == "liquidity-change":
            agents.append(LiquidityChangeAgent(chain_client, config))
        else:
            raise ValueError(f"Unknown agent: {name}")
    return agents


async def build_sinks(args, config: ConfigManager) -> List[AlertSink]:
    if args.sink == "nats":
        sink = NatsAlertSink(config.nats)
        await sink.aconnect()
        return [sink]
    return [LoggingAlertSink()]


async def run(args) -> bool:
    """Poll blocks and run the agents until the requested number of blocks is processed."""
    config = get_config()
    rpc_url = args.rpc_url or config.chains.get_rpc_url(args.chain)

    chain_client = Web3ChainClient(
        rpc_url,
        max_retries=config.chains.MAX_RETRY_ATTEMPTS,
        retry_delay=config.chains.RETRY_DELAY_SECONDS,
    )
    agents = build_agents(chain_client, config, args.chain, args.agents)
    sinks = await build_sinks(args, config)
    runner = AgentRunner(agents, sinks)

    try:
        await runner.initialize()

        # Optionally load historical pools instead of starting from the head
        pools_from = args.pools_from_block
        if args.from_deployment:
            pools_from = config.protocols.get_deployment_block(args.chain)
        if pools_from is not None:
            for agent in agents:
                if isinstance(agent, LargeFlashSwapAgent):
                    await agent.backfill.initialize(pools_from - 1)

        next_block = args.start_block
        if next_block is None:
            next_block = await chain_client.get_block_number()
        logger.info(f"Monitoring {args.chain} from block {next_block} with {len(agents)} agents")

        processed = 0
        findings = 0
        while args.blocks is None or processed < args.blocks:
            head = await chain_client.get_block_number()
            if next_block > head:
                await asyncio.sleep(args.poll_interval or config.chains.POLL_INTERVAL_SECONDS)
                continue

            try:
                block_event, tx_events = await chain_client.get_block_events(next_block)
                findings += len(await runner.process_block(block_event, tx_events))
            except ChainClientError as e:
                # The runner resumes the block from the handlers that failed
                logger.error(f"Block {next_block} failed: {e}")
                await asyncio.sleep(config.chains.RETRY_DELAY_SECONDS)
                continue

            next_block += 1
            processed += 1

        logger.info(f"Processed {processed} blocks, {findings} findings")
        return True
    finally:
        for sink in sinks:
            await sink.aclose()


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Monitor Uniswap V3 and governance contracts for notable events",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Follow the chain head with all agents
  uniswap-monitor --chain ethereum

  # Load every pool since the factory deployment before monitoring
  uniswap-monitor --chain ethereum --from-deployment

  # Replay 100 blocks and publish findings to NATS
  uniswap-monitor --start-block 17000000 --blocks 100 --sink nats
        """,
    )

    parser.add_argument(
        "--chain",
        choices=["ethereum", "base", "arbitrum"],
        default="ethereum",
        help="Chain to monitor",
    )
    parser.add_argument("--rpc-url", help="Override the configured RPC URL")
    parser.add_argument(
        "--agents",
        nargs="+",
        choices=AGENT_NAMES,
        default=AGENT_NAMES,
        help="Agents to run (default: all)",
    )

    # Block range
    parser.add_argument("--start-block", type=int, help="First block to process (default: chain head)")
    parser.add_argument("--blocks", type=int, help="Number of blocks to process (default: run forever)")
    parser.add_argument("--poll-interval", type=float, help="Seconds between head polls")

    # Pool history
    pools = parser.add_mutually_exclusive_group()
    pools.add_argument(
        "--from-deployment",
        action="store_true",
        help="Load pools created since the factory deployment",
    )
    pools.add_argument("--pools-from-block", type=int, help="Load pools created since this block")

    parser.add_argument("--sink", choices=["log", "nats"], default="log", help="Where findings go")

    args = parser.parse_args(argv)
    if args.blocks is not None and args.blocks <= 0:
        parser.error("--blocks must be positive")
    return args


def main(argv: Optional[Sequence[str]] = None):
    """Main CLI function."""
    args = parse_args(argv)

    try:
        success = asyncio.run(run(args))
        sys.exit(0 if success else 1)
    except KeyboardInterrupt:
        logger.info("Monitor interrupted by user")
        sys.exit(130)
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
