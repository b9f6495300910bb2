"""
Tests for the command-line interface.
"""

from unittest.mock import AsyncMock, patch

import pytest

from ..agents import (
    AddressWatchAgent,
    AdminEventsAgent,
    LargeFlashSwapAgent,
    LiquidityChangeAgent,
)
from ..agents.flash_swap import LARGE_FLASH_SWAP_ALERT_ID, NEW_POOL_ALERT_ID
from ..chain.abi import find_event, load_abi
from ..chain.base import BlockEvent
from ..chain.errors import NetworkError
from ..cli import AGENT_NAMES, build_agents, parse_args, run
from ..sinks import MemoryAlertSink
from .fakes import (
    USDC,
    WETH,
    FakeChainClient,
    address,
    encode_log,
    flash_log,
    pool_created_log,
    sqrt_price,
    tx_event,
)

UNI = "0x1f9840a85d5af5bf1d1762f925bdaddc4201f984"


class BlockSource(FakeChainClient):
    """Fake client that also serves whole blocks."""

    def __init__(self, block_number, blocks):
        super().__init__(block_number)
        self.blocks = blocks

    async def get_block_events(self, block_number):
        return BlockEvent(block_number), self.blocks[block_number]


class TestParseArgs:
    def test_defaults(self):
        args = parse_args([])

        assert args.chain == "ethereum"
        assert args.agents == AGENT_NAMES
        assert args.start_block is None
        assert args.blocks is None
        assert args.from_deployment is False
        assert args.pools_from_block is None
        assert args.sink == "log"

    def test_options(self):
        args = parse_args([
            "--chain", "base",
            "--agents", "large-flash-swap", "admin-events",
            "--start-block", "100",
            "--blocks", "5",
            "--pools-from-block", "90",
            "--sink", "nats",
        ])

        assert args.chain == "base"
        assert args.agents == ["large-flash-swap", "admin-events"]
        assert (args.start_block, args.blocks, args.pools_from_block) == (100, 5, 90)
        assert args.sink == "nats"

    def test_pool_history_options_are_exclusive(self):
        with pytest.raises(SystemExit):
            parse_args(["--from-deployment", "--pools-from-block", "1"])

    def test_blocks_must_be_positive(self):
        with pytest.raises(SystemExit):
            parse_args(["--blocks", "0"])


class TestBuildAgents:
    def test_all_agents(self, chain_client, config):
        agents = build_agents(chain_client, config, "ethereum", AGENT_NAMES)

        assert [type(agent) for agent in agents] == [
            LargeFlashSwapAgent,
            AdminEventsAgent,
            AddressWatchAgent,
            LiquidityChangeAgent,
        ]

    def test_unknown_agent(self, chain_client, config):
        with pytest.raises(ValueError):
            build_agents(chain_client, config, "ethereum", ["front-runner"])


class TestRun:
    @pytest.mark.asyncio
    async def test_processes_requested_blocks(self, config):
        pool = address(0xA1)
        blocks = {
            101: [tx_event([
                pool_created_log(pool, USDC, WETH, fee=500, tick_spacing=10, block_number=101),
                flash_log(pool, amount0=2 * 10**12, block_number=101),
            ])],
        }
        chain_client = BlockSource(101, blocks)
        chain_client.sqrt_prices[pool] = sqrt_price(1)
        sink = MemoryAlertSink()
        args = parse_args(["--agents", "large-flash-swap", "--start-block", "101", "--blocks", "1"])

        with patch("uniswap_monitor.cli.get_config", return_value=config), \
                patch("uniswap_monitor.cli.Web3ChainClient", return_value=chain_client), \
                patch("uniswap_monitor.cli.build_sinks", AsyncMock(return_value=[sink])):
            assert await run(args) is True

        assert sink.alert_ids == [NEW_POOL_ALERT_ID, LARGE_FLASH_SWAP_ALERT_ID]

    @pytest.mark.asyncio
    async def test_failed_block_is_retried_without_duplicate_findings(self, config):
        pool = address(0xA1)
        minter = address(0x02)
        minter_changed = encode_log(
            find_event(load_abi("Uni"), "MinterChanged"),
            {"minter": minter, "newMinter": minter},
            UNI,
            block_number=101,
        )
        blocks = {
            101: [
                tx_event([
                    pool_created_log(pool, USDC, WETH, fee=500, tick_spacing=10, block_number=101),
                    flash_log(pool, amount0=2 * 10**12, block_number=101),
                ], tx_hash="0x" + "01" * 32),
                tx_event([minter_changed], tx_hash="0x" + "02" * 32),
            ],
        }
        chain_client = BlockSource(101, blocks)
        chain_client.sqrt_prices[pool] = sqrt_price(1)

        failures = [NetworkError("connection reset")]

        def read_minter(args, block):
            if block == 101 and failures:
                raise failures.pop()
            return minter

        chain_client.set_result(UNI, "minter", read_minter)
        sink = MemoryAlertSink()
        args = parse_args([
            "--agents", "large-flash-swap", "address-watch",
            "--start-block", "101",
            "--blocks", "1",
        ])

        with patch("uniswap_monitor.cli.get_config", return_value=config), \
                patch("uniswap_monitor.cli.Web3ChainClient", return_value=chain_client), \
                patch("uniswap_monitor.cli.build_sinks", AsyncMock(return_value=[sink])), \
                patch("uniswap_monitor.cli.asyncio.sleep", AsyncMock()):
            assert await run(args) is True

        assert failures == []
        assert sink.alert_ids == [NEW_POOL_ALERT_ID, LARGE_FLASH_SWAP_ALERT_ID]
