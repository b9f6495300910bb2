"""
web3.py implementation of the chain client.

web3.py's HTTP provider is blocking, so every RPC call is run in the event
loop's default executor and several calls can be in flight at once.
"""

import asyncio
import functools
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from eth_utils import to_checksum_address
from web3 import Web3
from web3.exceptions import ContractLogicError

from .abi import decode_log, decode_output, encode_call
from .base import BlockEvent, ChainClient, DecodedLog, RawLog, TransactionEvent
from .errors import (
    CallReverted,
    ChainClientError,
    ErrorHandler,
    InitializationError,
    NetworkError,
    RateLimitError,
)


class Web3ChainClient(ChainClient):
    """
    Chain client backed by a web3.py HTTP provider.

    Transient failures (network, rate limit) are retried with exponential
    backoff; reverts are raised immediately as CallReverted.
    """

    def __init__(
        self,
        rpc_url: Optional[str] = None,
        web3: Optional[Web3] = None,
        max_retries: int = 3,
        retry_delay: float = 1.0,
    ):
        """
        Initialize the client.

        Args:
            rpc_url: HTTP RPC endpoint, ignored when web3 is given
            web3: Preconfigured Web3 instance
            max_retries: Attempts per RPC call
            retry_delay: Delay before the first retry in seconds
        """
        super().__init__()
        if web3 is None:
            if not rpc_url:
                raise InitializationError("Web3ChainClient needs an rpc_url or a Web3 instance")
            web3 = Web3(Web3.HTTPProvider(rpc_url))
        self.web3 = web3
        self.max_retries = max(1, max_retries)
        self.retry_delay = retry_delay
        self.error_handler = ErrorHandler(self.logger)

    async def _run(self, func: Callable, *args, **kwargs) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(func, *args, **kwargs))

    def _wrap_error(self, error: Exception, operation: str) -> ChainClientError:
        category = self.error_handler.classify_error(error)
        message = f"{operation} failed: {error}"
        if category == "contract":
            return CallReverted(message)
        if category == "rate_limit":
            return RateLimitError(message)
        if category == "network":
            return NetworkError(message)
        return ChainClientError(message)

    async def _retry_operation(self, operation: str, func: Callable, *args, **kwargs) -> Any:
        """Retry an RPC call with exponential backoff and error classification."""
        for attempt in range(self.max_retries):
            try:
                return await self._run(func, *args, **kwargs)
            except ContractLogicError as e:
                raise CallReverted(f"{operation} reverted: {e}")
            except ChainClientError:
                raise
            except Exception as e:
                self.error_handler.log_error(
                    e,
                    {
                        "attempt": attempt + 1,
                        "max_retries": self.max_retries,
                        "operation": operation,
                    },
                )

                if not self.error_handler.should_retry(e, attempt, self.max_retries):
                    raise self._wrap_error(e, operation)

                delay = self.error_handler.get_retry_delay(e, attempt, self.retry_delay)
                self.logger.info(
                    f"Retrying {operation} in {delay}s... "
                    f"(attempt {attempt + 1}/{self.max_retries})"
                )
                await asyncio.sleep(delay)

    async def get_logs(
        self,
        address: str,
        topic: str,
        from_block: int,
        to_block: int,
    ) -> List[RawLog]:
        """Fetch logs emitted by a contract for one event topic."""
        filter_params = {
            "address": to_checksum_address(address),
            "topics": [topic],
            "fromBlock": from_block,
            "toBlock": to_block,
        }
        logs = await self._retry_operation("eth_getLogs", self.web3.eth.get_logs, filter_params)
        return [RawLog.from_web3(log) for log in logs]

    def decode_log(self, raw_log: RawLog, event_abi: Dict[str, Any]) -> DecodedLog:
        """Decode a raw log against an event ABI entry."""
        return decode_log(raw_log, event_abi)

    async def call(
        self,
        address: str,
        function_abi: Dict[str, Any],
        args: Sequence[Any] = (),
        block_identifier: Any = "latest",
    ) -> Any:
        """Call a view function and decode its outputs."""
        transaction = {
            "to": to_checksum_address(address),
            "data": encode_call(function_abi, args),
        }
        operation = f"{function_abi['name']}() on {address}"
        output = await self._retry_operation(
            operation, self.web3.eth.call, transaction, block_identifier
        )

        # Calling an account without code returns empty data
        if function_abi.get("outputs") and not output:
            raise CallReverted(f"{operation} returned no data", address, function_abi["name"])
        try:
            return decode_output(function_abi, output)
        except ValueError as e:
            raise CallReverted(f"{operation}: {e}", address, function_abi["name"])

    async def get_block_number(self) -> int:
        """Get the latest block number."""
        return await self._retry_operation(
            "eth_blockNumber", lambda: self.web3.eth.block_number
        )

    async def get_block_events(self, block_number: int) -> Tuple[BlockEvent, List[TransactionEvent]]:
        """
        Get a block and its transactions with their receipt logs.

        Args:
            block_number: Block to load

        Returns:
            (block event, transaction events in block order)
        """
        block = await self._retry_operation(
            "eth_getBlockByNumber", self.web3.eth.get_block, block_number, True
        )
        receipts = await asyncio.gather(*(
            self._retry_operation(
                "eth_getTransactionReceipt", self.web3.eth.get_transaction_receipt, tx["hash"]
            )
            for tx in block["transactions"]
        ))

        block_event = BlockEvent(block_number=block_number, block_hash=block.get("hash"))
        if block_event.block_hash is not None:
            block_event.block_hash = Web3.to_hex(block_event.block_hash)

        tx_events = []
        for tx, receipt in zip(block["transactions"], receipts):
            logs = [RawLog.from_web3(log) for log in receipt["logs"]]
            addresses = {tx["from"]}
            for address in (tx.get("to"), receipt.get("contractAddress")):
                if address:
                    addresses.add(address)
            addresses.update(log.address for log in logs)
            tx_events.append(TransactionEvent(
                hash=Web3.to_hex(tx["hash"]),
                block_number=block_number,
                logs=logs,
                addresses=addresses,
            ))
        return block_event, tx_events
