"""
ABI loading, event log decoding and call data encoding.

ABIs are stored as JSON files under ``uniswap_monitor/abi`` in the
``{"abi": [...]}`` layout produced by hardhat and foundry.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError
from eth_utils import keccak
from hexbytes import HexBytes

from .base import DecodedLog, RawLog
from .errors import InitializationError

logger = logging.getLogger(__name__)

ABI_DIR = Path(__file__).resolve().parent.parent / "abi"

_DYNAMIC_TYPES = ("string", "bytes")


def load_abi(abi_file: str) -> List[Dict[str, Any]]:
    """
    Load a contract ABI from the package ABI directory.

    Args:
        abi_file: File name, with or without the .json suffix

    Returns:
        List of ABI entries

    Raises:
        InitializationError: If the file is missing or malformed
    """
    if not abi_file.endswith(".json"):
        abi_file = f"{abi_file}.json"
    try:
        with open(ABI_DIR / abi_file, "r") as f:
            contents = json.load(f)
        return contents["abi"] if isinstance(contents, dict) else contents
    except (FileNotFoundError, KeyError, json.JSONDecodeError) as e:
        raise InitializationError(f"Failed to load ABI {abi_file}: {e}")


def _find_entry(abi: List[Dict[str, Any]], name: str, entry_type: str) -> Optional[Dict[str, Any]]:
    for entry in abi:
        if entry.get("type") == entry_type and entry.get("name") == name:
            return entry
    return None


def find_event(abi: List[Dict[str, Any]], name: str) -> Dict[str, Any]:
    """Get the ABI entry of an event by name."""
    entry = _find_entry(abi, name, "event")
    if entry is None:
        raise ValueError(f"Event {name} not found in ABI")
    return entry


def find_function(abi: List[Dict[str, Any]], name: str) -> Dict[str, Any]:
    """Get the ABI entry of a function by name."""
    entry = _find_entry(abi, name, "function")
    if entry is None:
        raise ValueError(f"Function {name} not found in ABI")
    return entry


def event_names(abi: List[Dict[str, Any]]) -> List[str]:
    """Names of all events declared in an ABI."""
    return [entry["name"] for entry in abi if entry.get("type") == "event"]


def _canonical_type(param: Dict[str, Any]) -> str:
    param_type = param["type"]
    if param_type.startswith("tuple"):
        inner = ",".join(_canonical_type(c) for c in param.get("components", []))
        return f"({inner}){param_type[len('tuple'):]}"
    return param_type


def signature(entry: Dict[str, Any]) -> str:
    """Canonical signature of an event or function, e.g. ``Flash(address,...)``."""
    types = ",".join(_canonical_type(p) for p in entry.get("inputs", []))
    return f"{entry['name']}({types})"


def event_topic(event: Union[str, Dict[str, Any]]) -> str:
    """Topic hash for an event ABI entry or signature string."""
    text = event if isinstance(event, str) else signature(event)
    return "0x" + keccak(text=text).hex()


def function_selector(function_abi: Dict[str, Any]) -> bytes:
    """Four byte selector of a function."""
    return keccak(text=signature(function_abi))[:4]


def _normalise(param_type: str, value: Any) -> Any:
    if param_type == "address" and isinstance(value, str):
        return value.lower()
    if param_type == "address[]":
        return [item.lower() for item in value]
    return value


def decode_log(raw_log: RawLog, event_abi: Dict[str, Any]) -> DecodedLog:
    """
    Decode a raw log against an event ABI entry.

    Indexed dynamic values (strings, bytes) are stored on chain as hashes and
    are returned as the raw topic.

    Raises:
        ValueError: If the log does not belong to the event or cannot be decoded
    """
    if not raw_log.topics or raw_log.topics[0] != event_topic(event_abi):
        raise ValueError(f"Log is not a {event_abi['name']} event")

    inputs = event_abi.get("inputs", [])
    indexed = [p for p in inputs if p.get("indexed")]
    non_indexed = [p for p in inputs if not p.get("indexed")]

    if len(raw_log.topics) - 1 != len(indexed):
        raise ValueError(
            f"{event_abi['name']} expects {len(indexed)} indexed topics, "
            f"got {len(raw_log.topics) - 1}"
        )

    values = {}
    try:
        for param, topic in zip(indexed, raw_log.topics[1:]):
            if param["type"] in _DYNAMIC_TYPES or param["type"].endswith("]"):
                values[param["name"]] = topic
            else:
                values[param["name"]] = decode([param["type"]], HexBytes(topic))[0]

        if non_indexed:
            decoded = decode(
                [_canonical_type(p) for p in non_indexed], HexBytes(raw_log.data)
            )
            for param, value in zip(non_indexed, decoded):
                values[param["name"]] = value
    except DecodingError as e:
        raise ValueError(f"Failed to decode {event_abi['name']} log: {e}")

    args = {p["name"]: _normalise(p["type"], values[p["name"]]) for p in inputs}
    return DecodedLog(
        name=event_abi["name"],
        address=raw_log.address,
        args=args,
        block_number=raw_log.block_number,
    )


def encode_call(function_abi: Dict[str, Any], args: Sequence[Any] = ()) -> str:
    """Call data for a function invocation."""
    types = [_canonical_type(p) for p in function_abi.get("inputs", [])]
    if len(types) != len(args):
        raise ValueError(
            f"{function_abi['name']} expects {len(types)} arguments, got {len(args)}"
        )
    return "0x" + (function_selector(function_abi) + encode(types, list(args))).hex()


def decode_output(function_abi: Dict[str, Any], output: bytes) -> Any:
    """
    Decode the return data of a call.

    Returns:
        The single value, or a tuple when the function has several outputs
    """
    outputs = function_abi.get("outputs", [])
    types = [_canonical_type(p) for p in outputs]
    try:
        values = decode(types, HexBytes(output))
    except DecodingError as e:
        raise ValueError(f"Failed to decode {function_abi['name']} output: {e}")
    values = tuple(_normalise(p["type"], v) for p, v in zip(outputs, values))
    return values[0] if len(values) == 1 else values
