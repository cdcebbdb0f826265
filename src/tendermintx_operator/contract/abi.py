"""
Interface of the TendermintX light client contract.

Only the members the operator touches are listed: the three views it reads
each cycle and the two update functions the proving network calls once a
proof is ready.
"""

from __future__ import annotations

from typing import Any

from Crypto.Hash import keccak
from eth_abi import encode

from tendermintx_operator.types import Bytes4, Uint64

STEP_SIGNATURE = "step(uint64)"
SKIP_SIGNATURE = "skip(uint64,uint64)"


def _view(name: str, inputs: list[str], output: str) -> dict[str, Any]:
    return {
        "type": "function",
        "name": name,
        "stateMutability": "view",
        "inputs": [{"name": "", "type": t} for t in inputs],
        "outputs": [{"name": "", "type": output}],
    }


def _update(name: str, inputs: list[str]) -> dict[str, Any]:
    return {
        "type": "function",
        "name": name,
        "stateMutability": "nonpayable",
        "inputs": [{"name": "", "type": t} for t in inputs],
        "outputs": [],
    }


LIGHT_CLIENT_ABI: list[dict[str, Any]] = [
    _view("latestBlock", [], "uint64"),
    _view("blockHeightToHeaderHash", ["uint64"], "bytes32"),
    _view("SKIP_MAX", [], "uint64"),
    _update("step", ["uint64"]),
    _update("skip", ["uint64", "uint64"]),
]


def function_selector(signature: str) -> Bytes4:
    """First four bytes of the keccak-256 of a canonical signature like `skip(uint64,uint64)`."""
    digest = keccak.new(digest_bits=256, data=signature.encode("ascii")).digest()
    return Bytes4(digest[:4])


def encode_update_call(signature: str, *heights: Uint64) -> bytes:
    """Selector followed by the ABI-encoded `uint64` arguments."""
    arg_types = signature[signature.index("(") + 1 : -1].split(",")
    return bytes(function_selector(signature)) + encode(arg_types, [int(h) for h in heights])
