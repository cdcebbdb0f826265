"""Destination-chain light client contract access."""

from .abi import (
    LIGHT_CLIENT_ABI,
    SKIP_SIGNATURE,
    STEP_SIGNATURE,
    encode_update_call,
    function_selector,
)
from .client import BridgeContractClient
from .interface import BridgeContract

__all__ = [
    "LIGHT_CLIENT_ABI",
    "SKIP_SIGNATURE",
    "STEP_SIGNATURE",
    "BridgeContract",
    "BridgeContractClient",
    "encode_update_call",
    "function_selector",
]
