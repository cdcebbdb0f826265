"""Reusable type definitions for the TendermintX operator."""

from .base import CamelModel, StrictBaseModel
from .byte_arrays import ZERO_HASH, BaseBytes, Bytes4, Bytes20, Bytes32
from .uint import BaseUint, Uint32, Uint64, Uint256

__all__ = [
    "BaseBytes",
    "BaseUint",
    "Bytes4",
    "Bytes20",
    "Bytes32",
    "CamelModel",
    "StrictBaseModel",
    "Uint32",
    "Uint64",
    "Uint256",
    "ZERO_HASH",
]
